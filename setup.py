# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT

from setuptools import find_packages, setup

setup(
    name="cbomgraph",
    version="0.1.0",
    description="Builds a CycloneDX cryptography bill of materials from the certificates found in a filesystem",
    license="MIT",
    python_requires=">=3.8",
    packages=find_packages(include=["cbomgraph", "cbomgraph.*"]),
    install_requires=[
        "click>=8.0.0",
        "cryptography>=43",  # Certificate.public_key_algorithm_oid, not_valid_*_utc
        "cyclonedx-python-lib[json-validation]>=8",  # crypto enums and the 1.6 JSON schema
        "dataclasses_json",
        "loguru",
        "networkx>=2.6",
        "pluggy",
        "tomlkit",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["cbomgraph=cbomgraph.__main__:main"],
    },
)
