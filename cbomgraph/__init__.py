# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import importlib.metadata

try:
    __version__ = importlib.metadata.version("cbomgraph")
except importlib.metadata.PackageNotFoundError:
    __version__ = ""
