# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import pathlib
from typing import Optional

import cbomgraph.plugin

_filetype_extensions = {
    ".pem": "CERTIFICATE",
    ".cer": "CERTIFICATE",
    ".cert": "CERTIFICATE",
    ".der": "CERTIFICATE",
    ".ca-bundle": "CERTIFICATE",
    ".crt": "CERTIFICATE",
    ".p7a": "PKCS7",
    ".p7b": "PKCS7",
    ".p7c": "PKCS7",
    ".p7r": "PKCS7",
    ".p7s": "PKCS7",
    ".spc": "PKCS7",
}


@cbomgraph.plugin.hookimpl
def identify_file_type(filepath: str) -> Optional[str]:
    suffix = pathlib.PurePosixPath(filepath).suffix.lower()
    return _filetype_extensions.get(suffix)
