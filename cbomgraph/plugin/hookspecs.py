# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT

from typing import List, Optional

from cyclonedx.model.bom import Bom
from pluggy import HookspecMarker

from cbomgraph.subgraph import DecodedCertificate

hookspec = HookspecMarker("cbomgraph")


@hookspec(firstresult=True)
def identify_file_type(filepath: str) -> Optional[str]:
    """Determine the type of file located at filepath, and return a string identifying the type
    that will be passed to certificate extraction plugins. Return `None` to indicate that the
    file is not of a type that can hold cryptographic material.

    Args:
        filepath (str): The path to the file to determine the type of.

    Returns:
        Optional[str]: A string identifying the type of file (e.g. "CERTIFICATE" or "PKCS7"), or None.
    """


@hookspec
def extract_certificates(
    filename: str, filetype: str, data: bytes
) -> Optional[List[DecodedCertificate]]:
    """Decode the certificates held in a file.

    Plugins should return `None` for file types they don't handle. A plugin that
    handles the file type but fails to decode its contents should raise
    `cbomgraph.errors.ParsingFailedError`, which is reported as a warning and
    doesn't stop the scan.

    Args:
        filename (str): The path of the file, relative to the root of the scanned filesystem.
        filetype (str): The file type returned by `identify_file_type`.
        data (bytes): The raw contents of the file.

    Returns:
        Optional[List[DecodedCertificate]]: The certificates found in the file, in file order.
    """


@hookspec
def write_cbom(bom: Bom, outfile) -> None:
    """Writes the CBOM to the given output file.

    Args:
        bom (Bom): The assembled CycloneDX BOM.
        outfile: The output file handle to write the document to.
    """


@hookspec
# type: ignore[empty-body]
def read_cbom(infile) -> Bom:
    """Reads an existing BOM that the scan results will be merged into.

    Plugins should raise `cbomgraph.errors.DocumentAssemblyError` for documents
    they can't load.

    Args:
        infile: The input file handle to read the document from.
    """


@hookspec
def short_name() -> Optional[str]:
    """A short name to register the hook as.

    Returns:
        Optional[str]: The name to register the hook with.
    """
