# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import json
from typing import Optional

from cyclonedx.exception import CycloneDxException
from cyclonedx.model.bom import Bom

import cbomgraph.plugin
from cbomgraph.errors import DocumentAssemblyError


@cbomgraph.plugin.hookimpl
def read_cbom(infile) -> Bom:
    """Reads an existing CycloneDX JSON document to merge new scan results into.

    A document without a serial number comes back with ``serial_number`` set
    to None and one without a timestamp keeps none, so the caller decides what
    to fill in.

    Args:
        infile: The input file handle to read the CycloneDX document from.

    Raises:
        DocumentAssemblyError: If the file isn't a well-formed CycloneDX JSON document.
    """
    try:
        data = json.loads(infile.read())
    except json.JSONDecodeError as err:
        raise DocumentAssemblyError(f"input CBOM is not valid JSON: {err}") from err

    if not isinstance(data, dict) or data.get("bomFormat") != "CycloneDX":
        raise DocumentAssemblyError("input CBOM is not a CycloneDX document")
    for key in ("components", "dependencies"):
        if not isinstance(data.get(key, []), list):
            raise DocumentAssemblyError(f'"{key}" in input CBOM must be a list')

    try:
        bom = Bom.from_json(data=data)  # type: ignore[attr-defined]
    except (CycloneDxException, AttributeError, KeyError, TypeError, ValueError) as err:
        raise DocumentAssemblyError(f"input CBOM is malformed: {err}") from err

    # the library fills these in with a random serial and the current time
    if "serialNumber" not in data:
        bom.serial_number = None
    if "timestamp" not in (data.get("metadata") or {}):
        bom.metadata.timestamp = None
    return bom


@cbomgraph.plugin.hookimpl
def short_name() -> Optional[str]:
    return "cyclonedx"
