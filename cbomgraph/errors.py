# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
"""Exceptions raised while scanning for cryptographic assets.

Errors are split into two families. A :class:`RecoverableError` affects a
single file or certificate; the scan driver logs it as a warning and moves on.
A :class:`FatalError` aborts the whole scan and is reported by the CLI with a
non-zero exit status.
"""
from typing import Optional


class CbomGraphError(Exception):
    """Base exception for all cbomgraph operations."""


class RecoverableError(CbomGraphError):
    """An error that only affects the current file or certificate."""


class FatalError(CbomGraphError):
    """An error that aborts the scan."""


class UnknownAlgorithmError(RecoverableError):
    """Raised when a certificate references an algorithm identifier that can't be classified."""

    def __init__(self, oid: str, role: str, path: Optional[str] = None):
        self.oid = oid
        self.role = role
        self.path = path
        location = f" in {path}" if path else ""
        super().__init__(f"Unknown {role} algorithm OID {oid}{location}")


class ParsingFailedError(RecoverableError):
    """Raised when a file with a recognized extension can't be decoded."""

    def __init__(self, path: str, reason: str, plugin_name: Optional[str] = None):
        self.path = path
        self.reason = reason
        self.plugin_name = plugin_name
        source = f"{plugin_name}: " if plugin_name else ""
        super().__init__(f"{source}parsing of {path} failed although the file type was recognized ({reason})")


class MergeConflictError(FatalError):
    """Raised when merging a subgraph would create a cycle or a dangling edge."""


class DocumentAssemblyError(FatalError):
    """Raised when the output document can't be read, validated, or written."""
