# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import pathlib
from typing import Union


def normalize_path(*path_parts: Union[str, pathlib.PurePath]) -> str:
    """
    Normalize one or more path parts into a single POSIX-style path string.

    Certificate paths end up in the output document as evidence locations, so
    they are always recorded with '/' separators, no matter which platform the
    scan ran on.

    Args:
        *path_parts: One or more path components, strings or PurePath objects.

    Returns:
        str: POSIX-style normalized path (e.g., 'etc/ssl/certs/ca.pem')
    """
    cleaned_parts = [str(p).replace("\\", "/") for p in path_parts]
    return pathlib.PurePosixPath(*cleaned_parts).as_posix()


def relative_posix(root: Union[str, pathlib.Path], path: Union[str, pathlib.Path]) -> str:
    """Return ``path`` relative to ``root`` as a normalized POSIX-style string."""
    return normalize_path(pathlib.Path(path).relative_to(pathlib.Path(root)))
