# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import os
import pathlib
from typing import Callable, Iterator, Union

from loguru import logger

from cbomgraph.errors import RecoverableError
from cbomgraph.utils.paths import normalize_path, relative_posix


class PlainFilesystem:
    """A directory on disk to be scanned for cryptographic material.

    Files are visited in a deterministic order (directory entries sorted by
    name at every level), which the identifier generator relies on to produce
    identical output for identical input trees. Paths handed out are relative
    to the root and use '/' separators.
    """

    def __init__(self, root_path: Union[str, pathlib.Path]):
        self.root_path = pathlib.Path(root_path)

    @property
    def identifier(self) -> str:
        return f"Plain Filesystem ({self.root_path.as_posix()})"

    def iter_files(self) -> Iterator[str]:
        """Yields the relative path of every regular file below the root, in sorted order.

        Symlinks to files are yielded under their own path as long as their
        target lies inside the root. Symlinked directories are not descended into.
        """
        if self.root_path.is_file():
            yield normalize_path(self.root_path.name)
            return
        for cdir, dirs, files in os.walk(self.root_path):
            # os.walk honors in-place changes to dirs, which fixes the traversal order
            dirs.sort()
            logger.trace(f"Walking {cdir}")
            for file in sorted(files):
                full_path = pathlib.Path(cdir, file)
                if full_path.is_symlink() and not self._inside_root(full_path):
                    logger.debug(f"Skipping {full_path}, its target is outside of the scanned root")
                    continue
                if not full_path.is_file():
                    continue
                yield relative_posix(self.root_path, full_path)

    def _inside_root(self, path: pathlib.Path) -> bool:
        root = self.root_path.resolve()
        target = path.resolve()
        return target == root or root in target.parents

    def read_file(self, path: str) -> bytes:
        """Reads a file given its path relative to the root.

        Raises:
            OSError: If the file can't be read.
        """
        if self.root_path.is_file():
            return self.root_path.read_bytes()
        return pathlib.Path(self.root_path, path).read_bytes()

    def walk(self, fn: Callable[[str], None]) -> None:
        """Calls ``fn`` with every file path in traversal order.

        Recoverable errors raised by ``fn`` are logged as warnings and the walk
        continues with the next file; any other exception stops the walk.
        """
        for path in self.iter_files():
            try:
                fn(path)
            except RecoverableError as err:
                logger.warning(str(err))
