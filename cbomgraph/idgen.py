# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import random
import uuid
from typing import Iterable, Set

DEFAULT_SEED = 1


class IdentifierGenerator:
    """Produces reproducible bom-ref identifiers.

    Each generator owns its own ``random.Random`` instance, so two generators
    constructed with the same seed hand out the same sequence of identifiers.
    Identifiers are never handed out twice by one generator, even if the
    identified node is later dropped during a merge.

    Attributes:
        seed (int): The seed the generator was constructed with.
    """

    def __init__(self, seed: int = DEFAULT_SEED):
        self.seed = seed
        self._rng = random.Random(seed)
        self._issued: Set[str] = set()

    def next_id(self) -> str:
        """Returns the next identifier in creation order, formatted as a version 4 UUID."""
        while True:
            candidate = str(uuid.UUID(int=self._rng.getrandbits(128), version=4))
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate

    @property
    def issued_count(self) -> int:
        return len(self._issued)

    def reserve(self, identifiers: Iterable[str]) -> None:
        """Marks identifiers that are already in use elsewhere so they're never handed out."""
        self._issued.update(identifiers)
