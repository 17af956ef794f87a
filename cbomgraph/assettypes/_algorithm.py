# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import ClassVar, Hashable, List, Mapping, Optional, Tuple

from cyclonedx.model.crypto import (
    CryptoAssetType,
    CryptoCertificationLevel,
    CryptoExecutionEnvironment,
    CryptoFunction,
    CryptoImplementationPlatform,
    CryptoPadding,
    CryptoPrimitive,
)
from dataclasses_json import dataclass_json


@dataclass_json
@dataclass(frozen=True)
class AlgorithmAsset:
    """A cryptographic algorithm, such as a signature scheme or a public-key algorithm.

    Equality through ``==`` compares every field, including ``bom_ref``. Use
    :meth:`is_equivalent` to compare two algorithms while ignoring their
    identifiers.
    """

    asset_type: ClassVar[CryptoAssetType] = CryptoAssetType.ALGORITHM

    bom_ref: str
    name: str
    primitive: CryptoPrimitive = CryptoPrimitive.UNKNOWN
    execution_environment: CryptoExecutionEnvironment = CryptoExecutionEnvironment.UNKNOWN
    implementation_platform: CryptoImplementationPlatform = CryptoImplementationPlatform.UNKNOWN
    certification_levels: List[CryptoCertificationLevel] = field(default_factory=list)
    crypto_functions: List[CryptoFunction] = field(default_factory=list)
    oid: Optional[str] = None
    padding: Optional[CryptoPadding] = None

    def equivalence_key(self) -> Tuple[Hashable, ...]:
        """Returns the descriptive fields that decide equivalence, as a hashable tuple."""
        return (
            self.name,
            self.primitive,
            self.execution_environment,
            self.implementation_platform,
            tuple(self.certification_levels),
            tuple(self.crypto_functions),
            self.oid,
            self.padding,
        )

    def is_equivalent(self, other: AlgorithmAsset) -> bool:
        """Checks whether two algorithms describe the same thing, ignoring their bom-refs.

        Raises:
            TypeError: If ``other`` is not an AlgorithmAsset.
        """
        if not isinstance(other, AlgorithmAsset):
            raise TypeError(
                f"algorithm equivalence is only defined between algorithms, got {type(other).__name__}"
            )
        return self.equivalence_key() == other.equivalence_key()

    def merge_key(self) -> Optional[Hashable]:
        return self.equivalence_key()

    def references(self) -> List[str]:
        return []

    def with_substitutions(self, substitutions: Mapping[str, str]) -> AlgorithmAsset:
        return replace(self, bom_ref=substitutions.get(self.bom_ref, self.bom_ref))
