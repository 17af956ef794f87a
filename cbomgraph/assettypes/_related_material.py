# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import ClassVar, Hashable, List, Mapping, Optional

from cyclonedx.model.crypto import CryptoAssetType, RelatedCryptoMaterialType
from dataclasses_json import dataclass_json


@dataclass_json
@dataclass(frozen=True)
class RelatedMaterialAsset:
    """Key material (e.g. a certificate's subject public key) used with an algorithm."""

    asset_type: ClassVar[CryptoAssetType] = CryptoAssetType.RELATED_CRYPTO_MATERIAL

    bom_ref: str
    name: str
    material_type: RelatedCryptoMaterialType = RelatedCryptoMaterialType.PUBLIC_KEY
    algorithm_ref: Optional[str] = None
    size: Optional[int] = None
    format: Optional[str] = None
    fingerprint_sha256: Optional[str] = None

    def merge_key(self) -> Optional[Hashable]:
        if self.fingerprint_sha256 is None:
            return None
        return (self.material_type, self.fingerprint_sha256)

    def references(self) -> List[str]:
        return [self.algorithm_ref] if self.algorithm_ref else []

    def with_substitutions(self, substitutions: Mapping[str, str]) -> RelatedMaterialAsset:
        algorithm_ref = self.algorithm_ref
        if algorithm_ref:
            algorithm_ref = substitutions.get(algorithm_ref, algorithm_ref)
        return replace(
            self,
            bom_ref=substitutions.get(self.bom_ref, self.bom_ref),
            algorithm_ref=algorithm_ref,
        )
