# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import ClassVar, Hashable, Iterable, List, Mapping, Optional

from cyclonedx.model.crypto import CryptoAssetType
from dataclasses_json import dataclass_json


@dataclass_json
@dataclass(frozen=True)
class CertificateAsset:
    """An X.509 certificate found at one or more paths.

    Validity dates are ISO 8601 strings in UTC, the serial number is lowercase
    hex. ``common_name`` is the subject's CN attribute as decoded, never
    parsed back out of ``subject_name``. ``paths`` keeps the order in which
    the certificate was observed and never contains duplicates.
    """

    asset_type: ClassVar[CryptoAssetType] = CryptoAssetType.CERTIFICATE

    bom_ref: str
    subject_name: str
    common_name: Optional[str] = None
    issuer_name: Optional[str] = None
    not_valid_before: Optional[str] = None
    not_valid_after: Optional[str] = None
    serial_number: Optional[str] = None
    fingerprint_sha256: Optional[str] = None
    signature_algorithm_ref: Optional[str] = None
    subject_public_key_ref: Optional[str] = None
    certificate_format: str = "X.509"
    certificate_extension: Optional[str] = None
    paths: List[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.common_name or self.subject_name or self.bom_ref

    def merge_key(self) -> Optional[Hashable]:
        return self.fingerprint_sha256

    def references(self) -> List[str]:
        return [ref for ref in (self.signature_algorithm_ref, self.subject_public_key_ref) if ref]

    def with_paths(self, paths: Iterable[str]) -> CertificateAsset:
        """Returns a copy of the certificate with any new paths appended."""
        merged = list(self.paths)
        for path in paths:
            if path not in merged:
                merged.append(path)
        return replace(self, paths=merged)

    def with_substitutions(self, substitutions: Mapping[str, str]) -> CertificateAsset:
        def sub(ref: Optional[str]) -> Optional[str]:
            return substitutions.get(ref, ref) if ref else ref

        return replace(
            self,
            bom_ref=sub(self.bom_ref),
            signature_algorithm_ref=sub(self.signature_algorithm_ref),
            subject_public_key_ref=sub(self.subject_public_key_ref),
        )
