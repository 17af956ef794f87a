# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import pathlib
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from cbomgraph.algorithms import classify_public_key_algorithm, classify_signature_algorithm
from cbomgraph.assettypes import AssetGraph, CertificateAsset, RelatedMaterialAsset
from cbomgraph.errors import UnknownAlgorithmError
from cbomgraph.idgen import IdentifierGenerator
from cbomgraph.utils.paths import normalize_path


# pylint: disable-next=too-many-instance-attributes
@dataclass
class DecodedCertificate:
    """The fields of an X.509 certificate that the subgraph builder needs.

    Attributes:
        subject (str): RFC 4514 string of the subject name.
        issuer (str): RFC 4514 string of the issuer name.
        serial_number (int): The certificate serial number.
        fingerprint_sha256 (str): Hex SHA-256 digest of the DER encoded certificate.
        common_name (Optional[str]): Value of the subject's first CN attribute, if any.
        signature_algorithm_oid (Optional[str]): Dotted OID of the signature algorithm.
        public_key_algorithm_oid (Optional[str]): Dotted OID of the subject public key algorithm.
        public_key_size (Optional[int]): Key size in bits, for algorithms that have one.
        public_key_curve (Optional[str]): Curve name, for elliptic curve keys.
        public_key_fingerprint (Optional[str]): Hex SHA-256 digest of the DER encoded SubjectPublicKeyInfo.
        not_valid_before (Optional[datetime]): Start of the validity period (UTC).
        not_valid_after (Optional[datetime]): End of the validity period (UTC).
    """

    subject: str
    issuer: str
    serial_number: int
    fingerprint_sha256: str
    common_name: Optional[str] = None
    signature_algorithm_oid: Optional[str] = None
    public_key_algorithm_oid: Optional[str] = None
    public_key_size: Optional[int] = None
    public_key_curve: Optional[str] = None
    public_key_fingerprint: Optional[str] = None
    not_valid_before: Optional[datetime] = None
    not_valid_after: Optional[datetime] = None


@dataclass
class SubgraphResult:
    """The subgraph built for one certificate, plus any recoverable issues found on the way.

    A result with issues is still usable; it just lacks the dependencies that
    couldn't be resolved.
    """

    graph: AssetGraph
    certificate: CertificateAsset
    issues: List[UnknownAlgorithmError] = field(default_factory=list)

    @property
    def path(self) -> str:
        return self.certificate.paths[0] if self.certificate.paths else ""


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class SubgraphBuilder:
    """Turns decoded certificates into small dependency graphs.

    Every node gets its bom-ref from the shared identifier generator at the
    moment it is created, so the builder must be driven in a deterministic
    order for the output to be reproducible.
    """

    def __init__(self, idgen: IdentifierGenerator, include_public_keys: bool = False):
        self.idgen = idgen
        self.include_public_keys = include_public_keys

    def build(self, cert: DecodedCertificate, path: str) -> SubgraphResult:
        graph = AssetGraph()
        issues: List[UnknownAlgorithmError] = []
        path = normalize_path(path)

        cert_ref = self.idgen.next_id()

        signature_asset = None
        signature = classify_signature_algorithm(cert.signature_algorithm_oid)
        if signature is None:
            issues.append(
                UnknownAlgorithmError(cert.signature_algorithm_oid or "unknown", "signature", path)
            )
        else:
            signature_asset = signature.to_asset(self.idgen.next_id(), cert.signature_algorithm_oid)

        public_key_algorithm_ref = None
        public_key_algorithm = classify_public_key_algorithm(
            cert.public_key_algorithm_oid, cert.public_key_size, cert.public_key_curve
        )
        if public_key_algorithm is None:
            issues.append(
                UnknownAlgorithmError(cert.public_key_algorithm_oid or "unknown", "public key", path)
            )
        else:
            public_key_algorithm_ref = self.idgen.next_id()

        public_key = None
        if self.include_public_keys:
            public_key = RelatedMaterialAsset(
                bom_ref=self.idgen.next_id(),
                name=f"{public_key_algorithm.name if public_key_algorithm else 'unknown'} public key",
                algorithm_ref=public_key_algorithm_ref,
                size=cert.public_key_size,
                format="SubjectPublicKeyInfo",
                fingerprint_sha256=cert.public_key_fingerprint,
            )

        certificate = CertificateAsset(
            bom_ref=cert_ref,
            subject_name=cert.subject,
            common_name=cert.common_name,
            issuer_name=cert.issuer,
            not_valid_before=_isoformat(cert.not_valid_before),
            not_valid_after=_isoformat(cert.not_valid_after),
            serial_number=format(cert.serial_number, "x"),
            fingerprint_sha256=cert.fingerprint_sha256,
            signature_algorithm_ref=signature_asset.bom_ref if signature_asset else None,
            subject_public_key_ref=public_key.bom_ref if public_key else public_key_algorithm_ref,
            certificate_extension=pathlib.PurePosixPath(path).suffix.lower() or None,
            paths=[path],
        )

        graph.add_asset(certificate)
        if signature_asset is not None:
            graph.add_asset(signature_asset)
            graph.add_dependency(cert_ref, signature_asset.bom_ref)
        if public_key is not None:
            graph.add_asset(public_key)
            graph.add_dependency(cert_ref, public_key.bom_ref)
        if public_key_algorithm is not None:
            graph.add_asset(
                public_key_algorithm.to_asset(public_key_algorithm_ref, cert.public_key_algorithm_oid)
            )
            graph.add_dependency(
                public_key.bom_ref if public_key else cert_ref, public_key_algorithm_ref
            )

        for issue in issues:
            logger.debug(f"[subgraph] {issue}")
        return SubgraphResult(graph=graph, certificate=certificate, issues=issues)

def merge_subgraphs(
    graph: AssetGraph,
    builder: SubgraphBuilder,
    decoded: Iterable[Tuple[str, DecodedCertificate]],
) -> List[SubgraphResult]:
    """Builds and merges certificates that may have been decoded in any order.

    The ``(path, certificate)`` pairs are sorted by path before anything is
    built, so bom-refs are minted in the same order however the pairs arrived.
    Certificates from the same path keep their relative order.

    Raises:
        MergeConflictError: If any merge would create a cycle or a dangling edge.
    """
    results = []
    for path, cert in sorted(decoded, key=lambda item: normalize_path(item[0])):
        result = builder.build(cert, path)
        graph.merge(result.graph)
        results.append(result)
    return results
