# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

from cyclonedx.model.crypto import (
    CryptoCertificationLevel,
    CryptoExecutionEnvironment,
    CryptoFunction,
    CryptoImplementationPlatform,
    CryptoPadding,
    CryptoPrimitive,
)

from cbomgraph.assettypes import AlgorithmAsset

_SIGN_VERIFY = (CryptoFunction.SIGN, CryptoFunction.VERIFY)


@dataclass(frozen=True)
class AlgorithmDescription:
    """Static description of an algorithm identified by an OID."""

    name: str
    primitive: CryptoPrimitive
    crypto_functions: Tuple[CryptoFunction, ...] = _SIGN_VERIFY
    padding: Optional[CryptoPadding] = None
    # certificates are found at rest, so nothing is known about how they are executed
    execution_environment: CryptoExecutionEnvironment = CryptoExecutionEnvironment.SOFTWARE_PLAIN_RAM
    implementation_platform: CryptoImplementationPlatform = CryptoImplementationPlatform.UNKNOWN
    certification_levels: Tuple[CryptoCertificationLevel, ...] = field(
        default=(CryptoCertificationLevel.NONE,)
    )

    def to_asset(self, bom_ref: str, oid: str) -> AlgorithmAsset:
        return AlgorithmAsset(
            bom_ref=bom_ref,
            name=self.name,
            primitive=self.primitive,
            execution_environment=self.execution_environment,
            implementation_platform=self.implementation_platform,
            certification_levels=list(self.certification_levels),
            crypto_functions=list(self.crypto_functions),
            oid=oid,
            padding=self.padding,
        )


def _rsa_signature(digest: str) -> AlgorithmDescription:
    return AlgorithmDescription(
        f"RSA-{digest}", CryptoPrimitive.SIGNATURE, padding=CryptoPadding.PKCS1V15
    )


def _signature(name: str) -> AlgorithmDescription:
    return AlgorithmDescription(name, CryptoPrimitive.SIGNATURE)


# X.509 signature algorithm OIDs
# https://www.rfc-editor.org/rfc/rfc8017 (PKCS #1), rfc5758, rfc8410, rfc9881
_SIGNATURE_ALGORITHMS: Dict[str, AlgorithmDescription] = {
    "1.2.840.113549.1.1.2": _rsa_signature("MD2"),
    "1.2.840.113549.1.1.4": _rsa_signature("MD5"),
    "1.2.840.113549.1.1.5": _rsa_signature("SHA1"),
    "1.2.840.113549.1.1.14": _rsa_signature("SHA224"),
    "1.2.840.113549.1.1.11": _rsa_signature("SHA256"),
    "1.2.840.113549.1.1.12": _rsa_signature("SHA384"),
    "1.2.840.113549.1.1.13": _rsa_signature("SHA512"),
    "2.16.840.1.101.3.4.3.13": _rsa_signature("SHA3-224"),
    "2.16.840.1.101.3.4.3.14": _rsa_signature("SHA3-256"),
    "2.16.840.1.101.3.4.3.15": _rsa_signature("SHA3-384"),
    "2.16.840.1.101.3.4.3.16": _rsa_signature("SHA3-512"),
    # the hash and mask generation function live in the parameters, not the OID
    "1.2.840.113549.1.1.10": AlgorithmDescription(
        "RSASSA-PSS", CryptoPrimitive.SIGNATURE, padding=CryptoPadding.OTHER
    ),
    "1.2.840.10045.4.1": _signature("ECDSA-SHA1"),
    "1.2.840.10045.4.3.1": _signature("ECDSA-SHA224"),
    "1.2.840.10045.4.3.2": _signature("ECDSA-SHA256"),
    "1.2.840.10045.4.3.3": _signature("ECDSA-SHA384"),
    "1.2.840.10045.4.3.4": _signature("ECDSA-SHA512"),
    "2.16.840.1.101.3.4.3.9": _signature("ECDSA-SHA3-224"),
    "2.16.840.1.101.3.4.3.10": _signature("ECDSA-SHA3-256"),
    "2.16.840.1.101.3.4.3.11": _signature("ECDSA-SHA3-384"),
    "2.16.840.1.101.3.4.3.12": _signature("ECDSA-SHA3-512"),
    "1.2.840.10040.4.3": _signature("DSA-SHA1"),
    "2.16.840.1.101.3.4.3.1": _signature("DSA-SHA224"),
    "2.16.840.1.101.3.4.3.2": _signature("DSA-SHA256"),
    "2.16.840.1.101.3.4.3.3": _signature("DSA-SHA384"),
    "2.16.840.1.101.3.4.3.4": _signature("DSA-SHA512"),
    "1.3.101.112": _signature("Ed25519"),
    "1.3.101.113": _signature("Ed448"),
    "2.16.840.1.101.3.4.3.17": _signature("ML-DSA-44"),
    "2.16.840.1.101.3.4.3.18": _signature("ML-DSA-65"),
    "2.16.840.1.101.3.4.3.19": _signature("ML-DSA-87"),
}

# SubjectPublicKeyInfo algorithm OIDs; the key size or curve is appended to the name
_PUBLIC_KEY_ALGORITHMS: Dict[str, AlgorithmDescription] = {
    "1.2.840.113549.1.1.1": AlgorithmDescription(
        "RSA",
        CryptoPrimitive.PKE,
        crypto_functions=(
            CryptoFunction.ENCRYPT,
            CryptoFunction.DECRYPT,
            CryptoFunction.SIGN,
            CryptoFunction.VERIFY,
        ),
    ),
    "1.2.840.113549.1.1.10": _signature("RSASSA-PSS"),
    "1.2.840.10045.2.1": _signature("EC"),
    "1.2.840.10040.4.1": _signature("DSA"),
    "1.3.101.112": _signature("Ed25519"),
    "1.3.101.113": _signature("Ed448"),
    "1.3.101.110": AlgorithmDescription(
        "X25519", CryptoPrimitive.KEY_AGREE, crypto_functions=(CryptoFunction.KEYGEN,)
    ),
    "1.3.101.111": AlgorithmDescription(
        "X448", CryptoPrimitive.KEY_AGREE, crypto_functions=(CryptoFunction.KEYGEN,)
    ),
    "2.16.840.1.101.3.4.3.17": _signature("ML-DSA-44"),
    "2.16.840.1.101.3.4.3.18": _signature("ML-DSA-65"),
    "2.16.840.1.101.3.4.3.19": _signature("ML-DSA-87"),
}


def classify_signature_algorithm(oid: Optional[str]) -> Optional[AlgorithmDescription]:
    """Looks up the description of a certificate signature algorithm by dotted OID.

    Returns:
        Optional[AlgorithmDescription]: The description, or None if the OID isn't known.
    """
    if not oid:
        return None
    return _SIGNATURE_ALGORITHMS.get(oid)


def classify_public_key_algorithm(
    oid: Optional[str], key_size: Optional[int] = None, curve: Optional[str] = None
) -> Optional[AlgorithmDescription]:
    """Looks up the description of a subject public key algorithm by dotted OID.

    The returned name carries the key parameters, e.g. ``RSA-2048`` or
    ``EC-secp256r1``, since keys of different sizes are different assets.
    """
    if not oid or oid not in _PUBLIC_KEY_ALGORITHMS:
        return None
    description = _PUBLIC_KEY_ALGORITHMS[oid]
    suffix = curve if curve else key_size
    if suffix is None:
        return description
    return replace(description, name=f"{description.name}-{suffix}")