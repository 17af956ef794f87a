# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import hashlib
import re
from typing import List, Optional

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import pkcs7
from cryptography.x509.oid import NameOID
from loguru import logger

import cbomgraph.plugin
from cbomgraph.errors import ParsingFailedError
from cbomgraph.subgraph import DecodedCertificate

# Matches one PEM block, capturing its label
_PEM_BLOCK = re.compile(
    rb"-----BEGIN ([A-Z0-9 ]+)-----\r?\n.*?-----END \1-----", re.DOTALL
)


def supports_file(filetype: str) -> bool:
    return filetype in ("CERTIFICATE", "PKCS7")


@cbomgraph.plugin.hookimpl
def extract_certificates(
    filename: str, filetype: str, data: bytes
) -> Optional[List[DecodedCertificate]]:
    if not supports_file(filetype):
        return None
    try:
        if filetype == "PKCS7":
            certs = parse_pkcs7(data)
        else:
            certs = parse_x509(filename, data)
        return [decode_certificate(cert) for cert in certs]
    except (ValueError, UnsupportedAlgorithm) as err:
        raise ParsingFailedError(filename, str(err), short_name()) from err


def _is_pem(data: bytes) -> bool:
    return b"-----BEGIN " in data


def parse_x509(filename: str, data: bytes) -> List[x509.Certificate]:
    """Parses a PEM file holding any number of blocks, or a single DER encoded certificate.

    PEM blocks that aren't certificates (e.g. private keys bundled in the same
    file) are skipped. Data that looks like PEM but holds no complete block is
    decoded as DER instead.

    Raises:
        ValueError: If the data can't be decoded.
    """
    blocks = list(_PEM_BLOCK.finditer(data)) if _is_pem(data) else []
    if not blocks:
        return [x509.load_der_x509_certificate(data)]

    certs = []
    for match in blocks:
        label = match.group(1).decode("ascii")
        if label != "CERTIFICATE":
            logger.warning(f"PEM block of type {label} in {filename} is not a certificate, skipping")
            continue
        certs.append(x509.load_pem_x509_certificate(match.group(0)))
    return certs


def parse_pkcs7(data: bytes) -> List[x509.Certificate]:
    """Returns the certificates embedded in a PKCS #7 structure, in the order they are stored.

    Raises:
        ValueError: If the data can't be decoded.
    """
    if _is_pem(data):
        return pkcs7.load_pem_pkcs7_certificates(data)
    return pkcs7.load_der_pkcs7_certificates(data)


def decode_certificate(cert: x509.Certificate) -> DecodedCertificate:
    key_size = None
    curve = None
    key_fingerprint = None
    try:
        public_key = cert.public_key()
    except (ValueError, UnsupportedAlgorithm) as err:
        # the algorithm identifier is still usable even if the key itself isn't
        logger.debug(f"Unable to load public key of {cert.subject.rfc4514_string()}: {err}")
    else:
        if isinstance(public_key, ec.EllipticCurvePublicKey):
            curve = public_key.curve.name
        key_size = getattr(public_key, "key_size", None)
        spki = public_key.public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
        )
        key_fingerprint = hashlib.sha256(spki).hexdigest()

    common_names = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)

    return DecodedCertificate(
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        serial_number=cert.serial_number,
        fingerprint_sha256=cert.fingerprint(hashes.SHA256()).hex(),
        common_name=str(common_names[0].value) if common_names else None,
        signature_algorithm_oid=cert.signature_algorithm_oid.dotted_string,
        public_key_algorithm_oid=cert.public_key_algorithm_oid.dotted_string,
        public_key_size=key_size,
        public_key_curve=curve,
        public_key_fingerprint=key_fingerprint,
        not_valid_before=cert.not_valid_before_utc,
        not_valid_after=cert.not_valid_after_utc,
    )


@cbomgraph.plugin.hookimpl
def short_name() -> Optional[str]:
    return "certificate"
