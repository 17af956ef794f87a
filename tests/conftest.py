# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import pkcs7
from cryptography.x509.oid import NameOID
from loguru import logger

from cbomgraph.configmanager import ConfigManager

NOT_VALID_BEFORE = datetime(2024, 1, 1, tzinfo=timezone.utc)
NOT_VALID_AFTER = datetime(2034, 1, 1, tzinfo=timezone.utc)


class CertificateFactory:
    """Creates self-signed test certificates, reusing keys so tests stay fast."""

    def __init__(self):
        self._rsa_key = None
        self._ec_key = None

    @property
    def rsa_key(self) -> rsa.RSAPrivateKey:
        if self._rsa_key is None:
            self._rsa_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        return self._rsa_key

    @property
    def ec_key(self) -> ec.EllipticCurvePrivateKey:
        if self._ec_key is None:
            self._ec_key = ec.generate_private_key(ec.SECP256R1())
        return self._ec_key

    def create(self, common_name, key=None, hash_algorithm=None, serial_number=1, name=None):
        key = key if key is not None else self.rsa_key
        if name is None:
            name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
        builder = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(key.public_key())
            .serial_number(serial_number)
            .not_valid_before(NOT_VALID_BEFORE)
            .not_valid_after(NOT_VALID_AFTER)
        )
        return builder.sign(key, hash_algorithm if hash_algorithm is not None else hashes.SHA256())

    @staticmethod
    def to_pem(certs: Iterable[x509.Certificate]) -> bytes:
        return b"".join(cert.public_bytes(serialization.Encoding.PEM) for cert in certs)

    @staticmethod
    def to_der(cert: x509.Certificate) -> bytes:
        return cert.public_bytes(serialization.Encoding.DER)

    @staticmethod
    def to_pkcs7(certs: List[x509.Certificate], encoding=serialization.Encoding.DER) -> bytes:
        return pkcs7.serialize_certificates(certs, encoding)

    def private_key_pem(self) -> bytes:
        return self.rsa_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )


@pytest.fixture(scope="session", name="cert_factory")
def fixture_cert_factory():
    return CertificateFactory()


@pytest.fixture(name="cert_tree")
def fixture_cert_tree(tmp_path, cert_factory):
    """A directory with two PEM files, each holding one RSA certificate signed with SHA-256."""
    root = Path(tmp_path, "scan")
    Path(root, "etc", "ssl").mkdir(parents=True)
    Path(root, "etc", "ssl", "server.pem").write_bytes(
        cert_factory.to_pem([cert_factory.create("server.example.com", serial_number=10)])
    )
    Path(root, "etc", "ssl", "client.crt").write_bytes(
        cert_factory.to_pem([cert_factory.create("client.example.com", serial_number=11)])
    )
    Path(root, "etc", "README.txt").write_text("not a certificate")
    return root


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    # keep the user's own configuration out of the tests
    config_home = tmp_path_factory.mktemp("config")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("APPDATA", str(config_home))
    ConfigManager.delete_instance("cbomgraph")
    yield
    ConfigManager.delete_instance("cbomgraph")


@pytest.fixture(name="log_messages")
def fixture_log_messages():
    """Collects loguru messages at WARNING and above as 'LEVEL: message' strings."""
    messages: List[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.strip()),
        level="WARNING",
        format="{level}: {message}",
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    # the CLI group replaces the stderr sink with one bound to the test runner's stream
    logger.remove()
    logger.add(sys.stderr)
