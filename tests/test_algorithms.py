from cyclonedx.model.crypto import CryptoFunction, CryptoPadding, CryptoPrimitive

from cbomgraph.algorithms import classify_public_key_algorithm, classify_signature_algorithm


def test_rsa_sha256_signature():
    description = classify_signature_algorithm("1.2.840.113549.1.1.11")
    assert description.name == "RSA-SHA256"
    assert description.primitive == CryptoPrimitive.SIGNATURE
    assert description.padding == CryptoPadding.PKCS1V15
    assert description.crypto_functions == (CryptoFunction.SIGN, CryptoFunction.VERIFY)


def test_ecdsa_signature_has_no_padding():
    description = classify_signature_algorithm("1.2.840.10045.4.3.3")
    assert description.name == "ECDSA-SHA384"
    assert description.padding is None


def test_unknown_signature_oid():
    assert classify_signature_algorithm("1.2.3.4.5") is None
    assert classify_signature_algorithm(None) is None
    assert classify_signature_algorithm("") is None


def test_public_key_name_carries_size_or_curve():
    rsa = classify_public_key_algorithm("1.2.840.113549.1.1.1", key_size=2048)
    assert rsa.name == "RSA-2048"
    assert rsa.primitive == CryptoPrimitive.PKE
    ec = classify_public_key_algorithm("1.2.840.10045.2.1", key_size=256, curve="secp256r1")
    assert ec.name == "EC-secp256r1"
    assert classify_public_key_algorithm("1.3.101.112").name == "Ed25519"


def test_unknown_public_key_oid():
    assert classify_public_key_algorithm("1.2.3.4.5", key_size=2048) is None


def test_to_asset_copies_description():
    asset = classify_signature_algorithm("1.2.840.113549.1.1.11").to_asset(
        "ref-1", "1.2.840.113549.1.1.11"
    )
    assert asset.bom_ref == "ref-1"
    assert asset.oid == "1.2.840.113549.1.1.11"
    assert asset.crypto_functions == [CryptoFunction.SIGN, CryptoFunction.VERIFY]
