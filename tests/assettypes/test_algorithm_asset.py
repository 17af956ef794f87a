from dataclasses import replace

import pytest
from cyclonedx.model.crypto import (
    CryptoCertificationLevel,
    CryptoExecutionEnvironment,
    CryptoFunction,
    CryptoImplementationPlatform,
    CryptoPadding,
    CryptoPrimitive,
)

from cbomgraph.assettypes import AlgorithmAsset, CertificateAsset


def make_algorithm(bom_ref="alg-1", **kwargs):
    fields = {
        "name": "RSA-SHA256",
        "primitive": CryptoPrimitive.SIGNATURE,
        "execution_environment": CryptoExecutionEnvironment.SOFTWARE_PLAIN_RAM,
        "implementation_platform": CryptoImplementationPlatform.UNKNOWN,
        "certification_levels": [CryptoCertificationLevel.NONE],
        "crypto_functions": [CryptoFunction.SIGN, CryptoFunction.VERIFY],
        "oid": "1.2.840.113549.1.1.11",
        "padding": CryptoPadding.PKCS1V15,
    }
    fields.update(kwargs)
    return AlgorithmAsset(bom_ref=bom_ref, **fields)


def test_equivalence_ignores_bom_ref():
    a = make_algorithm("alg-1")
    b = make_algorithm("alg-2")
    assert a.is_equivalent(b)
    assert b.is_equivalent(a)
    # plain equality still sees the identifier
    assert a != b


@pytest.mark.parametrize(
    "field_name,value",
    [
        ("name", "RSA-SHA384"),
        ("primitive", CryptoPrimitive.PKE),
        ("execution_environment", CryptoExecutionEnvironment.HARDWARE),
        ("implementation_platform", CryptoImplementationPlatform.X86_64),
        ("certification_levels", [CryptoCertificationLevel.FIPS140_2_L1]),
        ("crypto_functions", [CryptoFunction.SIGN]),
        ("oid", "1.2.840.113549.1.1.12"),
        ("padding", None),
    ],
)
def test_any_compared_field_breaks_equivalence(field_name, value):
    a = make_algorithm("alg-1")
    b = replace(a, bom_ref="alg-2", **{field_name: value})
    assert not a.is_equivalent(b)


def test_order_of_functions_matters():
    a = make_algorithm(crypto_functions=[CryptoFunction.SIGN, CryptoFunction.VERIFY])
    b = make_algorithm(crypto_functions=[CryptoFunction.VERIFY, CryptoFunction.SIGN])
    assert not a.is_equivalent(b)


def test_equivalence_with_non_algorithm_raises():
    cert = CertificateAsset(bom_ref="cert-1", subject_name="CN=example")
    with pytest.raises(TypeError):
        make_algorithm().is_equivalent(cert)


def test_with_substitutions_rewrites_only_matching_ref():
    a = make_algorithm("alg-1")
    assert a.with_substitutions({"alg-1": "alg-0"}).bom_ref == "alg-0"
    assert a.with_substitutions({"other": "alg-0"}) == a
