import io
import json

import pytest
from cyclonedx.model.bom_ref import BomRef
from cyclonedx.model.component import Component, ComponentType
from cyclonedx.model.crypto import CryptoAssetType, CryptoPrimitive
from cyclonedx.model.dependency import Dependency

from cbomgraph.assettypes import AlgorithmAsset, AssetGraph, CertificateAsset, RelatedMaterialAsset
from cbomgraph.errors import DocumentAssemblyError
from cbomgraph.output import cyclonedx_writer

SERIAL = "00000000-0000-4000-8000-000000000000"


@pytest.fixture(name="graph")
def fixture_graph():
    graph = AssetGraph()
    graph.add_asset(
        CertificateAsset(
            bom_ref="cert",
            subject_name="CN=www.example.com,O=Example",
            common_name="www.example.com",
            issuer_name="CN=Example CA",
            not_valid_before="2024-01-01T00:00:00+00:00",
            not_valid_after="2025-01-01T00:00:00+00:00",
            serial_number="1f",
            fingerprint_sha256="ab" * 32,
            signature_algorithm_ref="sig",
            subject_public_key_ref="key",
            certificate_extension=".pem",
            paths=["etc/ssl/a.pem", "backup/a.pem"],
        )
    )
    graph.add_asset(
        AlgorithmAsset(
            bom_ref="sig",
            name="RSA-SHA256",
            primitive=CryptoPrimitive.SIGNATURE,
            oid="1.2.840.113549.1.1.11",
        )
    )
    graph.add_asset(
        RelatedMaterialAsset(
            bom_ref="key", name="RSA-2048 public key", algorithm_ref="pk", size=2048, fingerprint_sha256="cd" * 32
        )
    )
    graph.add_asset(AlgorithmAsset(bom_ref="pk", name="RSA-2048", primitive=CryptoPrimitive.PKE))
    graph.add_dependency("cert", "sig")
    graph.add_dependency("cert", "key")
    graph.add_dependency("key", "pk")
    return graph


def render(bom):
    return json.loads(cyclonedx_writer.serialize_bom(bom))


def component_by_ref(document, ref):
    return next(c for c in document["components"] if c["bom-ref"] == ref)


def test_flatten_components_in_creation_order(graph):
    components, _ = cyclonedx_writer.flatten(graph)
    assert [c.bom_ref.value for c in components] == ["cert", "sig", "key", "pk"]
    assert all(c.type == ComponentType.CRYPTOGRAPHIC_ASSET for c in components)
    assert [c.crypto_properties.asset_type for c in components] == [
        CryptoAssetType.CERTIFICATE,
        CryptoAssetType.ALGORITHM,
        CryptoAssetType.RELATED_CRYPTO_MATERIAL,
        CryptoAssetType.ALGORITHM,
    ]


def test_flatten_certificate(graph):
    components, _ = cyclonedx_writer.flatten(graph)
    cert = components[0]
    assert cert.name == "www.example.com"
    properties = cert.crypto_properties.certificate_properties
    assert properties.subject_name == "CN=www.example.com,O=Example"
    assert properties.signature_algorithm_ref == BomRef("sig")
    assert properties.subject_public_key_ref == BomRef("key")
    assert properties.certificate_format == "X.509"
    assert properties.not_valid_before.year == 2024
    assert sorted(o.location for o in cert.evidence.occurrences) == ["backup/a.pem", "etc/ssl/a.pem"]
    assert ("cbomgraph:certificate:serialNumber", "1f") in [(p.name, p.value) for p in cert.properties]


def test_flatten_dependencies(graph):
    _, dependencies = cyclonedx_writer.flatten(graph)
    assert dependencies == [
        {"ref": "cert", "dependsOn": ["sig", "key"]},
        {"ref": "key", "dependsOn": ["pk"]},
    ]


def test_rendered_components(graph):
    document = render(cyclonedx_writer.flatten_into(cyclonedx_writer.new_bom(SERIAL), graph))

    cert = component_by_ref(document, "cert")
    assert cert["type"] == "cryptographic-asset"
    properties = cert["cryptoProperties"]["certificateProperties"]
    assert properties["signatureAlgorithmRef"] == "sig"
    assert properties["subjectPublicKeyRef"] == "key"
    assert [o["location"] for o in cert["evidence"]["occurrences"]] == ["backup/a.pem", "etc/ssl/a.pem"]

    sig = component_by_ref(document, "sig")
    assert sig["cryptoProperties"]["oid"] == "1.2.840.113549.1.1.11"
    assert sig["cryptoProperties"]["algorithmProperties"]["primitive"] == "signature"
    # unset optional fields are left out
    assert "padding" not in sig["cryptoProperties"]["algorithmProperties"]
    assert "oid" not in component_by_ref(document, "pk")["cryptoProperties"]

    key = component_by_ref(document, "key")["cryptoProperties"]["relatedCryptoMaterialProperties"]
    assert key == {"type": "public-key", "algorithmRef": "pk", "size": 2048}


def test_merge_dependencies_unions_by_ref():
    existing = [{"ref": "a", "dependsOn": ["x", "y"]}, {"ref": "b"}]
    new = [{"ref": "c", "dependsOn": ["z"]}, {"ref": "a", "dependsOn": ["y", "w"]}]
    assert cyclonedx_writer.merge_dependencies(existing, new) == [
        {"ref": "a", "dependsOn": ["x", "y", "w"]},
        {"ref": "b"},
        {"ref": "c", "dependsOn": ["z"]},
    ]
    # inputs are left alone
    assert existing[0] == {"ref": "a", "dependsOn": ["x", "y"]}


def test_flatten_into_existing_bom(graph):
    bom = cyclonedx_writer.new_bom(SERIAL)
    bom.components.add(Component(type=ComponentType.LIBRARY, bom_ref="lib", name="openssl"))
    bom.dependencies.add(Dependency(ref=BomRef("lib"), dependencies=[Dependency(ref=BomRef("cert"))]))

    cyclonedx_writer.flatten_into(bom, graph)

    assert {c.bom_ref.value for c in bom.components} == {"lib", "cert", "sig", "key", "pk"}
    records = {r["ref"]: r.get("dependsOn", []) for r in cyclonedx_writer.dependency_records(bom)}
    assert records == {"lib": ["cert"], "cert": ["key", "sig"], "key": ["pk"]}


def test_new_bom_has_no_timestamp():
    document = render(cyclonedx_writer.new_bom(SERIAL))
    assert document["bomFormat"] == "CycloneDX"
    assert document["specVersion"] == "1.6"
    assert document["serialNumber"] == f"urn:uuid:{SERIAL}"
    assert "timestamp" not in document["metadata"]
    assert document["metadata"]["tools"]["components"][0]["name"] == "cbomgraph"


def test_write_cbom(graph):
    bom = cyclonedx_writer.flatten_into(cyclonedx_writer.new_bom(SERIAL), graph)
    outfile = io.StringIO()
    cyclonedx_writer.write_cbom(bom=bom, outfile=outfile)
    assert json.loads(outfile.getvalue())["serialNumber"] == f"urn:uuid:{SERIAL}"
    assert outfile.getvalue().endswith("}\n")


def test_rendering_is_repeatable(graph):
    first = cyclonedx_writer.serialize_bom(cyclonedx_writer.flatten_into(cyclonedx_writer.new_bom(SERIAL), graph))
    second = cyclonedx_writer.serialize_bom(cyclonedx_writer.flatten_into(cyclonedx_writer.new_bom(SERIAL), graph))
    assert first == second


def test_dangling_dependency_is_rejected():
    bom = cyclonedx_writer.new_bom(SERIAL)
    bom.dependencies.add(Dependency(ref=BomRef("missing")))
    with pytest.raises(DocumentAssemblyError):
        cyclonedx_writer.serialize_bom(bom)


def test_validate_bom(graph):
    bom = cyclonedx_writer.flatten_into(cyclonedx_writer.new_bom(SERIAL), graph)
    cyclonedx_writer.validate_bom(bom)


def test_validate_bom_reports_schema_errors(graph, monkeypatch):
    bom = cyclonedx_writer.flatten_into(cyclonedx_writer.new_bom(SERIAL), graph)
    document = render(bom)
    document["components"][0]["type"] = "not-a-component-type"
    monkeypatch.setattr(cyclonedx_writer, "serialize_bom", lambda _: json.dumps(document))
    with pytest.raises(DocumentAssemblyError):
        cyclonedx_writer.validate_bom(bom)
