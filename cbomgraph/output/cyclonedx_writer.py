# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import cyclonedx.output
from cyclonedx.exception import CycloneDxException
from cyclonedx.model import Property
from cyclonedx.model.bom import Bom, BomMetaData
from cyclonedx.model.bom_ref import BomRef
from cyclonedx.model.component import Component, ComponentType
from cyclonedx.model.component_evidence import ComponentEvidence, Occurrence
from cyclonedx.model.crypto import (
    AlgorithmProperties,
    CertificateProperties,
    CryptoProperties,
    RelatedCryptoMaterialProperties,
)
from cyclonedx.model.dependency import Dependency
from cyclonedx.model.tool import ToolRepository
from cyclonedx.schema import SchemaVersion
from cyclonedx.validation.json import JsonStrictValidator
from loguru import logger

import cbomgraph.plugin
from cbomgraph import __version__ as cbomgraph_version
from cbomgraph.assettypes import (
    AlgorithmAsset,
    AssetGraph,
    CertificateAsset,
    CryptoAsset,
    RelatedMaterialAsset,
)
from cbomgraph.errors import DocumentAssemblyError

SCHEMA_VERSION = SchemaVersion.V1_6
PROPERTY_PREFIX = "cbomgraph"

# A dependency record is {"ref": str, "dependsOn": [str, ...]}, with targets in insertion order
DependencyRecord = Dict[str, Any]


@cbomgraph.plugin.hookimpl
def write_cbom(bom: Bom, outfile) -> None:
    """Writes the CBOM to a CycloneDX 1.6 JSON file.

    Args:
        bom (Bom): The CycloneDX BOM to write.
        outfile: The output file handle to write the BOM to.
    """
    # outfile is a file pointer, not a file name
    outfile.write(serialize_bom(bom))


@cbomgraph.plugin.hookimpl
def short_name() -> Optional[str]:
    return "cyclonedx"


def serialize_bom(bom: Bom) -> str:
    """Renders the BOM as CycloneDX 1.6 JSON text.

    Raises:
        DocumentAssemblyError: If the library refuses to render the BOM, e.g.
            because a dependency refers to a component the BOM doesn't hold.
    """
    outputter = cyclonedx.output.make_outputter(
        bom=bom, output_format=cyclonedx.output.OutputFormat.JSON, schema_version=SCHEMA_VERSION
    )
    try:
        return outputter.output_as_string(indent=2) + "\n"
    except CycloneDxException as err:
        raise DocumentAssemblyError(f"unable to render CBOM: {err}") from err


def new_bom(serial_uuid: str) -> Bom:
    """Creates an empty BOM with the given serial number.

    The metadata carries no timestamp; two scans of the same input must
    serialize to the same bytes.
    """
    tool = Component(
        type=ComponentType.APPLICATION, name="cbomgraph", version=cbomgraph_version or None
    )
    metadata = BomMetaData(tools=ToolRepository(components=[tool]))
    metadata.timestamp = None
    return Bom(serial_number=UUID(serial_uuid), metadata=metadata)


def _property(name: str, value: Optional[str]) -> Optional[Property]:
    if value is None:
        return None
    return Property(name=f"{PROPERTY_PREFIX}:{name}", value=value)


def _bom_ref(value: Optional[str]) -> Optional[BomRef]:
    return BomRef(value) if value else None


def _datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def convert_algorithm(algorithm: AlgorithmAsset) -> Component:
    algorithm_properties = AlgorithmProperties(
        primitive=algorithm.primitive,
        execution_environment=algorithm.execution_environment,
        implementation_platform=algorithm.implementation_platform,
        certification_levels=algorithm.certification_levels,
        crypto_functions=algorithm.crypto_functions,
        padding=algorithm.padding,
    )
    return Component(
        type=ComponentType.CRYPTOGRAPHIC_ASSET,
        bom_ref=algorithm.bom_ref,
        name=algorithm.name,
        crypto_properties=CryptoProperties(
            asset_type=algorithm.asset_type,
            algorithm_properties=algorithm_properties,
            oid=algorithm.oid,
        ),
    )


def convert_certificate(certificate: CertificateAsset) -> Component:
    certificate_properties = CertificateProperties(
        subject_name=certificate.subject_name,
        issuer_name=certificate.issuer_name,
        not_valid_before=_datetime(certificate.not_valid_before),
        not_valid_after=_datetime(certificate.not_valid_after),
        signature_algorithm_ref=_bom_ref(certificate.signature_algorithm_ref),
        subject_public_key_ref=_bom_ref(certificate.subject_public_key_ref),
        certificate_format=certificate.certificate_format,
        certificate_extension=certificate.certificate_extension,
    )
    properties = [
        prop
        for prop in (
            _property("certificate:serialNumber", certificate.serial_number),
            _property("certificate:fingerprint:sha256", certificate.fingerprint_sha256),
        )
        if prop is not None
    ]
    evidence = None
    if certificate.paths:
        evidence = ComponentEvidence(
            occurrences=[Occurrence(location=path) for path in certificate.paths]
        )
    return Component(
        type=ComponentType.CRYPTOGRAPHIC_ASSET,
        bom_ref=certificate.bom_ref,
        name=certificate.display_name,
        crypto_properties=CryptoProperties(
            asset_type=certificate.asset_type,
            certificate_properties=certificate_properties,
        ),
        evidence=evidence,
        properties=properties,
    )


def convert_related_material(material: RelatedMaterialAsset) -> Component:
    fingerprint = _property("publicKey:fingerprint:sha256", material.fingerprint_sha256)
    return Component(
        type=ComponentType.CRYPTOGRAPHIC_ASSET,
        bom_ref=material.bom_ref,
        name=material.name,
        crypto_properties=CryptoProperties(
            asset_type=material.asset_type,
            related_crypto_material_properties=RelatedCryptoMaterialProperties(
                type=material.material_type,
                algorithm_ref=_bom_ref(material.algorithm_ref),
                size=material.size,
                format=material.format,
            ),
        ),
        properties=[fingerprint] if fingerprint is not None else None,
    )


def convert_asset(asset: CryptoAsset) -> Component:
    if isinstance(asset, AlgorithmAsset):
        return convert_algorithm(asset)
    if isinstance(asset, CertificateAsset):
        return convert_certificate(asset)
    if isinstance(asset, RelatedMaterialAsset):
        return convert_related_material(asset)
    raise TypeError(f"unsupported asset type {type(asset).__name__}")


def flatten(graph: AssetGraph) -> Tuple[List[Component], List[DependencyRecord]]:
    """Converts the graph into CycloneDX components and dependency records.

    Components are listed in node creation order. There is one dependency
    record per node with outgoing edges, listing its targets in edge insertion
    order.
    """
    components = []
    dependencies = []
    for asset in graph.assets():
        components.append(convert_asset(asset))
        depends_on = graph.dependencies_of(asset.bom_ref)
        if depends_on:
            dependencies.append({"ref": asset.bom_ref, "dependsOn": depends_on})
    return components, dependencies


def merge_dependencies(
    existing: List[DependencyRecord], new: List[DependencyRecord]
) -> List[DependencyRecord]:
    """Unions two lists of dependency records by ``ref``.

    Records keep the order in which their ref first appears. Within a record,
    existing targets come first, followed by new targets that weren't already
    listed. Neither input is modified.
    """
    merged: Dict[str, List[str]] = {}
    for record in list(existing) + list(new):
        targets = merged.setdefault(record["ref"], [])
        for target in record.get("dependsOn", []):
            if target not in targets:
                targets.append(target)
    result = []
    for ref, targets in merged.items():
        record: DependencyRecord = {"ref": ref}
        if targets:
            record["dependsOn"] = targets
        result.append(record)
    return result


def dependency_records(bom: Bom) -> List[DependencyRecord]:
    """Returns the dependencies already in a BOM as plain dependency records."""
    records = []
    for dependency in bom.dependencies:
        record: DependencyRecord = {"ref": dependency.ref.value}
        targets = [target.ref.value for target in dependency.dependencies]
        if targets:
            record["dependsOn"] = targets
        records.append(record)
    return records


def to_dependency(record: DependencyRecord) -> Dependency:
    return Dependency(
        ref=BomRef(record["ref"]),
        dependencies=[Dependency(ref=BomRef(target)) for target in record.get("dependsOn", [])],
    )


def flatten_into(bom: Bom, graph: AssetGraph) -> Bom:
    """Adds the flattened graph to a BOM, in place.

    New components are added next to the components already in the BOM.
    Dependency records are merged with :func:`merge_dependencies`.
    """
    components, dependencies = flatten(graph)
    for component in components:
        bom.components.add(component)
    merged = merge_dependencies(dependency_records(bom), dependencies)
    bom.dependencies = [to_dependency(record) for record in merged]
    logger.info(
        f"Added {len(components)} component(s) and {len(dependencies)} dependency record(s) to the CBOM"
    )
    return bom


def validate_bom(bom: Bom) -> None:
    """Checks the rendered BOM against the CycloneDX 1.6 JSON schema.

    Raises:
        DocumentAssemblyError: If the BOM doesn't validate.
    """
    validator = JsonStrictValidator(SCHEMA_VERSION)
    error = validator.validate_str(serialize_bom(bom))
    if error is not None:
        raise DocumentAssemblyError(
            f"generated CBOM is not valid CycloneDX {SCHEMA_VERSION.to_version()}: {error}"
        )
    logger.debug(f"CBOM validated against CycloneDX {SCHEMA_VERSION.to_version()} schema")
