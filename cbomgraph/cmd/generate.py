# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import json
import pathlib
from typing import Any, List, Optional, Set, Tuple
from uuid import UUID

import click
import pluggy
from cyclonedx.model.bom import Bom
from loguru import logger

from cbomgraph.assettypes import AssetGraph
from cbomgraph.configmanager import ConfigManager
from cbomgraph.errors import FatalError
from cbomgraph.filesystem import PlainFilesystem
from cbomgraph.idgen import IdentifierGenerator
from cbomgraph.output import cyclonedx_writer
from cbomgraph.plugin.manager import find_io_plugin, get_plugin_manager
from cbomgraph.subgraph import DecodedCertificate, SubgraphBuilder, merge_subgraphs


def print_output_formats(ctx, _, value):
    if not value or ctx.resilient_parsing:
        return
    pm = get_plugin_manager()
    for plugin in pm.get_plugins():
        if hasattr(plugin, "write_cbom"):
            if hasattr(plugin, "short_name"):
                print(plugin.short_name())
            else:
                print(pm.get_canonical_name(plugin))
    ctx.exit()


def print_input_formats(ctx, _, value):
    if not value or ctx.resilient_parsing:
        return
    pm = get_plugin_manager()
    for plugin in pm.get_plugins():
        if hasattr(plugin, "read_cbom"):
            if hasattr(plugin, "short_name"):
                print(plugin.short_name())
            else:
                print(pm.get_canonical_name(plugin))
    ctx.exit()


def get_default_from_config(option: str) -> Any:
    """Retrieve a core config option for use as default argument value.

    Args:
        option (str): The core config option to get.

    Returns:
        Any: The configured value, or the built-in default for the option.
    """
    return ConfigManager().get_core(option)


def scan_filesystem(
    pm: pluggy.PluginManager, filesystem: PlainFilesystem, builder: SubgraphBuilder
) -> AssetGraph:
    """Builds the merged asset graph for every certificate found in a filesystem.

    Files that can't be decoded and algorithms that can't be classified are
    reported as warnings. Merge conflicts and I/O errors stop the scan.

    Raises:
        MergeConflictError: If a certificate's subgraph can't be merged.
        OSError: If a recognized file can't be read.
    """
    graph = AssetGraph()
    decoded: List[Tuple[str, DecodedCertificate]] = []

    def process_file(path: str) -> None:
        filetype = pm.hook.identify_file_type(filepath=path)
        if filetype is None:
            logger.trace(f"Skipping {path}, not a recognized certificate file")
            return
        logger.debug(f"Extracting certificates from {path} ({filetype})")
        data = filesystem.read_file(path)
        for certs in pm.hook.extract_certificates(filename=path, filetype=filetype, data=data):
            decoded.extend((path, cert) for cert in certs)

    logger.info(f"Searching for certificates in {filesystem.identifier}")
    filesystem.walk(process_file)
    logger.info(f"Certificate searching done, found {len(decoded)} certificate(s)")
    for result in merge_subgraphs(graph, builder, decoded):
        for issue in result.issues:
            logger.warning(str(issue))
    logger.info(
        f"Asset graph holds {len(graph)} asset(s): {len(graph.certificates())} certificate(s), "
        f"{len(graph.algorithms())} algorithm(s), {len(graph.related_material())} related material"
    )
    return graph


def _bom_refs(bom: Bom) -> Set[str]:
    return {c.bom_ref.value for c in bom.components if c.bom_ref.value}


@click.command("generate")
@click.argument(
    "root_path",
    type=click.Path(exists=True, file_okay=True, dir_okay=True, path_type=pathlib.Path),
    required=True,
)
@click.argument("cbom_outfile", envvar="CBOM_OUTPUT", type=click.File("w"), required=True)
@click.argument("input_cbom", type=click.File("r"), required=False)
@click.option(
    "--output_format",
    is_flag=False,
    default=lambda: get_default_from_config("output_format"),
    help="CBOM output format, see --list_output_formats for list of options; default is CycloneDX",
)
@click.option(
    "--list_output_formats",
    is_flag=True,
    callback=print_output_formats,
    expose_value=False,
    is_eager=True,
    help="List supported output formats",
)
@click.option(
    "--input_format",
    is_flag=False,
    default=lambda: get_default_from_config("input_format"),
    help="Input CBOM format, see --list_input_formats for list of options; default is CycloneDX",
)
@click.option(
    "--list_input_formats",
    is_flag=True,
    callback=print_input_formats,
    expose_value=False,
    is_eager=True,
    help="List supported input formats",
)
@click.option(
    "--include_public_keys/--no_include_public_keys",
    default=lambda: get_default_from_config("include_public_keys"),
    help="Add the subject public key of every certificate as a related crypto material component",
)
@click.option(
    "--validate/--no_validate",
    default=lambda: get_default_from_config("validate_output"),
    help="Validate the generated CBOM against the CycloneDX 1.6 JSON schema before writing it",
)
@click.option(
    "--graph_outfile",
    type=click.File("w"),
    default=None,
    help="Also write the raw asset graph as JSON to this file, for debugging",
)
# pylint: disable-next=too-many-positional-arguments
def cbom(
    root_path: pathlib.Path,
    cbom_outfile: click.File,
    input_cbom: Optional[click.File],
    output_format: str,
    input_format: str,
    include_public_keys: bool,
    validate: bool,
    graph_outfile: Optional[click.File],
):
    """Generate a CBOM for the certificates found under ROOT_PATH and output to CBOM_OUTFILE.

    An optional INPUT_CBOM can be supplied; the new components are added to it.
    """
    try:
        pm = get_plugin_manager()
        output_writer = find_io_plugin(pm, output_format, "write_cbom")
        idgen = IdentifierGenerator(get_default_from_config("id_seed"))

        bom: Optional[Bom] = None
        if input_cbom is not None and hasattr(input_cbom, "read"):
            input_reader = find_io_plugin(pm, input_format, "read_cbom")
            bom = input_reader.read_cbom(input_cbom)
            idgen.reserve(_bom_refs(bom))

        builder = SubgraphBuilder(idgen, include_public_keys=include_public_keys)
        graph = scan_filesystem(pm, PlainFilesystem(root_path), builder)

        if bom is None:
            bom = cyclonedx_writer.new_bom(idgen.next_id())
        elif bom.serial_number is None:
            bom.serial_number = UUID(idgen.next_id())
        cyclonedx_writer.flatten_into(bom, graph)

        if validate:
            cyclonedx_writer.validate_bom(bom)
        if graph_outfile is not None:
            json.dump(graph.to_dict(), graph_outfile, indent=2)
        output_writer.write_cbom(bom, cbom_outfile)
    except (FatalError, OSError) as err:
        logger.error(f"CBOM generation failed: {err}")
        raise SystemExit(1) from err
