# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import sys

import click
from loguru import logger

from cbomgraph import __version__
from cbomgraph.cmd.config import config
from cbomgraph.cmd.generate import cbom as generate
from cbomgraph.cmd.plugin import plugin_disable_cmd, plugin_enable_cmd, plugin_list_cmd


@click.group()
@click.version_option(__version__, "--version", "-v", message="%(version)s")
@click.option(
    "--log-level",
    type=click.Choice(
        ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"],
        case_sensitive=False,
    ),
    default="INFO",
)
def main(log_level="INFO"):
    # Can't change the logging level; need to remove and add a new logger with the desired log level
    logger.remove()
    logger.add(sys.stderr, level=log_level.upper())


@click.command("version")
def version():
    """Print version information."""
    click.echo(__version__)


@main.group("plugin")
def plugin():
    """Manage plugins."""


main.add_command(generate)
main.add_command(version)
main.add_command(config)
main.add_command(plugin)

plugin.add_command(plugin_list_cmd)
plugin.add_command(plugin_enable_cmd)
plugin.add_command(plugin_disable_cmd)


if __name__ == "__main__":
    main()
