# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from typing import List

import click

from cbomgraph.configmanager import ConfigManager
from cbomgraph.plugin.manager import get_plugin_manager, print_plugins

BLOCKED_PLUGINS_OPTION = "disable_plugins"


def _blocked_plugins(config_manager: ConfigManager) -> List[str]:
    return config_manager.get_core(BLOCKED_PLUGINS_OPTION)


@click.command(name="list")
def plugin_list_cmd():
    """Lists plugins."""
    pm = get_plugin_manager()
    print_plugins(pm)

    current_blocked_plugins = _blocked_plugins(ConfigManager())
    print("\nDISABLED PLUGINS")
    if not current_blocked_plugins:
        print("\tThere are no disabled plugins.")
    else:
        for disabled_plugin in current_blocked_plugins:
            print(f"\tname: {disabled_plugin}")


@click.command(name="enable")
@click.argument("plugin_names", nargs=-1)
def plugin_enable_cmd(plugin_names):
    """Enables one or more plugins."""
    if not plugin_names:
        raise click.UsageError("At least one plugin name must be specified.")
    config_manager = ConfigManager()
    current_blocked_plugins = [
        name for name in _blocked_plugins(config_manager) if name not in plugin_names
    ]
    config_manager.set_core(BLOCKED_PLUGINS_OPTION, current_blocked_plugins)
    click.echo(f"Updated blocked plugins: {current_blocked_plugins}")


@click.command(name="disable")
@click.argument("plugin_names", nargs=-1)
def plugin_disable_cmd(plugin_names):
    """Disables one or more plugins."""
    if not plugin_names:
        raise click.UsageError("At least one plugin name must be specified.")
    config_manager = ConfigManager()
    current_blocked_plugins = _blocked_plugins(config_manager)
    for plugin_name in plugin_names:
        if plugin_name not in current_blocked_plugins:
            current_blocked_plugins.append(plugin_name)
    config_manager.set_core(BLOCKED_PLUGINS_OPTION, current_blocked_plugins)
    click.echo(f"Updated blocked plugins: {current_blocked_plugins}")
