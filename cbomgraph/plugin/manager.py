# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from typing import Any, Optional

import pluggy
from loguru import logger

from cbomgraph.configmanager import ConfigManager
from cbomgraph.errors import DocumentAssemblyError
from cbomgraph.plugin import hookspecs


def _register_plugins(pm: pluggy.PluginManager) -> None:
    # pylint: disable=import-outside-toplevel
    # don't want all these imports as part of the file-level scope
    from cbomgraph.filetypeid import id_extension
    from cbomgraph.infoextractors import certificate_file
    from cbomgraph.input_readers import cyclonedx_reader
    from cbomgraph.output import cyclonedx_writer

    internal_plugins = (
        id_extension,
        certificate_file,
        cyclonedx_reader,
        cyclonedx_writer,
    )
    for plugin in internal_plugins:
        pm.register(plugin)


def set_blocked_plugins(pm: pluggy.PluginManager) -> None:
    """Gets the current list of blocked plugins from the config manager, then blocks and unregisters them with the plugin manager."""
    config_manager = ConfigManager()

    current_blocked_plugins = config_manager.get_core("disable_plugins")
    for plugin_name in current_blocked_plugins:
        if pm.is_blocked(plugin_name):
            logger.info(f"Plugin '{plugin_name}' is already disabled.")
            continue

        plugin = pm.unregister(name=plugin_name)
        if plugin is None:
            logger.info(f"Disabled plugin '{plugin_name}' not found.")
            continue

        # Block the plugin to prevent future registration
        pm.set_blocked(plugin_name)


def get_plugin_manager() -> pluggy.PluginManager:
    pm = pluggy.PluginManager("cbomgraph")
    pm.add_hookspecs(hookspecs)
    pm.load_setuptools_entrypoints("cbomgraph")
    _register_plugins(pm)
    set_blocked_plugins(pm)
    pm.check_pending()
    return pm


def is_hook_implemented(pm: pluggy.PluginManager, plugin: object, hook_name: str) -> bool:
    """
    Checks if a specific hook is implemented by a given plugin.

    Args:
        pm (pluggy.PluginManager): The plugin manager instance.
        plugin (object): The plugin object to check.
        hook_name (str): The name of the hook to check for implementation.

    Returns:
        bool: True if the hook is implemented by the plugin, False otherwise.
    """
    hook_callers = pm.get_hookcallers(plugin)
    if hook_callers:
        for hook_caller in hook_callers:
            if hook_caller.name == hook_name:
                return True
    return False


def print_plugins(pm: pluggy.PluginManager) -> None:
    print("PLUGINS")
    for plugin in pm.get_plugins():
        plugin_name = pm.get_name(plugin) if pm.get_name(plugin) else ""
        print(f"\t> name: {plugin_name}")
        print(f"\t  canonical name: {pm.get_canonical_name(plugin)}")

        short_name = None
        if is_hook_implemented(pm, plugin, "short_name"):
            short_name = plugin.short_name()

        print(f"\t  short name: {short_name}\n")


def find_io_plugin(pm: pluggy.PluginManager, io_format: str, function_name: str) -> Any:
    """
    Finds and returns a plugin that matches the specified input/output format and has the desired function.

    Args:
        pm (pluggy.PluginManager): The plugin manager instance.
        io_format (str): The registered name or short name of the plugin.
        function_name (str): The name of the function the plugin must provide.

    Returns:
        Any: The plugin that matches `io_format` and implements `function_name`.

    Raises:
        DocumentAssemblyError: If no plugin matching the criteria is found.
    """
    found_plugin: Optional[Any] = pm.get_plugin(io_format)

    if found_plugin is None:
        for plugin in pm.get_plugins():
            if not is_hook_implemented(pm, plugin, "short_name"):
                continue
            if plugin.short_name().lower() == io_format.lower() and hasattr(plugin, function_name):
                found_plugin = plugin
                break

    if found_plugin is None:
        raise DocumentAssemblyError(f'No "{function_name}" plugin for format "{io_format}" found')

    return found_plugin
