# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import os
import platform
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Union

import tomlkit
from loguru import logger

from cbomgraph.idgen import DEFAULT_SEED

CONFIG_FILE_NAME = "config.toml"
CORE_SECTION = "core"

# Options of the [core] section and the values used when the file doesn't set them
CORE_DEFAULTS: Dict[str, Any] = {
    "output_format": "cyclonedx",
    "input_format": "cyclonedx",
    "include_public_keys": False,
    "id_seed": DEFAULT_SEED,
    "validate_output": False,
    "disable_plugins": [],
}


def default_config_root() -> Path:
    """Returns the per-user directory that holds application config directories."""
    if platform.system() == "Windows":
        return Path(os.getenv("APPDATA", str(Path("~\\AppData\\Roaming")))).expanduser()
    return Path(os.getenv("XDG_CONFIG_HOME", str(Path("~/.config")))).expanduser()


def _plain(value: Any) -> Any:
    # tomlkit wraps values in items that keep their formatting
    return value.unwrap() if hasattr(value, "unwrap") else value


def _matches_default(value: Any, default: Any) -> bool:
    # bool is a subclass of int, so a seed of `true` has to be caught explicitly
    if isinstance(default, bool) or isinstance(value, bool):
        return isinstance(value, bool) and isinstance(default, bool)
    return isinstance(value, type(default))


class ConfigManager:
    """Per-application settings, kept in ``<config root>/<app_name>/config.toml``.

    There is one instance per application name. The file is read once when the
    instance is created, so a scan sees the same settings from start to finish;
    :meth:`reload` picks up later edits. Writing goes through tomlkit so
    comments and layout in the user's file survive.
    """

    _instances: Dict[str, "ConfigManager"] = {}
    _lock = Lock()

    def __new__(
        cls, app_name: str = "cbomgraph", config_dir: Optional[Union[str, Path]] = None
    ) -> "ConfigManager":
        with cls._lock:
            instance = cls._instances.get(app_name)
            if instance is None:
                instance = super().__new__(cls)
                instance._setup(app_name, config_dir)
                cls._instances[app_name] = instance
            return instance

    def _setup(self, app_name: str, config_dir: Optional[Union[str, Path]]) -> None:
        self.app_name = app_name
        root = Path(config_dir).expanduser() if config_dir else default_config_root()
        self.config_file_path = root / app_name / CONFIG_FILE_NAME
        self.config = tomlkit.document()
        self.reload()

    def reload(self) -> None:
        """Re-reads the config file, if there is one."""
        if self.config_file_path.exists():
            with open(self.config_file_path, "r") as configfile:
                self.config = tomlkit.parse(configfile.read())
            logger.debug(f"Loaded configuration from {self.config_file_path}")

    def get(self, section: str, option: str, fallback: Optional[Any] = None) -> Any:
        """Returns ``option`` from ``section``, or ``fallback`` if either is missing."""
        return self.config.get(section, {}).get(option, fallback)

    def get_core(self, option: str) -> Any:
        """Returns a [core] option as a plain Python value.

        A single string stored for a list option (``cbomgraph config
        core.disable_plugins NAME`` stores one) comes back as a one-item list.
        Any other value whose type doesn't match the built-in default (e.g. a
        string ``id_seed``) is reported as a warning and the default is used
        instead.
        """
        default = CORE_DEFAULTS.get(option)
        if isinstance(default, list):
            default = list(default)
        value = _plain(self.get(CORE_SECTION, option, default))
        if isinstance(default, list) and isinstance(value, str):
            value = [value]
        if default is not None and not _matches_default(value, default):
            logger.warning(
                f"Ignoring {CORE_SECTION}.{option} = {value!r} in {self.config_file_path}, "
                f"expected a {type(default).__name__}"
            )
            return default
        return value

    def set(self, section: str, option: str, value: Any) -> None:
        """Stores a value and writes the config file right away."""
        if section not in self.config:
            self.config[section] = tomlkit.table()
        self.config[section][option] = value
        self._save()

    def set_core(self, option: str, value: Any) -> None:
        self.set(CORE_SECTION, option, value)

    def _save(self) -> None:
        self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file_path, "w") as configfile:
            configfile.write(tomlkit.dumps(self.config))

    def __getitem__(self, key: str) -> Any:
        """Returns a whole table, or None if the file doesn't have it."""
        return self.config.get(key)

    @classmethod
    def delete_instance(cls, app_name: str) -> None:
        """Forgets the instance for ``app_name``; the next one re-reads the file."""
        with cls._lock:
            cls._instances.pop(app_name, None)
