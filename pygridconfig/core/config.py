"""Manages the settings of the gridcfg tool.

This module is responsible for loading and managing the tool's own settings:
display limits, network timeouts, the default source format. It aggregates
settings from default values, TOML files, and environment variables, and
stores them in a `GridConfig` so they are addressed with the same dotted
paths as any other configuration.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Dict, Any, List, Optional

try:
    import tomllib  # Available in Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for Python versions < 3.11

from .grid_config import GridConfig

logger = logging.getLogger(__name__)

# The default path for the user-specific global settings file.
USER_CONFIG_PATH = Path.home() / ".config" / "gridcfg" / "config.toml"

# The name of the project-specific settings file, looked up in the cwd.
PROJECT_CONFIG_NAME = "gridcfg.toml"


class Config:
    """Handles the settings of the gridcfg tool.

    This class loads settings from multiple sources with a defined
    precedence:
    1.  Default values (lowest precedence).
    2.  Project-specific `gridcfg.toml` file.
    3.  User-level `~/.config/gridcfg/config.toml` file.
    4.  A custom settings file specified at runtime.
    5.  Environment variables (highest precedence).

    Attributes:
        DEFAULT_CONFIG (Dict[str, Any]): A dictionary containing the default
            settings.
        settings (GridConfig): The merged settings.
    """

    DEFAULT_CONFIG = {
        "default_format": "auto",  # Or a format name such as "yaml".
        "timeout": 30,  # Network request timeout in seconds.
        "retries": 3,
        "verbose": False,
        "display": {
            "limit": 10,  # Entries shown before truncating; 0 shows all.
            "colors": True,
        },
    }

    ENV_MAPPING = {
        "GRIDCFG_DEFAULT_FORMAT": "default_format",
        "GRIDCFG_TIMEOUT": "timeout",
        "GRIDCFG_RETRIES": "retries",
        "GRIDCFG_VERBOSE": "verbose",
        "GRIDCFG_DISPLAY_LIMIT": "display.limit",
        "GRIDCFG_COLORS": "display.colors",
    }

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """Initializes the settings manager.

        Args:
            config_path (Optional[Path]): An optional path to a specific
                settings file to load. If provided, the default file
                locations are not read.
        """
        self.settings = GridConfig(copy.deepcopy(self.DEFAULT_CONFIG))
        self._load_config(config_path)

    def _load_config(self, config_path: Optional[Path] = None) -> None:
        if config_path:
            self._load_file_config(Path(config_path))
        else:
            self._load_default_configs()

        self._load_env_config()

    def _load_default_configs(self) -> None:
        """Loads settings from standard locations if they exist."""
        project_config = Path.cwd() / PROJECT_CONFIG_NAME
        if project_config.exists():
            self._load_file_config(project_config)

        if USER_CONFIG_PATH.exists():
            self._load_file_config(USER_CONFIG_PATH)

    def _merge_configs(self, base: Dict[str, Any], new: Dict[str, Any]) -> None:
        """Recursively merges a new settings dict into a base dict.

        Args:
            base (Dict[str, Any]): The base settings dictionary.
            new (Dict[str, Any]): The new settings to merge in.
        """
        for key, value in new.items():
            if isinstance(value, dict) and key in base and isinstance(base[key], dict):
                self._merge_configs(base[key], value)
            else:
                base[key] = value

    def _find_shape_conflicts(self, base: Dict[str, Any], new: Dict[str, Any], prefix: str = "") -> List[str]:
        """Finds the keys of `new` that would turn a group of `base` into a
        plain value, or a plain value into a group.

        Returns:
            List[str]: The dotted paths of the conflicting keys.
        """
        conflicts = []
        for key, value in new.items():
            if key not in base:
                continue
            path = f"{prefix}{key}"
            if isinstance(base[key], dict) and isinstance(value, dict):
                conflicts.extend(self._find_shape_conflicts(base[key], value, f"{path}."))
            elif isinstance(base[key], dict) or isinstance(value, dict):
                conflicts.append(path)
        return conflicts

    def _load_file_config(self, config_path: Path) -> None:
        """Loads and merges settings from a TOML file.

        Unreadable or malformed files are skipped with a warning, as are files
        that give a table where a single value belongs, or the other way
        round.

        Args:
            config_path (Path): The path to the TOML settings file.
        """
        try:
            with open(config_path, "rb") as f:
                file_config = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Could not load settings from {config_path}: {e}")
            return
        conflicts = self._find_shape_conflicts(self.settings.as_dict(), file_config)
        if conflicts:
            logger.warning(f"Ignoring settings from {config_path}: wrong type for {', '.join(conflicts)}")
            return
        self._merge_configs(self.settings.as_dict(), file_config)
        logger.debug(f"Loaded settings from {config_path}")

    def _load_env_config(self) -> None:
        """Loads and merges settings from environment variables."""
        for env_var, config_key in self.ENV_MAPPING.items():
            value = os.getenv(env_var)
            if value is not None:
                self._set_nested_key(config_key, value)

    def _set_nested_key(self, key_path: str, value: str) -> None:
        """Sets a setting from its string form, casting it by key.

        Args:
            key_path (str): The dot-separated key (e.g., "display.limit").
            value (str): The string value from the environment variable.
        """
        leaf_key = key_path.split('.')[-1]

        if leaf_key in ["verbose", "colors"]:
            self.set(key_path, value.lower() in ("true", "1", "yes", "on"))
        elif leaf_key in ["timeout", "retries", "limit"]:
            try:
                self.set(key_path, int(value))
            except ValueError:
                logger.warning(f"Invalid integer value for {leaf_key}: {value}")
        else:
            self.set(key_path, value)

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieves a setting using a dot-separated key.

        Args:
            key (str): The dot-separated key (e.g., "display.limit").
            default (Any): The default value to return if the key is not found.

        Returns:
            Any: The setting or the default.
        """
        return self.settings.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Sets a setting in memory.

        Args:
            key (str): The dot-separated key (e.g., "display.limit").
            value (Any): The value to set.
        """
        self.settings.set(key, value)

    def display_limit(self) -> Optional[int]:
        """Returns the number of entries to display, or None for no limit."""
        limit = self.get("display.limit", 10)
        return limit if isinstance(limit, int) and limit > 0 else None

    def __str__(self) -> str:
        return f"Config({self.settings.as_dict()})"
