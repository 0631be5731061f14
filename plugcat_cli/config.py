"""Configuration management for plugin registries.

This module provides layered configuration with the following precedence
(highest to lowest):
1. CLI argument
2. Environment variable (PLUGCAT_<KEY>)
3. Registry config file (plugcat.yaml at the registry root)
4. Built-in default

Usage:
    from plugcat_cli.config import get_setting, set_setting, load_settings

    # Resolve a single setting
    plugins_dir = get_setting("plugins_dir", cli_value=cli_dir, registry_path=root)

    # Resolve everything the validator needs
    settings = load_settings(root, jobs=4)

    # Persist a registry-level setting
    set_setting(root, "namespace_dirs", ["specialized", "community"])
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from plugcat_cli.constants import (
    DEFAULT_CATALOG_PATH,
    DEFAULT_NAMESPACE_DIRS,
    DEFAULT_PLUGINS_DIR,
)
from plugcat_cli.errors import ConfigInvalidStructureError, ConfigParseError

# Config file name (at the registry root)
CONFIG_FILENAME = "plugcat.yaml"

# Built-in defaults; also the set of known settings
DEFAULTS: dict[str, Any] = {
    "catalog": DEFAULT_CATALOG_PATH,
    "plugins_dir": DEFAULT_PLUGINS_DIR,
    "schema_dir": None,
    "namespace_dirs": list(DEFAULT_NAMESPACE_DIRS),
    "jobs": 1,
}

KNOWN_SETTINGS: frozenset[str] = frozenset(DEFAULTS)


@dataclass(frozen=True)
class Settings:
    """Resolved settings for one validation run.

    Attributes:
        catalog: Catalog document path, relative to the registry root.
        plugins_dir: Plugins directory, relative to the registry root.
        schema_dir: Directory holding schema documents, or None for bundled schemas.
        namespace_dirs: Category names expanded one extra level during discovery.
        jobs: Number of worker threads used to validate packages.
    """

    catalog: str = DEFAULT_CATALOG_PATH
    plugins_dir: str = DEFAULT_PLUGINS_DIR
    schema_dir: Path | None = None
    namespace_dirs: tuple[str, ...] = DEFAULT_NAMESPACE_DIRS
    jobs: int = 1


def get_config_path(registry_path: Path) -> Path:
    """Get the path to the config file for a registry.

    Args:
        registry_path: Root path of the registry.

    Returns:
        Path to plugcat.yaml
    """
    return registry_path / CONFIG_FILENAME


def load_config(registry_path: Path) -> dict[str, Any]:
    """Load configuration from plugcat.yaml.

    Args:
        registry_path: Root path of the registry.

    Returns:
        Config dictionary. Returns empty dict if file doesn't exist.

    Raises:
        ConfigParseError: If the file is not valid YAML.
        ConfigInvalidStructureError: If the top level is not a mapping.
    """
    config_file = get_config_path(registry_path)

    if not config_file.exists():
        return {}

    content = config_file.read_text()
    if not content.strip():
        return {}

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigParseError(str(config_file), str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigInvalidStructureError(
            str(config_file), f"expected a mapping, got {type(data).__name__}"
        )
    return data


def save_config(registry_path: Path, config: dict[str, Any]) -> None:
    """Save configuration to plugcat.yaml.

    Args:
        registry_path: Root path of the registry.
        config: Config dictionary to save.
    """
    content = yaml.safe_dump(config, default_flow_style=False, sort_keys=False)
    get_config_path(registry_path).write_text(content)


def _get_env_var_name(key: str) -> str:
    """Convert a setting key to environment variable name.

    Args:
        key: Setting key (e.g., "plugins_dir")

    Returns:
        Environment variable name (e.g., "PLUGCAT_PLUGINS_DIR")
    """
    return f"PLUGCAT_{key.upper()}"


def get_setting(
    key: str,
    cli_value: Any | None = None,
    registry_path: Path | None = None,
) -> Any | None:
    """Resolve a setting with full precedence.

    Precedence (highest to lowest):
    1. CLI argument (cli_value)
    2. Environment variable (PLUGCAT_<KEY>)
    3. Registry config file
    4. Built-in default

    Args:
        key: Setting key (e.g., "catalog", "jobs")
        cli_value: Value passed via CLI argument (highest precedence)
        registry_path: Registry root for loading the config file

    Returns:
        Resolved value, or None if not found at any level.
    """
    if cli_value is not None:
        return cli_value

    env_value = os.environ.get(_get_env_var_name(key))
    if env_value is not None:
        return env_value

    if registry_path is not None:
        config = load_config(registry_path)
        if key in config:
            return config[key]

    return DEFAULTS.get(key)


def set_setting(registry_path: Path, key: str, value: Any) -> None:
    """Set a configuration value in the registry config file.

    Args:
        registry_path: Root path of the registry.
        key: Setting key
        value: Value to set
    """
    config = load_config(registry_path)
    config[key] = value
    save_config(registry_path, config)


def unset_setting(registry_path: Path, key: str) -> bool:
    """Remove a configuration value.

    Args:
        registry_path: Root path of the registry.
        key: Setting key to remove

    Returns:
        True if the key existed and was removed, False if key didn't exist.
    """
    config = load_config(registry_path)
    if key not in config:
        return False
    del config[key]
    save_config(registry_path, config)
    return True


def list_settings(registry_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """List all settings with their sources.

    Args:
        registry_path: Registry root for loading the config file.

    Returns:
        Dict mapping setting keys to {"value": ..., "source": ...}
    """
    config = load_config(registry_path) if registry_path else {}
    all_keys = set(config) | KNOWN_SETTINGS

    result: dict[str, dict[str, Any]] = {}
    for key in sorted(all_keys):
        result[key] = {
            "value": get_setting(key, registry_path=registry_path),
            "source": _get_setting_source(key, config),
        }
    return result


def _get_setting_source(key: str, config: dict[str, Any]) -> str:
    """Determine the source of a setting's value: "env", "config" or "default"."""
    if _get_env_var_name(key) in os.environ:
        return "env"
    if key in config:
        return "config"
    return "default"


def _as_names(key: str, value: Any) -> tuple[str, ...]:
    """Coerce a list setting; environment values are comma-separated strings."""
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ConfigInvalidStructureError(CONFIG_FILENAME, f"'{key}' must be a list of names")


def _as_jobs(value: Any) -> int:
    try:
        jobs = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigInvalidStructureError(
            CONFIG_FILENAME, f"'jobs' must be an integer: {value!r}"
        ) from e
    if jobs < 1:
        raise ConfigInvalidStructureError(CONFIG_FILENAME, f"'jobs' must be at least 1: {jobs}")
    return jobs


def load_settings(registry_path: Path, **cli_values: Any) -> Settings:
    """Resolve every known setting for a validation run.

    Args:
        registry_path: Root path of the registry.
        **cli_values: Values passed on the command line; None means "not given".

    Returns:
        Settings with every value resolved and coerced.

    Raises:
        ConfigInvalidStructureError: If a value has the wrong shape.
    """
    unknown = set(cli_values) - KNOWN_SETTINGS
    if unknown:
        raise ConfigInvalidStructureError(CONFIG_FILENAME, f"unknown settings: {sorted(unknown)}")

    def resolve(key: str) -> Any:
        return get_setting(key, cli_value=cli_values.get(key), registry_path=registry_path)

    schema_dir = resolve("schema_dir")
    return Settings(
        catalog=str(resolve("catalog")),
        plugins_dir=str(resolve("plugins_dir")),
        schema_dir=Path(schema_dir) if schema_dir else None,
        namespace_dirs=_as_names("namespace_dirs", resolve("namespace_dirs")),
        jobs=_as_jobs(resolve("jobs")),
    )
