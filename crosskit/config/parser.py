"""YAML configuration parser for crosskit.

This module provides parsing and validation for crosskit.yaml configuration files.

Example crosskit.yaml:

    target: aarch64-linux-gnu
    timeout: 60
    toolchain:
      prefix: aarch64-linux-gnu-
      readelf: readelf
    emulator:
      binary: qemu-aarch64
      lib_path: /usr/aarch64-linux-gnu
    build:
      opt: 2
      link: static
      debug: false
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from crosskit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "crosskit.yaml"

_TOOL_KEYS = ("prefix", "cc", "cxx", "ar", "strip", "readelf")
_LINK_MODES = ("static", "dynamic")


@dataclass
class ToolchainConfig:
    """Toolchain binary overrides from the config file."""

    prefix: Optional[str] = None
    cc: Optional[str] = None
    cxx: Optional[str] = None
    ar: Optional[str] = None
    strip: Optional[str] = None
    readelf: Optional[str] = None


@dataclass
class EmulatorConfig:
    """Emulator settings from the config file."""

    binary: Optional[str] = None
    lib_path: Optional[str] = None


@dataclass
class BuildDefaults:
    """Default build options from the config file."""

    opt: Optional[int] = None
    link: Optional[str] = None  # 'static', 'dynamic'
    debug: bool = False
    march: Optional[str] = None
    strip: bool = False


@dataclass
class ProjectConfig:
    """Complete crosskit project configuration."""

    target: Optional[str] = None
    timeout: Optional[float] = None  # bounded wait per subprocess, seconds
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)
    emulator: EmulatorConfig = field(default_factory=EmulatorConfig)
    build: BuildDefaults = field(default_factory=BuildDefaults)
    source: Optional[Path] = None


def find_config(start: Optional[Path] = None) -> Optional[Path]:
    """
    Locate crosskit.yaml in a directory.

    Args:
        start: Directory to look in (default: current directory)

    Returns:
        Path to the config file, or None if absent
    """
    start = start or Path.cwd()
    candidate = start / DEFAULT_CONFIG_NAME
    return candidate if candidate.is_file() else None


def load_config(config_path: Optional[Path] = None) -> ProjectConfig:
    """
    Load project configuration.

    Args:
        config_path: Explicit config file; when None, crosskit.yaml in the
            current directory is used if present

    Returns:
        Parsed configuration (all defaults when no file is found)

    Raises:
        ConfigurationError: If an explicit file is missing or any file is invalid
    """
    if config_path is None:
        config_path = find_config()
        if config_path is None:
            logger.debug("No crosskit.yaml found, using defaults")
            return ProjectConfig()
    return parse_config(Path(config_path))


def parse_config(config_path: Path) -> ProjectConfig:
    """
    Parse crosskit.yaml configuration file.

    Args:
        config_path: Path to crosskit.yaml

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigurationError: If configuration is invalid
    """
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading configuration from {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}

    config = parse_config_data(data)
    config.source = config_path
    return config


def parse_config_data(data: Any) -> ProjectConfig:
    """
    Validate and convert raw YAML data.

    Raises:
        ConfigurationError: If the data does not match the schema
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a mapping")

    target = data.get("target")
    if target is not None and (not isinstance(target, str) or not target.strip()):
        raise ConfigurationError("'target' must be a non-empty string")

    toolchain = _section(data, "toolchain")
    for key in toolchain:
        if key not in _TOOL_KEYS:
            raise ConfigurationError(
                f"Unknown toolchain key: {key}. Valid keys: {', '.join(_TOOL_KEYS)}"
            )

    timeout = data.get("timeout")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigurationError("'timeout' must be a positive number")

    emulator = _section(data, "emulator")

    build = _section(data, "build")
    opt = build.get("opt")
    if opt is not None and (isinstance(opt, bool) or opt not in (0, 1, 2, 3)):
        raise ConfigurationError(f"Invalid 'build.opt': {opt}. Must be 0, 1, 2 or 3")

    link = build.get("link")
    if link is not None and link not in _LINK_MODES:
        raise ConfigurationError(
            f"Invalid 'build.link': {link}. Must be one of: {', '.join(_LINK_MODES)}"
        )

    return ProjectConfig(
        target=target,
        timeout=float(timeout) if timeout is not None else None,
        toolchain=ToolchainConfig(**{k: _str_or_none(toolchain, k) for k in _TOOL_KEYS}),
        emulator=EmulatorConfig(
            binary=_str_or_none(emulator, "binary"),
            lib_path=_str_or_none(emulator, "lib_path"),
        ),
        build=BuildDefaults(
            opt=opt,
            link=link,
            debug=bool(build.get("debug", False)),
            march=_str_or_none(build, "march"),
            strip=bool(build.get("strip", False)),
        ),
    )


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{name}' must be a mapping")
    return value


def _str_or_none(section: Dict[str, Any], key: str) -> Optional[str]:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"'{key}' must be a string")
    return value
