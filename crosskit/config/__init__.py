"""Configuration module for crosskit.

This module provides YAML parsing for crosskit.yaml and resolution of
toolchain/emulator settings from defaults, config file and environment.
"""

from crosskit.config.parser import (
    ToolchainConfig,
    EmulatorConfig,
    BuildDefaults,
    ProjectConfig,
    DEFAULT_CONFIG_NAME,
    find_config,
    load_config,
    parse_config,
    parse_config_data,
)
from crosskit.config.settings import (
    DEFAULT_TARGET,
    ToolchainSettings,
    EmulatorSettings,
    Settings,
    arch_from_triple,
    default_emulator,
    resolve_settings,
)

__all__ = [
    "ToolchainConfig",
    "EmulatorConfig",
    "BuildDefaults",
    "ProjectConfig",
    "DEFAULT_CONFIG_NAME",
    "find_config",
    "load_config",
    "parse_config",
    "parse_config_data",
    "DEFAULT_TARGET",
    "ToolchainSettings",
    "EmulatorSettings",
    "Settings",
    "arch_from_triple",
    "default_emulator",
    "resolve_settings",
]
