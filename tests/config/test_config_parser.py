"""
Tests for crosskit.yaml parsing.
"""

from pathlib import Path

import pytest

from crosskit.config.parser import (
    ProjectConfig,
    find_config,
    load_config,
    parse_config,
    parse_config_data,
)
from crosskit.core.exceptions import ConfigurationError


FULL_CONFIG = """
target: aarch64-linux-gnu
timeout: 30
toolchain:
  prefix: /opt/gcc-arm/bin/aarch64-none-linux-gnu-
  readelf: readelf
emulator:
  binary: qemu-aarch64-static
  lib_path: /opt/gcc-arm/aarch64-none-linux-gnu/libc
build:
  opt: 2
  link: static
  debug: true
  march: armv8-a
  strip: true
"""


class TestParseConfig:
    def test_full_config(self, tmp_path):
        """All sections are parsed into dataclasses."""
        path = tmp_path / "crosskit.yaml"
        path.write_text(FULL_CONFIG)

        config = parse_config(path)

        assert config.target == "aarch64-linux-gnu"
        assert config.timeout == 30.0
        assert config.toolchain.prefix == "/opt/gcc-arm/bin/aarch64-none-linux-gnu-"
        assert config.toolchain.readelf == "readelf"
        assert config.toolchain.cc is None
        assert config.emulator.binary == "qemu-aarch64-static"
        assert config.emulator.lib_path == "/opt/gcc-arm/aarch64-none-linux-gnu/libc"
        assert config.build.opt == 2
        assert config.build.link == "static"
        assert config.build.debug is True
        assert config.build.march == "armv8-a"
        assert config.build.strip is True
        assert config.source == path

    def test_empty_file(self, tmp_path):
        """An empty file yields defaults."""
        path = tmp_path / "crosskit.yaml"
        path.write_text("")

        config = parse_config(path)

        assert config.target is None
        assert config.build.opt is None
        assert config.build.debug is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            parse_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "crosskit.yaml"
        path.write_text("target: [unterminated\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            parse_config(path)


class TestParseConfigData:
    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError, match="mapping"):
            parse_config_data(["aarch64-linux-gnu"])

    def test_section_not_a_mapping(self):
        with pytest.raises(ConfigurationError, match="'toolchain' must be a mapping"):
            parse_config_data({"toolchain": "aarch64-linux-gnu-"})

    def test_unknown_toolchain_key(self):
        with pytest.raises(ConfigurationError, match="Unknown toolchain key: linker"):
            parse_config_data({"toolchain": {"linker": "ld"}})

    @pytest.mark.parametrize("opt", [4, -1, "fast", True])
    def test_invalid_opt(self, opt):
        with pytest.raises(ConfigurationError, match="build.opt"):
            parse_config_data({"build": {"opt": opt}})

    def test_invalid_link(self):
        with pytest.raises(ConfigurationError, match="build.link"):
            parse_config_data({"build": {"link": "shared"}})

    @pytest.mark.parametrize("timeout", [0, -5, "soon", False])
    def test_invalid_timeout(self, timeout):
        with pytest.raises(ConfigurationError, match="timeout"):
            parse_config_data({"timeout": timeout})

    def test_empty_target(self):
        with pytest.raises(ConfigurationError, match="target"):
            parse_config_data({"target": "  "})

    def test_non_string_tool(self):
        with pytest.raises(ConfigurationError, match="'cc' must be a string"):
            parse_config_data({"toolchain": {"cc": 42}})


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path, monkeypatch):
        """No crosskit.yaml in the working directory means defaults."""
        monkeypatch.chdir(tmp_path)

        assert find_config() is None
        assert load_config() == ProjectConfig()

    def test_finds_file_in_cwd(self, tmp_path, monkeypatch):
        (tmp_path / "crosskit.yaml").write_text("target: arm-linux-gnueabihf\n")
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config.target == "arm-linux-gnueabihf"
        assert config.source.name == "crosskit.yaml"

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "other.yaml")
