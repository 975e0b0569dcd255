"""
Tests for toolchain command construction.
"""

import pytest

from crosskit.build.compiler import (
    archive_command,
    compile_command,
    select_compiler,
    strip_command,
    sysroot_command,
)
from crosskit.build.models import BuildConfiguration, LinkMode, OptimizationLevel
from crosskit.core.exceptions import ConfigurationError


def _config(**overrides):
    options = {
        "target": "aarch64-linux-gnu",
        "sources": ("hello.c",),
        "output": "hello",
    }
    options.update(overrides)
    return BuildConfiguration(**options)


class TestCompileCommand:
    def test_minimal(self, toolchain_settings):
        """Dynamic -O0 build passes only the optimization flag."""
        cmd = compile_command(toolchain_settings, _config())

        assert cmd == ["aarch64-linux-gnu-gcc", "-O0", "hello.c", "-o", "hello"]

    def test_static_standard(self, toolchain_settings):
        cmd = compile_command(
            toolchain_settings,
            _config(optimization=OptimizationLevel.STANDARD, link_mode=LinkMode.STATIC),
        )

        assert cmd == ["aarch64-linux-gnu-gcc", "-O2", "-static", "hello.c", "-o", "hello"]

    def test_flag_order(self, toolchain_settings):
        """-march, -O, -g and -static appear in a fixed order before sources."""
        cmd = compile_command(
            toolchain_settings,
            _config(
                sources=("main.c", "util.c"),
                output="out/app",
                optimization=3,
                link_mode="static",
                debug=True,
                arch_flag="armv8.2-a",
            ),
        )

        assert cmd == [
            "aarch64-linux-gnu-gcc",
            "-march=armv8.2-a",
            "-O3",
            "-g",
            "-static",
            "main.c",
            "util.c",
            "-o",
            "out/app",
        ]

    def test_cxx_sources_use_cxx_compiler(self, toolchain_settings):
        config = _config(sources=("main.cpp", "util.c"))

        assert select_compiler(toolchain_settings, config) == "aarch64-linux-gnu-g++"
        assert compile_command(toolchain_settings, config)[0] == "aarch64-linux-gnu-g++"


class TestAuxiliaryCommands:
    def test_strip(self, toolchain_settings):
        assert strip_command(toolchain_settings, "hello") == [
            "aarch64-linux-gnu-strip",
            "hello",
        ]

    def test_sysroot(self, toolchain_settings):
        assert sysroot_command(toolchain_settings) == [
            "aarch64-linux-gnu-gcc",
            "-print-sysroot",
        ]

    def test_archive(self, toolchain_settings):
        cmd = archive_command(toolchain_settings, ["a.o", "b.o"], "libutil.a")

        assert cmd == ["aarch64-linux-gnu-ar", "rcs", "libutil.a", "a.o", "b.o"]

    def test_archive_without_objects(self, toolchain_settings):
        with pytest.raises(ConfigurationError, match="object file"):
            archive_command(toolchain_settings, [], "libutil.a")

    def test_archive_without_output(self, toolchain_settings):
        with pytest.raises(ConfigurationError, match="output"):
            archive_command(toolchain_settings, ["a.o"], "")
