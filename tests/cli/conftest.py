"""
Fixtures for CLI tests.
"""

import logging

import pytest

ENV_OVERRIDES = (
    "CROSS_COMPILE",
    "CC",
    "CXX",
    "AR",
    "STRIP",
    "READELF",
    "QEMU",
    "QEMU_LD_PREFIX",
    "CROSSKIT_TARGET",
)

COMMAND_MODULES = (
    "crosskit.cli.commands.build",
    "crosskit.cli.commands.run",
    "crosskit.cli.commands.build_and_run",
    "crosskit.cli.commands.archive",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Settings resolve from defaults, not from the developer's shell."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_logging():
    """CLI.run reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def cli_orchestrator(monkeypatch, orchestrator):
    """Make every command use the fake-toolchain orchestrator."""
    for module in COMMAND_MODULES:
        monkeypatch.setattr(f"{module}.make_orchestrator", lambda settings: orchestrator)
    return orchestrator
