"""
Toolchain and emulator settings resolution.

Tool names come from three layers, lowest precedence first:

1. Defaults derived from the target triple (``aarch64-linux-gnu-gcc``,
   ``qemu-aarch64``, ...)
2. The project config file (crosskit.yaml)
3. Environment variables: CROSS_COMPILE, CC, CXX, AR, STRIP, READELF,
   QEMU, QEMU_LD_PREFIX, CROSSKIT_TARGET

Settings are resolved once at startup into immutable values and passed to
the orchestrator. Nothing else in crosskit reads the environment.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from crosskit.config.parser import ProjectConfig
from crosskit.core.exceptions import ConfigurationError
from crosskit.core.platform import normalize_arch

logger = logging.getLogger(__name__)

DEFAULT_TARGET = "aarch64-linux-gnu"

# Tool attribute -> (environment variable, default suffix after the prefix)
_TOOLS = {
    "cc": ("CC", "gcc"),
    "cxx": ("CXX", "g++"),
    "ar": ("AR", "ar"),
    "strip": ("STRIP", "strip"),
    "readelf": ("READELF", "readelf"),
}


@dataclass(frozen=True)
class ToolchainSettings:
    """Resolved cross toolchain binaries for one target."""

    target: str
    cc: str
    cxx: str
    ar: str
    strip: str
    readelf: str

    @property
    def arch(self) -> str:
        """Canonical architecture of the target triple."""
        return arch_from_triple(self.target)


@dataclass(frozen=True)
class EmulatorSettings:
    """Resolved user-mode emulator settings."""

    binary: str
    lib_path: Optional[str] = None


@dataclass(frozen=True)
class Settings:
    """Everything the orchestrator needs from the environment."""

    toolchain: ToolchainSettings
    emulator: EmulatorSettings
    timeout: Optional[float] = None


def arch_from_triple(triple: str) -> str:
    """
    Extract the canonical architecture from a target triple.

    Example:
        >>> arch_from_triple('aarch64-linux-gnu')
        'aarch64'
        >>> arch_from_triple('arm-linux-gnueabihf')
        'arm'
    """
    triple = triple.strip()
    if not triple:
        raise ConfigurationError("Target triple must not be empty")
    return normalize_arch(triple.split("-", 1)[0])


def default_emulator(triple: str) -> str:
    """
    Name of the qemu user-mode emulator for a target triple.

    Example:
        >>> default_emulator('aarch64-linux-gnu')
        'qemu-aarch64'
    """
    machine = triple.split("-", 1)[0].lower()
    arch = normalize_arch(machine)
    if arch == "arm":
        return "qemu-arm"
    if arch == "i386":
        return "qemu-i386"
    if arch == "riscv":
        return "qemu-riscv64" if "64" in machine else "qemu-riscv32"
    if arch in ("ppc", "ppc64"):
        return "qemu-" + machine.replace("powerpc", "ppc")
    return f"qemu-{machine}"


def resolve_settings(
    config: Optional[ProjectConfig] = None,
    environ: Optional[Mapping[str, str]] = None,
    target: Optional[str] = None,
) -> Settings:
    """
    Resolve toolchain and emulator settings.

    Args:
        config: Parsed project config (defaults if None)
        environ: Environment mapping (os.environ if None)
        target: Explicit target triple, overriding config and environment

    Returns:
        Immutable Settings

    Raises:
        ConfigurationError: If the resolved target triple is empty
    """
    config = config or ProjectConfig()
    environ = os.environ if environ is None else environ

    target = (
        target
        or environ.get("CROSSKIT_TARGET")
        or config.target
        or DEFAULT_TARGET
    )
    arch_from_triple(target)

    prefix = environ.get("CROSS_COMPILE") or config.toolchain.prefix
    if prefix is None:
        prefix = f"{target}-"

    tools = {}
    for attr, (env_var, suffix) in _TOOLS.items():
        value = environ.get(env_var) or getattr(config.toolchain, attr)
        tools[attr] = value or f"{prefix}{suffix}"

    toolchain = ToolchainSettings(target=target, **tools)

    emulator = EmulatorSettings(
        binary=environ.get("QEMU") or config.emulator.binary or default_emulator(target),
        lib_path=environ.get("QEMU_LD_PREFIX") or config.emulator.lib_path,
    )

    logger.debug(f"Resolved toolchain: {toolchain}")
    logger.debug(f"Resolved emulator: {emulator}")
    return Settings(toolchain=toolchain, emulator=emulator, timeout=config.timeout)
