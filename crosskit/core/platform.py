"""
Host platform detection for crosskit.

Detects the host OS, CPU architecture and Linux distribution, and whether
a foreign architecture's dynamic linker is installed system-wide
(multiarch), which decides if dynamically linked target binaries can run
under the emulator without a library-path override.

Usage:
    from crosskit.core.platform import detect_platform, has_multiarch_support

    info = detect_platform()
    print(info.platform_string())
    if has_multiarch_support("aarch64"):
        print("aarch64 dynamic linker installed")
"""

import functools
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import distro


# Dynamic linker each glibc target requests, relative to the filesystem root
INTERPRETERS = {
    "aarch64": "lib/ld-linux-aarch64.so.1",
    "arm": "lib/ld-linux-armhf.so.3",
    "riscv": "lib/ld-linux-riscv64-lp64d.so.1",
    "x86_64": "lib64/ld-linux-x86-64.so.2",
    "i386": "lib/ld-linux.so.2",
}

# Debian architecture names, used for cross libc package hints
_DEBIAN_ARCHES = {
    "aarch64": "arm64",
    "arm": "armhf",
    "riscv": "riscv64",
    "x86_64": "amd64",
    "i386": "i386",
}

_BINFMT_DIR = Path("/proc/sys/fs/binfmt_misc")


@dataclass
class PlatformInfo:
    """
    Host platform information.

    Attributes:
        os: Operating system ('linux', 'macos', 'windows')
        arch: Canonical CPU architecture ('x86_64', 'aarch64', 'arm', ...)
        distribution: Linux distribution id ('ubuntu', 'fedora', ...) or empty
    """

    os: str
    arch: str
    distribution: str

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x86_64').

        Example:
            >>> PlatformInfo('linux', 'x86_64', 'ubuntu').platform_string()
            'linux-x86_64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        parts = [self.platform_string()]
        if self.distribution:
            parts.append(f"({self.distribution})")
        return " ".join(parts)


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.
    """
    os_name = _detect_os()
    return PlatformInfo(
        os=os_name,
        arch=normalize_arch(platform.machine()),
        distribution=distro.id() if os_name == "linux" else "",
    )


def _detect_os() -> str:
    system = platform.system().lower()
    if system == "darwin":
        return "macos"
    return system


def normalize_arch(machine: str) -> str:
    """
    Normalize a machine or triple architecture name.

    Args:
        machine: Name such as 'x86_64', 'amd64', 'arm64', 'armv7l'

    Returns:
        Canonical name: 'x86_64', 'aarch64', 'arm', 'riscv', 'i386', 'ppc',
        'ppc64', 'mips', or the lowercased input when unknown

    Example:
        >>> normalize_arch('arm64')
        'aarch64'
    """
    machine = machine.lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x86_64"
    elif machine in ("aarch64", "arm64", "aarch64_be"):
        return "aarch64"
    elif machine in ("i386", "i486", "i586", "i686", "x86"):
        return "i386"
    elif machine.startswith("arm"):
        return "arm"
    elif machine.startswith("riscv"):
        return "riscv"
    elif machine.startswith(("powerpc64", "ppc64")):
        return "ppc64"
    elif machine in ("powerpc", "ppc", "powerpcle", "ppcle"):
        return "ppc"
    elif machine.startswith("mips"):
        return "mips"
    return machine


def interpreter_for(arch: str) -> Optional[str]:
    """Return the default absolute dynamic linker path for an architecture."""
    rel = INTERPRETERS.get(normalize_arch(arch))
    return f"/{rel}" if rel else None


def has_multiarch_support(arch: str, root: Path = Path("/")) -> bool:
    """
    Check whether the target's dynamic linker is installed system-wide.

    Args:
        arch: Target architecture (any name accepted by normalize_arch)
        root: Filesystem root to check (for testing)

    Returns:
        True if the dynamic linker exists under root
    """
    rel = INTERPRETERS.get(normalize_arch(arch))
    if rel is None:
        return False
    return (root / rel).exists()


def has_binfmt_handler(emulator: str, binfmt_dir: Path = _BINFMT_DIR) -> bool:
    """Check whether a binfmt_misc handler is registered for the emulator."""
    name = Path(emulator).name
    return (binfmt_dir / name).exists()


def cross_libc_package(arch: str, info: Optional[PlatformInfo] = None) -> Optional[str]:
    """
    Suggest the distribution package that provides the target's libc.

    Args:
        arch: Target architecture
        info: Host platform info (auto-detected if None)

    Returns:
        Package name, or None when no suggestion is known for the host
    """
    info = info or detect_platform()
    debian_arch = _DEBIAN_ARCHES.get(normalize_arch(arch))
    if debian_arch is None:
        return None

    if info.distribution in ("debian", "ubuntu", "linuxmint", "pop"):
        return f"libc6-{debian_arch}-cross"
    if info.distribution in ("fedora", "rhel", "centos"):
        return f"sysroot-{normalize_arch(arch)}-fc-glibc"
    return None
