"""
Binary header inspection.

Reads the machine type and requested dynamic linker of an ELF binary by
running the toolchain's readelf and parsing its text output.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from crosskit.core.exceptions import ArchitectureMismatch, ToolchainFailure
from crosskit.core.platform import normalize_arch
from crosskit.core.process import CommandNotFound, CommandRunner, CommandTimeout

logger = logging.getLogger(__name__)

_MACHINE_RE = re.compile(r"^\s*Machine:\s*(.+?)\s*$", re.MULTILINE)
_INTERPRETER_RE = re.compile(r"\[Requesting program interpreter:\s*([^\]]+?)\s*\]")

# readelf "Machine:" descriptions -> canonical architecture
MACHINE_NAMES = {
    "aarch64": "aarch64",
    "arm": "arm",
    "advanced micro devices x86-64": "x86_64",
    "intel 80386": "i386",
    "risc-v": "riscv",
    "powerpc": "ppc",
    "powerpc64": "ppc64",
    "mips r3000": "mips",
    "ibm s/390": "s390x",
    "loongarch": "loongarch64",
}


def parse_machine(header: str) -> Optional[str]:
    """
    Extract the canonical architecture from `readelf -h` output.

    Args:
        header: readelf -h output

    Returns:
        Canonical architecture, or None when no Machine field is present

    Example:
        >>> parse_machine("  Machine:                           AArch64")
        'aarch64'
    """
    match = _MACHINE_RE.search(header)
    if not match:
        return None
    description = match.group(1).strip()
    return MACHINE_NAMES.get(description.lower(), normalize_arch(description))


def parse_interpreter(program_headers: str) -> Optional[str]:
    """Extract the requested program interpreter from `readelf -l` output."""
    match = _INTERPRETER_RE.search(program_headers)
    return match.group(1) if match else None


class ArchitectureInspector:
    """Inspect binaries with readelf."""

    def __init__(self, readelf: str, runner: Optional[CommandRunner] = None):
        """
        Initialize inspector.

        Args:
            readelf: readelf executable name or path
            runner: Command runner (default: CommandRunner())
        """
        self.readelf = readelf
        self.runner = runner or CommandRunner()

    def _readelf(self, flag: str, path: str):
        try:
            return self.runner.run([self.readelf, flag, path])
        except CommandNotFound as e:
            raise ToolchainFailure(
                f"Inspection tool not found: {self.readelf}", command=[self.readelf]
            ) from e
        except CommandTimeout as e:
            raise ToolchainFailure(
                str(e), stdout=e.stdout, stderr=e.stderr, command=e.args_list
            ) from e

    def machine(self, path: str, expected: str = "") -> str:
        """
        Read the architecture declared in a binary's header.

        Args:
            path: Binary to inspect
            expected: Expected architecture (used in error reports)

        Returns:
            Canonical architecture name

        Raises:
            ArchitectureMismatch: If the header cannot be read or parsed
        """
        if not Path(path).is_file():
            raise ArchitectureMismatch(str(path), expected, stderr=f"{path}: No such file")

        result = self._readelf("-h", str(path))
        if not result.ok:
            raise ArchitectureMismatch(
                str(path),
                expected,
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                command=result.args,
            )

        machine = parse_machine(result.stdout)
        if machine is None:
            raise ArchitectureMismatch(
                str(path),
                expected,
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                command=result.args,
            )
        return machine

    def interpreter(self, path: str) -> Optional[str]:
        """
        Read the dynamic linker a binary requests.

        Returns:
            Interpreter path, or None for static binaries or unreadable files
        """
        if not Path(path).is_file():
            return None
        try:
            result = self._readelf("-l", str(path))
        except ToolchainFailure as e:
            logger.debug(f"Could not read program headers of {path}: {e}")
            return None
        if not result.ok:
            return None
        return parse_interpreter(result.stdout)

    def verify(self, path: str, expected: str) -> str:
        """
        Check that a binary reports the expected architecture.

        Returns:
            The architecture found

        Raises:
            ArchitectureMismatch: If the architectures differ
        """
        expected_arch = normalize_arch(expected)
        actual = self.machine(path, expected_arch)
        if actual != expected_arch:
            raise ArchitectureMismatch(str(path), expected_arch, actual)
        logger.debug(f"{path}: architecture {actual} verified")
        return actual
