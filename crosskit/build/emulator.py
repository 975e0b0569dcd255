"""
User-mode emulator support.

Builds emulator command lines, recognizes the "dynamic linker not found"
failure, and discovers a library prefix that provides the target's
dynamic linker.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence

from crosskit.build.compiler import sysroot_command
from crosskit.config.settings import ToolchainSettings
from crosskit.core.process import CommandNotFound, CommandRunner, CommandTimeout

logger = logging.getLogger(__name__)

# qemu-user: "qemu-aarch64: Could not open '/lib/ld-linux-aarch64.so.1': No such file or directory"
_COULD_NOT_OPEN_RE = re.compile(r"Could not open '([^']+)'")
_NO_SUCH_FILE = "No such file or directory"


def emulator_command(
    emulator: str,
    binary: str,
    lib_path: Optional[str] = None,
    args: Sequence[str] = (),
) -> List[str]:
    """
    Assemble the emulator invocation.

    Example:
        >>> emulator_command("qemu-aarch64", "./hello", "/usr/aarch64-linux-gnu")
        ['qemu-aarch64', '-L', '/usr/aarch64-linux-gnu', './hello']
    """
    cmd = [emulator]
    if lib_path:
        cmd.extend(["-L", lib_path])
    cmd.append(binary)
    cmd.extend(args)
    return cmd


def missing_interpreter(
    returncode: int,
    stderr: str,
    interpreter: Optional[str] = None,
    emulator: Optional[str] = None,
) -> Optional[str]:
    """
    Detect the dynamic-linker-not-found signal.

    The captured stderr also holds the target program's own diagnostics, so
    a "Could not open" message only counts when it names the interpreter the
    binary requests, or, when that is unknown, when it is the emulator's own
    full-line message.

    Args:
        returncode: Emulator exit code
        stderr: Emulator diagnostics
        interpreter: Interpreter the binary requests, if known
        emulator: Emulator binary, used to recognize its message prefix

    Returns:
        The missing interpreter path, or None if this is not that failure
    """
    if returncode == 0:
        return None

    if interpreter:
        for match in _COULD_NOT_OPEN_RE.finditer(stderr):
            if match.group(1) == interpreter:
                return interpreter
        for line in stderr.splitlines():
            if line.startswith(interpreter) and line.endswith(_NO_SUCH_FILE):
                return interpreter
        return None

    prefix = re.escape(Path(emulator).name) if emulator else r"qemu-[\w.+-]+"
    pattern = re.compile(
        rf"^{prefix}: Could not open '([^']+)': {_NO_SUCH_FILE}$", re.MULTILINE
    )
    match = pattern.search(stderr)
    return match.group(1) if match else None


class LibraryPathResolver:
    """
    Discover a library prefix containing the target's dynamic linker.

    Candidates, in order:
    - /usr/<triple> (Debian/Ubuntu cross libc packages)
    - /usr/<triple>/libc (bundled toolchain layout)
    - the compiler's -print-sysroot
    """

    def __init__(
        self,
        toolchain: ToolchainSettings,
        runner: Optional[CommandRunner] = None,
        root: Path = Path("/"),
    ):
        """
        Initialize resolver.

        Args:
            toolchain: Resolved toolchain (target triple and compiler)
            runner: Command runner used to query the compiler sysroot
            root: Filesystem root candidates are resolved against
        """
        self.toolchain = toolchain
        self.runner = runner or CommandRunner()
        self.root = Path(root)

    def candidates(self) -> List[Path]:
        triple = self.toolchain.target
        found = [
            self.root / "usr" / triple,
            self.root / "usr" / triple / "libc",
        ]
        sysroot = self._compiler_sysroot()
        if sysroot is not None and sysroot not in found:
            found.append(sysroot)
        return found

    def _compiler_sysroot(self) -> Optional[Path]:
        try:
            result = self.runner.run(sysroot_command(self.toolchain))
        except (CommandNotFound, CommandTimeout) as e:
            logger.debug(f"Could not query compiler sysroot: {e}")
            return None
        if not result.ok:
            return None
        value = result.stdout.strip()
        if not value or value == "/":
            return None
        return Path(value)

    @staticmethod
    def provides(candidate: Path, interpreter: Optional[str]) -> bool:
        """Check whether a prefix provides the interpreter (or any lib dir)."""
        if not candidate.is_dir():
            return False
        if interpreter:
            return (candidate / interpreter.lstrip("/")).exists()
        return (candidate / "lib").is_dir()

    def discover(self, interpreter: Optional[str] = None) -> Optional[str]:
        """
        Find the first candidate providing the interpreter.

        Args:
            interpreter: Absolute interpreter path the binary requests

        Returns:
            Library prefix, or None if no candidate qualifies
        """
        for candidate in self.candidates():
            if self.provides(candidate, interpreter):
                logger.info(f"Discovered library path: {candidate}")
                return str(candidate)
            logger.debug(f"Library path candidate rejected: {candidate}")
        return None
