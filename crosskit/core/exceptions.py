"""
Centralized exception hierarchy for crosskit.

Every failure surfaced by the orchestrator is one of these exceptions.
Subprocess-originated diagnostics are carried verbatim on the exception
so the CLI can print them unmodified.
"""

from typing import Optional, Sequence


# ============================================================================
# Base Exceptions
# ============================================================================


class CrossKitError(Exception):
    """Base exception for all crosskit errors."""

    pass


class ConfigurationError(CrossKitError):
    """Raised when required configuration is missing or invalid.

    Always raised before any subprocess is spawned.
    """

    pass


class LockTimeoutError(CrossKitError):
    """Raised when an output-path lock cannot be acquired within timeout."""

    pass


class ToolFailure(CrossKitError):
    """Base for errors that carry the output of an external tool."""

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
        command: Optional[Sequence[str]] = None,
    ):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.command = list(command) if command else []
        super().__init__(message)


# ============================================================================
# Build Exceptions
# ============================================================================


class BuildError(ToolFailure):
    """Base exception for compile-side failures."""

    pass


class ToolchainFailure(BuildError):
    """Raised when a toolchain binary (compiler, strip, ar) fails."""

    pass


class ArchitectureMismatch(BuildError):
    """Raised when a binary does not report the expected architecture."""

    def __init__(
        self,
        path: str,
        expected: str,
        actual: Optional[str] = None,
        **kwargs,
    ):
        self.path = path
        self.expected = expected
        self.actual = actual
        if actual:
            msg = f"{path}: expected architecture {expected}, found {actual}"
        else:
            msg = f"{path}: could not determine architecture (expected {expected})"
        super().__init__(msg, **kwargs)


# ============================================================================
# Run Exceptions
# ============================================================================


class RunError(ToolFailure):
    """Base exception for emulator-side failures."""

    pass


class InterpreterNotFound(RunError):
    """Raised when no library path resolves the target's dynamic linker."""

    def __init__(
        self,
        interpreter: Optional[str],
        attempted: Sequence[Optional[str]] = (),
        **kwargs,
    ):
        self.interpreter = interpreter
        self.attempted = list(attempted)
        tried = ", ".join(p if p else "<no -L>" for p in self.attempted)
        msg = f"Dynamic linker {interpreter or '<unknown>'} not found"
        if tried:
            msg += f" (tried: {tried})"
        super().__init__(msg, **kwargs)


class EmulationFailure(RunError):
    """Raised when the emulator exits non-zero for any other reason."""

    pass
