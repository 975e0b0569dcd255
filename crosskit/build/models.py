"""
Build and run configuration models.

These are created from user-supplied options at invocation time and are
immutable afterwards. Invariants are checked at construction, so an
invalid configuration never reaches a subprocess.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from crosskit.core.exceptions import ConfigurationError

PathLike = Union[str, Path]

CXX_EXTENSIONS = (".cpp", ".cc", ".cxx", ".c++", ".cp", ".C")


class OptimizationLevel(Enum):
    """Compiler optimization levels."""

    NONE = 0
    BASIC = 1
    STANDARD = 2
    AGGRESSIVE = 3

    @property
    def flag(self) -> str:
        return f"-O{self.value}"

    @classmethod
    def parse(cls, value: Union[int, str, "OptimizationLevel"]) -> "OptimizationLevel":
        """
        Parse an optimization level from a number or name.

        Example:
            >>> OptimizationLevel.parse("2")
            <OptimizationLevel.STANDARD: 2>
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if value.upper() in cls.__members__:
                return cls[value.upper()]
            try:
                value = int(value)
            except ValueError:
                raise ConfigurationError(f"Invalid optimization level: {value}")
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(
                f"Invalid optimization level: {value}. Must be 0, 1, 2 or 3"
            )


class LinkMode(Enum):
    """Linking modes."""

    STATIC = "static"
    DYNAMIC = "dynamic"

    @property
    def flag(self) -> Optional[str]:
        """Compiler flag for this mode (dynamic is the compiler default)."""
        return "-static" if self is LinkMode.STATIC else None

    @classmethod
    def parse(cls, value: Union[str, "LinkMode"]) -> "LinkMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigurationError(
                f"Invalid link mode: {value}. Must be 'static' or 'dynamic'"
            )


def _check_path(value: PathLike, name: str) -> str:
    if value is None or not str(value).strip():
        raise ConfigurationError(f"{name} must not be empty")
    return str(value)


@dataclass(frozen=True)
class BuildConfiguration:
    """
    Options for one cross-compiler invocation.

    Attributes:
        target: Target triple (e.g., 'aarch64-linux-gnu')
        sources: Ordered source files, at least one
        output: Output binary path
        optimization: Optimization level
        link_mode: Static or dynamic linking
        debug: Emit debug symbols
        arch_flag: Optional explicit -march value
    """

    target: str
    sources: Tuple[str, ...]
    output: str
    optimization: OptimizationLevel = OptimizationLevel.NONE
    link_mode: LinkMode = LinkMode.DYNAMIC
    debug: bool = False
    arch_flag: Optional[str] = None

    def __post_init__(self):
        if not self.target or not self.target.strip():
            raise ConfigurationError("Target triple must not be empty")
        if isinstance(self.sources, (str, Path)):
            raise ConfigurationError("Sources must be a sequence of paths")
        sources = tuple(_check_path(s, "Source path") for s in (self.sources or ()))
        if not sources:
            raise ConfigurationError("At least one source file is required")
        object.__setattr__(self, "sources", sources)
        object.__setattr__(self, "output", _check_path(self.output, "Output path"))
        object.__setattr__(
            self, "optimization", OptimizationLevel.parse(self.optimization)
        )
        object.__setattr__(self, "link_mode", LinkMode.parse(self.link_mode))
        if self.arch_flag is not None and not self.arch_flag.strip():
            object.__setattr__(self, "arch_flag", None)

    @property
    def is_cxx(self) -> bool:
        """True if any source needs the C++ front end."""
        return any(Path(s).suffix in CXX_EXTENSIONS for s in self.sources)


@dataclass(frozen=True)
class CompiledBinary:
    """
    Handle to a produced artifact.

    Attributes:
        path: Output binary path
        arch: Architecture the binary was built for
        link_mode: How the binary was linked
        stdout: Compiler output of the successful build
        stderr: Compiler diagnostics (warnings) of the successful build
    """

    path: str
    arch: str
    link_mode: LinkMode = LinkMode.DYNAMIC
    stdout: str = field(default="", compare=False, repr=False)
    stderr: str = field(default="", compare=False, repr=False)


@dataclass(frozen=True)
class RunConfiguration:
    """
    Options for one emulator invocation.

    Attributes:
        emulator: Emulator binary (e.g., 'qemu-aarch64')
        binary: Target binary to run
        expected_arch: Architecture the binary must report
        link_mode: How the binary was linked
        lib_path: Optional library search path (-L prefix)
        args: Arguments passed to the target program
    """

    emulator: str
    binary: str
    expected_arch: str
    link_mode: LinkMode = LinkMode.DYNAMIC
    lib_path: Optional[str] = None
    args: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "emulator", _check_path(self.emulator, "Emulator"))
        object.__setattr__(self, "binary", _check_path(self.binary, "Binary path"))
        if not self.expected_arch or not self.expected_arch.strip():
            raise ConfigurationError("Expected architecture must not be empty")
        object.__setattr__(self, "link_mode", LinkMode.parse(self.link_mode))
        if self.lib_path is not None:
            lib_path = str(self.lib_path).strip()
            object.__setattr__(self, "lib_path", lib_path or None)
        object.__setattr__(self, "args", tuple(str(a) for a in self.args))


@dataclass(frozen=True)
class ProcessOutcome:
    """Exit code and captured output of an emulated program."""

    returncode: int
    stdout: str
    stderr: str
    command: Tuple[str, ...] = field(default_factory=tuple)
    lib_path: Optional[str] = None


def build_configuration(
    target: str,
    sources: Sequence[PathLike],
    output: PathLike,
    **options,
) -> BuildConfiguration:
    """Convenience constructor accepting any path-like sources."""
    return BuildConfiguration(
        target=target,
        sources=tuple(str(s) for s in sources),
        output=str(output) if output is not None else "",
        **options,
    )
