"""
Core functionality for crosskit.

This package contains the foundational modules that other components depend on.
"""

from .exceptions import (
    CrossKitError,
    ConfigurationError,
    LockTimeoutError,
    ToolFailure,
    BuildError,
    ToolchainFailure,
    ArchitectureMismatch,
    RunError,
    InterpreterNotFound,
    EmulationFailure,
)

from .locking import LockManager, get_global_cache_dir

from .platform import (
    PlatformInfo,
    detect_platform,
    normalize_arch,
    interpreter_for,
    has_multiarch_support,
    has_binfmt_handler,
    cross_libc_package,
)

from .process import (
    CommandRunner,
    CommandResult,
    CommandNotFound,
    CommandTimeout,
)

__all__ = [
    # Exceptions
    "CrossKitError",
    "ConfigurationError",
    "LockTimeoutError",
    "ToolFailure",
    "BuildError",
    "ToolchainFailure",
    "ArchitectureMismatch",
    "RunError",
    "InterpreterNotFound",
    "EmulationFailure",
    # Locking
    "LockManager",
    "get_global_cache_dir",
    # Platform
    "PlatformInfo",
    "detect_platform",
    "normalize_arch",
    "interpreter_for",
    "has_multiarch_support",
    "has_binfmt_handler",
    "cross_libc_package",
    # Processes
    "CommandRunner",
    "CommandResult",
    "CommandNotFound",
    "CommandTimeout",
]
