"""
Shared utilities for CLI commands.

Provides configuration loading, orchestrator construction and output
helpers used across multiple CLI commands.
"""

import logging
import sys
from typing import Tuple

from crosskit.build.models import BuildConfiguration
from crosskit.config.parser import ProjectConfig, load_config
from crosskit.config.settings import Settings, resolve_settings

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Management
# ============================================================================


def load_settings(args) -> Tuple[ProjectConfig, Settings]:
    """
    Load the project config and resolve settings once for a command.

    Args:
        args: Parsed arguments (uses args.config and args.target)

    Returns:
        Tuple of (project config, resolved settings)

    Raises:
        ConfigurationError: If the config file is invalid
    """
    project = load_config(getattr(args, "config", None))
    settings = resolve_settings(project, target=getattr(args, "target", None))
    return project, settings


def build_config_from_args(
    args, project: ProjectConfig, settings: Settings
) -> BuildConfiguration:
    """
    Merge CLI build flags over config file defaults.

    Raises:
        ConfigurationError: If any resulting field is invalid
    """
    defaults = project.build

    opt = args.opt if args.opt is not None else defaults.opt
    link = args.link_mode or defaults.link or "dynamic"
    debug = args.debug if args.debug is not None else defaults.debug

    return BuildConfiguration(
        target=settings.toolchain.target,
        sources=tuple(args.sources or ()),
        output=args.output or "",
        optimization=opt if opt is not None else 0,
        link_mode=link,
        debug=bool(debug),
        arch_flag=args.march or defaults.march,
    )


def strip_requested(args, project: ProjectConfig) -> bool:
    return bool(args.strip if args.strip is not None else project.build.strip)


def make_orchestrator(settings: Settings):
    """Create an orchestrator that serializes writes per output path."""
    from crosskit.build.orchestrator import Orchestrator
    from crosskit.core.locking import LockManager

    return Orchestrator(settings, lock_manager=LockManager())


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_tool_output(result):
    """
    Print an external tool's captured output verbatim.

    Args:
        result: Failure, built binary or process outcome carrying the tool's
            stdout/stderr
    """
    if result.stdout:
        sys.stdout.write(result.stdout)
        sys.stdout.flush()
    if result.stderr:
        sys.stderr.write(result.stderr)
        sys.stderr.flush()


def safe_print(message: str, file=None):
    """
    Print message with safe encoding handling for limited consoles.

    Falls back to ASCII markers if Unicode emojis can't be encoded.

    Args:
        message: Message to print
        file: Output file (default: stdout)
    """
    try:
        print(message, file=file)
    except UnicodeEncodeError:
        safe_message = (
            message.replace("\u26a0\ufe0f", "WARNING:")
            .replace("\u2705", "[OK]")
            .replace("\u274c", "[ERROR]")
            .replace("\U0001f4a1", "[HINT]")
        )
        print(safe_message, file=file)
