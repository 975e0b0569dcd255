"""
Run command implementation.

Runs an existing target binary under the user-mode emulator.
"""

import logging

from crosskit.build.models import LinkMode, RunConfiguration
from crosskit.cli.utils import load_settings, make_orchestrator, print_tool_output

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the run command.

    The link mode is taken from --static/--dynamic, or detected from
    whether the binary requests a dynamic linker.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    _, settings = load_settings(args)
    orchestrator = make_orchestrator(settings)

    link_mode = args.link_mode
    if link_mode is None:
        interpreter = orchestrator.inspector.interpreter(args.binary)
        link_mode = LinkMode.DYNAMIC if interpreter else LinkMode.STATIC
        logger.debug(f"Detected {link_mode.value} binary (interpreter: {interpreter})")

    config = RunConfiguration(
        emulator=settings.emulator.binary,
        binary=args.binary,
        expected_arch=settings.toolchain.arch,
        link_mode=link_mode,
        lib_path=args.lib_path or settings.emulator.lib_path,
        args=tuple(args.program_args),
    )

    outcome = orchestrator.run(config)
    print_tool_output(outcome)
    return outcome.returncode
