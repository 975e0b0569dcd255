"""
Build-and-run command implementation.

Cross-compiles sources, verifies the binary and runs it under the emulator.
"""

import logging

from crosskit.cli.utils import (
    build_config_from_args,
    load_settings,
    make_orchestrator,
    print_tool_output,
    strip_requested,
)

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the build-and-run command.

    Compiler warnings are printed before the program runs, so they are
    shown even when the run fails.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    project, settings = load_settings(args)
    config = build_config_from_args(args, project, settings)

    orchestrator = make_orchestrator(settings)
    binary = orchestrator.compile(config)
    print_tool_output(binary)
    if strip_requested(args, project):
        orchestrator.strip(binary)

    outcome = orchestrator.run_binary(
        binary,
        lib_path=args.lib_path or settings.emulator.lib_path,
        args=args.program_args,
    )
    print_tool_output(outcome)
    return outcome.returncode
