"""
Build command implementation.

Cross-compiles sources and verifies the produced binary's architecture.
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
    Run the build command.

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
    orchestrator.verify_architecture(binary, binary.arch)

    logger.info(f"{binary.path}: {binary.arch} binary ready")
    return 0
