"""
Archive command implementation.

Bundles object files into a static library with the cross archiver.
"""

from crosskit.cli.utils import load_settings, make_orchestrator


def run(args) -> int:
    """
    Run the archive command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    _, settings = load_settings(args)
    make_orchestrator(settings).archive(args.objects, args.output)
    return 0
