"""
crosskit CLI argument parser.

This module implements the command-line interface for crosskit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from crosskit.cli.utils import print_tool_output
from crosskit.core.exceptions import (
    BuildError,
    ConfigurationError,
    CrossKitError,
    RunError,
)

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("crosskit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_BUILD_ERROR = 3
EXIT_RUN_ERROR = 4
EXIT_INTERRUPTED = 130


class CLI:
    """crosskit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="crosskit",
            description="crosskit - cross-compile C/C++ and run under a user-mode emulator",
            epilog=(
                'Use "crosskit COMMAND --help" for command-specific help.\n'
                'Program arguments for run/build-and-run follow "--".'
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"crosskit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./crosskit.yaml)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_build_command(subparsers)
        self._add_run_command(subparsers)
        self._add_build_and_run_command(subparsers)
        self._add_archive_command(subparsers)
        self._add_doctor_command(subparsers)

        return parser

    def _add_target_options(self, parser):
        parser.add_argument(
            "--arch",
            dest="target",
            metavar="TRIPLE",
            help="Target triple (e.g., aarch64-linux-gnu) [default: from config]",
        )
        link = parser.add_mutually_exclusive_group()
        link.add_argument(
            "--static",
            dest="link_mode",
            action="store_const",
            const="static",
            help="Link statically",
        )
        link.add_argument(
            "--dynamic",
            dest="link_mode",
            action="store_const",
            const="dynamic",
            help="Link dynamically",
        )

    def _add_build_options(self, parser):
        parser.add_argument("sources", nargs="+", metavar="SOURCE", help="Source files")
        parser.add_argument(
            "-o",
            "--output",
            required=True,
            metavar="PATH",
            help="Output binary path (overwritten if present)",
        )
        self._add_target_options(parser)
        parser.add_argument(
            "--opt",
            type=int,
            choices=[0, 1, 2, 3],
            metavar="LEVEL",
            help="Optimization level (0|1|2|3) [default: 0]",
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            default=None,
            help="Emit debug symbols",
        )
        parser.add_argument(
            "--march",
            metavar="VALUE",
            help="Explicit architecture flag passed as -march=VALUE",
        )
        parser.add_argument(
            "--strip",
            action="store_true",
            default=None,
            help="Strip symbols from the built binary",
        )

    def _add_build_command(self, subparsers):
        """Add 'build' subcommand."""
        parser = subparsers.add_parser(
            "build",
            help="Cross-compile sources",
            description="Cross-compile sources and verify the binary architecture",
        )
        self._add_build_options(parser)

    def _add_run_command(self, subparsers):
        """Add 'run' subcommand."""
        parser = subparsers.add_parser(
            "run",
            help="Run a target binary under the emulator",
            description="Run a cross-compiled binary under the user-mode emulator",
        )
        parser.add_argument("binary", metavar="BINARY", help="Target binary")
        self._add_target_options(parser)
        parser.add_argument(
            "--lib-path",
            metavar="DIR",
            help="Library search path for the dynamic linker (emulator -L)",
        )

    def _add_build_and_run_command(self, subparsers):
        """Add 'build-and-run' subcommand."""
        parser = subparsers.add_parser(
            "build-and-run",
            help="Cross-compile and run under the emulator",
            description="Cross-compile, verify the architecture and run the result",
        )
        self._add_build_options(parser)
        parser.add_argument(
            "--lib-path",
            metavar="DIR",
            help="Library search path for the dynamic linker (emulator -L)",
        )

    def _add_archive_command(self, subparsers):
        """Add 'archive' subcommand."""
        parser = subparsers.add_parser(
            "archive",
            help="Create a static library",
            description="Bundle object files into a static library with the cross archiver",
        )
        parser.add_argument("objects", nargs="+", metavar="OBJECT", help="Object files")
        parser.add_argument(
            "-o", "--output", required=True, metavar="PATH", help="Library path"
        )
        parser.add_argument(
            "--arch", dest="target", metavar="TRIPLE", help="Target triple"
        )

    def _add_doctor_command(self, subparsers):
        """Add 'doctor' subcommand."""
        parser = subparsers.add_parser(
            "doctor",
            help="Diagnose toolchain and emulator setup",
            description="Report resolved tools, their availability and multiarch support",
        )
        parser.add_argument(
            "--arch", dest="target", metavar="TRIPLE", help="Target triple"
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Everything after the first "--" is kept as program arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        if args is None:
            args = sys.argv[1:]
        args = list(args)

        program_args: List[str] = []
        if "--" in args:
            split = args.index("--")
            args, program_args = args[:split], args[split + 1 :]

        parsed = self.parser.parse_args(args)
        parsed.program_args = program_args
        return parsed

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return EXIT_ERROR

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return EXIT_INTERRUPTED
        except ConfigurationError as e:
            logger.error(f"Configuration error: {e}")
            return EXIT_CONFIG_ERROR
        except BuildError as e:
            print_tool_output(e)
            logger.error(f"Build failed: {e}")
            return EXIT_BUILD_ERROR
        except RunError as e:
            print_tool_output(e)
            logger.error(f"Run failed: {e}")
            return EXIT_RUN_ERROR
        except CrossKitError as e:
            logger.error(f"Error: {e}")
            return EXIT_ERROR
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return EXIT_ERROR

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            stream=sys.stderr,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "build": "crosskit.cli.commands.build",
            "run": "crosskit.cli.commands.run",
            "build-and-run": "crosskit.cli.commands.build_and_run",
            "archive": "crosskit.cli.commands.archive",
            "doctor": "crosskit.cli.commands.doctor",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return EXIT_ERROR

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
