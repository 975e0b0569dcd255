"""
Build-and-run orchestration.

The Orchestrator turns a BuildConfiguration into one cross-compiler
invocation and a RunConfiguration into one emulator invocation,
validating preconditions before each. Each invocation is a linear
pipeline (compile -> verify -> run); the only retry is the single
library-path fallback for dynamically linked binaries.

Usage:
    from crosskit.build import Orchestrator, build_configuration
    from crosskit.config import resolve_settings

    settings = resolve_settings()
    orchestrator = Orchestrator(settings)
    binary = orchestrator.compile(
        build_configuration(settings.toolchain.target, ["hello.c"], "hello")
    )
    orchestrator.verify_architecture(binary, "aarch64")
"""

import logging
from contextlib import nullcontext
from pathlib import Path
from typing import Optional, Sequence

from crosskit.build.compiler import archive_command, compile_command, strip_command
from crosskit.build.emulator import (
    LibraryPathResolver,
    emulator_command,
    missing_interpreter,
)
from crosskit.build.inspector import ArchitectureInspector
from crosskit.build.models import (
    BuildConfiguration,
    CompiledBinary,
    LinkMode,
    ProcessOutcome,
    RunConfiguration,
)
from crosskit.config.settings import Settings, arch_from_triple
from crosskit.core.exceptions import (
    ConfigurationError,
    EmulationFailure,
    InterpreterNotFound,
    ToolchainFailure,
)
from crosskit.core.locking import LockManager
from crosskit.core.process import (
    CommandNotFound,
    CommandResult,
    CommandRunner,
    CommandTimeout,
)

logger = logging.getLogger(__name__)


class Orchestrator:
    """Drive the cross toolchain and the emulator."""

    def __init__(
        self,
        settings: Settings,
        runner: Optional[CommandRunner] = None,
        inspector: Optional[ArchitectureInspector] = None,
        resolver: Optional[LibraryPathResolver] = None,
        lock_manager: Optional[LockManager] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            settings: Resolved toolchain and emulator settings
            runner: Command runner (default: CommandRunner with settings.timeout)
            inspector: Binary inspector (default: readelf from settings)
            resolver: Library path resolver (default: standard candidates)
            lock_manager: Optional lock manager serializing writes per output path
        """
        self.settings = settings
        self.runner = runner or CommandRunner(timeout=settings.timeout)
        self.inspector = inspector or ArchitectureInspector(
            settings.toolchain.readelf, self.runner
        )
        self.resolver = resolver or LibraryPathResolver(settings.toolchain, self.runner)
        self.lock_manager = lock_manager

    # ------------------------------------------------------------------
    # Toolchain
    # ------------------------------------------------------------------

    def _run_tool(self, cmd: Sequence[str]) -> CommandResult:
        try:
            result = self.runner.run(cmd)
        except CommandNotFound as e:
            raise ToolchainFailure(
                f"Toolchain binary not found: {e.executable}", command=cmd
            ) from e
        except CommandTimeout as e:
            raise ToolchainFailure(
                str(e), stdout=e.stdout, stderr=e.stderr, command=cmd
            ) from e

        if not result.ok:
            raise ToolchainFailure(
                f"{Path(cmd[0]).name} exited with code {result.returncode}",
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                command=result.args,
            )
        return result

    def _output_lock(self, output: str):
        if self.lock_manager is None:
            return nullcontext()
        return self.lock_manager.output_lock(Path(output))

    def compile(self, config: BuildConfiguration) -> CompiledBinary:
        """
        Compile sources into a target binary.

        Spawns exactly one compiler process. An existing output file is
        overwritten by the compiler.

        Args:
            config: Build configuration

        Returns:
            CompiledBinary describing the produced artifact

        Raises:
            ConfigurationError: If the build targets a different triple than
                the resolved toolchain
            ToolchainFailure: If the compiler fails or produces no output
        """
        if config.target != self.settings.toolchain.target:
            raise ConfigurationError(
                f"Build target {config.target} does not match toolchain "
                f"target {self.settings.toolchain.target}"
            )

        cmd = compile_command(self.settings.toolchain, config)

        with self._output_lock(config.output):
            result = self._run_tool(cmd)

        if not Path(config.output).is_file():
            raise ToolchainFailure(
                f"Compiler reported success but {config.output} was not produced",
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                command=result.args,
            )

        binary = CompiledBinary(
            path=config.output,
            arch=arch_from_triple(config.target),
            link_mode=config.link_mode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
        logger.info(f"Built {binary.path} ({binary.arch}, {binary.link_mode.value})")
        return binary

    def verify_architecture(self, binary: CompiledBinary, expected: str) -> None:
        """
        Check that a binary's header reports the expected architecture.

        Raises:
            ArchitectureMismatch: If the binary reports another architecture
                or its header cannot be read
        """
        self.inspector.verify(binary.path, expected)

    def strip(self, binary: CompiledBinary) -> CompiledBinary:
        """Remove symbols from a built binary in place."""
        with self._output_lock(binary.path):
            self._run_tool(strip_command(self.settings.toolchain, binary.path))
        logger.info(f"Stripped {binary.path}")
        return binary

    def archive(self, objects: Sequence[str], output: str) -> str:
        """
        Bundle object files into a static library.

        Raises:
            ConfigurationError: If no objects or no output are given
            ToolchainFailure: If the archiver fails
        """
        cmd = archive_command(self.settings.toolchain, objects, output)
        with self._output_lock(output):
            self._run_tool(cmd)
        logger.info(f"Archived {len(cmd) - 3} object(s) into {output}")
        return output

    # ------------------------------------------------------------------
    # Emulator
    # ------------------------------------------------------------------

    def _emulate(self, config: RunConfiguration, lib_path: Optional[str]) -> CommandResult:
        cmd = emulator_command(config.emulator, config.binary, lib_path, config.args)
        try:
            return self.runner.run(cmd)
        except CommandNotFound as e:
            raise EmulationFailure(
                f"Emulator not found: {e.executable}", command=cmd
            ) from e
        except CommandTimeout as e:
            raise EmulationFailure(
                str(e), stdout=e.stdout, stderr=e.stderr, command=cmd
            ) from e

    @staticmethod
    def _outcome(result: CommandResult, lib_path: Optional[str]) -> ProcessOutcome:
        return ProcessOutcome(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            command=tuple(result.args),
            lib_path=lib_path,
        )

    @staticmethod
    def _emulation_failure(result: CommandResult) -> EmulationFailure:
        return EmulationFailure(
            f"Emulated program exited with code {result.returncode}",
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            command=result.args,
        )

    def run(self, config: RunConfiguration) -> ProcessOutcome:
        """
        Run a target binary under the emulator.

        The binary's architecture is verified first. Dynamically linked
        binaries without a library path are tried without one; if the
        emulator cannot find the dynamic linker, a discovered library path
        is tried once more.

        Args:
            config: Run configuration

        Returns:
            ProcessOutcome of the emulated program (exit code 0)

        Raises:
            ConfigurationError: If the binary does not exist
            ArchitectureMismatch: If the binary is for another architecture
            InterpreterNotFound: If the dynamic linker cannot be resolved
            EmulationFailure: For any other non-zero emulator exit
        """
        if not Path(config.binary).is_file():
            raise ConfigurationError(f"Binary not found: {config.binary}")

        self.inspector.verify(config.binary, config.expected_arch)
        return self._run_verified(config)

    def _run_verified(self, config: RunConfiguration) -> ProcessOutcome:
        if config.link_mode is LinkMode.STATIC:
            result = self._emulate(config, config.lib_path)
            if not result.ok:
                raise self._emulation_failure(result)
            return self._outcome(result, config.lib_path)

        interpreter = self.inspector.interpreter(config.binary)

        if config.lib_path:
            result = self._emulate(config, config.lib_path)
            if result.ok:
                return self._outcome(result, config.lib_path)
            missing = missing_interpreter(
                result.returncode, result.stderr, interpreter, config.emulator
            )
            if missing:
                raise self._interpreter_not_found(missing, [config.lib_path], result)
            raise self._emulation_failure(result)

        # Assume host multiarch support first
        result = self._emulate(config, None)
        if result.ok:
            return self._outcome(result, None)

        missing = missing_interpreter(
            result.returncode, result.stderr, interpreter, config.emulator
        )
        if not missing:
            raise self._emulation_failure(result)

        logger.info(f"Dynamic linker {missing} not found, searching for a library path")
        lib_path = self.resolver.discover(interpreter or missing)
        if lib_path is None:
            raise self._interpreter_not_found(missing, [None], result)

        result = self._emulate(config, lib_path)
        if result.ok:
            return self._outcome(result, lib_path)

        retry_missing = missing_interpreter(
            result.returncode, result.stderr, interpreter, config.emulator
        )
        if retry_missing:
            raise self._interpreter_not_found(retry_missing, [None, lib_path], result)
        raise self._emulation_failure(result)

    @staticmethod
    def _interpreter_not_found(
        interpreter: str, attempted, result: CommandResult
    ) -> InterpreterNotFound:
        return InterpreterNotFound(
            interpreter,
            attempted,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            command=result.args,
        )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def run_configuration(
        self,
        binary: CompiledBinary,
        lib_path: Optional[str] = None,
        args: Sequence[str] = (),
    ) -> RunConfiguration:
        """Build the RunConfiguration for a freshly compiled binary."""
        return RunConfiguration(
            emulator=self.settings.emulator.binary,
            binary=binary.path,
            expected_arch=binary.arch,
            link_mode=binary.link_mode,
            lib_path=lib_path,
            args=tuple(args),
        )

    def run_binary(
        self,
        binary: CompiledBinary,
        lib_path: Optional[str] = None,
        args: Sequence[str] = (),
    ) -> ProcessOutcome:
        """
        Verify a freshly compiled binary once and run it.

        Raises:
            ArchitectureMismatch: If the binary is for another architecture
            RunError: If emulation fails
        """
        self.verify_architecture(binary, binary.arch)
        return self._run_verified(self.run_configuration(binary, lib_path, args))

    def build_and_run(
        self,
        config: BuildConfiguration,
        lib_path: Optional[str] = None,
        args: Sequence[str] = (),
        strip: bool = False,
    ) -> ProcessOutcome:
        """
        Compile, verify and run in sequence.

        Raises:
            BuildError: If compilation or verification fails
            RunError: If emulation fails
        """
        binary = self.compile(config)
        if strip:
            self.strip(binary)
        return self.run_binary(binary, lib_path, args)
