"""
Pytest configuration and shared fixtures for crosskit tests.

No test spawns a real process: FakeRunner records every command and
FakeToolchain scripts how the compiler, readelf, strip, ar and the
emulator respond.
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from crosskit.build.emulator import LibraryPathResolver
from crosskit.build.inspector import ArchitectureInspector
from crosskit.build.orchestrator import Orchestrator
from crosskit.config.settings import EmulatorSettings, Settings, ToolchainSettings
from crosskit.core.process import CommandResult

AARCH64_INTERPRETER = "/lib/ld-linux-aarch64.so.1"


def readelf_header(machine: str) -> str:
    """Render `readelf -h` output for a machine description."""
    return (
        "ELF Header:\n"
        "  Magic:   7f 45 4c 46 02 01 01 03 00 00 00 00 00 00 00 00\n"
        "  Class:                             ELF64\n"
        "  Data:                              2's complement, little endian\n"
        "  Version:                           1 (current)\n"
        "  OS/ABI:                            UNIX - GNU\n"
        "  Type:                              EXEC (Executable file)\n"
        f"  Machine:                           {machine}\n"
        "  Version:                           0x1\n"
    )


def readelf_program_headers(interpreter: Optional[str]) -> str:
    """Render `readelf -l` output, with an INTERP entry when dynamic."""
    lines = [
        "Elf file type is EXEC (Executable file)",
        "Program Headers:",
        "  Type           Offset             VirtAddr           PhysAddr",
        "  LOAD           0x0000000000000000 0x0000000000400000 0x0000000000400000",
    ]
    if interpreter:
        lines += [
            "  INTERP         0x0000000000000238 0x0000000000400238 0x0000000000400238",
            "                 0x000000000000001b 0x000000000000001b  R      0x1",
            f"      [Requesting program interpreter: {interpreter}]",
        ]
    return "\n".join(lines) + "\n"


def linker_not_found(emulator: str = "qemu-aarch64", interpreter: str = AARCH64_INTERPRETER) -> str:
    return f"{emulator}: Could not open '{interpreter}': No such file or directory\n"


class FakeRunner:
    """Command runner that records commands instead of spawning them."""

    def __init__(self, handler: Optional[Callable[[List[str]], object]] = None):
        self.calls: List[List[str]] = []
        self.handler = handler

    def run(self, args) -> CommandResult:
        args = [str(a) for a in args]
        self.calls.append(args)

        response = self.handler(args) if self.handler else None
        if isinstance(response, BaseException):
            raise response
        if response is None:
            return CommandResult(args, 0, "", "")
        if isinstance(response, CommandResult):
            return response
        returncode, stdout, stderr = response
        return CommandResult(args, returncode, stdout, stderr)

    def calls_to(self, executable: str) -> List[List[str]]:
        return [c for c in self.calls if c[0] == executable]


class FakeToolchain:
    """
    Scripted cross toolchain and emulator.

    Attributes:
        compile_result: (returncode, stdout, stderr) for the compiler
        produce_output: Whether a successful compile writes the output file
        machine: Machine description written into compiled binaries
        emulator_results: Responses for successive emulator runs
        sysroot: Value printed by `cc -print-sysroot`
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.compile_result = (0, "", "")
        self.produce_output = True
        self.machine = "AArch64"
        self.emulator_results: List[tuple] = []
        self.sysroot = ""
        self.binaries: Dict[str, Dict[str, Optional[str]]] = {}
        self.runner = FakeRunner(self.handle)

    def add_binary(self, path: Path, machine: str = "AArch64", interpreter: Optional[str] = None) -> Path:
        """Create a fake target binary known to readelf."""
        path = Path(path)
        path.write_bytes(b"\x7fELF fake")
        self.binaries[str(path.resolve())] = {"machine": machine, "interpreter": interpreter}
        return path

    def handle(self, args: List[str]):
        tool = args[0]
        toolchain = self.settings.toolchain

        if tool in (toolchain.cc, toolchain.cxx):
            if "-print-sysroot" in args:
                return (0, self.sysroot + "\n", "")
            returncode, stdout, stderr = self.compile_result
            if returncode == 0 and self.produce_output:
                output = args[args.index("-o") + 1]
                interpreter = None if "-static" in args else AARCH64_INTERPRETER
                self.add_binary(Path(output), self.machine, interpreter)
            return (returncode, stdout, stderr)

        if tool == toolchain.readelf:
            flag, path = args[1], args[2]
            info = self.binaries.get(str(Path(path).resolve()))
            if info is None:
                return (1, "", f"readelf: Error: {path}: Not an ELF file\n")
            if flag == "-h":
                return (0, readelf_header(info["machine"]), "")
            return (0, readelf_program_headers(info["interpreter"]), "")

        if tool == self.settings.emulator.binary:
            if self.emulator_results:
                return self.emulator_results.pop(0)
            return (0, "Hello, aarch64!\n", "")

        return (0, "", "")


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def toolchain_settings() -> ToolchainSettings:
    """aarch64 GNU cross toolchain."""
    return ToolchainSettings(
        target="aarch64-linux-gnu",
        cc="aarch64-linux-gnu-gcc",
        cxx="aarch64-linux-gnu-g++",
        ar="aarch64-linux-gnu-ar",
        strip="aarch64-linux-gnu-strip",
        readelf="aarch64-linux-gnu-readelf",
    )


@pytest.fixture
def settings(toolchain_settings) -> Settings:
    """Settings with qemu-aarch64 and no library path."""
    return Settings(
        toolchain=toolchain_settings,
        emulator=EmulatorSettings(binary="qemu-aarch64"),
    )


@pytest.fixture
def fake_toolchain(settings) -> FakeToolchain:
    return FakeToolchain(settings)


@pytest.fixture
def fake_root(tmp_path) -> Path:
    """Empty filesystem root for library path discovery."""
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def orchestrator(settings, fake_toolchain, fake_root) -> Orchestrator:
    """Orchestrator wired to the fake toolchain and an empty root."""
    runner = fake_toolchain.runner
    return Orchestrator(
        settings,
        runner=runner,
        inspector=ArchitectureInspector(settings.toolchain.readelf, runner),
        resolver=LibraryPathResolver(settings.toolchain, runner, root=fake_root),
    )


@pytest.fixture
def workdir(tmp_path, monkeypatch) -> Path:
    """Temporary working directory with a hello.c source."""
    work = tmp_path / "work"
    work.mkdir()
    (work / "hello.c").write_text(
        '#include <stdio.h>\nint main(void) { puts("Hello"); return 0; }\n'
    )
    monkeypatch.chdir(work)
    return work
