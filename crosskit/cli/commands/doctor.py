"""
Doctor command for diagnosing cross toolchain setup.

Reports the resolved toolchain binaries and emulator, whether they can be
found on PATH, and whether the target's dynamic linker is installed
system-wide (needed to run dynamically linked binaries without -L).
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from crosskit.cli.utils import load_settings, safe_print
from crosskit.config.settings import Settings
from crosskit.core.platform import (
    PlatformInfo,
    cross_libc_package,
    detect_platform,
    has_binfmt_handler,
    has_multiarch_support,
    interpreter_for,
)

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Result of a health check."""

    name: str
    passed: bool
    message: str
    fix_command: Optional[str] = None
    optional: bool = False


class DoctorRunner:
    """Runs the setup checks for one target."""

    def __init__(
        self,
        settings: Settings,
        platform: Optional[PlatformInfo] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
        root: Path = Path("/"),
    ):
        self.settings = settings
        self.platform = platform or detect_platform()
        self.which = which
        self.root = root

    def check_tool(self, label: str, name: str, optional: bool = False) -> CheckResult:
        path = self.which(name)
        if path:
            return CheckResult(name=label, passed=True, message=f"{name} -> {path}")
        return CheckResult(
            name=label,
            passed=False,
            message=f"{name} not found in PATH",
            fix_command=f"Install {name} or set its environment variable override",
            optional=optional,
        )

    def check_multiarch(self) -> CheckResult:
        arch = self.settings.toolchain.arch
        interpreter = interpreter_for(arch) or "dynamic linker"
        if has_multiarch_support(arch, self.root):
            return CheckResult(
                name="Multiarch",
                passed=True,
                message=f"{interpreter} installed system-wide",
            )

        package = cross_libc_package(arch, self.platform)
        if package:
            fix = f"Install {package}, or pass --lib-path / set QEMU_LD_PREFIX"
        else:
            fix = "Pass --lib-path or set QEMU_LD_PREFIX to the target sysroot"
        return CheckResult(
            name="Multiarch",
            passed=False,
            message=f"{interpreter} not installed; dynamic binaries need a library path",
            fix_command=fix,
            optional=True,
        )

    def check_binfmt(self) -> CheckResult:
        emulator = self.settings.emulator.binary
        if has_binfmt_handler(emulator):
            return CheckResult(
                name="binfmt", passed=True, message=f"{Path(emulator).name} registered"
            )
        return CheckResult(
            name="binfmt",
            passed=False,
            message=f"No binfmt_misc handler for {Path(emulator).name} (emulator is invoked explicitly)",
            optional=True,
        )

    def run_all_checks(self) -> List[CheckResult]:
        toolchain = self.settings.toolchain
        results = [
            self.check_tool("C compiler", toolchain.cc),
            self.check_tool("C++ compiler", toolchain.cxx, optional=True),
            self.check_tool("Archiver", toolchain.ar, optional=True),
            self.check_tool("Strip", toolchain.strip, optional=True),
            self.check_tool("Inspector", toolchain.readelf),
            self.check_tool("Emulator", self.settings.emulator.binary),
        ]
        if self.settings.emulator.lib_path:
            results.append(
                CheckResult(
                    name="Library path",
                    passed=Path(self.settings.emulator.lib_path).is_dir(),
                    message=self.settings.emulator.lib_path,
                )
            )
        else:
            results.append(self.check_multiarch())
        results.append(self.check_binfmt())
        return results


def run(args) -> int:
    """
    Run doctor command.

    Args:
        args: Parsed arguments from argparse

    Returns:
        Exit code (0 when all required tools are present)
    """
    quiet = args.quiet
    _, settings = load_settings(args)
    runner = DoctorRunner(settings)

    if not quiet:
        print(f"Target: {settings.toolchain.target} (host: {runner.platform})\n")

    failed = 0
    warnings = 0
    for result in runner.run_all_checks():
        if result.passed:
            if not quiet:
                safe_print(f"✅ {result.name}: {result.message}")
            continue

        if result.optional:
            warnings += 1
            if not quiet:
                safe_print(f"⚠️  {result.name}: {result.message}")
        else:
            failed += 1
            safe_print(f"❌ {result.name}: {result.message}")
        if result.fix_command:
            safe_print(f"   💡 Fix: {result.fix_command}")
        logger.debug(f"Check failed: {result.name}")

    if not quiet:
        print(f"\nSummary: {failed} failed, {warnings} warnings")
    return 1 if failed else 0
