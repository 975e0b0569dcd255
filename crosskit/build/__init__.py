"""
Cross build and emulated run support for crosskit.

This package assembles toolchain and emulator command lines, inspects
produced binaries and orchestrates the compile -> verify -> run pipeline.
"""

from crosskit.build.models import (
    OptimizationLevel,
    LinkMode,
    BuildConfiguration,
    CompiledBinary,
    RunConfiguration,
    ProcessOutcome,
    build_configuration,
)
from crosskit.build.inspector import ArchitectureInspector
from crosskit.build.emulator import LibraryPathResolver
from crosskit.build.orchestrator import Orchestrator

__all__ = [
    "OptimizationLevel",
    "LinkMode",
    "BuildConfiguration",
    "CompiledBinary",
    "RunConfiguration",
    "ProcessOutcome",
    "build_configuration",
    "ArchitectureInspector",
    "LibraryPathResolver",
    "Orchestrator",
]
