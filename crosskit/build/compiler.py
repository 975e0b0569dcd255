"""
Cross toolchain command construction.

Builds argument lists for the compiler, strip tool and archiver. The
compiler argument order is fixed so invocations are reproducible and
diffable in logs:

    <cc> [-march=X] -O<n> [-g] [-static] <sources...> -o <output>
"""

from typing import List, Sequence

from crosskit.build.models import BuildConfiguration
from crosskit.config.settings import ToolchainSettings
from crosskit.core.exceptions import ConfigurationError


def select_compiler(toolchain: ToolchainSettings, config: BuildConfiguration) -> str:
    """Pick the C++ front end when any source is C++, otherwise the C one."""
    return toolchain.cxx if config.is_cxx else toolchain.cc


def compile_command(
    toolchain: ToolchainSettings, config: BuildConfiguration
) -> List[str]:
    """
    Assemble the compiler invocation.

    Args:
        toolchain: Resolved toolchain binaries
        config: Build configuration

    Returns:
        Full argument list, compiler first

    Example:
        >>> cmd = compile_command(toolchain, BuildConfiguration(
        ...     target="aarch64-linux-gnu", sources=("hello.c",), output="hello",
        ...     optimization=OptimizationLevel.STANDARD, link_mode=LinkMode.STATIC))
        >>> cmd
        ['aarch64-linux-gnu-gcc', '-O2', '-static', 'hello.c', '-o', 'hello']
    """
    cmd = [select_compiler(toolchain, config)]

    if config.arch_flag:
        cmd.append(f"-march={config.arch_flag}")

    cmd.append(config.optimization.flag)

    if config.debug:
        cmd.append("-g")

    link_flag = config.link_mode.flag
    if link_flag:
        cmd.append(link_flag)

    cmd.extend(config.sources)
    cmd.extend(["-o", config.output])
    return cmd


def strip_command(toolchain: ToolchainSettings, binary: str) -> List[str]:
    """Assemble the strip invocation for a built binary."""
    return [toolchain.strip, binary]


def archive_command(
    toolchain: ToolchainSettings, objects: Sequence[str], output: str
) -> List[str]:
    """
    Assemble the archiver invocation creating a static library.

    Raises:
        ConfigurationError: If no objects or no output are given
    """
    objects = [str(o) for o in objects if str(o).strip()]
    if not objects:
        raise ConfigurationError("At least one object file is required")
    if not output or not str(output).strip():
        raise ConfigurationError("Archive output path must not be empty")
    return [toolchain.ar, "rcs", str(output), *objects]


def sysroot_command(toolchain: ToolchainSettings) -> List[str]:
    """Ask the C compiler for its configured sysroot."""
    return [toolchain.cc, "-print-sysroot"]
