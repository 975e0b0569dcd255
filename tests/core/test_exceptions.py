"""
Tests for the crosskit exception hierarchy.
"""

from crosskit.core.exceptions import (
    ArchitectureMismatch,
    BuildError,
    ConfigurationError,
    CrossKitError,
    EmulationFailure,
    InterpreterNotFound,
    RunError,
    ToolchainFailure,
)


class TestHierarchy:
    def test_build_errors(self):
        """Compile-side failures are BuildErrors."""
        assert issubclass(ToolchainFailure, BuildError)
        assert issubclass(ArchitectureMismatch, BuildError)

    def test_run_errors(self):
        """Emulator-side failures are RunErrors."""
        assert issubclass(InterpreterNotFound, RunError)
        assert issubclass(EmulationFailure, RunError)

    def test_categories_are_distinct(self):
        """Build, run and configuration errors do not overlap."""
        assert not issubclass(BuildError, RunError)
        assert not issubclass(RunError, BuildError)
        assert not issubclass(ConfigurationError, (BuildError, RunError))
        assert issubclass(ConfigurationError, CrossKitError)


class TestToolFailure:
    def test_carries_output_verbatim(self):
        """Diagnostics are stored exactly as given."""
        stderr = "hello.c:3:5: error: expected ';' before '}' token\n    3 | }\n"
        error = ToolchainFailure(
            "gcc exited with code 1",
            returncode=1,
            stderr=stderr,
            command=["gcc", "hello.c"],
        )

        assert error.stderr == stderr
        assert error.returncode == 1
        assert error.command == ["gcc", "hello.c"]
        assert str(error) == "gcc exited with code 1"


class TestArchitectureMismatch:
    def test_message_with_actual(self):
        error = ArchitectureMismatch("hello", "aarch64", "x86_64")

        assert error.expected == "aarch64"
        assert error.actual == "x86_64"
        assert "expected architecture aarch64, found x86_64" in str(error)

    def test_message_without_actual(self):
        error = ArchitectureMismatch("hello", "aarch64", stderr="Not an ELF file")

        assert error.actual is None
        assert "could not determine architecture" in str(error)
        assert error.stderr == "Not an ELF file"


class TestInterpreterNotFound:
    def test_lists_attempts(self):
        """Attempts without -L are shown as such."""
        error = InterpreterNotFound(
            "/lib/ld-linux-aarch64.so.1", [None, "/usr/aarch64-linux-gnu"]
        )

        message = str(error)
        assert "/lib/ld-linux-aarch64.so.1" in message
        assert "<no -L>" in message
        assert "/usr/aarch64-linux-gnu" in message
