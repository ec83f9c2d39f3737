"""
Test error mapping and CLI exit code functionality.

Validates that exceptions are correctly mapped to exit codes and that
the run_and_exit wrapper handles errors appropriately for CLI commands.
"""
from __future__ import annotations

import pytest
import typer

from block_inspect.errors import (
    DeadlineExceeded, DecodeFailed, EnumerationFailed, FetchFailed, InspectError,
    RenderFailed, SetupFailed,
)
from block_inspect.operations.mappers import EXIT_CODES, FALLBACK_EXIT_CODE, exit_code_for, run_and_exit


class TestExitCodeMapping:
    """Test exception to exit code mapping."""

    @pytest.mark.parametrize("exc, code", [
        (SetupFailed("bad template"), 2),
        (ValueError("bad value"), 2),
        (EnumerationFailed("list failed"), 3),
        (FetchFailed("not found"), 4),
        (DecodeFailed("bad json"), 5),
        (RenderFailed("write failed"), 6),
        (DeadlineExceeded("too slow"), 7),
    ])
    def test_known_exceptions(self, exc, code):
        assert exit_code_for(exc) == code

    def test_unknown_exceptions_use_fallback(self):
        assert exit_code_for(RuntimeError("test")) == FALLBACK_EXIT_CODE
        assert exit_code_for(InspectError("test")) == FALLBACK_EXIT_CODE
        assert exit_code_for(KeyError("test")) == FALLBACK_EXIT_CODE

    def test_subclasses_inherit_code(self):
        """Test that subclasses map through their base class."""
        class SlowListing(DeadlineExceeded):
            pass

        assert exit_code_for(SlowListing("x")) == 7
        # UnicodeDecodeError is a ValueError subclass
        assert exit_code_for(UnicodeDecodeError("utf-8", b"\xff", 0, 1, "bad")) == 2

    def test_exit_codes_distinct_for_inspect_errors(self):
        codes = [EXIT_CODES[name] for name in (
            "SetupFailed", "EnumerationFailed", "FetchFailed", "DecodeFailed",
            "RenderFailed", "DeadlineExceeded",
        )]
        assert len(set(codes)) == len(codes)
        assert FALLBACK_EXIT_CODE not in codes
        assert 0 not in codes


class TestRunAndExit:
    """Test the CLI command wrapper."""

    def test_success_returns_value(self):
        assert run_and_exit(lambda: 42) == 42

    def test_inspect_error_mapped(self, capsys):
        def failing():
            raise DecodeFailed("decode meta.json: bad", path="01ABC/meta.json")

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(failing)

        assert exc_info.value.exit_code == 5

    def test_unexpected_error_uses_fallback(self):
        def failing():
            raise RuntimeError("boom")

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(failing)

        assert exc_info.value.exit_code == FALLBACK_EXIT_CODE

    def test_typer_exit_passes_through(self):
        def exiting():
            raise typer.Exit(code=0)

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(exiting)

        assert exc_info.value.exit_code == 0

    def test_error_chained(self):
        def failing():
            raise FetchFailed("not found")

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(failing)

        assert isinstance(exc_info.value.__cause__, FetchFailed)


class TestErrorMessages:
    """Test InspectError string formatting."""

    def test_message_only(self):
        assert str(SetupFailed("invalid template")) == "invalid template"

    def test_path_and_entry(self):
        err = DecodeFailed("decode meta.json: bad", path="01ABC/meta.json", entry="01ABC/")
        assert str(err) == "decode meta.json: bad path=01ABC/meta.json entry=01ABC/"

    def test_entry_equal_to_path_not_repeated(self):
        err = DeadlineExceeded("deadline exceeded before processing entry", path="01C/", entry="01C/")
        assert str(err) == "deadline exceeded before processing entry path=01C/"
