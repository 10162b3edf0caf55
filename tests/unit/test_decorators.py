"""Unit tests for CLI decorators and output helpers."""

import os
from unittest.mock import patch

import pytest
import typer
from loguru import logger

from berth.errors import BerthError, CLIError, ExecutionError, ValidationError
from berth.utils.console import get_console, print_error, reset_consoles
from berth.utils.decorators import handle_errors
from berth.utils.logging import log_level, setup_logging


class TestHandleErrors:
    """Test error handling decorator."""

    def test_successful_execution(self):
        """Test decorator doesn't interfere with successful execution."""

        @handle_errors
        def successful_func():
            return "success"

        assert successful_func() == "success"

    def test_typer_exit_passes_through(self):
        @handle_errors
        def exiting_func():
            raise typer.Exit(3)

        with pytest.raises(typer.Exit) as exc_info:
            exiting_func()

        assert exc_info.value.exit_code == 3

    def test_keyboard_interrupt(self):
        """Test handling of KeyboardInterrupt."""

        @handle_errors
        def interrupted_func():
            raise KeyboardInterrupt()

        with patch("berth.utils.decorators.print_error") as mock_print_error:
            with pytest.raises(typer.Exit) as exc_info:
                interrupted_func()

            assert exc_info.value.exit_code == 130  # SIGINT exit code
            mock_print_error.assert_called_once()
            assert "cancelled by user" in mock_print_error.call_args[0][0].lower()

    def test_child_exit_code_is_forwarded_silently(self):
        @handle_errors
        def failing_child():
            raise ExecutionError.non_zero_exit("make test", 7)

        with patch("berth.utils.decorators.print_error") as mock_print_error:
            with pytest.raises(typer.Exit) as exc_info:
                failing_child()

            assert exc_info.value.exit_code == 7
            mock_print_error.assert_not_called()

    def test_missing_shell_is_reported(self):
        @handle_errors
        def missing_shell():
            raise ExecutionError(
                "shell not found: nosh",
                exit_code=127,
                cause=FileNotFoundError("nosh"),
            )

        with patch("berth.utils.decorators.print_error") as mock_print_error:
            with pytest.raises(typer.Exit) as exc_info:
                missing_shell()

            assert exc_info.value.exit_code == 127
            mock_print_error.assert_called_once()

    def test_validation_error(self):
        @handle_errors
        def rejected():
            raise ValidationError.dangerous_pattern("arguments", "pipe operator", "|", "argument 1")

        with patch("berth.utils.decorators.print_error") as mock_print_error:
            with pytest.raises(typer.Exit) as exc_info:
                rejected()

            assert exc_info.value.exit_code == 1
            message = mock_print_error.call_args[0][0]
            assert "pipe operator" in message
            assert "BERTH_SANITIZE_MODE=disabled" in message
            assert mock_print_error.call_args[1]["title"] == "ValidationError"

    def test_cli_error_exit_code(self):
        @handle_errors
        def unknown():
            raise CLIError.invalid_command("tset", ["test"])

        with patch("berth.utils.decorators.print_error"):
            with pytest.raises(typer.Exit) as exc_info:
                unknown()

        assert exc_info.value.exit_code == 2

    def test_verbose_shows_technical_details(self, monkeypatch):
        monkeypatch.setenv("BERTH_VERBOSE", "1")

        @handle_errors
        def failing():
            raise BerthError("boom").with_context(config_path="/tmp/x.yml")

        with patch("berth.utils.decorators.print_error") as mock_print_error:
            with pytest.raises(typer.Exit):
                failing()

        assert "config_path: /tmp/x.yml" in mock_print_error.call_args[0][0]

    def test_unexpected_exception(self):
        @handle_errors
        def broken():
            raise RuntimeError("something odd")

        with patch("berth.utils.decorators.print_error") as mock_print_error:
            with pytest.raises(typer.Exit) as exc_info:
                broken()

            assert exc_info.value.exit_code == 1
            assert "RuntimeError: something odd" in mock_print_error.call_args[0][0]


class TestConsole:
    """Test console helpers."""

    def test_quiet_console(self, monkeypatch):
        monkeypatch.setenv("BERTH_QUIET", "1")
        reset_consoles()

        assert get_console().quiet

    def test_console_is_cached(self):
        assert get_console() is get_console()

    def test_print_error_writes_stderr(self, capsys):
        print_error("bad [input]")

        captured = capsys.readouterr()
        assert "bad [input]" in captured.err
        assert captured.out == ""


class TestLogging:
    """Test logging setup."""

    @pytest.mark.parametrize(
        "verbose,quiet,expected",
        [
            (False, False, "WARNING"),
            (True, False, "DEBUG"),
            (False, True, "ERROR"),
            (True, True, "DEBUG"),
        ],
    )
    def test_log_level(self, verbose, quiet, expected):
        assert log_level(verbose, quiet) == expected

    def test_setup_logging_exports_flags(self, monkeypatch):
        monkeypatch.setenv("BERTH_VERBOSE", "0")

        with patch("berth.utils.logging.logger") as mock_logger:
            setup_logging(verbose=True)

        mock_logger.remove.assert_called_once_with()
        assert mock_logger.add.call_args[1]["level"] == "DEBUG"
        assert os.environ["BERTH_VERBOSE"] == "1"

    def test_quiet_still_shows_notices(self, monkeypatch, capsys):
        monkeypatch.setenv("BERTH_QUIET", "0")

        sink_id = setup_logging(quiet=True)
        try:
            logger.warning("plain warning")
            logger.bind(notice=True).warning("allowed by warn mode")
            logger.error("real error")
        finally:
            logger.remove(sink_id)

        err = capsys.readouterr().err
        assert "plain warning" not in err
        assert "allowed by warn mode" in err
        assert "real error" in err
