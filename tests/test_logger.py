"""
Tests for logger.py - console routing of log records.
"""

import io

from rich.console import Console

from rum_symbols.logger import create_logger


def _consoles():
    stdout = Console(file=io.StringIO(), width=200, color_system=None)
    stderr = Console(file=io.StringIO(), width=200, color_system=None)
    return stdout, stderr


class TestCreateLogger:
    """Tests for create_logger."""

    def test_info_goes_to_stdout_without_prefix(self):
        stdout, stderr = _consoles()
        logger = create_logger(stdout=stdout, stderr=stderr)

        logger.info("Found 2 JavaScript file(s)")

        assert stdout.file.getvalue() == "Found 2 JavaScript file(s)\n"
        assert stderr.file.getvalue() == ""

    def test_warning_and_error_go_to_stderr_with_prefix(self):
        stdout, stderr = _consoles()
        logger = create_logger(stdout=stdout, stderr=stderr)

        logger.warning("careful")
        logger.error("broken")

        assert stderr.file.getvalue() == "WARN careful\nERROR broken\n"
        assert stdout.file.getvalue() == ""

    def test_debug_hidden_by_default(self):
        stdout, stderr = _consoles()
        logger = create_logger(stdout=stdout, stderr=stderr)

        logger.debug("details")

        assert stderr.file.getvalue() == ""

    def test_debug_shown_when_enabled(self):
        stdout, stderr = _consoles()
        logger = create_logger(debug=True, stdout=stdout, stderr=stderr)

        logger.debug("details")

        assert stderr.file.getvalue() == "DEBUG details\n"

    def test_recreating_does_not_duplicate_handlers(self):
        stdout, stderr = _consoles()
        create_logger(stdout=stdout, stderr=stderr)
        logger = create_logger(stdout=stdout, stderr=stderr)

        logger.info("once")

        assert stdout.file.getvalue() == "once\n"
