"""Tests for hnterm.logs — logging setup."""

import logging

from rich.logging import RichHandler

from hnterm.logs import resolve_level, setup_logging


class TestResolveLevel:
    def test_verbose_is_debug(self, monkeypatch):
        monkeypatch.setenv("HNTERM_LOG", "error")
        assert resolve_level(verbose=True) == logging.DEBUG

    def test_env_level(self, monkeypatch):
        monkeypatch.setenv("HNTERM_LOG", "info")
        assert resolve_level() == logging.INFO

    def test_default_warning(self, monkeypatch):
        monkeypatch.delenv("HNTERM_LOG", raising=False)
        assert resolve_level() == logging.WARNING

    def test_bad_env_level_falls_back(self, monkeypatch):
        monkeypatch.setenv("HNTERM_LOG", "chatty")
        assert resolve_level() == logging.WARNING


class TestSetupLogging:
    def test_rich_handler_on_console(self):
        handler = setup_logging(verbose=True)
        logger = logging.getLogger("hnterm")
        assert isinstance(handler, RichHandler)
        assert logger.handlers == [handler]
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_file_handler_for_tui(self, tmp_path):
        log_file = tmp_path / "logs" / "hnterm.log"
        handler = setup_logging(verbose=True, log_file=str(log_file), to_file=True)
        assert isinstance(handler, logging.FileHandler)
        logging.getLogger("hnterm.api").debug("hello from api")
        handler.flush()
        assert "hnterm.api: hello from api" in log_file.read_text()

    def test_repeated_setup_replaces_handler(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger("hnterm").handlers) == 1
