"""Tests for the shared logging helpers."""
import logging

from common.logging_utils import Timer, configure_logging, extra_context, is_debug_enabled
from constants import Constants


class TestExtraContext:
    def test_none_values_dropped(self):
        ctx = extra_context(event="decision", component="resolver", action="resolve_one", package=None, count=2)
        assert ctx == {"event": "decision", "component": "resolver", "action": "resolve_one", "count": 2}

    def test_outcome_kept(self):
        assert extra_context("e", "c", "a", outcome="ok")["outcome"] == "ok"


class TestConfigureLogging:
    def test_level_from_env_and_single_handler(self, monkeypatch):
        root = logging.getLogger()
        saved_level, saved_handlers = root.level, list(root.handlers)
        try:
            monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "DEBUG")
            configure_logging()
            count = len(root.handlers)
            assert root.level == logging.DEBUG
            assert is_debug_enabled(logging.getLogger("resolver.closure"))
            monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "bogus")
            configure_logging()
            assert root.level == logging.INFO
            assert len(root.handlers) == count
        finally:
            for handler in list(root.handlers):
                if handler not in saved_handlers:
                    root.removeHandler(handler)
            if hasattr(root, "_debsolve_configured"):
                delattr(root, "_debsolve_configured")
            root.setLevel(saved_level)


class TestTimer:
    def test_duration(self):
        with Timer() as timer:
            pass
        assert timer.duration_ms() >= 0.0
