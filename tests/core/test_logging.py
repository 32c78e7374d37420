"""Tests for shipyard.core.logging — structlog configuration and context."""

import json
import logging

import structlog

from shipyard.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


class TestContext:
    def test_bind_and_unbind(self):
        bind_context(run_id="r1", deployment="mod:Deploy")
        assert structlog.contextvars.get_contextvars() == {"run_id": "r1", "deployment": "mod:Deploy"}
        unbind_context("deployment")
        assert structlog.contextvars.get_contextvars() == {"run_id": "r1"}
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_log_context_scoped(self):
        with LogContext(run_id="r1"):
            with LogContext(deployment="mod:Deploy"):
                assert structlog.contextvars.get_contextvars() == {
                    "run_id": "r1",
                    "deployment": "mod:Deploy",
                }
            assert structlog.contextvars.get_contextvars() == {"run_id": "r1"}
        assert structlog.contextvars.get_contextvars() == {}

    def test_log_context_unbinds_on_exception(self):
        try:
            with LogContext(run_id="r1"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert structlog.contextvars.get_contextvars() == {}


class TestConfigureLogging:
    def test_json_output_includes_context(self, capsys):
        configure_logging(level="INFO", json_format=True, service="shipyard-test")
        logger = get_logger("shipyard.test")

        with LogContext(run_id="abc123"):
            logger.info("deployment.finished", exit_code=0)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "deployment.finished"
        assert record["run_id"] == "abc123"
        assert record["exit_code"] == 0
        assert record["service"] == "shipyard-test"
        assert record["level"] == "info"
        assert "timestamp" in record

    def test_level_filters(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        logger = get_logger("shipyard.test")
        logger.info("hidden")
        logger.warning("shown")
        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_stdlib_root_logger_untouched(self):
        root = logging.getLogger()
        handlers = list(root.handlers)
        configure_logging(level="DEBUG", json_format=True)
        assert root.handlers == handlers

    def test_console_renderer(self, capsys):
        configure_logging(level="DEBUG", json_format=False, add_timestamp=False)
        get_logger("shipyard.test").debug("task.skipped", task="ShellTask")
        err = capsys.readouterr().err
        assert "task.skipped" in err
        assert "ShellTask" in err


class TestGetLogger:
    def test_module_loggers_created_at_import(self):
        import importlib

        core = importlib.import_module("shipyard.core")
        assert core is not None
        assert get_logger(__name__) is not None
        assert get_logger() is not None

    def test_name_bound_as_logger_name(self, capsys):
        configure_logging(level="INFO", json_format=True)
        get_logger("shipyard.deploy.runner").info("task.skipped")

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["logger_name"] == "shipyard.deploy.runner"
        assert record["event"] == "task.skipped"
