"""Unit tests for operation context handling."""

import logging

import pytest

from platform_adapter.context.operation_context import (
    OperationContext,
    OperationHandler,
    operation,
)
from platform_adapter.exceptions import ValidationError, get_correlation_id, set_correlation_id
from platform_adapter.utils.logger import get_logger


@pytest.fixture
def debug_logs(monkeypatch, caplog):
    """get_logger() re-applies the configured level, so configure DEBUG."""
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    caplog.set_level(logging.DEBUG, logger="adapter")
    return caplog


class TestOperationContext:
    def test_generates_correlation_id(self):
        ctx = OperationContext("sync")

        assert ctx.correlation_id
        assert ctx.owns_correlation_id is True
        assert get_correlation_id() == ctx.correlation_id

        ctx.restore_correlation_id()
        assert get_correlation_id() is None

    def test_inherits_correlation_id(self):
        set_correlation_id("outer")

        ctx = OperationContext("inner")

        assert ctx.correlation_id == "outer"
        assert ctx.owns_correlation_id is False

    def test_explicit_id_is_restored_afterwards(self):
        set_correlation_id("outer")

        ctx = OperationContext("dispatch", correlation_id="req-1")
        assert get_correlation_id() == "req-1"

        ctx.restore_correlation_id()
        assert get_correlation_id() == "outer"

    def test_context_and_duration(self):
        ctx = OperationContext("sync", shop_id="s1")

        assert ctx.context["shop_id"] == "s1"
        assert ctx.duration_ms >= 0
        ctx.restore_correlation_id()


class TestOperationHandler:
    def test_enter_and_exit_logged(self, debug_logs):
        caplog = debug_logs
        handler = OperationHandler(get_logger())

        with handler.operation("dispatch", correlation_id="req-1", action="x"):
            assert get_correlation_id() == "req-1"

        messages = [r.getMessage().split(" | ")[0] for r in caplog.records]
        assert "ENTER: dispatch" in messages
        assert "EXIT: dispatch" in messages
        assert get_correlation_id() is None

    def test_base_error_is_enriched_and_reraised(self):
        handler = OperationHandler(get_logger())

        with pytest.raises(ValidationError) as exc_info:
            with handler.operation("upsert"):
                raise ValidationError("bad")

        assert exc_info.value.context["operation_name"] == "upsert"
        assert "operation_duration_ms" in exc_info.value.context
        assert get_correlation_id() is None

    def test_other_errors_reraised(self, debug_logs):
        caplog = debug_logs
        handler = OperationHandler(get_logger())

        with pytest.raises(KeyError):
            with handler.operation("lookup"):
                raise KeyError("k")

        assert any(r.exc_info for r in caplog.records)


class TestOperationDecorator:
    def test_default_name(self, debug_logs):
        caplog = debug_logs

        @operation
        def refresh():
            return "done"

        assert refresh() == "done"
        messages = [r.getMessage().split(" | ")[0] for r in caplog.records]
        assert "ENTER: test_operation_context.TestOperationDecorator.test_default_name.refresh" in (
            messages
        )

    def test_explicit_name(self, debug_logs):
        caplog = debug_logs

        @operation("custom_name")
        def refresh(value):
            return value * 2

        assert refresh(2) == 4
        assert any(r.getMessage().startswith("EXIT: custom_name") for r in caplog.records)

    def test_preserves_metadata(self):
        @operation()
        def documented():
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."
