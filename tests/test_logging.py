import json
import logging

import pytest
import structlog

pytestmark = pytest.mark.unit


@pytest.fixture()
def json_formatter(settings):
    formatter_config = settings.LOGGING["formatters"]["json"]
    factory = formatter_config["()"]
    kwargs = {key: value for key, value in formatter_config.items() if key != "()"}
    return factory(**kwargs)


def _render(formatter, logger_name: str, event: str, **fields) -> dict:
    record = logging.LogRecord(logger_name, logging.INFO, __file__, 1, event, None, None)
    for key, value in fields.items():
        setattr(record, key, value)
    return json.loads(formatter.format(record))


class TestJsonLogging:
    def test_stdlib_records_render_as_json(self, json_formatter):
        data = _render(json_formatter, "django.request", "plain stdlib message")
        assert data["event"] == "plain stdlib message"
        assert data["level"] == "info"
        assert data["logger"] == "django.request"
        assert "timestamp" in data

    def test_stdlib_records_are_masked(self, json_formatter):
        data = _render(json_formatter, "django", "login password=hunter2 ok")
        assert "hunter2" not in data["event"]

    def test_bound_context_is_merged(self, json_formatter):
        structlog.contextvars.bind_contextvars(correlation_id="cid-123")
        try:
            data = _render(json_formatter, "modules.orders", "order.created")
        finally:
            structlog.contextvars.clear_contextvars()
        assert data["correlation_id"] == "cid-123"


class TestStructlogLoggers:
    def test_module_logger_emits_through_stdlib(self, caplog):
        logger = structlog.get_logger("modules.orders.services")
        with caplog.at_level(logging.INFO):
            logger.info("order.created", order_id="abc")
        assert any("order.created" in record.getMessage() for record in caplog.records)
