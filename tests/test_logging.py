import json
import logging
import sys

from app.core.logging import JsonFormatter


def _record(msg="hello %s", args=("world",), exc_info=None, **extra):
    record = logging.LogRecord("app.test", logging.WARNING, __file__, 10, msg, args, exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_one_object():
    payload = json.loads(JsonFormatter().format(_record()))

    assert payload["level"] == "WARNING"
    assert payload["name"] == "app.test"
    assert payload["message"] == "hello world"
    assert "timestamp" in payload


def test_json_formatter_merges_extra_fields():
    record = _record(extra_fields={"request_id": "r1", "status_code": 503})
    payload = json.loads(JsonFormatter().format(record))

    assert payload["request_id"] == "r1"
    assert payload["status_code"] == 503


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record(exc_info=sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))
    assert "RuntimeError: boom" in payload["exception"]
