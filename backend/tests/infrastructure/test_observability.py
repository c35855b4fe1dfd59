"""Structured Logging — JSON formatter output."""

import json
import logging

from roomstate.infrastructure.observability import JSONFormatter


def _record(msg="hello", **extra):
    record = logging.LogRecord("roomstate.test", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_base_fields():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "INFO"
    assert log["logger"] == "roomstate.test"
    assert log["message"] == "hello"
    assert "timestamp" in log


def test_json_formatter_surfaces_room_extras():
    log = json.loads(JSONFormatter().format(_record(
        room_id="!r:example.org", user_id="@a:example.org", event_id="$e:example.org",
    )))
    assert log["room_id"] == "!r:example.org"
    assert log["user_id"] == "@a:example.org"
    assert log["event_id"] == "$e:example.org"
    assert "path" not in log


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        import sys
        record = _record()
        record.exc_info = sys.exc_info()
    log = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: boom" in log["exception"]
