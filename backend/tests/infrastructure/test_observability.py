"""Structured Logging — verifies JSON log shape and the access log.

Tests:
    - Base fields always present, tagged with the service name
    - User and request fields grouped under "context", unknown ones dropped
    - Exceptions rendered into the "exception" key
    - setup_logging() installs exactly one service handler however often it runs
    - Every request writes one access line with method, path, status and latency
"""

import json
import logging
import sys

from cmasapp.infrastructure.observability import JSONFormatter, setup_logging


def _record(msg="hello", exc_info=None, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "cmasapp.test", logging.INFO, __file__, 1, msg, None, exc_info,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_base_fields():
    log = json.loads(JSONFormatter(service="users-api").format(_record()))

    assert log["service"] == "users-api"
    assert log["level"] == "INFO"
    assert log["logger"] == "cmasapp.test"
    assert log["message"] == "hello"
    assert "timestamp" in log
    assert "context" not in log


def test_json_formatter_groups_user_context():
    log = json.loads(JSONFormatter().format(
        _record(user_id=100000, operation="update", error_code="USER_NOT_FOUND", unrelated="x"),
    ))

    assert log["context"] == {
        "user_id": 100000, "operation": "update", "error_code": "USER_NOT_FOUND",
    }
    assert "unrelated" not in log
    assert "user_id" not in log


def test_json_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record(exc_info=sys.exc_info())

    log = json.loads(JSONFormatter().format(record))

    assert "ValueError: boom" in log["exception"]


def test_setup_logging_is_idempotent():
    root = logging.getLogger()
    before, level = list(root.handlers), root.level
    try:
        setup_logging("DEBUG", "json")
        setup_logging("WARNING", "json")

        ours = [h for h in root.handlers if h.get_name() == "cmasapp"]
        assert len(ours) == 1
        assert isinstance(ours[0].formatter, JSONFormatter)
        assert root.level == logging.WARNING
    finally:
        for handler in [h for h in root.handlers if h not in before]:
            root.removeHandler(handler)
        root.setLevel(level)


async def test_requests_are_access_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="cmasapp.access"):
        res = await client.get("/api/users/424242")

    assert res.status_code == 404
    lines = [r for r in caplog.records if r.name == "cmasapp.access"]
    assert len(lines) == 1
    line = lines[0]
    assert line.getMessage() == "GET /api/users/424242 404"
    assert line.method == "GET"
    assert line.status == 404
    assert line.duration_ms >= 0
