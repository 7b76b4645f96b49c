from __future__ import annotations

import json
import logging
import sys

from wishlist.core.logger import REQUEST_ID_HEADER, JSONFormatter


def _record(msg: str, *args, exc_info=None, **extra) -> logging.LogRecord:
    record = logging.LogRecord("wishlist.test", logging.INFO, __file__, 1, msg, args, exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_known_extras():
    record = _record("User logged out: %s", "abc", user_id="abc", provider="google", secret="x")
    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "User logged out: abc"
    assert payload["level"] == "INFO"
    assert payload["user_id"] == "abc"
    assert payload["provider"] == "google"
    assert "secret" not in payload


def test_json_formatter_includes_exception_text():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record("failed", exc_info=sys.exc_info())
    payload = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in payload["exc_info"]


def test_request_id_is_echoed(client):
    resp = client.get("/api/v1/health", headers={REQUEST_ID_HEADER: "req-123"})
    assert resp.headers[REQUEST_ID_HEADER] == "req-123"


def test_request_id_is_generated_when_absent(client):
    resp = client.get("/api/v1/health")
    assert resp.headers.get(REQUEST_ID_HEADER)
