"""Tests for log context, secret masking and JSON output."""

import json
import logging

from observability.logging import (
    MASK,
    ContextFilter,
    JsonFormatter,
    SecretFilter,
    clear_context,
    set_flow_context,
    set_run_context,
)


def make_record(msg: str, *args, **extra) -> logging.LogRecord:
    record = logging.LogRecord("pipeline", logging.INFO, "pipeline.py", 10, msg, args, None)
    record.__dict__.update(extra)
    return record


def test_context_filter_stamps_run_and_flow():
    set_run_context("3f9a1c2e")
    set_flow_context("research")
    try:
        record = make_record("Search complete")
        ContextFilter().filter(record)
        assert (record.run_id, record.flow) == ("3f9a1c2e", "research")
    finally:
        clear_context()


def test_secret_filter_masks_webhook_url():
    url = "https://discord.com/api/webhooks/123/very-secret-token"
    record = make_record("Webhook failed | url=%s", url)

    SecretFilter([url, ""]).filter(record)

    assert record.getMessage() == f"Webhook failed | url={MASK}"


def test_secret_filter_ignores_short_values():
    record = make_record("status=%s", "New")
    SecretFilter(["New"]).filter(record)
    assert record.getMessage() == "status=New"


def test_json_formatter_includes_context_and_extra():
    record = make_record("Flow done", run_id="abc", flow="apps", attempts=2)
    data = json.loads(JsonFormatter().format(record))

    assert data["message"] == "Flow done"
    assert data["run_id"] == "abc"
    assert data["flow"] == "apps"
    assert data["attempts"] == 2
    assert "msg" not in data
