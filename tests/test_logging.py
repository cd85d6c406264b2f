"""
Structured logger and payload sanitization tests.
"""

import logging

from nightly_review.util.logging import StructuredLogger, sanitize_payload


def test_sensitive_keys_are_redacted():
    payload = {"api_key": "sk-123", "title": "Status", "nested": {"token": "xoxb", "count": 2}}

    assert sanitize_payload(payload) == {
        "api_key": "[REDACTED]",
        "title": "Status",
        "nested": {"token": "[REDACTED]", "count": 2},
    }
    assert sanitize_payload(payload, reveal_sensitive=True)["api_key"] == "sk-123"


def test_long_values_are_shortened():
    assert sanitize_payload("x" * 150) == "x" * 100 + "..."
    assert sanitize_payload([0.1] * 384) == "[384 items]"
    assert sanitize_payload([1, "a"]) == [1, "a"]


def test_log_operation_formats_details(caplog):
    structured = StructuredLogger("nightly_review.test")
    with caplog.at_level(logging.INFO, logger="nightly_review.test"):
        structured.log_operation("review.run", "success", {"summaries": 2, "prompt": "secret text"})

    assert "Operation: review.run, Status: success" in caplog.text
    assert "'summaries': 2" in caplog.text
    assert "secret text" not in caplog.text


def test_set_debug_switches_level():
    structured = StructuredLogger("nightly_review.test_debug")
    structured.set_debug(True)
    assert structured.logger.level == logging.DEBUG
    structured.set_debug(False)
    assert structured.logger.level == logging.INFO
