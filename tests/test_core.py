"""Tests for exceptions and logging utilities."""

import json
import logging

from sqlalchemy.exc import OperationalError

from scorecard_engine.core.exceptions import (
    AuthorizationError,
    ResourceNotFoundError,
    create_validation_error,
    handle_database_exception,
)
from scorecard_engine.core.logging import (
    CustomJsonFormatter,
    SecurityLogProcessor,
    get_logger,
    request_id,
)


def test_exception_to_dict_shape():
    error = AuthorizationError("nope", required_permission="scorecard.view")

    assert error.status_code == 403
    assert error.to_dict() == {
        "error": {
            "message": "nope",
            "code": "AUTHORIZATION_FAILED",
            "details": {"required_permission": "scorecard.view"},
            "type": "AuthorizationError",
        }
    }


def test_not_found_message():
    assert ResourceNotFoundError("Agent", "a9").message == "Agent not found (ID: a9)"


def test_validation_error_counts_field_errors():
    error = create_validation_error({"year": ["bad"], "month": ["bad", "worse"]})

    assert error.message == "Validation failed with 3 error(s)"
    assert error.details["field_errors"]["month"] == ["bad", "worse"]


def test_database_errors_do_not_leak_driver_messages():
    exc = OperationalError("SELECT secret FROM users", {}, Exception("disk I/O error at /var/lib/db"))

    error = handle_database_exception(exc, operation="upsert", table="agent_metrics")

    assert error.status_code == 500
    assert "disk" not in json.dumps(error.to_dict())
    assert error.details == {"operation": "upsert", "table": "agent_metrics"}


def test_security_processor_redacts_nested_keys():
    event = {
        "event": "Permission denied",
        "authorization": "Bearer abc",
        "context": {"api_token": "xyz", "agent_id": "a1"},
    }

    result = SecurityLogProcessor()(None, "warning", event)

    assert result["authorization"] == "[REDACTED]"
    assert result["context"]["api_token"] == "[REDACTED]"
    assert result["context"]["agent_id"] == "a1"
    assert result["security_event"] is True


def test_json_formatter_adds_context_and_redacts():
    formatter = CustomJsonFormatter("%(message)s", environment="test")
    record = logging.LogRecord("scorecard_engine.test", logging.INFO, __file__, 10, "Saved scorecard", (), None)
    record.agent_id = "a1"
    record.session_id = "s3cr3t"

    token = request_id.set("req-42")
    try:
        payload = json.loads(formatter.format(record))
    finally:
        request_id.reset(token)

    assert payload["event"] == "Saved scorecard"
    assert payload["agent_id"] == "a1"
    assert payload["session_id"] == "[REDACTED]"
    assert payload["request_id"] == "req-42"
    assert payload["environment"] == "test"
    assert payload["service"] == "scorecard-engine"


def test_logger_adapter_merges_bound_context(caplog):
    logger = get_logger("scorecard_engine.test", cache_namespace="ns")

    with caplog.at_level(logging.INFO, logger="scorecard_engine.test"):
        logger.info("Cache invalidated", extra={"agent_id": "a1"})

    record = caplog.records[-1]
    assert record.cache_namespace == "ns"
    assert record.agent_id == "a1"
