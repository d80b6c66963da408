"""JSON log formatter tests."""

import json
import logging
from datetime import datetime, timezone

from subvault.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "subvault.test", logging.WARNING, __file__, 1, "Vault %s locked", ("v1",), None,
    )
    record.__dict__.update(extra)
    return record


def test_base_fields():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "WARNING"
    assert log["logger"] == "subvault.test"
    assert log["message"] == "Vault v1 locked"
    assert "timestamp" in log


def test_extra_fields_surface_when_present():
    log = json.loads(JSONFormatter().format(
        _record(vault_id="v1", error_code="RATE_LIMITED", attempt=2),
    ))
    assert log["vault_id"] == "v1"
    assert log["error_code"] == "RATE_LIMITED"
    assert log["attempt"] == 2
    assert "model" not in log


def test_unknown_extras_not_included():
    log = json.loads(JSONFormatter().format(_record(password="hunter2")))
    assert "password" not in log


def test_service_name_and_record_time():
    record = _record()
    log = json.loads(JSONFormatter().format(record))
    assert log["service"] == "subvault-api"
    assert log["timestamp"].startswith(
        datetime.fromtimestamp(record.created, timezone.utc).isoformat()[:19],
    )


def test_setup_logging_replaces_root_handlers():
    original = logging.root.handlers[:]
    try:
        setup_logging("DEBUG", "json")
        setup_logging("WARNING", "json")
        assert len(logging.root.handlers) == 1
        assert isinstance(logging.root.handlers[0].formatter, JSONFormatter)
        assert logging.root.level == logging.WARNING
    finally:
        logging.root.handlers = original
