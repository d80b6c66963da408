"""Structured Logging: one JSON object per log line, tagged with the service name.

Invariants:
    - Every line carries timestamp (record creation time, UTC), level, logger,
      service and message
    - Only whitelisted extras are emitted (vault_id, error_code, path, attempt,
      model, token counts, client_ip); anything else passed via `extra` is dropped
    - Master keys, plaintext secrets and API keys are never passed as extras
"""

import json
import logging
from datetime import datetime, timezone

SERVICE_NAME = "subvault-api"

_EXTRA_FIELDS = frozenset({
    "vault_id", "error_code", "path", "attempt", "model",
    "prompt_tokens", "completion_tokens", "client_ip",
})

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _whitelisted_extras(record: logging.LogRecord) -> dict:
    return {
        key: value for key, value in vars(record).items()
        if key in _EXTRA_FIELDS and value is not None
    }


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "message": record.getMessage(),
            **_whitelisted_extras(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install a single stderr handler on the root logger (idempotent)."""
    formatter = JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logging.root.handlers = [handler]
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
