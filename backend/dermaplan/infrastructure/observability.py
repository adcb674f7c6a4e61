"""Structured Logging — JSON formatter and setup for decision-pipeline observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (user_id, profile_version, topic_id, rule_id, error_code, cache_key)
      are surfaced when present
    - JSON format in production, human-readable in development

Design Decisions:
    - stdlib logging with a JSONFormatter: no logging dependency in the core layers
    - setup_logging called once when the decision service is wired (main.create_decision_service)
"""

import logging
import json
from datetime import datetime, timezone

SURFACED_EXTRAS = (
    "user_id", "profile_version", "topic_id", "rule_id", "template_id",
    "error_code", "cache_key", "operation", "reason",
)


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in SURFACED_EXTRAS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


_HANDLER_NAME = "dermaplan"


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the root handler; repeated calls replace it instead of stacking."""
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
