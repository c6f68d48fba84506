"""Structured Logging — JSON log lines for the API, webhooks and scripts.

Invariants:
    - Every line carries timestamp, level, logger and message
    - Known extra fields (order_id, event_type, user_id, ...) copied when set;
      UUIDs and other objects stringified, numbers and booleans kept as-is
    - "json" format for deployments, "text" for the CLI and local runs

Design Decisions:
    - stdlib logging + a small formatter: services log with logging.getLogger(__name__)
    - Handler tagged by name so setup_logging can run again (tests, scripts) without duplicates
    - SDK loggers (httpx, stripe, google_genai) pinned to WARNING: request-level
      chatter drowns the domain events
"""

import json
import logging
from datetime import datetime, timezone

HANDLER_NAME = "prompt_atrium"
EXTRA_KEYS = (
    "error_code", "path", "user_id", "order_id", "event_type",
    "community_id", "batch_number", "attempt", "provider",
    "input_tokens", "output_tokens",
)
QUIET_LOGGERS = ("httpx", "httpcore", "stripe", "google_genai")


def _plain(value):
    if isinstance(value, (int, float, bool)):
        return value
    return str(value)


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update({
            key: _plain(record.__dict__[key])
            for key in EXTRA_KEYS
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json"
        else logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
