"""Logging setup for the API process and the CLI runner.

Run-scoped context (brand, stage, query_index) is passed through ``extra=``
and surfaces as top-level keys in JSON output.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from aeo_grader.core.config import settings

# LogRecord attributes promoted into JSON output when present
_CONTEXT_FIELDS = ("brand", "stage", "query_index")

_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_QUIET_LOGGERS = ("httpx", "httpcore")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in _CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Install a single stdout handler on the root logger.

    Arguments override ``LOG_LEVEL`` / ``LOG_JSON`` from settings.
    """
    level_name = (level or settings.log_level).upper()
    numeric = getattr(logging, level_name, logging.INFO)
    use_json = settings.log_json if json_output is None else json_output

    root = logging.getLogger()
    root.setLevel(numeric)
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric)
    handler.setFormatter(JSONFormatter() if use_json else logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(handler)

    # Per-request lines from the HTTP client drown out pipeline progress
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(numeric if settings.app_debug else logging.WARNING)
