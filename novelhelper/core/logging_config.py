"""Structured logging configuration for NovelHelper.

``setup_logging`` installs one stdout handler on the root logger. Output is
either one JSON object per line or a human-readable line; both carry the
``extra`` fields passed by callers (``version_id``, ``branch_id``, ...) and
the current request id, if the request context middleware set one.
"""

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# Shared contextvar, set by request_context middleware, read by the formatters.
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

# Attributes every LogRecord has; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()) | {
    "message",
    "asctime",
    "request_tag",
}

# Libraries that log every request or statement at INFO.
_NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "urllib3", "minio")


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class _JsonFormatter(logging.Formatter):
    """Emit each log record as a single JSON line.

    ``logger.info("Created version", extra={"version_id": "abc"})`` becomes
    ``{"message": "Created version", "version_id": "abc", ...}``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = request_id_var.get("")
        if rid:
            payload["request_id"] = rid

        for key, value in _extras(record).items():
            payload.setdefault(key, value)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class _TextFormatter(logging.Formatter):
    """``time - logger - LEVEL - [request] message key=value ...``"""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(request_tag)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        extras = _extras(record)
        rid = request_id_var.get("")
        record.request_tag = f"[{rid}] " if rid else ""
        line = super().format(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        return line


# ---------------------------------------------------------------------------
# Secret redaction: keeps object-storage credentials out of log output
# ---------------------------------------------------------------------------

_SECRET_PATTERNS = [
    re.compile(r'(?i)(bearer\s+)[a-zA-Z0-9._\-]{20,}'),
    re.compile(
        r'(?i)((?:access_key|secret_key|secret|password|token|authorization|signature)[=:]\s*)[^\s,\'"&]{8,}'
    ),
    re.compile(r'(?i)(X-Amz-Credential=)[^\s&]+'),
    re.compile(r'(?i)(X-Amz-Signature=)[0-9a-f]+'),
    # user:password@ in database URLs
    re.compile(r'(://[^:/\s]+:)[^@\s/]+(?=@)'),
]

_REDACTED = "***REDACTED***"


def _redact(text: str) -> str:
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + _REDACTED, text)
    return text


class _SecretFilter(logging.Filter):
    """Redact credentials from messages, string extras and exception text.

    S3 errors echo request URLs, so the ``error`` extra the transport logs
    can carry signed query parameters.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            record.msg = record.getMessage()
            record.args = None
        record.msg = _redact(str(record.msg))
        for key, value in _extras(record).items():
            if isinstance(value, str):
                setattr(record, key, _redact(value))
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = _redact(record.exc_text)
        return True


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure application-wide logging.

    Args:
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL. Defaults to INFO.
        log_format: ``"json"`` for structured output, ``"text"`` for human-readable.
                    Defaults to ``"json"``.
    """
    level = (log_level or "INFO").upper()
    fmt = (log_format or "json").lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_SecretFilter())
    handler.setFormatter(_JsonFormatter() if fmt == "json" else _TextFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging configured", extra={"level": level, "format": fmt})
