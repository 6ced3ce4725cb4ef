"""Structured logging for unionpep."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .errors import ConfigError

_LOG_PATH_FIELDS = {
    "document_file",
    "contract_file",
    "output_file",
    "log_file",
}

EVENT_KEY_ORDER: dict[str, list[str]] = {
    "app_start": ["ts", "level", "command", "document_file", "contract_file", "log_file"],
    "document_loaded": ["ts", "level", "document_file", "line_count", "section_count"],
    "check_completed": ["ts", "level", "check", "errors", "warnings"],
    "checks_finished": ["ts", "level", "ok", "errors", "warnings", "checks"],
    "example_evaluated": ["ts", "level", "line", "outcome", "detail"],
    "roundtrip_written": ["ts", "level", "output_file", "identical"],
    "browse_command": ["ts", "level", "command", "args"],
}
DEFAULT_EVENT_KEY_ORDER = ["ts", "level", "logger"]


def _to_log_safe(value: Any) -> Any:
    """Reduce a field value to something json.dumps accepts."""
    if isinstance(value, Enum):
        return _to_log_safe(value.value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(k): _to_log_safe(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(str(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [_to_log_safe(v) for v in value]
    return str(value)


def _resolve_log_path(path_value: str) -> str:
    value = path_value.strip()
    if not value:
        return path_value
    return str(Path(value).expanduser())


def summarize_text(text: Any) -> str:
    """Return normalized summary text for logs."""
    if text is None:
        return ""
    return " ".join(str(text).split())


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    """Emit a structured log event."""
    payload = {
        "ts": datetime.now().astimezone().isoformat(),
        "event": event,
    }
    for key, value in fields.items():
        if key in _LOG_PATH_FIELDS and isinstance(value, str):
            value = _resolve_log_path(value)
        payload[key] = _to_log_safe(value)
    logging.getLogger("unionpep").log(
        level, json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    )


def _decode_payload(message: str) -> dict[str, Any] | None:
    """Return the event payload of a log_event message, or None for plain text."""
    if not (message.startswith("{") and message.endswith("}")):
        return None
    try:
        payload = json.loads(message)
    except json.JSONDecodeError:
        return None
    return payload if isinstance(payload, dict) else None


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ", ".join(_render_value(item) for item in value)
    return str(value).replace("\n", "\\n")


class StructuredTextFormatter(logging.Formatter):
    """Render each record as an `=== event ===` block of `key: value` lines.

    Records emitted by log_event keep their payload fields. Any other record
    is shown under its logger name with a single `message` field.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._entries_written = 0

    @staticmethod
    def _ordered_keys(event_name: str, fields: dict[str, Any]) -> list[str]:
        present = [key for key, value in fields.items() if value is not None]
        preferred = [
            key
            for key in EVENT_KEY_ORDER.get(event_name, DEFAULT_EVENT_KEY_ORDER)
            if key in present
        ]
        return preferred + sorted(key for key in present if key not in preferred)

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        payload = _decode_payload(message)
        if payload is None:
            payload = {"event": record.name, "message": message}

        event_name = str(payload.pop("event", record.name))
        fields: dict[str, Any] = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            **payload,
        }

        lines = [f"=== {event_name} ==="]
        lines.extend(
            f"{key}: {_render_value(fields[key])}"
            for key in self._ordered_keys(event_name, fields)
        )
        if record.exc_info:
            lines.append("traceback:")
            lines.append(self.formatException(record.exc_info))

        self._entries_written += 1
        block = "\n".join(lines)
        # Entries after the first are separated by a blank line.
        return block if self._entries_written == 1 else "\n" + block


def setup_logging(log_file: Optional[str] = None) -> None:
    """Log to a file with the structured formatter, or not at all.

    Raises ConfigError when the log file cannot be opened.
    """
    if not log_file:
        logging.disable(logging.CRITICAL)
        return

    log_path = Path(log_file)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(str(log_path), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot open log file {log_path}: {exc.strerror or exc}") from exc
    handler.setFormatter(StructuredTextFormatter())
    logging.basicConfig(level=logging.INFO, handlers=[handler], force=True)
    logging.disable(logging.NOTSET)
