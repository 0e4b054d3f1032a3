"""Console logging for ScreenLance, built on structlog.

Every line is ``HH:MM:SS LVL event key=value ...``:
    12:30:45 INF engine ready encoder=encoder_model.onnx threads=8
    12:30:46 DBG tick timing capture_ms=12 ocr_ms=85 translate_ms=140
    12:30:47 INF translated text="Bonjour le monde" status=ok cached=False
    12:30:48 ERR target ids rejected by vocabulary ids=[812, 58101, 7, 93, 4, 12, 655, 31, ... +40]
"""

import logging
import sys

import structlog

LEVEL_NAMES = {
    "debug": "DBG",
    "info": "INF",
    "warning": "WRN",
    "error": "ERR",
    "critical": "CRT",
}

# Token id lists longer than this are shortened on the console
MAX_LOGGED_ITEMS = 8


def _short_level(logger, method_name, event_dict):
    level = event_dict.get("level", method_name)
    event_dict["level"] = LEVEL_NAMES.get(level, level.upper()[:3])
    return event_dict


def format_value(value) -> str:
    """Render one field value for the console."""
    if isinstance(value, str):
        if value == "" or any(c.isspace() for c in value) or "=" in value:
            return '"' + value.replace('"', '\\"').replace("\n", "\\n") + '"'
        return value
    if isinstance(value, (list, tuple)) and len(value) > MAX_LOGGED_ITEMS:
        head = ", ".join(str(v) for v in value[:MAX_LOGGED_ITEMS])
        return f"[{head}, ... +{len(value) - MAX_LOGGED_ITEMS}]"
    return str(value)


def render_console(logger, method_name, event_dict) -> str:
    """Final processor: turn the event dict into one console line."""
    timestamp = event_dict.pop("timestamp", "")
    level = event_dict.pop("level", "???")
    event = event_dict.pop("event", "")

    fields = " ".join(
        f"{key}={format_value(value)}" for key, value in event_dict.items() if not key.startswith("_")
    )
    return " ".join(part for part in (timestamp, level, event, fields) if part)


def configure(level: str = "INFO", debug: bool = False) -> None:
    """Configure structlog for console output.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        debug: Shortcut for level DEBUG, which also enables per-tick timings.
    """
    if debug:
        level = "DEBUG"

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
            _short_level,
            render_console,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger() -> structlog.BoundLogger:
    """Get the shared console logger."""
    return structlog.get_logger()
