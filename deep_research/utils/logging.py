"""
Structured Logging

Every log line carries queryable fields: module, action, and free-form
context. Two sinks are configured:

  stdout      — JSON (default) or pretty, for the operator
  debug.log   — append-only diagnostic file, one line per record

The diagnostic file never receives raw content: any context value that is
not a scalar (prompts' parsed objects, dicts, lists, models) is replaced by
a placeholder, and exceptions are reduced to their message.

USAGE
=====
from deep_research.utils.logging import log, get_logger, configure_logging

configure_logging()  # once, at startup

logger = get_logger()
log.info(logger, "llm.invoker", "send_start", "Sending request to API",
         attempt=1, prompt_chars=len(prompt))

log.error(logger, "llm.invoker", "send_failed", "API call failed",
          error=str(e), error_type=type(e).__name__)

ACTION NAMING
=============
Consistent suffixes for queryable actions:
  *_start     — beginning of an operation
  *_done      — successful completion
  *_failed    — error/failure
  *_skipped   — intentionally skipped
  *_fallback  — falling back to alternative path
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional

REDACTED = "[Object]"

_SCALARS = (str, int, float, bool)


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def redact(value: Any) -> Any:
    """Reduce a context value to something safe for the diagnostic file."""
    if isinstance(value, BaseException):
        return str(value)
    if value is None or isinstance(value, _SCALARS):
        return value
    return REDACTED


class StructuredFormatter(logging.Formatter):
    """JSON formatter for stdout."""

    def __init__(self, pretty: bool = False):
        super().__init__()
        self.pretty = pretty

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()

        # Structured log (emitted via StructuredLogger)
        if getattr(record, "_structured", False):
            data = {
                "ts": _timestamp(),
                "level": record.levelname,
                "module": record._module,
                "action": record._action,
                "msg": msg,
            }
            for key, value in record._extra.items():
                if value is not None:
                    data[key] = value

            if self.pretty:
                return self._pretty(data)
            return json.dumps(data, default=str, separators=(",", ":"))

        # Third-party log, wrapped in JSON so it stays machine-readable
        if self.pretty:
            return msg
        return json.dumps(
            {
                "ts": _timestamp(),
                "level": record.levelname,
                "module": record.name,
                "action": "log",
                "msg": msg,
            },
            default=str,
            separators=(",", ":"),
        )

    def _pretty(self, data: dict) -> str:
        """Human-readable format for development."""
        ts = data["ts"][11:23]  # HH:MM:SS.mmm
        lvl = data["level"][0]  # I/W/E/D
        mod = data["module"].upper()[:10].ljust(10)
        act = data["action"]
        msg = data["msg"]

        skip = {"ts", "level", "module", "action", "msg"}
        ctx = " ".join(f"{k}={v}" for k, v in data.items() if k not in skip)

        return f"{ts} {lvl} [{mod}] {act}: {msg}" + (f" | {ctx}" if ctx else "")


class DiagnosticFormatter(logging.Formatter):
    """Single-line, redacted format for the append-only debug file."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [_timestamp()]
        if record.levelno >= logging.ERROR:
            parts.append("ERROR:")

        if getattr(record, "_structured", False):
            parts.append(f"{record._module}.{record._action}")
            parts.append(record.getMessage())
            ctx = " ".join(
                f"{k}={redact(v)}" for k, v in record._extra.items() if v is not None
            )
            if ctx:
                parts.append(f"| {ctx}")
        else:
            parts.append(record.getMessage())

        return " ".join(parts)


class StructuredLogger:
    """
    Centralized structured logging.

    All methods accept a stdlib logging.Logger, module name, action name,
    message, and arbitrary context fields.
    """

    def _log(
        self,
        logger: logging.Logger,
        level: int,
        module: str,
        action: str,
        msg: str,
        **kwargs,
    ) -> None:
        """Emit a structured log."""
        extra = {
            "_structured": True,
            "_module": module,
            "_action": action,
            "_extra": {k: v for k, v in kwargs.items() if v is not None},
        }
        logger.log(level, msg, extra=extra)

    def info(
        self,
        logger: logging.Logger,
        module: str,
        action: str,
        msg: str,
        **kwargs,
    ) -> None:
        """Log INFO level."""
        self._log(logger, logging.INFO, module, action, msg, **kwargs)

    def warning(
        self,
        logger: logging.Logger,
        module: str,
        action: str,
        msg: str,
        **kwargs,
    ) -> None:
        """Log WARNING level."""
        self._log(logger, logging.WARNING, module, action, msg, **kwargs)

    def error(
        self,
        logger: logging.Logger,
        module: str,
        action: str,
        msg: str,
        error: Optional[str] = None,
        error_type: Optional[str] = None,
        **kwargs,
    ) -> None:
        """Log ERROR level."""
        self._log(
            logger, logging.ERROR, module, action, msg,
            error=error, error_type=error_type, **kwargs,
        )

    def debug(
        self,
        logger: logging.Logger,
        module: str,
        action: str,
        msg: str,
        **kwargs,
    ) -> None:
        """Log DEBUG level."""
        self._log(logger, logging.DEBUG, module, action, msg, **kwargs)


# Singleton instance, import this everywhere
log = StructuredLogger()

_fallback_logger = None


def get_logger() -> logging.Logger:
    """Get the shared project logger."""
    global _fallback_logger
    if _fallback_logger is None:
        _fallback_logger = logging.getLogger("deep-research")
    return _fallback_logger


def configure_logging(debug_log_path: Optional[str] = None) -> None:
    """Configure root logger with both sinks. Call once at startup.

    Reads from environment:
      LOG_FORMAT: "json" (default) or "pretty" (for development)
      LOG_LEVEL: "INFO" (default), "DEBUG", "WARNING", "ERROR"

    Args:
        debug_log_path: Diagnostic file path. Defaults to DEBUG_LOG_PATH
            from config. The file is opened in append mode.
    """
    from deep_research.config import DEBUG_LOG_PATH

    pretty = os.environ.get("LOG_FORMAT", "json") == "pretty"
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(StructuredFormatter(pretty=pretty))

    file_handler = logging.FileHandler(
        debug_log_path or DEBUG_LOG_PATH, mode="a", encoding="utf-8",
    )
    file_handler.setFormatter(DiagnosticFormatter())

    logging.basicConfig(
        level=level,
        handlers=[stream_handler, file_handler],
        force=True,
    )

    # LangChain / OpenAI SDK, extremely chatty at DEBUG
    logging.getLogger("langchain").setLevel(logging.WARNING)
    logging.getLogger("langchain_core").setLevel(logging.WARNING)
    logging.getLogger("langchain_openai").setLevel(logging.WARNING)
    logging.getLogger("langchain_text_splitters").setLevel(logging.ERROR)
    logging.getLogger("openai").setLevel(logging.WARNING)

    # HTTP clients
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    # Other noisy libs
    logging.getLogger("asyncio").setLevel(logging.WARNING)
