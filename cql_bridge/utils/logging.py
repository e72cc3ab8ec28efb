"""Logging setup for the bridge and the cqlb CLI.

Records logged through :func:`get_statement_logger` carry the statement
they concern, so a JSON log line can be traced back to its input text.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

# Context attributes copied from records into JSON output
STATEMENT_FIELDS = ("statement", "statement_type", "keyspace")

STANDARD_FORMAT = "%(asctime)s [%(threadName)s] %(name)s %(levelname)s: %(message)s"
STANDARD_DATEFMT = "%Y-%m-%d %H:%M:%S"


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, statement context inlined."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        for name in STATEMENT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    structured: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        structured: Emit JSON lines instead of plain text
        log_file: Also write records to this file
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    if structured:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(STANDARD_FORMAT, STANDARD_DATEFMT)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    # sqlglot warns on every statement it can only keep as a raw Command
    logging.getLogger("sqlglot").setLevel(logging.ERROR)


class StatementLoggerAdapter(logging.LoggerAdapter):
    """Adds statement context to every record as record attributes."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


def get_statement_logger(name: str, context: Dict[str, Any]) -> StatementLoggerAdapter:
    """Get a logger carrying statement context.

    Example:
        >>> logger = get_statement_logger(__name__, {"statement": "select 1"})
        >>> logger.debug("Treating statement as native CQL")
    """
    return StatementLoggerAdapter(logging.getLogger(name), context)
