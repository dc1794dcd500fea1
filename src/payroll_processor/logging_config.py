"""Process-wide logging setup."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger.json import JsonFormatter


class PayrollJsonFormatter(JsonFormatter):
    """JSON formatter that always emits a UTC timestamp and upper-case level."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()

        if log_record.get("level"):
            log_record["level"] = log_record["level"].upper()
        else:
            log_record["level"] = record.levelname


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """Attach a single stream handler to the root logger."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_payroll_processor", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._payroll_processor = True  # type: ignore[attr-defined]
    if json_output:
        handler.setFormatter(PayrollJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    root.addHandler(handler)
    root.setLevel(level)

    # Suppress verbose logs from some libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
