"""
app/logging_utils.py

Logging setup and structured event lines for the ingestion pipeline.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Libraries that log per statement or per cell at INFO/DEBUG.
_NOISY_LOGGERS = ("sqlalchemy.engine", "multipart", "python_multipart")


def configure_logging(default_level: str = "INFO") -> None:
    """
    Configure root logging once for the API process from LOG_LEVEL.
    """

    log_level = os.getenv("LOG_LEVEL", default_level).strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format=LOG_FORMAT,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    Polish text is kept readable (no ASCII escaping).
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, ensure_ascii=False, sort_keys=True))
