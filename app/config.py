"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


@dataclass(frozen=True)
class IngestionSettings:
    """
    Runtime settings for price-list ingestion.
    """

    max_upload_bytes: int = 10 * 1024 * 1024
    preview_size: int = 3
    insert_batch_size: int = 1000
    max_workers: int = 4
    parallel_row_threshold: int = 500
    dialect_min_confidence: float = 25.0
    log_rejected_rows: bool = True


@dataclass(frozen=True)
class RateGateSettings:
    """
    Sliding-window limits applied to upload requests.
    """

    enabled: bool = True
    anonymous_limit: int = 10
    authenticated_limit: int = 50
    window_seconds: float = 3600.0


@lru_cache(maxsize=1)
def get_ingestion_settings() -> IngestionSettings:
    """
    Return cached ingestion settings from environment variables.
    """

    return IngestionSettings(
        max_upload_bytes=max(1, _get_int_env("INGEST_MAX_UPLOAD_BYTES", 10 * 1024 * 1024)),
        preview_size=max(0, _get_int_env("INGEST_PREVIEW_SIZE", 3)),
        insert_batch_size=max(1, _get_int_env("INGEST_INSERT_BATCH_SIZE", 1000)),
        max_workers=max(1, _get_int_env("INGEST_MAX_WORKERS", 4)),
        parallel_row_threshold=max(1, _get_int_env("INGEST_PARALLEL_ROW_THRESHOLD", 500)),
        dialect_min_confidence=min(100.0, max(0.0, _get_float_env("DIALECT_MIN_CONFIDENCE", 25.0))),
        log_rejected_rows=_get_bool_env("INGEST_LOG_REJECTED_ROWS", True),
    )


@lru_cache(maxsize=1)
def get_rate_gate_settings() -> RateGateSettings:
    """
    Return cached upload rate-limit settings from environment variables.
    """

    return RateGateSettings(
        enabled=_get_bool_env("UPLOAD_RATE_LIMIT_ENABLED", True),
        anonymous_limit=max(1, _get_int_env("UPLOAD_RATE_LIMIT_ANONYMOUS", 10)),
        authenticated_limit=max(1, _get_int_env("UPLOAD_RATE_LIMIT_AUTHENTICATED", 50)),
        window_seconds=max(1.0, _get_float_env("UPLOAD_RATE_LIMIT_WINDOW_SECONDS", 3600.0)),
    )
