"""
db/config.py

Database URL resolution for the ingestion API and migrations.

Lookup order: DATABASE_URL, then CLOUD_DATABASE_URL when ENVIRONMENT names a
cloud-like deployment, then LOCAL_DATABASE_URL. Values in `.env` and
`.env.local` at the project root fill in variables the process lacks.
"""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_FILE_NAMES: tuple[str, ...] = (".env", ".env.local")
CLOUD_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})

_PSYCOPG_SCHEME = "postgresql+psycopg://"
_PLAIN_SCHEMES: tuple[str, ...] = ("postgres://", "postgresql://")


def _parse_env_file(path: Path) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, separator, value = line.partition("=")
        if separator and key.strip():
            parsed[key.strip()] = value.strip().strip("\"'")
    return parsed


def load_env_files(root: Path = PROJECT_ROOT) -> None:
    """
    Copy `.env` / `.env.local` entries into os.environ without overriding.
    """

    for name in ENV_FILE_NAMES:
        path = root / name
        if path.is_file():
            for key, value in _parse_env_file(path).items():
                os.environ.setdefault(key, value)


def normalize_postgres_url(url: str) -> str:
    """
    Point plain postgres URLs at the psycopg 3 driver.
    """

    for scheme in _PLAIN_SCHEMES:
        if url.startswith(scheme):
            return _PSYCOPG_SCHEME + url[len(scheme):]
    return url


def configured_database_url() -> str | None:
    """
    Return the raw URL selected by the lookup order, or None when unset.
    """

    load_env_files()

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    names = ["DATABASE_URL"]
    if environment in CLOUD_ENVIRONMENTS:
        names.append("CLOUD_DATABASE_URL")
    names.append("LOCAL_DATABASE_URL")

    for name in names:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return None


def resolve_database_url() -> str:
    """
    Return the psycopg URL for the current environment.

    Raises:
        RuntimeError: no database URL is configured.
    """

    url = configured_database_url()
    if url is None:
        raise RuntimeError(
            "No database URL configured for price ingestion. Set DATABASE_URL, "
            "or LOCAL_DATABASE_URL / CLOUD_DATABASE_URL with ENVIRONMENT."
        )
    return normalize_postgres_url(url)
