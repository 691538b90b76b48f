"""
overdose_trends/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_AUTOLOAD_SOURCE = "data/overdose.csv"
DEFAULT_JURISDICTION = "United States"


class SchemaMode(str, Enum):
    """
    How CSV columns are bound to chart roles.
    """

    FIXED = "fixed"
    MAPPED = "mapped"


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
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


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_schema_mode_env(name: str, default: SchemaMode) -> SchemaMode:
    raw = _get_str_env(name, default.value).lower()
    try:
        return SchemaMode(raw)
    except ValueError:
        logger.warning(
            "%s=%r is not valid; allowed values: %s. Using %r.",
            name,
            raw,
            sorted(mode.value for mode in SchemaMode),
            default.value,
        )
        return default


@dataclass(frozen=True)
class DashboardSettings:
    """
    Runtime settings for loading and charting overdose data.
    """

    schema_mode: SchemaMode = SchemaMode.MAPPED
    autoload_source: str = DEFAULT_AUTOLOAD_SOURCE
    autoload_enabled: bool = True
    default_jurisdiction: str = DEFAULT_JURISDICTION
    preview_rows: int = 20


@dataclass(frozen=True)
class HTTPSettings:
    """
    HTTP behavior for fetching a remote autoload source.
    """

    timeout_seconds: float = 15.0


@lru_cache(maxsize=1)
def get_dashboard_settings() -> DashboardSettings:
    """
    Return cached dashboard settings from environment variables.
    """

    return DashboardSettings(
        schema_mode=_get_schema_mode_env("OVERDOSE_SCHEMA_MODE", SchemaMode.MAPPED),
        autoload_source=_get_str_env("OVERDOSE_AUTOLOAD_SOURCE", DEFAULT_AUTOLOAD_SOURCE),
        autoload_enabled=_get_bool_env("OVERDOSE_AUTOLOAD_ENABLED", True),
        default_jurisdiction=_get_str_env("OVERDOSE_JURISDICTION", DEFAULT_JURISDICTION),
        preview_rows=max(1, _get_int_env("OVERDOSE_PREVIEW_ROWS", 20)),
    )


@lru_cache(maxsize=1)
def get_http_settings() -> HTTPSettings:
    """
    Return cached HTTP settings from environment variables.
    """

    return HTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("OVERDOSE_HTTP_TIMEOUT_SECONDS", 15.0)),
    )
