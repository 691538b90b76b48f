"""
tests/test_config.py

Tests for environment-driven dashboard and HTTP settings.
"""

from __future__ import annotations

import pytest

from overdose_trends.config import (
    DEFAULT_AUTOLOAD_SOURCE,
    DEFAULT_JURISDICTION,
    SchemaMode,
    get_dashboard_settings,
    get_http_settings,
)

_ENV_NAMES = (
    "OVERDOSE_SCHEMA_MODE",
    "OVERDOSE_AUTOLOAD_SOURCE",
    "OVERDOSE_AUTOLOAD_ENABLED",
    "OVERDOSE_JURISDICTION",
    "OVERDOSE_PREVIEW_ROWS",
    "OVERDOSE_HTTP_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    get_dashboard_settings.cache_clear()
    get_http_settings.cache_clear()
    yield
    get_dashboard_settings.cache_clear()
    get_http_settings.cache_clear()


def test_defaults() -> None:
    settings = get_dashboard_settings()

    assert settings.schema_mode is SchemaMode.MAPPED
    assert settings.autoload_source == DEFAULT_AUTOLOAD_SOURCE
    assert settings.autoload_enabled is True
    assert settings.default_jurisdiction == DEFAULT_JURISDICTION
    assert settings.preview_rows == 20
    assert get_http_settings().timeout_seconds == 15.0


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("OVERDOSE_SCHEMA_MODE", " FIXED ")
    monkeypatch.setenv("OVERDOSE_AUTOLOAD_SOURCE", "https://example.org/vsrr.csv")
    monkeypatch.setenv("OVERDOSE_AUTOLOAD_ENABLED", "no")
    monkeypatch.setenv("OVERDOSE_JURISDICTION", "Ohio")
    monkeypatch.setenv("OVERDOSE_PREVIEW_ROWS", "50")
    monkeypatch.setenv("OVERDOSE_HTTP_TIMEOUT_SECONDS", "2.5")

    settings = get_dashboard_settings()

    assert settings.schema_mode is SchemaMode.FIXED
    assert settings.autoload_source == "https://example.org/vsrr.csv"
    assert settings.autoload_enabled is False
    assert settings.default_jurisdiction == "Ohio"
    assert settings.preview_rows == 50
    assert get_http_settings().timeout_seconds == 2.5


@pytest.mark.parametrize(
    ("name", "raw"),
    [
        ("OVERDOSE_SCHEMA_MODE", "sometimes"),
        ("OVERDOSE_PREVIEW_ROWS", "many"),
        ("OVERDOSE_AUTOLOAD_SOURCE", "   "),
    ],
)
def test_invalid_values_fall_back_to_defaults(monkeypatch, name: str, raw: str) -> None:
    monkeypatch.setenv(name, raw)

    settings = get_dashboard_settings()

    assert settings.schema_mode is SchemaMode.MAPPED
    assert settings.preview_rows == 20
    assert settings.autoload_source == DEFAULT_AUTOLOAD_SOURCE


def test_numeric_floors(monkeypatch) -> None:
    monkeypatch.setenv("OVERDOSE_PREVIEW_ROWS", "0")
    monkeypatch.setenv("OVERDOSE_HTTP_TIMEOUT_SECONDS", "0")

    assert get_dashboard_settings().preview_rows == 1
    assert get_http_settings().timeout_seconds == 1.0
