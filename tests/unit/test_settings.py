"""Test that pricing constants come from Settings."""

import pytest

from tourdesk.app.config import Settings, get_settings
from tourdesk.app.db.engine import PLACEHOLDER_URL, resolve_database_url
from tourdesk.app.pricing.calculator import DEFAULT_ROOM_OCCUPANCY


def test_settings_accessible() -> None:
    """Test that Settings can be imported and accessed."""
    settings = get_settings()
    assert settings is not None
    assert get_settings() is settings


def test_pricing_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.default_margin_percent == 25
    assert settings.room_occupancy == DEFAULT_ROOM_OCCUPANCY
    assert settings.currency == "EUR"
    assert settings.max_pax > 0


def test_rate_limit_quotas_accessible() -> None:
    settings = Settings(_env_file=None)
    assert settings.pricing_ops_per_min > 0
    assert settings.crud_ops_per_min > 0


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_MARGIN_PERCENT", "12.5")
    monkeypatch.setenv("ROOM_OCCUPANCY", "3")

    settings = Settings(_env_file=None)

    assert str(settings.default_margin_percent) == "12.5"
    assert settings.room_occupancy == 3


def test_database_url_is_made_async() -> None:
    settings = Settings(_env_file=None, database_url="postgresql://app:secret@db:5432/tourdesk")

    assert resolve_database_url(settings) == "postgresql+asyncpg://app:secret@db:5432/tourdesk"


def test_sqlite_url_is_kept() -> None:
    settings = Settings(_env_file=None, database_url="sqlite+aiosqlite:///:memory:")

    assert resolve_database_url(settings) == "sqlite+aiosqlite:///:memory:"


def test_placeholder_database_url_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    settings = Settings(_env_file=None, postgres_url=PLACEHOLDER_URL)

    with pytest.raises(ValueError, match="DATABASE_URL must be set"):
        resolve_database_url(settings)
