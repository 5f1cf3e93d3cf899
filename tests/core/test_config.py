"""Tests for core/config.py - environment-driven configuration."""

import os
from decimal import Decimal

import pytest
from pydantic import ValidationError

from core.config import AppConfig, load_config

ENV_NAMES = [
    "DATABASE_URL", "APP_BASE_PATH", "APP_TIMEZONE", "DEFAULT_COMMISSION_RATE",
    "MAX_FILTER_VALUES", "HISTORY_DAYS", "APP_NAME",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    yield
    for name in ENV_NAMES:
        os.environ.pop(name, None)


@pytest.fixture
def no_dotenv(tmp_path):
    """Path to an empty .env so a developer's real one is not picked up."""
    env_file = tmp_path / ".env"
    env_file.write_text("")
    return str(env_file)


class TestLoadConfig:

    def test_requires_database_url(self, no_dotenv):
        with pytest.raises(ValueError, match="DATABASE_URL"):
            load_config(no_dotenv)

    def test_defaults(self, monkeypatch, no_dotenv):
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/pos")

        config = load_config(no_dotenv)

        assert config.timezone == "America/Sao_Paulo"
        assert config.default_commission_rate == Decimal("0.40")
        assert config.max_filter_values == 10
        assert config.base_path == "/"

    def test_env_overrides(self, monkeypatch, no_dotenv):
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/pos")
        monkeypatch.setenv("DEFAULT_COMMISSION_RATE", "0.35")
        monkeypatch.setenv("MAX_FILTER_VALUES", "30")
        monkeypatch.setenv("APP_BASE_PATH", "/barbearia")

        config = load_config(no_dotenv)

        assert config.default_commission_rate == Decimal("0.35")
        assert config.max_filter_values == 30
        assert config.base_path == "/barbearia"

    def test_reads_dotenv_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("DATABASE_URL=postgresql://fromfile/pos\nHISTORY_DAYS=90\n")

        config = load_config(str(env_file))

        assert config.database_url == "postgresql://fromfile/pos"
        assert config.history_days == 90


class TestAppConfig:

    def test_rate_must_be_fraction(self):
        with pytest.raises(ValidationError):
            AppConfig(database_url="postgresql://x", default_commission_rate=Decimal("40"))
