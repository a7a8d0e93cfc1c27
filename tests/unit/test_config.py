"""Tests for settings parsing and validation."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from backoffice.config import Settings
from backoffice.core.constants import DEFAULT_INSECURE_SECRET


pytestmark = pytest.mark.unit


class TestDatabaseUrl:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("postgresql://u:p@db:5432/shop", "postgresql+asyncpg://u:p@db:5432/shop"),
            ("postgres://u:p@db/shop", "postgresql+asyncpg://u:p@db/shop"),
            ("postgresql+asyncpg://u:p@db/shop", "postgresql+asyncpg://u:p@db/shop"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_async_driver_selection(self, url, expected):
        assert Settings(database_url=url).async_database_url == expected

    def test_sqlite_detection(self):
        assert Settings(database_url="sqlite+aiosqlite:///shop.db").is_sqlite is True
        assert Settings(database_url="postgresql://u:p@db/shop").is_sqlite is False


class TestSecrets:
    def test_short_secret_rejected(self):
        with pytest.raises(ValidationError, match="SECRET_KEY"):
            Settings(secret_key="too-short")

    def test_insecure_default_rejected_in_production(self):
        config = Settings(environment="production", secret_key=DEFAULT_INSECURE_SECRET)

        with pytest.raises(ValueError, match="production"):
            _ = config.is_production

    def test_production_with_real_secret(self):
        config = Settings(environment="production", secret_key="x" * 40)

        assert config.is_production is True
        assert config.is_development is False

    def test_bcrypt_rounds_floor(self):
        with pytest.raises(ValidationError, match="BCRYPT_ROUNDS"):
            Settings(bcrypt_rounds=3)


class TestOrderPricing:
    def test_defaults(self):
        config = Settings()

        assert config.order_tax_rate == Decimal("0.10")
        assert config.standard_shipping_amount == Decimal("5.00")
        assert config.express_shipping_amount == Decimal("15.00")

    @pytest.mark.parametrize("rate", ["-0.01", "1", "1.5"])
    def test_tax_rate_bounds(self, rate):
        with pytest.raises(ValidationError):
            Settings(order_tax_rate=rate)

    def test_negative_shipping_rejected(self):
        with pytest.raises(ValidationError):
            Settings(express_shipping_amount="-1")


class TestStartupFlags:
    def test_schema_is_left_to_migrations(self, monkeypatch):
        monkeypatch.delenv("CREATE_TABLES_ON_STARTUP", raising=False)

        assert Settings().create_tables_on_startup is False
