"""
Tests for environment-driven settings.
"""
import pytest

from shared.config import Settings
from shared.security import checkout_rate_limit

ENV_VARS = [
    "PRODUCT_IDS", "BUNDLE_PRODUCT_ID", "QUALIFYING_PRODUCT_IDS", "ALLOWED_ORIGINS",
    "STRIPE_SECRET_KEY", "PORT", "PRICE_CACHE_TTL", "ALLOW_PROMOTION_CODES",
    "CREDIT_MAX_CENTS", "INTERNAL_API_KEY", "CAROUSEL_LOGOS", "CHECKOUT_RATE_LIMIT",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        # setenv first so values load_dotenv writes are undone at teardown
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


class TestSettings:

    def test_defaults(self, clean_env) -> None:
        settings = Settings.from_env()

        assert settings.port == 10000
        assert settings.product_ids == []
        assert settings.price_cache_ttl == 60
        assert settings.stripe_mode == "unknown"
        assert settings.has_stripe_key is False

    def test_lists_are_trimmed_and_blanks_dropped(self, clean_env) -> None:
        clean_env.setenv("PRODUCT_IDS", " prod_a , ,prod_b,prod_bundle ")
        clean_env.setenv("ALLOWED_ORIGINS", "https://a.example, https://*.b.example,")

        settings = Settings.from_env()

        assert settings.product_ids == ["prod_a", "prod_b", "prod_bundle"]
        assert settings.allowed_origins == ["https://a.example", "https://*.b.example"]

    def test_qualifying_products_default_excludes_bundle(self, clean_env) -> None:
        clean_env.setenv("PRODUCT_IDS", "prod_a,prod_b,prod_bundle")
        clean_env.setenv("BUNDLE_PRODUCT_ID", "prod_bundle")

        settings = Settings.from_env()

        assert settings.qualifying_product_ids == ["prod_a", "prod_b"]

    def test_explicit_qualifying_products(self, clean_env) -> None:
        clean_env.setenv("PRODUCT_IDS", "prod_a,prod_b,prod_bundle")
        clean_env.setenv("QUALIFYING_PRODUCT_IDS", "prod_a")

        assert Settings.from_env().qualifying_product_ids == ["prod_a"]

    def test_numbers_and_flags(self, clean_env) -> None:
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("CREDIT_MAX_CENTS", "2500")
        clean_env.setenv("ALLOW_PROMOTION_CODES", "yes")
        clean_env.setenv("STRIPE_SECRET_KEY", "sk_live_123")

        settings = Settings.from_env()

        assert settings.port == 8080
        assert settings.credit_max_cents == 2500
        assert settings.allow_promotion_codes is True
        assert settings.stripe_mode == "live"

    def test_bad_integer_is_reported(self, clean_env) -> None:
        clean_env.setenv("PRICE_CACHE_TTL", "soon")

        with pytest.raises(ValueError, match="PRICE_CACHE_TTL"):
            Settings.from_env()

    def test_dotenv_in_working_directory_is_loaded(self, clean_env, tmp_path) -> None:
        (tmp_path / ".env").write_text("PRODUCT_IDS=prod_a\nCHECKOUT_RATE_LIMIT=1/minute\n")

        settings = Settings.from_env()

        assert settings.product_ids == ["prod_a"]
        assert checkout_rate_limit() == "1/minute"

    def test_checkout_rate_limit_default(self, clean_env) -> None:
        Settings.from_env()

        assert checkout_rate_limit() == "20/minute"
