import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv


def _csv(value: Optional[str]) -> List[str]:
    """Split a comma-separated env value, trimming blanks."""
    return [part.strip() for part in (value or "").split(",") if part.strip()]


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    port: int = 10000
    service_name: str = "golf-jobs-upsell"
    log_level: str = "INFO"

    # Stripe
    stripe_secret_key: Optional[str] = None
    stripe_api_version: str = "2024-04-10"
    stripe_max_network_retries: int = 2

    # Catalogue
    product_ids: List[str] = field(default_factory=list)
    price_cache_ttl: int = 60
    prices_max_age: int = 60

    # Checkout
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None
    allow_promotion_codes: bool = False

    # Credit / bundle
    bundle_product_id: Optional[str] = None
    qualifying_product_ids: List[str] = field(default_factory=list)
    credit_max_cents: int = 5000
    credit_window_days: int = 90
    min_charge_cents: int = 50

    # Security
    allowed_origins: List[str] = field(default_factory=list)
    internal_api_key: Optional[str] = None

    # Widget
    carousel_logos: List[str] = field(default_factory=list)

    # Tracing
    otlp_endpoint: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(find_dotenv(usecwd=True))

        product_ids = _csv(os.getenv("PRODUCT_IDS"))
        bundle_product_id = (os.getenv("BUNDLE_PRODUCT_ID") or "").strip() or None
        qualifying = _csv(os.getenv("QUALIFYING_PRODUCT_IDS"))
        if not qualifying:
            qualifying = [pid for pid in product_ids if pid != bundle_product_id]

        return cls(
            port=_int("PORT", 10000),
            service_name=os.getenv("SERVICE_NAME", "golf-jobs-upsell"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            stripe_secret_key=(os.getenv("STRIPE_SECRET_KEY") or "").strip() or None,
            stripe_api_version=os.getenv("STRIPE_API_VERSION", "2024-04-10"),
            stripe_max_network_retries=_int("STRIPE_MAX_NETWORK_RETRIES", 2),
            product_ids=product_ids,
            price_cache_ttl=_int("PRICE_CACHE_TTL", 60),
            prices_max_age=_int("PRICES_MAX_AGE", 60),
            success_url=os.getenv("SUCCESS_URL") or None,
            cancel_url=os.getenv("CANCEL_URL") or None,
            allow_promotion_codes=_bool("ALLOW_PROMOTION_CODES", False),
            bundle_product_id=bundle_product_id,
            qualifying_product_ids=qualifying,
            credit_max_cents=_int("CREDIT_MAX_CENTS", 5000),
            credit_window_days=_int("CREDIT_WINDOW_DAYS", 90),
            min_charge_cents=_int("MIN_CHARGE_CENTS", 50),
            allowed_origins=_csv(os.getenv("ALLOWED_ORIGINS")),
            internal_api_key=os.getenv("INTERNAL_API_KEY") or None,
            carousel_logos=_csv(os.getenv("CAROUSEL_LOGOS")),
            otlp_endpoint=os.getenv("OTLP_ENDPOINT") or None,
        )

    @property
    def has_stripe_key(self) -> bool:
        return bool(self.stripe_secret_key)

    @property
    def stripe_mode(self) -> str:
        if not self.stripe_secret_key:
            return "unknown"
        return "live" if self.stripe_secret_key.startswith("sk_live") else "test"
