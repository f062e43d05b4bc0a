"""
Pytest configuration and fixtures.

FakeGateway stands in for StripeGateway: same coroutine methods, in-memory
data, and a call log the tests can assert on.
"""
from collections import Counter
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

import main
from services.price_service.cache import PriceCache
from shared.config import Settings
from shared.errors import PaymentProviderError
from shared.security import limiter


class FakeGateway:

    def __init__(self):
        self.prices: Dict[str, Optional[Dict[str, Any]]] = {}
        self.products = set()
        self.customers: Dict[str, str] = {}
        self.sessions: Dict[str, List[Dict[str, Any]]] = {}
        self.line_items: Dict[str, List[Dict[str, Any]]] = {}
        self.created_sessions: List[Dict[str, Any]] = []
        self.coupons: Dict[str, Dict[str, Any]] = {}
        self.deleted_coupons: List[str] = []
        self.promotion_codes: Dict[str, Dict[str, Any]] = {}
        self.deactivated_promotion_codes: List[str] = []
        self.session_window: Optional[int] = None
        self.fail_on = set()
        self.calls = Counter()

    def add_product(self, product_id: str, price_id: Optional[str], unit_amount: int = 0, currency: str = "usd"):
        self.products.add(product_id)
        self.prices[product_id] = (
            {"unit_amount": unit_amount, "currency": currency, "price_id": price_id}
            if price_id else None
        )

    def _record(self, operation: str):
        self.calls[operation] += 1
        if operation in self.fail_on:
            raise PaymentProviderError(f"{operation} failed upstream", provider_status=500)

    async def first_active_price(self, product_id):
        self._record("first_active_price")
        return self.prices.get(product_id)

    async def retrieve_product(self, product_id):
        self._record("retrieve_product")
        if product_id not in self.products:
            raise PaymentProviderError(f"No such product: '{product_id}'", provider_status=404)
        return {"id": product_id, "name": product_id, "active": True}

    async def create_checkout_session(self, params):
        self._record("create_checkout_session")
        session_id = f"cs_test_{len(self.created_sessions) + 1}"
        self.created_sessions.append(params)
        return {"id": session_id, "url": f"https://checkout.stripe.test/c/pay/{session_id}"}

    async def find_customer_by_email(self, email):
        self._record("find_customer_by_email")
        return self.customers.get(email)

    async def list_paid_checkout_sessions(self, customer_id, created_gte):
        self._record("list_paid_checkout_sessions")
        self.session_window = created_gte
        return [s for s in self.sessions.get(customer_id, []) if s["created"] >= created_gte]

    async def list_line_items(self, session_id):
        self._record("list_line_items")
        return self.line_items.get(session_id, [])

    async def create_coupon(self, amount_off, currency, metadata=None):
        self._record("create_coupon")
        coupon_id = f"coupon_{len(self.coupons) + 1}"
        self.coupons[coupon_id] = {"amount_off": amount_off, "currency": currency, "metadata": metadata}
        return coupon_id

    async def delete_coupon(self, coupon_id):
        self._record("delete_coupon")
        self.deleted_coupons.append(coupon_id)

    async def create_promotion_code(self, coupon_id, customer_id=None, metadata=None):
        self._record("create_promotion_code")
        promo_id = f"promo_{len(self.promotion_codes) + 1}"
        self.promotion_codes[promo_id] = {"coupon": coupon_id, "customer": customer_id}
        return {"id": promo_id, "code": f"CREDIT{len(self.promotion_codes)}"}

    async def deactivate_promotion_code(self, promotion_code_id):
        self._record("deactivate_promotion_code")
        self.deactivated_promotion_codes.append(promotion_code_id)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        stripe_secret_key="sk_test_fake_key_for_testing",
        product_ids=["prod_featured", "prod_boost", "prod_bundle"],
        bundle_product_id="prod_bundle",
        qualifying_product_ids=["prod_featured", "prod_boost"],
        success_url="https://www.golfjobs.example/upsell/success",
        cancel_url="https://www.golfjobs.example/upsell/cancelled",
        allowed_origins=["https://www.golfjobs.example", "https://*.golfjobs.example"],
        credit_max_cents=5000,
        credit_window_days=90,
        min_charge_cents=50,
    )


@pytest.fixture
def gateway() -> FakeGateway:
    fake = FakeGateway()
    fake.add_product("prod_featured", "price_featured", 1500)
    fake.add_product("prod_boost", "price_boost", 2500)
    fake.add_product("prod_bundle", "price_bundle", 9900)
    return fake


@pytest.fixture
def client(settings, gateway):
    """Test client over the real app, with fresh state per test."""
    app = main.app
    app.state.settings = settings
    app.state.gateway = gateway
    app.state.price_cache = PriceCache(ttl_seconds=settings.price_cache_ttl)
    limiter.enabled = False
    with TestClient(app) as test_client:
        yield test_client
