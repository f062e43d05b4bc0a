"""
Credit toward the bundle product, earned from the customer's recent paid
upsell purchases, and the bundle checkout that spends it.
"""
import asyncio
import time
from typing import Any, Callable, Dict, Optional, Set, Tuple

import structlog

from shared.config import Settings
from shared.errors import ConfigurationError, UpsellError
from shared.observability import (
    upsell_checkout_duration_seconds,
    upsell_checkout_sessions_total,
    upsell_credit_amount_cents,
)
from shared.payments import StripeGateway
from services.checkout_service.service import build_session_params, resolve_return_urls
from services.price_service.service import NoActivePriceError, PriceService
from .bundle_saga import build_bundle_saga
from .schemas import BundleCheckoutRequest, CreditRequest

logger = structlog.get_logger(__name__)

SECONDS_PER_DAY = 86400


def compute_credit(
    qualifying_total: int,
    credit_max_cents: int,
    bundle_amount: int,
    min_charge_cents: int,
) -> Tuple[int, int, bool]:
    """Returns (credit, max_credit, capped).

    The credit never exceeds the configured maximum, and always leaves at
    least min_charge_cents to pay on the bundle.
    """
    max_credit = max(0, min(credit_max_cents, bundle_amount - min_charge_cents))
    credit = max(0, min(qualifying_total, max_credit))
    return credit, max_credit, credit < qualifying_total


class CreditService:

    def __init__(
        self,
        gateway: StripeGateway,
        prices: PriceService,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ):
        self.gateway = gateway
        self.prices = prices
        self.settings = settings
        self._clock = clock

    @property
    def qualifying_products(self) -> Set[str]:
        return set(self.settings.qualifying_product_ids) - {self.settings.bundle_product_id}

    async def bundle_price(self) -> Dict[str, Any]:
        if not self.settings.bundle_product_id:
            raise ConfigurationError("Server missing BUNDLE_PRODUCT_ID")
        price = await self.prices.get_price(self.settings.bundle_product_id)
        if price.get("unit_amount") is None:
            raise NoActivePriceError("Bundle price has no fixed unit amount")
        return price

    async def resolve_customer(self, request: CreditRequest) -> Optional[str]:
        if request.customer_id:
            return request.customer_id
        return await self.gateway.find_customer_by_email(request.email)

    async def qualifying_total(self, customer_id: str, currency: str) -> Tuple[int, int]:
        """Sum of qualifying paid line items in the credit window, and sessions considered."""
        since = int(self._clock()) - self.settings.credit_window_days * SECONDS_PER_DAY
        sessions = await self.gateway.list_paid_checkout_sessions(customer_id, created_gte=since)
        paid = [s for s in sessions if s.get("payment_status") == "paid"]
        if not paid:
            return 0, 0

        qualifying = self.qualifying_products
        line_item_lists = await asyncio.gather(
            *(self.gateway.list_line_items(s["id"]) for s in paid)
        )

        total = 0
        for items in line_item_lists:
            for item in items:
                if item.get("product") not in qualifying:
                    continue
                if (item.get("currency") or "").lower() != currency.lower():
                    continue
                total += item.get("amount_total") or 0
        return total, len(paid)

    async def quote(self, request: CreditRequest) -> Dict[str, Any]:
        price = await self.bundle_price()
        currency = price["currency"]
        customer_id = await self.resolve_customer(request)

        qualifying_total, sessions_considered = 0, 0
        if customer_id:
            qualifying_total, sessions_considered = await self.qualifying_total(customer_id, currency)

        credit, max_credit, capped = compute_credit(
            qualifying_total,
            self.settings.credit_max_cents,
            price["unit_amount"],
            self.settings.min_charge_cents,
        )
        logger.info(
            "credit_quoted",
            customer_id=customer_id,
            qualifying_total=qualifying_total,
            credit=credit,
            capped=capped,
        )
        return {
            "customer_id": customer_id,
            "currency": currency,
            "qualifying_total": qualifying_total,
            "credit": credit,
            "max_credit": max_credit,
            "capped": capped,
            "sessions_considered": sessions_considered,
        }

    async def create_bundle_checkout(self, request: BundleCheckoutRequest) -> Dict[str, Any]:
        with upsell_checkout_duration_seconds.labels(kind="bundle").time():
            try:
                success_url, cancel_url = resolve_return_urls(
                    self.settings, request.success_url, request.cancel_url
                )
                price = await self.bundle_price()
                quote = await self.quote(request)

                metadata = {"source": "upsell-bundle", "credit": str(quote["credit"])}
                if request.job_id:
                    metadata["job_id"] = request.job_id
                if quote["customer_id"]:
                    metadata["customer_id"] = quote["customer_id"]

                ctx = {
                    "gateway": self.gateway,
                    "credit": quote["credit"],
                    "currency": quote["currency"],
                    "customer_id": quote["customer_id"],
                    "metadata": metadata,
                    "session_params": build_session_params(
                        [{"price": price["price_id"], "quantity": 1}],
                        success_url,
                        cancel_url,
                        metadata,
                        job_id=request.job_id,
                        email=request.email,
                        customer_id=quote["customer_id"],
                        allow_promotion_codes=self.settings.allow_promotion_codes,
                    ),
                }
                await build_bundle_saga().execute(ctx)
            except UpsellError as e:
                upsell_checkout_sessions_total.labels(kind="bundle", status="failed").inc()
                logger.warning("bundle_checkout_failed", job_id=request.job_id, error=e.message)
                raise

        upsell_checkout_sessions_total.labels(kind="bundle", status="success").inc()
        upsell_credit_amount_cents.observe(quote["credit"])
        session = ctx["session"]
        return {
            "id": session["id"],
            "url": session.get("url"),
            "credit": quote,
            "promotion_code": ctx.get("promotion_code"),
        }
