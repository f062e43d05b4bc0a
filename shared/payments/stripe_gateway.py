"""
Thin async wrapper around the Stripe SDK.

The SDK is blocking, so every call is pushed to the threadpool. Results are
reduced to plain dicts holding only the fields the services read, and every
SDK failure surfaces as PaymentProviderError.
"""
from typing import Any, Callable, Dict, List, Optional

import stripe
import structlog
from starlette.concurrency import run_in_threadpool

from shared.errors import PaymentProviderError

logger = structlog.get_logger(__name__)

FALLBACK_ERROR = "Stripe error (check key/account/test-vs-live/product IDs)"


def provider_message(error: Exception) -> str:
    """Best human-readable message for a provider exception."""
    message = getattr(error, "user_message", None) or str(error)
    return message or FALLBACK_ERROR


class StripeGateway:

    def __init__(self, api_key: str, api_version: str = "2024-04-10", max_network_retries: int = 2):
        stripe.api_key = api_key
        stripe.api_version = api_version
        stripe.max_network_retries = max_network_retries
        self.api_version = api_version

        logger.info(
            "stripe_gateway_initialized",
            api_version=api_version,
            live_mode=api_key.startswith("sk_live"),
        )

    async def _call(self, operation: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        try:
            return await run_in_threadpool(func, *args, **kwargs)
        except stripe.StripeError as e:
            status = getattr(e, "http_status", None)
            logger.warning(
                "stripe_call_failed",
                operation=operation,
                http_status=status,
                code=getattr(e, "code", None),
                error=str(e),
            )
            raise PaymentProviderError(provider_message(e), provider_status=status) from e

    # --- PRICES / PRODUCTS ---

    async def first_active_price(self, product_id: str) -> Optional[Dict[str, Any]]:
        prices = await self._call(
            "prices.list", stripe.Price.list, product=product_id, active=True, limit=1
        )
        if not prices.data:
            return None
        price = prices.data[0]
        return {
            "unit_amount": price.unit_amount,
            "currency": price.currency,
            "price_id": price.id,
        }

    async def retrieve_product(self, product_id: str) -> Dict[str, Any]:
        product = await self._call("products.retrieve", stripe.Product.retrieve, product_id)
        return {"id": product.id, "name": product.get("name"), "active": product.get("active")}

    # --- CHECKOUT ---

    async def create_checkout_session(self, params: Dict[str, Any]) -> Dict[str, Any]:
        session = await self._call("checkout.sessions.create", stripe.checkout.Session.create, **params)
        logger.info("checkout_session_created", session_id=session.id)
        return {"id": session.id, "url": session.url}

    # --- CUSTOMER HISTORY ---

    async def find_customer_by_email(self, email: str) -> Optional[str]:
        customers = await self._call("customers.list", stripe.Customer.list, email=email, limit=1)
        if not customers.data:
            return None
        return customers.data[0].id

    async def list_paid_checkout_sessions(self, customer_id: str, created_gte: int) -> List[Dict[str, Any]]:
        def _list() -> List[Dict[str, Any]]:
            sessions = stripe.checkout.Session.list(
                customer=customer_id,
                status="complete",
                created={"gte": created_gte},
                limit=100,
            )
            return [
                {"id": s.id, "payment_status": s.payment_status, "created": s.created}
                for s in sessions.auto_paging_iter()
            ]

        return await self._call("checkout.sessions.list", _list)

    async def list_line_items(self, session_id: str) -> List[Dict[str, Any]]:
        def _list() -> List[Dict[str, Any]]:
            items = stripe.checkout.Session.list_line_items(session_id, limit=100)
            result = []
            for item in items.auto_paging_iter():
                price = item.get("price") or {}
                product = price.get("product")
                if isinstance(product, dict):
                    product = product.get("id")
                result.append({
                    "product": product,
                    "currency": item.currency,
                    "amount_total": item.amount_total,
                })
            return result

        return await self._call("checkout.sessions.list_line_items", _list)

    # --- COUPONS / PROMOTION CODES ---

    async def create_coupon(self, amount_off: int, currency: str, metadata: Optional[Dict[str, str]] = None) -> str:
        coupon = await self._call(
            "coupons.create",
            stripe.Coupon.create,
            amount_off=amount_off,
            currency=currency,
            duration="once",
            max_redemptions=1,
            name="Upgrade credit",
            metadata=metadata or {},
        )
        return coupon.id

    async def delete_coupon(self, coupon_id: str) -> None:
        await self._call("coupons.delete", stripe.Coupon.delete, coupon_id)

    async def create_promotion_code(
        self,
        coupon_id: str,
        customer_id: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "coupon": coupon_id,
            "max_redemptions": 1,
            "metadata": metadata or {},
        }
        if customer_id:
            params["customer"] = customer_id
        promo = await self._call("promotion_codes.create", stripe.PromotionCode.create, **params)
        return {"id": promo.id, "code": promo.code}

    async def deactivate_promotion_code(self, promotion_code_id: str) -> None:
        await self._call(
            "promotion_codes.update", stripe.PromotionCode.modify, promotion_code_id, active=False
        )
