from typing import Any, Dict, List, Optional, Tuple

import structlog

from shared.config import Settings
from shared.errors import InvalidRequestError, UpsellError
from shared.observability import upsell_checkout_duration_seconds, upsell_checkout_sessions_total
from shared.payments import StripeGateway
from shared.security import is_origin_allowed, url_origin
from services.price_service.service import PriceService
from .schemas import CheckoutItem, CheckoutRequest

logger = structlog.get_logger(__name__)


def resolve_return_urls(
    settings: Settings,
    success_url: Optional[str],
    cancel_url: Optional[str],
) -> Tuple[str, str]:
    """Client URLs win over configured defaults, but must stay on an allowed origin."""
    resolved = []
    for name, given, default in (
        ("success_url", success_url, settings.success_url),
        ("cancel_url", cancel_url, settings.cancel_url),
    ):
        if given:
            origin = url_origin(given)
            if origin is None:
                raise InvalidRequestError(f"{name} must be an absolute URL")
            if not is_origin_allowed(origin, settings.allowed_origins):
                raise InvalidRequestError(f"{name} origin is not allowed: {origin}")
            resolved.append(given)
        elif default:
            resolved.append(default)
        else:
            raise InvalidRequestError(f"Missing {name} (none supplied and none configured)")
    return resolved[0], resolved[1]


def build_session_params(
    line_items: List[Dict[str, Any]],
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, str],
    job_id: Optional[str] = None,
    email: Optional[str] = None,
    customer_id: Optional[str] = None,
    discounts: Optional[List[Dict[str, str]]] = None,
    allow_promotion_codes: bool = False,
) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "mode": "payment",
        "line_items": line_items,
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": metadata,
    }
    if job_id:
        params["client_reference_id"] = job_id
    if customer_id:
        params["customer"] = customer_id
    elif email:
        params["customer_email"] = email
    # The provider rejects discounts combined with allow_promotion_codes
    if discounts:
        params["discounts"] = discounts
    elif allow_promotion_codes:
        params["allow_promotion_codes"] = True
    return params


class CheckoutService:

    def __init__(self, gateway: StripeGateway, prices: PriceService, settings: Settings):
        self.gateway = gateway
        self.prices = prices
        self.settings = settings

    async def resolve_line_items(self, items: List[CheckoutItem]) -> List[Dict[str, Any]]:
        """Turns client items into provider line items, merging repeated prices."""
        known_prices: Optional[Dict[str, str]] = None
        quantities: Dict[str, int] = {}

        for item in items:
            if item.product_id:
                if item.product_id not in self.settings.product_ids:
                    raise InvalidRequestError(f"Unknown product: {item.product_id}")
                try:
                    price = await self.prices.get_price(item.product_id)
                except UpsellError as e:
                    raise InvalidRequestError(f"Product {item.product_id} is not purchasable: {e.message}")
                price_id = price["price_id"]
            else:
                if known_prices is None:
                    known_prices = await self.prices.known_prices()
                if item.price_id not in known_prices:
                    raise InvalidRequestError(f"Unknown price: {item.price_id}")
                price_id = item.price_id

            quantities[price_id] = quantities.get(price_id, 0) + item.quantity

        return [{"price": price_id, "quantity": qty} for price_id, qty in quantities.items()]

    async def create_session(self, request: CheckoutRequest) -> Dict[str, Any]:
        with upsell_checkout_duration_seconds.labels(kind="upsell").time():
            try:
                line_items = await self.resolve_line_items(request.items)
                success_url, cancel_url = resolve_return_urls(
                    self.settings, request.success_url, request.cancel_url
                )
                metadata = {"source": "upsell"}
                if request.job_id:
                    metadata["job_id"] = request.job_id

                params = build_session_params(
                    line_items,
                    success_url,
                    cancel_url,
                    metadata,
                    job_id=request.job_id,
                    email=request.email,
                    customer_id=request.customer_id,
                    allow_promotion_codes=self.settings.allow_promotion_codes,
                )
                session = await self.gateway.create_checkout_session(params)
            except UpsellError as e:
                upsell_checkout_sessions_total.labels(kind="upsell", status="failed").inc()
                logger.warning("checkout_session_failed", job_id=request.job_id, error=e.message)
                raise

        upsell_checkout_sessions_total.labels(kind="upsell", status="success").inc()
        logger.info(
            "checkout_session_ready",
            session_id=session["id"],
            job_id=request.job_id,
            line_items=len(line_items),
        )
        return session
