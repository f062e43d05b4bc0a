import asyncio
from typing import Any, Dict, List

import structlog

from shared.errors import NotFoundError, UpsellError
from shared.observability import upsell_price_lookups_total
from shared.payments import StripeGateway, provider_message
from .cache import PriceCache

logger = structlog.get_logger(__name__)

NO_ACTIVE_PRICE = "No active prices found for this product"


class NoActivePriceError(UpsellError):
    status_code = 502


class PriceService:

    def __init__(self, gateway: StripeGateway, cache: PriceCache, product_ids: List[str]):
        self.gateway = gateway
        self.cache = cache
        self.product_ids = product_ids

    async def _load_price(self, product_id: str) -> Dict[str, Any]:
        try:
            price = await self.gateway.first_active_price(product_id)
            if price is None:
                # Surfaces the provider's own error when the product is missing
                await self.gateway.retrieve_product(product_id)
                upsell_price_lookups_total.labels(result="no_price").inc()
                raise NoActivePriceError(NO_ACTIVE_PRICE)
        except NoActivePriceError:
            raise
        except Exception:
            upsell_price_lookups_total.labels(result="error").inc()
            raise
        upsell_price_lookups_total.labels(result="ok").inc()
        return price

    async def get_price(self, product_id: str) -> Dict[str, Any]:
        """Active price for a product, through the cache. Raises on failure."""
        return await self.cache.get_or_load(product_id, lambda: self._load_price(product_id))

    async def lookup(self, product_id: str) -> Dict[str, Any]:
        """Like get_price, but folds failures into an {"error": ...} entry."""
        try:
            return await self.get_price(product_id)
        except UpsellError as e:
            return {"error": e.message}
        except Exception as e:
            logger.error("price_lookup_failed", product_id=product_id, error=str(e))
            return {"error": provider_message(e)}

    async def lookup_configured(self, product_id: str) -> Dict[str, Any]:
        if product_id not in self.product_ids:
            raise NotFoundError(f"Unknown product: {product_id}")
        return await self.lookup(product_id)

    async def price_map(self) -> Dict[str, Dict[str, Any]]:
        if not self.product_ids:
            return {}
        results = await asyncio.gather(*(self.lookup(pid) for pid in self.product_ids))
        return dict(zip(self.product_ids, results))

    async def known_prices(self) -> Dict[str, str]:
        """Maps each configured product's active price id to its product id."""
        prices = await self.price_map()
        return {
            info["price_id"]: pid
            for pid, info in prices.items()
            if "price_id" in info
        }
