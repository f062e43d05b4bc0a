from fastapi import Depends, Request

from shared.config import Settings
from shared.dependencies import MISSING_KEY, get_gateway, get_price_cache, get_settings
from shared.errors import ConfigurationError
from .cache import PriceCache
from .service import PriceService

def prices_cache_control(settings: Settings) -> str:
    return f"public, max-age={settings.prices_max_age}"

def get_price_service(
    gateway=Depends(get_gateway),
    cache: PriceCache = Depends(get_price_cache),
    settings: Settings = Depends(get_settings),
) -> PriceService:
    return PriceService(gateway, cache, settings.product_ids)

def get_public_price_service(
    request: Request,
    cache: PriceCache = Depends(get_price_cache),
    settings: Settings = Depends(get_settings),
) -> PriceService:
    """Like get_price_service, but a missing key keeps the public Cache-Control header."""
    gateway = request.app.state.gateway
    if gateway is None:
        raise ConfigurationError(MISSING_KEY, headers={"Cache-Control": prices_cache_control(settings)})
    return PriceService(gateway, cache, settings.product_ids)
