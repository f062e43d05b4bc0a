from typing import Union

from fastapi import APIRouter, Depends, Response

from shared.config import Settings
from shared.dependencies import get_settings
from .dependencies import get_public_price_service, prices_cache_control
from .schemas import PriceError, PriceInfo, PriceMap
from .service import PriceService

router = APIRouter(tags=["prices"])

# Prices endpoint consumed by the upsell front-end
@router.get("/prices", response_model=PriceMap)
async def list_prices(
    response: Response,
    service: PriceService = Depends(get_public_price_service),
    settings: Settings = Depends(get_settings),
):
    response.headers["Cache-Control"] = prices_cache_control(settings)
    return await service.price_map()

@router.get("/prices/{product_id}", response_model=Union[PriceInfo, PriceError])
async def get_price(
    product_id: str,
    response: Response,
    service: PriceService = Depends(get_public_price_service),
    settings: Settings = Depends(get_settings),
):
    response.headers["Cache-Control"] = prices_cache_control(settings)
    return await service.lookup_configured(product_id)
