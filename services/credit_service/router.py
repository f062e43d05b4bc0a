from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse

from shared.config import Settings
from shared.dependencies import get_gateway, get_settings
from shared.security import checkout_limit
from services.price_service.dependencies import get_price_service
from services.price_service.service import PriceService
from .schemas import BundleCheckoutRequest, BundleCheckoutResponse, CreditQuote, CreditRequest
from .service import CreditService

router = APIRouter(tags=["credit"])

def get_credit_service(
    gateway=Depends(get_gateway),
    prices: PriceService = Depends(get_price_service),
    settings: Settings = Depends(get_settings),
) -> CreditService:
    return CreditService(gateway, prices, settings)

@router.post("/credit", response_model=CreditQuote)
@checkout_limit
async def quote_credit(
    request: Request,
    payload: CreditRequest,
    service: CreditService = Depends(get_credit_service),
):
    return await service.quote(payload)

@router.post("/create-bundle-checkout", response_model=BundleCheckoutResponse)
@checkout_limit
async def create_bundle_checkout(
    request: Request,
    payload: BundleCheckoutRequest,
    redirect: bool = Query(default=False),
    service: CreditService = Depends(get_credit_service),
):
    result = await service.create_bundle_checkout(payload)
    if (payload.redirect or redirect) and result.get("url"):
        return RedirectResponse(result["url"], status_code=303)
    return result
