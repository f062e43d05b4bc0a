from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse

from shared.config import Settings
from shared.dependencies import get_gateway, get_settings
from shared.security import checkout_limit
from services.price_service.dependencies import get_price_service
from services.price_service.service import PriceService
from .schemas import CheckoutRequest, CheckoutSessionResponse
from .service import CheckoutService

router = APIRouter(tags=["checkout"])

def get_checkout_service(
    gateway=Depends(get_gateway),
    prices: PriceService = Depends(get_price_service),
    settings: Settings = Depends(get_settings),
) -> CheckoutService:
    return CheckoutService(gateway, prices, settings)

@router.post("/create-checkout-session", response_model=CheckoutSessionResponse)
@checkout_limit
async def create_checkout_session(
    request: Request,                          # REQUIRED: slowapi needs this to check IP/Headers
    payload: CheckoutRequest,
    redirect: bool = Query(default=False),
    service: CheckoutService = Depends(get_checkout_service),
):
    session = await service.create_session(payload)
    if (payload.redirect or redirect) and session.get("url"):
        return RedirectResponse(session["url"], status_code=303)
    return session
