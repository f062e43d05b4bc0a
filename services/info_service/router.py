from fastapi import APIRouter, Depends, Response
from fastapi.responses import HTMLResponse, PlainTextResponse

from shared.config import Settings
from shared.dependencies import get_price_cache, get_settings
from shared.security import verify_internal_api_key
from services.price_service.cache import PriceCache
from .widget import render_carousel

router = APIRouter(tags=["info"])

@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "stripe": settings.has_stripe_key,
        "productIds": len(settings.product_ids),
    }

# Operator diagnostics; guarded when INTERNAL_API_KEY is set
@router.get("/diag", dependencies=[Depends(verify_internal_api_key)])
async def diagnostics(
    response: Response,
    settings: Settings = Depends(get_settings),
    cache: PriceCache = Depends(get_price_cache),
):
    response.headers["Cache-Control"] = "no-store"
    return {
        "env": {
            "hasStripeKey": settings.has_stripe_key,
            "productIdsCount": len(settings.product_ids),
            "mode": settings.stripe_mode,
        },
        "allowedOrigins": settings.allowed_origins,
        "priceCache": cache.stats(),
    }

@router.get("/widget", response_class=HTMLResponse)
async def logo_carousel(settings: Settings = Depends(get_settings)):
    return HTMLResponse(
        render_carousel(settings.carousel_logos),
        headers={"Cache-Control": "public, max-age=300"},
    )

# Fallback for root (not used by the front-end)
@router.get("/", include_in_schema=False)
async def root():
    return PlainTextResponse("Use /prices or /health", status_code=404)
