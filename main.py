from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config import Settings
from shared.errors import UpsellError
from shared.observability import setup_observability
from shared.payments import StripeGateway
from shared.security import configure_cors, limiter

from services.price_service.cache import PriceCache
from services.price_service.router import router as price_router
from services.checkout_service.router import router as checkout_router
from services.credit_service.router import router as credit_router
from services.info_service.router import router as info_router

logger = structlog.get_logger(__name__)


async def upsell_error_handler(request: Request, exc: UpsellError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=exc.headers)


def create_app(settings: Optional[Settings] = None, gateway=None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(title="Golf Jobs Upsell Service", version="1.0.0")

    # --- OBSERVABILITY BOOTSTRAP ---
    setup_observability(app, settings.service_name, settings.otlp_endpoint, settings.log_level)

    if gateway is None and settings.stripe_secret_key:
        gateway = StripeGateway(
            settings.stripe_secret_key,
            api_version=settings.stripe_api_version,
            max_network_retries=settings.stripe_max_network_retries,
        )
    if gateway is None:
        logger.warning("stripe_key_missing", detail="STRIPE_SECRET_KEY is not set. /prices will return an error.")
    if not settings.internal_api_key:
        logger.warning("internal_api_key_missing", detail="/diag is publicly readable")

    app.state.settings = settings
    app.state.gateway = gateway
    app.state.price_cache = PriceCache(ttl_seconds=settings.price_cache_ttl)

    # --- SECURITY SETUP ---
    configure_cors(app, settings.allowed_origins)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(UpsellError, upsell_error_handler)

    app.include_router(info_router)
    app.include_router(price_router)
    app.include_router(checkout_router)
    app.include_router(credit_router)
    return app


app = create_app()


def run():
    settings = app.state.settings
    logger.info("server_starting", port=settings.port, product_ids=len(settings.product_ids))
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
