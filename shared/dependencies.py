"""
FastAPI dependencies reading the objects create_app() stores on app.state.
"""
from fastapi import Request

from shared.config import Settings
from shared.errors import ConfigurationError

MISSING_KEY = "Server missing STRIPE_SECRET_KEY"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request):
    gateway = request.app.state.gateway
    if gateway is None:
        raise ConfigurationError(MISSING_KEY)
    return gateway


def get_price_cache(request: Request):
    return request.app.state.price_cache
