import os

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

DEFAULT_CHECKOUT_RATE_LIMIT = "20/minute"

def checkout_rate_limit() -> str:
    """
    Limit string for the checkout routes.
    Read per request, so a value loaded from .env by Settings.from_env()
    (or changed at runtime) is honored.
    """
    return os.getenv("CHECKOUT_RATE_LIMIT") or DEFAULT_CHECKOUT_RATE_LIMIT

def client_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Uses the first X-Forwarded-For hop when the app sits behind a proxy,
    falling back to the socket peer address.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return f"ip:{first_hop}"
    return f"ip:{get_remote_address(request)}"

# Initialize the Limiter with our custom key function
limiter = Limiter(key_func=client_ip)

# One bucket per client IP, shared by every route that spends it
checkout_limit = limiter.shared_limit(checkout_rate_limit, scope="checkout")
