from .api_key import verify_api_key
from .cors import configure_cors, is_origin_allowed, url_origin
from .dependencies import verify_internal_api_key
from .rate_limiter import limiter, client_ip, checkout_limit, checkout_rate_limit

__all__ = [
    "verify_api_key",
    "configure_cors",
    "is_origin_allowed",
    "url_origin",
    "verify_internal_api_key",
    "limiter",
    "client_ip",
    "checkout_limit",
    "checkout_rate_limit"
]
