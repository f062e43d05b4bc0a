"""
Internal API key check for operator-only endpoints (diagnostics).

The key is optional: when INTERNAL_API_KEY is unset those endpoints stay
open, and the app logs a warning at startup so the choice is visible.
"""
import secrets
from typing import Optional


def verify_api_key(provided_key: Optional[str], expected_key: Optional[str]) -> bool:
    """Verify an API key using constant-time comparison to prevent timing attacks."""
    if not expected_key:
        return True
    if not provided_key:
        return False
    return secrets.compare_digest(str(provided_key), str(expected_key))
