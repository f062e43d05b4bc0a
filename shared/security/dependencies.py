from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from .api_key import verify_api_key

# Defines the expected internal service header
api_key_header = APIKeyHeader(name="X-Internal-API-Key", auto_error=False)

async def verify_internal_api_key(request: Request, api_key: str = Depends(api_key_header)) -> bool:
    """Dependency guarding operator endpoints with X-Internal-API-Key."""
    expected = request.app.state.settings.internal_api_key
    if not verify_api_key(api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing X-Internal-API-Key header"
        )
    return True
