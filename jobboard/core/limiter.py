"""Request rate limiting."""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

# Login and registration attempts per client address
AUTH_RATE_LIMIT = "10 per 15 minutes"

limiter = Limiter(key_func=get_remote_address)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a clear message when rate limit is exceeded."""
    return JSONResponse(
        status_code=429,
        content={
            "detail": f"Too many requests, please try again later ({exc.detail})",
            "code": "rate_limited",
        },
    )
