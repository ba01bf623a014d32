from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.logger import logger
from app.core.security import error_response


def create_limiter() -> Limiter:
    """Per-client-IP limiter, sliding window in process memory. One per app."""
    return Limiter(
        key_func=get_remote_address,
        strategy="moving-window",
        headers_enabled=True,
    )


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"⏱️ Rate limit hit by {get_remote_address(request)} on {request.url.path}: {exc.detail}")
    response = error_response(429, "Too many requests, please try again later.")
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)
