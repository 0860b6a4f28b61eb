"""Maps authentication error kinds onto HTTP responses."""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from otp_auth.errors import AuthError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "rate_limited": status.HTTP_429_TOO_MANY_REQUESTS,
    "invalid_or_expired": status.HTTP_401_UNAUTHORIZED,
    "token_invalid": status.HTTP_401_UNAUTHORIZED,
    "token_expired": status.HTTP_401_UNAUTHORIZED,
    "not_found": status.HTTP_404_NOT_FOUND,
    "store_error": status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind.startswith("token_") else None
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message, "kind": exc.kind},
        headers=headers,
    )
