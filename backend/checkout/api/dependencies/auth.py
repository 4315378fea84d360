"""Bearer authentication for the payment flow endpoints."""

import hmac

from fastapi import HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from checkout.core.config import settings

bearer_scheme = HTTPBearer(auto_error=False, description="Service API secret")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def verify_api_key(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> str:
    """Require ``Authorization: Bearer <api_secret_key>``.

    The callback endpoint stays public; only the flow management routes
    depend on this.
    """
    if credentials is None:
        raise _unauthorized("Missing bearer token")

    if not hmac.compare_digest(credentials.credentials.encode(), settings.api_secret_key.encode()):
        raise _unauthorized("Invalid API key")

    return credentials.credentials
