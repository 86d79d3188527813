from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from catalog.core.exceptions import UnauthorizedError
from catalog.core.security import verify_access_token

security = HTTPBearer(auto_error=False)


async def protect(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """Gate for admin-only routes. Returns the authenticated username."""
    if not credentials:
        raise UnauthorizedError("Not authorized, no token")

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise UnauthorizedError("Not authorized, token failed")

    request.state.admin = payload["sub"]
    return payload["sub"]
