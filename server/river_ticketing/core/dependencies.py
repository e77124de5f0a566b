"""FastAPI dependencies for authentication."""

from datetime import datetime, timezone

import jwt
from fastapi import Depends, Header, status
from jwt import PyJWTError

from .config import settings
from .exceptions import PROBLEM_BASE_URI, ProblemDetailsException


def _unauthorized(detail: str) -> ProblemDetailsException:
    return ProblemDetailsException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        title="Authorization Required",
        detail=detail,
        type_uri=f"{PROBLEM_BASE_URI}/unauthorized",
        extensions={"code": "UNAUTHORIZED"},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: str | None = Header(None, alias="Authorization")
) -> dict:
    """
    Authentication dependency that validates Bearer tokens.

    Role checks happen upstream; this only establishes who the caller is so
    sales and annulments can be attributed to a seller.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        dict: User information from validated token

    Raises:
        ProblemDetailsException: 401 if the token is invalid or missing
    """
    if not authorization:
        raise _unauthorized("Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise _unauthorized("Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise _unauthorized("Invalid authentication scheme")

    try:
        payload = jwt.decode(token, settings.bearer_token_secret, algorithms=["HS256"])
    except PyJWTError as e:
        raise _unauthorized(f"Token validation failed: {e}")

    user_id = payload.get("sub")
    if user_id is None:
        raise _unauthorized("Invalid token payload")

    exp = payload.get("exp")
    if exp and datetime.now(timezone.utc).timestamp() > exp:
        raise _unauthorized("Token has expired")

    return {
        "user_id": str(user_id),
        "username": payload.get("username"),
        "roles": payload.get("roles", []),
    }


RequiredAuth = Depends(get_current_user)
