"""
Authentication for Supabase Auth access tokens.

Clients send the access token they received from Supabase Auth as a
Bearer token. Tokens are HS256 JWTs signed with the project's JWT secret;
the `sub` claim is the user ID.
"""
import logging
from typing import Optional

import jwt
from fastapi import Header, HTTPException

from backend.settings import get_settings

logger = logging.getLogger(__name__)

SUPABASE_JWT_ALGORITHM = "HS256"
SUPABASE_JWT_AUDIENCE = "authenticated"


async def get_current_user(
    authorization: Optional[str] = Header(None),
) -> str:
    """
    Authenticate via Supabase access token.
    Returns user_id string.

    Usage:
        @router.get("/stats")
        async def read_stats(user_id: str = Depends(get_current_user)):
            return {"user_id": user_id}
    """
    if not authorization:
        raise HTTPException(
            status_code=401,
            detail="Missing authentication. Provide Authorization header."
        )
    return validate_jwt(authorization)


def validate_jwt(authorization: str, secret: Optional[str] = None) -> str:
    """
    Validate a Bearer header and return the user ID.

    Args:
        authorization: Raw Authorization header value
        secret: JWT secret; defaults to settings.supabase_jwt_secret
    """
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    token = authorization.split(" ", 1)[1]
    secret = secret or get_settings().supabase_jwt_secret
    if not secret:
        raise HTTPException(
            status_code=500,
            detail="JWT validation not configured (missing SUPABASE_JWT_SECRET)"
        )

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[SUPABASE_JWT_ALGORITHM],
            audience=SUPABASE_JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid access token: {e}")
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Token missing user ID")
    return user_id
