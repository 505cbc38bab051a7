"""
Bearer token verification.

Tokens are issued by the identity provider in front of this service; here we
only verify the signature and read the user id from the `sub` claim.
"""
import jwt
from fastapi import HTTPException, status

from orgguard.core import config
from orgguard.utils import get_logger


log = get_logger(__name__)


def verify_jwt_token(token: str) -> dict:
    """
    Verify a JWT and return its payload.

    Args:
        token: JWT token from Authorization header

    Returns:
        Decoded JWT payload

    Raises:
        HTTPException: 401 if the token is invalid, expired, or cannot be verified
    """
    if not config.JWT_SECRET:
        log.warning("JWT_SECRET is not set; rejecting bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token verification is not configured",
        )
    try:
        return jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            options={"require": ["sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError as e:
        log.info(f"Rejected bearer token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )
