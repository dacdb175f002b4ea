"""HS256 issuer token verification.

Tokens are minted by the issuer-auth service (OTP login) with the shared
SECRET_KEY; the `sub` claim carries the issuer id.
"""

import structlog
from jose import JWTError, jwt

from app.core.config import settings

logger = structlog.get_logger()


def verify_issuer_token(token: str) -> dict:
    """
    Verify an issuer JWT.

    Returns the decoded payload with claims (sub, email, etc.).
    Raises JWTError on any validation failure.
    """
    payload = jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        issuer=settings.JWT_ISSUER or None,
        options={
            "verify_aud": False,
            "verify_iss": bool(settings.JWT_ISSUER),
            "verify_exp": True,
        },
    )
    if not payload.get("sub"):
        raise JWTError("Token missing subject claim")
    return payload
