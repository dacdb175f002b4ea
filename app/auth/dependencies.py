"""FastAPI auth dependencies: get_current_issuer."""

import uuid

import sentry_sdk
import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from app.auth.issuer_jwt import verify_issuer_token
from app.schemas.auth import CurrentIssuer

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=True)


async def get_current_issuer(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentIssuer:
    """
    Verify the issuer JWT and resolve the calling issuer.

    The `sub` claim must be the issuer's UUID; it scopes every allocation
    query made on behalf of this request.
    """
    try:
        payload = verify_issuer_token(credentials.credentials)
        issuer_id = uuid.UUID(str(payload["sub"]))
    except (JWTError, ValueError) as e:
        logger.warning("jwt_verification_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    request.state.issuer_id = issuer_id
    sentry_sdk.set_user({"id": str(issuer_id)})

    return CurrentIssuer(issuer_id=issuer_id, email=payload.get("email"))
