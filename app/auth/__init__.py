"""Auth package: bearer-token verification and the current-issuer dependency."""

from app.auth.dependencies import get_current_issuer
from app.auth.issuer_jwt import verify_issuer_token

__all__ = [
    "get_current_issuer",
    "verify_issuer_token",
]
