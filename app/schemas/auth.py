"""Auth schemas: CurrentIssuer."""

import uuid

from pydantic import BaseModel


class CurrentIssuer(BaseModel):
    """Lightweight issuer context extracted from the bearer token."""

    issuer_id: uuid.UUID
    email: str | None = None
