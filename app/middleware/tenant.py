"""Multi-tenant middleware and query helpers.

The middleware initializes request.state.issuer_id and binds the request id to
the structlog context. The actual issuer is set by the get_current_issuer
dependency. The issuer_filter() helper scopes queries to that issuer.
"""

import uuid

from structlog.contextvars import bind_contextvars, clear_contextvars
from sqlalchemy.sql import Select
from starlette.types import ASGIApp, Receive, Scope, Send


class TenantMiddleware:
    """Pure ASGI middleware that initializes tenant state on each request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        scope.setdefault("state", {})
        scope["state"].setdefault("issuer_id", None)

        headers = dict(scope.get("headers") or [])
        request_id = headers.get(b"x-request-id", b"").decode("latin-1") or str(uuid.uuid4())
        clear_contextvars()
        bind_contextvars(request_id=request_id)
        try:
            await self.app(scope, receive, send)
        finally:
            clear_contextvars()


def issuer_filter(stmt: Select, issuer_id: uuid.UUID, model: type) -> Select:
    """Append issuer_id filter to a SQLAlchemy select statement.

    Usage:
        stmt = select(AllocationCategory)
        stmt = issuer_filter(stmt, current_issuer.issuer_id, AllocationCategory)
    """
    if hasattr(model, "issuer_id"):
        return stmt.where(model.issuer_id == issuer_id)  # type: ignore[attr-defined]
    return stmt
