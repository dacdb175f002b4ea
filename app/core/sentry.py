"""Sentry setup for the allocation API."""

from urllib.parse import parse_qs

import structlog
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

logger = structlog.get_logger()

# Issuer bearer tokens travel in Authorization
_REDACTED_HEADERS = {"authorization", "cookie"}


def before_send(event: dict, hint: dict) -> dict:
    """Redact issuer credentials and tag the event with the asset it concerns."""
    request = event.get("request", {})
    headers = request.get("headers", {})
    for header in list(headers):
        if header.lower() in _REDACTED_HEADERS:
            headers[header] = "[REDACTED]"

    asset_ids = parse_qs(request.get("query_string") or "").get("asset_id")
    if asset_ids:
        event.setdefault("tags", {})["asset_id"] = asset_ids[0]
    return event


def init_sentry(
    dsn: str | None,
    environment: str = "development",
    release: str | None = None,
) -> None:
    """Initialise Sentry ahead of the FastAPI app; does nothing without a DSN."""
    if not dsn:
        logger.warning("sentry_disabled", reason="SENTRY_DSN not set")
        return

    traces_sample_rate = 0.1 if environment == "production" else 1.0
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,
        before_send=before_send,
    )
    sentry_sdk.set_tag("service", "allocation-api")
    logger.info(
        "sentry_initialized",
        environment=environment,
        traces_sample_rate=traces_sample_rate,
    )
