"""Sentry wiring for the verification API.

Submissions carry a user's live position, so events are scrubbed of
coordinates (form fields and ``/quests/nearby`` query parameters) as well as
auth headers before they leave the process.
"""

from urllib.parse import parse_qsl, urlencode

import structlog
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

logger = structlog.get_logger()

REDACTED = "[REDACTED]"

_SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}
_LOCATION_FIELDS = {"latitude", "longitude", "lat", "lng", "photo"}


def _scrub_query(query: str) -> str:
    pairs = parse_qsl(query, keep_blank_values=True)
    return urlencode(
        [(k, REDACTED if k.lower() in _LOCATION_FIELDS else v) for k, v in pairs]
    )


def scrub_event(event: dict, hint: dict) -> dict:
    """before_send hook: drop auth headers and submitted locations."""
    request = event.get("request") or {}

    headers = request.get("headers") or {}
    for header in list(headers):
        if header.lower() in _SENSITIVE_HEADERS:
            headers[header] = REDACTED

    data = request.get("data")
    if isinstance(data, dict):
        for key in list(data):
            if key.lower() in _LOCATION_FIELDS:
                data[key] = REDACTED

    query = request.get("query_string")
    if isinstance(query, str) and query:
        request["query_string"] = _scrub_query(query)

    return event


def init_sentry(
    dsn: str | None,
    environment: str = "development",
    release: str | None = None,
) -> None:
    """Initialise Sentry before the FastAPI app exists. No-op without a DSN."""
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
            HttpxIntegration(),
        ],
        send_default_pii=False,
        before_send=scrub_event,
    )
    sentry_sdk.set_tag("service", "questverify-api")
    logger.info(
        "sentry_initialized",
        environment=environment,
        traces_sample_rate=traces_sample_rate,
    )
