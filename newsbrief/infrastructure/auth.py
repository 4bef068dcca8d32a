"""
Shared-token authentication for the trigger and settings endpoints.

User sign-in lives outside this service. Callers (the settings UI backend and
the cron scheduler) present NEWSBRIEF_API_TOKEN as a bearer token. When the
token is unset, endpoints are open; app startup refuses that in production.
"""

from __future__ import annotations

import os
import secrets

from fastapi import Header, HTTPException

from newsbrief.observability.logging import get_logger

logger = get_logger(__name__)

API_TOKEN_ENV = "NEWSBRIEF_API_TOKEN"


def get_api_token() -> str | None:
    return os.getenv(API_TOKEN_ENV) or None


def require_api_token(authorization: str | None = Header(None)) -> None:
    """
    FastAPI dependency validating the bearer token.

    Raises:
        HTTPException: 401 if a token is configured and the header is missing or wrong
    """
    expected = get_api_token()
    if expected is None:
        return

    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Authorization header required. Use: Authorization: Bearer <token>",
        )

    token = authorization[len("Bearer ") :]
    if not secrets.compare_digest(token.encode(), expected.encode()):
        logger.warning("Rejected request with invalid API token")
        raise HTTPException(status_code=401, detail="Invalid API token")
