"""FastAPI server for NewsBrief"""

from __future__ import annotations

import os
import sqlite3
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from newsbrief.api.routes.generate import router as generate_router
from newsbrief.api.routes.health import router as health_router
from newsbrief.api.routes.settings import router as settings_router
from newsbrief.config import APP_VERSION, ENCRYPTION_KEY_ENV
from newsbrief.infrastructure.auth import API_TOKEN_ENV, get_api_token
from newsbrief.infrastructure.database import init_database, validate_schema
from newsbrief.infrastructure.settings import API_HOST, API_PORT, LOG_LEVEL, is_production
from newsbrief.observability.logging import get_logger
from newsbrief.observability.telemetry import counter, log_event
from newsbrief.utils.error_sanitizer import GENERIC_MESSAGES
from newsbrief.utils.redaction import redact

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)

app = FastAPI(title="NewsBrief API", version=APP_VERSION)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Return field names only; validation rules and input values stay in the logs.
    """
    logger.warning("Validation error on %s: %s", redact(str(request.url)), exc.errors())
    counter("api.validation_errors")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Invalid request format. Please check your request and try again.",
            "error_count": len(exc.errors()),
            "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for errors raised outside a route's own handling (e.g. in dependencies)."""
    logger.error("Unhandled error on %s: %s", redact(str(request.url)), type(exc).__name__)
    counter("api.unhandled_errors")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": GENERIC_MESSAGES[500]},
    )


# The settings UI is served from elsewhere; list its origins in NEWSBRIEF_ALLOWED_ORIGINS
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("NEWSBRIEF_ALLOWED_ORIGINS", "").split(",")
    if origin.strip()
]

if not is_production():
    ALLOWED_ORIGINS.extend(
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(health_router)
app.include_router(generate_router)
app.include_router(settings_router)


def check_security_configuration() -> None:
    """
    Refuse to run in production without credential encryption or an API token.

    Raises:
        RuntimeError: On a production misconfiguration
    """
    if not os.getenv(ENCRYPTION_KEY_ENV):
        if is_production():
            raise RuntimeError(
                f"Security misconfiguration: {ENCRYPTION_KEY_ENV} not set in production. "
                "Stored credentials cannot be encrypted."
            )
        logger.warning("%s not set: settings endpoints will fail until it is", ENCRYPTION_KEY_ENV)

    if get_api_token() is None:
        if is_production():
            raise RuntimeError(
                f"Security misconfiguration: {API_TOKEN_ENV} not set in production. "
                "Refusing to start with unprotected trigger and settings endpoints."
            )
        logger.warning(
            "%s not set: trigger and settings endpoints are UNPROTECTED "
            "(only acceptable in development)",
            API_TOKEN_ENV,
        )


@app.on_event("startup")
async def startup() -> None:
    """Initialize and validate the database (fail fast if it is broken)

    Side Effects:
        - Creates newsbrief.db and its tables if missing
        - May raise RuntimeError, which aborts startup
    """
    check_security_configuration()

    try:
        logger.info("Initializing database schema...")
        init_database()
        validate_schema()
        logger.info("Database initialization complete")
    except FileNotFoundError as e:
        logger.critical("Database file not found: %s", e)
        raise RuntimeError(f"Database initialization failed: {e}") from e
    except sqlite3.OperationalError as e:
        logger.critical("Database schema error: %s", e)
        logger.critical("Database may be corrupted or locked by another process")
        raise RuntimeError(f"Database initialization failed: {e}") from e
    except ValueError as e:
        logger.critical("Database schema invalid: %s", e)
        raise RuntimeError(f"Database schema validation failed: {e}") from e

    log_event("api.startup", service="newsbrief", version=APP_VERSION)


@app.get("/")
def root() -> dict[str, Any]:
    return {
        "service": "NewsBrief API",
        "version": APP_VERSION,
        "status": "running",
        "endpoints": {
            "generate": "POST /generate",
            "cron": "GET /generate",
            "settings": "/api/settings/{user_id}",
            "health": "/health",
        },
    }


def main() -> None:
    """Run the API server (console script: newsbrief-api)."""
    import uvicorn

    uvicorn.run(
        "newsbrief.api.app:app", host=API_HOST, port=API_PORT, log_level=LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
