"""
Settings endpoints used by the settings UI.

Writes are partial upserts: fields absent from the body keep their stored
values. Credentials are accepted on write and never returned.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from newsbrief.api.models import MAX_SETTINGS_KEYS, SettingsResponse, validate_user_id
from newsbrief.infrastructure.auth import require_api_token
from newsbrief.observability.logging import get_logger
from newsbrief.observability.telemetry import counter
from newsbrief.storage.config_repository import (
    ConfigRepository,
    CredentialEncryptionError,
    get_config_repository,
)
from newsbrief.utils.error_sanitizer import sanitize_error_message
from newsbrief.utils.redaction import redact

router = APIRouter(
    prefix="/api/settings", tags=["settings"], dependencies=[Depends(require_api_token)]
)
logger = get_logger(__name__)


def _checked_user_id(user_id: str) -> str:
    try:
        return validate_user_id(user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=sanitize_error_message(str(e), 400)) from None


@router.get("/{user_id}", response_model=SettingsResponse)
def get_settings(
    user_id: str,
    repo: ConfigRepository = Depends(get_config_repository),
) -> SettingsResponse:
    user_id = _checked_user_id(user_id)
    try:
        config = repo.get(user_id)
    except CredentialEncryptionError:
        logger.error("Stored credentials for %s cannot be decrypted", redact(user_id))
        raise HTTPException(status_code=500, detail="Stored settings could not be read") from None

    if config is None:
        raise HTTPException(status_code=404, detail="Settings not found")
    return SettingsResponse.from_config(user_id, config)


@router.put("/{user_id}", response_model=SettingsResponse)
def save_settings(
    user_id: str,
    payload: dict[str, Any] = Body(...),
    repo: ConfigRepository = Depends(get_config_repository),
) -> SettingsResponse | JSONResponse:
    """
    Merge the given fields into the user's stored settings.

    Side Effects:
        - Upserts one row in briefing_configs (credentials encrypted)
    """
    user_id = _checked_user_id(user_id)
    if len(payload) > MAX_SETTINGS_KEYS:
        raise HTTPException(status_code=400, detail="Too many fields in settings payload")

    try:
        config = repo.set(user_id, payload)
    except ValidationError as e:
        counter("api.settings.validation_errors")
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        return JSONResponse(
            status_code=400, content={"error": "Invalid settings", "invalid_fields": fields}
        )
    except CredentialEncryptionError:
        logger.error("Stored credentials for %s cannot be decrypted", redact(user_id))
        raise HTTPException(status_code=500, detail="Stored settings could not be read") from None

    counter("api.settings.saved")
    return SettingsResponse.from_config(user_id, config)
