"""Pydantic request/response models for the NewsBrief API."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

MAX_USER_ID_LENGTH = 128
MAX_SETTINGS_KEYS = 20


def validate_user_id(value: str) -> str:
    """
    Raises:
        ValueError: If the id is blank, too long or contains control characters
    """
    value = value.strip()
    if not value:
        raise ValueError("userId must not be empty")
    if len(value) > MAX_USER_ID_LENGTH:
        raise ValueError(f"userId too long: {len(value)} > {MAX_USER_ID_LENGTH}")
    if any(ord(ch) < 32 for ch in value):
        raise ValueError("userId contains control characters")
    return value


class GenerateRequest(BaseModel):
    """Body of POST /generate."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(validation_alias=AliasChoices("userId", "user_id"))

    @field_validator("user_id")
    @classmethod
    def check_user_id(cls, v: str) -> str:
        return validate_user_id(v)


class CronTriggerResponse(BaseModel):
    message: str
    triggered: int
    results: dict[str, str]


class SettingsResponse(BaseModel):
    """Stored settings as returned to clients; secrets reduced to presence flags."""

    userId: str
    apiKeySet: bool
    senderEmail: str
    senderAppPasswordSet: bool
    receiverEmail: str
    keywords: list[str]
    sources: list[str]
    scheduleTime: str
    scheduleFrequency: str
    complete: bool
    missing: list[str]

    @classmethod
    def from_config(cls, user_id: str, config: Any) -> SettingsResponse:
        return cls(
            userId=user_id,
            complete=config.is_complete(),
            missing=config.missing_required_fields(),
            **config.to_public_dict(),
        )
