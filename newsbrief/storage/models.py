"""
Briefing configuration model.

One BriefingConfig per user. JSON payloads use camelCase names (apiKey,
senderEmail, ...); the older field names written by the first settings form
(geminiApiKey, appPassword, scheduleDay) are accepted on input.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr, field_validator

from newsbrief.config import DEFAULT_SCHEDULE_TIME, MAX_LIST_ITEMS

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

# field name -> public name, in the order they are reported when missing
REQUIRED_FIELDS: dict[str, str] = {
    "api_key": "apiKey",
    "sender_email": "senderEmail",
    "sender_app_password": "senderAppPassword",
    "receiver_email": "receiverEmail",
}


class ScheduleFrequency(str, Enum):
    """How often the scheduled trigger should send a briefing."""

    DAILY = "daily"
    WEEKLY = "weekly"
    NONE = "none"


def _normalize_items(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Expected a list of strings, got {type(value).__name__}")
    seen: set[str] = set()
    items: list[str] = []
    for raw in value:
        if raw is None:
            continue
        if not isinstance(raw, (str, int, float)) or isinstance(raw, bool):
            raise ValueError(f"List entries must be strings, got {type(raw).__name__}")
        item = str(raw).strip()
        if not item or item in seen:
            continue
        seen.add(item)
        items.append(item)
    if len(items) > MAX_LIST_ITEMS:
        raise ValueError(f"At most {MAX_LIST_ITEMS} entries allowed, got {len(items)}")
    return items


class BriefingConfig(BaseModel):
    """
    Per-user settings controlling generation and delivery.

    Credential fields are SecretStr so they never show up in repr or logs.
    A config may be saved incomplete; missing_required_fields() decides
    whether it can drive a briefing.
    """

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, extra="ignore")

    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("api_key", "apiKey", "geminiApiKey"),
        serialization_alias="apiKey",
    )
    sender_email: str = Field(
        default="",
        validation_alias=AliasChoices("sender_email", "senderEmail"),
        serialization_alias="senderEmail",
    )
    sender_app_password: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("sender_app_password", "senderAppPassword", "appPassword"),
        serialization_alias="senderAppPassword",
    )
    receiver_email: str = Field(
        default="",
        validation_alias=AliasChoices("receiver_email", "receiverEmail"),
        serialization_alias="receiverEmail",
    )
    keywords: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    schedule_time: str = Field(
        default=DEFAULT_SCHEDULE_TIME,
        validation_alias=AliasChoices("schedule_time", "scheduleTime"),
        serialization_alias="scheduleTime",
    )
    schedule_frequency: ScheduleFrequency = Field(
        default=ScheduleFrequency.DAILY,
        validate_default=True,
        validation_alias=AliasChoices("schedule_frequency", "scheduleFrequency", "scheduleDay"),
        serialization_alias="scheduleFrequency",
    )

    @field_validator("sender_email", "receiver_email", mode="before")
    @classmethod
    def strip_address(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("keywords", "sources", mode="before")
    @classmethod
    def normalize_items(cls, v: Any) -> list[str]:
        return _normalize_items(v)

    @field_validator("schedule_time", mode="before")
    @classmethod
    def validate_schedule_time(cls, v: Any) -> str:
        """Accept H:MM or HH:MM (24-hour) and normalize to HH:MM."""
        if v is None or v == "":
            return DEFAULT_SCHEDULE_TIME
        match = _TIME_RE.match(str(v).strip())
        if not match:
            raise ValueError(f"Invalid schedule time {v!r}, expected HH:MM")
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            raise ValueError(f"Invalid schedule time {v!r}, expected HH:MM")
        return f"{hour:02d}:{minute:02d}"

    def missing_required_fields(self) -> list[str]:
        """Public names of required fields that are empty, in a stable order."""
        missing = []
        for name, public_name in REQUIRED_FIELDS.items():
            value = getattr(self, name)
            if isinstance(value, SecretStr):
                value = value.get_secret_value()
            if not value or not value.strip():
                missing.append(public_name)
        return missing

    def is_complete(self) -> bool:
        return not self.missing_required_fields()

    def to_public_dict(self) -> dict[str, Any]:
        """Client-facing representation with secrets replaced by presence flags."""
        return {
            "apiKeySet": bool(self.api_key.get_secret_value()),
            "senderEmail": self.sender_email,
            "senderAppPasswordSet": bool(self.sender_app_password.get_secret_value()),
            "receiverEmail": self.receiver_email,
            "keywords": list(self.keywords),
            "sources": list(self.sources),
            "scheduleTime": self.schedule_time,
            "scheduleFrequency": self.schedule_frequency,
        }
