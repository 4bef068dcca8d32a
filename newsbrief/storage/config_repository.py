"""Briefing config repository - per-user settings with encrypted credentials

This is the ConfigStore the briefing job reads from and the settings API
writes to.

SECURITY:
- api_key and sender_app_password are encrypted with Fernet before storage
- Encryption key must be set via NEWSBRIEF_ENCRYPTION_KEY
- Plaintext credentials are never logged
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from pydantic import SecretStr

from newsbrief.infrastructure.database import retry_on_db_lock
from newsbrief.infrastructure.settings import ENCRYPTION_KEY_ENV
from newsbrief.observability.logging import get_logger
from newsbrief.storage import BaseRepository
from newsbrief.storage.models import BriefingConfig, ScheduleFrequency
from newsbrief.utils.redaction import redact

logger = get_logger(__name__)


class CredentialEncryptionError(Exception):
    """Raised when credential encryption/decryption fails"""


@dataclass(frozen=True)
class ScheduleSlot:
    """Schedule columns of one stored config, readable without the cipher."""

    user_id: str
    schedule_time: str
    schedule_frequency: str


class ConfigRepository(BaseRepository):
    """
    Repository for per-user briefing configs.

    get/set follow document-store semantics: set() upserts and, by default,
    merges the given fields into what is already stored. Nothing here deletes.
    """

    def __init__(self, encryption_key: str | None = None):
        super().__init__("briefing_configs")
        self._cipher = self._get_cipher(encryption_key)

    def _get_cipher(self, encryption_key: str | None) -> Fernet:
        """
        Raises:
            ValueError: If no key is configured or the key is malformed
        """
        key = encryption_key or os.getenv(ENCRYPTION_KEY_ENV)

        if not key:
            raise ValueError(
                f"{ENCRYPTION_KEY_ENV} environment variable must be set. "
                "Generate one with: python -c "
                "'from cryptography.fernet import Fernet; "
                "print(Fernet.generate_key().decode())'"
            )

        try:
            return Fernet(key.encode())
        except Exception as e:
            raise ValueError(f"Invalid encryption key format: {e}") from e

    def _encrypt(self, secret: SecretStr) -> str | None:
        plaintext = secret.get_secret_value()
        if not plaintext:
            return None
        try:
            return self._cipher.encrypt(plaintext.encode()).decode()
        except Exception as e:
            logger.error("Failed to encrypt credential: %s", type(e).__name__)
            raise CredentialEncryptionError(f"Encryption failed: {type(e).__name__}") from e

    def _decrypt(self, ciphertext: str | None) -> str:
        if not ciphertext:
            return ""
        try:
            return self._cipher.decrypt(ciphertext.encode()).decode()
        except InvalidToken as e:
            logger.error("Failed to decrypt credential: invalid token or wrong key")
            raise CredentialEncryptionError("Decryption failed: invalid token or wrong key") from e

    def _row_to_config(self, row: Any) -> BriefingConfig:
        return BriefingConfig(
            api_key=self._decrypt(row["encrypted_api_key"]),
            sender_email=row["sender_email"],
            sender_app_password=self._decrypt(row["encrypted_sender_app_password"]),
            receiver_email=row["receiver_email"],
            keywords=json.loads(row["keywords"]),
            sources=json.loads(row["sources"]),
            schedule_time=row["schedule_time"],
            schedule_frequency=row["schedule_frequency"],
        )

    def get(self, user_id: str) -> BriefingConfig | None:
        """
        Get the stored config for a user

        Returns:
            BriefingConfig with decrypted credentials, or None if never saved

        Raises:
            CredentialEncryptionError: If stored credentials cannot be decrypted
        """
        row = self.query_one(f"SELECT * FROM {self.table_name} WHERE user_id = ?", (user_id,))
        if not row:
            return None
        return self._row_to_config(row)

    @retry_on_db_lock()
    def set(self, user_id: str, partial: dict[str, Any], merge: bool = True) -> BriefingConfig:
        """
        Upsert a user's config

        Args:
            user_id: Owner of the config
            partial: Fields to write; camelCase or snake_case names
            merge: Keep stored values for fields absent from partial (default)

        Returns:
            The config as stored after the write

        Raises:
            pydantic.ValidationError: If a provided field is invalid

        Side Effects:
            - Inserts or updates one row in briefing_configs
            - Encrypts credential fields before storage
        """
        update = BriefingConfig.model_validate(partial)
        existing = self.get(user_id) if merge else None

        if existing is not None:
            provided = {name: getattr(update, name) for name in update.model_fields_set}
            config = existing.model_copy(update=provided)
        else:
            config = update

        self.execute(
            f"""
            INSERT INTO {self.table_name} (
                user_id, encrypted_api_key, sender_email, encrypted_sender_app_password,
                receiver_email, keywords, sources, schedule_time, schedule_frequency
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                encrypted_api_key = excluded.encrypted_api_key,
                sender_email = excluded.sender_email,
                encrypted_sender_app_password = excluded.encrypted_sender_app_password,
                receiver_email = excluded.receiver_email,
                keywords = excluded.keywords,
                sources = excluded.sources,
                schedule_time = excluded.schedule_time,
                schedule_frequency = excluded.schedule_frequency,
                updated_at = CURRENT_TIMESTAMP
            """,
            (
                user_id,
                self._encrypt(config.api_key),
                config.sender_email,
                self._encrypt(config.sender_app_password),
                config.receiver_email,
                json.dumps(config.keywords, ensure_ascii=False),
                json.dumps(config.sources, ensure_ascii=False),
                config.schedule_time,
                ScheduleFrequency(config.schedule_frequency).value,
            ),
        )

        logger.info(
            "%s briefing config for user %s (fields=%s)",
            "Merged" if existing is not None else "Stored",
            redact(user_id),
            sorted(update.model_fields_set),
        )
        return config

    def list_user_ids(self) -> list[str]:
        """All users with a stored config, oldest first."""
        rows = self.query_all(f"SELECT user_id FROM {self.table_name} ORDER BY created_at, user_id")
        return [row["user_id"] for row in rows]

    def list_schedules(self) -> list[ScheduleSlot]:
        """Schedule columns for every user; credentials stay encrypted."""
        rows = self.query_all(
            f"""
            SELECT user_id, schedule_time, schedule_frequency
            FROM {self.table_name}
            WHERE schedule_frequency != ?
            ORDER BY created_at, user_id
            """,
            (ScheduleFrequency.NONE.value,),
        )
        return [
            ScheduleSlot(row["user_id"], row["schedule_time"], row["schedule_frequency"])
            for row in rows
        ]


_repository: ConfigRepository | None = None


def get_config_repository() -> ConfigRepository:
    """Get or create singleton ConfigRepository instance."""
    global _repository
    if _repository is None:
        _repository = ConfigRepository()
    return _repository
