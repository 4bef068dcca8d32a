"""
Pytest configuration for NewsBrief tests

Every test gets its own SQLite file, a fresh Fernet key and clean telemetry,
so nothing leaks between tests or into newsbrief/data/.
"""

from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from newsbrief.storage.config_repository import ScheduleSlot
from newsbrief.storage.models import BriefingConfig, ScheduleFrequency


class FakeConfigStore:
    """In-memory ConfigStore for job tests (no database, no encryption)"""

    def __init__(self, configs: dict[str, BriefingConfig] | None = None):
        self.configs = dict(configs or {})
        self.get_calls: list[str] = []

    def get(self, user_id: str) -> BriefingConfig | None:
        self.get_calls.append(user_id)
        return self.configs.get(user_id)

    def list_user_ids(self) -> list[str]:
        return list(self.configs)

    def list_schedules(self) -> list[ScheduleSlot]:
        return [
            ScheduleSlot(user_id, config.schedule_time, config.schedule_frequency)
            for user_id, config in self.configs.items()
            if config.schedule_frequency != ScheduleFrequency.NONE.value
        ]


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point the app at a temp database and reset process-wide singletons"""
    from newsbrief.briefing import job as job_module
    from newsbrief.infrastructure.database import reset_pool
    from newsbrief.observability.telemetry import reset_telemetry
    from newsbrief.storage import config_repository

    monkeypatch.setenv("NEWSBRIEF_DB_PATH", str(tmp_path / "newsbrief-test.db"))
    monkeypatch.setenv("NEWSBRIEF_ENCRYPTION_KEY", Fernet.generate_key().decode())
    monkeypatch.delenv("NEWSBRIEF_API_TOKEN", raising=False)
    monkeypatch.setattr(config_repository, "_repository", None)
    monkeypatch.setattr(job_module, "_job", None)

    reset_pool()
    reset_telemetry()
    yield
    reset_pool()


@pytest.fixture
def db():
    """Initialized (empty) database"""
    from newsbrief.infrastructure.database import init_database

    init_database()


@pytest.fixture
def repo(db):
    from newsbrief.storage.config_repository import ConfigRepository

    return ConfigRepository()


@pytest.fixture
def config_payload() -> dict:
    """Settings as the settings form sends them"""
    return {
        "apiKey": "AIzaTestKey-0001",
        "senderEmail": "sender@gmail.com",
        "senderAppPassword": "abcd efgh ijkl mnop",
        "receiverEmail": "reader@example.com",
        "keywords": ["smart farming", "food prices"],
        "sources": ["Reuters", "https://www.nongmin.com"],
        "scheduleTime": "09:00",
        "scheduleFrequency": "daily",
    }


@pytest.fixture
def complete_config(config_payload) -> BriefingConfig:
    return BriefingConfig.model_validate(config_payload)


@pytest.fixture
def fake_store():
    """Factory for FakeConfigStore"""
    return FakeConfigStore
