"""Centralized configuration for the NewsBrief service.

Re-exports everything from newsbrief.infrastructure.settings, then adds typed
constants for the database, briefing jobs, prompts and mail composition.
Environment variable overrides use safe defaults so the app starts without
extra env configuration.
"""

from __future__ import annotations

import os

from newsbrief.infrastructure.settings import *  # noqa: F401, F403 - re-export

# --- App ---
APP_VERSION: str = "1.0.0"

# --- Database ---
DB_POOL_SIZE: int = int(os.getenv("NEWSBRIEF_DB_POOL_SIZE", "5"))
DB_POOL_TIMEOUT: float = float(os.getenv("NEWSBRIEF_DB_POOL_TIMEOUT", "5.0"))
DB_CONNECT_TIMEOUT: float = float(os.getenv("NEWSBRIEF_DB_CONNECT_TIMEOUT", "30.0"))
DB_TEMP_CONN_MAX: int = int(os.getenv("NEWSBRIEF_DB_TEMP_CONN_MAX", "10"))
DB_RETRY_MAX: int = int(os.getenv("NEWSBRIEF_DB_RETRY_MAX", "5"))
DB_RETRY_BASE_DELAY: float = float(os.getenv("NEWSBRIEF_DB_RETRY_BASE_DELAY", "0.1"))
DB_RETRY_MAX_DELAY: float = float(os.getenv("NEWSBRIEF_DB_RETRY_MAX_DELAY", "2.0"))
DB_RETRY_JITTER: float = float(os.getenv("NEWSBRIEF_DB_RETRY_JITTER", "0.1"))

# --- Jobs ---
JOB_MAX_WORKERS: int = int(os.getenv("NEWSBRIEF_JOB_MAX_WORKERS", "4"))
SCHEDULE_WINDOW_MINUTES: int = int(os.getenv("NEWSBRIEF_SCHEDULE_WINDOW_MINUTES", "60"))
WEEKLY_WEEKDAY: int = 0  # Monday

# --- Briefing prompt ---
BRIEFING_HEADLINE_COUNT: int = int(os.getenv("NEWSBRIEF_HEADLINE_COUNT", "3"))
BRIEFING_LANGUAGE: str = os.getenv("NEWSBRIEF_LANGUAGE", "Korean")
BRIEFING_INDUSTRY: str = os.getenv("NEWSBRIEF_INDUSTRY", "agri-food")
PROMPT_ITEM_MAX_CHARS: int = 200

# --- Mail ---
SENDER_DISPLAY_NAME: str = os.getenv("NEWSBRIEF_SENDER_NAME", "AI News Briefing")
SUBJECT_TEMPLATE: str = os.getenv(
    "NEWSBRIEF_SUBJECT_TEMPLATE", "[Today's Briefing] {date} {industry} news summary"
)

# --- Config validation ---
DEFAULT_SCHEDULE_TIME: str = "09:00"
MAX_LIST_ITEMS: int = 50
