"""
Application-wide settings and environment configuration
"""

from __future__ import annotations

import os

# Environment
ENV = os.getenv("NEWSBRIEF_ENV", "development")

# API Configuration
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
LOG_LEVEL = os.getenv("NEWSBRIEF_LOG_LEVEL", "INFO")

# Gemini (the API key itself is per user, stored in the briefing config)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", "0.7"))
GEMINI_TIMEOUT_MS = int(os.getenv("GEMINI_TIMEOUT_MS", "120000"))

# Outbound mail provider (credentials are per user)
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_TIMEOUT = int(os.getenv("SMTP_TIMEOUT", "30"))

# Server clock is not trusted; schedules are evaluated in this zone
REFERENCE_TIMEZONE = os.getenv("NEWSBRIEF_TIMEZONE", "Asia/Seoul")

# Fernet key for credential fields at rest
ENCRYPTION_KEY_ENV = "NEWSBRIEF_ENCRYPTION_KEY"


def is_production() -> bool:
    """Check if running in production"""
    return ENV == "production"
