"""
Database schema initialization for NewsBrief.

Kept apart from database.py so the pool module stays small.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from newsbrief.observability.logging import get_logger

logger = get_logger(__name__)

REQUIRED_TABLES = ("briefing_configs",)


def init_database(db_path: Path) -> None:
    """
    Initialize database with schema (idempotent)

    Safe to run multiple times - uses CREATE TABLE IF NOT EXISTS.

    Args:
        db_path: Path to the database file

    Side Effects:
    - Creates the parent directory if needed
    - Creates tables and indexes if they don't exist
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        # Credential columns hold Fernet ciphertext, never plaintext
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS briefing_configs (
                user_id TEXT PRIMARY KEY,
                encrypted_api_key TEXT,
                sender_email TEXT NOT NULL DEFAULT '',
                encrypted_sender_app_password TEXT,
                receiver_email TEXT NOT NULL DEFAULT '',
                keywords TEXT NOT NULL DEFAULT '[]',
                sources TEXT NOT NULL DEFAULT '[]',
                schedule_time TEXT NOT NULL DEFAULT '09:00',
                schedule_frequency TEXT NOT NULL DEFAULT 'daily',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE INDEX IF NOT EXISTS idx_briefing_configs_frequency
            ON briefing_configs(schedule_frequency);
        """)
        conn.commit()
    finally:
        conn.close()

    logger.info("Database schema initialized at %s", db_path)


def validate_schema(conn: sqlite3.Connection) -> bool:
    """
    Check that every required table exists.

    Raises:
        ValueError: If tables are missing
    """
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    existing = {row[0] for row in rows}
    missing = [table for table in REQUIRED_TABLES if table not in existing]
    if missing:
        raise ValueError(f"Missing tables: {', '.join(missing)}")
    return True
