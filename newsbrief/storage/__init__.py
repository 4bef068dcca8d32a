"""Storage - database-backed repositories and models"""

from __future__ import annotations

import sqlite3
from typing import Any

from newsbrief.infrastructure.database import db_transaction, get_db_connection


class BaseRepository:
    """Table-scoped reads and committed writes over pooled connections."""

    def __init__(self, table_name: str) -> None:
        # table_name is interpolated into SQL, so only identifiers are allowed
        if not table_name.replace("_", "").isalnum():
            raise ValueError(f"Invalid table name: {table_name}")
        self.table_name = table_name

    def query_one(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Row | None:
        with get_db_connection() as conn:
            return conn.execute(sql, params).fetchone()

    def query_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        with get_db_connection() as conn:
            return conn.execute(sql, params).fetchall()

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> None:
        """Run one write statement in its own transaction (rolled back on error)."""
        with db_transaction() as conn:
            conn.execute(sql, params)


__all__ = ["BaseRepository"]
