"""
AQL Job Desk - Database Connection Manager
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Busy timeout on every connection so concurrent writers
                      (sequence counters) queue on the SQLite lock
v1.0.0 (2026-09-28): Initial database connection manager with async helpers

Provides centralized async SQLite connection management for all services.
Uses aiosqlite with WAL journal mode and foreign key enforcement.
"""

import os
import json
import aiosqlite
from typing import Optional
from contextlib import asynccontextmanager

from config import settings


def get_db_path(db_path: Optional[str] = None) -> str:
    """Resolve database path, create data directory if needed"""
    path = db_path or os.environ.get("AQL_JOBS_DB") or settings.SQLITE_DB_PATH
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    return path


@asynccontextmanager
async def get_db(db_path: Optional[str] = None):
    """Async context manager yielding an aiosqlite connection with WAL + FK"""
    db = await aiosqlite.connect(get_db_path(db_path), timeout=settings.DB_BUSY_TIMEOUT_S)
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA foreign_keys=ON")
    try:
        yield db
    finally:
        await db.close()


async def execute_one(db, sql: str, params=()) -> dict | None:
    """Execute query and return first row as dict, or None"""
    cursor = await db.execute(sql, params)
    row = await cursor.fetchone()
    return dict(row) if row else None


async def execute_all(db, sql: str, params=()) -> list[dict]:
    """Execute query and return all rows as list of dicts"""
    cursor = await db.execute(sql, params)
    rows = await cursor.fetchall()
    return [dict(row) for row in rows]


async def execute_update(db, sql: str, params=()) -> int:
    """Execute UPDATE/DELETE, commit, and return rowcount"""
    cursor = await db.execute(sql, params)
    await db.commit()
    return cursor.rowcount


def json_col(data, empty: str = '[]') -> str:
    """Serialize Python object to JSON TEXT for SQLite storage"""
    if data is None:
        return empty
    return json.dumps(data, default=str)
