"""
AQL Job Desk - Sequence Allocator
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Single-statement upsert ... RETURNING; the old
                      read-then-write pair could hand two jobs the same number
v1.0.0 (2026-09-28): Initial per-facility job counter

Hands out the next job sequence per facility code. The increment happens
inside SQLite as one statement, so the database write lock serializes
concurrent callers across connections and processes.
"""

import logging
from datetime import datetime
from typing import Optional

import aiosqlite

from database import get_db, execute_one
from services.errors import AllocationError

logger = logging.getLogger(__name__)


_INCREMENT_SQL = """
    INSERT INTO sequence_counters (facility_code, last_issued, updated_at)
    VALUES (?, 1, ?)
    ON CONFLICT(facility_code) DO UPDATE
        SET last_issued = last_issued + 1,
            updated_at = excluded.updated_at
    RETURNING last_issued
"""


class SequenceAllocator:
    """Atomic per-facility counter on top of sequence_counters."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path

    async def next_sequence(self, facility_code: int) -> int:
        """
        Increment and return the counter for a facility.

        First call for a facility returns 1. Values are never reused, even if
        the job that got them is deleted later.

        Raises:
            AllocationError: the store could not perform the increment
        """
        if isinstance(facility_code, bool) or not isinstance(facility_code, int) or facility_code < 0:
            raise AllocationError(facility_code, "facility code must be a non-negative integer")

        try:
            async with get_db(self.db_path) as db:
                cursor = await db.execute(
                    _INCREMENT_SQL, (facility_code, datetime.now().isoformat())
                )
                row = await cursor.fetchone()
                await db.commit()
        except aiosqlite.Error as e:
            logger.error(f"Sequence allocation failed for facility {facility_code}: {e}")
            raise AllocationError(facility_code, str(e)) from e

        if row is None:
            raise AllocationError(facility_code, "counter returned no row")

        sequence = row[0]
        logger.info(f"Allocated sequence {sequence} for facility {facility_code}")
        return sequence

    async def peek(self, facility_code: int) -> int:
        """Last issued value (0 if the facility never issued). Display only."""
        async with get_db(self.db_path) as db:
            row = await execute_one(
                db,
                "SELECT last_issued FROM sequence_counters WHERE facility_code = ?",
                (facility_code,),
            )
        return row["last_issued"] if row else 0
