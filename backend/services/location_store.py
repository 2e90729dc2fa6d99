"""
AQL Job Desk - Location Store
Version: 1.0.0

Changelog:
v1.0.0 (2026-09-28): Read/create access to the locations reference table
"""

import logging
import uuid
from typing import List, Optional

import aiosqlite
from pydantic import ValidationError as SchemaError

from database import get_db, execute_one, execute_all
from models.location import Location, LocationCreate
from services.errors import ParseError, DuplicateLocationError

logger = logging.getLogger(__name__)


def _to_location(row: dict) -> Location:
    try:
        return Location.model_validate(row)
    except SchemaError as e:
        raise ParseError("location row", str(e)) from e


class LocationStore:
    """Locations are admin-managed; the job lifecycle only reads them."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path

    async def get(self, location_id: str) -> Optional[Location]:
        if not location_id:
            return None
        async with get_db(self.db_path) as db:
            row = await execute_one(db, "SELECT * FROM locations WHERE id = ?", (location_id,))
        return _to_location(row) if row else None

    async def list_all(self) -> List[Location]:
        async with get_db(self.db_path) as db:
            rows = await execute_all(
                db, "SELECT * FROM locations ORDER BY facility_code, display_name"
            )
        return [_to_location(r) for r in rows]

    async def create(self, data: LocationCreate) -> Location:
        location_id = data.id or str(uuid.uuid4())
        try:
            async with get_db(self.db_path) as db:
                await db.execute("""
                    INSERT INTO locations (id, display_name, facility_code, address)
                    VALUES (?, ?, ?, ?)
                """, (location_id, data.display_name, data.facility_code, data.address))
                await db.commit()
        except aiosqlite.IntegrityError as e:
            raise DuplicateLocationError(location_id) from e

        logger.info(f"Created location {location_id} ({data.display_name}, facility {data.facility_code})")
        return await self.get(location_id)
