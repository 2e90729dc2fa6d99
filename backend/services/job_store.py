"""
AQL Job Desk - Job Store
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Compare-and-set status updates; staff assignment with
                      primary inspector
v1.0.0 (2026-09-28): Insert-only job creation, list/get

Jobs are created once (insert-only). Status and staff changes are partial
updates keyed by job id.
"""

import json
import logging
from datetime import datetime
from typing import List, Optional, Dict, Any

import aiosqlite

from database import get_db, execute_one, execute_all, json_col
from models.job import JobRecord, JobStatus, CustomerInfo, can_transition
from models.location import Location
from services.errors import DuplicateJobError, NotFoundError, StatusTransitionError
from services.job_number import JobNumber
from services.record_resolver import resolve_job_record

logger = logging.getLogger(__name__)


class JobStore:
    """jobs table access."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path

    async def create(
        self,
        job_number: JobNumber,
        location: Location,
        customer: CustomerInfo,
        form: Dict[str, Any],
        title: Optional[str] = None,
        inspector_ids: Optional[List[str]] = None,
        supervisor_ids: Optional[List[str]] = None,
        source_draft_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> JobRecord:
        """
        Insert a new job with status 'submitted'.

        The insert is a single committed statement: on failure nothing is
        written. Reusing a job number or a source draft raises DuplicateJobError.
        """
        inspector_ids = list(inspector_ids or [])
        supervisor_ids = list(supervisor_ids or [])
        now = datetime.now().isoformat()

        try:
            async with get_db(self.db_path) as db:
                cursor = await db.execute("""
                    INSERT INTO jobs
                        (job_number, facility_code, sequence, revision, title,
                         location_id, location_name, customer_name, customer_data,
                         status, inspector_ids, supervisor_ids, primary_inspector_id,
                         form_data, source_draft_id, created_by, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    str(job_number), job_number.facility_code, job_number.sequence,
                    job_number.revision, title or f"Job for {customer.name}",
                    location.id, location.display_name, customer.name,
                    customer.model_dump_json(), JobStatus.SUBMITTED.value,
                    json_col(inspector_ids), json_col(supervisor_ids),
                    inspector_ids[0] if inspector_ids else None,
                    json_col(form, empty='{}'), source_draft_id, created_by, now, now,
                ))
                job_id = cursor.lastrowid
                await db.commit()
        except aiosqlite.IntegrityError as e:
            logger.error(f"Job {job_number} not created: {e}")
            raise DuplicateJobError(f"Job {job_number} already exists or draft already submitted") from e

        logger.info(f"Created job {job_id} ({job_number}) at {location.display_name}")
        return await self.get(job_id)

    async def get(self, job_id: int) -> JobRecord:
        async with get_db(self.db_path) as db:
            row = await execute_one(db, "SELECT * FROM jobs WHERE id = ?", (job_id,))
        if not row:
            raise NotFoundError("Job", job_id)
        return resolve_job_record(row)

    async def find_by_number(self, job_number: str) -> Optional[JobRecord]:
        async with get_db(self.db_path) as db:
            row = await execute_one(db, "SELECT * FROM jobs WHERE job_number = ?", (job_number,))
        return resolve_job_record(row) if row else None

    async def list_jobs(
        self,
        status: Optional[str] = None,
        location_id: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 100,
    ) -> List[JobRecord]:
        """List jobs with optional filtering, newest first"""
        query = "SELECT * FROM jobs"
        conditions = []
        params: list = []

        if status:
            conditions.append("status = ?")
            params.append(status)
        if location_id:
            conditions.append("location_id = ?")
            params.append(location_id)
        if search:
            conditions.append(
                "(job_number LIKE ? OR customer_name LIKE ? OR location_name LIKE ? "
                "OR title LIKE ?)"
            )
            like = f"%{search}%"
            params.extend([like, like, like, like])

        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY id DESC LIMIT ?"
        params.append(limit)

        async with get_db(self.db_path) as db:
            rows = await execute_all(db, query, params)
        return [resolve_job_record(r) for r in rows]

    async def max_revision(self, facility_code: int, sequence: int) -> int:
        """Highest revision issued for a facility/sequence pair (0 if none)."""
        async with get_db(self.db_path) as db:
            row = await execute_one(db, """
                SELECT MAX(revision) AS rev FROM jobs
                WHERE facility_code = ? AND sequence = ?
            """, (facility_code, sequence))
        return (row["rev"] or 0) if row else 0

    async def update_status(self, job_id: int, requested: JobStatus) -> JobRecord:
        """
        Apply a lifecycle transition.

        The UPDATE is conditioned on the status we validated against, so a
        concurrent change makes it a no-op and is reported as a rejected
        transition instead of being overwritten.
        """
        current = await self.get(job_id)
        if not can_transition(current.status, requested):
            raise StatusTransitionError(current.status.value, requested.value)

        async with get_db(self.db_path) as db:
            cursor = await db.execute("""
                UPDATE jobs SET status = ?, updated_at = ?
                WHERE id = ? AND status = ?
            """, (requested.value, datetime.now().isoformat(), job_id, current.status.value))
            await db.commit()
            changed = cursor.rowcount

        if changed == 0:
            latest = await self.get(job_id)
            raise StatusTransitionError(latest.status.value, requested.value)

        logger.info(f"Job {job_id}: {current.status.value} -> {requested.value}")
        return await self.get(job_id)

    async def update_staff(
        self,
        job_id: int,
        inspector_ids: List[str],
        supervisor_ids: List[str],
        primary_inspector_id: Optional[str],
    ) -> JobRecord:
        async with get_db(self.db_path) as db:
            cursor = await db.execute("""
                UPDATE jobs
                SET inspector_ids = ?, supervisor_ids = ?, primary_inspector_id = ?,
                    updated_at = ?
                WHERE id = ?
            """, (json.dumps(inspector_ids), json.dumps(supervisor_ids),
                  primary_inspector_id, datetime.now().isoformat(), job_id))
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError("Job", job_id)

        logger.info(f"Job {job_id}: staff set to inspectors={inspector_ids} "
                    f"supervisors={supervisor_ids} primary={primary_inspector_id}")
        return await self.get(job_id)
