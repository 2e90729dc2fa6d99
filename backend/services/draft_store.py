"""
AQL Job Desk - Draft Store
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Owner-scoped upsert; job number written only through
                      set_job_number(); purge_orphans() for drafts whose
                      post-finalize delete failed
v1.0.0 (2026-09-28): Initial job_drafts persistence

Persistence contract for in-progress jobs: upsert-by-id of
{draft_id, owner_id, location_id, current_tab, form_data, updated_at},
a separate job number write used by location selection, and delete-by-id on
finalize.
"""

import json
import logging
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError as SchemaError

from database import get_db, execute_one, execute_all, execute_update
from models.draft import JobDraft, JobForm, DraftSave, DraftSummary
from services.errors import NotFoundError, ParseError

logger = logging.getLogger(__name__)


def _to_draft(row: dict) -> JobDraft:
    """Validate a job_drafts row into a JobDraft."""
    try:
        form_data = json.loads(row.get("form_data") or "{}")
    except (json.JSONDecodeError, TypeError) as e:
        raise ParseError(f"form_data of draft {row.get('draft_id')}", str(e)) from e
    try:
        return JobDraft(
            draft_id=row["draft_id"],
            owner_id=row["owner_id"],
            title=row.get("title") or "New Job Draft",
            location_id=row.get("location_id"),
            current_tab=row.get("current_tab"),
            form=JobForm.model_validate(form_data),
            job_number=row.get("job_number"),
            job_number_provisional=bool(row.get("job_number_provisional")),
            created_at=row.get("created_at"),
            last_saved_at=row.get("updated_at"),
        )
    except SchemaError as e:
        raise ParseError(f"draft {row.get('draft_id')}", str(e)) from e


class DraftStore:
    """job_drafts table access. One live row per in-progress job."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path

    async def save(self, owner_id: str, payload: DraftSave,
                   draft_id: Optional[str] = None) -> JobDraft:
        """
        Insert a new draft (draft_id=None) or update an existing one in place.

        Returns the stored draft including its generated draft_id. An update
        addressed to another user's draft is reported as not found.

        The job number columns are left alone; only set_job_number() writes them.
        """
        now = datetime.now().isoformat()
        new_id = draft_id or str(uuid.uuid4())
        form = payload.form

        async with get_db(self.db_path) as db:
            cursor = await db.execute("""
                INSERT INTO job_drafts
                    (draft_id, owner_id, title, location_id, current_tab,
                     form_data, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(draft_id) DO UPDATE SET
                    title = excluded.title,
                    location_id = excluded.location_id,
                    current_tab = excluded.current_tab,
                    form_data = excluded.form_data,
                    updated_at = excluded.updated_at
                WHERE job_drafts.owner_id = excluded.owner_id
                RETURNING draft_id
            """, (
                new_id, owner_id, form.draft_title(), form.location_id,
                payload.current_tab, form.model_dump_json(), now, now,
            ))
            returned = await cursor.fetchone()
            await db.commit()

        if returned is None:
            raise NotFoundError("Draft", new_id)

        logger.debug(f"Saved draft {new_id} (tab={payload.current_tab}, owner={owner_id})")
        return await self.get(new_id)

    async def set_job_number(self, draft_id: str, owner_id: str,
                             job_number: Optional[str], provisional: bool = False) -> JobDraft:
        """Attach an allocated (or placeholder) job number to a saved draft."""
        async with get_db(self.db_path) as db:
            count = await execute_update(db, """
                UPDATE job_drafts
                SET job_number = ?, job_number_provisional = ?, updated_at = ?
                WHERE draft_id = ? AND owner_id = ?
            """, (job_number, provisional, datetime.now().isoformat(), draft_id, owner_id))
        if count == 0:
            raise NotFoundError("Draft", draft_id)

        logger.info(f"Draft {draft_id}: job number set to {job_number}"
                    f"{' (provisional)' if provisional else ''}")
        return await self.get(draft_id)

    async def get(self, draft_id: str) -> Optional[JobDraft]:
        async with get_db(self.db_path) as db:
            row = await execute_one(db, "SELECT * FROM job_drafts WHERE draft_id = ?", (draft_id,))
        return _to_draft(row) if row else None

    async def list_for_owner(self, owner_id: str) -> List[DraftSummary]:
        """Drafts for the resume picker, most recently saved first."""
        await self.purge_orphans()
        async with get_db(self.db_path) as db:
            rows = await execute_all(db, """
                SELECT draft_id, title, job_number, current_tab, updated_at
                FROM job_drafts
                WHERE owner_id = ?
                ORDER BY updated_at DESC
            """, (owner_id,))
        return [
            DraftSummary(
                draft_id=r["draft_id"], title=r["title"], job_number=r["job_number"],
                current_tab=r["current_tab"], last_saved_at=r["updated_at"],
            )
            for r in rows
        ]

    async def delete(self, draft_id: str) -> bool:
        async with get_db(self.db_path) as db:
            count = await execute_update(db, "DELETE FROM job_drafts WHERE draft_id = ?", (draft_id,))
        return count > 0

    async def purge_orphans(self) -> int:
        """Delete drafts that were already finalized into a job."""
        async with get_db(self.db_path) as db:
            count = await execute_update(db, """
                DELETE FROM job_drafts
                WHERE draft_id IN (
                    SELECT source_draft_id FROM jobs WHERE source_draft_id IS NOT NULL
                )
            """)
        if count:
            logger.info(f"Purged {count} orphaned draft(s)")
        return count
