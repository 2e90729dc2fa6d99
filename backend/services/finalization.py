"""
AQL Job Desk - Finalization Coordinator
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Retry allocation for placeholder numbers; resubmission as
                      a new revision; per-draft serialization
v1.0.0 (2026-09-28): Draft -> submitted job

finalize(draft_id) checks, in order (first failure wins):
    1. the draft exists                        ValidationError("draftId")
    2. a job number is allocated, allocating   AllocationError /
       one now if needed                       ValidationError("locationId")
    3. a customer name is present              ValidationError("customerName")
    4. the location resolves                   ValidationError("locationId")

Then the job is inserted with status 'submitted' and the draft is deleted.
A failed insert leaves the draft untouched. A failed delete is only logged;
purge_orphans() removes the draft later.
"""

import asyncio
import logging
import weakref
from typing import Optional

import aiosqlite

from config import settings
from models.identity import UserSession
from models.job import JobRecord, JobStatus, CustomerInfo
from models.location import Location
from services.draft_store import DraftStore
from services.errors import ValidationError, NotFoundError
from services.job_number import JobNumber, parse_job_number, is_placeholder
from services.job_store import JobStore
from services.location_store import LocationStore
from services.sequence_allocator import SequenceAllocator

logger = logging.getLogger(__name__)


class FinalizationCoordinator:
    """Turns drafts into submitted jobs and drives later job status changes."""

    def __init__(
        self,
        drafts: Optional[DraftStore] = None,
        jobs: Optional[JobStore] = None,
        locations: Optional[LocationStore] = None,
        allocator: Optional[SequenceAllocator] = None,
        db_path: Optional[str] = None,
    ):
        self.drafts = drafts or DraftStore(db_path)
        self.jobs = jobs or JobStore(db_path)
        self.locations = locations or LocationStore(db_path)
        self.allocator = allocator or SequenceAllocator(db_path)
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    async def finalize(self, draft_id: str, session: UserSession) -> JobRecord:
        """Submit a draft. Concurrent calls for one draft run one at a time."""
        lock = self._locks.get(draft_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[draft_id] = lock
        async with lock:
            return await self._finalize(draft_id, session)

    async def _finalize(self, draft_id: str, session: UserSession) -> JobRecord:
        # 1. draft exists (and belongs to the caller)
        draft = await self.drafts.get(draft_id)
        if draft is None or (draft.owner_id != session.user_id and not session.is_admin):
            raise ValidationError("draftId", f"Draft {draft_id} not found")

        form = draft.form
        location: Optional[Location] = None
        if form.location_id:
            location = await self.locations.get(form.location_id)

        # 2. job number
        if draft.job_number and not is_placeholder(draft.job_number):
            job_number = parse_job_number(draft.job_number)
        else:
            if location is None:
                raise ValidationError("locationId", "A location is required to allocate a job number")
            sequence = await self.allocator.next_sequence(location.facility_code)
            job_number = JobNumber(location.facility_code, sequence, settings.INITIAL_REVISION)
            logger.info(f"Draft {draft_id}: allocated {job_number} at finalize "
                        f"(was {draft.job_number or 'unset'})")

        # 3. customer
        customer_name = (form.customer_name or "").strip()
        if not customer_name:
            raise ValidationError("customerName")

        # 4. location
        if not form.location_id or location is None:
            raise ValidationError("locationId")
        if job_number.facility_code != location.facility_code:
            raise ValidationError(
                "jobNumber",
                f"Job number {job_number} does not belong to facility {location.facility_code}",
            )

        form_data = form.model_dump(mode="json")
        form_data["job_location"] = location.display_name
        record = await self.jobs.create(
            job_number=job_number,
            location=location,
            customer=CustomerInfo(
                name=customer_name,
                email=form.customer_email,
                phone=form.customer_phone,
                address=form.customer_address,
            ),
            form=form_data,
            title=f"Job for {customer_name}",
            inspector_ids=form.inspector_ids,
            supervisor_ids=form.supervisor_ids,
            source_draft_id=draft.draft_id,
            created_by=session.user_id,
        )

        try:
            await self.drafts.delete(draft.draft_id)
        except aiosqlite.Error as e:
            logger.error(f"Job {record.job_id} created but draft {draft.draft_id} "
                         f"was not deleted: {e}")

        logger.info(f"Finalized draft {draft.draft_id} -> job {record.job_id} ({record.job_number})")
        return record

    async def resubmit(self, job_id: int, session: UserSession) -> JobRecord:
        """
        Resubmit an existing job as a new revision of the same
        facility/sequence pair (16-2-1 -> 16-2-2).
        """
        original = await self.jobs.get(job_id)
        number = parse_job_number(original.job_number)
        latest = await self.jobs.max_revision(number.facility_code, number.sequence)
        new_number = number.with_revision(max(latest, number.revision) + 1)

        location = await self.locations.get(original.location_id)
        if location is None:
            raise NotFoundError("Location", original.location_id)

        record = await self.jobs.create(
            job_number=new_number,
            location=location,
            customer=original.customer,
            form=original.form,
            title=original.title,
            inspector_ids=original.inspector_ids,
            supervisor_ids=original.supervisor_ids,
            created_by=session.user_id,
        )
        logger.info(f"Resubmitted job {original.job_number} as {record.job_number}")
        return record

    async def transition(self, job_id: int, status: JobStatus) -> JobRecord:
        """Apply a workflow status change; illegal moves raise StatusTransitionError."""
        return await self.jobs.update_status(job_id, status)
