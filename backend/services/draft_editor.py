"""
AQL Job Desk - Draft Editor
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Placeholder job number when allocation fails; facility
                      change re-allocates; save warning after repeated failures;
                      emptied unsaved form drops its pending save; job
                      number persisted through DraftStore.set_job_number()
v1.0.0 (2026-09-28): Editing session for one job draft with autosave

One DraftEditor per open job form. It holds the working copy of the form,
decides when the AutosaveScheduler should write, and ignores results that
arrive after close().
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as SchemaError

from config import settings
from models.draft import JobDraft, JobForm, DraftSave
from models.identity import UserSession
from models.personnel import RankedCandidate, RankingMode, StaffRole
from services.autosave import AutosaveScheduler
from services.draft_store import DraftStore
from services.errors import AllocationError, FormatError, NotFoundError, ParseError
from services.job_number import JobNumber, parse_job_number, placeholder_job_number, is_placeholder
from services.location_store import LocationStore
from services.sequence_allocator import SequenceAllocator
from services.staff_ranker import StaffAssignmentRanker

logger = logging.getLogger(__name__)


class DraftEditor:
    """Working state of one job form plus its autosave."""

    def __init__(
        self,
        session: UserSession,
        store: Optional[DraftStore] = None,
        locations: Optional[LocationStore] = None,
        allocator: Optional[SequenceAllocator] = None,
        ranker: Optional[StaffAssignmentRanker] = None,
        debounce_s: Optional[float] = None,
        db_path: Optional[str] = None,
    ):
        self.session = session
        self.store = store or DraftStore(db_path)
        self.locations = locations or LocationStore(db_path)
        self.allocator = allocator or SequenceAllocator(db_path)
        self.ranker = ranker or StaffAssignmentRanker(db_path)

        self.draft_id: Optional[str] = None
        self.form = JobForm()
        self.current_tab: str = settings.DEFAULT_TAB
        self.job_number: Optional[str] = None
        self.job_number_provisional = False
        self.last_saved_at: Optional[datetime] = None
        self.save_warning: Optional[str] = None
        self.allocation_warning: Optional[str] = None
        self.candidates: List[RankedCandidate] = []

        self._alive = True
        self._autosave = AutosaveScheduler(
            self._persist,
            debounce_s=debounce_s,
            on_saved=self._apply_saved,
            on_error=self._apply_save_error,
            name=f"draft of {session.user_id}",
        )

    # -- state --

    @property
    def is_saving(self) -> bool:
        return self._autosave.in_flight

    @property
    def is_open(self) -> bool:
        return self._alive

    @property
    def resume_query(self) -> Optional[str]:
        """?draft=<id> once the first save has landed."""
        if not self.draft_id:
            return None
        return f"?{settings.DRAFT_QUERY_PARAM}={self.draft_id}"

    def snapshot(self) -> DraftSave:
        return DraftSave(
            current_tab=self.current_tab,
            form=self.form.model_copy(deep=True),
        )

    def _worth_saving(self) -> bool:
        if not self._alive:
            return False
        return self.draft_id is not None or self.form.has_minimum_content()

    # -- operations --

    async def load(self, draft_id: str) -> JobDraft:
        """Restore a saved draft (form and tab verbatim) into this editor."""
        draft = await self.store.get(draft_id)
        if draft is None or draft.owner_id != self.session.user_id:
            raise NotFoundError("Draft", draft_id)
        if not self._alive:
            return draft

        self._autosave.cancel()
        self.draft_id = draft.draft_id
        self.form = draft.form
        self.current_tab = draft.current_tab
        self.job_number = draft.job_number
        self.job_number_provisional = draft.job_number_provisional
        self.last_saved_at = draft.last_saved_at
        logger.info(f"Loaded draft {draft.draft_id} on tab '{draft.current_tab}'")

        if draft.form.location_id:
            await self.refresh_candidates()
        return draft

    def update_form(self, changes: Dict[str, Any]) -> None:
        """
        Apply form field changes and schedule a debounced save.

        Nothing is scheduled while the form is still empty and has never been
        saved.
        """
        try:
            self.form = JobForm.model_validate({**self.form.model_dump(), **changes})
        except SchemaError as e:
            raise ParseError("form update", str(e)) from e

        if self._worth_saving():
            self._autosave.schedule(self.snapshot())
        else:
            # the form was emptied again before its first save
            self._autosave.cancel()

    async def change_tab(self, tab: str) -> Optional[JobDraft]:
        """Switch tabs; saves immediately if there is anything to save."""
        self.current_tab = tab
        if not self._worth_saving():
            return None
        return await self._autosave.save_now(self.snapshot())

    async def select_location(self, location_id: str) -> Optional[str]:
        """
        Set the job location, clear staff picks and make sure the draft holds
        a job number for that location's facility.

        Returns the job number (possibly a placeholder).
        """
        location = await self.locations.get(location_id)
        if location is None:
            raise NotFoundError("Location", location_id)
        if not self._alive:
            return self.job_number

        self.form = self.form.model_copy(update={
            "location_id": location.id,
            "job_location": location.display_name,
            "inspector_ids": [],
            "supervisor_ids": [],
        })

        if self._needs_allocation(location.facility_code):
            try:
                sequence = await self.allocator.next_sequence(location.facility_code)
            except AllocationError as e:
                number = placeholder_job_number(location.facility_code)
                logger.warning(f"Using placeholder {number} for draft {self.draft_id}: {e}")
                if self._alive:
                    self.job_number = number
                    self.job_number_provisional = True
                    self.allocation_warning = str(e)
            else:
                if self._alive:
                    self.job_number = str(JobNumber(location.facility_code, sequence,
                                                    settings.INITIAL_REVISION))
                    self.job_number_provisional = False
                    self.allocation_warning = None

        if not self._alive:
            return self.job_number

        await self.refresh_candidates()
        if self._alive:
            self._autosave.schedule(self.snapshot())
        return self.job_number

    def _needs_allocation(self, facility_code: int) -> bool:
        if not self.job_number or is_placeholder(self.job_number):
            return True
        try:
            current = parse_job_number(self.job_number)
        except FormatError as e:
            logger.error(f"Draft {self.draft_id} holds an invalid job number: {e}")
            return True
        return current.facility_code != facility_code

    async def refresh_candidates(
        self,
        role: Optional[StaffRole] = None,
        mode: RankingMode = RankingMode.RECOMMENDED,
        available_only: bool = False,
        certified_only: bool = False,
        search: Optional[str] = None,
    ) -> List[RankedCandidate]:
        if not self.form.location_id:
            return []
        ranked = await self.ranker.ranked_for_location(
            self.form.location_id, role=role, mode=mode,
            available_only=available_only, certified_only=certified_only, search=search,
        )
        if self._alive:
            self.candidates = ranked
        return ranked

    async def flush(self) -> Optional[JobDraft]:
        """Write any pending change now."""
        return await self._autosave.flush()

    async def wait_idle(self) -> None:
        await self._autosave.wait_idle()

    def close(self) -> None:
        """Stop autosaving. A save already running finishes; its result is ignored."""
        self._alive = False
        self._autosave.cancel()

    # -- autosave callbacks --

    async def _persist(self, payload: DraftSave) -> JobDraft:
        # draft_id is read when the save starts, so the second save after the
        # first one lands updates in place
        owner = self.session.user_id
        draft = await self.store.save(owner, payload, draft_id=self.draft_id)
        number, provisional = self.job_number, self.job_number_provisional
        if (draft.job_number, draft.job_number_provisional) != (number, provisional):
            draft = await self.store.set_job_number(draft.draft_id, owner, number, provisional)
        return draft

    def _apply_saved(self, draft: JobDraft) -> None:
        if not self._alive:
            return
        if self.draft_id is None:
            self.draft_id = draft.draft_id
            logger.info(f"Draft created; resume with {self.resume_query}")
        self.last_saved_at = draft.last_saved_at
        self.save_warning = None

    def _apply_save_error(self, error: Exception, failures: int) -> None:
        if not self._alive:
            return
        if failures >= settings.AUTOSAVE_WARN_AFTER_FAILURES:
            self.save_warning = f"Draft not saved after {failures} attempts: {error}"
            logger.warning(self.save_warning)
