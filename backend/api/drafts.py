"""
AQL Job Desk - Job Draft API Endpoints
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Location selection allocates the job number server-side;
                      placeholder warning in the response
v1.0.0 (2026-09-28): Draft upsert, resume picker, finalize
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import List, Optional
import logging

from api.deps import (
    get_session, draft_store, location_store, allocator, ranker, coordinator, to_http,
)
from models.draft import JobDraft, DraftSave, DraftSummary
from models.identity import UserSession
from models.job import JobRecord
from services.draft_editor import DraftEditor
from services.errors import JobDeskError

router = APIRouter(prefix="/drafts", tags=["drafts"])
logger = logging.getLogger(__name__)


class LocationSelect(BaseModel):
    location_id: str


class DraftSaveResult(BaseModel):
    saved: bool
    draft: Optional[JobDraft] = None
    resume_query: Optional[str] = None


class LocationSelectResult(BaseModel):
    draft: JobDraft
    job_number: Optional[str] = None
    provisional: bool = False
    warning: Optional[str] = None


async def _owned_draft(draft_id: str, session: UserSession) -> JobDraft:
    try:
        draft = await draft_store.get(draft_id)
    except JobDeskError as e:
        raise to_http(e)
    if draft is None or draft.owner_id != session.user_id:
        raise HTTPException(status_code=404, detail=f"Draft {draft_id} not found")
    return draft


@router.get("/", response_model=List[DraftSummary])
async def list_drafts(session: UserSession = Depends(get_session)):
    """The caller's drafts, most recent first"""
    return await draft_store.list_for_owner(session.user_id)


@router.put("/", response_model=DraftSaveResult)
async def create_draft(data: DraftSave, session: UserSession = Depends(get_session)):
    """Save a new draft. Empty forms are not persisted."""
    if not data.form.has_minimum_content():
        logger.debug(f"Skipped saving empty draft for {session.user_id}")
        return DraftSaveResult(saved=False)

    draft = await draft_store.save(session.user_id, data)
    return DraftSaveResult(saved=True, draft=draft, resume_query=draft.resume_query)


@router.get("/{draft_id}", response_model=JobDraft)
async def get_draft(draft_id: str, session: UserSession = Depends(get_session)):
    return await _owned_draft(draft_id, session)


@router.put("/{draft_id}", response_model=DraftSaveResult)
async def update_draft(draft_id: str, data: DraftSave, session: UserSession = Depends(get_session)):
    """Update an existing draft in place"""
    await _owned_draft(draft_id, session)
    try:
        draft = await draft_store.save(session.user_id, data, draft_id=draft_id)
    except JobDeskError as e:
        raise to_http(e)
    return DraftSaveResult(saved=True, draft=draft, resume_query=draft.resume_query)


@router.delete("/{draft_id}")
async def delete_draft(draft_id: str, session: UserSession = Depends(get_session)):
    """Abandon a draft"""
    await _owned_draft(draft_id, session)
    await draft_store.delete(draft_id)
    return {"message": f"Draft {draft_id} deleted"}


@router.post("/{draft_id}/location", response_model=LocationSelectResult)
async def select_location(draft_id: str, data: LocationSelect,
                          session: UserSession = Depends(get_session)):
    """Set the job location and allocate a job number for its facility"""
    editor = DraftEditor(session, store=draft_store, locations=location_store,
                         allocator=allocator, ranker=ranker)
    try:
        await editor.load(draft_id)
        await editor.select_location(data.location_id)
        draft = await editor.flush()
    except JobDeskError as e:
        raise to_http(e)
    finally:
        editor.close()

    if draft is None:
        raise HTTPException(status_code=503, detail="Draft could not be saved")

    return LocationSelectResult(
        draft=draft,
        job_number=editor.job_number,
        provisional=editor.job_number_provisional,
        warning=editor.allocation_warning,
    )


@router.post("/{draft_id}/finalize", response_model=JobRecord)
async def finalize_draft(draft_id: str, session: UserSession = Depends(get_session)):
    """Submit the draft as a job"""
    try:
        return await coordinator.finalize(draft_id, session)
    except JobDeskError as e:
        raise to_http(e)
