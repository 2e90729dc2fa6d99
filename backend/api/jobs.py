"""
AQL Job Desk - Job API Endpoints
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Status transitions, resubmission, staff assignment,
                      lookup by job number
v1.0.0 (2026-09-28): Job listing
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
import logging

from api.deps import get_session, job_store, ranker, coordinator, to_http
from models.identity import UserSession
from models.job import (
    JobRecord, JobStatus, StatusChange, StaffAssignmentRequest, StaffAssignmentResult,
)
from services.errors import JobDeskError
from services.job_number import parse_job_number

router = APIRouter(prefix="/jobs", tags=["jobs"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[JobRecord])
async def list_jobs(
    status: Optional[JobStatus] = None,
    location_id: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 100,
    session: UserSession = Depends(get_session),
):
    """List jobs, newest first"""
    try:
        return await job_store.list_jobs(
            status=status.value if status else None,
            location_id=location_id, search=search, limit=limit,
        )
    except JobDeskError as e:
        raise to_http(e)


@router.get("/by-number/{job_number}", response_model=JobRecord)
async def get_job_by_number(job_number: str, session: UserSession = Depends(get_session)):
    """Look a job up by its job number (e.g. 16-42-1)"""
    try:
        parse_job_number(job_number)
        job = await job_store.find_by_number(job_number)
    except JobDeskError as e:
        raise to_http(e)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job {job_number} not found")
    return job


@router.get("/{job_id}", response_model=JobRecord)
async def get_job(job_id: int, session: UserSession = Depends(get_session)):
    try:
        return await job_store.get(job_id)
    except JobDeskError as e:
        raise to_http(e)


@router.post("/{job_id}/status", response_model=JobRecord)
async def change_status(job_id: int, data: StatusChange, session: UserSession = Depends(get_session)):
    """Move a job along its lifecycle"""
    try:
        job = await coordinator.transition(job_id, data.status)
    except JobDeskError as e:
        raise to_http(e)
    if data.note:
        logger.info(f"Job {job_id} -> {data.status.value} by {session.user_id}: {data.note}")
    return job


@router.post("/{job_id}/resubmit", response_model=JobRecord)
async def resubmit_job(job_id: int, session: UserSession = Depends(get_session)):
    """Create the next revision of a job"""
    try:
        return await coordinator.resubmit(job_id, session)
    except JobDeskError as e:
        raise to_http(e)


@router.put("/{job_id}/staff", response_model=StaffAssignmentResult)
async def assign_staff(job_id: int, data: StaffAssignmentRequest,
                       session: UserSession = Depends(get_session)):
    """Set inspectors and supervisors; the first inspector is primary"""
    try:
        return await ranker.assign(job_id, data)
    except JobDeskError as e:
        raise to_http(e)
