"""
AQL Job Desk - Shared API Dependencies
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Error-to-status mapping shared by all routers
v1.0.0 (2026-09-28): Session from identity headers, service singletons
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException

from models.identity import UserRole, UserSession
from services.draft_store import DraftStore
from services.errors import (
    JobDeskError, ValidationError, AllocationError, FormatError, AssignmentError,
    StatusTransitionError, NotFoundError, ParseError, DuplicateJobError,
    DuplicateLocationError,
)
from services.finalization import FinalizationCoordinator
from services.job_store import JobStore
from services.location_store import LocationStore
from services.sequence_allocator import SequenceAllocator
from services.staff_ranker import StaffAssignmentRanker

logger = logging.getLogger(__name__)

# db_path=None: the path is resolved per connection (AQL_JOBS_DB, then settings)
location_store = LocationStore()
draft_store = DraftStore()
job_store = JobStore()
allocator = SequenceAllocator()
ranker = StaffAssignmentRanker(jobs=job_store)
coordinator = FinalizationCoordinator(
    drafts=draft_store, jobs=job_store, locations=location_store, allocator=allocator,
)


async def get_session(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> UserSession:
    """Identity forwarded by the upstream identity provider."""
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Missing identity headers")
    try:
        role = UserRole(x_user_role.lower())
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown role '{x_user_role}'")
    return UserSession(user_id=x_user_id, role=role)


_STATUS_CODES = (
    (ValidationError, 422),
    (NotFoundError, 404),
    (AllocationError, 503),
    (FormatError, 409),
    (AssignmentError, 409),
    (StatusTransitionError, 409),
    (DuplicateJobError, 409),
    (DuplicateLocationError, 409),
    (ParseError, 500),
)


def to_http(e: JobDeskError) -> HTTPException:
    """Map a service error onto an HTTPException."""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(e, error_type):
            break
    else:
        status_code = 400

    if status_code >= 500:
        logger.error(f"{type(e).__name__}: {e}")
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status_code, detail={"field": e.field, "message": str(e)})
    return HTTPException(status_code=status_code, detail=str(e))
