"""
AQL Job Desk - Job Record Models
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Status lifecycle table, primary inspector, revision
v1.0.0 (2026-09-28): Initial job models
"""

from pydantic import BaseModel, Field
from enum import Enum
from typing import Optional, List, Dict, Any
from datetime import datetime


class JobStatus(str, Enum):
    """Job lifecycle status"""
    SUBMITTED = "submitted"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"
    NEEDS_REVIEW = "needs-review"
    REJECTED = "rejected"


# submitted -> in-progress -> {completed, on-hold, needs-review, rejected};
# on-hold / needs-review go back to in-progress; completed / rejected are terminal
ALLOWED_TRANSITIONS: Dict[JobStatus, frozenset] = {
    JobStatus.SUBMITTED: frozenset({JobStatus.IN_PROGRESS}),
    JobStatus.IN_PROGRESS: frozenset({
        JobStatus.COMPLETED, JobStatus.ON_HOLD,
        JobStatus.NEEDS_REVIEW, JobStatus.REJECTED,
    }),
    JobStatus.ON_HOLD: frozenset({JobStatus.IN_PROGRESS}),
    JobStatus.NEEDS_REVIEW: frozenset({JobStatus.IN_PROGRESS}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.REJECTED: frozenset(),
}


def can_transition(current: JobStatus, requested: JobStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS[current]


class CustomerInfo(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class JobRecord(BaseModel):
    """Submitted job. job_number and location_id never change."""
    job_id: int
    job_number: str
    revision: int = Field(..., ge=1)
    title: str
    location_id: str
    location_name: str
    customer: CustomerInfo
    status: JobStatus = JobStatus.SUBMITTED
    inspector_ids: List[str] = Field(default_factory=list)
    supervisor_ids: List[str] = Field(default_factory=list)
    primary_inspector_id: Optional[str] = None
    form: Dict[str, Any] = Field(default_factory=dict, description="Form snapshot at submission")
    source_draft_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StatusChange(BaseModel):
    status: JobStatus
    note: Optional[str] = None


class StaffAssignmentRequest(BaseModel):
    """Selected staff, in selection order"""
    inspector_ids: List[str] = Field(default_factory=list)
    supervisor_ids: List[str] = Field(default_factory=list)


class StaffAssignmentResult(BaseModel):
    job: JobRecord
    mismatched_ids: List[str] = Field(default_factory=list, description="Picks outside the job location")
