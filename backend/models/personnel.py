"""
AQL Job Desk - Personnel Models
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Ranking inputs (experience tier, previous jobs, match score)
v1.0.0 (2026-09-28): Initial personnel profile models
"""

from pydantic import BaseModel, Field
from enum import Enum
from typing import Optional


class StaffRole(str, Enum):
    """Roles that can be assigned to a job"""
    INSPECTOR = "inspector"
    SUPERVISOR = "supervisor"


class ExperienceTier(str, Enum):
    """Seniority tier, ranked senior > mid > junior"""
    SENIOR = "senior"
    MID = "mid"
    JUNIOR = "junior"

    @property
    def rank(self) -> int:
        return {"senior": 3, "mid": 2, "junior": 1}[self.value]


class RankingMode(str, Enum):
    """Secondary sort key for candidate lists"""
    RECOMMENDED = "recommended"
    EXPERIENCE = "experience"
    HISTORY = "history"


class PersonnelProfile(BaseModel):
    """Inspector or supervisor profile (read-only to the job lifecycle)"""
    id: str
    name: str
    email: Optional[str] = None
    role: StaffRole
    location_id: Optional[str] = Field(None, description="Home location")
    is_available: bool = True
    certified: bool = False
    experience: Optional[ExperienceTier] = None
    previous_jobs: int = Field(default=0, ge=0, description="Prior job count")
    match_score: int = Field(default=0, description="Opaque suitability score")


class RankedCandidate(BaseModel):
    """Candidate annotated against a job location"""
    profile: PersonnelProfile
    location_matches: bool = Field(..., description="Home location == job location")
