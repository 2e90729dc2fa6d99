"""
AQL Job Desk - Staff Assignment Ranker
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Candidates from every location (mismatch is a warning,
                      not a filter); primary inspector promotion on removal
v1.0.0 (2026-09-28): Initial ranking for the staff assignment dialog

Ranking order for a job location:
    1. candidates at the job's location first
    2. mode key, descending (recommended: match score, experience: tier,
       history: previous jobs)
    3. name, ascending
"""

import logging
from typing import Iterable, List, Optional, Dict

from pydantic import ValidationError as SchemaError

from database import get_db, execute_all
from models.personnel import PersonnelProfile, StaffRole, RankingMode, RankedCandidate
from models.job import JobRecord, StaffAssignmentRequest, StaffAssignmentResult
from services.errors import AssignmentError, ParseError
from services.job_store import JobStore

logger = logging.getLogger(__name__)


def _mode_key(profile: PersonnelProfile, mode: RankingMode) -> int:
    if mode == RankingMode.EXPERIENCE:
        return profile.experience.rank if profile.experience else 0
    if mode == RankingMode.HISTORY:
        return profile.previous_jobs
    return profile.match_score


def rank_candidates(
    profiles: Iterable[PersonnelProfile],
    job_location_id: Optional[str],
    mode: RankingMode = RankingMode.RECOMMENDED,
    available_only: bool = False,
    certified_only: bool = False,
    search: Optional[str] = None,
) -> List[RankedCandidate]:
    """Filter and order candidates for a job location."""
    needle = (search or "").strip().lower()
    selected = []
    for p in profiles:
        if available_only and not p.is_available:
            continue
        if certified_only and not p.certified:
            continue
        if needle and needle not in p.name.lower():
            continue
        selected.append(p)

    selected.sort(key=lambda p: (
        0 if job_location_id and p.location_id == job_location_id else 1,
        -_mode_key(p, mode),
        p.name.lower(),
        p.id,
    ))
    return [
        RankedCandidate(profile=p, location_matches=bool(job_location_id) and p.location_id == job_location_id)
        for p in selected
    ]


class StaffSelection:
    """
    Ordered multi-select of inspectors and supervisors for one job.

    The first inspector picked is the primary; removing it promotes the next
    one in pick order.
    """

    def __init__(self, job_location_id: Optional[str]):
        self.job_location_id = job_location_id
        self._inspectors: List[PersonnelProfile] = []
        self._supervisors: List[PersonnelProfile] = []

    @property
    def inspector_ids(self) -> List[str]:
        return [p.id for p in self._inspectors]

    @property
    def supervisor_ids(self) -> List[str]:
        return [p.id for p in self._supervisors]

    @property
    def primary_inspector_id(self) -> Optional[str]:
        return self._inspectors[0].id if self._inspectors else None

    @property
    def mismatched_ids(self) -> List[str]:
        return [p.id for p in self._inspectors + self._supervisors
                if p.location_id != self.job_location_id]

    def add(self, profile: PersonnelProfile) -> bool:
        """
        Select a candidate. Returns True when the pick is outside the job's
        location (allowed, but should be shown as a warning).

        Raises:
            AssignmentError: the candidate is unavailable
        """
        if not profile.is_available:
            raise AssignmentError(profile.id)

        bucket = self._inspectors if profile.role == StaffRole.INSPECTOR else self._supervisors
        if all(p.id != profile.id for p in bucket):
            bucket.append(profile)

        mismatch = profile.location_id != self.job_location_id
        if mismatch:
            logger.warning(f"Location mismatch: {profile.role.value} {profile.id} "
                           f"({profile.location_id}) assigned to job at {self.job_location_id}")
        return mismatch

    def remove(self, profile_id: str) -> None:
        self._inspectors = [p for p in self._inspectors if p.id != profile_id]
        self._supervisors = [p for p in self._supervisors if p.id != profile_id]


class StaffAssignmentRanker:
    """Fetches personnel and ranks/assigns them against a job location."""

    def __init__(self, db_path: Optional[str] = None, jobs: Optional[JobStore] = None):
        self.db_path = db_path
        self.jobs = jobs or JobStore(db_path)

    async def fetch_candidates(self, role: Optional[StaffRole] = None) -> List[PersonnelProfile]:
        """Every inspector/supervisor assigned to some location (any location)."""
        query = """
            SELECT * FROM personnel
            WHERE role IN ('inspector', 'supervisor') AND location_id IS NOT NULL
        """
        params: list = []
        if role:
            query += " AND role = ?"
            params.append(role.value)

        async with get_db(self.db_path) as db:
            rows = await execute_all(db, query, params)

        profiles = []
        for row in rows:
            try:
                profiles.append(PersonnelProfile.model_validate(row))
            except SchemaError as e:
                raise ParseError(f"personnel {row.get('id')}", str(e)) from e
        return profiles

    async def ranked_for_location(
        self,
        location_id: str,
        role: Optional[StaffRole] = None,
        mode: RankingMode = RankingMode.RECOMMENDED,
        available_only: bool = False,
        certified_only: bool = False,
        search: Optional[str] = None,
    ) -> List[RankedCandidate]:
        profiles = await self.fetch_candidates(role)
        ranked = rank_candidates(profiles, location_id, mode=mode,
                                 available_only=available_only,
                                 certified_only=certified_only, search=search)
        logger.debug(f"Ranked {len(ranked)} candidates for location {location_id} ({mode.value})")
        return ranked

    async def assign(self, job_id: int, request: StaffAssignmentRequest) -> StaffAssignmentResult:
        """
        Validate and persist a staff selection for a job.

        Picks are applied in request order, so the first inspector id becomes
        the primary. Unavailable or unknown candidates block the whole
        assignment; location mismatches are returned as warnings.
        """
        job: JobRecord = await self.jobs.get(job_id)
        profiles: Dict[str, PersonnelProfile] = {p.id: p for p in await self.fetch_candidates()}

        selection = StaffSelection(job.location_id)
        for expected_role, ids in ((StaffRole.INSPECTOR, request.inspector_ids),
                                   (StaffRole.SUPERVISOR, request.supervisor_ids)):
            for profile_id in ids:
                profile = profiles.get(profile_id)
                if profile is None:
                    raise AssignmentError(profile_id, "no such candidate")
                if profile.role != expected_role:
                    raise AssignmentError(profile_id, f"is a {profile.role.value}, not a {expected_role.value}")
                selection.add(profile)

        updated = await self.jobs.update_staff(
            job_id, selection.inspector_ids, selection.supervisor_ids,
            selection.primary_inspector_id,
        )
        return StaffAssignmentResult(job=updated, mismatched_ids=selection.mismatched_ids)
