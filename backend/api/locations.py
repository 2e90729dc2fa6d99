"""
AQL Job Desk - Location API Endpoints
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Ranked candidates per location
v1.0.0 (2026-09-28): Location reference data
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
import logging

from api.deps import get_session, location_store, ranker, allocator, to_http
from models.identity import UserSession
from models.location import Location, LocationCreate
from models.personnel import RankedCandidate, RankingMode, StaffRole
from services.errors import JobDeskError

router = APIRouter(prefix="/locations", tags=["locations"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[Location])
async def list_locations(session: UserSession = Depends(get_session)):
    """All locations, by facility code"""
    return await location_store.list_all()


@router.post("/", response_model=Location)
async def create_location(data: LocationCreate, session: UserSession = Depends(get_session)):
    """Create a location (admin only)"""
    if not session.is_admin:
        raise HTTPException(status_code=403, detail="Only admins can manage locations")
    try:
        return await location_store.create(data)
    except JobDeskError as e:
        raise to_http(e)


@router.get("/{location_id}")
async def get_location(location_id: str, session: UserSession = Depends(get_session)):
    """Location details with the last issued job sequence"""
    location = await location_store.get(location_id)
    if not location:
        raise HTTPException(status_code=404, detail=f"Location {location_id} not found")

    result = location.model_dump(mode="json")
    result["last_issued_sequence"] = await allocator.peek(location.facility_code)
    return result


@router.get("/{location_id}/candidates", response_model=List[RankedCandidate])
async def list_candidates(
    location_id: str,
    mode: RankingMode = RankingMode.RECOMMENDED,
    available_only: bool = False,
    certified_only: bool = False,
    search: Optional[str] = None,
    role: Optional[StaffRole] = None,
    session: UserSession = Depends(get_session),
):
    """Inspectors/supervisors ranked for a job at this location"""
    if not await location_store.get(location_id):
        raise HTTPException(status_code=404, detail=f"Location {location_id} not found")
    try:
        return await ranker.ranked_for_location(
            location_id, role=role, mode=mode, available_only=available_only,
            certified_only=certified_only, search=search,
        )
    except JobDeskError as e:
        raise to_http(e)
