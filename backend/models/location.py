"""
AQL Job Desk - Location Models
Version: 1.0.0

Changelog:
v1.0.0 (2026-09-28): Initial location models
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class Location(BaseModel):
    """Facility location (reference data, admin-managed)"""
    id: str = Field(..., description="Location ID")
    display_name: str = Field(..., min_length=1, description="Name shown in pickers")
    facility_code: int = Field(..., ge=0, description="Numeric prefix of job numbers")
    address: Optional[str] = Field(None, description="Street address")
    created_at: Optional[datetime] = None


class LocationCreate(BaseModel):
    id: Optional[str] = None
    display_name: str = Field(..., min_length=1)
    facility_code: int = Field(..., ge=0)
    address: Optional[str] = None
