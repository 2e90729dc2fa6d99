"""
AQL Job Desk - Job Draft Models
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): JobForm keeps unknown form keys verbatim; provisional
                      job number flag; DraftSave no longer carries the
                      job number
v1.0.0 (2026-09-28): Initial draft models
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from config import settings


class PartEntry(BaseModel):
    """Part line on the job details tab"""
    model_config = ConfigDict(extra="allow")

    part_number: Optional[str] = None
    part_name: Optional[str] = None


class JobForm(BaseModel):
    """
    Job creation form snapshot.

    Only the fields the lifecycle reads are declared; everything else the
    form sends (requirements, instructions, attachments, ...) is kept as-is.
    """
    model_config = ConfigDict(extra="allow")

    contract_number: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    parts: List[PartEntry] = Field(default_factory=list)
    location_id: Optional[str] = None
    job_location: Optional[str] = None
    emergency_procedures: Optional[str] = None
    instructions: Optional[str] = None
    inspector_ids: List[str] = Field(default_factory=list)
    supervisor_ids: List[str] = Field(default_factory=list)

    def has_minimum_content(self) -> bool:
        """Worth persisting: customer name, a named/numbered part, or a location."""
        if self.customer_name and self.customer_name.strip():
            return True
        if any((p.part_number or "").strip() or (p.part_name or "").strip() for p in self.parts):
            return True
        return bool(self.location_id)

    def draft_title(self) -> str:
        if self.customer_name and self.customer_name.strip():
            return f"Job for {self.customer_name.strip()}"
        return "New Job Draft"


class JobDraft(BaseModel):
    """Persisted in-progress job"""
    draft_id: str
    owner_id: str
    title: str = "New Job Draft"
    location_id: Optional[str] = None
    current_tab: str = settings.DEFAULT_TAB
    form: JobForm = Field(default_factory=JobForm)
    job_number: Optional[str] = None
    job_number_provisional: bool = False
    created_at: Optional[datetime] = None
    last_saved_at: Optional[datetime] = None

    @property
    def resume_query(self) -> str:
        """Query string that reopens this draft after a reload."""
        return f"?{settings.DRAFT_QUERY_PARAM}={self.draft_id}"


class DraftSave(BaseModel):
    """
    Upsert payload sent by the job form.

    Job numbers are not part of it: they come from the allocator only.
    """
    model_config = ConfigDict(extra="forbid")

    current_tab: str = settings.DEFAULT_TAB
    form: JobForm = Field(default_factory=JobForm)


class DraftSummary(BaseModel):
    """Row in the resume-your-draft picker"""
    draft_id: str
    title: str
    job_number: Optional[str] = None
    current_tab: str
    last_saved_at: Optional[datetime] = None
