"""
AQL Job Desk - Domain Errors
Version: 1.0.0

Raised by the services; the API layer maps them onto HTTP status codes.
"""

from typing import Optional


class JobDeskError(Exception):
    """Base class for job lifecycle errors."""


class ValidationError(JobDeskError):
    """Required data missing at finalize time. Recoverable by user input."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Missing or invalid field: {field}")


class AllocationError(JobDeskError):
    """The sequence counter could not be incremented."""

    def __init__(self, facility_code: int, reason: str = ""):
        self.facility_code = facility_code
        detail = f": {reason}" if reason else ""
        super().__init__(f"Could not allocate a sequence for facility {facility_code}{detail}")


class FormatError(JobDeskError):
    """Malformed job number string."""

    def __init__(self, value, reason: str):
        self.value = value
        super().__init__(f"Invalid job number {value!r}: {reason}")


class AssignmentError(JobDeskError):
    """Candidate cannot be assigned (unavailable)."""

    def __init__(self, profile_id: str, reason: str = "candidate is unavailable"):
        self.profile_id = profile_id
        super().__init__(f"Cannot assign {profile_id}: {reason}")


class StatusTransitionError(JobDeskError):
    """Job status change not allowed by the lifecycle table."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Transition {current} -> {requested} is not allowed")


class ParseError(JobDeskError):
    """Stored or remote payload failed schema validation."""

    def __init__(self, source: str, detail: str):
        self.source = source
        super().__init__(f"Malformed {source}: {detail}")


class NotFoundError(JobDeskError):
    """Referenced row does not exist."""

    def __init__(self, entity: str, key):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key} not found")


class DuplicateJobError(JobDeskError):
    """Job number or source draft already used by another job."""


class DuplicateLocationError(JobDeskError):
    """Location id already taken."""

    def __init__(self, location_id: str):
        self.location_id = location_id
        super().__init__(f"Location '{location_id}' already exists")
