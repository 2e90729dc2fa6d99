"""
AQL Job Desk - Job Number Codec
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Placeholder numbers for failed allocations ({f}-TEMP-1)
v1.0.0 (2026-09-28): Initial codec

Job numbers are "{facility_code}-{sequence}-{revision}", e.g. "16-42-1".
No zero padding, integers only, exactly three hyphen-separated fields.
"""

from dataclasses import dataclass

from config import settings
from services.errors import FormatError


@dataclass(frozen=True)
class JobNumber:
    """Decoded job number."""
    facility_code: int
    sequence: int
    revision: int

    def __str__(self) -> str:
        return format_job_number(self.facility_code, self.sequence, self.revision)

    def next_revision(self) -> "JobNumber":
        """Same facility/sequence, revision + 1 (resubmission)."""
        return JobNumber(self.facility_code, self.sequence, self.revision + 1)

    def with_revision(self, revision: int) -> "JobNumber":
        return JobNumber(self.facility_code, self.sequence, revision)


def format_job_number(facility_code: int, sequence: int, revision: int) -> str:
    """Encode the three components. Raises FormatError on out-of-range values."""
    for name, value, minimum in (("facility_code", facility_code, 0),
                                 ("sequence", sequence, 1),
                                 ("revision", revision, 1)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise FormatError(value, f"{name} must be an integer")
        if value < minimum:
            raise FormatError(value, f"{name} must be >= {minimum}")
    return f"{facility_code}-{sequence}-{revision}"


def parse_job_number(value: str) -> JobNumber:
    """Decode a job number string. Never coerces: anything off-format raises."""
    if not isinstance(value, str):
        raise FormatError(value, "not a string")

    fields = value.split("-")
    if len(fields) != 3:
        raise FormatError(value, f"expected 3 fields, got {len(fields)}")

    numbers = []
    for field in fields:
        # str.isdigit() rejects signs, blanks and whitespace; isascii() rejects
        # other unicode digit characters that int() would accept
        if not (field.isascii() and field.isdigit()):
            raise FormatError(value, f"field {field!r} is not a non-negative integer")
        numbers.append(int(field))

    facility_code, sequence, revision = numbers
    if sequence < 1:
        raise FormatError(value, "sequence must be >= 1")
    if revision < 1:
        raise FormatError(value, "revision must be >= 1")
    return JobNumber(facility_code, sequence, revision)


def placeholder_job_number(facility_code: int) -> str:
    """Temporary number used when allocation fails; needs manual reconciliation."""
    return f"{facility_code}-{settings.JOB_NUMBER_PLACEHOLDER}-{settings.INITIAL_REVISION}"


def is_placeholder(value: str | None) -> bool:
    if not value:
        return False
    fields = value.split("-")
    return len(fields) == 3 and fields[1] == settings.JOB_NUMBER_PLACEHOLDER
