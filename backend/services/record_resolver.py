"""
AQL Job Desk - Job Record Resolver
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-12): Replaces the ad hoc merge of optional job fields with an
                      explicit precedence list per field

Job rows carry some values twice: as a column and inside the stored form
snapshot (customer_data / form_data JSON). Each field below is taken from the
first source that has a non-empty value:

    customer.name          customer_name column > customer_data.name > form.customer_name
    customer.email/phone/  customer_data.<field> > form.customer_<field>
      address
    location_name          location_name column > form.job_location > location_id
    title                  title column > "Job for {customer.name}"
    inspector_ids          inspector_ids column (even if empty) > form.inspector_ids > []
    supervisor_ids         supervisor_ids column (even if empty) > form.supervisor_ids > []
    primary_inspector_id   primary_inspector_id column > inspector_ids[0] > None
    revision               revision column > revision parsed from job_number

Anything that still fails the JobRecord schema raises ParseError.
"""

import json
from typing import Any, Dict, Optional

from pydantic import ValidationError as SchemaError

from models.job import JobRecord, CustomerInfo
from services.errors import ParseError, FormatError
from services.job_number import parse_job_number


def _present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, dict)):
        return len(value) > 0
    return True


def first_present(*candidates):
    """First candidate that is not None/empty, else None."""
    for value in candidates:
        if _present(value):
            return value
    return None


def _json_field(row: Dict[str, Any], column: str, source: str) -> Any:
    raw = row.get(column)
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"{column} of {source}", str(e)) from e


def _staff_ids(row, form, column, source) -> list:
    # an empty column means staff were cleared, not unknown
    stored = _json_field(row, column, source)
    if stored is not None:
        return stored
    return form.get(column) or []


def resolve_job_record(row: Dict[str, Any]) -> JobRecord:
    """Build a typed JobRecord from a jobs row."""
    source = f"job {row.get('id')}"
    form = _json_field(row, "form_data", source) or {}
    customer_data = _json_field(row, "customer_data", source) or {}
    if not isinstance(form, dict) or not isinstance(customer_data, dict):
        raise ParseError(source, "form_data and customer_data must be JSON objects")

    customer_name = first_present(row.get("customer_name"), customer_data.get("name"),
                                  form.get("customer_name"))
    customer = {
        "name": customer_name,
        "email": first_present(customer_data.get("email"), form.get("customer_email")),
        "phone": first_present(customer_data.get("phone"), form.get("customer_phone")),
        "address": first_present(customer_data.get("address"), form.get("customer_address")),
    }

    inspector_ids = _staff_ids(row, form, "inspector_ids", source)
    supervisor_ids = _staff_ids(row, form, "supervisor_ids", source)

    revision: Optional[int] = row.get("revision")
    if not _present(revision):
        try:
            revision = parse_job_number(row.get("job_number")).revision
        except FormatError as e:
            raise ParseError(source, str(e)) from e

    try:
        return JobRecord(
            job_id=row["id"],
            job_number=row.get("job_number"),
            revision=revision,
            title=first_present(row.get("title"), f"Job for {customer_name}" if customer_name else None),
            location_id=row.get("location_id"),
            location_name=first_present(row.get("location_name"), form.get("job_location"),
                                        row.get("location_id")),
            customer=CustomerInfo(**customer),
            status=row.get("status"),
            inspector_ids=inspector_ids,
            supervisor_ids=supervisor_ids,
            primary_inspector_id=first_present(row.get("primary_inspector_id"),
                                               inspector_ids[0] if inspector_ids else None),
            form=form,
            source_draft_id=row.get("source_draft_id"),
            created_by=row.get("created_by"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
    except (SchemaError, KeyError) as e:
        raise ParseError(source, str(e)) from e
