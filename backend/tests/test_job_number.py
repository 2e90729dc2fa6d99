import pytest

from services.errors import FormatError
from services.job_number import (
    JobNumber, format_job_number, parse_job_number, placeholder_job_number, is_placeholder,
)


def test_format_has_no_padding():
    assert format_job_number(16, 42, 1) == "16-42-1"
    assert format_job_number(0, 1, 1) == "0-1-1"


def test_parse_recovers_components():
    for f, s, r in [(0, 1, 1), (16, 42, 1), (16, 2, 2), (999, 123456, 17)]:
        assert parse_job_number(format_job_number(f, s, r)) == JobNumber(f, s, r)


def test_str_of_job_number():
    assert str(JobNumber(16, 2, 1)) == "16-2-1"


def test_next_revision_keeps_facility_and_sequence():
    assert JobNumber(16, 2, 1).next_revision() == JobNumber(16, 2, 2)


@pytest.mark.parametrize("value", [
    "16-42", "16-42-1-1", "", "16--1", "-1-1-1", "16-a-1", "16-42-x",
    " 16-42-1", "16-42-1 ", "+16-42-1", "16-0-1", "16-42-0", "1.5-2-1",
    "٣-1-1",
])
def test_parse_rejects_malformed(value):
    with pytest.raises(FormatError):
        parse_job_number(value)


def test_parse_rejects_non_string():
    with pytest.raises(FormatError):
        parse_job_number(16)


@pytest.mark.parametrize("args", [(-1, 1, 1), (16, 0, 1), (16, 1, 0), (True, 1, 1), (16, "2", 1)])
def test_format_rejects_out_of_range(args):
    with pytest.raises(FormatError):
        format_job_number(*args)


def test_placeholder():
    value = placeholder_job_number(16)
    assert value == "16-TEMP-1"
    assert is_placeholder(value)
    assert not is_placeholder("16-1-1")
    assert not is_placeholder(None)
    with pytest.raises(FormatError):
        parse_job_number(value)
