"""Unit tests for job-role heading parsing and formatting."""

import pytest

from vitae.contexts.document.role_heading import (
    RoleHeading,
    fold_company_line,
    format_role_heading,
    has_pipe_date,
    heading_text,
    is_date_text,
    parse_role_heading,
)
from vitae.utils.markup import parse_fragment


@pytest.mark.unit
def test_parse_title_comma_company():
    """Test the "Title, Company | Date" shape."""
    heading = parse_role_heading("Senior Engineer, Acme Corp | 2020 - Present")
    assert heading == RoleHeading(title="Senior Engineer", company="Acme Corp", date_range="2020 - Present")


@pytest.mark.unit
def test_parse_company_first_uses_title_keywords():
    """Test that the title segment is found by keyword when the company comes first."""
    heading = parse_role_heading("Acme Corp | Engineer | 2020-2023")
    assert heading.title == "Engineer"
    assert heading.company == "Acme Corp"
    assert heading.date_range == "2020-2023"


@pytest.mark.unit
def test_parse_extra_segment_becomes_location():
    """Test that a segment between company and date is kept as the location."""
    heading = parse_role_heading("Engineer, Acme | Remote | Jan 2020 - Dec 2022")
    assert heading == RoleHeading(
        title="Engineer", company="Acme", date_range="Jan 2020 - Dec 2022", location="Remote"
    )


@pytest.mark.unit
def test_parse_date_only():
    """Test a heading that is only a date range."""
    assert parse_role_heading("2020 - 2023") == RoleHeading(date_range="2020 - 2023")


@pytest.mark.unit
def test_format_skips_empty_parts():
    """Test that formatting never leaves a stray separator."""
    assert format_role_heading(RoleHeading(title="Engineer", date_range="2020")) == "Engineer | 2020"
    assert format_role_heading(RoleHeading(company="Acme")) == "Acme"
    assert format_role_heading(RoleHeading(title="Engineer")) == "Engineer"
    assert format_role_heading(RoleHeading()) == ""


@pytest.mark.unit
def test_is_date_text():
    """Test recognizing segments that are nothing but a date range."""
    assert is_date_text("Jan 2020 - Present")
    assert is_date_text("Summer 2019")
    assert is_date_text("2018–2020")
    assert not is_date_text("Acme 2020")
    assert not is_date_text("Remote")
    assert has_pipe_date("Acme | 2020 - 2022")
    assert not has_pipe_date("2020 - 2022")


@pytest.mark.unit
def test_heading_text_reads_float_right_date():
    """Test that the exported date span reads as a '|' date segment."""
    element = parse_fragment('<h3>Engineer <span style="float:right">2020 - 2023</span></h3>').elements[0]
    assert heading_text(element) == "Engineer | 2020 - 2023"


@pytest.mark.unit
def test_fold_company_line_after_dated_heading():
    """Test folding a short company line under a heading that has a date."""
    heading = RoleHeading(title="Engineer", date_range="2020")
    folded = fold_company_line(heading, "Acme Corp")
    assert folded == RoleHeading(title="Engineer", company="Acme Corp", date_range="2020")


@pytest.mark.unit
def test_fold_company_date_line_after_bare_heading():
    """Test folding a "Company | Date" line under a heading without a date."""
    folded = fold_company_line(RoleHeading(title="Engineer"), "Acme Corp | 2020 - 2022")
    assert folded == RoleHeading(title="Engineer", company="Acme Corp", date_range="2020 - 2022")


@pytest.mark.unit
def test_fold_rejects_prose():
    """Test that sentences and accomplishment lines are not folded."""
    heading = RoleHeading(title="Engineer", date_range="2020")
    assert fold_company_line(heading, "Led the platform team.") is None
    assert fold_company_line(heading, "Built pipelines") is None


@pytest.mark.unit
@pytest.mark.parametrize("date_text", ["18 months", "Spring Term", "Date Range", "2020 - Present"])
def test_parse_title_comma_company_takes_any_date_text(date_text):
    """Test that the segment after '|' in "Title, Company | X" is always the date range."""
    heading = parse_role_heading(f"Engineer, Acme | {date_text}")
    assert heading == RoleHeading(title="Engineer", company="Acme", date_range=date_text)
