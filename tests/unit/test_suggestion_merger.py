"""Unit tests for merging content suggestions into sections."""

import pytest

from vitae.contexts.document.hierarchy import build_section_hierarchy
from vitae.contexts.document.section_data_structure import Section, SectionType
from vitae.contexts.document.suggestion_merger import (
    MatchHints,
    apply_suggestion,
    merge_job_role_content,
    resolve_suggestion_target,
    suggested_bullets,
)

ROLE_CONTENT = "<h3>Engineer, Acme | 2020 - 2022</h3><p>Platform team.</p><ul><li>Old bullet</li></ul>"


def make_document(with_summary=False):
    sections = [Section(id="header", type=SectionType.HEADER, title="Header", content="<h1>Jane</h1>")]
    if with_summary:
        sections.append(Section(id="summary", type=SectionType.SUMMARY, title="Summary", content="<p>Old</p>"))
    sections += [
        Section(id="experience", type=SectionType.EXPERIENCE, title="Experience"),
        Section(id="role-acme", type=SectionType.JOB_ROLE, title="Engineer", content=ROLE_CONTENT,
                parent_id="experience"),
        Section(id="role-globex", type=SectionType.JOB_ROLE, title="Analyst",
                content="<h3>Analyst, Globex | 2018 - 2020</h3><ul><li>Reports</li></ul>", parent_id="experience"),
    ]
    return sections


@pytest.mark.unit
def test_summary_suggestion_creates_summary_after_header():
    """Test that a summary suggestion without a target inserts the reserved summary."""
    sections = make_document()
    result = apply_suggestion(sections, build_section_hierarchy(sections), "summary", "<ul><li>New pitch</li></ul>")

    assert [s.id for s in result][:2] == ["header", "summary"]
    assert result[1].type == SectionType.SUMMARY
    assert result[1].content == "<ul><li>New pitch</li></ul>"
    assert len(result) == len(sections) + 1


@pytest.mark.unit
def test_summary_suggestion_replaces_existing_summary():
    """Test that an existing summary is found by type and replaced."""
    sections = make_document(with_summary=True)
    result = apply_suggestion(sections, None, "summary", "Fresh pitch")

    assert [s.id for s in result] == [s.id for s in sections]
    assert result[1].content == "<p>Fresh pitch</p>"


@pytest.mark.unit
def test_job_role_merge_keeps_heading_line():
    """Test that only the bullet list is replaced, even when the suggestion has a heading."""
    merged = merge_job_role_content(ROLE_CONTENT, "### Wrong Heading\n- New bullet one\n- New bullet two")

    assert merged == (
        "<h3>Engineer, Acme | 2020 - 2022</h3><p>Platform team.</p>"
        "<ul><li>New bullet one</li><li>New bullet two</li></ul>"
    )


@pytest.mark.unit
def test_job_role_merge_without_bullets_keeps_original():
    """Test that an empty suggestion leaves the role untouched."""
    assert merge_job_role_content(ROLE_CONTENT, "") == ROLE_CONTENT
    assert merge_job_role_content(ROLE_CONTENT, "<h3>Only a heading</h3>") == ROLE_CONTENT


@pytest.mark.unit
def test_suggested_bullets_from_plain_lines():
    """Test that plain lines become bullets when the suggestion has no list."""
    assert suggested_bullets("Cut costs by 20%\nHired a team") == ["Cut costs by 20%", "Hired a team"]
    assert suggested_bullets("Intro line\n- Only bullet") == ["Only bullet"]


@pytest.mark.unit
def test_resolve_by_hints():
    """Test job-role resolution by position and company hints."""
    sections = make_document()

    target = resolve_suggestion_target(sections, "experience", MatchHints(company="globex"))
    assert (target.section_id, target.strategy) == ("role-globex", "hint")

    target = resolve_suggestion_target(sections, "experience", MatchHints(position="analyst", company="globex"))
    assert (target.section_id, target.strategy) == ("role-globex", "hint")

    target = resolve_suggestion_target(sections, "experience", MatchHints(position="analyst", company="acme"))
    assert (target.section_id, target.strategy) == ("role-acme", "partial_hint")


@pytest.mark.unit
def test_resolve_falls_back_to_first_role():
    """Test that a miss resolves to the first job role instead of failing."""
    sections = make_document()

    target = resolve_suggestion_target(sections, "experience", MatchHints(company="Initech"))
    assert (target.section_id, target.strategy) == ("role-acme", "first_role")

    target = resolve_suggestion_target(sections, SectionType.JOB_ROLE)
    assert target.strategy == "first_role"


@pytest.mark.unit
def test_direct_role_id_wins():
    """Test that an existing direct id wins over every other strategy."""
    sections = make_document()
    hints = MatchHints(company="acme", direct_role_id="role-globex")

    target = resolve_suggestion_target(sections, "experience", hints)
    assert (target.section_id, target.strategy) == ("role-globex", "direct")

    hints = MatchHints(company="acme", direct_role_id="missing")
    assert resolve_suggestion_target(sections, "experience", hints).section_id == "role-acme"


@pytest.mark.unit
def test_apply_to_job_role_preserves_order_and_hierarchy():
    """Test that merging never changes order or parents."""
    sections = make_document()
    result = apply_suggestion(
        sections, build_section_hierarchy(sections), "experience", "- Shipped v2", MatchHints(company="globex")
    )

    assert [(s.id, s.parent_id) for s in result] == [(s.id, s.parent_id) for s in sections]
    assert result[3].content == "<h3>Analyst, Globex | 2018 - 2020</h3><ul><li>Shipped v2</li></ul>"
    assert result[2].content == ROLE_CONTENT


@pytest.mark.unit
def test_missing_target_leaves_document_unchanged():
    """Test that a suggestion for an absent section type changes nothing."""
    sections = make_document()
    assert apply_suggestion(sections, None, "certifications", "<p>AWS</p>") == sections


@pytest.mark.unit
def test_summary_suggestion_when_reserved_id_is_taken():
    """Test that a new summary is created even if another section holds the id 'summary'."""
    sections = make_document() + [Section(id="summary", type=SectionType.OTHER, title="Overview")]
    result = apply_suggestion(sections, None, "summary", "Fresh pitch")

    assert len(result) == len(sections) + 1
    assert result[1].type == SectionType.SUMMARY
    assert result[1].id != "summary"
    assert result[1].content == "<p>Fresh pitch</p>"
    assert result[-1] == sections[-1]
