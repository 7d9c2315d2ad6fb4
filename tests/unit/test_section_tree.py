"""Unit tests for SectionTree hierarchy operations."""

import pytest

from vitae.contexts.document.exceptions import (
    DuplicateSectionError,
    InvariantViolation,
    SectionNotFoundError,
    ViolationReason,
)
from vitae.contexts.document.hierarchy import (
    SectionTree,
    build_section_hierarchy,
    check_hierarchy_consistency,
    default_document,
    document_problems,
)
from vitae.contexts.document.section_data_structure import Section, SectionType


def make_document():
    return [
        Section(id="header", type=SectionType.HEADER, title="Header", content="<h1>Jane Doe</h1>"),
        Section(id="summary", type=SectionType.SUMMARY, title="Professional Summary", content="<p>Hi</p>"),
        Section(id="experience", type=SectionType.EXPERIENCE, title="Experience"),
        Section(id="role-a", type=SectionType.JOB_ROLE, title="A", parent_id="experience"),
        Section(id="role-b", type=SectionType.JOB_ROLE, title="B", parent_id="experience"),
        Section(id="education", type=SectionType.EDUCATION, title="Education"),
        Section(id="skills", type=SectionType.SKILLS, title="Skills"),
    ]


def ids(tree):
    return [section.id for section in tree]


@pytest.mark.unit
def test_build_section_hierarchy_keeps_orphan_parents():
    """Test that the hierarchy lists children in flat order, orphans included."""
    sections = make_document() + [Section(id="x", type=SectionType.OTHER, title="X", parent_id="ghost")]
    assert build_section_hierarchy(sections) == {"experience": ["role-a", "role-b"], "ghost": ["x"]}


@pytest.mark.unit
def test_check_hierarchy_consistency_reports_problems():
    """Test that a stale hierarchy map is reported."""
    sections = make_document()
    assert check_hierarchy_consistency(sections, build_section_hierarchy(sections)) == []

    problems = check_hierarchy_consistency(sections, {"experience": ["role-b", "role-a"]})
    assert problems == ["children of 'experience' are out of order"]

    problems = check_hierarchy_consistency(sections, {"experience": ["role-a", "role-b", "ghost"]})
    assert problems == ["'experience' lists unknown child 'ghost'"]


@pytest.mark.unit
def test_move_down_swaps_list_and_hierarchy():
    """Test that moving a job role swaps flat and hierarchy positions identically."""
    tree = SectionTree(make_document())

    assert tree.move_down("role-a") is True
    assert ids(tree)[3:5] == ["role-b", "role-a"]
    assert tree.hierarchy["experience"] == ["role-b", "role-a"]


@pytest.mark.unit
def test_move_at_boundary_returns_false():
    """Test that moving past the first or last sibling is a no-op."""
    tree = SectionTree(make_document())
    before = ids(tree)

    assert tree.move_up("role-a") is False
    assert tree.move_down("role-b") is False
    assert tree.move_up("experience") is False
    assert tree.move_down("skills") is False
    assert ids(tree) == before


@pytest.mark.unit
@pytest.mark.parametrize("section_id", ["header", "summary"])
def test_fixed_sections_cannot_move(section_id):
    """Test that header and reserved summary moves are rejected."""
    tree = SectionTree(make_document())

    with pytest.raises(InvariantViolation) as exc_info:
        tree.move_down(section_id)
    assert exc_info.value.reason == ViolationReason.FIXED_SECTION
    assert not tree.can_move(section_id)


@pytest.mark.unit
def test_top_level_move_carries_children():
    """Test that moving a top-level section moves it together with its children."""
    tree = SectionTree(make_document())

    assert tree.move_up("education") is True
    assert ids(tree) == ["header", "summary", "education", "experience", "role-a", "role-b", "skills"]

    assert tree.move_down("experience") is True
    assert ids(tree) == ["header", "summary", "education", "skills", "experience", "role-a", "role-b"]


@pytest.mark.unit
def test_remove_last_job_role_is_rejected():
    """Test that the only job role cannot be removed and nothing changes."""
    tree = SectionTree(make_document())
    tree.remove("role-b")
    before = ids(tree)

    with pytest.raises(InvariantViolation) as exc_info:
        tree.remove("role-a")

    assert exc_info.value.reason == ViolationReason.LAST_JOB_ROLE
    assert exc_info.value.section_id == "role-a"
    assert ids(tree) == before
    assert len(tree) == len(before)


@pytest.mark.unit
@pytest.mark.parametrize(
    "section_id, reason",
    [
        ("header", ViolationReason.FIXED_SECTION),
        ("summary", ViolationReason.FIXED_SECTION),
        ("experience", ViolationReason.ANCHOR_IN_USE),
        ("education", ViolationReason.ANCHOR_IN_USE),
    ],
)
def test_remove_protected_sections(section_id, reason):
    """Test removal rejections with their reason codes."""
    tree = SectionTree(make_document())

    with pytest.raises(InvariantViolation) as exc_info:
        tree.remove(section_id)
    assert exc_info.value.reason == reason
    assert section_id in tree


@pytest.mark.unit
def test_remove_section_with_children_is_rejected():
    """Test that a non-anchor section owning children cannot be removed."""
    tree = SectionTree(make_document())
    tree.add_section(Section(id="volunteering", type=SectionType.OTHER, title="Volunteering"))
    tree.add_child("volunteering", Section(id="food-bank", type=SectionType.OTHER, title="Food Bank"))

    with pytest.raises(InvariantViolation) as exc_info:
        tree.remove("volunteering")
    assert exc_info.value.reason == ViolationReason.ANCHOR_IN_USE

    tree.remove("food-bank")
    assert tree.remove("volunteering").id == "volunteering"


@pytest.mark.unit
def test_unknown_ids_raise():
    """Test that operations on unknown ids raise SectionNotFoundError."""
    tree = SectionTree(make_document())

    with pytest.raises(SectionNotFoundError):
        tree.move_up("nope")
    with pytest.raises(SectionNotFoundError):
        tree.remove("nope")
    with pytest.raises(SectionNotFoundError):
        tree.add_child("nope", Section(id="child", type=SectionType.OTHER, title="Child"))


@pytest.mark.unit
def test_duplicate_ids_are_rejected():
    """Test duplicate id detection on construction and insertion."""
    section = Section(id="dup", type=SectionType.OTHER, title="Dup")
    with pytest.raises(DuplicateSectionError):
        SectionTree([section, section])

    tree = SectionTree(make_document())
    with pytest.raises(DuplicateSectionError):
        tree.add_child("experience", Section(id="role-a", type=SectionType.JOB_ROLE, title="Again"))


@pytest.mark.unit
def test_add_child_after_last_descendant():
    """Test that a new child lands after the parent's existing children."""
    tree = SectionTree(make_document())
    role = tree.add_job_role(title="C")

    assert role.parent_id == "experience"
    assert ids(tree)[5] == role.id
    assert tree.hierarchy["experience"] == ["role-a", "role-b", role.id]


@pytest.mark.unit
def test_add_child_synthesizes_missing_anchor():
    """Test that adding under a missing anchor creates the anchor first."""
    tree = SectionTree(
        [
            Section(id="header", type=SectionType.HEADER, title="Header"),
            Section(id="projects", type=SectionType.PROJECTS, title="Projects"),
        ]
    )
    tree.add_child("experience", Section(id="role-1", type=SectionType.JOB_ROLE, title="Engineer"))

    assert ids(tree) == ["header", "projects", "experience", "role-1"]
    assert tree.get("experience").type == SectionType.EXPERIENCE
    assert tree.hierarchy == {"experience": ["role-1"]}


@pytest.mark.unit
def test_add_section_never_precedes_fixed_sections():
    """Test that index 0 is clamped to after the header and summary."""
    tree = SectionTree(make_document())
    added = tree.add_section(index=0)

    assert ids(tree)[2] == added.id
    assert added.type == SectionType.OTHER
    assert document_problems(tree.sections) == []


@pytest.mark.unit
def test_add_summary():
    """Test adding the reserved summary right after the header."""
    tree = SectionTree([s for s in make_document() if s.type != SectionType.SUMMARY])
    summary = tree.add_summary("<p>New pitch</p>")

    assert ids(tree)[:2] == ["header", "summary"]
    assert summary.content == "<p>New pitch</p>"
    with pytest.raises(DuplicateSectionError):
        tree.add_summary()


@pytest.mark.unit
def test_update_content_and_title():
    """Test editing a section in place."""
    tree = SectionTree(make_document())
    tree.update_title("role-a", "Staff Engineer")
    tree.update_content("role-a", "<h3>Staff Engineer</h3>")

    assert tree.get("role-a").title == "Staff Engineer"
    assert tree.get("role-a").content == "<h3>Staff Engineer</h3>"
    assert ids(tree) == [s.id for s in make_document()]


@pytest.mark.unit
def test_default_document():
    """Test the minimal default document."""
    sections = default_document()

    assert [s.type for s in sections] == [
        SectionType.HEADER,
        SectionType.SUMMARY,
        SectionType.EXPERIENCE,
        SectionType.JOB_ROLE,
    ]
    assert sections[3].parent_id == "experience"
    assert document_problems(sections) == []


@pytest.mark.unit
def test_section_dict_round_trip():
    """Test the camelCase mirror of a section."""
    section = Section(id="role-a", type="job_role", title="A", content="<p>x</p>", parent_id="experience")
    data = section.to_dict()

    assert data["type"] == "JOB_ROLE"
    assert data["parentId"] == "experience"
    assert Section.from_dict(data) == section
    assert "parentId" not in Section(id="x", type=SectionType.OTHER, title="X").to_dict()


@pytest.mark.unit
def test_child_move_carries_descendants():
    """Test that a sibling swap keeps each sibling's own children beneath it."""
    sections = make_document()
    sections.insert(4, Section(id="role-a-project", type=SectionType.OTHER, title="Project", parent_id="role-a"))
    tree = SectionTree(sections)

    assert tree.move_down("role-a") is True
    assert ids(tree)[2:6] == ["experience", "role-b", "role-a", "role-a-project"]
    assert tree.hierarchy["experience"] == ["role-b", "role-a"]
    assert tree.hierarchy["role-a"] == ["role-a-project"]

    assert tree.move_down("role-a") is False
    assert tree.move_up("role-a") is True
    assert ids(tree)[2:6] == ["experience", "role-a", "role-a-project", "role-b"]
    assert check_hierarchy_consistency(tree.sections, tree.hierarchy) == []


@pytest.mark.unit
def test_add_summary_when_reserved_id_is_taken():
    """Test that a summary is still added when another section uses the id 'summary'."""
    sections = [s for s in make_document() if s.type != SectionType.SUMMARY]
    sections.append(Section(id="summary", type=SectionType.OTHER, title="Overview"))
    tree = SectionTree(sections)

    summary = tree.add_summary("<p>New pitch</p>")

    assert summary.id != "summary"
    assert summary.id.startswith("summary-")
    assert ids(tree)[:2] == ["header", summary.id]
    assert len(tree) == len(sections) + 1
