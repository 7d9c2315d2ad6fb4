"""Unit tests for structured JSON resume import."""

import pytest
from omegaconf import OmegaConf

from vitae.contexts.document.section_data_structure import SectionType
from vitae.contexts.intake.json_resume import (
    extract_json_payload,
    is_resume_json,
    is_section_list,
    json_resume_to_sections,
)


@pytest.fixture
def resume_data(fixtures_path):
    return OmegaConf.to_container(OmegaConf.load(fixtures_path / "json_resume.yaml"), resolve=True)


@pytest.mark.unit
def test_extract_json_payload():
    """Test decoding plain and fenced JSON, and rejecting everything else."""
    assert extract_json_payload('{"a": 1}') == {"a": 1}
    assert extract_json_payload('```json\n{"a": 1}\n```') == {"a": 1}
    assert extract_json_payload("{not json") is None
    assert extract_json_payload("# Jane Doe") is None


@pytest.mark.unit
def test_schema_detection():
    """Test telling resume JSON and section lists apart."""
    assert is_resume_json({"experience": []})
    assert not is_resume_json({"foo": 1})
    assert is_section_list([{"type": "HEADER"}])
    assert not is_section_list([])
    assert not is_section_list([{"title": "No type"}])


@pytest.mark.unit
def test_json_resume_to_sections(resume_data):
    """Test the deterministic mapping of every schema field."""
    sections = json_resume_to_sections(resume_data)

    assert [s.type for s in sections] == [
        SectionType.HEADER,
        SectionType.SUMMARY,
        SectionType.EXPERIENCE,
        SectionType.JOB_ROLE,
        SectionType.JOB_ROLE,
        SectionType.EDUCATION,
        SectionType.SKILLS,
        SectionType.CERTIFICATIONS,
    ]
    header, summary, experience, backend, barista, education, skills, certifications = sections

    assert header.content == "<h1>Jane Doe</h1><p>555-123-4567 | jane@example.com</p>"
    assert summary.id == "summary"
    assert summary.content == "<p>Backend engineer.</p>"
    assert experience.id == "experience"
    assert backend.parent_id == "experience"
    assert backend.title == "Backend Engineer"
    assert backend.content == (
        "<h3>Backend Engineer, Acme | 2020 - Present</h3><ul><li>Built APIs</li><li>Cut latency</li></ul>"
    )
    assert barista.title == "Barista"
    assert education.content == "<h3>B.S. in Computer Science</h3><p>State University | 2018</p>"
    assert skills.content == "<p><strong>Languages:</strong> Python, Go</p><ul><li>Docker</li></ul>"
    assert certifications.content == "<p><strong>AWS SAA</strong> | Amazon</p>"


@pytest.mark.unit
def test_minimal_json_keeps_anchors():
    """Test that empty schema fields still produce the anchor sections."""
    sections = json_resume_to_sections({"contactInfo": {"name": "Jane"}})

    assert [s.id for s in sections] == ["header", "experience", "education", "skills"]


@pytest.mark.unit
def test_loose_entry_shapes():
    """Test string entries, start/end dates and dict-shaped skills."""
    sections = json_resume_to_sections(
        {
            "header": "Jane Doe\njane@example.com",
            "summary": ["Builds", "things."],
            "experience": [
                "Consultant",
                {"title": "Engineer", "employer": "Acme", "startDate": "2019", "responsibilities": "- One\n- Two"},
            ],
            "skills": {"cloud": ["AWS", "GCP"]},
        }
    )
    by_id = {s.id: s for s in sections}

    assert by_id["header"].content == "<h1>Jane Doe</h1><p>jane@example.com</p>"
    assert by_id["summary"].content == "<p>Builds things.</p>"
    roles = [s for s in sections if s.type == SectionType.JOB_ROLE]
    assert roles[0].content == "<h3>Consultant</h3>"
    assert roles[1].content == "<h3>Engineer, Acme | 2019 - Present</h3><ul><li>One</li><li>Two</li></ul>"
    assert by_id["skills"].content == "<p><strong>Cloud:</strong> AWS, GCP</p>"


@pytest.mark.unit
def test_entry_ids_are_kept_unless_reserved_or_repeated():
    """Test that job-role ids from the input survive when usable."""
    sections = json_resume_to_sections(
        {
            "experience": [
                {"id": "job-role-acme", "position": "Engineer"},
                {"id": "job-role-acme", "position": "Lead"},
                {"id": "header", "position": "Intern"},
            ]
        }
    )
    roles = [s for s in sections if s.type == SectionType.JOB_ROLE]

    assert roles[0].id == "job-role-acme"
    assert roles[1].id not in ("job-role-acme", "header")
    assert roles[2].id not in ("job-role-acme", "header")


@pytest.mark.unit
def test_additional_sections():
    """Test sections outside the schema, with structured types demoted to OTHER."""
    sections = json_resume_to_sections(
        {
            "experience": [],
            "additionalSections": [
                {"title": "Volunteering", "type": "OTHER", "content": "<p>Food bank</p>"},
                {"title": "Side Projects", "type": "projects", "content": "<p>vitae</p>"},
                {"title": "More Skills", "type": "SKILLS", "content": "<p>Rust</p>"},
                "not a section",
            ],
        }
    )
    extras = sections[4:]

    assert [(s.title, s.type) for s in extras] == [
        ("Volunteering", SectionType.OTHER),
        ("Side Projects", SectionType.PROJECTS),
        ("More Skills", SectionType.OTHER),
    ]
    assert extras[0].content == "<p>Food bank</p>"
    assert extras[0].id.startswith("volunteering-")
