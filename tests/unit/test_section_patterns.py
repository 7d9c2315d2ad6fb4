"""Unit tests for heading classification rules and parsing heuristics."""

import pytest

from vitae.contexts.document.section_data_structure import SectionType
from vitae.contexts.intake.heuristics import load_heuristics
from vitae.contexts.intake.section_patterns import (
    SectionRule,
    build_section_rules,
    classify_heading,
    is_bullet_like,
    matches_title_keyword,
)


@pytest.fixture
def rules():
    return build_section_rules(load_heuristics())


@pytest.mark.unit
@pytest.mark.parametrize(
    "heading, expected",
    [
        ("Professional Summary", SectionType.SUMMARY),
        ("Career Objective", SectionType.SUMMARY),
        ("Project Experience", SectionType.PROJECTS),
        ("Work History", SectionType.EXPERIENCE),
        ("Professional Experience:", SectionType.EXPERIENCE),
        ("Education", SectionType.EDUCATION),
        ("Technical Skills", SectionType.SKILLS),
        ("Licenses & Certifications", SectionType.CERTIFICATIONS),
        ("Contact", SectionType.HEADER),
        ("Relevant Coursework", SectionType.OTHER),
        ("Volunteering", SectionType.OTHER),
    ],
)
def test_classify_heading(rules, heading, expected):
    """Test the ranked default rules, first match wins."""
    assert classify_heading(heading, rules) == expected


@pytest.mark.unit
def test_rules_are_pluggable():
    """Test that a hand-built rule list is evaluated top to bottom."""
    rules = [
        SectionRule(predicate=lambda text: "volunteer" in text.lower(), section_type=SectionType.PROJECTS),
        SectionRule(predicate=lambda text: True, section_type=SectionType.OTHER),
    ]
    assert classify_heading("Volunteer Work", rules) == SectionType.PROJECTS
    assert classify_heading("Anything", []) == SectionType.OTHER


@pytest.mark.unit
def test_load_custom_heuristics(tmp_path):
    """Test loading keyword tables from a custom YAML file."""
    config = tmp_path / "heuristics.yaml"
    config.write_text(
        "section_rules:\n"
        "  - type: skills\n"
        "    keywords: [stack]\n"
        "title_keywords: [Barista]\n"
        "action_verbs: [poured]\n"
    )
    heuristics = load_heuristics(config)

    assert heuristics.title_keywords == ("barista",)
    assert heuristics.contact_hints == ()
    assert classify_heading("Tech Stack", build_section_rules(heuristics)) == SectionType.SKILLS
    assert classify_heading("Experience", build_section_rules(heuristics)) == SectionType.OTHER


@pytest.mark.unit
def test_load_heuristics_rejects_unknown_type(tmp_path):
    """Test that a rule naming an unknown section type is an error."""
    config = tmp_path / "heuristics.yaml"
    config.write_text("section_rules:\n  - type: HOBBIES\n    keywords: [hobby]\n")
    with pytest.raises(ValueError, match="HOBBIES"):
        load_heuristics(config)


@pytest.mark.unit
def test_with_title_keywords():
    """Test extending the job-title keyword list without duplicates."""
    heuristics = load_heuristics()
    extended = heuristics.with_title_keywords(["Barista", "engineer", " "])

    assert "barista" in extended.title_keywords
    assert extended.title_keywords.count("engineer") == 1
    assert "barista" not in heuristics.title_keywords
    assert matches_title_keyword("Barista", extended)
    assert not matches_title_keyword("Barista", heuristics)


@pytest.mark.unit
def test_is_bullet_like():
    """Test that accomplishment lines are told apart from role headings."""
    heuristics = load_heuristics()
    assert is_bullet_like("Led a team of five", heuristics)
    assert is_bullet_like("• Shipped the app", heuristics)
    assert not is_bullet_like("Senior Engineer", heuristics)
