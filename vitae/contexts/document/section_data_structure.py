"""
Section Data Structure

Defines the Section model: the single entity of a resume document. A document is a
flat, ordered list of sections; parent/child relationships are expressed through
parent_id and indexed separately by the hierarchy manager.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from vitae.utils.text_processing import slugify


class SectionType(str, Enum):
    """Closed set of section kinds."""

    HEADER = "HEADER"
    SUMMARY = "SUMMARY"
    EXPERIENCE = "EXPERIENCE"
    JOB_ROLE = "JOB_ROLE"
    EDUCATION = "EDUCATION"
    SKILLS = "SKILLS"
    CERTIFICATIONS = "CERTIFICATIONS"
    PROJECTS = "PROJECTS"
    OTHER = "OTHER"

    @classmethod
    def coerce(cls, value: Any) -> "SectionType":
        """
        Convert a loosely formatted type value to a SectionType.

        Accepts enum members, member names in any case, and dash/space separated
        variants ("job-role", "Job Role"). Unknown values map to OTHER.
        """
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[key]
        except KeyError:
            return cls.OTHER


# Reserved ids
HEADER_ID = "header"
SUMMARY_ID = "summary"
EXPERIENCE_ID = "experience"
EDUCATION_ID = "education"
SKILLS_ID = "skills"

RESERVED_IDS = (HEADER_ID, SUMMARY_ID, EXPERIENCE_ID, EDUCATION_ID, SKILLS_ID)

# Anchor ids own child sections and cannot be deleted
ANCHOR_IDS = {
    EXPERIENCE_ID: SectionType.EXPERIENCE,
    EDUCATION_ID: SectionType.EDUCATION,
    SKILLS_ID: SectionType.SKILLS,
}

ANCHOR_TITLES = {
    SectionType.EXPERIENCE: "Professional Experience",
    SectionType.EDUCATION: "Education",
    SectionType.SKILLS: "Skills",
}

DEFAULT_TITLES = {
    SectionType.HEADER: "Header",
    SectionType.SUMMARY: "Professional Summary",
    SectionType.EXPERIENCE: "Professional Experience",
    SectionType.JOB_ROLE: "New Job Role",
    SectionType.EDUCATION: "Education",
    SectionType.SKILLS: "Skills",
    SectionType.CERTIFICATIONS: "Certifications",
    SectionType.PROJECTS: "Projects",
    SectionType.OTHER: "New Section",
}


def new_section_id(prefix: str) -> str:
    """
    Generate a fresh section id with a random suffix.

    Args:
        prefix: Readable prefix (slugified), e.g. "job-role" or a section title

    Returns:
        Id like "job-role-1a2b3c4d"
    """
    return f"{slugify(prefix)}-{uuid4().hex[:8]}"


@dataclass
class Section:
    """
    One typed, editable resume section.

    Attributes:
        id: Stable unique identifier (never reused)
        type: Section kind
        title: Display name (job title text for JOB_ROLE)
        content: HTML fragment for the section body
        parent_id: Id of the owning section, if any (JOB_ROLE -> EXPERIENCE typically)
    """

    id: str
    type: SectionType
    title: str
    content: str = ""
    parent_id: Optional[str] = None

    def __post_init__(self):
        self.type = SectionType.coerce(self.type)

    @property
    def is_header(self) -> bool:
        return self.type == SectionType.HEADER

    @property
    def is_reserved_summary(self) -> bool:
        return self.type == SectionType.SUMMARY and self.id == SUMMARY_ID

    @property
    def is_fixed(self) -> bool:
        """Fixed sections keep their position (HEADER first, reserved SUMMARY second)."""
        return self.is_header or self.is_reserved_summary

    @property
    def is_anchor(self) -> bool:
        return self.id in ANCHOR_IDS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase JSON mirror (parentId omitted when unset)."""
        data = {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "content": self.content,
        }
        if self.parent_id:
            data["parentId"] = self.parent_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Section":
        """
        Build a Section from its JSON mirror.

        Accepts both parentId and parent_id; a missing id gets a fresh one.
        """
        section_type = SectionType.coerce(data.get("type"))
        title = data.get("title") or DEFAULT_TITLES[section_type]
        return cls(
            id=data.get("id") or new_section_id(title),
            type=section_type,
            title=title,
            content=data.get("content") or "",
            parent_id=data.get("parentId") or data.get("parent_id") or None,
        )
