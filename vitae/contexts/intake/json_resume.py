"""
JSON Resume Import

Maps structured resume JSON deterministically onto sections:
- one HEADER (contactInfo / header)
- one SUMMARY when the summary string is non-empty
- one EXPERIENCE anchor plus one JOB_ROLE per experience entry
- one EDUCATION section aggregating all entries
- one SKILLS section
- one CERTIFICATIONS section when certifications are present
- one section per additionalSections entry ({title, type, content})

A JSON list of section objects ({"id", "type", "title", "content", "parentId"})
is accepted as well and loaded as-is.
"""

import json
import re
from typing import Any, Dict, List, Optional

from vitae.contexts.document.fragments import render_fragment
from vitae.contexts.document.role_heading import RoleHeading, format_role_heading
from vitae.contexts.document.section_data_structure import (
    ANCHOR_TITLES,
    DEFAULT_TITLES,
    EDUCATION_ID,
    EXPERIENCE_ID,
    HEADER_ID,
    SKILLS_ID,
    SUMMARY_ID,
    Section,
    SectionType,
    new_section_id,
)
from vitae.contexts.intake.logger import _log_debug, _log_warning
from vitae.utils.text_processing import normalize_whitespace, split_items

RESUME_KEYS = ("contactInfo", "header", "summary", "experience", "education", "skills", "certifications")

CONTACT_FIELDS = ("location", "phone", "email", "linkedin", "github", "website", "url")

# Types owned by dedicated schema fields
_STRUCTURED_TYPES = (
    SectionType.HEADER,
    SectionType.SUMMARY,
    SectionType.EXPERIENCE,
    SectionType.JOB_ROLE,
    SectionType.EDUCATION,
    SectionType.SKILLS,
)

_JSON_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*\n(.*?)\n\s*```\s*$", re.DOTALL | re.IGNORECASE)


def extract_json_payload(text: str) -> Optional[Any]:
    """
    Decode text as JSON (optionally inside a ```json fence).

    Args:
        text: Raw input text

    Returns:
        Decoded value, or None when the text is not JSON
    """
    fence = _JSON_FENCE_RE.match(text)
    if fence:
        text = fence.group(1)
    text = text.strip()
    if not text.startswith(("{", "[")):
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        _log_debug(f"Input is not valid JSON: {e}")
        return None


def is_resume_json(data: Any) -> bool:
    """Check whether decoded JSON looks like a structured resume."""
    return isinstance(data, dict) and any(key in data for key in RESUME_KEYS)


def is_section_list(data: Any) -> bool:
    """Check whether decoded JSON is a list of section objects."""
    return (
        isinstance(data, list)
        and bool(data)
        and all(isinstance(item, dict) and "type" in item for item in data)
    )


def _first(entry: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = entry.get(key)
        if value not in (None, "", []):
            return normalize_whitespace(str(value))
    return ""


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        lines = [line.strip().lstrip("•-* ").strip() for line in value.splitlines()]
        return [line for line in lines if line]
    if isinstance(value, (list, tuple)):
        return [normalize_whitespace(str(item)) for item in value if str(item).strip()]
    return [normalize_whitespace(str(value))]


def _header_section(data: Dict[str, Any]) -> Section:
    contact = data.get("contactInfo") or data.get("header") or {}
    if isinstance(contact, str):
        lines = [line.strip() for line in contact.splitlines() if line.strip()]
        name = lines[0] if lines else ""
        contact_line = " | ".join(lines[1:])
    else:
        name = _first(contact, "name", "fullName") or _first(data, "name")
        contact_line = " | ".join(
            _first(contact, field_name) for field_name in CONTACT_FIELDS if _first(contact, field_name)
        )

    return Section(
        id=HEADER_ID,
        type=SectionType.HEADER,
        title=DEFAULT_TITLES[SectionType.HEADER],
        content=render_fragment("header", name=name or "Your Name", contact_line=contact_line),
    )


def _summary_text(data: Dict[str, Any]) -> str:
    summary = data.get("summary")
    if isinstance(summary, (list, tuple)):
        summary = " ".join(str(part) for part in summary)
    return normalize_whitespace(str(summary or ""))


def _duration(entry: Dict[str, Any]) -> str:
    duration = _first(entry, "duration", "dateRange", "dates", "date", "period")
    if duration:
        return duration
    start = _first(entry, "startDate", "start")
    end = _first(entry, "endDate", "end")
    if start:
        return f"{start} - {end or 'Present'}"
    return end


def _job_role_sections(entries: List[Any]) -> List[Section]:
    roles = []
    used_ids = set()
    for entry in entries:
        if isinstance(entry, str):
            entry = {"position": entry}
        if not isinstance(entry, dict):
            _log_warning(f"Skipping experience entry of type {type(entry).__name__}")
            continue

        position = _first(entry, "position", "title", "role", "jobTitle")
        company = _first(entry, "company", "employer", "organization", "name")
        heading = format_role_heading(RoleHeading(title=position, company=company, date_range=_duration(entry)))
        bullets = _string_list(
            entry.get("bullets") or entry.get("responsibilities")
            or entry.get("achievements") or entry.get("highlights")
        )
        description = [_first(entry, "description", "summary")] if _first(entry, "description", "summary") else []

        role_id = entry.get("id") if isinstance(entry.get("id"), str) else None
        if not role_id or role_id in used_ids or role_id in (HEADER_ID, SUMMARY_ID, EXPERIENCE_ID):
            role_id = new_section_id("job-role")
        used_ids.add(role_id)

        roles.append(
            Section(
                id=role_id,
                type=SectionType.JOB_ROLE,
                title=position or heading or DEFAULT_TITLES[SectionType.JOB_ROLE],
                content=render_fragment(
                    "job_role", heading=heading or position, description=description, bullets=bullets
                ),
                parent_id=EXPERIENCE_ID,
            )
        )
    return roles


def _education_entries(entries: List[Any]) -> List[Dict[str, Any]]:
    result = []
    for entry in entries:
        if isinstance(entry, str):
            result.append({"degree": normalize_whitespace(entry), "detail": "", "bullets": []})
            continue
        if not isinstance(entry, dict):
            continue
        degree = _first(entry, "degree", "studyType", "title")
        area = _first(entry, "area", "field", "major")
        if area and area.lower() not in degree.lower():
            degree = f"{degree} in {area}" if degree else area
        institution = _first(entry, "institution", "school", "university")
        year = _first(entry, "year", "graduationDate", "date", "endDate", "duration")
        extras = [f"GPA: {entry['gpa']}"] if entry.get("gpa") else []
        result.append(
            {
                "degree": degree or institution,
                "detail": " | ".join(part for part in (institution if degree else "", year, *extras) if part),
                "bullets": _string_list(entry.get("highlights") or entry.get("courses") or entry.get("honors")),
            }
        )
    return result


def _skill_groups(skills: Any):
    """Split skills input into ([{category, items}], [uncategorized])."""
    categories, uncategorized = [], []
    if isinstance(skills, dict):
        skills = [{"category": key, "items": value} for key, value in skills.items()]
    if isinstance(skills, str):
        return categories, split_items(skills)

    for item in skills or []:
        if isinstance(item, dict):
            category = _first(item, "category", "name", "title")
            raw_items = item.get("items") or item.get("keywords") or item.get("skills") or []
            items = split_items(raw_items) if isinstance(raw_items, str) else _string_list(raw_items)
            if category and items:
                categories.append({"category": category[:1].upper() + category[1:], "items": items})
            else:
                uncategorized.extend(items or ([category] if category else []))
        elif str(item).strip():
            uncategorized.append(normalize_whitespace(str(item)))
    return categories, uncategorized


def _certification_entries(certifications: Any) -> List[Dict[str, Any]]:
    result = []
    for cert in certifications or []:
        if isinstance(cert, dict):
            name = _first(cert, "name", "title")
            details = [_first(cert, key) for key in ("issuer", "authority", "organization", "year", "date")]
            if name:
                result.append({"name": name, "details": [d for d in details if d]})
        elif str(cert).strip():
            result.append({"name": normalize_whitespace(str(cert)), "details": []})
    return result


def _additional_sections(extras: Any) -> List[Section]:
    """Sections the structured schema has no field for ({title, type, content})."""
    sections = []
    for extra in extras or []:
        if not isinstance(extra, dict):
            continue
        title = _first(extra, "title", "name")
        content = str(extra.get("content") or "")
        if not (title or content):
            continue
        section_type = SectionType.coerce(extra.get("type"))
        if section_type in _STRUCTURED_TYPES:
            section_type = SectionType.OTHER
        sections.append(
            Section(
                id=new_section_id(title or "section"),
                type=section_type,
                title=title or DEFAULT_TITLES[section_type],
                content=content,
            )
        )
    return sections


def json_resume_to_sections(data: Dict[str, Any]) -> List[Section]:
    """
    Convert structured resume JSON into sections.

    Args:
        data: Decoded resume JSON (see module docstring for accepted keys)

    Returns:
        Flat section list (HEADER, optional SUMMARY, EXPERIENCE + roles, EDUCATION,
        SKILLS, optional CERTIFICATIONS)
    """
    sections = [_header_section(data)]

    summary = _summary_text(data)
    if summary:
        sections.append(
            Section(
                id=SUMMARY_ID,
                type=SectionType.SUMMARY,
                title=DEFAULT_TITLES[SectionType.SUMMARY],
                content=render_fragment("summary", paragraphs=[summary]),
            )
        )

    experience = data.get("experience") or []
    sections.append(
        Section(id=EXPERIENCE_ID, type=SectionType.EXPERIENCE, title=ANCHOR_TITLES[SectionType.EXPERIENCE])
    )
    sections.extend(_job_role_sections(experience if isinstance(experience, list) else [experience]))

    education = data.get("education") or []
    sections.append(
        Section(
            id=EDUCATION_ID,
            type=SectionType.EDUCATION,
            title=ANCHOR_TITLES[SectionType.EDUCATION],
            content=render_fragment(
                "education",
                entries=_education_entries(education if isinstance(education, list) else [education]),
            ),
        )
    )

    categories, uncategorized = _skill_groups(data.get("skills"))
    sections.append(
        Section(
            id=SKILLS_ID,
            type=SectionType.SKILLS,
            title=ANCHOR_TITLES[SectionType.SKILLS],
            content=render_fragment("skills", categories=categories, uncategorized=uncategorized),
        )
    )

    certifications = _certification_entries(data.get("certifications"))
    if certifications:
        sections.append(
            Section(
                id="certifications",
                type=SectionType.CERTIFICATIONS,
                title=DEFAULT_TITLES[SectionType.CERTIFICATIONS],
                content=render_fragment("certifications", certifications=certifications),
            )
        )

    sections.extend(_additional_sections(data.get("additionalSections")))

    _log_debug(f"Mapped JSON resume to {len(sections)} sections")
    return sections


def section_list_to_sections(data: List[Dict[str, Any]]) -> List[Section]:
    """Load a JSON list of section objects."""
    return [Section.from_dict(item) for item in data]
