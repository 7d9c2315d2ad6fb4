"""
JSON Resume Export

Builds the structured JSON mirror of a document, in the shape the JSON importer
accepts back:

    {
        "contactInfo": {"name": ..., "email": ..., "phone": ..., "location": ...},
        "summary": "...",
        "experience": [{"position", "company", "duration", "description", "bullets"}],
        "education": [{"degree", "institution", "highlights"}],
        "skills": [{"category", "items"}, "Uncategorized skill", ...],
        "certifications": [{"name", "issuer"}],
        "additionalSections": [{"title", "type", "content"}]
    }

Sections with a dedicated field are aggregated by type (all EDUCATION sections
feed "education", and so on); everything else goes to additionalSections.
"""

from typing import Any, Dict, List

from vitae.contexts.document.content_normalizer import list_items, normalize_job_role_content
from vitae.contexts.document.role_heading import heading_text, parse_role_heading
from vitae.contexts.document.section_data_structure import Section, SectionType
from vitae.contexts.rendering.logger import _log_debug
from vitae.utils.markup import LIST_TAGS, Element, block_stream, nodes_text, parse_fragment, split_lines
from vitae.utils.text_processing import extract_contact_info, split_items


def _item_texts(block: Element) -> List[str]:
    return [parse_fragment(item).text for item in list_items(block)]


def _line_texts(block: Element) -> List[str]:
    return [nodes_text(line) for line in split_lines(block)]


def contact_info(section: Section) -> Dict[str, str]:
    """Name plus extracted contact details of a HEADER section."""
    blocks = block_stream(parse_fragment(section.content))
    headings = [block for block in blocks if block.is_heading]
    if headings:
        name = headings[0].text
        rest = " | ".join(block.text for block in blocks if block is not headings[0])
    else:
        lines = [text for block in blocks for text in _line_texts(block)]
        name = lines[0] if lines else ""
        rest = " | ".join(lines[1:])

    info = {"name": name}
    info.update(extract_contact_info(rest))
    return info


def job_role_entry(section: Section) -> Dict[str, Any]:
    """Structured entry of a JOB_ROLE."""
    blocks = block_stream(parse_fragment(normalize_job_role_content(section.content, section.title)))
    role_heading = parse_role_heading(heading_text(blocks[0]))

    description, bullets = [], []
    for block in blocks[1:]:
        if block.tag in LIST_TAGS:
            bullets.extend(_item_texts(block))
        elif block.text:
            description.append(block.text)

    entry: Dict[str, Any] = {
        "id": section.id,
        "position": role_heading.title or section.title,
        "company": role_heading.company,
        "duration": role_heading.date_range,
        "bullets": bullets,
    }
    if role_heading.location:
        entry["location"] = role_heading.location
    if description:
        entry["description"] = " ".join(description)
    return entry


def education_entries(section: Section) -> List[Dict[str, Any]]:
    """Entries of an EDUCATION section: each heading starts an entry."""
    entries: List[Dict[str, Any]] = []
    current = None
    for block in block_stream(parse_fragment(section.content)):
        if block.is_heading:
            current = {"degree": block.text, "institution": "", "highlights": []}
            entries.append(current)
        elif block.tag in LIST_TAGS:
            if current is None:
                entries.extend({"degree": text} for text in _item_texts(block))
            else:
                current["highlights"].extend(_item_texts(block))
        elif block.text:
            if current is not None and not current["institution"]:
                current["institution"] = block.text
            else:
                entries.extend({"degree": text} for text in _line_texts(block))
                current = None
    return entries


def skill_entries(section: Section) -> List[Any]:
    """Skills as {category, items} objects for labeled lines, plain strings otherwise."""
    skills: List[Any] = []
    for block in block_stream(parse_fragment(section.content)):
        if block.tag in LIST_TAGS:
            skills.extend(_item_texts(block))
            continue
        for line in split_lines(block):
            first = next((node for node in line if not (isinstance(node, str) and not node.strip())), None)
            if isinstance(first, Element) and first.tag in ("strong", "b"):
                rest = nodes_text(line[line.index(first) + 1:]).lstrip(":").strip()
                skills.append({"category": first.text.rstrip(":").strip(), "items": split_items(rest)})
            else:
                skills.append(nodes_text(line))
    return [skill for skill in skills if skill]


def certification_entries(section: Section) -> List[Dict[str, str]]:
    certifications = []
    for block in block_stream(parse_fragment(section.content)):
        texts = _item_texts(block) if block.tag in LIST_TAGS else _line_texts(block)
        for text in texts:
            name, _, details = text.partition(" | ")
            entry = {"name": name.strip()}
            if details.strip():
                entry["issuer"] = details.strip()
            certifications.append(entry)
    return certifications


def sections_to_json_resume(sections: List[Section]) -> Dict[str, Any]:
    """
    Build the structured JSON mirror of a document.

    Args:
        sections: Flat, ordered section list (normalized)

    Returns:
        JSON-serializable dict accepted by json_resume_to_sections

    Example:
        >>> data = sections_to_json_resume(sections)
        >>> [entry["position"] for entry in data["experience"]]
        ['Engineer']
    """
    data: Dict[str, Any] = {
        "contactInfo": {},
        "summary": "",
        "experience": [],
        "education": [],
        "skills": [],
        "certifications": [],
        "additionalSections": [],
    }

    for section in sections:
        if section.type == SectionType.HEADER:
            if not data["contactInfo"]:
                data["contactInfo"] = contact_info(section)
        elif section.type == SectionType.SUMMARY:
            text = parse_fragment(section.content).text
            data["summary"] = " ".join(part for part in (data["summary"], text) if part)
        elif section.type == SectionType.JOB_ROLE:
            data["experience"].append(job_role_entry(section))
        elif section.type == SectionType.EDUCATION:
            data["education"].extend(education_entries(section))
        elif section.type == SectionType.SKILLS:
            data["skills"].extend(skill_entries(section))
        elif section.type == SectionType.CERTIFICATIONS:
            data["certifications"].extend(certification_entries(section))
        elif section.type != SectionType.EXPERIENCE:
            data["additionalSections"].append(
                {"title": section.title, "type": section.type.value, "content": section.content}
            )

    if not data["certifications"]:
        del data["certifications"]
    if not data["additionalSections"]:
        del data["additionalSections"]

    _log_debug(f"Built JSON mirror: {len(data['experience'])} job roles, {len(data['skills'])} skills")
    return data
