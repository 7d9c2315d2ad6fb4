"""
Content Normalizer

Brings a section list into canonical form:

Document level:
- Exactly one HEADER at index 0 (synthesized when missing, extras become OTHER)
- The reserved SUMMARY at index 1
- Default Summary/Experience/Job Role only when nothing but the header exists
- Unique ids, parentless JOB_ROLEs attached to the nearest preceding EXPERIENCE

Content level:
- JOB_ROLE: <h3>heading line</h3>, description paragraphs, one <ul> of bullets
- Other sections: wrappers flattened, empty blocks dropped, bullet lines grouped
  into lists, a leading heading repeating the section title removed

Normalizing already-normalized sections returns equal sections.
"""

import html
import re
from dataclasses import replace
from typing import List, Optional

from vitae.contexts.document.fragments import render_fragment
from vitae.contexts.document.hierarchy import default_document
from vitae.contexts.document.logger import _log_debug, _log_warning
from vitae.contexts.document.role_heading import (
    fold_company_line,
    has_pipe_date,
    heading_text,
    parse_role_heading,
    format_role_heading,
)
from vitae.contexts.document.section_data_structure import (
    ANCHOR_TITLES,
    DEFAULT_TITLES,
    EXPERIENCE_ID,
    HEADER_ID,
    SUMMARY_ID,
    Section,
    SectionType,
    new_section_id,
)
from vitae.utils.markup import (
    LIST_TAGS,
    Element,
    Node,
    block_stream,
    inner_html,
    is_bold_only,
    nodes_html,
    nodes_text,
    parse_fragment,
    split_lines,
    to_html,
)
from vitae.utils.text_processing import normalize_whitespace

BULLET_MARKER_RE = re.compile(r"^\s*(?:[•▪◦‣●·]|[-*](?=\s))\s*")


def is_bullet_text(text: str) -> bool:
    """Check whether a plain line starts with a bullet marker (•, -, *)."""
    return bool(BULLET_MARKER_RE.match(text or "")) and bool(BULLET_MARKER_RE.sub("", text).strip())


def strip_bullet_marker(nodes: List[Node]) -> List[Node]:
    """Remove a leading bullet marker from the first visible text of a node run."""
    nodes = list(nodes)
    for i, node in enumerate(nodes):
        if isinstance(node, str):
            if not node.strip():
                continue
            nodes[i] = BULLET_MARKER_RE.sub("", node, count=1)
            return nodes
        node.children = strip_bullet_marker(node.children)
        return nodes
    return nodes


def list_items(list_element: Element) -> List[str]:
    """
    Collect the bullet HTML of a list, flattening nested lists.

    Empty items are dropped and leading bullet markers are stripped.
    """
    items = []
    for item in list_element.elements:
        if item.tag != "li":
            continue
        nested = [child for child in item.elements if child.tag in LIST_TAGS]
        own = [child for child in item.children if not (isinstance(child, Element) and child in nested)]
        content = nodes_html(strip_bullet_marker(own))
        if nodes_text(own):
            items.append(content)
        for sub_list in nested:
            items.extend(list_items(sub_list))
    return items


def _bullet_list_html(items: List[str]) -> str:
    return "<ul>" + "".join(f"<li>{item}</li>" for item in items) + "</ul>"


def normalize_job_role_content(content: str, title: str = "") -> str:
    """
    Canonicalize a JOB_ROLE fragment.

    Output shape: exactly one <h3> heading line, then description paragraphs, then
    at most one <ul> holding every bullet. A heading followed by a separate
    "Company | Date" line is folded into one line; otherwise the heading is kept
    verbatim. Extra headings become bold paragraphs.

    Args:
        content: HTML fragment
        title: Section title, used as the heading when the fragment has none

    Returns:
        Canonical HTML fragment
    """
    heading: Optional[Element] = None
    paragraphs: List[str] = []
    paragraph_texts: List[str] = []
    bullets: List[str] = []

    def add_paragraph(markup: str, text: str) -> None:
        paragraphs.append(markup)
        paragraph_texts.append(text)

    for block in block_stream(parse_fragment(content)):
        if block.tag == "hr":
            continue
        if block.is_heading or (heading is None and not paragraphs and not bullets and is_bold_only(block)):
            if heading is None:
                heading = block
            elif block.text:
                add_paragraph(f"<strong>{inner_html(block)}</strong>", block.text)
            continue
        if block.tag in LIST_TAGS:
            bullets.extend(list_items(block))
            continue
        if block.tag != "p":
            if block.text:
                add_paragraph(inner_html(block), block.text)
            continue

        lines = split_lines(block)
        if not any(is_bullet_text(nodes_text(line)) for line in lines):
            if block.text:
                add_paragraph(inner_html(block), block.text)
            continue
        for line in lines:
            if is_bullet_text(nodes_text(line)):
                bullets.append(nodes_html(strip_bullet_marker(line)))
            else:
                add_paragraph(nodes_html(line), nodes_text(line))

    if heading is not None:
        heading_html = inner_html(heading)
        role_heading = parse_role_heading(heading_text(heading))
    elif paragraph_texts and has_pipe_date(paragraph_texts[0]):
        heading_html = paragraphs.pop(0)
        role_heading = parse_role_heading(paragraph_texts.pop(0))
    else:
        heading_html = html.escape(title or DEFAULT_TITLES[SectionType.JOB_ROLE], quote=False)
        role_heading = None

    if role_heading is not None and paragraphs:
        folded = fold_company_line(role_heading, paragraph_texts[0])
        if folded is not None:
            heading_html = html.escape(format_role_heading(folded), quote=False)
            paragraphs.pop(0)
            paragraph_texts.pop(0)

    parts = [f"<h3>{heading_html}</h3>"]
    parts.extend(f"<p>{paragraph}</p>" for paragraph in paragraphs)
    if bullets:
        parts.append(_bullet_list_html(bullets))
    return "".join(parts)


def _same_title(text: str, title: str) -> bool:
    return normalize_whitespace(text).rstrip(":").lower() == normalize_whitespace(title).lower()


def normalize_block_content(content: str, title: Optional[str] = None) -> str:
    """
    Canonicalize a non-JOB_ROLE fragment.

    Args:
        content: HTML fragment
        title: Section title; a leading heading with the same text is dropped

    Returns:
        Canonical HTML fragment
    """
    out: List[str] = []
    pending: List[str] = []
    leading = True

    def flush() -> None:
        if pending:
            out.append(_bullet_list_html(pending))
            pending.clear()

    for block in block_stream(parse_fragment(content)):
        if block.tag != "hr" and not block.text and block.find("img") is None:
            continue
        if leading and title and block.is_heading and _same_title(block.text, title):
            leading = False
            continue
        leading = False

        if block.tag == "p":
            lines = split_lines(block)
            if any(is_bullet_text(nodes_text(line)) for line in lines):
                for line in lines:
                    if is_bullet_text(nodes_text(line)):
                        pending.append(nodes_html(strip_bullet_marker(line)))
                    else:
                        flush()
                        out.append(f"<p>{nodes_html(line)}</p>")
                continue

        if block.tag == "ul":
            items = list_items(block)
            if items:
                flush()
                out.append(_bullet_list_html(items))
            continue

        flush()
        out.append(to_html(block))

    flush()
    return "".join(out)


def normalize_content(section: Section) -> str:
    """Canonicalize a section's content according to its type."""
    if section.type == SectionType.JOB_ROLE:
        return normalize_job_role_content(section.content, section.title)
    if section.type == SectionType.HEADER:
        return normalize_block_content(section.content)
    return normalize_block_content(section.content, section.title)


def _dedupe_ids(sections: List[Section]) -> List[Section]:
    seen = set()
    result = []
    for section in sections:
        if section.id in seen:
            fresh = new_section_id(section.title or section.type.value)
            _log_warning(f"Duplicate section id '{section.id}' reassigned to '{fresh}'")
            section = replace(section, id=fresh)
        seen.add(section.id)
        result.append(section)
    return result


def _place_header(sections: List[Section]) -> List[Section]:
    headers = [s for s in sections if s.type == SectionType.HEADER]
    if not headers:
        _log_debug("No header section found, synthesizing one")
        header = Section(
            id=HEADER_ID if all(s.id != HEADER_ID for s in sections) else new_section_id("header"),
            type=SectionType.HEADER,
            title=DEFAULT_TITLES[SectionType.HEADER],
            content=render_fragment("header", name="Your Name", contact_line=""),
        )
    else:
        header = replace(headers[0], parent_id=None)

    rest = []
    for section in sections:
        if section.id == header.id:
            continue
        if section.type == SectionType.HEADER:
            _log_warning(f"Extra header '{section.id}' converted to OTHER")
            section = replace(section, type=SectionType.OTHER)
        rest.append(section)
    return [header] + rest


def _place_summary(sections: List[Section]) -> List[Section]:
    header, rest = sections[0], sections[1:]
    reserved = next((s for s in rest if s.id == SUMMARY_ID), None)

    if reserved is None:
        candidate = next((s for s in rest if s.type == SectionType.SUMMARY), None)
        if candidate is None:
            return sections
        _log_debug(f"Summary '{candidate.id}' takes the reserved id '{SUMMARY_ID}'")
        old_id = candidate.id
        rest = [
            replace(s, id=SUMMARY_ID) if s.id == old_id
            else replace(s, parent_id=SUMMARY_ID) if s.parent_id == old_id
            else s
            for s in rest
        ]
        reserved = next(s for s in rest if s.id == SUMMARY_ID)

    if reserved.type != SectionType.SUMMARY:
        return sections

    others = [s for s in rest if s.id != SUMMARY_ID]
    return [header, replace(reserved, parent_id=None)] + others


def _attach_job_roles(sections: List[Section]) -> List[Section]:
    result: List[Section] = []
    current_experience: Optional[str] = None
    first_experience = next((s.id for s in sections if s.type == SectionType.EXPERIENCE), None)

    for section in sections:
        if section.type == SectionType.EXPERIENCE:
            current_experience = section.id
        if section.type == SectionType.JOB_ROLE and not section.parent_id:
            parent_id = current_experience or first_experience
            if parent_id is None:
                anchor_id = EXPERIENCE_ID
                if any(s.id == EXPERIENCE_ID for s in sections):
                    anchor_id = new_section_id("experience")
                anchor = Section(
                    id=anchor_id,
                    type=SectionType.EXPERIENCE,
                    title=ANCHOR_TITLES[SectionType.EXPERIENCE],
                )
                result.append(anchor)
                parent_id = current_experience = first_experience = anchor_id
                _log_debug("Synthesized experience anchor for parentless job roles")
            _log_debug(f"Attached job role '{section.id}' to '{parent_id}'")
            section = replace(section, parent_id=parent_id)
        result.append(section)

    return result


def normalize_sections(sections: List[Section]) -> List[Section]:
    """
    Normalize a section list into canonical form.

    Returns new Section objects; the input list is left untouched.

    Args:
        sections: Sections in flat display order

    Returns:
        Normalized sections (see module docstring for the guarantees)
    """
    result = _dedupe_ids([replace(section) for section in sections])
    result = _place_header(result)

    if len(result) == 1:
        _log_debug("Document has only a header, adding default sections")
        result = result + default_document()[1:]

    result = _place_summary(result)
    result = _attach_job_roles(result)

    known_ids = {s.id for s in result}
    for section in result:
        if section.parent_id and section.parent_id not in known_ids:
            _log_warning(f"Section '{section.id}' references missing parent '{section.parent_id}'")

    return [replace(section, content=normalize_content(section)) for section in result]
