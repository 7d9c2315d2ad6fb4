"""
Resume Serializer

Turns a section list into the Markdown/HTML hybrid document consumed by the
external PDF renderer.

Document layout:
    # Jane Doe
    jane@example.com | 555-123-4567
    <!--CONTACT_DIVIDER-->

    <!--SUMMARY_START-->            (or "## Professional Summary")
    Summary paragraph

    ## Professional Experience

    ### Senior Engineer <span style="float:right">2020 - Present</span>
    Acme Corp
    Description paragraph
    - Bullet

    ## Skills
    **Languages:** Python, Go

Every section reachable from the flat list is emitted exactly once: top-level
sections in flat order, each followed by its children in hierarchy order.
Orphans (parent id not in the list) are emitted at their flat-list position.
"""

import re
from typing import List, Optional, Set

from vitae.contexts.document.content_normalizer import list_items, normalize_job_role_content
from vitae.contexts.document.hierarchy import Hierarchy, SectionTree, check_hierarchy_consistency
from vitae.contexts.document.role_heading import heading_text, parse_role_heading
from vitae.contexts.document.section_data_structure import Section, SectionType
from vitae.contexts.rendering.export_options import ExportOptions
from vitae.contexts.rendering.export_patterns import ExportMarkers, ExportTemplates, role_heading_line
from vitae.contexts.rendering.logger import _log_debug, _log_warning
from vitae.utils.markdown import format_list_markdown, inline_markdown, nodes_markdown
from vitae.utils.markup import (
    LIST_TAGS,
    Element,
    Node,
    block_stream,
    is_header_container,
    nodes_text,
    parse_fragment,
    split_lines,
    to_html,
)
from vitae.utils.text_processing import extract_contact_info, normalize_whitespace

_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")


# =============================================================================
# BLOCK RENDERING
# =============================================================================


def _list_item_texts(block: Element) -> List[str]:
    return [inline_markdown(parse_fragment(item)) for item in list_items(block)]


def _list_lines(block: Element) -> List[str]:
    """Render a list as Markdown lines (nested lists are flattened)."""
    items = _list_item_texts(block)
    return format_list_markdown(items, "1." if block.tag == "ol" else "-").splitlines()


def render_blocks(content: str) -> List[str]:
    """
    Render an HTML fragment as Markdown lines.

    Headings become "###" lines, paragraphs one line per <br>-separated line,
    lists "-" or "1." items; inline bold/italic is kept as Markdown.

    Args:
        content: HTML fragment

    Returns:
        Markdown lines
    """
    lines: List[str] = []
    for block in block_stream(parse_fragment(content)):
        if block.tag == "hr":
            continue
        if block.is_heading:
            text = heading_text(block)
            if text:
                lines.append(ExportTemplates.SUBHEADING.format(text=text))
        elif block.tag in LIST_TAGS:
            lines.extend(_list_lines(block))
        elif block.tag == "p":
            lines.extend(nodes_markdown(line) for line in split_lines(block))
        else:
            # Tables, header containers and other blocks degrade to their text
            lines.append(inline_markdown(block))
    return [line for line in lines if line.strip()]


# =============================================================================
# SECTION RENDERING
# =============================================================================


def _bold_label(line: List[Node]):
    """Split a line starting with a bold "Label:" into (label, rest nodes)."""
    meaningful = [i for i, node in enumerate(line) if not (isinstance(node, str) and not node.strip())]
    if not meaningful:
        return None
    first = line[meaningful[0]]
    if not isinstance(first, Element) or first.tag not in ("strong", "b"):
        return None

    label = first.text
    rest = line[meaningful[0] + 1:]
    rest_text = nodes_text(rest)
    if label.endswith(":"):
        return label.rstrip(":").strip(), rest
    if rest_text.startswith(":"):
        return label.strip(), rest
    return None


def _category_line(category: str, items: str) -> str:
    return ExportTemplates.SKILL_CATEGORY.format(category=category, items=items).rstrip()


def render_skills(content: str) -> List[str]:
    """
    Render a SKILLS fragment.

    Bold "Category:" labels (and heading + list category blocks) become
    "**Category:** item, item" lines. Everything else, including plain
    "Label: items" text, is emitted verbatim as paragraphs and bullets.
    """
    blocks = block_stream(parse_fragment(content))
    lines: List[str] = []
    consumed: Set[int] = set()

    for i, block in enumerate(blocks):
        if i in consumed or block.tag == "hr":
            continue
        next_block = blocks[i + 1] if i + 1 < len(blocks) else None
        next_is_list = next_block is not None and next_block.tag in LIST_TAGS

        if block.tag == "p":
            for line in split_lines(block):
                labeled = _bold_label(line)
                if labeled is None:
                    lines.append(nodes_markdown(line))
                    continue
                category, rest = labeled
                items = nodes_markdown(rest).lstrip(":").strip()
                if not items and next_is_list:
                    items = ", ".join(_list_item_texts(next_block))
                    consumed.add(i + 1)
                lines.append(_category_line(category, items))
            continue

        if block.is_heading and next_is_list:
            category = normalize_whitespace(block.text).rstrip(":")
            lines.append(_category_line(category, ", ".join(_list_item_texts(next_block))))
            consumed.add(i + 1)
            continue

        lines.extend(render_blocks(to_html(block)))

    return [line for line in lines if line.strip()]


def render_header(section: Section) -> List[str]:
    """
    Render the header: "# name", the contact line and exactly one divider.

    The contact line is the header's paragraph text; when there is none, email,
    phone, url and location are extracted from the header text instead.
    """
    blocks = block_stream(parse_fragment(section.content))
    name = ""
    name_index = None
    for i, block in enumerate(blocks):
        if block.is_heading:
            name, name_index = heading_text(block), i
            break

    contact_parts: List[str] = []
    for i, block in enumerate(blocks):
        if i == name_index:
            continue
        inner = block_stream(block) if is_header_container(block) else [block]
        for element in inner:
            if element.is_heading and not name:
                name = heading_text(element)
                continue
            lines = split_lines(element) if element.tag == "p" else [[element]]
            for line in lines:
                text = nodes_text(line)
                if not name:
                    name = text
                elif text:
                    contact_parts.append(text)

    contact_line = " | ".join(contact_parts)
    if not contact_line:
        extracted = extract_contact_info(nodes_text(parse_fragment(section.content).children))
        contact_line = " | ".join(
            extracted[key] for key in ("email", "phone", "url", "location") if key in extracted
        )

    lines = [ExportTemplates.NAME.format(name=name)] if name else []
    if contact_line:
        lines.append(contact_line)
    lines.append(ExportMarkers.CONTACT_DIVIDER)
    return lines


def render_job_role(section: Section, options: ExportOptions) -> List[str]:
    """
    Render a JOB_ROLE.

    Lines: "### {title} <span style="float:right">{date}</span>" (span omitted
    without a date), the company line, description paragraphs, "- bullet" lines.
    """
    content = normalize_job_role_content(section.content, section.title)
    blocks = block_stream(parse_fragment(content))
    heading = blocks[0]
    role_heading = parse_role_heading(heading_text(heading))

    title = role_heading.title or (section.title if not role_heading.company else "")
    heading_line = role_heading_line(title or role_heading.company, role_heading.date_range)
    company = " | ".join(
        part for part in (role_heading.company if title else "", role_heading.location) if part
    )

    lines = [heading_line]
    if company:
        lines = [company, heading_line] if options.company_name_before_title else [heading_line, company]

    for block in blocks[1:]:
        if block.tag in LIST_TAGS:
            lines.extend(_list_lines(block))
        elif block.tag == "p":
            lines.extend(nodes_markdown(line) for line in split_lines(block))
    return [line for line in lines if line.strip()]


# =============================================================================
# DOCUMENT
# =============================================================================


class ResumeSerializer:
    """
    Serializes one document.

    Args:
        sections: Flat, ordered section list
        hierarchy: Hierarchy map supplied by the caller; rebuilt from the flat list
            (with a warning) when it disagrees
        options: Presentation options
    """

    def __init__(
        self,
        sections: List[Section],
        hierarchy: Optional[Hierarchy] = None,
        options: Optional[ExportOptions] = None,
    ):
        self.tree = SectionTree(sections)
        self.options = options or ExportOptions()
        self.chunks: List[List[str]] = []
        self.emitted: Set[str] = set()

        if hierarchy is not None:
            problems = check_hierarchy_consistency(self.tree.sections, hierarchy)
            if problems:
                _log_warning(f"Hierarchy disagrees with section list, rebuilding ({len(problems)} problems)")
                for problem in problems:
                    _log_debug(f"  {problem}")

        for section in self.tree:
            if section.parent_id and section.parent_id not in self.tree:
                _log_warning(f"Section '{section.id}' references missing parent '{section.parent_id}'")

    def _page_break(self, heading: str) -> List[str]:
        if self.options.needs_page_break(heading):
            return [ExportMarkers.PAGE_BREAK]
        return []

    def _title_lines(self, section: Section) -> List[str]:
        title = normalize_whitespace(section.title)
        if self.options.is_suppressed(title):
            if section.type == SectionType.SUMMARY:
                return [ExportMarkers.SUMMARY_START]
            return [""]
        if self.options.uppercase_section_titles:
            title = title.upper()
        return self._page_break(title) + [ExportTemplates.SECTION_TITLE.format(title=title)]

    def _child_lines(self, section: Section) -> List[str]:
        if section.type == SectionType.JOB_ROLE:
            lines = render_job_role(section, self.options)
            heading = next((line for line in lines if line.startswith("### ")), "")
            return self._page_break(heading) + lines
        title = normalize_whitespace(section.title)
        body = render_skills(section.content) if section.type == SectionType.SKILLS else render_blocks(section.content)
        return self._page_break(title) + [ExportTemplates.SUBHEADING.format(text=title)] + body

    def _section_lines(self, section: Section, top_level: bool) -> List[str]:
        if section.type == SectionType.HEADER:
            return render_header(section)
        if not top_level or section.type == SectionType.JOB_ROLE:
            return self._child_lines(section)
        if section.type == SectionType.SKILLS:
            return self._title_lines(section) + render_skills(section.content)
        return self._title_lines(section) + render_blocks(section.content)

    def _emit(self, section: Section, top_level: bool) -> None:
        if section.id in self.emitted:
            return
        self.emitted.add(section.id)
        self.chunks.append(self._section_lines(section, top_level))
        for child in self.tree.children_of(section.id):
            self._emit(child, top_level=False)

    def serialize(self) -> str:
        headers = [s for s in self.tree if s.type == SectionType.HEADER]
        for header in headers[:1]:
            self._emit(header, top_level=True)

        for section in self.tree:
            if self.tree.is_top_level(section):
                self._emit(section, top_level=True)

        # Parent cycles are unreachable from the top level
        for section in self.tree:
            if section.id not in self.emitted:
                _log_warning(f"Section '{section.id}' is unreachable from the top level, emitting in place")
                self._emit(section, top_level=True)

        document = "\n\n".join("\n".join(chunk) for chunk in self.chunks)
        document = _EXCESS_NEWLINES_RE.sub("\n\n", document).strip()
        _log_debug(f"Serialized {len(self.emitted)} sections ({len(document)} chars)")
        return document + "\n"


def serialize_resume(
    sections: List[Section],
    hierarchy: Optional[Hierarchy] = None,
    options: Optional[ExportOptions] = None,
) -> str:
    """
    Serialize a section list into the renderer's Markdown/HTML dialect.

    Args:
        sections: Flat, ordered section list (normalized)
        hierarchy: Optional hierarchy map; a stale map is rebuilt from the list
        options: Presentation options (suppressed titles, page breaks, layout)

    Returns:
        Serialized document ending with a newline

    Raises:
        DuplicateSectionError: If two sections share an id

    Example:
        >>> text = serialize_resume(sections, options=ExportOptions.from_presets(["summary_implied"]))
        >>> text.count("<!--CONTACT_DIVIDER-->")
        1
    """
    return ResumeSerializer(sections, hierarchy, options).serialize()
