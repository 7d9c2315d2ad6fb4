"""
Heuristic Resume Parser

Turns a loosely structured resume (HTML, Markdown/HTML hybrid or JSON) into a flat
list of typed sections.

Markup pipeline:
1. Preprocess text (unicode, code fences, export markers)
2. Convert Markdown lines to HTML and tokenize into an element tree
3. Repair known importer quirks (headings inside list items, empty items)
4. Flatten into a block stream and locate the header block
5. Split the rest on the top-level heading level and classify each heading
6. Split experience bodies into job roles

Parsing never raises: any failure yields the minimal default document.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from vitae.contexts.document.hierarchy import build_section_hierarchy, default_document
from vitae.contexts.document.role_heading import (
    fold_company_line,
    has_pipe_date,
    heading_text,
    parse_role_heading,
)
from vitae.contexts.document.section_data_structure import (
    ANCHOR_IDS,
    ANCHOR_TITLES,
    DEFAULT_TITLES,
    EXPERIENCE_ID,
    HEADER_ID,
    SUMMARY_ID,
    Section,
    SectionType,
    new_section_id,
)
from vitae.contexts.intake.heuristics import ParsingHeuristics, default_heuristics
from vitae.contexts.intake.json_resume import (
    extract_json_payload,
    is_resume_json,
    is_section_list,
    json_resume_to_sections,
    section_list_to_sections,
)
from vitae.contexts.intake.logger import _log_debug, _log_error, _log_warning, log_parse_result
from vitae.contexts.intake.normalizer import preprocess_resume_text
from vitae.contexts.intake.section_patterns import (
    SectionRule,
    build_section_rules,
    classify_heading,
    is_bullet_like,
    matches_title_keyword,
    normalize_heading,
)
from vitae.utils.markdown import looks_like_html, markdown_to_html
from vitae.utils.markup import (
    Element,
    block_stream,
    inner_html,
    is_bold_only,
    is_header_container,
    nodes_html,
    nodes_text,
    parse_fragment,
    split_lines,
    to_html,
)
from vitae.utils.text_processing import looks_like_contact_line

FORMAT_HINTS = ("html", "markdown", "json")

# Longest line still considered a role heading or header line
MAX_HEADING_LENGTH = 150
MAX_HEADER_LINES = 4

_ANCHOR_ID_BY_TYPE = {section_type: anchor_id for anchor_id, section_type in ANCHOR_IDS.items()}


@dataclass
class ParsedResume:
    """
    Result of parsing a resume.

    Attributes:
        sections: Flat, ordered section list
        source_format: Detected or hinted format ("json", "sections", "html", "markdown")
        warnings: Problems recovered from while parsing
        used_fallback: True when the minimal default document was returned
    """

    sections: List[Section]
    source_format: str
    warnings: List[str] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def hierarchy(self) -> Dict[str, List[str]]:
        return build_section_hierarchy(self.sections)


def detect_format(text: str) -> str:
    """
    Detect the input format of preprocessed resume text.

    Returns:
        "json", "html" or "markdown"
    """
    if extract_json_payload(text) is not None:
        return "json"
    if looks_like_html(text):
        return "html"
    return "markdown"


# =============================================================================
# MARKUP PARSING
# =============================================================================


def _repair_tree(root: Element) -> Element:
    """Turn headings inside list items into bold labels and drop empty list items."""
    for element in [root] + list(root.iter()):
        children = []
        for child in element.children:
            if isinstance(child, Element):
                if child.tag == "li" and not child.text and child.find("img") is None:
                    continue
                if element.tag == "li" and child.is_heading:
                    label = child.text if child.text.endswith(":") else f"{child.text}:"
                    child = Element("strong", children=[label])
            children.append(child)
        element.children = children
    return root


def _first_line_text(block: Element) -> str:
    lines = split_lines(block)
    return nodes_text(lines[0]) if lines else ""


def _is_caps_line(block: Element) -> bool:
    text = block.text
    letters = [char for char in text if char.isalpha()]
    return (
        block.tag == "p"
        and bool(letters)
        and all(char.isupper() for char in letters)
        and len(text.split()) <= 5
    )


class MarkupResumeParser:
    """
    Parser for HTML and Markdown/HTML hybrid resumes.

    Args:
        heuristics: Keyword tables (defaults to heuristics.yaml)
    """

    def __init__(self, heuristics: Optional[ParsingHeuristics] = None):
        self.heuristics = heuristics or default_heuristics()
        self.rules: List[SectionRule] = build_section_rules(self.heuristics)

    # Header

    def _is_contact_block(self, block: Element) -> bool:
        return block.tag == "p" and looks_like_contact_line(block.text, self.heuristics.contact_hints)

    def _is_short_line(self, block: Element) -> bool:
        text = block.text
        return (
            block.tag == "p"
            and 0 < len(text.split()) <= 12
            and not text.endswith((".", ":"))
            and classify_heading(text, self.rules) == SectionType.OTHER
        )

    def _is_name_line(self, block: Element) -> bool:
        text = block.text
        return (
            block.tag == "p"
            and 0 < len(text.split()) <= 5
            and not any(char.isdigit() for char in text)
            and "@" not in text
            and not text.endswith((".", ":", ","))
            and classify_heading(text, self.rules) == SectionType.OTHER
        )

    def find_header(self, blocks: List[Element]) -> int:
        """
        Locate the header block.

        Returns:
            Number of leading blocks that form the header (0 when there is none)
        """
        for i, block in enumerate(blocks[:3]):
            if is_header_container(block):
                return i + 1

        for i, block in enumerate(blocks[:3]):
            if not block.is_heading:
                continue
            if classify_heading(block.text, self.rules) not in (SectionType.OTHER, SectionType.HEADER):
                break
            next_is_contact = i + 1 < len(blocks) and self._is_contact_block(blocks[i + 1])
            if block.tag != "h1" and not next_is_contact:
                break
            end = i + 1
            while (
                end < len(blocks)
                and end - i <= MAX_HEADER_LINES
                and (self._is_contact_block(blocks[end]) or (end == i + 1 and self._is_short_line(blocks[end])))
            ):
                end += 1
            return end

        if blocks and (self._is_name_line(blocks[0]) or is_bold_only(blocks[0])):
            end = 1
            while end < len(blocks) and end <= MAX_HEADER_LINES and self._is_contact_block(blocks[end]):
                end += 1
            if end > 1:
                return end

        end = 0
        while end < len(blocks) and end < MAX_HEADER_LINES and self._is_contact_block(blocks[end]):
            end += 1
        return end

    # Section headings

    def _main_level(self, blocks: List[Element]) -> Optional[int]:
        levels = [block.heading_level for block in blocks if block.heading_level]
        return min(levels) if levels else None

    def _is_section_heading(self, block: Element, main_level: Optional[int]) -> bool:
        if main_level is not None:
            return block.heading_level == main_level
        if is_bold_only(block) or _is_caps_line(block):
            return classify_heading(block.text, self.rules) != SectionType.OTHER
        return False

    # Job roles

    def _role_candidate_text(self, block: Element) -> Optional[str]:
        """Heading line of a block that could start a job role."""
        if block.is_heading or is_bold_only(block):
            return heading_text(block)
        if block.tag == "p":
            return _first_line_text(block)
        return None

    def _is_role_start(self, block: Element, next_block: Optional[Element], after_heading: bool) -> bool:
        text = self._role_candidate_text(block)
        if not text or len(text) > MAX_HEADING_LENGTH:
            return False
        if text.endswith(":") or is_bullet_like(text, self.heuristics):
            return False

        if block.tag == "p" and not is_bold_only(block):
            # Plain paragraphs only split on a "| date" line that is not the
            # company line of the heading just above it
            return has_pipe_date(text) and not after_heading

        if matches_title_keyword(text, self.heuristics) or has_pipe_date(text):
            return True
        return (
            next_block is not None
            and next_block.tag == "p"
            and has_pipe_date(_first_line_text(next_block))
        )

    def split_job_roles(self, body: List[Element]) -> Tuple[List[Element], List[List[Element]]]:
        """
        Split an experience body into job-role block groups.

        Returns:
            (intro blocks before the first role, list of role block groups)
        """
        intro: List[Element] = []
        roles: List[List[Element]] = []
        pending_company_line = False

        for i, block in enumerate(body):
            next_block = body[i + 1] if i + 1 < len(body) else None
            if self._is_role_start(block, next_block, pending_company_line):
                roles.append([block])
                candidate = self._role_candidate_text(block) or ""
                pending_company_line = (block.is_heading or is_bold_only(block)) and not has_pipe_date(candidate)
                continue

            pending_company_line = False
            if roles:
                roles[-1].append(block)
            else:
                intro.append(block)

        return intro, roles

    def _role_section(self, blocks: List[Element], parent_id: str) -> Section:
        first, rest = blocks[0], blocks[1:]

        if first.is_heading or is_bold_only(first):
            heading_html = inner_html(first)
            if is_bold_only(first):
                heading_html = inner_html(first.elements[0])
            line = heading_text(first)
            body_html = [to_html(block) for block in rest]
        else:
            lines = split_lines(first)
            heading_html = nodes_html(lines[0])
            line = nodes_text(lines[0])
            remaining = "<br>".join(nodes_html(run) for run in lines[1:])
            body_html = ([f"<p>{remaining}</p>"] if remaining else []) + [to_html(b) for b in rest]

        role_heading = parse_role_heading(line, self.heuristics.title_keywords)
        if rest and rest[0].tag == "p":
            folded = fold_company_line(
                role_heading, _first_line_text(rest[0]),
                self.heuristics.title_keywords, self.heuristics.action_verbs,
            )
            role_heading = folded or role_heading

        title = role_heading.title or role_heading.company or normalize_heading(line)
        return Section(
            id=new_section_id("job-role"),
            type=SectionType.JOB_ROLE,
            title=title or DEFAULT_TITLES[SectionType.JOB_ROLE],
            content=f"<h3>{heading_html}</h3>" + "".join(body_html),
            parent_id=parent_id,
        )

    # Document

    def _section_id(self, section_type: SectionType, title: str, used: set) -> str:
        preferred = None
        if section_type == SectionType.SUMMARY:
            preferred = SUMMARY_ID
        elif section_type in _ANCHOR_ID_BY_TYPE:
            preferred = _ANCHOR_ID_BY_TYPE[section_type]

        if preferred and preferred not in used:
            return preferred
        return new_section_id(title or section_type.value)

    def parse(self, html_text: str) -> List[Section]:
        """
        Parse an HTML document into sections.

        Args:
            html_text: HTML (Markdown already converted)

        Returns:
            Flat section list (may be empty)
        """
        blocks = block_stream(_repair_tree(parse_fragment(html_text)))
        sections: List[Section] = []
        used_ids = set()

        header_end = self.find_header(blocks)
        if header_end:
            sections.append(
                Section(
                    id=HEADER_ID,
                    type=SectionType.HEADER,
                    title=DEFAULT_TITLES[SectionType.HEADER],
                    content="".join(to_html(block) for block in blocks[:header_end]),
                )
            )
            used_ids.add(HEADER_ID)
        rest = blocks[header_end:]

        main_level = self._main_level(rest)
        groups: List[Tuple[Optional[Element], List[Element]]] = [(None, [])]
        for block in rest:
            if self._is_section_heading(block, main_level):
                groups.append((block, []))
            else:
                groups[-1][1].append(block)

        preamble_html = "".join(to_html(block) for block in groups[0][1] if block.text)
        summary_explicit = any(
            heading is not None and classify_heading(heading.text, self.rules) == SectionType.SUMMARY
            for heading, _ in groups[1:]
        )

        if preamble_html and not summary_explicit:
            sections.append(
                Section(
                    id=SUMMARY_ID,
                    type=SectionType.SUMMARY,
                    title=DEFAULT_TITLES[SectionType.SUMMARY],
                    content=preamble_html,
                )
            )
            used_ids.add(SUMMARY_ID)

        for heading, body in groups[1:]:
            title = normalize_heading(heading.text) or DEFAULT_TITLES[SectionType.OTHER]
            section_type = classify_heading(title, self.rules)

            if section_type == SectionType.HEADER:
                if HEADER_ID in used_ids:
                    section_type = SectionType.OTHER
                else:
                    sections.insert(
                        0,
                        Section(
                            id=HEADER_ID,
                            type=SectionType.HEADER,
                            title=DEFAULT_TITLES[SectionType.HEADER],
                            content="".join(to_html(block) for block in body),
                        ),
                    )
                    used_ids.add(HEADER_ID)
                    continue

            section_id = self._section_id(section_type, title, used_ids)
            used_ids.add(section_id)

            if section_type == SectionType.EXPERIENCE:
                intro, roles = self.split_job_roles(body)
                sections.append(
                    Section(
                        id=section_id,
                        type=section_type,
                        title=title,
                        content="".join(to_html(block) for block in intro),
                    )
                )
                for role_blocks in roles:
                    role = self._role_section(role_blocks, section_id)
                    used_ids.add(role.id)
                    sections.append(role)
                _log_debug(f"Experience section '{title}': {len(roles)} job roles")
                continue

            content = "".join(to_html(block) for block in body)
            if section_type == SectionType.SUMMARY and preamble_html and section_id == SUMMARY_ID:
                content = preamble_html + content
            sections.append(Section(id=section_id, type=section_type, title=title, content=content))

        return sections


# =============================================================================
# ENTRY POINTS
# =============================================================================


def _bare_default_document() -> List[Section]:
    """Default document built without fragment templates."""
    return [
        Section(id=HEADER_ID, type=SectionType.HEADER, title=DEFAULT_TITLES[SectionType.HEADER],
                content="<h1>Your Name</h1>"),
        Section(id=SUMMARY_ID, type=SectionType.SUMMARY, title=DEFAULT_TITLES[SectionType.SUMMARY]),
        Section(id=EXPERIENCE_ID, type=SectionType.EXPERIENCE, title=ANCHOR_TITLES[SectionType.EXPERIENCE]),
        Section(id=new_section_id("job-role"), type=SectionType.JOB_ROLE,
                title=DEFAULT_TITLES[SectionType.JOB_ROLE], content="<h3>Job Title</h3>", parent_id=EXPERIENCE_ID),
    ]


def _fallback(source_format: str, reason: str) -> ParsedResume:
    _log_warning(f"{reason}, using default document")
    warnings = [reason]
    try:
        sections = default_document()
    except Exception as e:
        _log_error(f"Default document unavailable ({type(e).__name__}: {e}), using bare default")
        warnings.append(f"Default document unavailable ({type(e).__name__})")
        sections = _bare_default_document()
    return ParsedResume(
        sections=sections,
        source_format=source_format,
        warnings=warnings,
        used_fallback=True,
    )


def _parse(
    raw: Union[str, Dict[str, Any], List[Any]],
    hint: Optional[str],
    heuristics: ParsingHeuristics,
) -> ParsedResume:
    if hint is not None and hint not in FORMAT_HINTS:
        _log_warning(f"Unknown format hint '{hint}', detecting format instead")
        hint = None

    if isinstance(raw, (dict, list)):
        data, text = raw, None
    else:
        if raw is None or not str(raw).strip():
            return _fallback(hint or "markdown", "Empty input")
        text = preprocess_resume_text(str(raw))
        data = extract_json_payload(text) if hint in (None, "json") else None
        if hint == "json" and data is None:
            return _fallback("json", "Undecodable JSON input")

    if data is not None:
        if is_section_list(data):
            return ParsedResume(section_list_to_sections(data), source_format="sections")
        if is_resume_json(data):
            return ParsedResume(json_resume_to_sections(data), source_format="json")
        if hint == "json" or text is None:
            return _fallback("json", "JSON input does not match a known resume schema")

    source_format = hint or ("html" if looks_like_html(text) else "markdown")
    html_text = text if source_format == "html" else markdown_to_html(text)
    sections = MarkupResumeParser(heuristics).parse(html_text)
    return ParsedResume(sections, source_format=source_format)


def parse_resume_document(
    raw: Union[str, Dict[str, Any], List[Any], None],
    hint: Optional[str] = None,
    heuristics: Optional[ParsingHeuristics] = None,
) -> ParsedResume:
    """
    Parse a resume into sections, reporting how it went.

    Args:
        raw: Resume text (HTML, Markdown or JSON) or already decoded JSON
        hint: Optional format hint: "html", "markdown" or "json"
        heuristics: Keyword tables (defaults to heuristics.yaml)

    Returns:
        ParsedResume; never raises
    """
    try:
        result = _parse(raw, hint, heuristics or default_heuristics())
    except Exception as e:
        return _fallback(hint or "unknown", f"Parsing failed ({type(e).__name__}: {e})")

    if not result.sections:
        return _fallback(result.source_format, "No sections extracted")

    log_parse_result(result.source_format, len(result.sections), result.used_fallback)
    return result


def parse_resume(
    raw: Union[str, Dict[str, Any], List[Any], None],
    hint: Optional[str] = None,
    heuristics: Optional[ParsingHeuristics] = None,
) -> List[Section]:
    """
    Parse a resume into a flat section list.

    Never raises: malformed input yields the minimal default document (Header,
    empty Summary, Experience anchor, one placeholder Job Role).

    Args:
        raw: Resume text (HTML, Markdown or JSON) or already decoded JSON
        hint: Optional format hint: "html", "markdown" or "json"
        heuristics: Keyword tables (defaults to heuristics.yaml)

    Returns:
        Flat, ordered section list

    Example:
        >>> sections = parse_resume("# Jane Doe\\njane@example.com\\n## Experience\\n...")
        >>> [s.type.value for s in sections][:2]
        ['HEADER', 'EXPERIENCE']
    """
    return parse_resume_document(raw, hint, heuristics).sections
