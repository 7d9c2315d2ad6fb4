"""
Suggestion Merger

Merges externally generated replacement content into an existing section.

Target resolution order:
1. MatchHints.direct_role_id, when it names an existing section
2. summary: SUMMARY by type, else by title keyword, else a new SUMMARY after HEADER
3. experience: JOB_ROLE whose heading or title contains the position/company hints
4. experience: first JOB_ROLE in document order

Job-role merges keep the original heading line and description paragraphs; only
the bullet list is replaced.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Union

from vitae.contexts.document.content_normalizer import list_items, strip_bullet_marker
from vitae.contexts.document.hierarchy import SectionTree, check_hierarchy_consistency
from vitae.contexts.document.logger import _log_debug, _log_info, _log_warning
from vitae.contexts.document.role_heading import heading_text
from vitae.contexts.document.section_data_structure import Section, SectionType
from vitae.utils.markdown import markdown_to_html
from vitae.utils.markup import (
    HEADING_TAGS,
    LIST_TAGS,
    block_stream,
    nodes_html,
    nodes_text,
    parse_fragment,
    split_lines,
    to_html,
)

# Title keywords used when a target section cannot be found by type
TITLE_KEYWORDS = {
    SectionType.SUMMARY: ("summary", "profile"),
    SectionType.EDUCATION: ("education",),
    SectionType.SKILLS: ("skill",),
    SectionType.CERTIFICATIONS: ("certification",),
    SectionType.PROJECTS: ("project",),
}

_TARGET_ALIASES = {
    "experience": SectionType.JOB_ROLE,
    "job_role": SectionType.JOB_ROLE,
    "jobrole": SectionType.JOB_ROLE,
    "role": SectionType.JOB_ROLE,
}


@dataclass
class MatchHints:
    """
    Hints for locating the section a suggestion belongs to.

    Attributes:
        position: Job title text to look for (case-insensitive substring)
        company: Company name to look for (case-insensitive substring)
        direct_role_id: Exact section id; wins over every other strategy
    """

    position: Optional[str] = None
    company: Optional[str] = None
    direct_role_id: Optional[str] = None


@dataclass
class SuggestionTarget:
    """
    Resolved suggestion target.

    Attributes:
        section_id: Id of the target section (None for "new_summary" and "none")
        strategy: How it was found: direct, type, title, hint, partial_hint,
                  first_role, new_summary or none
    """

    section_id: Optional[str]
    strategy: str


def _target_type(target_type: Union[SectionType, str]) -> SectionType:
    if isinstance(target_type, SectionType):
        return SectionType.JOB_ROLE if target_type == SectionType.EXPERIENCE else target_type
    key = str(target_type).strip().lower().replace("-", "_").replace(" ", "_")
    return _TARGET_ALIASES.get(key) or SectionType.coerce(key)


def _role_haystack(role: Section) -> str:
    root = parse_fragment(role.content)
    heading = next((block for block in block_stream(root) if block.tag in HEADING_TAGS), None)
    line = heading_text(heading) if heading is not None else ""
    return f"{line} {role.title}".lower()


def _find_by_type_or_title(sections: List[Section], kind: SectionType) -> Optional[SuggestionTarget]:
    for section in sections:
        if section.type == kind:
            return SuggestionTarget(section.id, "type")
    for section in sections:
        title = section.title.lower()
        if any(keyword in title for keyword in TITLE_KEYWORDS.get(kind, ())):
            return SuggestionTarget(section.id, "title")
    return None


def resolve_suggestion_target(
    sections: List[Section],
    target_type: Union[SectionType, str],
    hints: Optional[MatchHints] = None,
) -> SuggestionTarget:
    """
    Find the section a suggestion should be merged into.

    Args:
        sections: Flat section list
        target_type: "summary", "experience" or any SectionType value
        hints: Optional match hints

    Returns:
        SuggestionTarget describing the chosen section and strategy
    """
    hints = hints or MatchHints()
    if hints.direct_role_id and any(s.id == hints.direct_role_id for s in sections):
        return SuggestionTarget(hints.direct_role_id, "direct")

    kind = _target_type(target_type)

    if kind == SectionType.SUMMARY:
        return _find_by_type_or_title(sections, kind) or SuggestionTarget(None, "new_summary")

    if kind != SectionType.JOB_ROLE:
        return _find_by_type_or_title(sections, kind) or SuggestionTarget(None, "none")

    roles = [s for s in sections if s.type == SectionType.JOB_ROLE]
    position = (hints.position or "").strip().lower()
    company = (hints.company or "").strip().lower()

    if position or company:
        haystacks = [(role, _role_haystack(role)) for role in roles]
        for role, haystack in haystacks:
            if (not position or position in haystack) and (not company or company in haystack):
                return SuggestionTarget(role.id, "hint")
        for role, haystack in haystacks:
            if (position and position in haystack) or (company and company in haystack):
                return SuggestionTarget(role.id, "partial_hint")

    if roles:
        return SuggestionTarget(roles[0].id, "first_role")
    return SuggestionTarget(None, "none")


def _as_html(content: str) -> str:
    """Accept HTML fragments as-is; convert plain text or Markdown."""
    if "<" in content and ">" in content:
        return content
    return markdown_to_html(content)


def suggested_bullets(new_content: str) -> List[str]:
    """
    Extract bullet HTML from suggested content.

    Headings are discarded. List items are used when the content has a list;
    otherwise every plain line becomes a bullet.
    """
    blocks = [block for block in block_stream(parse_fragment(_as_html(new_content)))
              if not block.is_heading]

    lists = [block for block in blocks if block.tag in LIST_TAGS]
    if lists:
        return [item for block in lists for item in list_items(block)]

    bullets = []
    for block in blocks:
        if block.tag != "p":
            continue
        for line in split_lines(block):
            if nodes_text(line):
                bullets.append(nodes_html(strip_bullet_marker(line)))
    return [bullet for bullet in bullets if bullet.strip()]


def merge_job_role_content(original: str, new_content: str) -> str:
    """
    Replace the bullet list of a job-role fragment, keeping everything else.

    Args:
        original: Current job-role HTML (heading, description, list)
        new_content: Suggested content (HTML, Markdown or plain lines)

    Returns:
        Merged HTML fragment; the original when the suggestion has no bullets
    """
    bullets = suggested_bullets(new_content)
    if not bullets:
        _log_warning("Suggestion contains no bullets, keeping original job role content")
        return original

    kept = [to_html(block) for block in block_stream(parse_fragment(original))
            if block.tag not in LIST_TAGS]
    bullet_list = "<ul>" + "".join(f"<li>{bullet}</li>" for bullet in bullets) + "</ul>"
    return "".join(kept) + bullet_list


def apply_suggestion(
    sections: List[Section],
    hierarchy: Optional[Dict[str, List[str]]],
    target_type: Union[SectionType, str],
    new_content: str,
    hints: Optional[MatchHints] = None,
) -> List[Section]:
    """
    Merge suggested content into the best matching section.

    Never changes order or hierarchy, except for inserting a new SUMMARY when a
    summary suggestion has no target.

    Args:
        sections: Flat section list
        hierarchy: Hierarchy map for the list (a stale map is logged and ignored)
        target_type: "summary", "experience" or any SectionType value
        new_content: Suggested content (HTML, Markdown or plain text)
        hints: Optional match hints

    Returns:
        New section list
    """
    if hierarchy is not None:
        problems = check_hierarchy_consistency(sections, hierarchy)
        if problems:
            _log_warning(f"Hierarchy out of sync with section list: {problems[0]}")

    target = resolve_suggestion_target(sections, target_type, hints)
    _log_debug(f"Suggestion for '{target_type}' resolved via {target.strategy} -> {target.section_id}")

    if target.strategy == "new_summary":
        tree = SectionTree(sections)
        summary = tree.add_summary(_as_html(new_content))
        _log_info(f"Created summary section '{summary.id}' from suggestion")
        return tree.sections

    if target.section_id is None:
        _log_warning(f"No section found for '{target_type}' suggestion, document unchanged")
        return list(sections)

    result = []
    for section in sections:
        if section.id == target.section_id:
            if section.type == SectionType.JOB_ROLE:
                content = merge_job_role_content(section.content, new_content)
            else:
                content = _as_html(new_content)
            section = replace(section, content=content)
            _log_info(f"Applied suggestion to '{section.id}'")
        result.append(section)
    return result
