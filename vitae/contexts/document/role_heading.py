"""
Role Heading Parsing

Decomposes a job-role heading line ("Senior Engineer, Acme | 2020 - Present") into
title, company and date range, and formats it back.

Accepted shapes:
- "Title, Company | Date"
- "Title | Company | Date" / "Company | Title | Date" (title found by keyword)
- "Title, Company | Location | Date"
- "Title" + "<span style="float:right">Date</span>" (exported form)
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from vitae.utils.markup import Element, is_float_right, text_content
from vitae.utils.text_processing import keyword_pattern, normalize_whitespace

# Fallback keyword tables; the intake context loads configurable versions
DEFAULT_TITLE_KEYWORDS = (
    "manager", "engineer", "director", "lead", "developer", "analyst", "consultant",
    "specialist", "coordinator", "administrator", "architect", "designer", "scientist",
    "intern", "associate", "officer", "president", "vp", "head", "supervisor",
    "technician", "assistant", "executive", "representative", "programmer",
    "researcher", "strategist", "advisor", "principal", "chief", "cto", "ceo", "cfo",
)

DEFAULT_ACTION_VERBS = (
    "led", "directed", "managed", "built", "designed", "created", "implemented",
    "developed", "established", "optimized", "secured", "mentored",
)

_MONTH = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\.?"
)
_DATE_TOKEN_RE = re.compile(
    rf"(?<![A-Za-z0-9])(?:(?:{_MONTH}\s+)?(?:19|20)\d{{2}}|present|current|now)(?![A-Za-z0-9])",
    re.IGNORECASE,
)
_DATE_RESIDUE_RE = re.compile(
    rf"{_MONTH}|\b(?:to|until|spring|summer|fall|autumn|winter)\b|[\s\-–—/.,()']|\d",
    re.IGNORECASE,
)


@dataclass
class RoleHeading:
    """
    Decomposed job-role heading.

    Attributes:
        title: Job title ("Senior Engineer")
        company: Employer ("Acme Corp")
        date_range: Date text as written ("2020 - Present")
        location: Optional extra segment ("Remote")
    """

    title: str = ""
    company: str = ""
    date_range: str = ""
    location: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.title or self.company or self.date_range or self.location)


def is_date_text(text: str) -> bool:
    """
    Check whether a segment is a date range and nothing else.

    Example:
        >>> is_date_text("Jan 2020 - Present")
        True
        >>> is_date_text("Acme 2020")
        False
    """
    if not text or not _DATE_TOKEN_RE.search(text):
        return False
    residue = _DATE_RESIDUE_RE.sub("", _DATE_TOKEN_RE.sub("", text))
    return not residue


def has_pipe_date(text: str) -> bool:
    """Check whether a line carries a '|'-separated date segment."""
    if "|" not in (text or ""):
        return False
    return any(is_date_text(segment.strip()) for segment in text.split("|"))


def parse_role_heading(text: str, title_keywords: Optional[Iterable[str]] = None) -> RoleHeading:
    """
    Split a heading line into title, company and date range.

    A two-segment "Title, Company | X" line always takes X as the date range.
    Otherwise splits on '|' first and pulls out the date segment; then either splits the
    leading segment on its first comma ("Title, Company") or, for multi-segment
    lines without a comma, picks the segment containing a job-title keyword.

    Args:
        text: Heading line text
        title_keywords: Job-title keywords (defaults to DEFAULT_TITLE_KEYWORDS)

    Returns:
        RoleHeading (fields empty when absent)
    """
    segments = [segment.strip() for segment in normalize_whitespace(text).split("|")]
    segments = [segment for segment in segments if segment]

    # "Title, Company | Date": the trailing segment is the date range as written
    if len(segments) == 2 and "," in segments[0] and not is_date_text(segments[0]):
        title, _, company = segments[0].partition(",")
        return RoleHeading(title=title.strip(), company=company.strip(), date_range=segments[1])

    date_range = ""
    rest = []
    for segment in segments:
        if not date_range and is_date_text(segment):
            date_range = segment
        else:
            rest.append(segment)

    if not rest:
        return RoleHeading(date_range=date_range)

    if "," in rest[0] or len(rest) == 1:
        title, _, company = rest[0].partition(",")
        return RoleHeading(
            title=title.strip(),
            company=company.strip(),
            date_range=date_range,
            location=" | ".join(rest[1:]),
        )

    pattern = keyword_pattern(title_keywords or DEFAULT_TITLE_KEYWORDS)
    title_index = next((i for i, segment in enumerate(rest) if pattern.search(segment)), 0)
    others = [segment for i, segment in enumerate(rest) if i != title_index]
    return RoleHeading(
        title=rest[title_index],
        company=others[0],
        date_range=date_range,
        location=" | ".join(others[1:]),
    )


def format_role_heading(heading: RoleHeading) -> str:
    """
    Format a RoleHeading as "Title, Company | Date".

    Empty parts are skipped so no leading or trailing '|' (or ',') is produced.
    """
    lead = ", ".join(part for part in (heading.title, heading.company) if part)
    return " | ".join(part for part in (lead, heading.location, heading.date_range) if part)


def heading_text(element: Element) -> str:
    """
    Read the heading line of an element, treating a float:right span as the date.

    "<h3>Engineer <span style="float:right">2020</span></h3>" reads as "Engineer | 2020".
    """
    dates = [normalize_whitespace(span.text) for span in element.iter() if is_float_right(span)]
    dates = [date for date in dates if date]
    main = text_content(element, skip=is_float_right)
    if not dates:
        return main
    main = main.rstrip(" |")
    return " | ".join(part for part in (main, " ".join(dates)) if part)


def starts_with_action_verb(text: str, verbs: Optional[Iterable[str]] = None) -> bool:
    first = normalize_whitespace(text).split(" ", 1)[0].strip(".,;:").lower()
    return bool(first) and first in set(verbs or DEFAULT_ACTION_VERBS)


def _looks_like_company(text: str, verbs: Optional[Iterable[str]]) -> bool:
    text = normalize_whitespace(text)
    return (
        bool(text)
        and len(text.split()) <= 8
        and not text.endswith((".", ":", "!", "?"))
        and not text.startswith(("•", "-", "*"))
        and not starts_with_action_verb(text, verbs)
    )


def fold_company_line(
    heading: RoleHeading,
    line: str,
    title_keywords: Optional[Iterable[str]] = None,
    action_verbs: Optional[Iterable[str]] = None,
) -> Optional[RoleHeading]:
    """
    Fold a separate company/date line into a role heading.

    Two shapes are folded:
    - heading without a date followed by "Company | Date"
    - heading with a date but no company followed by a short company line

    Args:
        heading: Parsed heading of the role
        line: Text of the line right after the heading
        title_keywords: Job-title keywords for parsing the line
        action_verbs: Verbs that mark a line as prose rather than a company

    Returns:
        Combined RoleHeading, or None when the line should stay a paragraph
    """
    if not heading.date_range and has_pipe_date(line):
        extra = parse_role_heading(line, title_keywords)
        parts = [part for part in (extra.title, extra.company, extra.location) if part]
        if heading.company:
            company, location = heading.company, " | ".join(parts)
        else:
            company = parts[0] if parts else ""
            location = " | ".join(parts[1:])
        return RoleHeading(
            title=heading.title,
            company=company,
            date_range=extra.date_range,
            location=" | ".join(part for part in (heading.location, location) if part),
        )

    if heading.date_range and not heading.company and _looks_like_company(line, action_verbs):
        return RoleHeading(
            title=heading.title,
            company=normalize_whitespace(line),
            date_range=heading.date_range,
            location=heading.location,
        )

    return None
