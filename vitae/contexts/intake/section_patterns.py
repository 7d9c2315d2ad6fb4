"""
Pattern matching for resume section identification.

Classifies section headings into SectionTypes with a ranked rule list and decides
which lines inside an experience section start a new job role.

Pattern classes follow the frozen-dataclass convention:
- Dataclasses with frozen=True for immutability
- Class-level constants for patterns
- Helper functions that use these patterns
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from vitae.contexts.document.role_heading import starts_with_action_verb
from vitae.contexts.document.section_data_structure import SectionType
from vitae.contexts.intake.heuristics import ParsingHeuristics, default_heuristics
from vitae.utils.text_processing import keyword_pattern, normalize_whitespace

# =============================================================================
# MARKUP PATTERNS
# =============================================================================


@dataclass(frozen=True)
class ResumeMarkupPatterns:
    """
    Regex patterns for structural markers in resume text.
    """

    # Markers written by the exporter
    CONTACT_DIVIDER: str = r"<!--\s*CONTACT_DIVIDER\s*-->"
    SUMMARY_START: str = r"<!--\s*SUMMARY_START\s*-->"
    PAGE_BREAK: str = r"<!--\s*PAGE BREAK\s*-->"

    # Whole document wrapped in a Markdown code fence (```json / ```markdown / ```)
    CODE_FENCE: str = r"^\s*```[\w-]*\s*\n(.*?)\n\s*```\s*$"

    # Bullet marker at the start of a line
    BULLET_MARKER: str = r"^\s*(?:[•▪◦‣●·]|[-*+](?=\s))"


# =============================================================================
# SECTION RULES
# =============================================================================


@dataclass(frozen=True)
class SectionRule:
    """
    One classification rule: headings satisfying predicate get section_type.

    Attributes:
        predicate: Callable taking the heading text
        section_type: Type assigned on match
        name: Readable rule name for logging
    """

    predicate: Callable[[str], bool]
    section_type: SectionType
    name: str = ""


def keyword_rule(section_type: SectionType, keywords: Iterable[str]) -> SectionRule:
    """
    Build a rule matching any keyword at a word start (case-insensitive).

    Args:
        section_type: Type assigned on match
        keywords: Keywords or phrases

    Returns:
        SectionRule
    """
    keywords = tuple(keywords)
    pattern = keyword_pattern(keywords)
    return SectionRule(
        predicate=lambda text: bool(pattern.search(text)),
        section_type=section_type,
        name=f"{section_type.value.lower()}: {', '.join(keywords)}",
    )


def build_section_rules(heuristics: Optional[ParsingHeuristics] = None) -> List[SectionRule]:
    """Build the ranked rule list from heuristics (defaults to heuristics.yaml)."""
    heuristics = heuristics or default_heuristics()
    return [keyword_rule(section_type, keywords) for section_type, keywords in heuristics.section_rules]


def normalize_heading(text: str) -> str:
    """Normalize heading text for matching (whitespace, trailing colon)."""
    return normalize_whitespace(text).rstrip(":").strip()


def classify_heading(text: str, rules: List[SectionRule]) -> SectionType:
    """
    Classify a section heading with a ranked rule list.

    Rules are evaluated top to bottom; the first match wins.

    Args:
        text: Heading text
        rules: Ranked rules (see build_section_rules)

    Returns:
        Matched SectionType, or OTHER
    """
    heading = normalize_heading(text)
    for rule in rules:
        if rule.predicate(heading):
            return rule.section_type
    return SectionType.OTHER


# =============================================================================
# JOB ROLE HELPERS
# =============================================================================


def matches_title_keyword(text: str, heuristics: ParsingHeuristics) -> bool:
    """Check whether text contains a job-title keyword."""
    return bool(keyword_pattern(heuristics.title_keywords).search(text or ""))


def is_bullet_like(text: str, heuristics: ParsingHeuristics) -> bool:
    """
    Check whether a line reads like an accomplishment rather than a role heading.

    True for lines starting with a bullet marker or an action verb ("Led", "Built").
    """
    if re.match(ResumeMarkupPatterns.BULLET_MARKER, text or ""):
        return True
    return starts_with_action_verb(text, heuristics.action_verbs)
