"""
Document Context

Responsibilities:
- Defines the section model (typed, editable resume sections with parent links)
- Keeps the flat section list and its derived hierarchy consistent under edits
- Normalizes section content into canonical HTML fragments
- Merges externally generated content suggestions into existing sections

Owns: Section model, document invariants, hierarchy operations, canonical content shape
Never: Reads or writes files, or decides how a document is rendered
"""

from vitae.contexts.document.content_normalizer import normalize_sections
from vitae.contexts.document.exceptions import (
    DuplicateSectionError,
    InvariantViolation,
    SectionNotFoundError,
    ViolationReason,
)
from vitae.contexts.document.hierarchy import (
    SectionTree,
    build_section_hierarchy,
    check_hierarchy_consistency,
    default_document,
)
from vitae.contexts.document.role_heading import (
    RoleHeading,
    format_role_heading,
    parse_role_heading,
)
from vitae.contexts.document.section_data_structure import Section, SectionType
from vitae.contexts.document.suggestion_merger import (
    MatchHints,
    apply_suggestion,
    resolve_suggestion_target,
)

__all__ = [
    # Section model
    "Section",
    "SectionType",
    "RoleHeading",
    "parse_role_heading",
    "format_role_heading",
    # Hierarchy management
    "SectionTree",
    "build_section_hierarchy",
    "check_hierarchy_consistency",
    "default_document",
    # Normalization and merging
    "normalize_sections",
    "apply_suggestion",
    "resolve_suggestion_target",
    "MatchHints",
    # Errors
    "InvariantViolation",
    "ViolationReason",
    "SectionNotFoundError",
    "DuplicateSectionError",
]
