"""
Intake Context

Responsibilities:
- Detects the format of a raw resume (HTML, Markdown/HTML hybrid, JSON)
- Preprocesses text (unicode cleanup, code fences, export markers)
- Classifies section headings with a ranked, configurable rule list
- Splits experience sections into job roles
- Falls back to the minimal default document when nothing usable is found

Owns: Parsing heuristics, heuristics.yaml, JSON resume mapping
Never: Mutates an existing document or serializes one
"""

from vitae.contexts.intake.heuristics import ParsingHeuristics, default_heuristics, load_heuristics
from vitae.contexts.intake.json_resume import (
    extract_json_payload,
    is_resume_json,
    json_resume_to_sections,
)
from vitae.contexts.intake.normalizer import preprocess_resume_text
from vitae.contexts.intake.resume_parser import (
    MarkupResumeParser,
    ParsedResume,
    detect_format,
    parse_resume,
    parse_resume_document,
)
from vitae.contexts.intake.section_patterns import SectionRule, build_section_rules, classify_heading

__all__ = [
    # Parsing
    "parse_resume",
    "parse_resume_document",
    "ParsedResume",
    "MarkupResumeParser",
    "detect_format",
    "preprocess_resume_text",
    # JSON input
    "extract_json_payload",
    "is_resume_json",
    "json_resume_to_sections",
    # Heuristics
    "ParsingHeuristics",
    "load_heuristics",
    "default_heuristics",
    "SectionRule",
    "build_section_rules",
    "classify_heading",
]
