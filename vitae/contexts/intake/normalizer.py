"""
Resume text normalizer for the Intake context.

Preprocesses raw resume text before format detection and parsing: invisible and
typographic characters are normalized, a wrapping code fence is removed, and the
exporter's structural markers are turned back into something the parser reads.

Design principle: Normalize BEFORE parsing, so the parser only deals with one
spelling of each construct.
"""

import re
import unicodedata

from vitae.contexts.intake.section_patterns import ResumeMarkupPatterns

# Unicode replacements: problematic char → ASCII equivalent
UNICODE_REPLACEMENTS = {
    # Spaces
    "\u00a0": " ",  # non-breaking space → space
    "\u202f": " ",  # narrow no-break space
    # Zero-width characters → remove
    "\u200b": "",  # zero-width space
    "\u200c": "",  # zero-width non-joiner
    "\u200d": "",  # zero-width joiner
    "\u2060": "",  # word joiner
    "\ufeff": "",  # BOM / zero-width no-break space
    # Quotes
    "\u2018": "'",  # left single quote
    "\u2019": "'",  # right single quote
    "\u201c": '"',  # left double quote
    "\u201d": '"',  # right double quote
}

SUMMARY_HEADING = "<h2>Professional Summary</h2>"


def normalize_unicode(text: str) -> str:
    """
    Normalize unicode characters that cause parsing issues.

    Dashes and bullet characters are left alone: they carry meaning for date
    ranges and bullet detection.

    Args:
        text: Raw text possibly containing problematic unicode

    Returns:
        Text with normalized unicode and Unix line endings
    """
    text = unicodedata.normalize("NFC", text)

    for char, replacement in UNICODE_REPLACEMENTS.items():
        text = text.replace(char, replacement)

    return text.replace("\r\n", "\n").replace("\r", "\n")


def strip_code_fence(text: str) -> str:
    """
    Remove a Markdown code fence wrapping the whole document.

    Example:
        >>> strip_code_fence("```markdown\\n# Jane\\n```")
        '# Jane'
    """
    match = re.match(ResumeMarkupPatterns.CODE_FENCE, text, re.DOTALL)
    if match:
        return match.group(1)
    return text


def replace_export_markers(text: str) -> str:
    """
    Turn exporter markers back into parseable structure.

    <!--SUMMARY_START--> stands for an implied summary heading; the contact
    divider and page breaks carry no content and are removed.
    """
    text = re.sub(ResumeMarkupPatterns.SUMMARY_START, SUMMARY_HEADING, text)
    text = re.sub(ResumeMarkupPatterns.CONTACT_DIVIDER, "", text)
    text = re.sub(ResumeMarkupPatterns.PAGE_BREAK, "", text)
    return text


def preprocess_resume_text(text: str) -> str:
    """
    Preprocess raw resume text before parsing.

    This is the main entry point for text normalization.
    Handles:
    - Unicode normalization (BOM, zero-width characters, non-breaking spaces, smart quotes)
    - Removing a wrapping code fence
    - Export markers (SUMMARY_START → summary heading, dividers removed)

    Args:
        text: Raw resume text

    Returns:
        Normalized text ready for format detection
    """
    text = normalize_unicode(text)
    text = strip_code_fence(text.strip())
    text = replace_export_markers(text)
    return text.strip()
