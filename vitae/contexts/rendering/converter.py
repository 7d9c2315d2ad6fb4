"""
Resume Conversion Orchestration

Persistence boundary of the package: the only module (besides the CLI scripts)
that reads or writes files.

This module exports:
- In-memory pair: load_resume (raw text -> SectionTree), export_resume (SectionTree -> text)
- Round-trip check: check_roundtrip
- File orchestration: convert_resume (input file -> serialized document + JSON mirror)
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from vitae.contexts.document.content_normalizer import normalize_sections
from vitae.contexts.document.hierarchy import SectionTree
from vitae.contexts.document.section_data_structure import Section
from vitae.contexts.intake.heuristics import ParsingHeuristics
from vitae.contexts.intake.resume_parser import parse_resume_document
from vitae.contexts.rendering.export_options import ExportOptions
from vitae.contexts.rendering.exporter import serialize_resume
from vitae.contexts.rendering.json_export import sections_to_json_resume
from vitae.contexts.rendering.logger import (
    _log_debug,
    _log_warning,
    log_conversion_result,
    log_conversion_start,
    setup_rendering_logger,
)

# File suffix -> parser format hint
SUFFIX_HINTS = {
    ".json": "json",
    ".html": "html",
    ".htm": "html",
    ".md": "markdown",
    ".markdown": "markdown",
}


@dataclass
class ConversionResult:
    """Result from the convert_resume() orchestration function."""

    success: bool
    input_path: Optional[Path] = None
    output_path: Optional[Path] = None
    json_output_path: Optional[Path] = None
    error: Optional[str] = None
    time_s: float = 0.0
    log_dir: Optional[Path] = None
    section_count: int = 0
    source_format: Optional[str] = None
    used_fallback: bool = False
    warnings: List[str] = field(default_factory=list)
    # Round-trip results
    roundtrip_stable: Optional[bool] = None
    roundtrip_drift: Optional[str] = None


def load_resume(
    raw: Union[str, Dict[str, Any]],
    hint: Optional[str] = None,
    heuristics: Optional[ParsingHeuristics] = None,
) -> SectionTree:
    """
    Parse and normalize a raw document into an editable SectionTree.

    Never raises for bad input: unusable documents load as the default document.
    """
    parsed = parse_resume_document(raw, hint=hint, heuristics=heuristics)
    return SectionTree(normalize_sections(parsed.sections))


def export_resume(tree: SectionTree, options: Optional[ExportOptions] = None) -> str:
    """Serialize a SectionTree with its own (always consistent) hierarchy."""
    return serialize_resume(tree.sections, tree.hierarchy, options)


def section_signature(sections: List[Section]) -> List[str]:
    """Ordered section types, the unit of round-trip comparison."""
    return [section.type.value for section in sections]


def check_roundtrip(
    document: str,
    options: Optional[ExportOptions] = None,
    heuristics: Optional[ParsingHeuristics] = None,
) -> Tuple[bool, Optional[str]]:
    """
    Check that a serialized document is stable under another round-trip.

    Parses the document, serializes it again and parses the result; both parses
    must yield the same number and types of sections.

    Args:
        document: Serialized document (output of serialize_resume)
        options: Export options used for the second serialization
        heuristics: Parser heuristics

    Returns:
        (stable, drift description or None)
    """
    first = load_resume(document, hint="markdown", heuristics=heuristics)
    second = load_resume(export_resume(first, options), hint="markdown", heuristics=heuristics)

    before, after = section_signature(first.sections), section_signature(second.sections)
    if before == after:
        return True, None
    if len(before) != len(after):
        return False, f"section count {len(before)} -> {len(after)}"
    changed = [f"{a} -> {b}" for a, b in zip(before, after) if a != b]
    return False, f"section types changed: {', '.join(changed)}"


def convert_resume(
    input_path: Path,
    output_path: Optional[Path] = None,
    json_output_path: Optional[Path] = None,
    options: Optional[ExportOptions] = None,
    hint: Optional[str] = None,
    heuristics: Optional[ParsingHeuristics] = None,
    log_dir: Optional[Path] = None,
    verify_roundtrip: bool = True,
) -> ConversionResult:
    """
    Convert a raw resume file into the serialized document and its JSON mirror.

    Steps:
    1. Setup logging
    2. Read and parse the input (format from hint or file suffix)
    3. Normalize and serialize
    4. Write the document and the JSON mirror
    5. Optionally check round-trip stability of the written document

    Args:
        input_path: Raw document (.md, .html, .json, .txt)
        output_path: Serialized document destination (default: input with .resume.md)
        json_output_path: Optional JSON mirror destination
        options: Export options
        hint: Parser format hint (default: derived from the file suffix)
        heuristics: Parser heuristics
        log_dir: Directory for the log file (None = console only)
        verify_roundtrip: Run check_roundtrip on the output

    Returns:
        ConversionResult; failures are reported in it rather than raised
    """
    start_time = time.time()
    input_path = Path(input_path)
    log_file = setup_rendering_logger(log_dir, input_path=input_path)
    log_conversion_start(input_path, log_file)

    result = ConversionResult(success=False, input_path=input_path, log_dir=log_dir)

    try:
        raw = input_path.read_text(encoding="utf-8")
        hint = hint or SUFFIX_HINTS.get(input_path.suffix.lower())
        _log_debug(f"Format hint: {hint or 'auto'}")

        parsed = parse_resume_document(raw, hint=hint, heuristics=heuristics)
        tree = SectionTree(normalize_sections(parsed.sections))
        result.source_format = parsed.source_format
        result.used_fallback = parsed.used_fallback
        result.warnings = list(parsed.warnings)
        result.section_count = len(tree)

        document = export_resume(tree, options)
        if output_path is None:
            output_path = input_path.with_suffix(".resume.md")
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(document, encoding="utf-8")
        result.output_path = output_path

        if json_output_path is not None:
            json_output_path = Path(json_output_path)
            json_output_path.parent.mkdir(parents=True, exist_ok=True)
            mirror = sections_to_json_resume(tree.sections)
            json_output_path.write_text(json.dumps(mirror, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
            result.json_output_path = json_output_path

        if verify_roundtrip:
            result.roundtrip_stable, result.roundtrip_drift = check_roundtrip(document, options, heuristics)

        result.success = True

    except Exception as e:
        result.error = f"{type(e).__name__}: {e}"
        _log_warning(f"Conversion aborted: {result.error}")

    finally:
        result.time_s = time.time() - start_time

    log_conversion_result(input_path, result, result.time_s)
    return result
