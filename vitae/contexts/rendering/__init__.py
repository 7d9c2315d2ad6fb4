"""
Rendering Context

Responsibilities:
- Serializes a document into the Markdown/HTML dialect of the PDF renderer
- Builds the structured JSON mirror of a document
- Applies export presets (suppressed titles, page breaks, layout)
- Reads input files and writes serialized output (persistence boundary)

Owns: Export dialect and markers, export presets, file I/O
Never: Changes document structure or section content
"""

from vitae.contexts.rendering.converter import (
    ConversionResult,
    check_roundtrip,
    convert_resume,
    export_resume,
    load_resume,
)
from vitae.contexts.rendering.export_options import ExportOptions, load_export_presets
from vitae.contexts.rendering.export_patterns import ExportMarkers
from vitae.contexts.rendering.exporter import serialize_resume
from vitae.contexts.rendering.json_export import sections_to_json_resume

__all__ = [
    # Serialization
    "serialize_resume",
    "sections_to_json_resume",
    "ExportMarkers",
    # Options
    "ExportOptions",
    "load_export_presets",
    # Orchestration
    "load_resume",
    "export_resume",
    "check_roundtrip",
    "convert_resume",
    "ConversionResult",
]
