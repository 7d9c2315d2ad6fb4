"""
VITAE - Versioned Interchange of Typed, Arranged Employment sections

A domain-driven resume document model that parses loosely structured resumes into
typed, editable sections, keeps their structure consistent under edits, and
serializes them back into a Markdown/HTML hybrid for PDF rendering.

Architecture:
- Document Context: Section model, hierarchy management, normalization, suggestion merging
- Intake Context: Heuristic parsing of HTML, Markdown and JSON resumes
- Rendering Context: Serialization, JSON export and file conversion
"""

__version__ = "0.1.0"
