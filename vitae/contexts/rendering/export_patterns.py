"""
Export Markup Patterns

Structural markers and line templates of the serialized resume dialect. The
external PDF renderer interprets the HTML comments:
- CONTACT_DIVIDER: horizontal rule under the contact line
- SUMMARY_START: summary whose "Professional Summary" heading is implied
- PAGE_BREAK: forced page break
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExportMarkers:
    """
    Markers consumed by the external renderer.
    """

    CONTACT_DIVIDER: str = "<!--CONTACT_DIVIDER-->"
    SUMMARY_START: str = "<!--SUMMARY_START-->"
    PAGE_BREAK: str = "<!-- PAGE BREAK -->"


@dataclass(frozen=True)
class ExportTemplates:
    """
    Line templates of the serialized document.
    """

    NAME: str = "# {name}"
    SECTION_TITLE: str = "## {title}"
    SUBHEADING: str = "### {text}"
    # Right-aligned date on a job-role heading
    DATE_SPAN: str = '<span style="float:right">{date}</span>'
    SKILL_CATEGORY: str = "**{category}:** {items}"
    BULLET: str = "- {text}"


def role_heading_line(title: str, date_range: str = "") -> str:
    """
    Format a job-role heading line.

    The date span is omitted entirely when there is no date.

    Example:
        >>> role_heading_line("Engineer", "2020 - 2023")
        '### Engineer <span style="float:right">2020 - 2023</span>'
        >>> role_heading_line("Engineer")
        '### Engineer'
    """
    text = title.strip()
    if date_range.strip():
        span = ExportTemplates.DATE_SPAN.format(date=date_range.strip())
        text = f"{text} {span}" if text else span
    return ExportTemplates.SUBHEADING.format(text=text)
