"""
Markdown Utilities

Utilities for converting between the Markdown/HTML hybrid that resumes arrive in
(and are exported as) and the HTML fragments stored on sections.
"""

import html
import re
from typing import List

from vitae.utils.markup import INLINE_TAGS, Element, Node, collapse_whitespace

_HEADING_RE = re.compile(r"^\s{0,3}(#{1,6})\s+(.*?)(?:\s+#+)?\s*$")
_HR_RE = re.compile(r"^\s*(?:-{3,}|\*{3,}|_{3,})\s*$")
_BULLET_RE = re.compile(r"^\s*(?:[-*+]\s+|•\s*)(.*)$")
_ORDERED_RE = re.compile(r"^\s*\d+[.)]\s+(.*)$")
_BLOCK_HTML_RE = re.compile(
    r"^\s*<(?:!|/?(?:h[1-6]|p|ul|ol|li|div|section|header|article|main|aside|nav|footer"
    r"|table|thead|tbody|tr|td|th|blockquote|pre|hr|br|html|body|head|style|script)\b)",
    re.IGNORECASE,
)
_HTML_DOCUMENT_RE = re.compile(r"<(?:h[1-6]|p|ul|ol|li|div|section|header|article|body|table)\b", re.I)
_MARKDOWN_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s", re.MULTILINE)

_BOLD_RE = re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*|__(?=\S)(.+?)(?<=\S)__")
_ITALIC_RE = re.compile(r"(?<![*\w])\*(?=[^\s*])([^*]+?)(?<=\S)\*(?![*\w])")
_CODE_RE = re.compile(r"`([^`]+)`")


def looks_like_html(text: str) -> bool:
    """
    Decide whether a document is HTML rather than the Markdown/HTML hybrid.

    A document with block-level HTML tags and no Markdown headings is treated as
    HTML and tokenized directly; anything else goes through line conversion.
    """
    return bool(_HTML_DOCUMENT_RE.search(text)) and not _MARKDOWN_HEADING_RE.search(text)


def inline_markdown_to_html(text: str) -> str:
    """
    Convert inline Markdown emphasis to HTML tags.

    Args:
        text: One line of Markdown (inline HTML is left untouched)

    Returns:
        Line with **bold**, __bold__, *italic* and `code` converted
    """
    text = _BOLD_RE.sub(lambda m: f"<strong>{m.group(1) or m.group(2)}</strong>", text)
    text = _ITALIC_RE.sub(r"<em>\1</em>", text)
    text = _CODE_RE.sub(r"<code>\1</code>", text)
    return text


def markdown_to_html(text: str) -> str:
    """
    Convert a Markdown/HTML hybrid document to HTML, line by line.

    Headings become <h1>-<h6>, bullet lines (-, *, +, •) and numbered lines are
    grouped into lists, block-level HTML lines pass through untouched, and every
    other non-blank line becomes its own paragraph.

    Args:
        text: Markdown/HTML hybrid text

    Returns:
        HTML string
    """
    out: List[str] = []
    open_list = None

    def close_list() -> None:
        nonlocal open_list
        if open_list:
            out.append(f"</{open_list}>")
            open_list = None

    def list_item(tag: str, content: str) -> None:
        nonlocal open_list
        if open_list != tag:
            close_list()
            out.append(f"<{tag}>")
            open_list = tag
        out.append(f"<li>{inline_markdown_to_html(content.strip())}</li>")

    for line in text.splitlines():
        if not line.strip():
            close_list()
            continue

        if _BLOCK_HTML_RE.match(line):
            close_list()
            out.append(line.strip())
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            close_list()
            level = len(heading.group(1))
            out.append(f"<h{level}>{inline_markdown_to_html(heading.group(2))}</h{level}>")
            continue

        if _HR_RE.match(line):
            close_list()
            out.append("<hr>")
            continue

        bullet = _BULLET_RE.match(line)
        if bullet:
            if bullet.group(1).strip():
                list_item("ul", bullet.group(1))
            continue

        ordered = _ORDERED_RE.match(line)
        if ordered:
            list_item("ol", ordered.group(1))
            continue

        close_list()
        out.append(f"<p>{inline_markdown_to_html(line.strip())}</p>")

    close_list()
    return "\n".join(out)


def _wrap(inner: str, marker: str) -> str:
    stripped = inner.strip()
    if not stripped:
        return inner
    lead = " " if inner[:1].isspace() else ""
    trail = " " if inner[-1:].isspace() else ""
    return f"{lead}{marker}{stripped}{marker}{trail}"


def inline_markdown(node: Node) -> str:
    """
    Convert an inline HTML run to Markdown text.

    Keeps bold, italic and code as Markdown markers, renders links as their text
    and <br> as a space, and escapes characters that would otherwise be read back
    as markup.

    Args:
        node: Element or text node

    Returns:
        Single-line Markdown text
    """

    def render(current: Node) -> str:
        if isinstance(current, str):
            return html.escape(collapse_whitespace(current), quote=False)
        if current.tag == "br":
            return " "

        inner = "".join(render(child) for child in current.children)
        if current.tag in ("strong", "b"):
            return _wrap(inner, "**")
        if current.tag in ("em", "i"):
            return _wrap(inner, "*")
        if current.tag == "code":
            return _wrap(inner, "`")
        if current.tag not in INLINE_TAGS:
            return f" {inner} "
        return inner

    return collapse_whitespace(render(node)).strip()


def nodes_markdown(nodes: List[Node]) -> str:
    """Convert a run of sibling inline nodes to Markdown text."""
    return inline_markdown(Element("span", children=list(nodes)))


def format_list_markdown(items: List[str], marker: str = "-") -> str:
    """
    Format items as a Markdown list.

    Args:
        items: List item texts (already Markdown)
        marker: "-" for bullets, "1." for a numbered list

    Returns:
        Newline-joined list lines
    """
    if marker == "1.":
        return "\n".join(f"{index}. {item}" for index, item in enumerate(items, 1))
    return "\n".join(f"{marker} {item}" for item in items)
