"""
Markup Tree Utilities

A small HTML tokenizer and tree builder for resume fragments. Section content
travels through the system as HTML strings; this module turns those strings into
a lightweight element tree and back without depending on a browser DOM.

The tree builder is deliberately forgiving:
- Unclosed <p>, <li> and heading tags are closed implicitly
- Stray end tags are ignored
- Comments, <script> and <style> content are dropped
- Whitespace-only text between structural elements is discarded
"""

import html
import re
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Callable, Dict, Iterator, List, Optional, Union

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
LIST_TAGS = ("ul", "ol")

VOID_TAGS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "wbr"}
)

INLINE_TAGS = frozenset(
    {
        "a", "abbr", "b", "br", "cite", "code", "em", "font", "i", "img", "kbd", "mark",
        "q", "s", "small", "span", "strong", "sub", "sup", "time", "u", "var", "wbr",
    }
)

# Wrappers that are flattened when they hold block-level content
CONTAINER_TAGS = frozenset(
    {"#root", "html", "body", "div", "section", "article", "main", "aside", "nav", "footer", "center"}
)

BLOCK_TAGS = frozenset(
    set(HEADING_TAGS) | set(LIST_TAGS) | CONTAINER_TAGS
    | {"p", "li", "header", "table", "blockquote", "pre", "hr", "dl"}
)

# Whitespace-only text inside these is insignificant
_STRUCTURAL_TAGS = CONTAINER_TAGS | {"header", "ul", "ol", "table", "thead", "tbody", "tr", "dl"}

# Inner HTML of these is stripped when rendered
_TEXT_BLOCK_TAGS = frozenset(set(HEADING_TAGS) | {"p", "li", "td", "th", "dt", "dd", "blockquote"})

# Opening any of these implicitly closes an open <p>
_CLOSES_PARAGRAPH = frozenset(
    set(HEADING_TAGS) | set(LIST_TAGS)
    | {"p", "div", "section", "article", "header", "table", "blockquote", "hr", "pre", "dl"}
)

_SKIPPED_TAGS = frozenset({"script", "style", "head", "title"})

_WHITESPACE_RE = re.compile(r"\s+")
_FLOAT_RIGHT_RE = re.compile(r"float\s*:\s*right", re.IGNORECASE)


@dataclass(eq=False)
class Element:
    """
    Element node of a markup tree.

    Attributes:
        tag: Lowercase tag name ("#root" for the fragment root)
        attrs: Attribute mapping (values are unescaped strings)
        children: Ordered child nodes (Element or text string)
    """

    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List[Union["Element", str]] = field(default_factory=list)

    def append(self, node: Union["Element", str]) -> None:
        self.children.append(node)

    @property
    def elements(self) -> List["Element"]:
        """Direct element children (text nodes skipped)."""
        return [child for child in self.children if isinstance(child, Element)]

    def iter(self) -> Iterator["Element"]:
        """Depth-first iteration over descendant elements (self excluded)."""
        for child in self.elements:
            yield child
            yield from child.iter()

    def find_all(self, *tags: str) -> List["Element"]:
        return [el for el in self.iter() if el.tag in tags]

    def find(self, *tags: str) -> Optional["Element"]:
        for el in self.iter():
            if el.tag in tags:
                return el
        return None

    @property
    def text(self) -> str:
        return text_content(self)

    @property
    def heading_level(self) -> Optional[int]:
        if self.tag in HEADING_TAGS:
            return int(self.tag[1])
        return None

    @property
    def is_heading(self) -> bool:
        return self.tag in HEADING_TAGS

    def has_token(self, needle: str) -> bool:
        """Check whether any class or id token contains needle."""
        tokens = self.attrs.get("class", "").split() + self.attrs.get("id", "").split()
        return any(needle in token.lower() for token in tokens)


Node = Union[Element, str]


class _TreeBuilder(HTMLParser):
    """HTMLParser subclass that assembles an Element tree."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root = Element("#root")
        self._stack: List[Element] = [self.root]
        self._skip_depth = 0

    @property
    def _current(self) -> Element:
        return self._stack[-1]

    def _close_open(self, tag: str, barriers: frozenset) -> None:
        """Pop the nearest open `tag` unless a barrier element is reached first."""
        for i in range(len(self._stack) - 1, 0, -1):
            open_tag = self._stack[i].tag
            if open_tag == tag:
                del self._stack[i:]
                return
            if open_tag in barriers:
                return

    def handle_starttag(self, tag, attrs):
        tag = tag.lower()
        if tag in _SKIPPED_TAGS:
            self._skip_depth += 1
            return
        if self._skip_depth:
            return

        if tag in _CLOSES_PARAGRAPH:
            self._close_open("p", CONTAINER_TAGS | {"li", "td", "th", "header", "blockquote"})
        if tag == "li":
            self._close_open("li", frozenset(LIST_TAGS))
        if tag in HEADING_TAGS:
            for heading in HEADING_TAGS:
                self._close_open(heading, CONTAINER_TAGS | {"li", "header"})

        element = Element(tag, {name.lower(): (value or "") for name, value in attrs})
        self._current.append(element)
        if tag not in VOID_TAGS:
            self._stack.append(element)

    def handle_endtag(self, tag):
        tag = tag.lower()
        if tag in _SKIPPED_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
            return
        if self._skip_depth or tag in VOID_TAGS:
            return

        for i in range(len(self._stack) - 1, 0, -1):
            if self._stack[i].tag == tag:
                del self._stack[i:]
                return

    def handle_data(self, data):
        if self._skip_depth or not data:
            return
        if not data.strip() and self._current.tag in _STRUCTURAL_TAGS:
            return

        children = self._current.children
        if children and isinstance(children[-1], str):
            children[-1] += data
        else:
            children.append(data)


def parse_fragment(markup: str) -> Element:
    """
    Parse an HTML fragment into an Element tree.

    Args:
        markup: HTML string (may be a full document or a fragment)

    Returns:
        Root element with tag "#root"
    """
    builder = _TreeBuilder()
    builder.feed(markup or "")
    builder.close()
    return builder.root


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text)


def to_html(node: Node) -> str:
    """
    Render a node back to HTML.

    Text is whitespace-collapsed and escaped, so rendering a parsed tree twice
    produces identical output.
    """
    if isinstance(node, str):
        return html.escape(collapse_whitespace(node), quote=False)
    if node.tag == "#root":
        return inner_html(node).strip()

    attrs = "".join(
        f' {name}="{html.escape(value, quote=True)}"' for name, value in node.attrs.items()
    )
    if node.tag in VOID_TAGS:
        return f"<{node.tag}{attrs}>"
    return f"<{node.tag}{attrs}>{inner_html(node)}</{node.tag}>"


def inner_html(element: Element) -> str:
    inner = "".join(to_html(child) for child in element.children)
    if element.tag in _TEXT_BLOCK_TAGS:
        inner = inner.strip()
    return inner


def nodes_html(nodes: List[Node]) -> str:
    """Render a run of sibling nodes as trimmed HTML."""
    return "".join(to_html(node) for node in nodes).strip()


def text_content(node: Node, skip: Optional[Callable[[Element], bool]] = None) -> str:
    """
    Extract whitespace-normalized text from a node.

    Args:
        node: Element or text node
        skip: Optional predicate; matching elements (and their subtrees) are ignored

    Returns:
        Plain text with block boundaries and <br> rendered as single spaces
    """
    parts: List[str] = []

    def walk(current: Node) -> None:
        if isinstance(current, str):
            parts.append(current)
            return
        if skip is not None and skip(current):
            return
        if current.tag == "br":
            parts.append(" ")
            return
        separator = "" if current.tag in INLINE_TAGS else " "
        parts.append(separator)
        for child in current.children:
            walk(child)
        parts.append(separator)

    walk(node)
    return collapse_whitespace("".join(parts)).strip()


def nodes_text(nodes: List[Node]) -> str:
    return text_content(Element("span", children=list(nodes)))


def split_lines(element: Element) -> List[List[Node]]:
    """
    Split an element's children into lines at <br> boundaries.

    Returns:
        List of node runs; runs without visible text are dropped
    """
    lines: List[List[Node]] = [[]]
    for child in element.children:
        if isinstance(child, Element) and child.tag == "br":
            lines.append([])
        else:
            lines[-1].append(child)
    return [line for line in lines if nodes_text(line)]


def is_float_right(element: Element) -> bool:
    return element.tag == "span" and bool(_FLOAT_RIGHT_RE.search(element.attrs.get("style", "")))


def is_bold_only(element: Element) -> bool:
    """
    Check whether a block consists of a single bold run (e.g. <p><strong>Text</strong></p>).
    """
    meaningful = [
        child for child in element.children if not (isinstance(child, str) and not child.strip())
    ]
    return (
        len(meaningful) == 1
        and isinstance(meaningful[0], Element)
        and meaningful[0].tag in ("strong", "b")
        and bool(meaningful[0].text)
    )


def is_header_container(element: Element) -> bool:
    """Explicit header container: <header> or a wrapper with a 'header' class/id."""
    if element.tag == "header":
        return True
    return element.tag in ("div", "section") and element.has_token("header")


def _has_blocks(element: Element) -> bool:
    return any(el.tag in BLOCK_TAGS for el in element.iter())


def block_stream(root: Element) -> List[Element]:
    """
    Flatten a tree into its ordered sequence of block elements.

    Wrapper elements (div, section, ...) holding block content are descended into;
    runs of loose text and inline elements are wrapped into <p> blocks; wrappers
    with inline-only content become <p> blocks. Header containers stay atomic.

    Args:
        root: Element whose children should be flattened

    Returns:
        List of block-level elements in document order
    """
    blocks: List[Element] = []
    inline_run: List[Node] = []

    def flush() -> None:
        if nodes_text(inline_run):
            blocks.append(Element("p", children=list(inline_run)))
        inline_run.clear()

    for child in root.children:
        if isinstance(child, str) or child.tag in INLINE_TAGS:
            inline_run.append(child)
            continue

        flush()
        if child.tag in CONTAINER_TAGS and not is_header_container(child):
            if _has_blocks(child):
                blocks.extend(block_stream(child))
            elif child.text:
                blocks.append(Element("p", children=list(child.children)))
        else:
            blocks.append(child)
    flush()

    return blocks
