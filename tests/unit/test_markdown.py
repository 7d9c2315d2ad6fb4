"""Unit tests for Markdown conversion and text helpers."""

import pytest

from vitae.utils.markdown import (
    format_list_markdown,
    inline_markdown,
    looks_like_html,
    markdown_to_html,
)
from vitae.utils.markup import parse_fragment
from vitae.utils.text_processing import (
    extract_contact_info,
    keyword_pattern,
    looks_like_contact_line,
    slugify,
    split_items,
    truncate_display,
)


class TestMarkdownToHtml:
    """Test line-based Markdown conversion."""

    def test_headings_lists_and_paragraphs(self):
        """Should convert headings, group bullets and wrap other lines."""
        html = markdown_to_html("# Jane\n- a\n- b\n\nText **bold**")
        assert html == "<h1>Jane</h1>\n<ul>\n<li>a</li>\n<li>b</li>\n</ul>\n<p>Text <strong>bold</strong></p>"

    def test_numbered_list(self):
        """Should group numbered lines into an ordered list."""
        assert markdown_to_html("1. one\n2. two") == "<ol>\n<li>one</li>\n<li>two</li>\n</ol>"

    def test_block_html_passes_through(self):
        """Should leave block-level HTML lines untouched."""
        html = markdown_to_html('## Skills\n<p class="x">Raw</p>')
        assert html == '<h2>Skills</h2>\n<p class="x">Raw</p>'

    def test_bullet_character(self):
        """Should treat the • character as a bullet marker."""
        assert markdown_to_html("•Item") == "<ul>\n<li>Item</li>\n</ul>"

    def test_bold_label_is_not_a_bullet(self):
        """Should not read **Label:** as a '*' bullet."""
        assert markdown_to_html("**Tools:** Git") == "<p><strong>Tools:</strong> Git</p>"


@pytest.mark.unit
def test_looks_like_html():
    """Test HTML detection against the Markdown/HTML hybrid."""
    assert looks_like_html("<h1>Jane</h1><p>Text</p>")
    assert not looks_like_html("# Jane\n<p>Text</p>")
    assert not looks_like_html("Plain text")


@pytest.mark.unit
def test_inline_markdown_keeps_emphasis():
    """Test conversion of inline HTML back to Markdown markers."""
    root = parse_fragment("<p>Built <strong>fast</strong> <em>APIs</em></p>")
    assert inline_markdown(root) == "Built **fast** *APIs*"


@pytest.mark.unit
def test_inline_markdown_escapes_angle_brackets():
    """Test that text which would read back as markup is escaped."""
    assert inline_markdown(parse_fragment("<p>a &lt; b</p>")) == "a &lt; b"


@pytest.mark.unit
def test_format_list_markdown():
    """Test bullet and numbered list formatting."""
    assert format_list_markdown(["a", "b"]) == "- a\n- b"
    assert format_list_markdown(["a", "b"], "1.") == "1. a\n2. b"


@pytest.mark.unit
def test_slugify():
    """Test id-safe slugs."""
    assert slugify("Volunteer & Community Work") == "volunteer-community-work"
    assert slugify("!!!") == "section"


@pytest.mark.unit
def test_keyword_pattern_matches_word_starts():
    """Test that keywords match at word starts only."""
    pattern = keyword_pattern(["work", "engineer"])
    assert pattern.search("Work History")
    assert pattern.search("Software Engineering")
    assert not pattern.search("Relevant Coursework")
    assert not keyword_pattern([]).search("anything")


@pytest.mark.unit
def test_extract_contact_info():
    """Test pulling contact details out of a header line."""
    info = extract_contact_info("Austin, TX | 555-123-4567 | jane@example.com")
    assert info == {"email": "jane@example.com", "phone": "555-123-4567", "location": "Austin, TX"}


@pytest.mark.unit
def test_looks_like_contact_line():
    """Test contact line detection."""
    assert looks_like_contact_line("jane@example.com")
    assert looks_like_contact_line("Austin, TX | Remote")
    assert looks_like_contact_line("LinkedIn: janedoe", hints=["linkedin"])
    assert not looks_like_contact_line("Seasoned engineer building platforms.")


@pytest.mark.unit
def test_split_items_and_truncate():
    """Test delimited list splitting and display truncation."""
    assert split_items("Python, Go; SQL,,") == ["Python", "Go", "SQL"]
    assert truncate_display("a" * 100, width=10) == "aaaaaaa..."
    assert truncate_display("short") == "short"
