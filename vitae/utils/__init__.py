"""
Shared utilities for VITAE.

Common functionality used across contexts:
- Markup tokenizing and tree building
- Markdown conversion
- Text processing
- Logging setup
"""

from vitae.utils.markup import Element, parse_fragment, to_html
from vitae.utils.text_processing import normalize_whitespace, slugify

__all__ = ["Element", "parse_fragment", "to_html", "normalize_whitespace", "slugify"]
