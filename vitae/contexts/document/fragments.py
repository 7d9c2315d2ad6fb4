"""
Fragment Registry

Loads and caches the Jinja2 templates used to build HTML fragments for sections
the system synthesizes itself (JSON import, placeholders, default document).
"""

from pathlib import Path
from typing import Dict, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateNotFound

from vitae.utils.markup import parse_fragment, to_html

TEMPLATES_PATH = Path(__file__).parent / "templates"


class FragmentRegistry:
    """
    Registry for loading and caching fragment templates.

    Templates live in vitae/contexts/document/templates/{name}.html.jinja and are
    rendered with HTML autoescaping, so text from imported data is always escaped.
    """

    def __init__(self, templates_path: Optional[Path] = None):
        """
        Initialize the fragment registry.

        Args:
            templates_path: Directory holding *.html.jinja files. Defaults to the
                            packaged templates directory
        """
        if templates_path is None:
            templates_path = TEMPLATES_PATH

        self.templates_path = templates_path
        self._cache: Dict[str, Template] = {}

        self.env = Environment(
            loader=FileSystemLoader(str(templates_path)),
            autoescape=True,
            # Catches silent failures
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def get_template(self, name: str) -> Template:
        """
        Get a template by fragment name, loading and caching it if necessary.

        Args:
            name: Fragment name (e.g., 'job_role')

        Returns:
            Jinja2 Template object

        Raises:
            TemplateNotFound: If template file doesn't exist
        """
        if name in self._cache:
            return self._cache[name]

        template_file = f"{name}.html.jinja"
        try:
            template = self.env.get_template(template_file)
        except TemplateNotFound as e:
            raise TemplateNotFound(
                f"Fragment template '{name}' not found at {self.templates_path / template_file}"
            ) from e

        self._cache[name] = template
        return template

    def render(self, fragment: str, **context) -> str:
        """
        Render a fragment to compact HTML.

        Args:
            fragment: Fragment name
            **context: Template variables

        Returns:
            HTML fragment with insignificant whitespace removed
        """
        rendered = self.get_template(fragment).render(**context)
        return to_html(parse_fragment(rendered))

    def clear_cache(self):
        """Clear the template cache."""
        self._cache.clear()

    def is_cached(self, name: str) -> bool:
        return name in self._cache


_default_registry: Optional[FragmentRegistry] = None


def get_fragment_registry() -> FragmentRegistry:
    """Return the shared registry for the packaged templates."""
    global _default_registry
    if _default_registry is None:
        _default_registry = FragmentRegistry()
    return _default_registry


def render_fragment(fragment: str, **context) -> str:
    """Render a packaged fragment template (see FragmentRegistry.render)."""
    return get_fragment_registry().render(fragment, **context)
