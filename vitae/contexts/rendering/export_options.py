"""
Export Options and Presets

ExportOptions controls the presentation choices of serialize_resume. Named
presets live in export_presets.yaml and are composable:

Examples:
    # Implied summary heading and company line before the job title
    >>> options = ExportOptions.from_presets(["summary_implied", "layout_company_first"])

    # Preset plus explicit override
    >>> options = ExportOptions.from_presets(["summary_implied"], uppercase_section_titles=True)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()
DEFAULT_EXPORT_PRESETS_PATH = Path(__file__).parent / "export_presets.yaml"
EXPORT_PRESETS_PATH = Path(os.getenv("VITAE_EXPORT_PRESETS_PATH", str(DEFAULT_EXPORT_PRESETS_PATH)))


def load_export_presets(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load export_presets.yaml and flatten to a single-level dict.

    Collapses nested structure: summary.implied -> summary_implied

    Args:
        config_path: Optional path to config file (defaults to EXPORT_PRESETS_PATH)

    Returns:
        Flattened dict mapping preset names to option overrides
    """
    if config_path is None:
        config_path = EXPORT_PRESETS_PATH

    nested = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)

    flattened = {}
    for category, presets in nested.items():
        for name, config in presets.items():
            flattened[f"{category}_{name}"] = config

    return flattened


@dataclass
class ExportOptions:
    """
    Presentation options for the serializer.

    Attributes:
        suppressed_titles: Section titles replaced by spacing instead of "## title"
        page_break_before: A page break is emitted before headings containing any of these
        company_name_before_title: Emit the company line before the job-role heading
        uppercase_section_titles: Upper-case "## title" lines
    """

    suppressed_titles: List[str] = field(default_factory=list)
    page_break_before: List[str] = field(default_factory=list)
    company_name_before_title: bool = False
    uppercase_section_titles: bool = False

    def is_suppressed(self, title: str) -> bool:
        wanted = " ".join(title.split()).lower()
        return any(" ".join(t.split()).lower() == wanted for t in self.suppressed_titles)

    def needs_page_break(self, heading: str) -> bool:
        heading = heading.lower()
        return any(needle.lower() in heading for needle in self.page_break_before if needle.strip())

    @classmethod
    def from_presets(
        cls,
        preset_names: List[str],
        config_path: Optional[Path] = None,
        **overrides: Any,
    ) -> "ExportOptions":
        """
        Build options from named presets.

        Presets are applied in order, with later presets overriding earlier ones;
        keyword overrides are applied last.

        Args:
            preset_names: Preset names (e.g., ["summary_implied", "layout_uppercase"])
            config_path: Optional path to export_presets.yaml
            **overrides: Explicit field values

        Returns:
            ExportOptions

        Raises:
            ValueError: If a preset is not found
        """
        presets = load_export_presets(config_path) if preset_names else {}
        merged = OmegaConf.structured(cls)

        for preset_name in preset_names:
            if preset_name not in presets:
                available = list(presets.keys())
                raise ValueError(f"Preset '{preset_name}' not found. Available presets: {available}")
            merged = OmegaConf.merge(merged, presets[preset_name])

        if overrides:
            merged = OmegaConf.merge(merged, overrides)

        return OmegaConf.to_object(merged)
