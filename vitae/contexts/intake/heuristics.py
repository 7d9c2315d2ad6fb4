"""
Parsing Heuristics Configuration

Loads the keyword tables that drive the heuristic parser from heuristics.yaml.
The packaged file can be replaced through the VITAE_HEURISTICS_PATH environment
variable or an explicit path.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from dotenv import load_dotenv
from omegaconf import OmegaConf

from vitae.contexts.document.section_data_structure import SectionType

load_dotenv()
DEFAULT_HEURISTICS_PATH = Path(__file__).parent / "heuristics.yaml"
HEURISTICS_PATH = Path(os.getenv("VITAE_HEURISTICS_PATH", str(DEFAULT_HEURISTICS_PATH)))


@dataclass(frozen=True)
class ParsingHeuristics:
    """
    Keyword tables for section classification and job-role splitting.

    Attributes:
        section_rules: Ordered (SectionType, keywords) pairs; first match wins
        title_keywords: Job-title keywords that mark a role heading
        action_verbs: Verbs that mark a line as an accomplishment bullet
        contact_hints: Words that mark a header line as contact info
    """

    section_rules: Tuple[Tuple[SectionType, Tuple[str, ...]], ...] = ()
    title_keywords: Tuple[str, ...] = ()
    action_verbs: Tuple[str, ...] = ()
    contact_hints: Tuple[str, ...] = ()

    def with_title_keywords(self, extra: Iterable[str]) -> "ParsingHeuristics":
        """
        Return a copy with additional job-title keywords.

        Example:
            >>> heuristics = load_heuristics().with_title_keywords(["barista", "founder"])
        """
        merged = list(self.title_keywords)
        for keyword in extra:
            keyword = keyword.strip().lower()
            if keyword and keyword not in merged:
                merged.append(keyword)
        return replace(self, title_keywords=tuple(merged))


def _keywords(values: Optional[List[str]]) -> Tuple[str, ...]:
    return tuple(str(value).strip().lower() for value in (values or []) if str(value).strip())


def load_heuristics(config_path: Optional[Path] = None) -> ParsingHeuristics:
    """
    Load heuristics.yaml into a ParsingHeuristics instance.

    Args:
        config_path: Optional path to a heuristics file (defaults to HEURISTICS_PATH)

    Returns:
        ParsingHeuristics

    Raises:
        ValueError: If a rule names an unknown section type
    """
    if config_path is None:
        config_path = HEURISTICS_PATH

    data = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)

    rules = []
    for rule in data.get("section_rules", []):
        type_name = str(rule.get("type", "")).upper()
        if type_name not in SectionType.__members__:
            raise ValueError(f"Unknown section type '{type_name}' in {config_path}")
        rules.append((SectionType[type_name], _keywords(rule.get("keywords"))))

    return ParsingHeuristics(
        section_rules=tuple(rules),
        title_keywords=_keywords(data.get("title_keywords")),
        action_verbs=_keywords(data.get("action_verbs")),
        contact_hints=_keywords(data.get("contact_hints")),
    )


_default_heuristics: Optional[ParsingHeuristics] = None


def default_heuristics() -> ParsingHeuristics:
    """Return the heuristics loaded from HEURISTICS_PATH (cached)."""
    global _default_heuristics
    if _default_heuristics is None:
        _default_heuristics = load_heuristics()
    return _default_heuristics
