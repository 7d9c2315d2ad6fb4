"""
Section Hierarchy Management

The flat, ordered section list is the single source of truth for a document. The
hierarchy map (parent id -> ordered child ids) is a derived index rebuilt from the
list on every mutation, so the two can never disagree.

SectionTree wraps both and exposes the editing operations. Each operation builds
a new list, validates it and commits list and hierarchy together; a refused
operation raises before anything is committed.
"""

from collections import Counter
from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Optional, Union

from vitae.contexts.document.exceptions import (
    DuplicateSectionError,
    InvariantViolation,
    SectionNotFoundError,
    ViolationReason,
)
from vitae.contexts.document.fragments import render_fragment
from vitae.contexts.document.logger import log_operation, log_rejected_operation
from vitae.contexts.document.section_data_structure import (
    ANCHOR_IDS,
    ANCHOR_TITLES,
    DEFAULT_TITLES,
    EXPERIENCE_ID,
    HEADER_ID,
    SUMMARY_ID,
    Section,
    SectionType,
    new_section_id,
)

Hierarchy = Dict[str, List[str]]


def build_section_hierarchy(sections: Iterable[Section]) -> Hierarchy:
    """
    Derive the hierarchy map from a flat section list.

    Every section with a parent_id appears exactly once in its parent's list, in
    flat-list order. Parents that are absent from the list still get an entry so
    orphans stay visible.

    Args:
        sections: Flat, ordered section list

    Returns:
        Dict mapping parent id to ordered child ids
    """
    hierarchy: Hierarchy = {}
    for section in sections:
        if section.parent_id:
            hierarchy.setdefault(section.parent_id, []).append(section.id)
    return hierarchy


def check_hierarchy_consistency(sections: List[Section], hierarchy: Hierarchy) -> List[str]:
    """
    List every disagreement between a hierarchy map and the flat list.

    Args:
        sections: Flat, ordered section list
        hierarchy: Hierarchy map to check

    Returns:
        Human-readable problem descriptions (empty when consistent)
    """
    expected = build_section_hierarchy(sections)
    known_ids = {section.id for section in sections}
    problems = []

    for parent_id in sorted(set(expected) | set(hierarchy)):
        want = expected.get(parent_id, [])
        have = hierarchy.get(parent_id, [])
        if want == have:
            continue
        reported = len(problems)
        for child_id in have:
            if child_id not in known_ids:
                problems.append(f"'{parent_id}' lists unknown child '{child_id}'")
            elif child_id not in want:
                problems.append(f"'{parent_id}' lists '{child_id}' which is not its child")
        for child_id in want:
            if child_id not in have:
                problems.append(f"'{child_id}' is missing from the children of '{parent_id}'")
        duplicates = [child_id for child_id, count in Counter(have).items() if count > 1]
        for child_id in duplicates:
            problems.append(f"'{child_id}' is listed more than once under '{parent_id}'")
        if len(problems) == reported:
            problems.append(f"children of '{parent_id}' are out of order")

    return problems


def document_problems(sections: List[Section]) -> List[str]:
    """
    List document-level invariant violations of a section list.

    Checks: one HEADER at index 0, reserved SUMMARY (if any) at index 1, unique ids.
    """
    problems = []
    headers = [i for i, section in enumerate(sections) if section.type == SectionType.HEADER]
    if headers != [0]:
        problems.append(f"expected exactly one HEADER at index 0, found at {headers}")

    summary_positions = [i for i, section in enumerate(sections) if section.id == SUMMARY_ID]
    if summary_positions and summary_positions != [1]:
        problems.append(f"reserved summary found at {summary_positions}, expected index 1")

    duplicates = [sid for sid, count in Counter(s.id for s in sections).items() if count > 1]
    if duplicates:
        problems.append(f"duplicate ids: {duplicates}")

    return problems


def default_document() -> List[Section]:
    """
    Build the minimal default document.

    Header, empty Summary, Experience anchor and one placeholder Job Role. Used
    when parsing produces nothing usable.
    """
    return [
        Section(
            id=HEADER_ID,
            type=SectionType.HEADER,
            title=DEFAULT_TITLES[SectionType.HEADER],
            content=render_fragment("header", name="Your Name", contact_line=""),
        ),
        Section(
            id=SUMMARY_ID,
            type=SectionType.SUMMARY,
            title=DEFAULT_TITLES[SectionType.SUMMARY],
            content="",
        ),
        Section(
            id=EXPERIENCE_ID,
            type=SectionType.EXPERIENCE,
            title=ANCHOR_TITLES[SectionType.EXPERIENCE],
            content="",
        ),
        Section(
            id=new_section_id("job-role"),
            type=SectionType.JOB_ROLE,
            title=DEFAULT_TITLES[SectionType.JOB_ROLE],
            content=render_fragment("placeholder_job_role"),
            parent_id=EXPERIENCE_ID,
        ),
    ]


class SectionTree:
    """
    Flat section list plus its derived hierarchy, edited through invariant-preserving
    operations.

    Example:
        >>> tree = SectionTree(parse_resume(markdown_text))
        >>> role = tree.add_job_role()
        >>> tree.move_up(role.id)
        True
        >>> tree.remove(role.id)
    """

    def __init__(self, sections: Iterable[Section] = ()):
        sections = list(sections)
        self._check_unique(sections)
        self._sections: List[Section] = sections
        self._hierarchy: Hierarchy = build_section_hierarchy(sections)

    # Read access

    @property
    def sections(self) -> List[Section]:
        return list(self._sections)

    @property
    def hierarchy(self) -> Hierarchy:
        return {parent_id: list(children) for parent_id, children in self._hierarchy.items()}

    def __len__(self) -> int:
        return len(self._sections)

    def __iter__(self) -> Iterator[Section]:
        return iter(list(self._sections))

    def __contains__(self, section_id: str) -> bool:
        return any(section.id == section_id for section in self._sections)

    def _index(self, section_id: str) -> int:
        for i, section in enumerate(self._sections):
            if section.id == section_id:
                return i
        raise SectionNotFoundError(section_id)

    def get(self, section_id: str) -> Section:
        return self._sections[self._index(section_id)]

    def parent_of(self, section_id: str) -> Optional[Section]:
        """Return the parent section, or None for top-level sections and orphans."""
        parent_id = self.get(section_id).parent_id
        if parent_id and parent_id in self:
            return self.get(parent_id)
        return None

    def children_of(self, parent_id: str) -> List[Section]:
        """Ordered children of a section (empty when it has none)."""
        return [self.get(child_id) for child_id in self._hierarchy.get(parent_id, [])]

    def descendant_ids(self, section_id: str) -> List[str]:
        """All descendants of a section, depth-first in hierarchy order."""
        found: List[str] = []
        pending = list(reversed(self._hierarchy.get(section_id, [])))
        while pending:
            child_id = pending.pop()
            if child_id in found or child_id == section_id:
                continue
            found.append(child_id)
            pending.extend(reversed(self._hierarchy.get(child_id, [])))
        return found

    def is_top_level(self, section: Section) -> bool:
        return not section.parent_id or section.parent_id not in self

    def can_move(self, section: Union[Section, str]) -> bool:
        """False for HEADER and the reserved SUMMARY; True otherwise."""
        if isinstance(section, str):
            section = self.get(section)
        return not section.is_fixed

    def removal_violation(self, section_id: str) -> Optional[ViolationReason]:
        """
        Report why a section cannot be removed.

        Returns:
            ViolationReason, or None when removal is allowed
        """
        section = self.get(section_id)
        if section.is_fixed:
            return ViolationReason.FIXED_SECTION
        if section.is_anchor or self._hierarchy.get(section_id):
            return ViolationReason.ANCHOR_IN_USE
        if section.type == SectionType.JOB_ROLE:
            roles = [s for s in self._sections if s.type == SectionType.JOB_ROLE]
            if len(roles) <= 1:
                return ViolationReason.LAST_JOB_ROLE
        return None

    # Commit

    @staticmethod
    def _check_unique(sections: List[Section]) -> None:
        seen = set()
        for section in sections:
            if section.id in seen:
                raise DuplicateSectionError(section.id)
            seen.add(section.id)

    def _commit(self, sections: List[Section]) -> None:
        self._check_unique(sections)
        hierarchy = build_section_hierarchy(sections)
        self._sections, self._hierarchy = sections, hierarchy

    # Reordering

    def move_up(self, section_id: str) -> bool:
        """
        Move a section one step up among its siblings.

        Returns:
            True if moved, False at a boundary

        Raises:
            InvariantViolation: For HEADER and the reserved SUMMARY
            SectionNotFoundError: For unknown ids
        """
        return self._move(section_id, -1)

    def move_down(self, section_id: str) -> bool:
        """Move a section one step down among its siblings (see move_up)."""
        return self._move(section_id, 1)

    def _move(self, section_id: str, step: int) -> bool:
        operation = "move_up" if step < 0 else "move_down"
        section = self.get(section_id)
        if not self.can_move(section):
            log_rejected_operation(operation, section_id, ViolationReason.FIXED_SECTION.value)
            raise InvariantViolation(ViolationReason.FIXED_SECTION, section_id, operation)

        if self.is_top_level(section):
            moved = self._move_block(section_id, step)
        else:
            moved = self._move_child(section, step)

        if moved:
            log_operation(operation, section_id)
        return moved

    def _move_child(self, section: Section, step: int) -> bool:
        siblings = self._hierarchy[section.parent_id]
        position = siblings.index(section.id)
        target = position + step
        if target < 0 or target >= len(siblings):
            return False

        first, second = sorted((section.id, siblings[target]), key=self._index)
        first_block, second_block = self._family_block(first), self._family_block(second)
        members = {s.id for s in first_block + second_block}
        start = min(self._index(member) for member in members)
        rest = [s for s in self._sections if s.id not in members]
        self._commit(rest[:start] + second_block + first_block + rest[start:])
        return True

    def _family_block(self, section_id: str) -> List[Section]:
        """A section followed by its descendants in flat order."""
        members = set(self.descendant_ids(section_id))
        members.discard(section_id)
        return [self.get(section_id)] + [s for s in self._sections if s.id in members]

    def _top_level_blocks(self) -> List[List[Section]]:
        """Top-level sections, each followed by its descendants in flat order."""
        blocks = []
        for section in self._sections:
            if not self.is_top_level(section):
                continue
            blocks.append(self._family_block(section.id))
        return blocks

    def _move_block(self, section_id: str, step: int) -> bool:
        blocks = self._top_level_blocks()
        movable = [i for i, block in enumerate(blocks) if not block[0].is_fixed]
        position = next(n for n, i in enumerate(movable) if blocks[i][0].id == section_id)
        target = position + step
        if target < 0 or target >= len(movable):
            return False

        a, b = movable[position], movable[target]
        blocks[a], blocks[b] = blocks[b], blocks[a]
        ordered = [section for block in blocks for section in block]
        # Sections caught in a parent cycle belong to no block
        placed = {section.id for section in ordered}
        ordered.extend(s for s in self._sections if s.id not in placed)
        self._commit(ordered)
        return True

    # Removal

    def remove(self, section_id: str) -> Section:
        """
        Remove a section.

        Returns:
            The removed section

        Raises:
            InvariantViolation: FixedSection (header, reserved summary), AnchorInUse
                (anchor or section with children), LastJobRole
            SectionNotFoundError: For unknown ids
        """
        section = self.get(section_id)
        violation = self.removal_violation(section_id)
        if violation is not None:
            log_rejected_operation("remove", section_id, violation.value)
            raise InvariantViolation(violation, section_id, "remove")

        self._commit([s for s in self._sections if s.id != section_id])
        log_operation("remove", section_id, section.type.value)
        return section

    # Insertion

    def _ensure_anchor(self, sections: List[Section], parent_id: str) -> List[Section]:
        if any(s.id == parent_id for s in sections):
            return sections
        if parent_id not in ANCHOR_IDS:
            raise SectionNotFoundError(parent_id)

        anchor_type = ANCHOR_IDS[parent_id]
        anchor = Section(id=parent_id, type=anchor_type, title=ANCHOR_TITLES[anchor_type])
        log_operation("synthesize anchor", parent_id)
        return sections + [anchor]

    def add_child(self, parent_id: str, section: Section) -> Section:
        """
        Add a child section after the parent's last descendant.

        A missing anchor parent (experience, education, skills) is created first.

        Args:
            parent_id: Id of the parent section
            section: Section to add (its parent_id is overwritten)

        Returns:
            The added section

        Raises:
            DuplicateSectionError: If the section id is already in use
            SectionNotFoundError: If a non-anchor parent does not exist
        """
        if section.id in self:
            raise DuplicateSectionError(section.id)

        sections = self._ensure_anchor(list(self._sections), parent_id)
        child = replace(section, parent_id=parent_id)

        probe = SectionTree(sections)
        family = {parent_id, *probe.descendant_ids(parent_id)}
        insert_at = max(i for i, s in enumerate(sections) if s.id in family) + 1
        sections.insert(insert_at, child)

        self._commit(sections)
        log_operation("add_child", child.id, f"parent '{parent_id}'")
        return child

    def add_section(self, section: Optional[Section] = None, index: Optional[int] = None) -> Section:
        """
        Add a top-level section.

        Args:
            section: Section to add (default: an OTHER placeholder section)
            index: Flat position (default: end); never before the fixed sections

        Returns:
            The added section
        """
        if section is None:
            title = DEFAULT_TITLES[SectionType.OTHER]
            section = Section(
                id=new_section_id(title),
                type=SectionType.OTHER,
                title=title,
                content=render_fragment("placeholder_section"),
            )
        if section.parent_id:
            return self.add_child(section.parent_id, section)
        if section.id in self:
            raise DuplicateSectionError(section.id)

        sections = list(self._sections)
        fixed_prefix = 0
        while fixed_prefix < len(sections) and sections[fixed_prefix].is_fixed:
            fixed_prefix += 1
        position = len(sections) if index is None else max(index, fixed_prefix)
        sections.insert(position, section)

        self._commit(sections)
        log_operation("add_section", section.id, section.type.value)
        return section

    def experience_anchor_id(self) -> str:
        """Id of the EXPERIENCE section job roles attach to (reserved id if absent)."""
        if EXPERIENCE_ID in self:
            return EXPERIENCE_ID
        for section in self._sections:
            if section.type == SectionType.EXPERIENCE:
                return section.id
        return EXPERIENCE_ID

    def add_job_role(self, content: Optional[str] = None, title: Optional[str] = None) -> Section:
        """Add a JOB_ROLE under the experience anchor (placeholder content by default)."""
        role = Section(
            id=new_section_id("job-role"),
            type=SectionType.JOB_ROLE,
            title=title or DEFAULT_TITLES[SectionType.JOB_ROLE],
            content=content if content is not None else render_fragment("placeholder_job_role"),
        )
        return self.add_child(self.experience_anchor_id(), role)

    def add_summary(self, content: Optional[str] = None) -> Section:
        """
        Add the reserved SUMMARY right after the header.

        A fresh id is used when another section already holds the reserved id.

        Raises:
            DuplicateSectionError: If the document already has a SUMMARY
        """
        existing = next((s for s in self._sections if s.type == SectionType.SUMMARY), None)
        if existing is not None:
            raise DuplicateSectionError(existing.id)

        summary_id = SUMMARY_ID if SUMMARY_ID not in self else new_section_id("summary")
        summary = Section(
            id=summary_id,
            type=SectionType.SUMMARY,
            title=DEFAULT_TITLES[SectionType.SUMMARY],
            content=content if content is not None else render_fragment("placeholder_summary"),
        )
        sections = list(self._sections)
        position = 1 if sections and sections[0].is_header else 0
        sections.insert(position, summary)

        self._commit(sections)
        log_operation("add_summary", summary.id)
        return summary

    # Editing

    def update_content(self, section_id: str, content: str) -> Section:
        return self._replace(section_id, content=content)

    def update_title(self, section_id: str, title: str) -> Section:
        return self._replace(section_id, title=title)

    def _replace(self, section_id: str, **changes) -> Section:
        index = self._index(section_id)
        updated = replace(self._sections[index], **changes)
        sections = list(self._sections)
        sections[index] = updated
        self._commit(sections)
        log_operation("update", section_id, ", ".join(sorted(changes)))
        return updated
