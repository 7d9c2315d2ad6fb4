"""Custom exceptions for document context with section references."""

from enum import Enum
from typing import Optional


class ViolationReason(str, Enum):
    """Why an operation was refused."""

    LAST_JOB_ROLE = "LastJobRole"
    FIXED_SECTION = "FixedSection"
    ANCHOR_IN_USE = "AnchorInUse"


_REASON_DESCRIPTIONS = {
    ViolationReason.LAST_JOB_ROLE: "the document must keep at least one job role",
    ViolationReason.FIXED_SECTION: "header and summary sections keep a fixed position",
    ViolationReason.ANCHOR_IN_USE: "anchor sections and sections with children cannot be deleted",
}


class InvariantViolation(Exception):
    """
    Exception raised when an operation would break a document invariant.

    The document is left untouched when this is raised.

    Attributes:
        reason: Machine-readable violation code
        section_id: Id of the section the operation targeted
        operation: Name of the refused operation (e.g., 'remove', 'move_up')
    """

    def __init__(
        self,
        reason: ViolationReason,
        section_id: str,
        operation: Optional[str] = None,
    ):
        self.reason = reason
        self.section_id = section_id
        self.operation = operation

        parts = [f"{reason.value}: cannot {operation or 'modify'} section '{section_id}'"]
        parts.append(f"({_REASON_DESCRIPTIONS[reason]})")

        super().__init__(" ".join(parts))


class SectionNotFoundError(KeyError):
    """
    Exception raised when an operation references an unknown section id.

    Attributes:
        section_id: The id that could not be resolved
    """

    def __init__(self, section_id: str):
        self.section_id = section_id
        super().__init__(section_id)

    def __str__(self) -> str:
        return f"No section with id '{self.section_id}'"


class DuplicateSectionError(ValueError):
    """
    Exception raised when a section would be added with an id already in use.

    Attributes:
        section_id: The colliding id
    """

    def __init__(self, section_id: str):
        self.section_id = section_id
        super().__init__(f"Section id '{section_id}' is already in use")
