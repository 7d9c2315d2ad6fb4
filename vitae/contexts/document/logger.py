"""
Document context logger.

Provides logging interface for document context with automatic [document] prefix.
All document modules should import from this module, not from utils.logger directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[document]"


def _log_info(message: str) -> None:
    """Log info message with [document] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [document] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [document] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [document] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [document] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level document-specific logging helpers


def log_operation(operation: str, section_id: str, detail: str = "") -> None:
    """Log a committed hierarchy operation."""
    suffix = f" ({detail})" if detail else ""
    _log_debug(f"{operation} '{section_id}'{suffix}")


def log_rejected_operation(operation: str, section_id: str, reason: str) -> None:
    """Log an operation refused because it would break a document invariant."""
    _log_warning(f"Rejected {operation} of '{section_id}': {reason}")
