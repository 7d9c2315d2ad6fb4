"""
Intake context logger.

Provides logging interface for intake context with automatic [intake] prefix.
All intake modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from vitae.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[intake]"


def setup_intake_logger(
    log_dir: Optional[Path] = None, source: str = "", console_level: str = "INFO"
) -> Optional[Path]:
    """
    Setup logger for intake context.

    Args:
        log_dir: Directory for this parsing session (None = console only)
        source: Input being parsed, recorded in the provenance header
        console_level: Minimum level printed to the console

    Returns:
        Path to log file, or None without a log directory

    Example:
        from vitae.contexts.intake.logger import setup_intake_logger, _log_info

        log_file = setup_intake_logger(log_dir, source="resume.md")
        _log_info("Starting parsing...")
    """
    return _setup_logger(
        context_name="intake",
        log_dir=log_dir,
        extra_provenance={"Source": source} if source else None,
        console_level=console_level,
    )


# Wrapper functions with automatic [intake] prefix


def _log_info(message: str) -> None:
    """Log info message with [intake] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [intake] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [intake] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [intake] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [intake] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level intake-specific logging helpers


def log_parse_result(source_format: str, section_count: int, used_fallback: bool) -> None:
    """Log the outcome of a parse."""
    if used_fallback:
        _log_warning(f"Parsed {source_format} input into default document ({section_count} sections)")
    else:
        _log_info(f"Parsed {source_format} input into {section_count} sections")
