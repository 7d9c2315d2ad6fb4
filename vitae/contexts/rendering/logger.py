"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from vitae.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Optional[Path] = None, input_path: Optional[Path] = None) -> Optional[Path]:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this conversion session (None = console only)
        input_path: Document being converted, recorded in the provenance header

    Returns:
        Path to log file, or None without a log directory

    Example:
        from vitae.contexts.rendering.logger import setup_rendering_logger, _log_info

        log_file = setup_rendering_logger(log_dir, input_path=Path("resume.md"))
        _log_info("Starting conversion...")
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"Input": input_path} if input_path else None,
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_conversion_start(input_path: Path, log_file: Optional[Path]) -> None:
    """Log start of conversion with context."""
    _log_info(f"Starting to convert {input_path.name}")
    if log_file:
        _log_info(f"Log file: {log_file}")
    _log_debug(f"Source: {input_path}")


def log_conversion_result(
    input_path: Path,
    result,  # ConversionResult
    elapsed_time: float,
) -> None:
    """
    Log conversion result with round-trip details.

    Args:
        input_path: Converted document
        result: ConversionResult from convert_resume()
        elapsed_time: Time taken
    """
    if result.success:
        _log_success(f"{input_path.name}: {result.section_count} sections exported ({elapsed_time:.2f}s)")
        if result.output_path:
            _log_info(f"  Output: {result.output_path}")
        if result.json_output_path:
            _log_info(f"  JSON: {result.json_output_path}")
        if result.roundtrip_stable is False:
            _log_warning(f"  Round-trip drift: {result.roundtrip_drift}")
    else:
        _log_error(f"Failed to convert {input_path.name} ({elapsed_time:.2f}s)")
        if result.error:
            _log_error(f"  Error: {result.error}")

    if result.warnings:
        _log_warning(f"{len(result.warnings)} warnings during parsing")
        for i, warning in enumerate(result.warnings[:5], 1):
            _log_debug(f"  Warning {i}: {warning}")
