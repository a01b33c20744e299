"""
Logging Setup for Helix.

Loguru sinks plus the helpers that report evolution progress. Every record
carries a ``component`` extra ("helix" unless bound otherwise) so console and
file output can tell the engine, operators and user code apart.

Author: Helix Team
License: MIT
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

from loguru import logger

DEFAULT_COMPONENT = "helix"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[component]}:{name}:{function}:{line} - {message}"
)


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    rotation: str = "100 MB",
    retention: str = "30 days",
    format_string: Optional[str] = None,
    serialize: bool = False,
) -> None:
    """
    Replace loguru's sinks with a stderr sink and an optional rotating file.

    Args:
        log_level: Minimum level (TRACE, DEBUG, INFO, SUCCESS, WARNING, ...)
        log_file: Optional log file path; parent directories are created
        rotation: Size or age at which the file rotates
        retention: How long rotated files are kept
        format_string: Format used by both sinks instead of the defaults
        serialize: Emit JSON records instead of formatted text
    """
    level = log_level.upper()
    logger.remove()
    logger.configure(extra={"component": DEFAULT_COMPONENT})

    logger.add(
        sys.stderr,
        format=format_string or CONSOLE_FORMAT,
        level=level,
        colorize=not serialize,
        serialize=serialize,
    )

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            format=format_string or FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            serialize=serialize,
        )

    logger.debug("Logging configured", level=level, log_file=str(log_file) if log_file else None)


def get_logger(component: str):
    """Logger whose records are tagged with ``component``."""
    return logger.bind(component=component)


class LogContext:
    """
    Adds key-value pairs to the ``extra`` of every record logged inside it.

    Example:
        with LogContext(phase="evolution", generation=3):
            logger.info("Selecting parents")
    """

    def __init__(self, **context: Any):
        self.context = context
        self._scope = None

    def __enter__(self) -> LogContext:
        self._scope = logger.contextualize(**self.context)
        self._scope.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._scope is not None:
            self._scope.__exit__(exc_type, exc_val, exc_tb)
            self._scope = None


@contextmanager
def _evolution_phase(**context: Any) -> Iterator[None]:
    with LogContext(phase="evolution", **context):
        yield


# =============================================================================
# Evolution Progress
# =============================================================================


def log_evolution_start(generation: int, population_size: int) -> None:
    """Announce a run starting at ``generation``."""
    with _evolution_phase():
        logger.info(
            f"Starting evolution at generation {generation} "
            f"with {population_size} individuals"
        )


def log_evolution_generation(
    generation: int,
    best_fitness: float,
    avg_fitness: float,
    generation_time: float,
) -> None:
    """Report the outcome of one generation."""
    with _evolution_phase(generation=generation):
        logger.info(
            f"Generation {generation}: best={best_fitness:.4f} "
            f"mean={avg_fitness:.4f} ({generation_time:.3f}s)"
        )


def log_evolution_complete(
    best_fitness: Optional[float],
    total_generations: int,
    total_time: float,
) -> None:
    """Report the end of a run."""
    best = "n/a" if best_fitness is None else f"{best_fitness:.4f}"
    with _evolution_phase():
        logger.success(
            f"Evolution complete after {total_generations} generations "
            f"in {total_time:.2f}s, best fitness {best}"
        )


__all__ = [
    "configure_logging",
    "get_logger",
    "LogContext",
    "log_evolution_start",
    "log_evolution_generation",
    "log_evolution_complete",
]
