"""Logging utilities for the stage pipeline."""
import logging
from typing import Optional
from rich.logging import RichHandler
from rich.console import Console
import config

# Shared by log output, progress bars and CLI tables so they do not interleave
console = Console()


def resolve_level(name: str) -> int:
    """Map a level name from the environment to a logging level, INFO if unknown."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Set up a pipeline logger that writes through the shared rich console.

    Args:
        name: Logger name, usually the module's __name__
        level: Logging level (defaults to LOG_LEVEL from the environment)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else resolve_level(config.LOG_LEVEL))

    if not logger.handlers:
        # Titles and PDF text may contain [brackets]; render them literally
        handler = RichHandler(
            console=console,
            show_path=False,
            markup=False,
            rich_tracebacks=True
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    return logger
