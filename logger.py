"""
Logger setup for the server and the CLI client.

Provides a single loguru configuration: a colourised console sink and,
when a log directory is configured, a DEBUG-level file sink.
"""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

import config

# Default level colors for console output
LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def setup_logger(
    context_name: str,
    log_dir: Optional[Union[str, Path]] = None,
    level: Optional[str] = None,
) -> Optional[Path]:
    """
    Configure loguru for one entry point.

    Args:
        context_name: Entry point identifier (e.g., "server", "client")
        log_dir: Directory for the log file. Falls back to LOG_DIR; console only when unset.
        level: Console level. Falls back to LOG_LEVEL.

    Returns:
        Path to the log file, or None when logging to the console only

    Example:
        from logger import setup_logger

        setup_logger("server", log_dir="outs/logs")
    """
    level = level or config.LOG_LEVEL
    log_dir = log_dir or config.LOG_DIR

    # Remove default logger
    logger.remove()

    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    # Console handler on stderr so streamed cover letter text on stdout stays clean
    logger.add(
        sys.stderr,
        format="{time:YYYY-MM-DD HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if not log_dir:
        return None

    log_dir = Path(log_dir)
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    # File handler captures everything
    logger.add(
        log_file, format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}", level="DEBUG"
    )
    logger.debug(f"Logging {context_name} to {log_file}")

    return log_file
