"""
Logger setup for the API process.

Configures loguru once at start-up: a rotating file sink that captures
everything and a colorized console sink at the configured level.
Modules log through ``from loguru import logger`` directly.
"""

import sys
from pathlib import Path

from loguru import logger

# Default level colors for console output
LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def setup_logger(
    log_dir: Path,
    level: str = "INFO",
    extra_provenance: dict | None = None,
) -> Path:
    """
    Configure loguru sinks for the API process.

    Args:
        log_dir: Directory that receives ``api.log`` (created if missing)
        level: Minimum level for the console sink
        extra_provenance: Additional key-value pairs for the provenance header

    Returns:
        Path to the log file
    """
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / "api.log"

    logger.remove()

    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    # File sink captures everything, rotated daily
    logger.add(
        log_file,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {name}:{function}:{line} | {message}",
        level="DEBUG",
        rotation="00:00",
        retention="14 days",
        encoding="utf8",
        enqueue=True,
    )

    logger.add(
        sys.stdout,
        format="{time:YYYY-MM-DD HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>",
        level=level,
        colorize=True,
    )

    log_provenance(extra_provenance)

    return log_file


def log_provenance(extra_context: dict | None = None) -> None:
    """Log the process provenance header (working directory, Python version, extras)."""
    logger.info("=" * 80)
    logger.info(f"Working directory: {Path.cwd()}")
    logger.info(f"Python: {sys.version.split()[0]}")

    if extra_context:
        for key, value in extra_context.items():
            logger.info(f"{key}: {value}")

    logger.info("=" * 80)
