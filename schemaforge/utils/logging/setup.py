"""Setup logging configuration."""

import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_LOG_FILE = "logs/schemaforge.log"


def _resolve_log_path(log_file: Optional[str]) -> Path:
    if log_file is None:
        log_file = DEFAULT_LOG_FILE
    path = Path(log_file)
    if path.is_absolute():
        return path
    # Relative paths are anchored at the schemaforge package root
    package_root = Path(__file__).parent.parent.parent
    return package_root / path


def clear_log_file(log_file: Optional[str] = None) -> None:
    """
    Clear the log file if it exists.

    Args:
        log_file: Path to log file (relative to the schemaforge package root). If None, uses default.
    """
    log_path = _resolve_log_path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if log_path.exists():
        try:
            log_path.unlink()
        except PermissionError:
            logging.getLogger(__name__).warning(
                f"Cannot clear log file {log_path} - file is locked. Continuing without clearing."
            )


def setup_logging(
    level: str = "INFO",
    format_type: str = "detailed",
    log_to_file: bool = False,
    log_file: Optional[str] = None,
    clear_existing: bool = False,
) -> None:
    """
    Setup logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "simple" or "detailed"
        log_to_file: Whether to log to file
        log_file: Path to log file (relative to the schemaforge package root)
        clear_existing: Whether to clear the log file before setting up logging
    """
    if clear_existing and log_to_file:
        clear_log_file(log_file)

    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "detailed":
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = logging.Formatter(fmt="%(levelname)s | %(name)s | %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_to_file:
        log_path = _resolve_log_path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def setup_logging_from_config(level: Optional[str] = None) -> None:
    """Configure logging from the ``logging`` section of config.yaml.

    Args:
        level: Optional override for the configured level.
    """
    from schemaforge.config.settings import get_logging_settings

    settings = get_logging_settings()
    setup_logging(
        level=level or settings.level,
        format_type=settings.format_type,
        log_to_file=settings.log_to_file,
        log_file=settings.log_file,
        clear_existing=settings.clear_existing,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger: Logger instance
    """
    return logging.getLogger(name)
