"""Logging utilities for SchemaForge."""

from .setup import setup_logging, get_logger, clear_log_file, setup_logging_from_config

__all__ = ["setup_logging", "get_logger", "clear_log_file", "setup_logging_from_config"]
