"""Configuration loading for SchemaForge."""

from .loader import ConfigError, find_config_file, load_config, get_config, load_section
from .settings import (
    LoggingSettings,
    EditingSettings,
    CompilationSettings,
    LayoutSettings,
    get_logging_settings,
    get_editing_settings,
    get_compilation_settings,
    get_layout_settings,
)

__all__ = [
    "ConfigError",
    "find_config_file",
    "load_config",
    "get_config",
    "load_section",
    "LoggingSettings",
    "EditingSettings",
    "CompilationSettings",
    "LayoutSettings",
    "get_logging_settings",
    "get_editing_settings",
    "get_compilation_settings",
    "get_layout_settings",
]
