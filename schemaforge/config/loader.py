"""Load SchemaForge configuration from YAML.

The file is looked up at ``SCHEMAFORGE_CONFIG`` when set, otherwise next to this
module. Every top-level key is a section; the engine reads the sections named in
``KNOWN_SECTIONS`` and each of them must be a mapping.
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

CONFIG_ENV_VAR = "SCHEMAFORGE_CONFIG"
KNOWN_SECTIONS = ("logging", "editing", "compilation", "layout")

SectionModel = TypeVar("SectionModel", bound=BaseModel)


class ConfigError(ValueError):
    """config.yaml parsed, but a section has the wrong shape or an invalid value."""

    def __init__(self, message: str, section: Optional[str] = None, config_file: Optional[Path] = None):
        self.section = section
        self.config_file = config_file
        where = f" [{section}]" if section else ""
        source = f" in {config_file}" if config_file else ""
        super().__init__(f"Invalid configuration{where}{source}: {message}")


def find_config_file() -> Path:
    """Find config.yaml, honoring the SCHEMAFORGE_CONFIG override."""
    override = os.getenv(CONFIG_ENV_VAR)
    config_file = Path(override) if override else Path(__file__).parent / "config.yaml"

    if not config_file.exists():
        source = f"{CONFIG_ENV_VAR}={override}" if override else "the package config directory"
        raise FileNotFoundError(f"config.yaml not found at {config_file} (from {source}).")

    return config_file


def load_config() -> Dict[str, Any]:
    """
    Load and shape-check config.yaml.

    An empty file is an empty configuration. Known sections that are present
    must be mappings; a bare ``layout:`` key counts as an empty section.

    Raises:
        FileNotFoundError: If config.yaml is not found
        ConfigError: If the file is not YAML, its top level is not a mapping,
            or a known section is not a mapping
    """
    config_file = find_config_file()

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"not valid YAML ({e})", config_file=config_file) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"top level must be a mapping, got {type(config).__name__}", config_file=config_file)

    for section in KNOWN_SECTIONS:
        value = config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"section must be a mapping, got {type(value).__name__}",
                section=section,
                config_file=config_file,
            )

    return config


def get_config(section: Optional[str] = None) -> Any:
    """
    Get configuration value(s).

    Args:
        section: Optional section name (e.g., "layout", "compilation")
                 If None, returns entire config

    Returns:
        The whole configuration, or the section's mapping ({} when absent)
    """
    config = load_config()

    if section is None:
        return config

    return config.get(section) or {}


def load_section(section: str, model: Type[SectionModel]) -> SectionModel:
    """
    Parse one section into its settings model.

    Raises:
        ConfigError: Naming the section and the first offending key
    """
    try:
        return model.model_validate(get_config(section))
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or "<section>"
        raise ConfigError(f"{key}: {first.get('msg', str(e))}", section=section, config_file=find_config_file()) from e
