"""Typed views over config.yaml sections.

Each getter is cached; call ``reload_settings()`` after changing SCHEMAFORGE_CONFIG.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, Literal

from pydantic import BaseModel, ConfigDict, Field

from .loader import load_section


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    level: str = "INFO"
    format_type: Literal["simple", "detailed"] = "detailed"
    log_to_file: bool = False
    log_file: str = "logs/schemaforge.log"
    clear_existing: bool = False


class EditingSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    default_table_name: str = "new_table"
    default_column_name: str = "new_column"
    default_column_type: str = "VARCHAR"
    spawn_position: Dict[str, float] = Field(default_factory=lambda: {"x": 100.0, "y": 100.0})


class CompilationSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    dialect: str = "PostgreSQL"
    on_delete: str = "NO ACTION"
    on_update: str = "NO ACTION"
    statement_style: Literal["pretty", "compact"] = "pretty"
    include_header: bool = True
    indent: str = "  "


class LayoutSettings(BaseModel):
    """Box geometry and spacing used by the layered layout."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    node_width: float = Field(default=260, gt=0)
    header_height: float = Field(default=45, ge=0)
    row_height: float = Field(default=36, ge=0)
    padding: float = Field(default=20, ge=0)
    rank_sep: float = Field(default=120, ge=0)
    node_sep: float = Field(default=80, ge=0)
    margin: float = Field(default=0, ge=0)
    edge_detour: float = Field(default=40, ge=0)


@lru_cache()
def get_logging_settings() -> LoggingSettings:
    return load_section("logging", LoggingSettings)


@lru_cache()
def get_editing_settings() -> EditingSettings:
    return load_section("editing", EditingSettings)


@lru_cache()
def get_compilation_settings() -> CompilationSettings:
    return load_section("compilation", CompilationSettings)


@lru_cache()
def get_layout_settings() -> LayoutSettings:
    return load_section("layout", LayoutSettings)


def reload_settings() -> None:
    """Drop cached settings so the next getter call re-reads config.yaml."""
    for getter in (get_logging_settings, get_editing_settings, get_compilation_settings, get_layout_settings):
        getter.cache_clear()
