"""Starter schemas shipped as YAML under ``templates/data``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict

from schemaforge.editing.operations import load_schema
from schemaforge.ir.models import Dialect, SchemaState
from schemaforge.utils.logging import get_logger

logger = get_logger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "data"


class TemplateInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    title: str
    description: str
    color: Optional[str] = None
    table_count: int


@lru_cache()
def _load_template_file(key: str) -> Dict[str, Any]:
    if key not in template_keys():
        raise ValueError(f"Unknown template '{key}'. Available: {', '.join(template_keys())}")
    path = TEMPLATE_DIR / f"{key}.yaml"
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def template_keys() -> List[str]:
    return sorted(path.stem for path in TEMPLATE_DIR.glob("*.yaml"))


def list_templates() -> List[TemplateInfo]:
    """Summaries of every bundled template, sorted by key."""
    infos = []
    for key in template_keys():
        data = _load_template_file(key)
        infos.append(
            TemplateInfo(
                key=data.get("key", key),
                title=data.get("title", key),
                description=data.get("description", ""),
                color=data.get("color"),
                table_count=len(data.get("tables") or []),
            )
        )
    return infos


def load_template(key: str, dialect: Dialect = Dialect.POSTGRESQL) -> SchemaState:
    """
    Build a laid-out snapshot from a bundled template.

    Relationships are derived from the templates' column references.

    Raises:
        ValueError: If no template has that key
    """
    data = _load_template_file(key)
    logger.info(f"Loading template '{key}'")
    return load_schema(data.get("tables") or [], relationships=None, dialect=dialect, should_layout=True)
