"""Response models for API endpoints."""

from pydantic import BaseModel
from typing import List, Optional, Dict, Any

from schemaforge.ir.models import Dialect, SchemaIssue


class ProjectResponse(BaseModel):
    """A project and its current snapshot."""
    project_id: str
    name: str
    created_at: str
    updated_at: str
    revision: int
    state: Dict[str, Any]


class ExportResponse(BaseModel):
    """Result of an export: SQL when nothing blocks it, always the issues."""
    sql: Optional[str] = None
    issues: List[SchemaIssue] = []
    can_export: bool
    dialect: Dialect


class TemplateSummary(BaseModel):
    """A bundled template as listed in the gallery."""
    key: str
    title: str
    description: str
    color: Optional[str] = None
    table_count: int


class TemplatesResponse(BaseModel):
    templates: List[TemplateSummary]


class DialectsResponse(BaseModel):
    """Supported dialects and referential actions."""
    dialects: List[str]
    referential_actions: List[str]
    default_dialect: str
