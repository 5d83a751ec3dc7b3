"""Request models for API endpoints."""

from pydantic import BaseModel, Field
from typing import Dict, Any, List, Optional

from schemaforge.compilation import CompilationOptions, Dialect, ReferentialAction


class CreateProjectRequest(BaseModel):
    """Request to create a project: empty, from a bundled template, or from a snapshot."""
    name: str = Field(default="Untitled schema", min_length=1)
    template: Optional[str] = Field(default=None, description="Bundled template key")
    snapshot: Optional[Dict[str, Any]] = Field(default=None, description="Engine or canvas snapshot")
    dialect: Optional[Dialect] = None


class CommandRequest(BaseModel):
    """Request to apply one editing command to a project."""
    command: Dict[str, Any] = Field(..., description="Command payload with a 'type' discriminator")


class ExportRequest(BaseModel):
    """Request to export a project (or a subset of its tables) as SQL."""
    selected_table_ids: Optional[List[str]] = Field(default=None, description="Tables to export; all when omitted")
    dialect: Optional[Dialect] = None
    on_delete: Optional[ReferentialAction] = None
    on_update: Optional[ReferentialAction] = None
    statement_style: Optional[str] = Field(default=None, pattern=r"^(pretty|compact)$")
    include_header: Optional[bool] = None

    def to_options(self) -> CompilationOptions:
        return CompilationOptions(
            dialect=self.dialect,
            on_delete=self.on_delete,
            on_update=self.on_update,
            statement_style=self.statement_style,
            include_header=self.include_header,
        )


class CompileRequest(ExportRequest):
    """Stateless export: a snapshot in, an export result out."""
    snapshot: Dict[str, Any] = Field(..., description="Engine or canvas snapshot")
