"""Schema project endpoints."""

from dataclasses import replace
from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from backend.models.requests import CommandRequest, CompileRequest, CreateProjectRequest, ExportRequest
from backend.models.responses import (
    DialectsResponse,
    ExportResponse,
    ProjectResponse,
    TemplateSummary,
    TemplatesResponse,
)
from backend.dependencies import get_diagram_service, get_export_service, get_project_manager
from backend.services.diagram_service import DiagramService
from backend.services.export_service import ExportService
from backend.utils.project_manager import ProjectManager
from schemaforge.compilation import Dialect, ExportResult, ReferentialAction
from schemaforge.config import get_compilation_settings
from schemaforge.editing import set_dialect
from schemaforge.ir.models import SchemaState
from schemaforge.layout import auto_layout
from schemaforge.snapshot import state_from_snapshot
from schemaforge.templates import list_templates, load_template
from schemaforge.utils.error_handling import (
    ErrorContext,
    SchemaOperationError,
    SnapshotError,
    handle_operation_error,
)
from schemaforge.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/schema", tags=["schema"])


def _bad_request(error: Exception, operation: str, **extra: Any) -> NoReturn:
    """Log an operation failure and turn it into a 400 with the standard error payload."""
    if isinstance(error, SchemaOperationError):
        context = replace(error.context, additional_context={**error.context.additional_context, **extra})
    else:
        context = ErrorContext(operation=operation, additional_context=extra)
    payload = handle_operation_error(error, context, log_level="warning")
    raise HTTPException(status_code=400, detail=payload)


def _require_project(project_manager: ProjectManager, project_id: str) -> Dict[str, Any]:
    project = project_manager.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def _project_response(project: Dict[str, Any]) -> ProjectResponse:
    return ProjectResponse(
        project_id=project["project_id"],
        name=project["name"],
        created_at=project["created_at"],
        updated_at=project["updated_at"],
        revision=project["revision"],
        state=project["state"].to_wire(),
    )


def _export_response(result: ExportResult) -> ExportResponse:
    return ExportResponse(
        sql=result.sql,
        issues=result.issues,
        can_export=result.can_export,
        dialect=result.dialect,
    )


@router.get("/templates", response_model=TemplatesResponse)
async def get_templates():
    """List the bundled starter schemas."""
    return TemplatesResponse(
        templates=[TemplateSummary(**info.model_dump()) for info in list_templates()]
    )


@router.get("/dialects", response_model=DialectsResponse)
async def get_dialects():
    """List supported SQL dialects and referential actions."""
    return DialectsResponse(
        dialects=[d.value for d in Dialect],
        referential_actions=[a.value for a in ReferentialAction],
        default_dialect=get_compilation_settings().dialect,
    )


@router.post("/projects", response_model=ProjectResponse, status_code=201)
async def create_project(
    request: CreateProjectRequest,
    project_manager: ProjectManager = Depends(get_project_manager),
):
    """
    Create a project.

    Starts empty, from a bundled template (``template``), or from a persisted
    snapshot (``snapshot``). Supplying both is rejected.
    """
    if request.template and request.snapshot is not None:
        raise HTTPException(status_code=400, detail="Provide either 'template' or 'snapshot', not both")

    state: Optional[SchemaState] = None
    if request.template:
        try:
            state = load_template(request.template, dialect=request.dialect or Dialect.POSTGRESQL)
        except ValueError:
            raise HTTPException(status_code=404, detail=f"Template '{request.template}' not found")
    elif request.snapshot is not None:
        try:
            state = state_from_snapshot(request.snapshot)
        except SnapshotError as e:
            _bad_request(e, "create_project")
        if request.dialect:
            state = set_dialect(state, request.dialect)
    elif request.dialect:
        state = SchemaState(dialect=request.dialect)

    project = project_manager.create_project(state=state, name=request.name)
    return _project_response(project)


@router.get("/projects/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    project_manager: ProjectManager = Depends(get_project_manager),
):
    """Get a project's current snapshot."""
    return _project_response(_require_project(project_manager, project_id))


@router.post("/projects/{project_id}/commands", response_model=ProjectResponse)
async def apply_command(
    project_id: str,
    request: CommandRequest,
    project_manager: ProjectManager = Depends(get_project_manager),
):
    """
    Apply one editing command.

    The command payload carries a ``type`` discriminator (``add_table``,
    ``connect_columns``, ...). Rejected commands leave the snapshot unchanged.
    """
    _require_project(project_manager, project_id)
    try:
        project = project_manager.apply_command(project_id, request.command)
    except SchemaOperationError as e:
        _bad_request(e, "apply_command", project_id=project_id, command_type=request.command.get("type"))
    return _project_response(project)


@router.post("/projects/{project_id}/layout", response_model=ProjectResponse)
async def layout_project(
    project_id: str,
    project_manager: ProjectManager = Depends(get_project_manager),
):
    """Re-run the auto-layout over every table in the project."""
    project = _require_project(project_manager, project_id)
    project = project_manager.update_project_state(project_id, auto_layout(project["state"]))
    return _project_response(project)


@router.post("/projects/{project_id}/export", response_model=ExportResponse)
async def export_project(
    project_id: str,
    request: ExportRequest,
    project_manager: ProjectManager = Depends(get_project_manager),
    export_service: ExportService = Depends(get_export_service),
):
    """
    Validate and compile a project (or a subset of its tables) to SQL.

    ``sql`` is null and ``can_export`` false when any issue is an error; the
    issues are always returned.
    """
    project = _require_project(project_manager, project_id)
    result = await export_service.export(
        project["state"],
        selected_table_ids=request.selected_table_ids,
        options=request.to_options(),
    )
    return _export_response(result)


@router.get("/projects/{project_id}/diagram")
async def get_project_diagram(
    project_id: str,
    format: str = "svg",
    diagram_service: DiagramService = Depends(get_diagram_service),
    project_manager: ProjectManager = Depends(get_project_manager),
):
    """
    Get the project's schema diagram.

    ``dot`` returns the Graphviz source; ``svg`` and ``png`` are rendered images.
    """
    project = _require_project(project_manager, project_id)
    try:
        content = await diagram_service.generate_diagram(project["state"], format=format)
    except ValueError as e:
        _bad_request(e, "generate_diagram", project_id=project_id, format=format)
    return Response(content=content, media_type=diagram_service.media_type(format))


@router.post("/compile", response_model=ExportResponse)
async def compile_snapshot(
    request: CompileRequest,
    export_service: ExportService = Depends(get_export_service),
):
    """Stateless export: hydrate the snapshot, then validate and compile it."""
    try:
        state = state_from_snapshot(request.snapshot)
    except SnapshotError as e:
        _bad_request(e, "compile_snapshot")
    result = await export_service.export(
        state,
        selected_table_ids=request.selected_table_ids,
        options=request.to_options(),
    )
    return _export_response(result)
