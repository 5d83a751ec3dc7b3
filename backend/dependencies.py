"""FastAPI dependencies - process-wide singletons (single process, no DB)."""

from functools import lru_cache
from backend.config import settings
from backend.utils.project_manager import ProjectManager
from backend.services.export_service import ExportService
from backend.services.diagram_service import DiagramService


@lru_cache(maxsize=1)
def get_project_manager() -> ProjectManager:
    """Singleton ProjectManager - shared across all requests."""
    return ProjectManager(max_projects=settings.max_projects)


@lru_cache(maxsize=1)
def get_export_service() -> ExportService:
    """Singleton ExportService."""
    return ExportService()


@lru_cache(maxsize=1)
def get_diagram_service() -> DiagramService:
    """Singleton DiagramService."""
    return DiagramService()
