"""Project state and lifecycle management."""

from typing import Dict, Any, Optional, Mapping, Union
from datetime import datetime, timezone
import uuid

from schemaforge.editing import apply_command
from schemaforge.editing.commands import SchemaCommand
from schemaforge.ir.models import SchemaState
from schemaforge.utils.error_handling import ErrorContext, SchemaOperationError
from schemaforge.utils.logging import get_logger

logger = get_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProjectManager:
    """Holds one schema snapshot per project in process memory.

    Every mutation replaces the project's snapshot wholesale, so concurrent
    writers resolve as last-write-wins.
    """

    def __init__(self, max_projects: int = 256):
        self.projects: Dict[str, Dict[str, Any]] = {}
        self.max_projects = max_projects

    def create_project(
        self,
        state: Optional[SchemaState] = None,
        name: str = "Untitled schema",
        project_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a new project and return its record."""
        if project_id not in self.projects and len(self.projects) >= self.max_projects:
            # Insertion order tracks recency; the first key is the least recently written
            oldest_id = next(iter(self.projects))
            logger.warning(f"Project limit {self.max_projects} reached; evicting {oldest_id}")
            del self.projects[oldest_id]

        project_id = project_id or str(uuid.uuid4())
        created_at = _now()
        self.projects[project_id] = {
            "project_id": project_id,
            "name": name,
            "created_at": created_at,
            "updated_at": created_at,
            "revision": 0,
            "state": state if state is not None else SchemaState(),
        }
        logger.info(f"Created project {project_id} ('{name}')")
        return self.projects[project_id]

    def get_project(self, project_id: str) -> Optional[Dict[str, Any]]:
        """Get project by ID."""
        return self.projects.get(project_id)

    def delete_project(self, project_id: str) -> bool:
        return self.projects.pop(project_id, None) is not None

    def update_project_state(self, project_id: str, state: SchemaState) -> Optional[Dict[str, Any]]:
        """Replace the project's snapshot."""
        project = self.projects.pop(project_id, None)
        if project is None:
            return None
        self.projects[project_id] = project
        project["state"] = state
        project["revision"] += 1
        project["updated_at"] = _now()
        return project

    def apply_command(
        self,
        project_id: str,
        command: Union[SchemaCommand, Mapping[str, Any]],
    ) -> Dict[str, Any]:
        """
        Run one editing command against a project's snapshot.

        Raises:
            SchemaOperationError: If the project is unknown or the command fails
        """
        project = self.projects.get(project_id)
        if project is None:
            raise SchemaOperationError(
                message=f"Project {project_id} not found",
                context=ErrorContext(operation="apply_command", additional_context={"project_id": project_id}),
                error_type="not_found",
            )
        next_state = apply_command(project["state"], command)
        return self.update_project_state(project_id, next_state)
