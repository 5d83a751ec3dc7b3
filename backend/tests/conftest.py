"""Pytest fixtures and configuration."""

import pytest
from fastapi.testclient import TestClient
from backend.main import app
from backend.dependencies import get_project_manager
from backend.utils.project_manager import ProjectManager
from backend.services.export_service import ExportService
from backend.services.diagram_service import DiagramService
from schemaforge.snapshot import state_from_snapshot


@pytest.fixture
def project_manager():
    """Fresh ProjectManager instance for testing."""
    return ProjectManager()


@pytest.fixture
def client(project_manager):
    """Test client for FastAPI app, wired to an isolated ProjectManager."""
    app.dependency_overrides[get_project_manager] = lambda: project_manager
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def export_service():
    """ExportService instance for testing."""
    return ExportService()


@pytest.fixture
def diagram_service():
    """DiagramService instance for testing."""
    return DiagramService()


@pytest.fixture
def sample_snapshot():
    """Engine-shaped snapshot: users <- orders.user_id."""
    return {
        "tables": [
            {
                "id": "t1",
                "name": "users",
                "position": {"x": 0, "y": 0},
                "columns": [
                    {"id": "c1", "name": "id", "type": "INT", "isPrimaryKey": True, "isNullable": False},
                    {"id": "c2", "name": "email", "type": "VARCHAR(255)"},
                ],
            },
            {
                "id": "t2",
                "name": "orders",
                "position": {"x": 400, "y": 0},
                "columns": [
                    {"id": "c1", "name": "id", "type": "INT", "isPrimaryKey": True, "isNullable": False},
                    {"id": "c2", "name": "user_id", "type": "INT", "isForeignKey": True, "isNullable": False},
                ],
            },
        ],
        "relationships": [
            {"id": "r1", "source": "t1", "target": "t2", "sourceColumnRef": "c1", "targetColumnRef": "c2"}
        ],
        "dialect": "PostgreSQL",
    }


@pytest.fixture
def sample_state(sample_snapshot):
    return state_from_snapshot(sample_snapshot)
