"""Tests for schema project endpoints."""

import pytest


def _create(client, **body):
    response = client.post("/api/schema/projects", json=body)
    assert response.status_code == 201
    return response.json()


def test_list_templates(client):
    response = client.get("/api/schema/templates")

    assert response.status_code == 200
    templates = response.json()["templates"]
    assert {t["key"] for t in templates} == {"blog", "ecommerce", "project_management", "saas"}
    for template in templates:
        assert template["table_count"] > 0
        assert template["title"]


def test_list_dialects(client):
    response = client.get("/api/schema/dialects")

    assert response.status_code == 200
    data = response.json()
    assert data["dialects"] == ["PostgreSQL", "MySQL", "SQLite", "SQL Server"]
    assert "CASCADE" in data["referential_actions"]
    assert data["default_dialect"] == "PostgreSQL"


def test_create_empty_project(client):
    project = _create(client, name="scratch")

    assert project["name"] == "scratch"
    assert project["revision"] == 0
    assert project["state"]["tables"] == []
    assert project["state"]["relationships"] == []
    assert project["state"]["dialect"] == "PostgreSQL"


def test_create_project_from_snapshot(client, sample_snapshot):
    project = _create(client, name="shop", snapshot=sample_snapshot, dialect="MySQL")

    state = project["state"]
    assert [t["name"] for t in state["tables"]] == ["users", "orders"]
    assert state["relationships"][0]["id"] == "r1"
    assert state["dialect"] == "MySQL"
    # Wire format uses camelCase and "type" for the column data type
    assert state["tables"][0]["columns"][0]["isPrimaryKey"] is True
    assert state["tables"][0]["columns"][1]["type"] == "VARCHAR(255)"


def test_create_project_from_template(client):
    project = _create(client, name="blog", template="blog")

    assert len(project["state"]["tables"]) == 6
    assert project["state"]["relationships"]


def test_create_project_unknown_template(client):
    response = client.post("/api/schema/projects", json={"template": "nope"})
    assert response.status_code == 404


def test_create_project_rejects_template_and_snapshot(client, sample_snapshot):
    response = client.post("/api/schema/projects", json={"template": "blog", "snapshot": sample_snapshot})
    assert response.status_code == 400


def test_create_project_invalid_snapshot(client):
    response = client.post("/api/schema/projects", json={"snapshot": {"tables": [{"name": "no id"}]}})

    assert response.status_code == 400
    error = response.json()["detail"]["error"]
    assert error["type"] == "SnapshotError"
    assert error["operation"] == "create_project"


def test_get_nonexistent_project(client):
    response = client.get("/api/schema/projects/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


def test_apply_command(client, sample_snapshot):
    project = _create(client, snapshot=sample_snapshot)

    response = client.post(
        f"/api/schema/projects/{project['project_id']}/commands",
        json={"command": {"type": "add_table", "name": "payments"}},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["revision"] == 1
    assert [t["name"] for t in data["state"]["tables"]] == ["users", "orders", "payments"]

    fetched = client.get(f"/api/schema/projects/{project['project_id']}").json()
    assert fetched["state"] == data["state"]


def test_apply_command_to_missing_table(client, sample_snapshot):
    project = _create(client, snapshot=sample_snapshot)

    response = client.post(
        f"/api/schema/projects/{project['project_id']}/commands",
        json={"command": {"type": "remove_table", "tableId": "missing"}},
    )

    assert response.status_code == 400
    payload = response.json()["detail"]
    assert payload["success"] is False
    assert payload["error"]["type"] == "SchemaOperationError"
    assert payload["error"]["operation"] == "remove_table"
    assert payload["error"]["table_id"] == "missing"

    # Rejected commands leave the snapshot unchanged
    fetched = client.get(f"/api/schema/projects/{project['project_id']}").json()
    assert fetched["revision"] == 0
    assert len(fetched["state"]["tables"]) == 2


def test_apply_unknown_command_type(client):
    project = _create(client)

    response = client.post(
        f"/api/schema/projects/{project['project_id']}/commands",
        json={"command": {"type": "drop_everything"}},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["error"]["message"].startswith("Invalid command")


def test_apply_command_unknown_project(client):
    response = client.post(
        "/api/schema/projects/missing/commands",
        json={"command": {"type": "add_table"}},
    )
    assert response.status_code == 404


def test_layout_project(client, sample_snapshot):
    project = _create(client, snapshot=sample_snapshot)

    response = client.post(f"/api/schema/projects/{project['project_id']}/layout")

    assert response.status_code == 200
    data = response.json()
    assert data["revision"] == 1
    positions = {t["id"]: t["position"] for t in data["state"]["tables"]}
    # orders references users, so the two land in different ranks
    assert positions["t1"]["x"] != positions["t2"]["x"]


def test_export_project(client, sample_snapshot):
    project = _create(client, snapshot=sample_snapshot)

    response = client.post(f"/api/schema/projects/{project['project_id']}/export", json={})

    assert response.status_code == 200
    data = response.json()
    assert data["can_export"] is True
    assert data["issues"] == []
    assert data["dialect"] == "PostgreSQL"
    assert data["sql"].startswith("-- Generated by SchemaForge (PostgreSQL)")
    assert (
        "ALTER TABLE orders ADD CONSTRAINT fk_orders_users_user_id "
        "FOREIGN KEY (user_id) REFERENCES users(id);"
    ) in data["sql"]


def test_export_project_subset_and_options(client, sample_snapshot):
    project = _create(client, snapshot=sample_snapshot)

    response = client.post(
        f"/api/schema/projects/{project['project_id']}/export",
        json={
            "selected_table_ids": ["t1"],
            "dialect": "MySQL",
            "statement_style": "compact",
            "include_header": False,
        },
    )

    data = response.json()
    assert data["dialect"] == "MySQL"
    assert data["sql"].startswith("CREATE TABLE users (")
    assert "orders" not in data["sql"]
    assert "ALTER TABLE" not in data["sql"]


def test_export_rejects_unknown_statement_style(client):
    project = _create(client)
    response = client.post(
        f"/api/schema/projects/{project['project_id']}/export",
        json={"statement_style": "fancy"},
    )
    assert response.status_code == 422


def test_compile_blocked_by_errors(client, sample_snapshot):
    sample_snapshot["tables"][1]["name"] = "users"

    response = client.post("/api/schema/compile", json={"snapshot": sample_snapshot})

    assert response.status_code == 200
    data = response.json()
    assert data["sql"] is None
    assert data["can_export"] is False
    assert any(issue["title"] == "Duplicate table name" for issue in data["issues"])
    assert all("affectedTableId" in issue for issue in data["issues"])


def test_compile_returns_warnings_with_sql(client):
    snapshot = {"tables": [{"id": "t1", "name": "notes", "columns": [{"id": "c1", "name": "body", "type": "TEXT"}]}]}

    response = client.post("/api/schema/compile", json={"snapshot": snapshot, "statement_style": "compact"})

    data = response.json()
    assert data["can_export"] is True
    assert "CREATE TABLE notes ( body TEXT );" in data["sql"]
    assert [issue["title"] for issue in data["issues"]] == ["Missing primary key"]
    assert data["issues"][0]["severity"] == "warning"


def test_compile_invalid_snapshot(client):
    response = client.post("/api/schema/compile", json={"snapshot": {"tables": [{"id": "t1", "columns": [42]}]}})
    assert response.status_code == 400


def test_diagram_dot_source(client, sample_snapshot):
    project = _create(client, snapshot=sample_snapshot)

    response = client.get(f"/api/schema/projects/{project['project_id']}/diagram", params={"format": "dot"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/vnd.graphviz")
    assert response.text.startswith("digraph Schema {")
    assert "users" in response.text


@pytest.mark.parametrize("fmt", ["gif", "bmp"])
def test_diagram_unsupported_format(client, fmt):
    project = _create(client)
    response = client.get(f"/api/schema/projects/{project['project_id']}/diagram", params={"format": fmt})
    assert response.status_code == 400


def test_diagram_unknown_project(client):
    response = client.get("/api/schema/projects/missing/diagram")
    assert response.status_code == 404
