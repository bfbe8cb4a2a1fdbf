"""Fixtures for F4 tests - Web API and CLI."""

import uuid

import pytest
from fastapi.testclient import TestClient

from vectorlab.db.profiles_repository import set_role
from vectorlab.web.api import create_app
from vectorlab.web.drafts import reset_draft_manager


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "db" / "vectorlab.db"


@pytest.fixture
def client(db_path):
    """Test client bound to a temp database, fresh draft manager."""
    reset_draft_manager()
    app = create_app(db_path=db_path)
    with TestClient(app) as test_client:
        yield test_client
    reset_draft_manager()


@pytest.fixture
def admin_headers(client) -> dict[str, str]:
    user_id = str(uuid.uuid4())
    set_role(user_id, "admin")
    return {"X-User-Id": user_id}


@pytest.fixture
def student_headers(client) -> dict[str, str]:
    return {"X-User-Id": str(uuid.uuid4())}


@pytest.fixture
def seeded(client, admin_headers) -> dict[str, str]:
    """Unit > theme > subtheme with one published vector exercise."""
    unit = client.post("/api/admin/units", json={"title": "Vectors"}, headers=admin_headers)
    unit_id = unit.json()["id"]
    theme = client.post(
        "/api/admin/themes",
        json={"title": "Basics", "unit_id": unit_id},
        headers=admin_headers,
    )
    theme_id = theme.json()["id"]
    subtheme = client.post(
        "/api/admin/subthemes",
        json={"title": "Components", "theme_id": theme_id},
        headers=admin_headers,
    )
    subtheme_id = subtheme.json()["id"]

    exercise = client.post(
        "/api/admin/exercises",
        json={
            "subtheme_id": subtheme_id,
            "title": "Read the vector",
            "type": "vector_xy_from_graph",
            "difficulty": 1,
            "status": "published",
            "prompt_md": "Find the components of v.",
            "solution_md": "v = (3, -2)",
            "choices_json": {"vectorEnd": [3, -2]},
        },
        headers=admin_headers,
    )
    assert exercise.status_code == 200, exercise.json()

    return {
        "unit_id": unit_id,
        "theme_id": theme_id,
        "subtheme_id": subtheme_id,
        "exercise_id": exercise.json()["id"],
    }
