"""Fixtures for F2 tests - Store, authoring actions and submissions."""

import uuid
from pathlib import Path

import pytest

from vectorlab.core import authoring
from vectorlab.core.auth import RequestContext
from vectorlab.db.database import init_db
from vectorlab.db.profiles_repository import set_role


@pytest.fixture
def temp_db(tmp_path) -> Path:
    """Fresh database in a temp directory."""
    db_path = tmp_path / "db" / "vectorlab.db"
    init_db(db_path)
    return db_path


@pytest.fixture
def admin_ctx(temp_db) -> RequestContext:
    """Context of a user with the admin role."""
    user_id = str(uuid.uuid4())
    set_role(user_id, "admin")
    return RequestContext(user_id=user_id)


@pytest.fixture
def student_ctx(temp_db) -> RequestContext:
    """Context of a logged-in user without a profile yet."""
    return RequestContext(user_id=str(uuid.uuid4()))


@pytest.fixture
def hierarchy(admin_ctx) -> dict[str, str]:
    """One unit > theme > subtheme chain; returns their ids."""
    unit = authoring.upsert_unit(admin_ctx, {"title": "Vectors"})
    theme = authoring.upsert_theme(admin_ctx, {"title": "Basics", "unit_id": unit.id})
    subtheme = authoring.upsert_subtheme(
        admin_ctx, {"title": "Components", "theme_id": theme.id}
    )
    assert unit.ok and theme.ok and subtheme.ok
    return {"unit_id": unit.id, "theme_id": theme.id, "subtheme_id": subtheme.id}


@pytest.fixture
def vector_exercise_input(hierarchy) -> dict:
    """Editor fields of a vector exercise with answer (3, -2)."""
    return {
        "subtheme_id": hierarchy["subtheme_id"],
        "title": "Read the vector",
        "type": "vector_xy_from_graph",
        "difficulty": 2,
        "status": "published",
        "prompt_md": "Find the components of v.",
        "solution_md": "v = (3, -2)",
        "choices_json": '{"vectorEnd": [3, -2]}',
        "hints_json": '["Count the squares"]',
        "tags_json": "[]",
    }
