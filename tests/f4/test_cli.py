"""Tests for CLI commands."""

import uuid

import pytest
from typer.testing import CliRunner

from vectorlab.cli.commands import app
from vectorlab.core import authoring
from vectorlab.core.auth import RequestContext
from vectorlab.core.grader import SubmittedAnswer
from vectorlab.core.practice import submit_answer
from vectorlab.db.exercises_repository import get_exercise
from vectorlab.db.profiles_repository import get_profile

runner = CliRunner()


@pytest.fixture
def cli_db(db_path):
    result = runner.invoke(app, ["init-db", "--db", str(db_path)])
    assert result.exit_code == 0, result.output
    return db_path


@pytest.fixture
def authored(cli_db):
    """Admin plus one published exercise; returns the admin id and exercise id."""
    admin_id = str(uuid.uuid4())
    runner.invoke(app, ["set-role", admin_id, "admin", "--db", str(cli_db)])
    ctx = RequestContext(user_id=admin_id)

    unit = authoring.upsert_unit(ctx, {"title": "Vectors"})
    theme = authoring.upsert_theme(ctx, {"title": "Basics", "unit_id": unit.id})
    subtheme = authoring.upsert_subtheme(ctx, {"title": "Components", "theme_id": theme.id})
    exercise = authoring.upsert_exercise(
        ctx,
        {
            "subtheme_id": subtheme.id,
            "title": "Zero",
            "status": "published",
            "prompt_md": "Name the zero vector.",
            "solution_md": "(0, 0)",
        },
    )
    return admin_id, exercise.id


class TestInitDb:
    def test_creates_database(self, cli_db):
        assert cli_db.exists()

    def test_idempotent(self, cli_db):
        result = runner.invoke(app, ["init-db", "--db", str(cli_db)])
        assert result.exit_code == 0
        assert "Database ready" in result.output


class TestSetRole:
    def test_set_admin(self, cli_db):
        user_id = str(uuid.uuid4())
        result = runner.invoke(app, ["set-role", user_id, "admin", "--db", str(cli_db)])

        assert result.exit_code == 0
        assert get_profile(user_id).role == "admin"

    def test_invalid_role(self, cli_db):
        result = runner.invoke(app, ["set-role", "someone", "superuser", "--db", str(cli_db)])
        assert result.exit_code == 1
        assert "Invalid role" in result.output


class TestTree:
    def test_empty(self, cli_db):
        result = runner.invoke(app, ["tree", "--db", str(cli_db)])
        assert result.exit_code == 0
        assert "No units yet" in result.output

    def test_shows_hierarchy(self, authored, cli_db):
        result = runner.invoke(app, ["tree", "--db", str(cli_db)])

        assert result.exit_code == 0
        assert "Vectors" in result.output
        assert "Components" in result.output
        assert "1/1 published" in result.output


class TestProgress:
    def test_progress_table(self, authored, cli_db):
        _, exercise_id = authored
        student = RequestContext(user_id=str(uuid.uuid4()))
        submit_answer(student, get_exercise(exercise_id), SubmittedAnswer(text="(0, 0)"))

        result = runner.invoke(app, ["progress", student.user_id, "--db", str(cli_db)])

        assert result.exit_code == 0
        assert "1/1" in result.output
        assert "accuracy" in result.output
