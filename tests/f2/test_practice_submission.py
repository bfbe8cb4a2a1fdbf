"""Tests for answer submission and attempt recording."""

import sqlite3
from unittest.mock import patch

import pytest

from vectorlab.core import authoring
from vectorlab.core.auth import RequestContext
from vectorlab.core.grader import SubmittedAnswer
from vectorlab.core.practice import submit_answer
from vectorlab.db import attempts_repository, exercises_repository
from vectorlab.db.profiles_repository import get_profile


@pytest.fixture
def vector_exercise(admin_ctx, vector_exercise_input):
    result = authoring.upsert_exercise(admin_ctx, vector_exercise_input)
    return exercises_repository.get_exercise(result.id)


class TestSubmitAnswer:
    """Tests for submit_answer."""

    def test_correct_answer_is_saved(self, student_ctx, vector_exercise):
        result = submit_answer(student_ctx, vector_exercise, SubmittedAnswer(x="3", y="-2"))

        assert result.verdict.is_correct is True
        assert result.saved is True
        assert result.save_message == "Attempt saved."

        attempts = attempts_repository.list_attempts_for_user(student_ctx.user_id)
        assert len(attempts) == 1
        assert attempts[0].id == result.attempt_id
        assert attempts[0].is_correct is True
        assert attempts[0].answer == {"raw": "(3, -2)"}

    def test_profile_created_on_first_attempt(self, student_ctx, vector_exercise):
        submit_answer(student_ctx, vector_exercise, SubmittedAnswer(x="0", y="0"))

        profile = get_profile(student_ctx.user_id)
        assert profile is not None
        assert profile.role == "student"
        assert profile.username == f"user_{student_ctx.user_id[:8]}"

    def test_existing_profile_untouched(self, admin_ctx, vector_exercise):
        submit_answer(admin_ctx, vector_exercise, SubmittedAnswer(x="3", y="-2"))
        assert get_profile(admin_ctx.user_id).role == "admin"

    def test_anonymous_is_graded_not_saved(self, vector_exercise):
        result = submit_answer(RequestContext(), vector_exercise, SubmittedAnswer(x="3", y="-2"))

        assert result.verdict.is_correct is True
        assert result.saved is False
        assert result.save_message == "Login required to save this attempt."
        assert result.attempt_id is None

    def test_blank_user_id_is_anonymous(self, vector_exercise):
        ctx = RequestContext(user_id="")
        assert ctx.is_authenticated is False

        result = submit_answer(ctx, vector_exercise, SubmittedAnswer(x="3", y="-2"))

        assert result.saved is False
        assert result.save_message == "Login required to save this attempt."

    def test_store_failure_keeps_verdict(self, student_ctx, vector_exercise):
        with patch(
            "vectorlab.core.practice.insert_attempt",
            side_effect=sqlite3.OperationalError("database is locked"),
        ):
            result = submit_answer(student_ctx, vector_exercise, SubmittedAnswer(x="3", y="-2"))

        assert result.verdict.is_correct is True
        assert result.saved is False
        assert result.save_message == "Attempt not saved: database is locked"

    def test_attempts_are_appended(self, student_ctx, vector_exercise):
        submit_answer(student_ctx, vector_exercise, SubmittedAnswer(x="3", y="-2"))
        submit_answer(student_ctx, vector_exercise, SubmittedAnswer(x="1", y="1"))

        attempts = attempts_repository.list_attempts_for_user(student_ctx.user_id)
        assert [a.is_correct for a in attempts] == [True, False]
        correct = attempts_repository.list_correct_attempts(
            student_ctx.user_id, [vector_exercise.id]
        )
        assert len(correct) == 1

    def test_to_dict(self, student_ctx, vector_exercise):
        result = submit_answer(student_ctx, vector_exercise, SubmittedAnswer(x="3", y="2"))
        data = result.to_dict()
        assert data["is_correct"] is False
        assert data["label"] == "Incorrect"
        assert data["raw_answer"] == "(3, 2)"
        assert data["saved"] is True

    def test_deleting_exercise_removes_attempts(self, admin_ctx, student_ctx, vector_exercise):
        submit_answer(student_ctx, vector_exercise, SubmittedAnswer(x="3", y="-2"))
        authoring.delete_exercise(admin_ctx, vector_exercise.id)
        assert attempts_repository.list_attempts_for_user(student_ctx.user_id) == []
