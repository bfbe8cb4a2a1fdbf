"""Tests for the grading comparator."""

import pytest

from vectorlab.core.exercise_types import (
    ChoicePrompt,
    PointPrompt,
    TextPrompt,
    VectorPrompt,
    build_exercise_payload,
)
from vectorlab.core.grader import (
    SubmittedAnswer,
    grade_answer,
    grade_stored,
    normalize,
    parse_input,
)


@pytest.fixture
def vector_exercise():
    return build_exercise_payload(
        "vector_xy_from_graph", "Read the vector.", "(3, -2)", {"vectorEnd": [3, -2]}
    )


@pytest.fixture
def point_exercise():
    return build_exercise_payload(
        "point_plot_from_coordinates", "", "", {"target": [2, 5]}
    )


@pytest.fixture
def equal_vectors_exercise():
    return build_exercise_payload(
        "equal_vectors_pick",
        "Pick the equal vectors.",
        "u and v",
        {
            "vectors": [
                {"id": "u", "start": [0, 0], "end": [2, 1]},
                {"id": "v", "start": [1, 1], "end": [3, 2]},
                {"id": "w", "start": [0, 0], "end": [1, 3]},
            ]
        },
    )


class TestNormalize:
    """Tests for free-text normalization."""

    def test_strings_trimmed_and_lowered(self):
        assert normalize("  Hello World ") == "hello world"

    def test_scalars_stringified_like_javascript(self):
        assert normalize(3.0) == "3"
        assert normalize(3) == "3"
        assert normalize(2.5) == "2.5"
        assert normalize(True) == "true"
        assert normalize(None) == "null"

    def test_structures_dumped_compactly(self):
        assert normalize([1, 2]) == "[1,2]"
        assert normalize({"X": 1}) == '{"x":1}'

    def test_nested_integral_floats_dumped_as_integers(self):
        assert normalize({"a": 3.0}) == '{"a":3}'
        assert normalize([1.0, 2, -0.5]) == "[1,2,-0.5]"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (1e-7, "1e-7"),
            (1.5e-7, "1.5e-7"),
            (1e-6, "0.000001"),
            (0.1, "0.1"),
            (123.456, "123.456"),
            (1e20, "100000000000000000000"),
            (1e21, "1e+21"),
            (-2.5e25, "-2.5e+25"),
            (-0.0, "0"),
        ],
    )
    def test_float_formatting_matches_javascript(self, value, expected):
        assert normalize(value) == expected
        assert normalize([value]) == f"[{expected}]"

    @pytest.mark.parametrize("value", ["  AbC ", 4.0, [1, "A"], {"k": "V"}, None, False])
    def test_idempotent_on_strings(self, value):
        once = normalize(value)
        assert normalize(once) == once


class TestParseInput:
    def test_json_is_parsed(self):
        assert parse_input(" [1, 2] ") == [1, 2]
        assert parse_input("4") == 4

    def test_plain_text_is_kept_trimmed(self):
        assert parse_input("  a vector ") == "a vector"

    def test_nan_is_not_a_number(self):
        assert parse_input("NaN") == "NaN"


class TestFreeText:
    """Tests for the short_answer fallback."""

    def test_case_and_whitespace_insensitive(self):
        payload = build_exercise_payload("short_answer", "Name it.", "Unit Vector")
        verdict = grade_stored(payload.prompt, payload.solution, SubmittedAnswer(text="  unit vector "))
        assert verdict.is_correct is True
        assert verdict.label == "Correct"

    def test_number_matches_numeric_text(self):
        payload = build_exercise_payload("short_answer", "2+2?", "4")
        verdict = grade_stored(payload.prompt, payload.solution, SubmittedAnswer(text="4.0"))
        assert verdict.is_correct is True

    def test_array_with_float_elements_matches(self):
        verdict = grade_stored(
            {"question": "q"}, {"result": "[1,2]"}, SubmittedAnswer(text="[1.0, 2]")
        )
        assert verdict.is_correct is True

    def test_wrong_text(self):
        payload = build_exercise_payload("short_answer", "2+2?", "4")
        verdict = grade_stored(payload.prompt, payload.solution, SubmittedAnswer(text="5"))
        assert verdict.is_correct is False
        assert verdict.label == "Incorrect"
        assert verdict.raw_answer == "5"

    def test_solution_without_result_compares_whole_value(self):
        verdict = grade_answer(TextPrompt(question="Q"), "yes", SubmittedAnswer(text="YES"))
        assert verdict.is_correct is True

    def test_object_key_order_matters(self):
        solution = {"result": {"a": 1, "b": 2}}
        prompt = TextPrompt(question="Q")
        assert grade_answer(prompt, solution, SubmittedAnswer(text='{"a":1,"b":2}')).is_correct
        assert not grade_answer(prompt, solution, SubmittedAnswer(text='{"b":2,"a":1}')).is_correct


class TestVectorGrading:
    """Tests for vector_xy_from_graph."""

    def test_exact_components(self, vector_exercise):
        verdict = grade_stored(
            vector_exercise.prompt, vector_exercise.solution, SubmittedAnswer(x="3", y="-2")
        )
        assert verdict.is_correct is True
        assert verdict.raw_answer == "(3, -2)"

    def test_numeric_strings_are_coerced(self, vector_exercise):
        verdict = grade_stored(
            vector_exercise.prompt, vector_exercise.solution, SubmittedAnswer(x=" 3.0 ", y=-2)
        )
        assert verdict.is_correct is True
        assert verdict.raw_answer == "(3.0, -2)"

    def test_wrong_or_missing_components(self, vector_exercise):
        for x, y in [("3", "2"), ("", "-2"), ("three", "-2"), (None, None)]:
            verdict = grade_stored(
                vector_exercise.prompt, vector_exercise.solution, SubmittedAnswer(x=x, y=y)
            )
            assert verdict.is_correct is False

    def test_without_finite_solution_falls_back_to_text(self):
        prompt = VectorPrompt(question="Q")
        verdict = grade_answer(prompt, {"result": "anything"}, SubmittedAnswer(text="Anything"))
        assert verdict.is_correct is True


class TestPointGrading:
    """Tests for point_plot_from_coordinates."""

    def test_plotted_point_matches(self, point_exercise):
        verdict = grade_stored(
            point_exercise.prompt, point_exercise.solution, SubmittedAnswer(x=2, y="5")
        )
        assert verdict.is_correct is True
        assert verdict.raw_answer == "(2, 5)"

    def test_no_point_plotted(self, point_exercise):
        verdict = grade_stored(point_exercise.prompt, point_exercise.solution, SubmittedAnswer())
        assert verdict.is_correct is False
        assert verdict.raw_answer == ""

    def test_wrong_point(self, point_exercise):
        verdict = grade_stored(
            point_exercise.prompt, point_exercise.solution, SubmittedAnswer(x=5, y=2)
        )
        assert verdict.is_correct is False

    def test_solution_with_nan_uses_text(self):
        verdict = grade_answer(
            PointPrompt(question="Q"),
            {"result": {"x": "nan", "y": 1}},
            SubmittedAnswer(x=1, y=1, text='{"x":"nan","y":1}'),
        )
        assert verdict.is_correct is True


class TestChoiceGrading:
    def test_exact_id_match(self):
        payload = build_exercise_payload(
            "single_choice",
            "Pick.",
            "S.",
            {"options": [{"id": "p", "text": "P"}, {"id": "q", "text": "Q"}], "correctOption": "q"},
        )
        assert grade_stored(payload.prompt, payload.solution, SubmittedAnswer(choice="q")).is_correct
        assert not grade_stored(payload.prompt, payload.solution, SubmittedAnswer(choice="Q")).is_correct
        assert not grade_stored(payload.prompt, payload.solution, SubmittedAnswer()).is_correct

    def test_choice_wins_over_point_solution(self):
        """Choice prompts never use the point comparator."""
        prompt = ChoicePrompt(kind="single_choice", question="Q")
        verdict = grade_answer(prompt, {"result": {"x": 1, "y": 1}}, SubmittedAnswer(x=1, y=1))
        assert verdict.is_correct is False


class TestEqualVectorsGrading:
    def test_order_independent(self, equal_vectors_exercise):
        verdict = grade_stored(
            equal_vectors_exercise.prompt,
            equal_vectors_exercise.solution,
            SubmittedAnswer(ids=["v", "u"]),
        )
        assert verdict.is_correct is True
        assert verdict.raw_answer == "u, v"

    def test_cardinality_sensitive(self, equal_vectors_exercise):
        for ids in (["u"], ["u", "v", "w"], ["u", "u", "v"], []):
            verdict = grade_stored(
                equal_vectors_exercise.prompt,
                equal_vectors_exercise.solution,
                SubmittedAnswer(ids=ids),
            )
            assert verdict.is_correct is False


class TestEndToEnd:
    """Author an exercise, then answer it."""

    def test_vector_scenario(self):
        payload = build_exercise_payload(
            "vector_xy_from_graph",
            "Find the components of v.",
            "v = (3, -2)",
            {"vectorEnd": [3, -2]},
        )
        assert payload.solution["result"] == {"x": 3, "y": -2}

        right = grade_stored(payload.prompt, payload.solution, SubmittedAnswer(x="3", y="-2"))
        wrong = grade_stored(payload.prompt, payload.solution, SubmittedAnswer(x="-2", y="3"))
        assert (right.is_correct, right.raw_answer) == (True, "(3, -2)")
        assert (wrong.is_correct, wrong.raw_answer) == (False, "(-2, 3)")

    def test_single_choice_scenario(self):
        payload = build_exercise_payload(
            "single_choice",
            "Which vector is the zero vector?",
            "The one with both components 0.",
            {
                "options": [
                    {"id": "a", "text": "(1, 0)"},
                    {"id": "b", "text": "(0, 0)"},
                    {"id": "c", "text": "(0, 1)"},
                ],
                "correctOption": "b",
            },
        )
        assert payload.solution == {"result": "b"}
        assert grade_stored(payload.prompt, payload.solution, SubmittedAnswer(choice="b")).is_correct
        assert not grade_stored(payload.prompt, payload.solution, SubmittedAnswer(choice="a")).is_correct
