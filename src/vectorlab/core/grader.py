"""Grading module.

Responsibilities:
- Compare a submitted answer with an exercise's stored solution
- Dispatch by prompt variant, in fixed priority order:
  equal-vectors-pick -> choice -> point-plot -> vector-from-graph -> free text

Grading is local and synchronous; it never touches the store.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import structlog

from vectorlab.core.exercise_types import (
    ChoicePrompt,
    EqualVectorsPrompt,
    Number,
    PointPrompt,
    Prompt,
    VectorPrompt,
    parse_finite,
    parse_prompt,
)

logger = structlog.get_logger(__name__)

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class SubmittedAnswer:
    """A student's answer; only the fields relevant to the prompt kind are read.

    - text: free-text input (short_answer and unknown kinds)
    - x, y: vector components or plotted point coordinates
    - choice: selected option id
    - ids: selected vector ids
    """

    text: str = ""
    x: Any = None
    y: Any = None
    choice: str = ""
    ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GradeVerdict:
    """Result of grading one answer."""

    is_correct: bool
    raw_answer: str

    @property
    def label(self) -> str:
        return "Correct" if self.is_correct else "Incorrect"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "is_correct": self.is_correct,
            "raw_answer": self.raw_answer,
            "label": self.label,
        }


# =============================================================================
# NORMALIZATION
# =============================================================================


def _js_float_text(value: float) -> str:
    """Format a finite float like JavaScript's ``Number.prototype.toString``.

    Uses the shortest round-trip digits (``repr``), then lays them out with
    plain notation for 1e-7 < |value| < 1e21 and ``d.ddde+N`` otherwise.
    """
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(str(d) for d in digit_tuple).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    k = len(digits)
    n = exponent + k

    if k <= n <= 21:
        text = digits + "0" * (n - k)
    elif 0 < n <= 21:
        text = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        text = "0." + "0" * -n + digits
    else:
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{mantissa}e{'+' if n > 0 else '-'}{abs(n - 1)}"
    return sign + text


def _scalar_text(value: Any) -> str:
    """Stringify a JSON scalar the way a browser would (3.0 -> "3")."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return _js_float_text(value)
    return str(value)


def _compact_json(value: Any) -> str:
    """Compact JSON with browser number formatting ([1.0, 2] -> "[1,2]")."""
    if isinstance(value, dict):
        members = (
            f"{_compact_json(str(key))}:{_compact_json(item)}" for key, item in value.items()
        )
        return "{" + ",".join(members) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_compact_json(item) for item in value) + "]"
    if isinstance(value, float) and not math.isfinite(value):
        return "null"
    if value is None or isinstance(value, (bool, int, float)):
        return _scalar_text(value)
    return json.dumps(value if isinstance(value, str) else str(value), ensure_ascii=False)


def normalize(value: Any) -> str:
    """Normalize a value for free-text comparison.

    Strings are trimmed and lower-cased; numbers, booleans and null are
    stringified first; anything else is dumped as compact JSON. Key order of
    objects is preserved, so it matters.
    """
    if isinstance(value, str):
        return value.strip().lower()
    if value is None or isinstance(value, (bool, int, float)):
        return _scalar_text(value).strip().lower()
    return _compact_json(value).strip().lower()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Unsupported JSON constant: {name}")


def parse_input(raw_input: str) -> Any:
    """Parse trimmed input as JSON, falling back to the trimmed string."""
    trimmed = raw_input.strip()
    if not trimmed:
        return ""

    try:
        return json.loads(trimmed, parse_constant=_reject_constant)
    except ValueError:
        return trimmed


# =============================================================================
# EXPECTED VALUES
# =============================================================================


def expected_answer(solution: Any) -> Any:
    """``solution["result"]`` when present, else the whole solution."""
    if isinstance(solution, dict) and "result" in solution:
        return solution["result"]
    return solution


def expected_point(solution: Any) -> tuple[Number, Number] | None:
    """Expected ``{x, y}`` of a vector/point solution, None if not finite."""
    result = solution.get("result") if isinstance(solution, dict) else None
    if not isinstance(result, dict):
        return None

    x = parse_finite(result.get("x"))
    y = parse_finite(result.get("y"))
    if x is None or y is None:
        return None
    return (x, y)


def expected_ids(solution: Any) -> list[str]:
    """Sorted non-empty string ids of an equal-vectors solution."""
    result = solution.get("result") if isinstance(solution, dict) else None
    if not isinstance(result, list):
        return []
    return sorted(item for item in result if isinstance(item, str) and item)


def _answer_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return _scalar_text(value)


# =============================================================================
# GRADING FUNCTIONS
# =============================================================================


def _grade_equal_vectors(solution: Any, answer: SubmittedAnswer) -> GradeVerdict:
    expected = expected_ids(solution)
    actual = sorted(answer.ids)
    return GradeVerdict(is_correct=actual == expected, raw_answer=", ".join(actual))


def _grade_choice(solution: Any, answer: SubmittedAnswer) -> GradeVerdict:
    expected = expected_answer(solution)
    expected_id = expected if isinstance(expected, str) else _scalar_text(expected)
    return GradeVerdict(is_correct=answer.choice == expected_id, raw_answer=answer.choice)


def _grade_point(point: tuple[Number, Number], answer: SubmittedAnswer) -> GradeVerdict:
    x = parse_finite(answer.x)
    y = parse_finite(answer.y)
    if x is None or y is None:
        return GradeVerdict(is_correct=False, raw_answer="")

    return GradeVerdict(
        is_correct=(x, y) == point,
        raw_answer=f"({_scalar_text(x)}, {_scalar_text(y)})",
    )


def _grade_vector(point: tuple[Number, Number], answer: SubmittedAnswer) -> GradeVerdict:
    x_raw = _answer_text(answer.x).strip()
    y_raw = _answer_text(answer.y).strip()
    x = parse_finite(x_raw)
    y = parse_finite(y_raw)

    is_correct = x is not None and y is not None and (x, y) == point
    return GradeVerdict(is_correct=is_correct, raw_answer=f"({x_raw}, {y_raw})")


def _grade_text(solution: Any, answer: SubmittedAnswer) -> GradeVerdict:
    parsed = parse_input(answer.text)
    is_correct = normalize(parsed) == normalize(expected_answer(solution))
    return GradeVerdict(is_correct=is_correct, raw_answer=answer.text)


def grade_answer(prompt: Prompt, solution: Any, answer: SubmittedAnswer) -> GradeVerdict:
    """Grade an answer against a stored solution.

    Point and vector prompts only use their comparator when the solution
    carries finite coordinates; otherwise they fall through to free text.

    Args:
        prompt: Parsed prompt variant
        solution: Stored solution JSON ({"result": ...})
        answer: Student answer

    Returns:
        GradeVerdict with correctness and the raw answer to record
    """
    point = expected_point(solution)

    match prompt:
        case EqualVectorsPrompt():
            verdict = _grade_equal_vectors(solution, answer)
        case ChoicePrompt():
            verdict = _grade_choice(solution, answer)
        case PointPrompt() if point is not None:
            verdict = _grade_point(point, answer)
        case VectorPrompt() if point is not None:
            verdict = _grade_vector(point, answer)
        case _:
            verdict = _grade_text(solution, answer)

    logger.debug(
        "answer_graded",
        kind=getattr(prompt, "kind", None),
        is_correct=verdict.is_correct,
    )
    return verdict


def grade_stored(prompt_json: Any, solution: Any, answer: SubmittedAnswer) -> GradeVerdict:
    """Grade against the stored prompt JSON (parses the variant first)."""
    return grade_answer(parse_prompt(prompt_json), solution, answer)
