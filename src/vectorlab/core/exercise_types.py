"""Exercise type registry.

Responsibilities:
- Typed prompt variants, one per prompt ``kind``
- Parse stored prompt JSON back into its variant
- Build the stored ``prompt``/``solution`` JSON from authoring input

Supported types:
- short_answer (default): free text, graded by normalized comparison
- vector_xy_from_graph: read the components of a drawn vector
- point_plot_from_coordinates: plot a point given its coordinates
- single_choice / multiple_choice: pick one option id
- equal_vectors_pick: select every vector equal to another one

Stored shape (JSON):
- prompt: {"kind": ..., "question": ..., <kind fields>} ({"question": ...} for short_answer)
- solution: {"result": <expected value>}
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Union

import structlog

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

SHORT_ANSWER = "short_answer"
VECTOR_XY_FROM_GRAPH = "vector_xy_from_graph"
POINT_PLOT_FROM_COORDINATES = "point_plot_from_coordinates"
SINGLE_CHOICE = "single_choice"
MULTIPLE_CHOICE = "multiple_choice"
EQUAL_VECTORS_PICK = "equal_vectors_pick"

EXERCISE_TYPES = (
    SHORT_ANSWER,
    VECTOR_XY_FROM_GRAPH,
    POINT_PLOT_FROM_COORDINATES,
    SINGLE_CHOICE,
    MULTIPLE_CHOICE,
    EQUAL_VECTORS_PICK,
)

GRID_DEFAULTS: dict[str, int] = {
    "xMin": -10,
    "xMax": 10,
    "yMin": -10,
    "yMax": 10,
    "step": 1,
}

PLACEHOLDER_OPTIONS: tuple[tuple[str, str], ...] = (
    ("a", "Option A"),
    ("b", "Option B"),
    ("c", "Option C"),
    ("d", "Option D"),
)

Number = Union[int, float]
Point = tuple[Number, Number]

# =============================================================================
# NUMERIC COERCION
# =============================================================================


def parse_finite(value: Any) -> Number | None:
    """Parse a finite number from a number or numeric string.

    Returns:
        int when the value is integral, float otherwise, None if unparseable
    """
    if isinstance(value, bool):
        number = float(value)
    elif isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def to_number(value: Any, default: Number = 0) -> Number:
    """Parse a number or fall back to ``default``. Never raises."""
    number = parse_finite(value)
    return default if number is None else number


def to_point(value: Any, default: Point = (0, 0)) -> Point:
    """Coerce ``[x, y]`` (or ``{"x":..,"y":..}``) into a numeric point."""
    if isinstance(value, (list, tuple)) and len(value) >= 2:
        return (to_number(value[0]), to_number(value[1]))
    if isinstance(value, dict) and ("x" in value or "y" in value):
        return (to_number(value.get("x")), to_number(value.get("y")))
    return default


# =============================================================================
# PROMPT VARIANTS
# =============================================================================


@dataclass(frozen=True)
class Grid:
    """Cartesian plane bounds."""

    x_min: Number = GRID_DEFAULTS["xMin"]
    x_max: Number = GRID_DEFAULTS["xMax"]
    y_min: Number = GRID_DEFAULTS["yMin"]
    y_max: Number = GRID_DEFAULTS["yMax"]
    step: Number = GRID_DEFAULTS["step"]

    @classmethod
    def from_config(cls, raw: Any) -> Grid:
        """Build a grid, defaulting every missing or non-numeric bound."""
        data = raw if isinstance(raw, dict) else {}
        return cls(
            x_min=to_number(data.get("xMin"), GRID_DEFAULTS["xMin"]),
            x_max=to_number(data.get("xMax"), GRID_DEFAULTS["xMax"]),
            y_min=to_number(data.get("yMin"), GRID_DEFAULTS["yMin"]),
            y_max=to_number(data.get("yMax"), GRID_DEFAULTS["yMax"]),
            step=to_number(data.get("step"), GRID_DEFAULTS["step"]),
        )

    def to_dict(self) -> dict[str, Number]:
        return {
            "xMin": self.x_min,
            "xMax": self.x_max,
            "yMin": self.y_min,
            "yMax": self.y_max,
            "step": self.step,
        }


@dataclass(frozen=True)
class VectorPrompt:
    """Read the (x, y) components of a vector drawn on the plane."""

    kind: ClassVar[str] = VECTOR_XY_FROM_GRAPH

    question: str
    grid: Grid = field(default_factory=Grid)
    origin: Point = (0, 0)
    vector_end: Point = (0, 0)
    show_labels: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VectorPrompt:
        return cls(
            question=_question(data),
            grid=Grid.from_config(data.get("grid")),
            origin=to_point(data.get("origin")),
            vector_end=to_point(data.get("vectorEnd")),
            show_labels=bool(data.get("showLabels", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "question": self.question,
            "grid": self.grid.to_dict(),
            "origin": list(self.origin),
            "vectorEnd": list(self.vector_end),
            "showLabels": self.show_labels,
        }


@dataclass(frozen=True)
class PointPrompt:
    """Plot the point with the given coordinates."""

    kind: ClassVar[str] = POINT_PLOT_FROM_COORDINATES

    question: str
    grid: Grid = field(default_factory=Grid)
    target: Point = (0, 0)
    show_labels: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PointPrompt:
        return cls(
            question=_question(data),
            grid=Grid.from_config(data.get("grid")),
            target=to_point(data.get("target")),
            show_labels=bool(data.get("showLabels", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "question": self.question,
            "grid": self.grid.to_dict(),
            "target": list(self.target),
            "showLabels": self.show_labels,
        }


@dataclass(frozen=True)
class ChoiceOption:
    id: str
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "text": self.text}


@dataclass(frozen=True)
class ChoicePrompt:
    """Pick one option (single_choice and multiple_choice share this shape)."""

    kind: str
    question: str
    options: tuple[ChoiceOption, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChoicePrompt:
        return cls(
            kind=str(data.get("kind")),
            question=_question(data),
            options=tuple(_valid_options(data.get("options"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "question": self.question,
            "options": [o.to_dict() for o in self.options],
        }


@dataclass(frozen=True)
class PlaneVector:
    """A labelled vector on the plane."""

    id: str
    color: str
    start: Point
    end: Point

    @property
    def displacement(self) -> Point:
        return (self.end[0] - self.start[0], self.end[1] - self.start[1])

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "color": self.color,
            "start": list(self.start),
            "end": list(self.end),
        }


@dataclass(frozen=True)
class EqualVectorsPrompt:
    """Select every vector that is equal to some other vector."""

    kind: ClassVar[str] = EQUAL_VECTORS_PICK

    question: str
    grid: Grid = field(default_factory=Grid)
    vectors: tuple[PlaneVector, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EqualVectorsPrompt:
        return cls(
            question=_question(data),
            grid=Grid.from_config(data.get("grid")),
            vectors=tuple(_valid_vectors(data.get("vectors"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "question": self.question,
            "grid": self.grid.to_dict(),
            "vectors": [v.to_dict() for v in self.vectors],
        }


@dataclass(frozen=True)
class TextPrompt:
    """Free-text question; also the fallback for unrecognised prompts."""

    question: str | None
    raw: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"question": self.question}


Prompt = Union[VectorPrompt, PointPrompt, ChoicePrompt, EqualVectorsPrompt, TextPrompt]


def _question(data: dict[str, Any]) -> str:
    question = data.get("question")
    return question if isinstance(question, str) else ""


def _text_field(item: dict[str, Any], key: str) -> str:
    value = item.get(key)
    return "" if value is None else str(value).strip()


def _valid_options(raw: Any) -> list[ChoiceOption]:
    """Options with a non-blank id and text, first occurrence of each id kept."""
    options: list[ChoiceOption] = []
    seen: set[str] = set()
    for item in raw if isinstance(raw, list) else []:
        if not isinstance(item, dict):
            continue
        option_id = _text_field(item, "id")
        text = _text_field(item, "text")
        if not option_id or not text or option_id in seen:
            continue
        seen.add(option_id)
        options.append(ChoiceOption(id=option_id, text=text))
    return options


def _valid_vectors(raw: Any) -> list[PlaneVector]:
    vectors: list[PlaneVector] = []
    seen: set[str] = set()
    for item in raw if isinstance(raw, list) else []:
        if not isinstance(item, dict):
            continue
        vector_id = _text_field(item, "id")
        if not vector_id or vector_id in seen:
            continue
        seen.add(vector_id)
        color = item.get("color")
        vectors.append(
            PlaneVector(
                id=vector_id,
                color=color if isinstance(color, str) else "",
                start=to_point(item.get("start")),
                end=to_point(item.get("end")),
            )
        )
    return vectors


def parse_prompt(data: Any) -> Prompt:
    """Turn stored prompt JSON into its typed variant.

    Anything without a recognised ``kind`` is a TextPrompt.
    """
    if not isinstance(data, dict):
        return TextPrompt(question=None, raw=data)

    kind = data.get("kind")
    if kind == VECTOR_XY_FROM_GRAPH:
        return VectorPrompt.from_dict(data)
    if kind == POINT_PLOT_FROM_COORDINATES:
        return PointPrompt.from_dict(data)
    if kind in (SINGLE_CHOICE, MULTIPLE_CHOICE):
        return ChoicePrompt.from_dict(data)
    if kind == EQUAL_VECTORS_PICK:
        return EqualVectorsPrompt.from_dict(data)

    question = data.get("question")
    return TextPrompt(question=question if isinstance(question, str) else None, raw=data)


# =============================================================================
# PAYLOAD BUILDERS
# =============================================================================


@dataclass
class ExercisePayload:
    """Derived JSON stored alongside the authoring markdown."""

    prompt: dict[str, Any]
    solution: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"prompt": self.prompt, "solution": self.solution}


def _config_object(config: Any) -> dict[str, Any]:
    return config if isinstance(config, dict) else {}


def _build_vector(
    exercise_type: str, prompt_md: str, solution_md: str, config: Any
) -> tuple[Prompt, Any]:
    cfg = _config_object(config)
    x, y = to_point(cfg.get("vectorEnd"))
    prompt = VectorPrompt(
        question=prompt_md,
        grid=Grid.from_config(cfg.get("grid")),
        origin=to_point(cfg.get("origin")),
        vector_end=(x, y),
    )
    return prompt, {"x": x, "y": y}


def _build_point(
    exercise_type: str, prompt_md: str, solution_md: str, config: Any
) -> tuple[Prompt, Any]:
    cfg = _config_object(config)
    x, y = to_point(cfg.get("target"))
    question = prompt_md if prompt_md.strip() else f"Plot the point ({x}, {y})."
    prompt = PointPrompt(
        question=question,
        grid=Grid.from_config(cfg.get("grid")),
        target=(x, y),
    )
    return prompt, {"x": x, "y": y}


def _build_choice(
    exercise_type: str, prompt_md: str, solution_md: str, config: Any
) -> tuple[Prompt, Any]:
    cfg = {"options": config} if isinstance(config, list) else _config_object(config)
    options = _valid_options(cfg.get("options"))

    if len(options) < 2:
        options = [ChoiceOption(id=i, text=t) for i, t in PLACEHOLDER_OPTIONS]
        correct = "a"
    else:
        requested = cfg.get("correctOption")
        requested = str(requested).strip() if requested is not None else ""
        option_ids = {o.id for o in options}
        correct = requested if requested in option_ids else options[0].id

    prompt = ChoicePrompt(kind=exercise_type, question=prompt_md, options=tuple(options))
    return prompt, correct


def _build_equal_vectors(
    exercise_type: str, prompt_md: str, solution_md: str, config: Any
) -> tuple[Prompt, Any]:
    cfg = _config_object(config)
    vectors = _valid_vectors(cfg.get("vectors"))
    known_ids = {v.id for v in vectors}

    requested = cfg.get("correctIds")
    if isinstance(requested, list):
        correct = sorted({str(i) for i in requested if str(i) in known_ids})
    else:
        # Vectors sharing a displacement with at least one other vector
        counts: dict[Point, int] = {}
        for vector in vectors:
            counts[vector.displacement] = counts.get(vector.displacement, 0) + 1
        correct = sorted(v.id for v in vectors if counts[v.displacement] > 1)

    prompt = EqualVectorsPrompt(
        question=prompt_md,
        grid=Grid.from_config(cfg.get("grid")),
        vectors=tuple(vectors),
    )
    return prompt, correct


def _build_short_answer(
    exercise_type: str, prompt_md: str, solution_md: str, config: Any
) -> tuple[Prompt, Any]:
    return TextPrompt(question=prompt_md), solution_md


PayloadBuilder = Callable[[str, str, str, Any], tuple[Prompt, Any]]

PAYLOAD_BUILDERS: dict[str, PayloadBuilder] = {
    VECTOR_XY_FROM_GRAPH: _build_vector,
    POINT_PLOT_FROM_COORDINATES: _build_point,
    SINGLE_CHOICE: _build_choice,
    MULTIPLE_CHOICE: _build_choice,
    EQUAL_VECTORS_PICK: _build_equal_vectors,
    SHORT_ANSWER: _build_short_answer,
}


def build_exercise_payload(
    exercise_type: str,
    prompt_md: str,
    solution_md: str,
    config: Any = None,
) -> ExercisePayload:
    """Build the stored prompt and solution for an exercise.

    Args:
        exercise_type: Type tag; unknown types are treated as short_answer
        prompt_md: Author's markdown prompt (used as the question)
        solution_md: Author's markdown solution (short_answer expected value)
        config: Type-specific JSON configuration (the choices field)

    Returns:
        ExercisePayload whose solution["result"] holds the expected answer
    """
    builder = PAYLOAD_BUILDERS.get(exercise_type, _build_short_answer)
    prompt, result = builder(exercise_type, prompt_md, solution_md, config)

    logger.debug("exercise_payload.built", type=exercise_type, kind=prompt.to_dict().get("kind"))

    return ExercisePayload(prompt=prompt.to_dict(), solution={"result": result})
