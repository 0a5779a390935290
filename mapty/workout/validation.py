"""Workout form validation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, get_args

from mapty.workout.model import Coordinates, Workout, create_cycling, create_running

ElevationPolicy = Literal["any", "non_negative", "positive"]
ELEVATION_POLICIES: tuple[ElevationPolicy, ...] = get_args(ElevationPolicy)

INVALID_INPUT_MESSAGE = "Inputs have to be positive numbers."


class WorkoutInputError(ValueError):
    """Raised when form input cannot produce a workout."""


@dataclass(frozen=True)
class WorkoutForm:
    variant_kind: str
    distance: object
    duration: object
    cadence: object = None
    elevation_gain: object = None


@dataclass(frozen=True)
class ValidationRules:
    # "any" only requires a finite elevation gain, so downhill routes are allowed.
    elevation_policy: ElevationPolicy = "any"

    def __post_init__(self) -> None:
        if self.elevation_policy not in ELEVATION_POLICIES:
            raise ValueError(f"Unknown elevation policy: {self.elevation_policy!r}")


def build_workout(
    form: WorkoutForm,
    coordinates: Coordinates,
    rules: ValidationRules | None = None,
) -> Workout:
    active = rules or ValidationRules()
    distance = _to_number(form.distance)
    duration = _to_number(form.duration)

    if form.variant_kind == "running":
        cadence = _to_number(form.cadence)
        _require(_all_finite(distance, duration, cadence))
        _require(_all_positive(distance, duration, cadence))
        return create_running(coordinates, distance, duration, cadence)

    if form.variant_kind == "cycling":
        elevation = _to_number(_blank_as_zero(form.elevation_gain))
        _require(_all_finite(distance, duration, elevation))
        _require(_all_positive(distance, duration))
        _require(_elevation_allowed(elevation, active.elevation_policy))
        return create_cycling(coordinates, distance, duration, elevation)

    raise WorkoutInputError(f"Unknown workout type: {form.variant_kind!r}")


def _to_number(raw: object) -> float:
    """Loose numeric coercion; anything unusable becomes NaN."""
    if raw is None or isinstance(raw, bool):
        return math.nan
    if isinstance(raw, (int, float)):
        try:
            return float(raw)
        except OverflowError:
            return math.nan
    try:
        return float(str(raw).strip())
    except ValueError:
        return math.nan


def _blank_as_zero(raw: object) -> object:
    # An untouched elevation field means no climbing.
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        return 0.0
    return raw


def _all_finite(*values: float) -> bool:
    return all(math.isfinite(value) for value in values)


def _all_positive(*values: float) -> bool:
    return all(value > 0 for value in values)


def _elevation_allowed(value: float, policy: ElevationPolicy) -> bool:
    if policy == "positive":
        return value > 0
    if policy == "non_negative":
        return value >= 0
    return True


def _require(ok: bool) -> None:
    if not ok:
        raise WorkoutInputError(INVALID_INPUT_MESSAGE)
