"""Display data for workout markers and list entries."""

from __future__ import annotations

from dataclasses import dataclass

from mapty.workout.model import Cycling, Running, VariantKind, Workout

ICONS: dict[VariantKind, str] = {
    "running": "🏃‍♂️",
    "cycling": "🚴‍♀️",
}


@dataclass(frozen=True)
class DetailRow:
    icon: str
    value: str
    unit: str


def _fmt_number(value: float) -> str:
    return f"{value:g}"


def marker_text(workout: Workout) -> str:
    return f"{ICONS[workout.kind]} {workout.description}"


def popup_class(kind: VariantKind) -> str:
    return f"{kind}-popup"


def workout_details(workout: Workout) -> list[DetailRow]:
    rows = [
        DetailRow(ICONS[workout.kind], _fmt_number(workout.distance_km), "km"),
        DetailRow("⏱", _fmt_number(workout.duration_min), "min"),
    ]
    if isinstance(workout, Running):
        rows.append(DetailRow("⚡️", f"{workout.pace_min_per_km:.1f}", "min/km"))
        rows.append(DetailRow("🦶🏼", _fmt_number(workout.cadence_spm), "spm"))
    elif isinstance(workout, Cycling):
        rows.append(DetailRow("⚡️", f"{workout.speed_kmh:.1f}", "km/h"))
        rows.append(DetailRow("⛰", _fmt_number(workout.elevation_gain_m), "m"))
    else:
        raise TypeError(f"Unsupported workout type: {type(workout).__name__}")
    return rows
