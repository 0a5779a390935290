"""Workout domain models."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import ClassVar, Literal
from uuid import uuid4

VariantKind = Literal["running", "cycling"]
Coordinates = tuple[float, float]

VARIANT_KINDS: tuple[VariantKind, ...] = ("running", "cycling")
WORKOUT_ID_LENGTH = 10

MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True)
class Running:
    kind: ClassVar[VariantKind] = "running"

    id: str
    created_at: datetime
    coordinates: Coordinates
    distance_km: float
    duration_min: float
    description: str
    cadence_spm: float
    pace_min_per_km: float
    interaction_count: int = 0


@dataclass(frozen=True)
class Cycling:
    kind: ClassVar[VariantKind] = "cycling"

    id: str
    created_at: datetime
    coordinates: Coordinates
    distance_km: float
    duration_min: float
    description: str
    elevation_gain_m: float
    speed_kmh: float
    interaction_count: int = 0


Workout = Running | Cycling


def new_workout_id() -> str:
    return uuid4().hex[:WORKOUT_ID_LENGTH]


def describe(kind: VariantKind, created_at: datetime) -> str:
    """Human label such as ``Running on July 14``."""
    return f"{kind.capitalize()} on {MONTHS[created_at.month - 1]} {created_at.day}"


def create_running(
    coordinates: Coordinates,
    distance_km: float,
    duration_min: float,
    cadence_spm: float,
    *,
    created_at: datetime | None = None,
) -> Running:
    """Build a running session; inputs are expected to be validated already."""
    stamp = created_at or datetime.now().astimezone()
    distance = float(distance_km)
    duration = float(duration_min)
    return Running(
        id=new_workout_id(),
        created_at=stamp,
        coordinates=(float(coordinates[0]), float(coordinates[1])),
        distance_km=distance,
        duration_min=duration,
        description=describe(Running.kind, stamp),
        cadence_spm=float(cadence_spm),
        pace_min_per_km=duration / distance,
    )


def create_cycling(
    coordinates: Coordinates,
    distance_km: float,
    duration_min: float,
    elevation_gain_m: float,
    *,
    created_at: datetime | None = None,
) -> Cycling:
    """Build a cycling session; inputs are expected to be validated already."""
    stamp = created_at or datetime.now().astimezone()
    distance = float(distance_km)
    duration = float(duration_min)
    return Cycling(
        id=new_workout_id(),
        created_at=stamp,
        coordinates=(float(coordinates[0]), float(coordinates[1])),
        distance_km=distance,
        duration_min=duration,
        description=describe(Cycling.kind, stamp),
        elevation_gain_m=float(elevation_gain_m),
        speed_kmh=distance / (duration / 60),
    )


def record_interaction(workout: Workout) -> Workout:
    return replace(workout, interaction_count=workout.interaction_count + 1)
