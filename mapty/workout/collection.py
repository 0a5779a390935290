"""Ordered in-memory list of workouts for the current session."""

from __future__ import annotations

from typing import Iterable, Iterator

from mapty.workout.model import Workout, record_interaction


class WorkoutCollection:
    def __init__(self, workouts: Iterable[Workout] = ()) -> None:
        self._items: list[Workout] = list(workouts)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Workout]:
        return iter(self._items)

    def append(self, workout: Workout) -> None:
        # Ids are random, so no duplicate check here.
        self._items.append(workout)

    def find_by_id(self, workout_id: str) -> Workout | None:
        for workout in self._items:
            if workout.id == workout_id:
                return workout
        return None

    def replace_all(self, workouts: Iterable[Workout]) -> None:
        self._items = list(workouts)

    def all(self) -> tuple[Workout, ...]:
        return tuple(self._items)

    def record_interaction(self, workout_id: str) -> Workout | None:
        """Bump the interaction counter of a workout, keeping its position."""
        for index, workout in enumerate(self._items):
            if workout.id == workout_id:
                updated = record_interaction(workout)
                self._items[index] = updated
                return updated
        return None

    def clear(self) -> None:
        self._items.clear()
