"""Coordinator between the workout store, the map and the workout list."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from mapty.ui.render import ICONS
from mapty.workout.collection import WorkoutCollection
from mapty.workout.model import Coordinates, VariantKind, Workout
from mapty.workout.store import (
    JsonFileStorage,
    StorageWriteError,
    clear_workouts,
    load_workouts,
    save_workouts,
)
from mapty.workout.validation import (
    ValidationRules,
    WorkoutForm,
    WorkoutInputError,
    build_workout,
)

logger = logging.getLogger(__name__)

POSITION_UNAVAILABLE_MESSAGE = "Could not get your position"


class MapSurface(Protocol):
    def set_view(self, coordinates: Coordinates, zoom: int, animate: bool = False) -> None: ...

    def place_marker(
        self, coordinates: Coordinates, kind: VariantKind, text: str, glyph: str
    ) -> None: ...

    def clear_markers(self) -> None: ...


class WorkoutListView(Protocol):
    def show_form(self) -> None: ...

    def hide_form(self) -> None: ...

    def render_workout(self, workout: Workout) -> None: ...

    def clear(self) -> None: ...


Notifier = Callable[[str], None]


class WorkoutCoordinator:
    def __init__(
        self,
        storage: JsonFileStorage,
        list_view: WorkoutListView,
        notify: Notifier,
        rules: ValidationRules | None = None,
        zoom_level: int = 13,
    ) -> None:
        self._storage = storage
        self._list_view = list_view
        self._notify = notify
        self._rules = rules or ValidationRules()
        self._zoom_level = zoom_level
        self._collection = WorkoutCollection()
        self._map: MapSurface | None = None
        self._pending_coordinates: Coordinates | None = None

    @property
    def workouts(self) -> tuple[Workout, ...]:
        return self._collection.all()

    @property
    def map_ready(self) -> bool:
        return self._map is not None

    def start(self) -> None:
        """Restore persisted workouts and list them; markers wait for the map."""
        self._collection.replace_all(load_workouts(self._storage))
        logger.info("Loaded %d stored workouts", len(self._collection))
        for workout in self._collection:
            self._list_view.render_workout(workout)

    def attach_map(self, surface: MapSurface, coordinates: Coordinates) -> None:
        self._map = surface
        surface.set_view(coordinates, self._zoom_level)
        for workout in self._collection:
            self._place_marker(workout)

    def position_unavailable(self, reason: str | None = None) -> None:
        logger.warning("Geolocation unavailable: %s", reason or "no position")
        self._notify(POSITION_UNAVAILABLE_MESSAGE)

    def map_clicked(self, coordinates: Coordinates) -> None:
        self._pending_coordinates = coordinates
        self._list_view.show_form()

    def submit_form(self, form: WorkoutForm) -> Workout | None:
        if self._pending_coordinates is None:
            self._notify("Click on the map to place your workout first.")
            return None
        try:
            workout = build_workout(form, self._pending_coordinates, self._rules)
        except WorkoutInputError as exc:
            self._notify(str(exc))
            return None

        self._collection.append(workout)
        self._place_marker(workout)
        self._list_view.render_workout(workout)
        self._list_view.hide_form()
        self._pending_coordinates = None
        self._persist()
        return workout

    def select_workout(self, workout_id: str) -> Workout | None:
        workout = self._collection.record_interaction(workout_id)
        if workout is None:
            logger.warning("Selected workout %s is not in the collection", workout_id)
            return None
        if self._map is not None:
            self._map.set_view(workout.coordinates, self._zoom_level, animate=True)
        return workout

    def reset(self) -> None:
        try:
            clear_workouts(self._storage)
        except StorageWriteError as exc:
            logger.error("Clearing stored workouts failed: %s", exc)
            self._notify("Stored workouts could not be cleared.")
            return
        self._collection.clear()
        self._pending_coordinates = None
        self._list_view.clear()
        if self._map is not None:
            self._map.clear_markers()
        logger.info("Workout store cleared")

    def _place_marker(self, workout: Workout) -> None:
        if self._map is None:
            return
        self._map.place_marker(
            workout.coordinates, workout.kind, workout.description, ICONS[workout.kind]
        )

    def _persist(self) -> None:
        try:
            save_workouts(self._collection.all(), self._storage)
        except StorageWriteError as exc:
            logger.error("Saving workouts failed: %s", exc)
            self._notify("Workout recorded but could not be saved.")
