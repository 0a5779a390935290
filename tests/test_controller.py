from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

import pytest

from mapty.ui.controller import POSITION_UNAVAILABLE_MESSAGE, WorkoutCoordinator
from mapty.workout.model import (
    MONTHS,
    Coordinates,
    Cycling,
    Running,
    VariantKind,
    Workout,
    create_cycling,
    create_running,
)
from mapty.workout.store import STORAGE_KEY, JsonFileStorage, save_workouts
from mapty.workout.validation import INVALID_INPUT_MESSAGE, WorkoutForm


class FakeMap:
    def __init__(self) -> None:
        self.views: list[tuple[Coordinates, int, bool]] = []
        self.markers: list[tuple[Coordinates, VariantKind, str, str]] = []

    def set_view(self, coordinates: Coordinates, zoom: int, animate: bool = False) -> None:
        self.views.append((coordinates, zoom, animate))

    def place_marker(
        self, coordinates: Coordinates, kind: VariantKind, text: str, glyph: str
    ) -> None:
        self.markers.append((coordinates, kind, text, glyph))

    def clear_markers(self) -> None:
        self.markers.clear()


class FakeList:
    def __init__(self) -> None:
        self.form_visible = False
        self.rendered: list[Workout] = []

    def show_form(self) -> None:
        self.form_visible = True

    def hide_form(self) -> None:
        self.form_visible = False

    def render_workout(self, workout: Workout) -> None:
        self.rendered.append(workout)

    def clear(self) -> None:
        self.rendered.clear()


def _coordinator(tmp_path: Path) -> tuple[WorkoutCoordinator, FakeList, list[str]]:
    messages: list[str] = []
    view = FakeList()
    coordinator = WorkoutCoordinator(
        storage=JsonFileStorage(tmp_path / "storage.json"),
        list_view=view,
        notify=messages.append,
    )
    return coordinator, view, messages


def test_new_running_workout_scenario(tmp_path: Path) -> None:
    coordinator, view, messages = _coordinator(tmp_path)
    surface = FakeMap()
    coordinator.start()
    coordinator.attach_map(surface, (40.7, -74.0))

    coordinator.map_clicked((40.7, -74.0))
    assert view.form_visible
    workout = coordinator.submit_form(
        WorkoutForm("running", distance=5, duration=30, cadence=170)
    )

    assert isinstance(workout, Running)
    assert workout.pace_min_per_km == 6.0
    today = datetime.now()
    assert workout.description.startswith("Running on")
    assert workout.description.endswith(f"{MONTHS[today.month - 1]} {today.day}")
    assert len(coordinator.workouts) == 1
    assert view.rendered == [workout]
    assert not view.form_visible
    assert surface.markers == [((40.7, -74.0), "running", workout.description, "🏃‍♂️")]
    assert messages == []

    stored = json.loads(
        json.loads((tmp_path / "storage.json").read_text(encoding="utf-8"))[STORAGE_KEY]
    )
    assert len(stored["workouts"]) == 1
    assert stored["workouts"][0]["id"] == workout.id


def test_invalid_form_does_not_mutate(tmp_path: Path) -> None:
    coordinator, view, messages = _coordinator(tmp_path)
    coordinator.start()
    coordinator.map_clicked((1.0, 2.0))

    for form in (
        WorkoutForm("running", distance=float("nan"), duration=30, cadence=170),
        WorkoutForm("running", distance=5, duration=-5, cadence=170),
        WorkoutForm("running", distance=5, duration=30, cadence=0),
    ):
        assert coordinator.submit_form(form) is None

    assert coordinator.workouts == ()
    assert view.rendered == []
    assert view.form_visible
    assert messages == [INVALID_INPUT_MESSAGE] * 3
    assert not (tmp_path / "storage.json").exists()


def test_submit_without_map_click_is_refused(tmp_path: Path) -> None:
    coordinator, _, messages = _coordinator(tmp_path)
    coordinator.start()

    result = coordinator.submit_form(
        WorkoutForm("running", distance=5, duration=30, cadence=170)
    )

    assert result is None
    assert coordinator.workouts == ()
    assert len(messages) == 1


def test_start_restores_two_variants(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "storage.json")
    run = create_running((40.7, -74.0), 5, 30, 170)
    ride = create_cycling((40.8, -73.9), 20, 60, 100)
    save_workouts([run, ride], storage)

    coordinator, view, _ = _coordinator(tmp_path)
    coordinator.start()

    assert len(coordinator.workouts) == 2
    assert isinstance(coordinator.workouts[1], Cycling)
    assert coordinator.workouts[1].kind == "cycling"
    assert view.rendered == [run, ride]

    surface = FakeMap()
    coordinator.attach_map(surface, (40.7, -74.0))
    assert [marker[1] for marker in surface.markers] == ["running", "cycling"]
    assert surface.markers[1][3] == "🚴‍♀️"


def test_position_unavailable_keeps_list_working(tmp_path: Path) -> None:
    save_workouts(
        [create_running((0.0, 0.0), 5, 30, 170)], JsonFileStorage(tmp_path / "storage.json")
    )
    coordinator, view, messages = _coordinator(tmp_path)
    coordinator.start()

    coordinator.position_unavailable("denied")

    assert messages == [POSITION_UNAVAILABLE_MESSAGE]
    assert len(view.rendered) == 1
    assert not coordinator.map_ready


def test_select_workout_pans_map_and_counts(tmp_path: Path) -> None:
    coordinator, _, _ = _coordinator(tmp_path)
    surface = FakeMap()
    coordinator.start()
    coordinator.attach_map(surface, (0.0, 0.0))
    coordinator.map_clicked((10.0, 20.0))
    workout = coordinator.submit_form(
        WorkoutForm("cycling", distance=20, duration=60, elevation_gain=100)
    )
    assert workout is not None

    selected = coordinator.select_workout(workout.id)

    assert selected is not None
    assert selected.interaction_count == 1
    assert surface.views[-1] == ((10.0, 20.0), 13, True)


def test_select_missing_workout_is_logged_no_op(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    coordinator, _, messages = _coordinator(tmp_path)
    surface = FakeMap()
    coordinator.start()
    coordinator.attach_map(surface, (0.0, 0.0))
    coordinator.map_clicked((1.0, 1.0))
    coordinator.submit_form(WorkoutForm("running", distance=5, duration=30, cadence=170))
    views_before = list(surface.views)

    with caplog.at_level(logging.WARNING, logger="mapty.ui.controller"):
        assert coordinator.select_workout("not-there") is None

    assert "not-there" in caplog.text
    assert surface.views == views_before
    assert messages == []


def test_storage_failure_is_reported_not_raised(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    messages: list[str] = []
    view = FakeList()
    coordinator = WorkoutCoordinator(
        storage=JsonFileStorage(blocker / "storage.json"),
        list_view=view,
        notify=messages.append,
    )
    coordinator.start()
    coordinator.map_clicked((1.0, 1.0))

    workout = coordinator.submit_form(
        WorkoutForm("running", distance=5, duration=30, cadence=170)
    )

    assert workout is not None
    assert coordinator.workouts == (workout,)
    assert len(messages) == 1


def test_reset_clears_everything(tmp_path: Path) -> None:
    coordinator, view, _ = _coordinator(tmp_path)
    surface = FakeMap()
    coordinator.start()
    coordinator.attach_map(surface, (0.0, 0.0))
    coordinator.map_clicked((1.0, 1.0))
    coordinator.submit_form(WorkoutForm("running", distance=5, duration=30, cadence=170))

    coordinator.reset()

    assert coordinator.workouts == ()
    assert view.rendered == []
    assert surface.markers == []

    reloaded, reloaded_view, _ = _coordinator(tmp_path)
    reloaded.start()
    assert reloaded.workouts == ()
    assert reloaded_view.rendered == []
