"""NiceGUI web UI for Mapty."""

from __future__ import annotations

import logging
from typing import Any, Callable

from nicegui import events, ui

from mapty.core.config import AppConfig
from mapty.ui.controller import WorkoutCoordinator
from mapty.ui.render import popup_class, workout_details
from mapty.workout.model import VARIANT_KINDS, Coordinates, VariantKind, Workout
from mapty.workout.store import JsonFileStorage
from mapty.workout.validation import ValidationRules, WorkoutForm

logger = logging.getLogger(__name__)

FORM_RESET_DELAY_SEC = 1.0

GEOLOCATION_JS = """
new Promise((resolve) => {
  if (!navigator.geolocation) {
    resolve(null);
    return;
  }
  navigator.geolocation.getCurrentPosition(
    (pos) => resolve([pos.coords.latitude, pos.coords.longitude]),
    () => resolve(null),
  );
})
"""


class LeafletMapSurface:
    """Map surface backed by ``ui.leaflet``."""

    def __init__(self, leaflet: ui.leaflet) -> None:
        self._map = leaflet
        self._markers: list[Any] = []

    def set_view(self, coordinates: Coordinates, zoom: int, animate: bool = False) -> None:
        options: dict[str, Any] = {"animate": animate}
        if animate:
            options["pan"] = {"duration": 1}
        self._map.run_map_method("setView", list(coordinates), zoom, options)

    def place_marker(
        self, coordinates: Coordinates, kind: VariantKind, text: str, glyph: str
    ) -> None:
        marker = self._map.marker(latlng=coordinates)
        marker.run_method(
            "bindPopup",
            f"{glyph} {text}",
            {
                "maxWidth": 250,
                "minWidth": 100,
                "autoClose": False,
                "closeOnClick": False,
                "className": popup_class(kind),
            },
        )
        marker.run_method("openPopup")
        self._markers.append(marker)

    def clear_markers(self) -> None:
        for marker in self._markers:
            self._map.remove_layer(marker)
        self._markers.clear()


class WorkoutSidebar:
    """Workout form plus the list of recorded workouts."""

    def __init__(self, on_select: Callable[[str], None]) -> None:
        self._on_select = on_select
        with ui.card().classes("w-full mapty-form") as self.form_card:
            with ui.row().classes("w-full items-end gap-2"):
                self.type_select = ui.select(
                    {kind: kind.capitalize() for kind in VARIANT_KINDS},
                    value="running",
                    label="Type",
                ).classes("min-w-[120px]")
                self.distance_input = ui.number("Distance (km)")
                self.duration_input = ui.number("Duration (min)")
                self.cadence_input = ui.number("Cadence (step/min)")
                self.elevation_input = ui.number("Elev Gain (m)")
                self.submit_btn = ui.button("OK")
        self._entries = ui.column().classes("w-full gap-2")
        self.type_select.on_value_change(lambda _: self._toggle_variant_fields())
        self._toggle_variant_fields()
        self.form_card.set_visibility(False)

    def read_form(self) -> WorkoutForm:
        return WorkoutForm(
            variant_kind=str(self.type_select.value),
            distance=self.distance_input.value,
            duration=self.duration_input.value,
            cadence=self.cadence_input.value,
            elevation_gain=self.elevation_input.value,
        )

    def show_form(self) -> None:
        self.form_card.classes(remove="mapty-form--closing")
        self.form_card.set_visibility(True)
        self.distance_input.run_method("focus")

    def hide_form(self) -> None:
        for field in (
            self.distance_input,
            self.duration_input,
            self.cadence_input,
            self.elevation_input,
        ):
            field.value = None
        # Skip the slide transition while hiding, then restore it.
        self.form_card.classes(add="mapty-form--closing")
        self.form_card.set_visibility(False)
        ui.timer(
            FORM_RESET_DELAY_SEC,
            lambda: self.form_card.classes(remove="mapty-form--closing"),
            once=True,
        )

    def render_workout(self, workout: Workout) -> None:
        with self._entries:
            with ui.card().classes(
                f"w-full cursor-pointer mapty-workout mapty-workout--{workout.kind}"
            ) as card:
                ui.label(workout.description).classes("text-base font-semibold")
                with ui.row().classes("w-full gap-4"):
                    for row in workout_details(workout):
                        ui.label(f"{row.icon} {row.value} {row.unit}").classes("text-sm")
        card.move(self._entries, target_index=0)
        card.on("click", lambda _, workout_id=workout.id: self._on_select(workout_id))

    def clear(self) -> None:
        self._entries.clear()

    def _toggle_variant_fields(self) -> None:
        running = self.type_select.value == "running"
        self.cadence_input.set_visibility(running)
        self.elevation_input.set_visibility(not running)


def _coordinates_from_click(event: events.GenericEventArguments) -> Coordinates:
    latlng = event.args["latlng"]
    return (float(latlng["lat"]), float(latlng["lng"]))


def run_web_ui(config: AppConfig | None = None) -> int:
    cfg = config or AppConfig()
    rules = ValidationRules(elevation_policy=cfg.elevation_policy)

    @ui.page("/")
    async def index() -> None:
        ui.add_head_html(
            """
            <style>
              .mapty-workout--running { border-left: 5px solid #00c46a; }
              .mapty-workout--cycling { border-left: 5px solid #ffb545; }
              .running-popup .leaflet-popup-content-wrapper { border-left: 5px solid #00c46a; }
              .cycling-popup .leaflet-popup-content-wrapper { border-left: 5px solid #ffb545; }
              .mapty-form { transition: all 0.5s, transform 1ms; }
              .mapty-form--closing { transition: none; }
            </style>
            """
        )

        with ui.row().classes("w-full h-screen no-wrap gap-0"):
            with ui.column().classes("w-[420px] h-full p-4 gap-3 overflow-auto"):
                ui.label("MAPTY").classes("text-xl font-semibold tracking-wide")
                sidebar = WorkoutSidebar(on_select=lambda workout_id: on_select(workout_id))
                reset_btn = ui.button("Reset").props("outline color=negative")
            map_box = ui.column().classes("grow h-full")

        coordinator = WorkoutCoordinator(
            storage=JsonFileStorage(cfg.store_path),
            list_view=sidebar,
            notify=lambda message: ui.notify(message, color="negative"),
            rules=rules,
            zoom_level=cfg.zoom_level,
        )

        def on_select(workout_id: str) -> None:
            coordinator.select_workout(workout_id)

        def on_submit() -> None:
            coordinator.submit_form(sidebar.read_form())

        sidebar.submit_btn.on_click(on_submit)
        reset_btn.on_click(coordinator.reset)
        coordinator.start()

        await ui.context.client.connected()
        try:
            position = await ui.run_javascript(
                GEOLOCATION_JS, timeout=cfg.geolocation_timeout_sec
            )
        except TimeoutError:
            coordinator.position_unavailable("timed out")
            return
        if not isinstance(position, list) or len(position) != 2:
            coordinator.position_unavailable("denied or unsupported")
            return

        coordinates = (float(position[0]), float(position[1]))
        with map_box:
            leaflet = ui.leaflet(center=coordinates, zoom=cfg.zoom_level).classes(
                "w-full h-full"
            )
        await leaflet.initialized()
        leaflet.on(
            "map-click",
            lambda e: coordinator.map_clicked(_coordinates_from_click(e)),
        )
        coordinator.attach_map(LeafletMapSurface(leaflet), coordinates)

    logger.info("Serving Mapty on http://%s:%d", cfg.host, cfg.port)
    ui.run(host=cfg.host, port=cfg.port, reload=False, title="Mapty", show=False)
    return 0
