"""NiceGUI web UI for the workout map tracker."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from nicegui import events, ui

from tracker.ui.controller import DEFAULT_ZOOM_LEVEL, TrackerController
from tracker.ui.ports import (
    ClickHandler,
    FixedGeolocation,
    Geolocation,
    GeolocationUnavailableError,
    IdHandler,
    KindHandler,
    RawFields,
)
from tracker.ui.render import ListEntryDescriptor, MarkerDescriptor, fmt_raw
from tracker.workout.model import Coordinates, WorkoutKind
from tracker.workout.store import FileBlobStore, WorkoutStore

logger = logging.getLogger(__name__)

GEOLOCATION_TIMEOUT_SEC = 20.0
PAN_DURATION_SEC = 1

_PAGE_STYLE = """
<style>
  .gb-card { border-radius: 14px; }
  .workout--running { border-left: 5px solid #00c46a; }
  .workout--cycling { border-left: 5px solid #ffb545; }
  .running-popup .leaflet-popup-content-wrapper { border-left: 5px solid #00c46a; }
  .cycling-popup .leaflet-popup-content-wrapper { border-left: 5px solid #ffb545; }
</style>
"""

_GEOLOCATION_JS = """
return await new Promise((resolve) => {
  if (!navigator.geolocation) {
    resolve(null);
    return;
  }
  navigator.geolocation.getCurrentPosition(
    (pos) => resolve([pos.coords.latitude, pos.coords.longitude]),
    () => resolve(null),
  );
});
"""


class LeafletMapView:
    def __init__(self) -> None:
        self._map = ui.leaflet(center=(0.0, 0.0), zoom=2).classes("w-full h-full")
        self._click_handler: ClickHandler | None = None
        self._map.on("map-click", self._on_map_click)

    def _on_map_click(self, e: events.GenericEventArguments) -> None:
        if self._click_handler is None:
            return
        latlng = e.args["latlng"]
        self._click_handler((float(latlng["lat"]), float(latlng["lng"])))

    def center_on(self, coordinates: Coordinates, zoom: int) -> None:
        self._map.set_center(coordinates)
        self._map.set_zoom(zoom)

    def on_click(self, handler: ClickHandler) -> None:
        self._click_handler = handler

    def add_marker(self, descriptor: MarkerDescriptor) -> Any:
        marker = self._map.marker(latlng=descriptor.coordinates)
        marker.run_method(
            "bindPopup",
            descriptor.popup_text,
            {
                "maxWidth": 250,
                "minWidth": 100,
                "autoClose": False,
                "closeOnClick": False,
                "className": descriptor.popup_class,
            },
        )
        marker.run_method("openPopup")
        return marker

    def recenter_animated(self, coordinates: Coordinates, zoom: int) -> None:
        self._map.run_map_method(
            "setView",
            [coordinates[0], coordinates[1]],
            zoom,
            {"animate": True, "pan": {"duration": PAN_DURATION_SEC}},
        )


class NiceGUIFormView:
    def __init__(self) -> None:
        self._submit_handler: Callable[[], None] | None = None
        self._kind_handler: KindHandler | None = None
        with ui.card().classes("w-full gb-card") as self._card:
            with ui.row().classes("w-full items-end gap-2"):
                self._kind = ui.select(
                    {"running": "Running", "cycling": "Cycling"},
                    value="running",
                    label="Type",
                )
                self._distance = ui.number("Distance (km)", min=0)
                self._duration = ui.number("Duration (min)", min=0)
                self._cadence = ui.number("Cadence (step/min)", min=0)
                self._elevation = ui.number("Elev Gain (m)")
            with ui.row().classes("gap-2"):
                self.submit_button = ui.button("OK", on_click=self._on_submit)
                self.cancel_button = ui.button("Cancel").props("flat")
        for field in (self._distance, self._duration, self._cadence, self._elevation):
            field.on("keydown.enter", self._on_submit)
        self._kind.on_value_change(self._on_kind_change)
        self.show_kind_fields("running")
        self.hide()

    def _on_submit(self) -> None:
        if self._submit_handler is not None:
            self._submit_handler()

    def _on_kind_change(self, e: events.ValueChangeEventArguments) -> None:
        if self._kind_handler is not None and e.value in ("running", "cycling"):
            self._kind_handler(e.value)

    def show(self) -> None:
        self._card.set_visibility(True)

    def hide(self) -> None:
        self._card.set_visibility(False)

    def focus_first_field(self) -> None:
        self._distance.run_method("focus")

    def read_fields(self) -> RawFields:
        return RawFields(
            kind=self._kind.value,
            distance=self._distance.value,
            duration=self._duration.value,
            cadence=self._cadence.value,
            elevation=self._elevation.value,
        )

    def clear_fields(self) -> None:
        for field in (self._distance, self._duration, self._cadence, self._elevation):
            field.value = None

    def show_kind_fields(self, kind: WorkoutKind) -> None:
        self._cadence.set_visibility(kind == "running")
        self._elevation.set_visibility(kind == "cycling")

    def on_submit(self, handler: Callable[[], None]) -> None:
        self._submit_handler = handler

    def on_kind_change(self, handler: KindHandler) -> None:
        self._kind_handler = handler


class NiceGUIListView:
    def __init__(self) -> None:
        self._handler: IdHandler | None = None
        self._container = ui.column().classes("w-full gap-2")

    def _dispatch(self, workout_id: str) -> None:
        if self._handler is not None:
            self._handler(workout_id)

    def append_entry(self, descriptor: ListEntryDescriptor) -> None:
        with self._container:
            card = ui.card().classes(f"w-full cursor-pointer workout workout--{descriptor.kind}")
        with card:
            ui.label(descriptor.description).classes("text-base font-semibold")
            with ui.row().classes("gap-4 text-sm"):
                ui.label(f"{descriptor.icon} {fmt_raw(descriptor.distance_km)} km")
                ui.label(f"⏱ {fmt_raw(descriptor.duration_min)} min")
                ui.label(
                    f"⚡️ {descriptor.secondary_metric_value} {descriptor.secondary_metric_unit}"
                )
                glyph = "🦶🏼" if descriptor.kind == "running" else "⛰"
                ui.label(
                    f"{glyph} {descriptor.tertiary_metric_value} {descriptor.tertiary_metric_unit}"
                )
        card.on("click", lambda _, wid=descriptor.id: self._dispatch(wid))
        # Newest first.
        card.move(self._container, target_index=0)

    def on_entry_click(self, handler: IdHandler) -> None:
        self._handler = handler


class NiceGUINotifier:
    def alert(self, message: str) -> None:
        ui.notify(message, color="negative", position="center")


class BrowserGeolocation:
    async def current_position(self) -> Coordinates:
        try:
            result = await ui.run_javascript(_GEOLOCATION_JS, timeout=GEOLOCATION_TIMEOUT_SEC)
        except TimeoutError as exc:
            raise GeolocationUnavailableError("Browser did not answer in time") from exc
        if not isinstance(result, list) or len(result) != 2:
            raise GeolocationUnavailableError("Browser denied or has no position")
        return (float(result[0]), float(result[1]))


def run_web_ui(
    *,
    host: str = "127.0.0.1",
    port: int = 8090,
    data_dir: Path | None = None,
    zoom_level: int = DEFAULT_ZOOM_LEVEL,
    sim_location: Coordinates | None = None,
) -> int:
    @ui.page("/")
    async def index() -> None:
        ui.add_head_html(_PAGE_STYLE)
        geolocation: Geolocation
        if sim_location is not None:
            geolocation = FixedGeolocation(sim_location)
        else:
            geolocation = BrowserGeolocation()

        with ui.row().classes("w-full h-screen no-wrap gap-0"):
            with ui.column().classes("w-1/3 h-full p-4 gap-3 overflow-auto"):
                with ui.row().classes("w-full items-center justify-between"):
                    ui.label("WORKOUT MAP").classes("text-xl font-semibold tracking-wide")
                    reset_btn = ui.button("Reset").props("flat color=negative")
                form = NiceGUIFormView()
                workout_list = NiceGUIListView()
            with ui.column().classes("w-2/3 h-full"):
                map_view = LeafletMapView()

        controller = TrackerController(
            WorkoutStore(FileBlobStore(data_dir)),
            map_view,
            form,
            workout_list,
            NiceGUINotifier(),
            on_reload=ui.navigate.reload,
            zoom_level=zoom_level,
        )
        form.cancel_button.on_click(controller.cancel)
        reset_btn.on_click(controller.reset)
        controller.start()

        await ui.context.client.connected()
        await controller.locate(geolocation)

    logger.info("Serving workout map on http://%s:%d", host, port)
    ui.run(host=host, port=port, reload=False, title="Workout Map")
    return 0
