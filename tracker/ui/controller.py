"""Controller mediating map clicks, the workout form, the list and the store."""

from __future__ import annotations

import logging
from typing import Callable

from tracker.core.state import SessionState
from tracker.ui.ports import (
    FormView,
    Geolocation,
    GeolocationUnavailableError,
    MapView,
    Notifier,
    RawFields,
    WorkoutListView,
)
from tracker.ui.render import to_list_entry_descriptor, to_marker_descriptor
from tracker.workout.model import (
    Coordinates,
    InputValidationError,
    Workout,
    WorkoutKind,
    create_cycling,
    create_running,
)
from tracker.workout.store import WorkoutStore

logger = logging.getLogger(__name__)

DEFAULT_ZOOM_LEVEL = 13


class TrackerController:
    def __init__(
        self,
        store: WorkoutStore,
        map_view: MapView,
        form: FormView,
        workout_list: WorkoutListView,
        notifier: Notifier,
        *,
        on_reload: Callable[[], None] | None = None,
        zoom_level: int = DEFAULT_ZOOM_LEVEL,
    ) -> None:
        self._store = store
        self._map = map_view
        self._form = form
        self._list = workout_list
        self._notifier = notifier
        self._on_reload = on_reload
        self._zoom_level = zoom_level
        self.state = SessionState()

    @property
    def store(self) -> WorkoutStore:
        return self._store

    def start(self) -> None:
        """Rehydrate stored workouts into the list and wire UI handlers."""
        self._store.load()
        for workout in self._store.all():
            self._list.append_entry(to_list_entry_descriptor(workout))
        self._form.on_submit(self.submit)
        self._form.on_kind_change(self.change_kind)
        self._list.on_entry_click(self.focus_workout)

    async def locate(self, geolocation: Geolocation) -> bool:
        try:
            position = await geolocation.current_position()
        except GeolocationUnavailableError as exc:
            logger.warning("Position unavailable: %s", exc)
            self._notifier.alert("Could not get your position")
            return False

        self.state.position = position
        self._map.center_on(position, self._zoom_level)
        self._map.on_click(self.open_form)
        for workout in self._store.all():
            self._map.add_marker(to_marker_descriptor(workout))
        self.state.map_ready = True
        return True

    def open_form(self, coordinates: Coordinates) -> None:
        if not self.state.map_ready:
            return
        self.state.phase = "awaiting_input"
        self.state.pending_location = coordinates
        self._form.show()
        self._form.focus_first_field()

    def change_kind(self, kind: WorkoutKind) -> None:
        self._form.show_kind_fields(kind)

    def submit(self) -> Workout | None:
        location = self.state.pending_location
        if self.state.phase != "awaiting_input" or location is None:
            logger.debug("Submit ignored: no pending map location")
            return None

        try:
            workout = build_workout(location, self._form.read_fields())
        except InputValidationError as exc:
            self._notifier.alert(f"Invalid workout input: {exc}")
            return None

        self._store.append(workout)
        try:
            self._store.save()
        except OSError as exc:
            self._store.discard_last()
            logger.error("Could not save workouts: %s", exc)
            self._notifier.alert("Could not save the workout, please try again")
            return None

        self._map.add_marker(to_marker_descriptor(workout))
        self._list.append_entry(to_list_entry_descriptor(workout))
        self._close_form()
        logger.info("Recorded %s (%s)", workout.description, workout.id)
        return workout

    def cancel(self) -> None:
        self._close_form()

    def focus_workout(self, workout_id: str) -> None:
        workout = self._store.find_by_id(workout_id)
        if workout is None:
            logger.debug("No workout with id %r", workout_id)
            return
        self._map.recenter_animated(workout.coordinates, self._zoom_level)

    def reset(self) -> None:
        self._store.clear()
        self.state.phase = "idle"
        self.state.pending_location = None
        if self._on_reload is not None:
            self._on_reload()

    def _close_form(self) -> None:
        self._form.clear_fields()
        self._form.hide()
        self.state.phase = "idle"
        self.state.pending_location = None


def build_workout(location: Coordinates, fields: RawFields) -> Workout:
    distance = _parse_number(fields.distance, "distance")
    duration = _parse_number(fields.duration, "duration")
    if fields.kind == "running":
        cadence = _parse_number(fields.cadence, "cadence")
        return create_running(location, distance, duration, cadence)
    if fields.kind == "cycling":
        elevation = _parse_number(fields.elevation, "elevation gain")
        return create_cycling(location, distance, duration, elevation)
    raise InputValidationError(f"Unknown workout type {fields.kind!r}")


def _parse_number(raw: object, field_name: str) -> float:
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        raise InputValidationError(f"{field_name.capitalize()} is required")
    if isinstance(raw, bool):
        raise InputValidationError(f"{field_name.capitalize()} must be a number")
    try:
        if isinstance(raw, (int, float)):
            return float(raw)
        return float(str(raw).strip())
    except (ValueError, OverflowError) as exc:
        raise InputValidationError(f"{field_name.capitalize()} must be a number") from exc
