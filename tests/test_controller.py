from __future__ import annotations

import asyncio
import json
from datetime import datetime
from typing import Any, Callable

from tracker.ui.controller import TrackerController
from tracker.ui.ports import (
    ClickHandler,
    FixedGeolocation,
    IdHandler,
    KindHandler,
    RawFields,
)
from tracker.ui.render import ListEntryDescriptor, MarkerDescriptor
from tracker.workout.model import (
    MONTH_NAMES,
    Coordinates,
    Running,
    WorkoutKind,
    create_cycling,
)
from tracker.workout.store import WORKOUTS_KEY, MemoryBlobStore, WorkoutStore


class FakeMap:
    def __init__(self) -> None:
        self.centered: list[tuple[Coordinates, int]] = []
        self.recentered: list[tuple[Coordinates, int]] = []
        self.markers: list[MarkerDescriptor] = []
        self.click_handler: ClickHandler | None = None

    def center_on(self, coordinates: Coordinates, zoom: int) -> None:
        self.centered.append((coordinates, zoom))

    def on_click(self, handler: ClickHandler) -> None:
        self.click_handler = handler

    def add_marker(self, descriptor: MarkerDescriptor) -> Any:
        self.markers.append(descriptor)
        return len(self.markers)

    def recenter_animated(self, coordinates: Coordinates, zoom: int) -> None:
        self.recentered.append((coordinates, zoom))

    def click(self, coordinates: Coordinates) -> None:
        assert self.click_handler is not None
        self.click_handler(coordinates)


class FakeForm:
    def __init__(self) -> None:
        self.visible = False
        self.focused = 0
        self.cleared = 0
        self.kind_fields: WorkoutKind = "running"
        self.fields = RawFields(
            kind="running", distance=None, duration=None, cadence=None, elevation=None
        )
        self.submit_handler: Callable[[], None] | None = None
        self.kind_handler: KindHandler | None = None

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def focus_first_field(self) -> None:
        self.focused += 1

    def read_fields(self) -> RawFields:
        return self.fields

    def clear_fields(self) -> None:
        self.cleared += 1

    def show_kind_fields(self, kind: WorkoutKind) -> None:
        self.kind_fields = kind

    def on_submit(self, handler: Callable[[], None]) -> None:
        self.submit_handler = handler

    def on_kind_change(self, handler: KindHandler) -> None:
        self.kind_handler = handler

    def fill(self, **values: object) -> None:
        base: dict[str, object] = {
            "kind": "running",
            "distance": None,
            "duration": None,
            "cadence": None,
            "elevation": None,
        }
        base.update(values)
        self.fields = RawFields(**base)  # type: ignore[arg-type]


class FakeList:
    def __init__(self) -> None:
        self.entries: list[ListEntryDescriptor] = []
        self.handler: IdHandler | None = None

    def append_entry(self, descriptor: ListEntryDescriptor) -> None:
        self.entries.append(descriptor)

    def on_entry_click(self, handler: IdHandler) -> None:
        self.handler = handler


class FakeNotifier:
    def __init__(self) -> None:
        self.alerts: list[str] = []

    def alert(self, message: str) -> None:
        self.alerts.append(message)


class FailingBlobStore(MemoryBlobStore):
    def set_item(self, key: str, value: str) -> None:
        raise OSError(28, "No space left on device")


class Harness:
    def __init__(self, blob: MemoryBlobStore | None = None) -> None:
        self.blob = blob or MemoryBlobStore()
        self.store = WorkoutStore(self.blob)
        self.map = FakeMap()
        self.form = FakeForm()
        self.list = FakeList()
        self.notifier = FakeNotifier()
        self.reloads = 0
        self.controller = TrackerController(
            self.store,
            self.map,
            self.form,
            self.list,
            self.notifier,
            on_reload=self._reload,
        )

    def _reload(self) -> None:
        self.reloads += 1

    def boot(self, position: Coordinates | None = (51.5, -0.12)) -> bool:
        self.controller.start()
        return asyncio.run(self.controller.locate(FixedGeolocation(position)))


def test_record_running_workout_from_map_click() -> None:
    h = Harness()
    assert h.boot() is True
    assert h.map.centered == [((51.5, -0.12), 13)]

    h.map.click((51.5, -0.12))
    assert h.controller.state.phase == "awaiting_input"
    assert h.form.visible is True
    assert h.form.focused == 1

    h.form.fill(kind="running", distance="5", duration="25", cadence="178")
    assert h.form.submit_handler is not None
    h.form.submit_handler()

    workout = h.store.all()[0]
    assert isinstance(workout, Running)
    assert workout.pace_min_per_km == 5.0
    assert workout.coordinates == (51.5, -0.12)
    now = datetime.now()
    assert workout.description == f"Running on {MONTH_NAMES[now.month - 1]} {now.day}"
    assert len(h.store) == 1
    assert len(h.map.markers) == 1
    assert len(h.list.entries) == 1
    assert h.list.entries[0].id == workout.id
    assert json.loads(h.blob.items[WORKOUTS_KEY])[0]["id"] == workout.id
    assert h.form.visible is False
    assert h.form.cleared == 1
    assert h.controller.state.phase == "idle"
    assert h.controller.state.pending_location is None
    assert h.notifier.alerts == []


def test_invalid_input_keeps_form_open_and_store_untouched() -> None:
    h = Harness()
    h.boot()
    h.map.click((40.0, -3.7))

    for fields in (
        {"distance": 0, "duration": 25, "cadence": 170},
        {"distance": -1, "duration": 25, "cadence": 170},
        {"distance": 5, "duration": 0, "cadence": 170},
        {"distance": 5, "duration": 25, "cadence": "abc"},
        {"distance": 5, "duration": 25, "cadence": None},
        {"kind": "swimming", "distance": 5, "duration": 25},
    ):
        h.form.fill(**fields)
        assert h.controller.submit() is None

    assert len(h.notifier.alerts) == 6
    assert h.controller.state.phase == "awaiting_input"
    assert h.form.visible is True
    assert len(h.store) == 0
    assert h.map.markers == []
    assert h.list.entries == []
    assert WORKOUTS_KEY not in h.blob.items


def test_cycling_accepts_negative_elevation() -> None:
    h = Harness()
    h.boot()
    h.map.click((40.0, -3.7))
    h.form.fill(kind="cycling", distance=20.0, duration=60.0, elevation=-5.0)

    workout = h.controller.submit()

    assert workout is not None
    assert workout.kind == "cycling"
    assert workout.speed_km_per_h == 20.0
    assert h.list.entries[0].tertiary_metric_value == "-5"


def test_submit_without_map_click_is_ignored() -> None:
    h = Harness()
    h.boot()
    h.form.fill(distance=5, duration=25, cadence=170)

    assert h.controller.submit() is None
    assert len(h.store) == 0


def test_cancel_returns_to_idle() -> None:
    h = Harness()
    h.boot()
    h.map.click((40.0, -3.7))
    h.controller.cancel()

    assert h.form.visible is False
    assert h.controller.state.phase == "idle"
    assert h.controller.submit() is None


def test_kind_change_only_swaps_fields() -> None:
    h = Harness()
    h.boot()
    h.map.click((40.0, -3.7))
    assert h.form.kind_handler is not None

    h.form.kind_handler("cycling")

    assert h.form.kind_fields == "cycling"
    assert h.controller.state.phase == "awaiting_input"


def test_start_renders_stored_workouts_and_markers_after_locate() -> None:
    blob = MemoryBlobStore()
    seed = WorkoutStore(blob)
    seed.append(create_cycling((48.85, 2.35), 27, 95, 300, workout_id="ride-1"))
    seed.save()

    h = Harness(blob)
    h.controller.start()
    assert [e.id for e in h.list.entries] == ["ride-1"]
    assert h.map.markers == []

    asyncio.run(h.controller.locate(FixedGeolocation((48.0, 2.0))))
    assert [m.caption for m in h.map.markers] == [h.list.entries[0].description]


def test_list_entry_click_recenters_map() -> None:
    h = Harness()
    h.boot()
    h.map.click((40.0, -3.7))
    h.form.fill(distance=5, duration=25, cadence=170)
    workout = h.controller.submit()
    assert workout is not None and h.list.handler is not None

    h.list.handler(workout.id)

    assert h.map.recentered == [((40.0, -3.7), 13)]


def test_unknown_list_entry_is_a_no_op() -> None:
    h = Harness()
    h.boot()
    assert h.list.handler is not None

    h.list.handler("does-not-exist")

    assert h.map.recentered == []
    assert h.notifier.alerts == []


def test_geolocation_failure_alerts_once_and_disables_map() -> None:
    h = Harness()
    assert h.boot(position=None) is False

    assert h.notifier.alerts == ["Could not get your position"]
    assert h.map.centered == []
    assert h.map.click_handler is None
    h.controller.open_form((1.0, 1.0))
    assert h.form.visible is False
    assert h.controller.state.phase == "idle"


def test_reset_clears_storage_and_reloads() -> None:
    h = Harness()
    h.boot()
    h.map.click((40.0, -3.7))
    h.form.fill(distance=5, duration=25, cadence=170)
    h.controller.submit()
    assert WORKOUTS_KEY in h.blob.items

    h.controller.reset()

    assert h.reloads == 1
    assert WORKOUTS_KEY not in h.blob.items
    fresh = WorkoutStore(h.blob)
    fresh.load()
    assert fresh.all() == ()


def test_failed_save_rolls_back_and_keeps_form_open() -> None:
    h = Harness(FailingBlobStore())
    h.boot()
    h.map.click((40.0, -3.7))
    h.form.fill(distance=5, duration=25, cadence=170)

    assert h.controller.submit() is None
    assert h.controller.submit() is None

    assert len(h.store) == 0
    assert h.map.markers == []
    assert h.list.entries == []
    assert len(h.notifier.alerts) == 2
    assert h.controller.state.phase == "awaiting_input"
    assert h.form.visible is True


def test_validation_alert_wording_is_neutral() -> None:
    h = Harness()
    h.boot()
    h.map.click((40.0, -3.7))
    h.form.fill(kind="cycling", distance=20, duration=60, elevation="uphill")

    assert h.controller.submit() is None
    assert h.notifier.alerts == ["Invalid workout input: Elevation gain must be a number"]
