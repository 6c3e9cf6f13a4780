"""Collaborator contracts consumed by the controller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

from tracker.ui.render import ListEntryDescriptor, MarkerDescriptor
from tracker.workout.model import Coordinates, WorkoutKind


class GeolocationUnavailableError(RuntimeError):
    """Raised when the platform denies or cannot provide a position."""


@dataclass(frozen=True)
class RawFields:
    kind: str | None
    distance: object
    duration: object
    cadence: object
    elevation: object


ClickHandler = Callable[[Coordinates], None]
IdHandler = Callable[[str], None]
KindHandler = Callable[[WorkoutKind], None]


class MapView(Protocol):
    def center_on(self, coordinates: Coordinates, zoom: int) -> None: ...

    def on_click(self, handler: ClickHandler) -> None: ...

    def add_marker(self, descriptor: MarkerDescriptor) -> Any: ...

    def recenter_animated(self, coordinates: Coordinates, zoom: int) -> None: ...


class Geolocation(Protocol):
    async def current_position(self) -> Coordinates: ...


class FormView(Protocol):
    def show(self) -> None: ...

    def hide(self) -> None: ...

    def focus_first_field(self) -> None: ...

    def read_fields(self) -> RawFields: ...

    def clear_fields(self) -> None: ...

    def show_kind_fields(self, kind: WorkoutKind) -> None: ...

    def on_submit(self, handler: Callable[[], None]) -> None: ...

    def on_kind_change(self, handler: KindHandler) -> None: ...


class WorkoutListView(Protocol):
    def append_entry(self, descriptor: ListEntryDescriptor) -> None: ...

    def on_entry_click(self, handler: IdHandler) -> None: ...


class Notifier(Protocol):
    def alert(self, message: str) -> None: ...


class FixedGeolocation:
    """Position source for running without a browser location prompt."""

    def __init__(self, coordinates: Coordinates | None) -> None:
        self._coordinates = coordinates

    async def current_position(self) -> Coordinates:
        if self._coordinates is None:
            raise GeolocationUnavailableError("No position configured")
        return self._coordinates
