"""Workout -> map marker / list entry descriptors."""

from __future__ import annotations

from dataclasses import dataclass

from tracker.workout.model import Coordinates, Workout, WorkoutKind

KIND_ICONS: dict[WorkoutKind, str] = {
    "running": "🏃‍♂️",
    "cycling": "🚴‍♀️",
}


@dataclass(frozen=True)
class MarkerDescriptor:
    coordinates: Coordinates
    icon: str
    caption: str
    popup_class: str

    @property
    def popup_text(self) -> str:
        return f"{self.icon} {self.caption}"


@dataclass(frozen=True)
class ListEntryDescriptor:
    id: str
    kind: WorkoutKind
    description: str
    icon: str
    distance_km: float
    duration_min: float
    secondary_metric_label: str
    secondary_metric_value: str
    secondary_metric_unit: str
    tertiary_metric_label: str
    tertiary_metric_value: str
    tertiary_metric_unit: str


def fmt_derived(value: float) -> str:
    return f"{value:.1f}"


def fmt_raw(value: float) -> str:
    # Raw inputs are shown as entered: 178.0 -> "178", 12.5 -> "12.5".
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def to_marker_descriptor(workout: Workout) -> MarkerDescriptor:
    return MarkerDescriptor(
        coordinates=workout.coordinates,
        icon=KIND_ICONS[workout.kind],
        caption=workout.description,
        popup_class=f"{workout.kind}-popup",
    )


def to_list_entry_descriptor(workout: Workout) -> ListEntryDescriptor:
    if workout.kind == "running":
        secondary = ("pace", fmt_derived(workout.pace_min_per_km), "min/km")
        tertiary = ("cadence", fmt_raw(workout.cadence_spm), "spm")
    else:
        secondary = ("speed", fmt_derived(workout.speed_km_per_h), "km/h")
        tertiary = ("elevation", fmt_raw(workout.elevation_gain_m), "m")
    return ListEntryDescriptor(
        id=workout.id,
        kind=workout.kind,
        description=workout.description,
        icon=KIND_ICONS[workout.kind],
        distance_km=workout.distance_km,
        duration_min=workout.duration_min,
        secondary_metric_label=secondary[0],
        secondary_metric_value=secondary[1],
        secondary_metric_unit=secondary[2],
        tertiary_metric_label=tertiary[0],
        tertiary_metric_value=tertiary[1],
        tertiary_metric_unit=tertiary[2],
    )
