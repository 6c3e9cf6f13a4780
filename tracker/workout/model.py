"""Workout domain models."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Literal
from uuid import uuid4


WorkoutKind = Literal["running", "cycling"]
Coordinates = tuple[float, float]

WORKOUT_KINDS: tuple[WorkoutKind, ...] = ("running", "cycling")

MONTH_NAMES: tuple[str, ...] = (
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


class InputValidationError(ValueError):
    """Raised when workout inputs are missing, non-finite or out of range."""


@dataclass(frozen=True)
class Running:
    id: str
    created_at: datetime
    coordinates: Coordinates
    distance_km: float
    duration_min: float
    cadence_spm: float
    pace_min_per_km: float
    description: str
    kind: Literal["running"] = "running"


@dataclass(frozen=True)
class Cycling:
    id: str
    created_at: datetime
    coordinates: Coordinates
    distance_km: float
    duration_min: float
    elevation_gain_m: float
    speed_km_per_h: float
    description: str
    kind: Literal["cycling"] = "cycling"


Workout = Running | Cycling


def describe(kind: WorkoutKind, created_at: datetime) -> str:
    # datetime months are 1-based, MONTH_NAMES is 0-based.
    month = MONTH_NAMES[created_at.month - 1]
    return f"{kind[0].upper()}{kind[1:]} on {month} {created_at.day}"


def pace_min_per_km(distance_km: float, duration_min: float) -> float:
    return duration_min / distance_km


def speed_km_per_h(distance_km: float, duration_min: float) -> float:
    return distance_km / (duration_min / 60)


def create_running(
    coordinates: Coordinates,
    distance_km: float,
    duration_min: float,
    cadence_spm: float,
    *,
    created_at: datetime | None = None,
    workout_id: str | None = None,
) -> Running:
    coords = _check_coordinates(coordinates)
    distance = _require_positive(distance_km, "distance")
    duration = _require_positive(duration_min, "duration")
    cadence = _require_non_negative(cadence_spm, "cadence")
    stamp = created_at or datetime.now()
    return Running(
        id=workout_id or _new_id(),
        created_at=stamp,
        coordinates=coords,
        distance_km=distance,
        duration_min=duration,
        cadence_spm=cadence,
        pace_min_per_km=pace_min_per_km(distance, duration),
        description=describe("running", stamp),
    )


def create_cycling(
    coordinates: Coordinates,
    distance_km: float,
    duration_min: float,
    elevation_gain_m: float,
    *,
    created_at: datetime | None = None,
    workout_id: str | None = None,
) -> Cycling:
    coords = _check_coordinates(coordinates)
    distance = _require_positive(distance_km, "distance")
    duration = _require_positive(duration_min, "duration")
    # Elevation gain has no lower bound (descents are allowed).
    elevation = _require_finite(elevation_gain_m, "elevation gain")
    stamp = created_at or datetime.now()
    return Cycling(
        id=workout_id or _new_id(),
        created_at=stamp,
        coordinates=coords,
        distance_km=distance,
        duration_min=duration,
        elevation_gain_m=elevation,
        speed_km_per_h=speed_km_per_h(distance, duration),
        description=describe("cycling", stamp),
    )


def _new_id() -> str:
    return uuid4().hex


def _check_coordinates(coordinates: Coordinates) -> Coordinates:
    try:
        lat_obj, lng_obj = coordinates
    except (TypeError, ValueError) as exc:
        raise InputValidationError("Coordinates must be a (lat, lng) pair") from exc
    lat = _require_finite(lat_obj, "latitude")
    lng = _require_finite(lng_obj, "longitude")
    if not -90.0 <= lat <= 90.0:
        raise InputValidationError("Latitude must be within [-90, 90]")
    if not -180.0 <= lng <= 180.0:
        raise InputValidationError("Longitude must be within [-180, 180]")
    return (lat, lng)


def _require_finite(value: object, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InputValidationError(f"{field_name.capitalize()} must be a number")
    try:
        number = float(value)
    except OverflowError as exc:
        raise InputValidationError(
            f"{field_name.capitalize()} must be a finite number"
        ) from exc
    if not math.isfinite(number):
        raise InputValidationError(f"{field_name.capitalize()} must be a finite number")
    return number


def _require_non_negative(value: object, field_name: str) -> float:
    number = _require_finite(value, field_name)
    if number < 0:
        raise InputValidationError(f"{field_name.capitalize()} must be >= 0")
    return number


def _require_positive(value: object, field_name: str) -> float:
    number = _require_finite(value, field_name)
    if number <= 0:
        raise InputValidationError(f"{field_name.capitalize()} must be > 0")
    return number
