"""Local persistence for recorded workouts."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Protocol

from tracker.workout.model import (
    InputValidationError,
    Workout,
    create_cycling,
    create_running,
)

logger = logging.getLogger(__name__)

WORKOUTS_KEY = "workouts"


def _default_data_dir() -> Path:
    return Path.home() / ".workout-map"


class PersistedDataCorruptError(ValueError):
    """Raised when stored workout data cannot be decoded."""


class BlobStore(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryBlobStore:
    def __init__(self, items: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FileBlobStore:
    """One ``<key>.json`` file per key under a data directory."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self._root = base_dir or _default_data_dir()

    def _path(self, key: str) -> Path:
        return self._root / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        target = self._path(key)
        if not target.exists():
            return None
        try:
            return target.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise PersistedDataCorruptError(f"{target.name} is not UTF-8: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def workout_to_record(workout: Workout) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": workout.id,
        "created_at": workout.created_at.isoformat(),
        "coordinates": [workout.coordinates[0], workout.coordinates[1]],
        "distance_km": workout.distance_km,
        "duration_min": workout.duration_min,
        "kind": workout.kind,
        "description": workout.description,
    }
    if workout.kind == "running":
        record["cadence_spm"] = workout.cadence_spm
        record["pace_min_per_km"] = workout.pace_min_per_km
    else:
        record["elevation_gain_m"] = workout.elevation_gain_m
        record["speed_km_per_h"] = workout.speed_km_per_h
    return record


def workout_from_record(raw: object) -> Workout:
    """Rebuild a typed workout from a stored record.

    Derived metrics and the description are recomputed from the stored base
    fields; the stored copies of those values are ignored.
    """
    if not isinstance(raw, dict):
        raise PersistedDataCorruptError("Workout record must be an object")

    workout_id = raw.get("id")
    if not isinstance(workout_id, str) or not workout_id:
        raise PersistedDataCorruptError("Workout record has no valid 'id'")

    created_obj = raw.get("created_at")
    if not isinstance(created_obj, str):
        raise PersistedDataCorruptError(f"Workout {workout_id}: invalid 'created_at'")
    try:
        created_at = datetime.fromisoformat(created_obj)
    except ValueError as exc:
        raise PersistedDataCorruptError(
            f"Workout {workout_id}: invalid 'created_at'"
        ) from exc

    coords_obj = raw.get("coordinates")
    if not isinstance(coords_obj, list) or len(coords_obj) != 2:
        raise PersistedDataCorruptError(f"Workout {workout_id}: invalid 'coordinates'")

    kind = raw.get("kind")
    try:
        if kind == "running":
            return create_running(
                (coords_obj[0], coords_obj[1]),
                raw.get("distance_km"),  # type: ignore[arg-type]
                raw.get("duration_min"),  # type: ignore[arg-type]
                raw.get("cadence_spm"),  # type: ignore[arg-type]
                created_at=created_at,
                workout_id=workout_id,
            )
        if kind == "cycling":
            return create_cycling(
                (coords_obj[0], coords_obj[1]),
                raw.get("distance_km"),  # type: ignore[arg-type]
                raw.get("duration_min"),  # type: ignore[arg-type]
                raw.get("elevation_gain_m"),  # type: ignore[arg-type]
                created_at=created_at,
                workout_id=workout_id,
            )
    except InputValidationError as exc:
        raise PersistedDataCorruptError(f"Workout {workout_id}: {exc}") from exc
    raise PersistedDataCorruptError(f"Workout {workout_id}: unknown kind {kind!r}")


def decode_workouts(payload: str) -> list[Workout]:
    try:
        data = json.loads(payload)
    except (ValueError, RecursionError) as exc:
        # ValueError covers JSONDecodeError and oversized integer literals.
        raise PersistedDataCorruptError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise PersistedDataCorruptError("Stored workouts must be an array")
    return [workout_from_record(item) for item in data]


def encode_workouts(workouts: tuple[Workout, ...] | list[Workout]) -> str:
    return json.dumps([workout_to_record(w) for w in workouts], ensure_ascii=True)


class WorkoutStore:
    """Ordered workouts for the session, mirrored to a blob store under one key."""

    def __init__(self, blob_store: BlobStore, key: str = WORKOUTS_KEY) -> None:
        self._blob_store = blob_store
        self._key = key
        self._workouts: list[Workout] = []

    def __len__(self) -> int:
        return len(self._workouts)

    def __iter__(self) -> Iterator[Workout]:
        return iter(tuple(self._workouts))

    def append(self, workout: Workout) -> None:
        self._workouts.append(workout)

    def all(self) -> tuple[Workout, ...]:
        return tuple(self._workouts)

    def discard_last(self) -> Workout | None:
        """Drop the most recent append, used when persisting it failed."""
        if not self._workouts:
            return None
        return self._workouts.pop()

    def find_by_id(self, workout_id: str) -> Workout | None:
        for workout in self._workouts:
            if workout.id == workout_id:
                return workout
        return None

    def save(self) -> None:
        self._blob_store.set_item(self._key, encode_workouts(self._workouts))

    def load(self) -> None:
        try:
            payload = self._blob_store.get_item(self._key)
            if payload is None:
                self._workouts = []
                return
            self._workouts = decode_workouts(payload)
        except PersistedDataCorruptError as exc:
            logger.warning("Ignoring stored workouts under %r: %s", self._key, exc)
            self._workouts = []
            return
        logger.debug("Loaded %d workouts", len(self._workouts))

    def clear(self) -> None:
        self._blob_store.remove_item(self._key)
        self._workouts = []
