"""Local persistence for recorded workouts.

Workouts live under a single key of a small key-value file that mimics browser
local storage: one JSON object mapping keys to text values. The value under
``STORAGE_KEY`` is itself a JSON document carrying a schema version and a list
of flat workout records.

Derived metrics (pace, speed) and descriptions are written as computed at
creation time and trusted on load; they are never recomputed from distance and
duration.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from mapty.workout.model import VARIANT_KINDS, Cycling, Running, Workout

logger = logging.getLogger(__name__)

STORAGE_KEY = "workouts"
SCHEMA_VERSION = 1


def _default_storage_path() -> Path:
    return Path.home() / ".mapty" / "storage.json"


class StorageError(RuntimeError):
    """Raised when the workout store cannot be written."""


class StorageWriteError(StorageError):
    """Raised when persisting fails, e.g. disk full or read-only directory."""


class StoredDataError(ValueError):
    """Raised when stored workout content does not match the expected layout."""


class JsonFileStorage:
    """Text key-value store backed by one JSON file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or _default_storage_path()

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, RecursionError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: top level is not an object", self.path)
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _write_all(self, items: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(items, ensure_ascii=True, indent=2), encoding="utf-8"
            )
        except OSError as exc:
            raise StorageWriteError(f"Could not write {self.path}: {exc}") from exc

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if key not in items:
            return
        del items[key]
        self._write_all(items)


def workout_to_record(workout: Workout) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": workout.id,
        "created_at": workout.created_at.isoformat(),
        "coordinates": [workout.coordinates[0], workout.coordinates[1]],
        "distance_km": workout.distance_km,
        "duration_min": workout.duration_min,
        "variant_kind": workout.kind,
        "description": workout.description,
    }
    if isinstance(workout, Running):
        record["cadence_spm"] = workout.cadence_spm
        record["pace_min_per_km"] = workout.pace_min_per_km
    elif isinstance(workout, Cycling):
        record["elevation_gain_m"] = workout.elevation_gain_m
        record["speed_kmh"] = workout.speed_kmh
    else:
        raise TypeError(f"Unsupported workout type: {type(workout).__name__}")
    record["interaction_count"] = workout.interaction_count
    return record


def workout_from_record(raw: object, index: int = 0) -> Workout:
    if not isinstance(raw, dict):
        raise StoredDataError(f"Record {index + 1}: must be an object")

    kind = raw.get("variant_kind")
    if kind not in VARIANT_KINDS:
        raise StoredDataError(f"Record {index + 1}: unknown variant_kind {kind!r}")

    common = {
        "id": _str_field(raw, "id", index),
        "created_at": _datetime_field(raw, "created_at", index),
        "coordinates": _coordinates_field(raw, index),
        "distance_km": _float_field(raw, "distance_km", index),
        "duration_min": _float_field(raw, "duration_min", index),
        "description": _str_field(raw, "description", index),
        "interaction_count": _int_field(raw, "interaction_count", index),
    }
    if kind == "running":
        return Running(
            **common,
            cadence_spm=_float_field(raw, "cadence_spm", index),
            pace_min_per_km=_float_field(raw, "pace_min_per_km", index),
        )
    return Cycling(
        **common,
        elevation_gain_m=_float_field(raw, "elevation_gain_m", index),
        speed_kmh=_float_field(raw, "speed_kmh", index),
    )


def encode_workouts(workouts: Iterable[Workout]) -> str:
    payload = {
        "version": SCHEMA_VERSION,
        "workouts": [workout_to_record(workout) for workout in workouts],
    }
    return json.dumps(payload, ensure_ascii=True)


def decode_workouts(text: str) -> list[Workout]:
    try:
        payload = json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise StoredDataError(f"Invalid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise StoredDataError("Stored workouts must be an object")
    version = payload.get("version")
    if version != SCHEMA_VERSION:
        raise StoredDataError(f"Unsupported schema version {version!r}")
    records = payload.get("workouts")
    if not isinstance(records, list):
        raise StoredDataError("Field 'workouts' must be an array")
    return [workout_from_record(raw, index) for index, raw in enumerate(records)]


def save_workouts(workouts: Iterable[Workout], storage: JsonFileStorage) -> None:
    """Overwrite the stored workouts with ``workouts``.

    Raises StorageWriteError when the backing file cannot be written.
    """
    storage.set_item(STORAGE_KEY, encode_workouts(workouts))


def load_workouts(storage: JsonFileStorage) -> list[Workout]:
    """Return stored workouts in insertion order.

    Missing or malformed content yields an empty list; a store is never
    partially restored.
    """
    text = storage.get_item(STORAGE_KEY)
    if text is None:
        return []
    try:
        return decode_workouts(text)
    except StoredDataError as exc:
        logger.warning("Discarding stored workouts: %s", exc)
        return []


def clear_workouts(storage: JsonFileStorage) -> None:
    storage.remove_item(STORAGE_KEY)


def _str_field(raw: dict[str, Any], field_name: str, index: int) -> str:
    value = raw.get(field_name)
    if not isinstance(value, str):
        raise StoredDataError(f"Record {index + 1}: invalid {field_name}")
    return value


def _float_field(raw: dict[str, Any], field_name: str, index: int) -> float:
    value = raw.get(field_name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise StoredDataError(f"Record {index + 1}: invalid {field_name}")
    try:
        number = float(value)
    except OverflowError as exc:
        raise StoredDataError(f"Record {index + 1}: {field_name} out of range") from exc
    if not math.isfinite(number):
        raise StoredDataError(f"Record {index + 1}: {field_name} must be finite")
    return number


def _int_field(raw: dict[str, Any], field_name: str, index: int) -> int:
    value = raw.get(field_name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise StoredDataError(f"Record {index + 1}: invalid {field_name}")
    return value


def _datetime_field(raw: dict[str, Any], field_name: str, index: int) -> datetime:
    value = _str_field(raw, field_name, index)
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise StoredDataError(f"Record {index + 1}: invalid {field_name}") from exc


def _coordinates_field(raw: dict[str, Any], index: int) -> tuple[float, float]:
    value = raw.get("coordinates")
    if not isinstance(value, list) or len(value) != 2:
        raise StoredDataError(f"Record {index + 1}: coordinates must be [lat, lng]")
    lat, lng = value
    return (
        _float_field({"lat": lat}, "lat", index),
        _float_field({"lng": lng}, "lng", index),
    )
