"""Runtime configuration shared by the CLI and the web UI."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from mapty.workout.validation import ElevationPolicy


def _default_data_dir() -> Path:
    return Path.home() / ".mapty"


@dataclass(frozen=True)
class AppConfig:
    store_path: Path = field(default_factory=lambda: _default_data_dir() / "storage.json")
    zoom_level: int = 13
    elevation_policy: ElevationPolicy = "any"
    geolocation_timeout_sec: float = 30.0
    host: str = "127.0.0.1"
    port: int = 8090
