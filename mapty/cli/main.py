"""Command line entrypoint for Mapty."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from mapty.core.config import AppConfig
from mapty.ui.render import ICONS
from mapty.workout.store import (
    JsonFileStorage,
    StorageWriteError,
    clear_workouts,
    load_workouts,
)
from mapty.workout.validation import ELEVATION_POLICIES


def build_parser() -> argparse.ArgumentParser:
    defaults = AppConfig()
    parser = argparse.ArgumentParser(description="Mapty workout logger")
    parser.add_argument(
        "--ui-web",
        action="store_true",
        help="Launch the web UI (NiceGUI) with the workout map",
    )
    parser.add_argument("--list", action="store_true", help="Print stored workouts")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete all stored workouts",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=defaults.store_path,
        help="Path of the workout storage file",
    )
    parser.add_argument(
        "--zoom",
        type=int,
        default=defaults.zoom_level,
        help="Map zoom level used when centering on a position",
    )
    parser.add_argument(
        "--elevation-policy",
        choices=ELEVATION_POLICIES,
        default=defaults.elevation_policy,
        help="Which cycling elevation gains the form accepts",
    )
    parser.add_argument(
        "--geolocation-timeout",
        type=float,
        default=defaults.geolocation_timeout_sec,
        help="Seconds to wait for the browser position before giving up",
    )
    parser.add_argument("--web-host", default=defaults.host, help="Host bind for --ui-web")
    parser.add_argument("--web-port", type=int, default=defaults.port, help="Port for --ui-web")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> AppConfig:
    return AppConfig(
        store_path=args.store,
        zoom_level=args.zoom,
        elevation_policy=args.elevation_policy,
        geolocation_timeout_sec=max(0.0, args.geolocation_timeout),
        host=args.web_host,
        port=args.web_port,
    )


def run_list(config: AppConfig) -> int:
    workouts = load_workouts(JsonFileStorage(config.store_path))
    if not workouts:
        print("No stored workouts")
        return 0

    for workout in workouts:
        lat, lng = workout.coordinates
        print(
            f"{workout.id} {ICONS[workout.kind]} {workout.description:<24} "
            f"{workout.distance_km:g} km {workout.duration_min:g} min "
            f"@ {lat:.4f},{lng:.4f}"
        )
    return 0


def run_reset(config: AppConfig) -> int:
    try:
        clear_workouts(JsonFileStorage(config.store_path))
    except StorageWriteError as exc:
        print(f"Reset failed: {exc}")
        return 1
    print(f"Cleared stored workouts in {config.store_path}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = config_from_args(args)

    if args.reset:
        return run_reset(config)
    if args.list:
        return run_list(config)
    if args.ui_web:
        from mapty.ui.web_app import run_web_ui

        return run_web_ui(config)

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
