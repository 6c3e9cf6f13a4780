"""Command-line entrypoint for the workout map tracker."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from tracker.ui.controller import DEFAULT_ZOOM_LEVEL
from tracker.ui.render import to_list_entry_descriptor
from tracker.workout.model import Coordinates
from tracker.workout.store import FileBlobStore, WorkoutStore


def _parse_location(raw: str) -> Coordinates:
    try:
        lat_raw, lng_raw = raw.split(",")
        return (float(lat_raw), float(lng_raw))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"invalid location {raw!r}, expected LAT,LNG"
        ) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Workout map tracker")
    parser.add_argument(
        "--ui-web",
        action="store_true",
        help="Launch the web UI (NiceGUI map, form and workout list)",
    )
    parser.add_argument("--web-host", default="127.0.0.1", help="Host bind for --ui-web")
    parser.add_argument("--web-port", type=int, default=8090, help="Port for --ui-web")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding stored workouts (default: ~/.workout-map)",
    )
    parser.add_argument(
        "--zoom",
        type=int,
        default=DEFAULT_ZOOM_LEVEL,
        help="Map zoom level used when centering on a position or workout",
    )
    parser.add_argument(
        "--sim-location",
        type=_parse_location,
        default=None,
        metavar="LAT,LNG",
        help="Use a fixed position instead of asking the browser for one",
    )
    parser.add_argument("--list", action="store_true", help="Print stored workouts")
    parser.add_argument("--reset", action="store_true", help="Delete all stored workouts")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def run_list(data_dir: Path | None) -> int:
    store = WorkoutStore(FileBlobStore(data_dir))
    store.load()
    if not len(store):
        print("No workouts recorded")
        return 0

    for workout in store.all():
        entry = to_list_entry_descriptor(workout)
        print(
            f"{entry.id[:10]}  {entry.description:<22} "
            f"{entry.distance_km:>6.2f} km {entry.duration_min:>6.1f} min  "
            f"{entry.secondary_metric_label}={entry.secondary_metric_value} "
            f"{entry.secondary_metric_unit}  "
            f"{entry.tertiary_metric_label}={entry.tertiary_metric_value} "
            f"{entry.tertiary_metric_unit}"
        )
    return 0


def run_reset(data_dir: Path | None) -> int:
    store = WorkoutStore(FileBlobStore(data_dir))
    store.clear()
    print("Stored workouts deleted")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.reset:
        return run_reset(args.data_dir)
    if args.list:
        return run_list(args.data_dir)
    if args.ui_web:
        from tracker.ui.web_app import run_web_ui

        return run_web_ui(
            host=args.web_host,
            port=args.web_port,
            data_dir=args.data_dir,
            zoom_level=args.zoom,
            sim_location=args.sim_location,
        )

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
