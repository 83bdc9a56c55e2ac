#!/usr/bin/env python3
"""CLI helper to rebuild visualization assets from saved runs."""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

CURRENT_DIR = Path(__file__).resolve().parent
if str(CURRENT_DIR) not in sys.path:
    sys.path.append(str(CURRENT_DIR))

from guide_route import Config, build_graph, load_map
from guide_route.io_utils import load_json
from guide_route.result import route_from_dict
from guide_route.visualizer import export_visuals


def _resolve_map_path(map_file: str) -> Path:
    """Saved configs may hold a path relative to the repo root."""
    path = Path(map_file)
    if not path.exists():
        candidate = (CURRENT_DIR.parent / map_file).resolve()
        if candidate.exists():
            return candidate
    return path


def _latest_run(output_root: Path) -> Path | None:
    if not output_root.is_dir():
        return None
    runs = [child for child in output_root.iterdir() if (child / "route.json").is_file()]
    return max(runs, key=lambda run: (run / "route.json").stat().st_mtime, default=None)


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Rebuild GuideRoute visualization outputs")
    parser.add_argument("--run-dir", default=None, help="Run directory holding route.json (default: latest run)")
    parser.add_argument(
        "--output-root",
        default=os.environ.get("OUTPUT_ROOT", "out"),
        help="Root directory searched for the latest run",
    )
    args = parser.parse_args(argv)

    run_dir = Path(args.run_dir).resolve() if args.run_dir else _latest_run(Path(args.output_root).resolve())
    if run_dir is None:
        raise SystemExit("No prior run artifacts found. Run src/main.py first or provide --run-dir.")
    route_path = run_dir / "route.json"
    if not route_path.exists():
        raise SystemExit(f"route.json not found under {run_dir}")

    saved = load_json(route_path)
    config = Config(**saved.get("config", {}))
    result = route_from_dict(saved.get("route", {}))
    timeline_path = run_dir / "timeline.json"
    timeline = load_json(timeline_path).get("timeline", []) if timeline_path.exists() else []

    graph = build_graph(load_map(_resolve_map_path(config.map_file)), config)
    artifacts = export_visuals(graph, config, result, timeline, run_dir)
    if not artifacts:
        print("No route data found to visualize.")
        return
    names = ", ".join(f"{key}:{path.name}" for key, path in artifacts.items())
    print(f"Rebuilt visualization assets ({names}) in {run_dir}")


if __name__ == "__main__":
    main()
