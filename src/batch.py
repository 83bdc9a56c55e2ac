#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Batch runner: route from one start position to every beacon and export CSV.

Parameters (via CLI args or env vars):
- --map: map JSON (default: MAP_FILE or maps/sample_home.json)
- --position: start position as "x,y,z"
- --categories: comma list of beacon categories to keep (default: all)
- --out: output CSV path (default: out/batch_results.csv)

Usage examples:
  python src/batch.py --position 1.0,0,1.5
  MAP_FILE=maps/office.json python src/batch.py --categories destination,exit
"""

import os
import sys
import csv
from typing import List, Tuple

sys.path.append(os.path.dirname(__file__))

from configs import BATCH_CONFIG, ROUTE_CONFIG

from guide_route import Config, RouteError, RoutePlanner, build_graph, load_map
from guide_route.logging_utils import setup_logging


CSV_FIELDS = [
    "destination_id",
    "destination",
    "category",
    "room",
    "status",
    "steps",
    "distance",
    "search_cost",
    "route",
]


def _parse_position(s: str) -> Tuple[float, float, float]:
    parts = [p for p in s.replace(" ", "").split(",") if p]
    if len(parts) != 3:
        raise ValueError(f"position must be 'x,y,z', got {s!r}")
    return (float(parts[0]), float(parts[1]), float(parts[2]))


def _parse_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]


def sweep_destinations(graph, position, categories=None) -> List[dict]:
    rows: List[dict] = []
    with RoutePlanner(graph) as planner:
        for beacon in graph.beacon_nodes():
            category = beacon.node_type.category
            if categories and category not in categories:
                continue
            row = {
                "destination_id": beacon.node_id,
                "destination": beacon.name,
                "category": category,
                "room": beacon.room_id,
            }
            try:
                result = planner.route(position, beacon.node_id)
            except RouteError as err:
                row.update({"status": type(err).__name__, "steps": 0, "distance": "", "search_cost": "", "route": ""})
            else:
                row.update(
                    {
                        "status": "ok",
                        "steps": result.total_steps,
                        "distance": f"{result.total_distance:.3f}",
                        "search_cost": f"{result.search_cost:.3f}",
                        "route": " -> ".join(step.name for step in result.steps),
                    }
                )
            rows.append(row)
    return rows


def main(argv=None):
    import argparse

    ap = argparse.ArgumentParser(description="Route to every beacon from one start position")
    ap.add_argument("--map", default=ROUTE_CONFIG["map_file"])
    ap.add_argument("--position", default=os.environ.get("POSITION", BATCH_CONFIG["position"]))
    ap.add_argument("--categories", default=os.environ.get("CATEGORIES", BATCH_CONFIG["categories"]))
    ap.add_argument("--out", default=os.environ.get("OUT", BATCH_CONFIG["out"]))
    args = ap.parse_args(argv)

    logger = setup_logging()
    config = Config(
        map_file=args.map,
        search_radius=ROUTE_CONFIG["search_radius"],
        max_virtual_connections=ROUTE_CONFIG["max_virtual_connections"],
        doorway_penalty=ROUTE_CONFIG["doorway_penalty"],
    )
    graph = build_graph(load_map(config.map_file), config)
    position = _parse_position(args.position)
    categories = set(_parse_list(args.categories))

    rows = sweep_destinations(graph, position, categories)

    out_dir = os.path.dirname(args.out)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(args.out, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

    ok = sum(1 for row in rows if row["status"] == "ok")
    logger.info("Batch complete: %d/%d destinations reachable -> %s", ok, len(rows), args.out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
