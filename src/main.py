"""CLI entrypoint that wires configuration, graph building, routing and reporting."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

CURRENT_DIR = Path(__file__).parent
if str(CURRENT_DIR) not in sys.path:
    sys.path.append(str(CURRENT_DIR))

from configs import ROUTE_CONFIG
from guide_route import Config, RouteError, RoutePlanner, build_graph, load_map, simulate_walk
from guide_route.io_utils import prepare_output_dir, save_route, save_timeline
from guide_route.logging_utils import add_file_handler, close_file_handlers, get_logger, setup_logging
from guide_route.reporting import (
    append_result_record,
    build_result_record,
    build_viz_payload,
    summarize_route,
)
from guide_route.simulator import estimated_duration, leg_counts
from guide_route.visualizer import export_visuals


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="GuideRoute indoor route planner")
    parser.add_argument("--map", default=ROUTE_CONFIG["map_file"], help="Path to the map JSON file")
    parser.add_argument("--destination", required=True, help="Destination node id or name")
    parser.add_argument(
        "--position",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=(0.0, 0.0, 0.0),
        help="Live position of the walker in map coordinates (meters)",
    )
    parser.add_argument(
        "--heading",
        type=float,
        nargs=2,
        metavar=("X", "Z"),
        default=None,
        help="Current horizontal heading, used for the first turn instruction",
    )
    parser.add_argument("--output-root", default=ROUTE_CONFIG["output_root"], help="Directory for generated artifacts")
    parser.add_argument("--no-sim", action="store_true", help="Skip the walk simulation stage")
    parser.add_argument("--no-viz", action="store_true", help="Skip rendering plots")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> Config:
    base_config = Config(
        map_file=args.map,
        search_radius=ROUTE_CONFIG.get("search_radius", Config().search_radius),
        max_virtual_connections=ROUTE_CONFIG.get("max_virtual_connections", Config().max_virtual_connections),
        doorway_penalty=ROUTE_CONFIG.get("doorway_penalty", Config().doorway_penalty),
        walk_speed=ROUTE_CONFIG.get("walk_speed", Config().walk_speed),
        turn_hysteresis=ROUTE_CONFIG.get("turn_hysteresis", Config().turn_hysteresis),
        arrival_threshold=ROUTE_CONFIG.get("arrival_threshold", Config().arrival_threshold),
        run_simulation=ROUTE_CONFIG.get("run_simulation", True) and not args.no_sim,
        render_visuals=ROUTE_CONFIG.get("render_visuals", True) and not args.no_viz,
        output_root=args.output_root,
    )
    return base_config.with_env_overrides()


def main(argv=None) -> int:
    args = parse_args(argv)
    logger = setup_logging(debug=args.debug)
    config = config_from_args(args)
    logger.info("Global configuration:\n%s", json.dumps(config.to_dict(), ensure_ascii=False, indent=2))

    logger.info("[step 1/4] Building route graph from %s", config.map_file)
    map_data = load_map(config.map_file)
    graph = build_graph(map_data, config)

    destination = graph.get_node(args.destination) or graph.find_node_by_name(args.destination)
    destination_id = destination.node_id if destination else args.destination
    position = tuple(args.position)

    logger.info("[step 2/4] Routing from %s to %s", position, destination_id)
    try:
        with RoutePlanner(graph) as planner:
            result = planner.route(position, destination_id)
    except RouteError as err:
        logger.error("Routing failed: %s", err)
        return 1
    logger.info(
        "[step 2/4] Route found: %d steps, %.2f m (search cost %.2f, %d nodes explored)",
        result.total_steps,
        result.total_distance,
        result.search_cost,
        result.nodes_explored,
    )

    output_dir = prepare_output_dir(config.output_root, config.map_file, destination_id, result.steps[0].room_id)
    per_run_log = output_dir / "run.log"
    add_file_handler(per_run_log)
    logger.info("Per-run detailed log: %s", per_run_log)
    try:
        return _write_artifacts(args, config, graph, result, destination_id, output_dir)
    finally:
        close_file_handlers()


def _write_artifacts(args, config, graph, result, destination_id, output_dir) -> int:
    logger = get_logger()

    if config.run_simulation:
        logger.info("[step 3/4] Running walk simulation")
        timeline = simulate_walk(result, config, initial_heading=tuple(args.heading) if args.heading else None)
        counts = leg_counts(timeline)
        logger.info(
            "[step 3/4] Simulation produced %d timeline events (%d walk legs, %d turns, eta=%.1fs)",
            len(timeline),
            counts.get("walk", 0),
            sum(1 for entry in timeline if entry.get("side")),
            estimated_duration(timeline),
        )
    else:
        logger.info("[step 3/4] Simulation skipped (run_simulation=False)")
        timeline = []

    route_path = save_route(output_dir, {"config": config.to_dict(), "route": result.to_dict()})
    logger.info("[step 3/4] Saved route to %s", route_path)
    timeline_path = None
    if timeline:
        timeline_path = save_timeline(output_dir, timeline)
        logger.info("[step 3/4] Saved timeline to %s", timeline_path)

    summary = summarize_route(result, timeline, config)
    logger.info("Rooms: %s", " -> ".join(summary.get("rooms", [])) or "N/A")
    for step in result.steps:
        logger.info(
            "[step %d] %s (%s, room=%s) next=%s",
            step.index,
            step.name,
            step.type_tag,
            step.room_id,
            f"{step.distance_to_next:.2f} m" if step.distance_to_next is not None else "-",
        )
    for frame_idx, frame in enumerate(timeline, 1):
        logger.info(
            "[frame %d] %s -> %s: %s (t0=%.2f, t1=%.2f, remaining=%.2f m, %.0f%%)",
            frame_idx,
            frame.get("from_name"),
            frame.get("to_name"),
            frame.get("instruction"),
            frame.get("t0", 0.0),
            frame.get("t1", 0.0),
            frame.get("remaining", 0.0),
            frame.get("progress", 0.0),
        )

    viz_artifacts = {}
    if config.render_visuals:
        logger.info("[step 4/4] Generating visualization outputs")
        payload = build_viz_payload(graph, result, timeline, config)
        viz_artifacts = export_visuals(graph, config, result, timeline, output_dir, payload=payload)
        logger.info(
            "[step 4/4] Visualization artifacts: %s",
            ", ".join(f"{key}={path.name}" for key, path in viz_artifacts.items()) or "none",
        )
    else:
        logger.info("[step 4/4] Visualization skipped")

    record = build_result_record(result, timeline, config, destination_id)
    result_csv = Path(config.output_root) / "result.csv"
    append_result_record(record, result_csv)
    logger.info(
        "Route summary -> map=%s from=%s to=%s distance=%s eta=%s",
        record["map"],
        record["start_room"],
        record["destination"],
        record["distance"],
        record["eta"],
    )

    print(f"Route written to {route_path}")
    if timeline_path:
        print(f"Timeline written to {timeline_path}")
    if viz_artifacts:
        print(f"Visualization assets saved under {output_dir}")
    print(f"Run summary appended to {result_csv}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
