"""
Command-line entry points: main.py, batch.py and render_viz.py.
"""

from __future__ import annotations

import csv
import json

import batch
import main as route_main
import render_viz
from guide_route import Config, GraphBuilder, find_path, load_map, simulate_walk
from guide_route.visualizer import export_visuals, graph_drawing_data


def _run(sample_map_path, tmp_path, *extra):
    argv = [
        "--map",
        str(sample_map_path),
        "--destination",
        "Bed",
        "--position",
        "1.5",
        "0",
        "2.5",
        "--output-root",
        str(tmp_path),
        *extra,
    ]
    return route_main.main(argv)


def test_main_writes_route_and_csv(sample_map_path, tmp_path) -> None:
    assert _run(sample_map_path, tmp_path, "--no-viz") == 0

    run_dir = tmp_path / "map_sample_home_from_kitchen_to_b-bed"
    payload = json.loads((run_dir / "route.json").read_text(encoding="utf-8"))
    assert payload["route"]["endNode"] == "Bed"
    assert payload["config"]["render_visuals"] is False
    assert (run_dir / "timeline.json").exists()
    assert not (run_dir / "route.png").exists()
    run_log = (run_dir / "run.log").read_text(encoding="utf-8")
    assert "Simulation produced 5 timeline events (4 walk legs," in run_log
    assert "remaining=0.00 m, 100%" in run_log

    with (tmp_path / "result.csv").open(newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert rows[-1]["destination"] == "b-bed"
    assert rows[-1]["rooms"] == "kitchen->hall->bedroom"


def test_main_without_simulation(sample_map_path, tmp_path) -> None:
    assert _run(sample_map_path, tmp_path, "--no-viz", "--no-sim") == 0

    run_dir = tmp_path / "map_sample_home_from_kitchen_to_b-bed"
    assert (run_dir / "route.json").exists()
    assert not (run_dir / "timeline.json").exists()


def test_main_unknown_destination_fails(sample_map_path, tmp_path) -> None:
    argv = ["--map", str(sample_map_path), "--destination", "Moon", "--output-root", str(tmp_path), "--no-viz"]

    assert route_main.main(argv) == 1
    assert not (tmp_path / "result.csv").exists()


def test_render_viz_rebuilds_plots(sample_map_path, tmp_path) -> None:
    assert _run(sample_map_path, tmp_path, "--no-viz") == 0
    run_dir = tmp_path / "map_sample_home_from_kitchen_to_b-bed"

    render_viz.main(["--run-dir", str(run_dir)])

    assert (run_dir / "route.png").exists()
    assert (run_dir / "timeline.png").exists()


def test_export_visuals(sample_map_path, tmp_path) -> None:
    graph = GraphBuilder().build(load_map(sample_map_path))
    config = Config(map_file=str(sample_map_path))
    result = find_path(graph, (7.5, 0.0, 1.0), "b-sofa")

    artifacts = export_visuals(graph, config, result, simulate_walk(result, config), tmp_path)

    assert set(artifacts) == {"route", "timeline"}
    assert all(path.exists() for path in artifacts.values())
    nodes, edges = graph_drawing_data(graph)
    assert len(nodes) == 11
    assert len(edges) == len({tuple(sorted(edge)) for edge in edges})


def test_batch_sweep(sample_map_path) -> None:
    graph = GraphBuilder().build(load_map(sample_map_path))
    rows = batch.sweep_destinations(graph, (7.5, 0.0, 1.0), {"destination"})

    assert [row["destination"] for row in rows] == ["Bed", "Fridge", "Sofa"]
    assert all(row["status"] == "ok" for row in rows)
    assert len(graph) == 11


def test_batch_main_writes_csv(sample_map_path, tmp_path) -> None:
    out = tmp_path / "batch.csv"

    assert batch.main(["--map", str(sample_map_path), "--position", "1.5, 0, 2.5", "--out", str(out)]) == 0

    with out.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert len(rows) == 6
    assert {row["status"] for row in rows} == {"ok"}


def test_batch_position_parsing() -> None:
    assert batch._parse_position("1, 2,3") == (1.0, 2.0, 3.0)
    assert batch._parse_list(" a, ,b ") == ["a", "b"]
