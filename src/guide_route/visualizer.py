"""Visualization export helpers."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

from .config import Config
from .graph import RouteGraph
from .reporting import build_viz_payload
from .result import RouteResult

import viz


def graph_drawing_data(graph: RouteGraph) -> Tuple[Dict[str, dict], List[Tuple[str, str]]]:
    """Flatten the graph into the plain dicts the plotting helpers expect."""
    nodes = {
        nid: {
            "x": node.position[0],
            "z": node.position[2],
            "type": node.type_tag,
            "room": node.room_id,
            "name": node.name,
        }
        for nid, node in graph.nodes.items()
        if not graph.is_virtual_node(nid)
    }
    seen = set()
    edges: List[Tuple[str, str]] = []
    for source, adjacency in graph.adjacency.items():
        for edge in adjacency:
            key = tuple(sorted((source, edge.target)))
            if key in seen:
                continue
            seen.add(key)
            edges.append((source, edge.target))
    return nodes, edges


def export_visuals(
    graph: RouteGraph,
    config: Config,
    result: RouteResult,
    timeline: List[dict] | None,
    output_dir: Path,
    payload: dict | None = None,
) -> Dict[str, Path]:
    """Render the route plot and the walk timeline chart for a run."""

    payload = payload or build_viz_payload(graph, result, timeline, config)
    if not payload:
        return {}

    nodes, edges = graph_drawing_data(graph)
    artifacts: Dict[str, Path] = {}

    route_path = output_dir / "route.png"
    viz.plot_route(nodes, edges, payload, savepath=str(route_path))
    artifacts["route"] = route_path

    if payload.get("timeline"):
        timeline_path = output_dir / "timeline.png"
        viz.plot_timeline(payload, savepath=str(timeline_path))
        artifacts["timeline"] = timeline_path

    return artifacts
