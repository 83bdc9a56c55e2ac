"""
A* route search over a RouteGraph.

- The start is the live position, attached to the graph as a virtual node for
  the duration of one query.
- Straight-line distance heuristic; edge weights are never below straight-line
  distance, so the heuristic is admissible and consistent.
- Binary-heap frontier with lazy deletion of stale entries.
"""

from __future__ import annotations

import heapq
from itertools import count
from threading import Event
from typing import Dict, List, Optional, Tuple

from .errors import DestinationNotFound, EmptyGraph, NoPathFound, SearchCancelled
from .graph import RouteGraph
from .logging_utils import get_logger
from .model import Node, Vec3, distance
from .result import RouteResult, build_route_result


def find_path(
    graph: RouteGraph,
    live_position: Vec3,
    destination_id: str,
    cancel_event: Optional[Event] = None,
) -> RouteResult:
    """
    Route from ``live_position`` to the node ``destination_id``.

    Raises DestinationNotFound (EmptyGraph when the graph has no nodes),
    NoPathFound when the destination is unreachable, and SearchCancelled when
    ``cancel_event`` is set mid-search. The graph is left exactly as it was
    found in every case. Queries on one graph are serialised on ``graph.lock``.
    """
    logger = get_logger()
    with graph.lock:
        if len(graph) == 0:
            raise EmptyGraph(destination_id)
        destination = graph.get_node(destination_id)
        if destination is None or graph.is_virtual_node(destination_id):
            raise DestinationNotFound(destination_id)

        logger.debug("[search] %s -> %s (%s)", live_position, destination.name, destination_id)
        with graph.virtual_start_node(live_position) as start_id:
            start = graph.get_node(start_id)
            found = _run_astar(graph, start, destination, cancel_event)
            if found is None:
                raise NoPathFound(start.room_id, destination_id)
            path, cost, explored = found
            result = build_route_result(path, search_cost=cost, nodes_explored=explored)

    logger.debug(
        "[search] path found: %d nodes, distance=%.2f cost=%.2f explored=%d",
        result.total_steps,
        result.total_distance,
        result.search_cost,
        result.nodes_explored,
    )
    return result


def _heuristic(node: Node, goal: Node) -> float:
    return distance(node.position, goal.position)


def _run_astar(
    graph: RouteGraph,
    start: Node,
    goal: Node,
    cancel_event: Optional[Event],
) -> Optional[Tuple[List[Node], float, int]]:
    tie = count()
    open_heap: List[Tuple[float, int, str]] = []
    heapq.heappush(open_heap, (_heuristic(start, goal), next(tie), start.node_id))

    came_from: Dict[str, str] = {}
    g_score: Dict[str, float] = {start.node_id: 0.0}
    closed: set = set()
    explored = 0

    while open_heap:
        if cancel_event is not None and cancel_event.is_set():
            raise SearchCancelled(f"search for {goal.node_id!r} cancelled")

        _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        closed.add(current)
        explored += 1

        if current == goal.node_id:
            return _reconstruct_path(graph, came_from, current), g_score[current], explored

        for neighbor, weight in graph.get_neighbors(current):
            nid = neighbor.node_id
            if nid in closed:
                continue
            tentative_g = g_score[current] + weight
            if tentative_g < g_score.get(nid, float("inf")):
                came_from[nid] = current
                g_score[nid] = tentative_g
                heapq.heappush(open_heap, (tentative_g + _heuristic(neighbor, goal), next(tie), nid))

    get_logger().debug("[search] frontier exhausted after %d nodes", explored)
    return None


def _reconstruct_path(graph: RouteGraph, came_from: Dict[str, str], current: str) -> List[Node]:
    """Reconstruct full path from came_from map."""
    path: List[Node] = [graph.nodes[current]]
    while current in came_from:
        current = came_from[current]
        path.append(graph.nodes[current])
    path.reverse()
    return path
