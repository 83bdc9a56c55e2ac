"""Turn raw map records into a RouteGraph."""
from __future__ import annotations

from itertools import combinations
from typing import Any, Dict, List, Optional

from .errors import MalformedRecord
from .graph import DEFAULT_MAX_CONNECTIONS, DEFAULT_SEARCH_RADIUS, RouteGraph
from .logging_utils import get_logger
from .map_data import MapData, parse_position
from .model import Beacon, Doorway, EdgeClass, Node, Waypoint, distance

DEFAULT_DOORWAY_PENALTY = 1.2


def _require_str(record: Dict[str, Any], key: str, kind: str) -> str:
    value = record.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedRecord(kind, record.get("id"), f"missing or invalid '{key}'")
    return value


def _record_position(record: Dict[str, Any], kind: str):
    raw = record.get("position", record.get("coordinates"))
    if raw is None:
        raise MalformedRecord(kind, record.get("id"), "missing 'position'")
    try:
        return parse_position(raw)
    except ValueError as exc:
        raise MalformedRecord(kind, record.get("id"), str(exc)) from exc


def beacon_node(record: Any) -> Node:
    if not isinstance(record, dict):
        raise MalformedRecord("beacon", None, "record is not an object")
    node_id = _require_str(record, "id", "beacon")
    name = _require_str(record, "name", "beacon")
    room_id = _require_str(record, "roomId", "beacon")
    category = record.get("category") or "general"
    if not isinstance(category, str):
        raise MalformedRecord("beacon", node_id, "invalid 'category'")
    return Node(node_id, _record_position(record, "beacon"), Beacon(category), name, room_id)


def waypoint_node(record: Any) -> Node:
    if not isinstance(record, dict):
        raise MalformedRecord("waypoint", None, "record is not an object")
    node_id = _require_str(record, "id", "waypoint")
    name = _require_str(record, "name", "waypoint")
    room_id = _require_str(record, "roomId", "waypoint")
    return Node(node_id, _record_position(record, "waypoint"), Waypoint(), name, room_id)


def doorway_node(record: Any) -> Node:
    if not isinstance(record, dict):
        raise MalformedRecord("doorway", None, "record is not an object")
    node_id = _require_str(record, "id", "doorway")
    name = _require_str(record, "name", "doorway")
    connects = record.get("connectsRooms")
    if not isinstance(connects, dict):
        raise MalformedRecord("doorway", node_id, "missing 'connectsRooms'")
    room_a = connects.get("roomA")
    room_b = connects.get("roomB")
    if not isinstance(room_a, str) or not room_a or not isinstance(room_b, str) or not room_b:
        raise MalformedRecord("doorway", node_id, "'connectsRooms' needs roomA and roomB")
    # roomA is the doorway's primary room
    return Node(node_id, _record_position(record, "doorway"), Doorway(room_a, room_b), name, room_a)


class GraphBuilder:
    """Builds a RouteGraph from a MapData bundle.

    Malformed or duplicate records are logged and collected in ``skipped``;
    they never abort the build.
    """

    def __init__(
        self,
        doorway_penalty: float = DEFAULT_DOORWAY_PENALTY,
        search_radius: float = DEFAULT_SEARCH_RADIUS,
        max_virtual_connections: int = DEFAULT_MAX_CONNECTIONS,
    ) -> None:
        if doorway_penalty < 1.0:
            # below 1.0 the straight-line heuristic could overestimate
            raise ValueError(f"doorway_penalty must be >= 1.0, got {doorway_penalty}")
        self.doorway_penalty = float(doorway_penalty)
        self.search_radius = search_radius
        self.max_virtual_connections = max_virtual_connections
        self.skipped: List[MalformedRecord] = []

    def build(self, map_data: MapData) -> RouteGraph:
        logger = get_logger()
        self.skipped = []
        graph = RouteGraph(self.search_radius, self.max_virtual_connections)

        for records, make_node in (
            (map_data.beacons, beacon_node),
            (map_data.waypoints, waypoint_node),
            (map_data.doorways, doorway_node),
        ):
            for record in records:
                node = self._parse(record, make_node)
                if node is not None:
                    self._insert(graph, node)

        self._connect_within_rooms(graph)
        self._connect_doorways(graph)

        if len(graph) == 0:
            logger.warning("Map '%s' produced an empty graph", map_data.name)
        logger.info(
            "Graph built for '%s': records=%d nodes=%d edges=%d rooms=%d skipped=%d",
            map_data.name,
            map_data.record_count,
            len(graph),
            graph.edge_count,
            len(graph.room_ids),
            len(self.skipped),
        )
        return graph

    def _parse(self, record: Any, make_node) -> Optional[Node]:
        try:
            return make_node(record)
        except MalformedRecord as err:
            self._skip(err)
            return None

    def _insert(self, graph: RouteGraph, node: Node) -> None:
        if node.node_id in graph:
            kind = node.type_tag.split("_", 1)[0]
            self._skip(MalformedRecord(kind, node.node_id, "duplicate id"))
            return
        graph.add_node(node)

    def _skip(self, err: MalformedRecord) -> None:
        get_logger().warning("Skipping %s", err)
        self.skipped.append(err)

    def _connect_within_rooms(self, graph: RouteGraph) -> None:
        for room_id, node_ids in graph.room_nodes.items():
            members = [
                graph.nodes[nid]
                for nid in node_ids
                if not (graph.nodes[nid].is_doorway and graph.nodes[nid].room_id != room_id)
            ]
            for a, b in combinations(members, 2):
                graph.connect(a.node_id, b.node_id, distance(a.position, b.position), EdgeClass.WITHIN_ROOM)

    def _connect_doorways(self, graph: RouteGraph) -> None:
        doorways = [node for node in graph.nodes.values() if node.is_doorway]
        for door in doorways:
            for room_id in door.node_type.connects_rooms:
                for nid in list(graph.room_nodes.get(room_id, [])):
                    if nid == door.node_id:
                        continue
                    other = graph.nodes[nid]
                    weight = distance(door.position, other.position) * self.doorway_penalty
                    graph.connect(door.node_id, nid, weight, EdgeClass.THROUGH_DOORWAY)


def build_graph(map_data: MapData, config=None) -> RouteGraph:
    """Build a graph using the tuning values from ``config`` when given."""
    if config is None:
        return GraphBuilder().build(map_data)
    builder = GraphBuilder(
        doorway_penalty=config.doorway_penalty,
        search_radius=config.search_radius,
        max_virtual_connections=config.max_virtual_connections,
    )
    return builder.build(map_data)
