"""Route graph: node storage, adjacency, room index and the virtual start node."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple
import threading
import uuid

from .logging_utils import get_logger
from .model import (
    UNKNOWN_ROOM,
    Beacon,
    Doorway,
    Edge,
    EdgeClass,
    Node,
    Vec3,
    Waypoint,
    distance,
)

DEFAULT_SEARCH_RADIUS = 6.0
DEFAULT_MAX_CONNECTIONS = 3
VIRTUAL_NODE_NAME = "Start Position"

Candidate = Tuple[Node, float, float]


def _proximity_score(d: float) -> float:
    return max(0.0, 100.0 - 15.0 * d)


def score_candidate(node: Node, d: float, start_room: str) -> Optional[float]:
    """Rank a node as an attachment point for a start position in ``start_room``.

    Returns ``None`` when the node must not be connected at all: doorways that
    do not open onto the start room, and every non-doorway node of another
    room. Excluding those is what keeps routes from crossing room boundaries
    anywhere except at a doorway.
    """
    node_type = node.node_type
    if isinstance(node_type, Doorway):
        if not node_type.connects(start_room):
            return None
        bonus = 100.0 if node_type.room_a == start_room else 0.0
        return _proximity_score(d) + 400.0 + bonus

    if node.room_id != start_room:
        return None
    if isinstance(node_type, Waypoint):
        return _proximity_score(d) + 150.0
    if isinstance(node_type, Beacon):
        if node_type.category == "destination":
            return _proximity_score(d) + 100.0
        if node_type.category in ("furniture", "obstacle"):
            return _proximity_score(d) + (-100.0 if d > 2.0 else 20.0)
        return _proximity_score(d) + 50.0
    return _proximity_score(d)


class RouteGraph:
    """Undirected weighted graph of map nodes, partitioned by room.

    Edges are stored per source id; every connection is inserted in both
    directions. At most one virtual start node is attached at a time and it is
    never placed in the room index.
    """

    def __init__(
        self,
        search_radius: float = DEFAULT_SEARCH_RADIUS,
        max_virtual_connections: int = DEFAULT_MAX_CONNECTIONS,
    ) -> None:
        self.search_radius = float(search_radius)
        self.max_virtual_connections = int(max_virtual_connections)
        self._nodes: Dict[str, Node] = {}
        self._adjacency: Dict[str, List[Edge]] = {}
        self._room_nodes: Dict[str, List[str]] = {}
        self._virtual_id: Optional[str] = None
        # guards the insert/search/remove bracket of a query; reentrant so a
        # caller holding it can still enter virtual_start_node
        self.lock = threading.RLock()

    # ------------------------------------------------------------------
    # construction (used by the builder)
    # ------------------------------------------------------------------
    def add_node(self, node: Node) -> None:
        if node.node_id in self._nodes:
            raise ValueError(f"duplicate node id {node.node_id!r}")
        self._nodes[node.node_id] = node
        self._adjacency[node.node_id] = []
        self._room_nodes.setdefault(node.room_id, []).append(node.node_id)

    def add_edge(self, source: str, target: str, weight: float, edge_class: EdgeClass) -> None:
        self._adjacency.setdefault(source, []).append(Edge(source, target, float(weight), edge_class))

    def connect(self, a: str, b: str, weight: float, edge_class: EdgeClass) -> None:
        self.add_edge(a, b, weight, edge_class)
        self.add_edge(b, a, weight, edge_class)

    # ------------------------------------------------------------------
    # read accessors
    # ------------------------------------------------------------------
    @property
    def nodes(self) -> Dict[str, Node]:
        return self._nodes

    @property
    def adjacency(self) -> Dict[str, List[Edge]]:
        return self._adjacency

    @property
    def room_nodes(self) -> Dict[str, List[str]]:
        return self._room_nodes

    @property
    def room_ids(self) -> List[str]:
        return list(self._room_nodes)

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for edges in self._adjacency.values())

    @property
    def virtual_node_id(self) -> Optional[str]:
        return self._virtual_id

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def get_edges(self, node_id: str) -> List[Edge]:
        return list(self._adjacency.get(node_id, []))

    def get_neighbors(self, node_id: str) -> List[Tuple[Node, float]]:
        neighbors: List[Tuple[Node, float]] = []
        for edge in self._adjacency.get(node_id, []):
            node = self._nodes.get(edge.target)
            if node is not None:
                neighbors.append((node, edge.weight))
        return neighbors

    def distance(self, a: str, b: str) -> float:
        node_a = self._nodes.get(a)
        node_b = self._nodes.get(b)
        if node_a is None or node_b is None:
            return float("inf")
        return distance(node_a.position, node_b.position)

    def beacon_nodes(self) -> List[Node]:
        """Every beacon in the map, sorted by display name."""
        return sorted((n for n in self._nodes.values() if n.is_beacon), key=lambda n: n.name)

    def find_node_by_name(self, name: str) -> Optional[Node]:
        for node in self._nodes.values():
            if node.node_id != self._virtual_id and node.name == name:
                return node
        return None

    def find_nearest_node(self, position: Vec3) -> Optional[Node]:
        nearest: Optional[Node] = None
        best = float("inf")
        for node_id, node in self._nodes.items():
            if node_id == self._virtual_id:
                continue
            d = distance(position, node.position)
            if d < best:
                best = d
                nearest = node
        return nearest

    def find_nearest_room(self, position: Vec3) -> str:
        nearest_room = UNKNOWN_ROOM
        best = float("inf")
        for room_id, node_ids in self._room_nodes.items():
            for node_id in node_ids:
                node = self._nodes.get(node_id)
                if node is None:
                    continue
                d = distance(position, node.position)
                if d < best:
                    best = d
                    nearest_room = room_id
        return nearest_room

    # ------------------------------------------------------------------
    # virtual start node lifecycle
    # ------------------------------------------------------------------
    def is_virtual_node(self, node_id: str) -> bool:
        return self._virtual_id is not None and node_id == self._virtual_id

    def add_virtual_start_node(self, position: Vec3) -> str:
        """Attach an ephemeral node at ``position`` and return its id."""
        self.remove_virtual_start_node()
        logger = get_logger()

        position = (float(position[0]), float(position[1]), float(position[2]))
        start_room = self.find_nearest_room(position)
        virtual_id = f"virtual-{uuid.uuid4().hex}"
        while virtual_id in self._nodes:
            virtual_id = f"virtual-{uuid.uuid4().hex}"

        self._nodes[virtual_id] = Node(virtual_id, position, Waypoint(), VIRTUAL_NODE_NAME, start_room)
        self._adjacency[virtual_id] = []
        self._virtual_id = virtual_id
        logger.debug("[virtual] start node %s at %s room=%s", virtual_id, position, start_room)

        candidates = self._virtual_candidates(virtual_id, position, start_room)
        if candidates:
            for node, d, score in candidates[: self.max_virtual_connections]:
                self.connect(virtual_id, node.node_id, d, EdgeClass.TO_VIRTUAL)
                logger.debug(
                    "[virtual]   -> %s (%s) d=%.2f score=%.0f", node.name, node.type_tag, d, score
                )
        else:
            nearest = self.find_nearest_node(position)
            if nearest is not None:
                d = distance(position, nearest.position)
                self.connect(virtual_id, nearest.node_id, d, EdgeClass.TO_VIRTUAL)
                logger.debug(
                    "[virtual] no candidate within %.1f, fallback to nearest %s d=%.2f",
                    self.search_radius,
                    nearest.name,
                    d,
                )
            else:
                logger.debug("[virtual] graph is empty, start node left unconnected")
        return virtual_id

    def _virtual_candidates(self, virtual_id: str, position: Vec3, start_room: str) -> List[Candidate]:
        candidates: List[Candidate] = []
        for node_id, node in self._nodes.items():
            if node_id == virtual_id:
                continue
            d = distance(position, node.position)
            if d > self.search_radius:
                continue
            score = score_candidate(node, d, start_room)
            if score is not None:
                candidates.append((node, d, score))
        candidates.sort(key=lambda item: item[2], reverse=True)
        return candidates

    def remove_virtual_start_node(self) -> None:
        virtual_id = self._virtual_id
        if virtual_id is None:
            return
        self._nodes.pop(virtual_id, None)
        self._adjacency.pop(virtual_id, None)
        for edges in self._adjacency.values():
            if any(edge.target == virtual_id for edge in edges):
                edges[:] = [edge for edge in edges if edge.target != virtual_id]
        self._virtual_id = None
        get_logger().debug("[virtual] removed start node %s", virtual_id)

    @contextmanager
    def virtual_start_node(self, position: Vec3) -> Iterator[str]:
        """Scope a virtual start node; it is removed on every exit path.

        The graph lock is held for the whole scope, so concurrent queries on
        one graph never see each other's start node.
        """
        with self.lock:
            virtual_id = self.add_virtual_start_node(position)
            try:
                yield virtual_id
            finally:
                self.remove_virtual_start_node()
