"""Packaging of a successful route search."""
from __future__ import annotations

from dataclasses import dataclass, field
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .model import Beacon, Doorway, Node, Vec3, Waypoint, distance, path_length


@dataclass(frozen=True)
class RouteStep:
    index: int
    node_id: str
    name: str
    type_tag: str
    room_id: str
    position: Vec3
    distance_to_next: Optional[float] = None
    connects_rooms: Optional[Tuple[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        step: Dict[str, Any] = {
            "step": self.index,
            "nodeId": self.node_id,
            "nodeName": self.name,
            "nodeType": self.type_tag,
            "roomId": self.room_id,
            "position": {"x": self.position[0], "y": self.position[1], "z": self.position[2]},
        }
        if self.distance_to_next is not None:
            step["distanceToNext"] = self.distance_to_next
        if self.connects_rooms is not None:
            step["connectsRooms"] = {"roomA": self.connects_rooms[0], "roomB": self.connects_rooms[1]}
        return step


@dataclass
class RouteResult:
    nodes: List[Node]
    steps: List[RouteStep]
    total_distance: float
    search_cost: float = 0.0
    nodes_explored: int = 0
    calculated_at: float = field(default_factory=time.time)

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def start_name(self) -> str:
        return self.steps[0].name if self.steps else "Unknown"

    @property
    def end_name(self) -> str:
        return self.steps[-1].name if self.steps else "Unknown"

    @property
    def positions(self) -> List[Vec3]:
        return [step.position for step in self.steps]

    @property
    def rooms_visited(self) -> List[str]:
        rooms: List[str] = []
        for step in self.steps:
            if not rooms or rooms[-1] != step.room_id:
                rooms.append(step.room_id)
        return rooms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pathCalculated": self.calculated_at,
            "totalSteps": self.total_steps,
            "totalDistance": self.total_distance,
            "path": [step.to_dict() for step in self.steps],
            "startNode": self.start_name,
            "endNode": self.end_name,
        }


def build_steps(nodes: Sequence[Node]) -> List[RouteStep]:
    steps: List[RouteStep] = []
    for idx, node in enumerate(nodes):
        to_next = None
        if idx < len(nodes) - 1:
            to_next = distance(node.position, nodes[idx + 1].position)
        steps.append(
            RouteStep(
                index=idx + 1,
                node_id=node.node_id,
                name=node.name,
                type_tag=node.type_tag,
                room_id=node.room_id,
                position=node.position,
                distance_to_next=to_next,
                connects_rooms=node.node_type.connects_rooms if node.is_doorway else None,
            )
        )
    return steps


def build_route_result(nodes: Sequence[Node], search_cost: float = 0.0, nodes_explored: int = 0) -> RouteResult:
    """Assemble a RouteResult; ``total_distance`` is the geometric path length."""
    nodes = list(nodes)
    return RouteResult(
        nodes=nodes,
        steps=build_steps(nodes),
        total_distance=path_length(node.position for node in nodes),
        search_cost=search_cost,
        nodes_explored=nodes_explored,
    )


def route_from_dict(payload: Dict[str, Any]) -> RouteResult:
    """Rebuild a RouteResult from its ``to_dict`` form (used by render_viz)."""
    nodes: List[Node] = []
    for entry in payload.get("path", []):
        tag = str(entry.get("nodeType", "waypoint"))
        pos = entry.get("position", {})
        position = (float(pos.get("x", 0.0)), float(pos.get("y", 0.0)), float(pos.get("z", 0.0)))
        room_id = str(entry.get("roomId", ""))
        if tag.startswith("beacon_"):
            node_type = Beacon(tag[len("beacon_"):])
        elif tag == "doorway":
            rooms = entry.get("connectsRooms") or {}
            node_type = Doorway(str(rooms.get("roomA", room_id)), str(rooms.get("roomB", room_id)))
        else:
            node_type = Waypoint()
        nodes.append(Node(str(entry.get("nodeId")), position, node_type, str(entry.get("nodeName", "")), room_id))
    result = build_route_result(nodes)
    if "pathCalculated" in payload:
        result.calculated_at = float(payload["pathCalculated"])
    return result
