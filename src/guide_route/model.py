"""Domain data structures shared by the builder, graph and search."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple, Union

Vec3 = Tuple[float, float, float]

UNKNOWN_ROOM = "unknown"


def distance(a: Vec3, b: Vec3) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    dz = a[2] - b[2]
    return (dx * dx + dy * dy + dz * dz) ** 0.5


def path_length(positions: Iterable[Vec3]) -> float:
    """Sum of straight-line distances between consecutive positions."""
    total = 0.0
    previous = None
    for pos in positions:
        if previous is not None:
            total += distance(previous, pos)
        previous = pos
    return total


@dataclass(frozen=True)
class Beacon:
    category: str = "general"

    @property
    def tag(self) -> str:
        return f"beacon_{self.category}"


@dataclass(frozen=True)
class Waypoint:
    @property
    def tag(self) -> str:
        return "waypoint"


@dataclass(frozen=True)
class Doorway:
    room_a: str
    room_b: str

    @property
    def tag(self) -> str:
        return "doorway"

    @property
    def connects_rooms(self) -> Tuple[str, str]:
        return (self.room_a, self.room_b)

    def connects(self, room_id: str) -> bool:
        return room_id == self.room_a or room_id == self.room_b


NodeType = Union[Beacon, Waypoint, Doorway]


@dataclass(frozen=True)
class Node:
    node_id: str
    position: Vec3
    node_type: NodeType
    name: str
    room_id: str

    @property
    def type_tag(self) -> str:
        return self.node_type.tag

    @property
    def is_doorway(self) -> bool:
        return isinstance(self.node_type, Doorway)

    @property
    def is_beacon(self) -> bool:
        return isinstance(self.node_type, Beacon)

    @property
    def is_waypoint(self) -> bool:
        return isinstance(self.node_type, Waypoint)

    def distance_to(self, position: Vec3) -> float:
        return distance(self.position, position)


class EdgeClass(str, Enum):
    WITHIN_ROOM = "within_room"
    THROUGH_DOORWAY = "through_doorway"
    TO_VIRTUAL = "to_virtual"


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    weight: float
    edge_class: EdgeClass
