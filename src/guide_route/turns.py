"""Turn instructions, compass bearings and route smoothing.

Everything here works on the horizontal X/Z plane and only consumes route
output; it holds no graph or search state.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import List, Optional, Tuple

from .model import Vec3
from .result import RouteResult, build_steps

STRAIGHT = "straight"
SLIGHT_LEFT = "slight_left"
SLIGHT_RIGHT = "slight_right"
LEFT = "left"
RIGHT = "right"
SHARP_LEFT = "sharp_left"
SHARP_RIGHT = "sharp_right"
U_TURN = "u_turn"

DEFAULT_HYSTERESIS = 5.0

# (upper bound in degrees, left kind, right kind)
_BANDS: List[Tuple[float, str, str]] = [
    (25.0, STRAIGHT, STRAIGHT),
    (50.0, SLIGHT_LEFT, SLIGHT_RIGHT),
    (130.0, LEFT, RIGHT),
    (160.0, SHARP_LEFT, SHARP_RIGHT),
    (float("inf"), U_TURN, U_TURN),
]

_DESCRIPTIONS = {
    STRAIGHT: "Continue straight",
    SLIGHT_LEFT: "Bear slightly left ({deg}°)",
    SLIGHT_RIGHT: "Bear slightly right ({deg}°)",
    LEFT: "Turn left ({deg}°)",
    RIGHT: "Turn right ({deg}°)",
    SHARP_LEFT: "Sharp left turn ({deg}°)",
    SHARP_RIGHT: "Sharp right turn ({deg}°)",
    U_TURN: "Make a U-turn ({deg}°)",
}

COMPASS_POINTS = ["North", "Northeast", "East", "Southeast", "South", "Southwest", "West", "Northwest"]


@dataclass(frozen=True)
class TurnInstruction:
    kind: str
    degrees: int = 0

    @property
    def is_right(self) -> bool:
        return self.kind.endswith("right")

    @property
    def is_left(self) -> bool:
        return self.kind.endswith("left")

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self.kind].format(deg=self.degrees)


def horizontal_direction(a: Vec3, b: Vec3) -> Tuple[float, float]:
    """Unit (x, z) direction from ``a`` to ``b``; +Z when the points coincide."""
    dx = b[0] - a[0]
    dz = b[2] - a[2]
    length = math.hypot(dx, dz)
    if length > 0.001:
        return (dx / length, dz / length)
    return (0.0, 1.0)


def bearing(a: Vec3, b: Vec3) -> float:
    """Angle in radians from +Z towards +X of the horizontal step a -> b."""
    dx, dz = horizontal_direction(a, b)
    return math.atan2(dx, dz)


def compass_direction(angle: float) -> str:
    degrees = math.degrees(angle) % 360.0
    return COMPASS_POINTS[int(((degrees + 22.5) % 360.0) // 45.0)]


def _band_index(kind: str) -> int:
    for idx, (_, left, right) in enumerate(_BANDS):
        if kind in (left, right):
            return idx
    raise ValueError(f"unknown turn kind {kind!r}")


def _turn_angle(heading: Tuple[float, float], target: Tuple[float, float]) -> Tuple[float, bool]:
    hx, hz = heading
    tx, tz = target
    h_len = math.hypot(hx, hz) or 1.0
    t_len = math.hypot(tx, tz) or 1.0
    hx, hz = hx / h_len, hz / h_len
    tx, tz = tx / t_len, tz / t_len
    dot = hx * tx + hz * tz
    cross = hx * tz - hz * tx
    return math.degrees(math.atan2(abs(cross), dot)), cross > 0


def classify_turn(
    heading: Tuple[float, float],
    target_direction: Tuple[float, float],
    previous: Optional[TurnInstruction] = None,
    hysteresis: float = DEFAULT_HYSTERESIS,
) -> TurnInstruction:
    """Classify the turn from ``heading`` to ``target_direction`` (both x, z).

    ``previous`` is kept while the angle stays inside its own band widened by
    ``hysteresis`` degrees on the same side.
    """
    angle, is_right = _turn_angle(heading, target_direction)
    degrees = int(round(angle))

    kind = U_TURN
    for upper, left_kind, right_kind in _BANDS:
        if angle < upper:
            kind = right_kind if is_right else left_kind
            break
    new = TurnInstruction(kind, 0 if kind == STRAIGHT else degrees)

    if previous is not None:
        idx = _band_index(previous.kind)
        same_side = previous.kind in (STRAIGHT, U_TURN) or previous.is_right == is_right
        band_lower = _BANDS[idx - 1][0] if idx > 0 else 0.0
        band_upper = _BANDS[idx][0]
        if same_side and band_lower - hysteresis <= angle < band_upper + hysteresis:
            return previous
    return new


class TurnTracker:
    """Holds the last instruction so successive updates do not flicker."""

    def __init__(self, hysteresis: float = DEFAULT_HYSTERESIS) -> None:
        self.hysteresis = hysteresis
        self.previous: Optional[TurnInstruction] = None

    def update(self, heading: Tuple[float, float], position: Vec3, target: Vec3) -> TurnInstruction:
        instruction = classify_turn(
            heading, horizontal_direction(position, target), self.previous, self.hysteresis
        )
        self.previous = instruction
        return instruction

    def reset(self) -> None:
        self.previous = None


def smooth_route(result: RouteResult, threshold: float = 0.95) -> RouteResult:
    """Drop interior steps where the route keeps going in nearly the same direction.

    Totals are kept from the original route; step distances are recomputed
    for the remaining steps.
    """
    nodes = result.nodes
    if len(nodes) <= 2:
        return result
    kept = [nodes[0]]
    for prev, current, nxt in zip(nodes, nodes[1:], nodes[2:]):
        d1 = horizontal_direction(prev.position, current.position)
        d2 = horizontal_direction(current.position, nxt.position)
        if d1[0] * d2[0] + d1[1] * d2[1] < threshold:
            kept.append(current)
    kept.append(nodes[-1])
    return RouteResult(
        nodes=kept,
        steps=build_steps(kept),
        total_distance=result.total_distance,
        search_cost=result.search_cost,
        nodes_explored=result.nodes_explored,
        calculated_at=result.calculated_at,
    )
