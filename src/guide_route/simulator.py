"""Basic walk-through simulator used for timelines and visualisation outputs."""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .config import Config
from .progress import ProgressTracker
from .result import RouteResult
from .turns import TurnTracker, bearing, compass_direction, horizontal_direction


def simulate_walk(
    result: RouteResult,
    config: Config,
    initial_heading: Optional[Tuple[float, float]] = None,
) -> List[dict]:
    """Walk the route at ``config.walk_speed`` and annotate every leg.

    Each leg carries the turn instruction issued when it starts. The heading
    for the first leg is ``initial_heading`` (x, z) when known; later legs use
    the direction of the leg before them.
    """
    timeline: List[dict] = []
    steps = result.steps
    if not steps:
        return timeline

    speed = max(float(config.walk_speed), 1e-6)
    tracker = TurnTracker(hysteresis=config.turn_hysteresis)
    progress = ProgressTracker(result, arrival_threshold=config.arrival_threshold, fallback_speed=speed)
    heading = initial_heading
    current_time = 0.0
    for step, nxt in zip(steps, steps[1:]):
        leg = step.distance_to_next or 0.0
        travel_time = leg / speed
        if heading is None:
            instruction = None
        else:
            instruction = tracker.update(heading, step.position, nxt.position)
        update = progress.update(step.position, now=current_time)
        timeline.append(
            {
                "type": "walk",
                "from": step.node_id,
                "to": nxt.node_id,
                "from_name": step.name,
                "to_name": nxt.name,
                "room": step.room_id,
                "distance": leg,
                "t0": current_time,
                "t1": current_time + travel_time,
                "heading": compass_direction(bearing(step.position, nxt.position)),
                "instruction": instruction.description if instruction else "Start walking",
                "side": _side(instruction),
                "remaining": update.remaining_distance,
                "eta": update.eta,
                "progress": update.progress_percent,
            }
        )
        current_time += travel_time
        heading = horizontal_direction(step.position, nxt.position)

    last = steps[-1]
    update = progress.update(last.position, now=current_time)
    timeline.append(
        {
            "type": "arrive",
            "from": last.node_id,
            "to": last.node_id,
            "from_name": last.name,
            "to_name": last.name,
            "room": last.room_id,
            "distance": 0.0,
            "t0": current_time,
            "t1": current_time,
            "heading": None,
            "instruction": f"Arrived at {last.name}",
            "side": None,
            "remaining": update.remaining_distance,
            "eta": update.eta,
            "progress": update.progress_percent,
        }
    )
    return timeline


def estimated_duration(timeline: List[dict]) -> float:
    return max((float(entry.get("t1", 0.0)) for entry in timeline), default=0.0)


def leg_counts(timeline: List[dict]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for entry in timeline:
        counts[entry["type"]] = counts.get(entry["type"], 0) + 1
    return counts


def _side(instruction) -> Optional[str]:
    if instruction is None:
        return None
    if instruction.is_left:
        return "left"
    if instruction.is_right:
        return "right"
    return None
