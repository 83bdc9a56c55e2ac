"""Live progress along a computed route.

Fed with successive live positions, the tracker advances through the route's
steps as each one is reached, and reports remaining distance, speed and ETA.
"""
from __future__ import annotations

from dataclasses import dataclass
import time
from typing import List, Optional

from .logging_utils import get_logger
from .model import Vec3, distance
from .result import RouteResult, RouteStep

DEFAULT_ARRIVAL_THRESHOLD = 0.5


def remaining_distance(steps: List[RouteStep], index: int, position: Vec3) -> float:
    """Distance from ``position`` to step ``index`` plus the route after it."""
    if index >= len(steps):
        return 0.0
    total = distance(position, steps[index].position)
    for step in steps[index:-1]:
        total += step.distance_to_next or 0.0
    return total


@dataclass(frozen=True)
class ProgressUpdate:
    step_index: int
    target: Optional[RouteStep]
    distance_to_target: float
    remaining_distance: float
    eta: Optional[float]
    progress_percent: float
    reached: Optional[RouteStep] = None
    arrived: bool = False


class ProgressTracker:
    """Tracks a walker's progress along one RouteResult.

    A step counts as reached once the walker is within ``arrival_threshold``
    meters of it; at most one step is reached per update. ETA uses the average
    speed observed so far, or ``fallback_speed`` before any movement.
    """

    def __init__(
        self,
        result: RouteResult,
        arrival_threshold: float = DEFAULT_ARRIVAL_THRESHOLD,
        fallback_speed: Optional[float] = None,
    ) -> None:
        if arrival_threshold <= 0.0:
            raise ValueError(f"arrival_threshold must be positive, got {arrival_threshold}")
        self.result = result
        self.arrival_threshold = float(arrival_threshold)
        self.fallback_speed = fallback_speed
        self.reset()

    def reset(self) -> None:
        self.step_index = 0
        self.steps_reached = 0
        self.travelled = 0.0
        self.current_speed = 0.0
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None
        self._last_position: Optional[Vec3] = None
        self._last_time: Optional[float] = None

    @property
    def arrived(self) -> bool:
        return self.step_index >= len(self.result.steps)

    @property
    def progress_percent(self) -> float:
        total = len(self.result.steps)
        if total == 0:
            return 100.0
        return 100.0 * self.steps_reached / total

    def elapsed(self, now: Optional[float] = None) -> float:
        if self.started_at is None:
            return 0.0
        end = self.finished_at if self.finished_at is not None else (now if now is not None else time.monotonic())
        return max(0.0, end - self.started_at)

    @property
    def average_speed(self) -> float:
        elapsed = self.elapsed(self._last_time)
        return self.travelled / elapsed if elapsed > 0.0 else 0.0

    def eta(self, remaining: float) -> Optional[float]:
        speed = self.average_speed or (self.fallback_speed or 0.0)
        if speed <= 0.0:
            return None
        return remaining / speed

    def update(self, position: Vec3, now: Optional[float] = None) -> ProgressUpdate:
        now = time.monotonic() if now is None else float(now)
        if self.started_at is None:
            self.started_at = now
        if self._last_position is not None and self._last_time is not None and not self.arrived:
            moved = distance(self._last_position, position)
            dt = now - self._last_time
            self.travelled += moved
            if dt > 0.0:
                self.current_speed = moved / dt
        self._last_position = position
        self._last_time = now

        steps = self.result.steps
        if self.arrived:
            return self._snapshot(position, None)

        target = steps[self.step_index]
        reached = None
        if distance(position, target.position) <= self.arrival_threshold:
            reached = target
            self.steps_reached += 1
            self.step_index += 1
            get_logger().info("[progress] reached %s (%d/%d)", target.name, self.step_index, len(steps))
            if self.arrived:
                self.finished_at = now
                get_logger().info("[progress] destination %s reached", target.name)
        return self._snapshot(position, reached)

    def _snapshot(self, position: Vec3, reached: Optional[RouteStep]) -> ProgressUpdate:
        steps = self.result.steps
        target = steps[self.step_index] if not self.arrived else None
        remaining = remaining_distance(steps, self.step_index, position)
        return ProgressUpdate(
            step_index=self.step_index,
            target=target,
            distance_to_target=distance(position, target.position) if target else 0.0,
            remaining_distance=remaining,
            eta=0.0 if self.arrived else self.eta(remaining),
            progress_percent=self.progress_percent,
            reached=reached,
            arrived=self.arrived,
        )
