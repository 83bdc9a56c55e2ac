"""Planner facade used by the CLI, the presentation layer and tests."""
from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
import threading
from typing import Optional

from .graph import RouteGraph
from .logging_utils import get_logger
from .model import Vec3
from .result import RouteResult
from .search import find_path


class RouteQuery:
    """Handle for a route query running on the planner's worker thread."""

    def __init__(self, future: Future, cancel_event: threading.Event) -> None:
        self.future = future
        self._cancel_event = cancel_event

    def cancel(self) -> bool:
        """Abandon the query. Returns True if it had not finished yet."""
        self._cancel_event.set()
        return self.future.cancel() or not self.future.done()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> RouteResult:
        return self.future.result(timeout=timeout)


class RoutePlanner:
    """Runs route queries against one graph.

    The virtual start node makes every query mutate the graph for its
    duration, so queries hold ``graph.lock``; planners sharing a graph share
    that lock. Queries submitted with :meth:`submit` run on a single
    background worker.
    """

    def __init__(self, graph: RouteGraph) -> None:
        self.graph = graph
        self._executor: Optional[ThreadPoolExecutor] = None

    def route(
        self,
        live_position: Vec3,
        destination_id: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> RouteResult:
        with self.graph.lock:
            return find_path(self.graph, live_position, destination_id, cancel_event)

    def submit(self, live_position: Vec3, destination_id: str) -> RouteQuery:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="guide-route")
        cancel_event = threading.Event()
        future = self._executor.submit(self.route, live_position, destination_id, cancel_event)
        get_logger().debug("[planner] submitted query to %s", destination_id)
        return RouteQuery(future, cancel_event)

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def __enter__(self) -> "RoutePlanner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
