"""Error types raised while building graphs and answering route queries."""
from __future__ import annotations


class RouteError(Exception):
    """Base class for every GuideRoute error."""


class MalformedRecord(RouteError):
    """A single map record could not be turned into a node."""

    def __init__(self, record_kind: str, record_id: object, reason: str) -> None:
        self.record_kind = record_kind
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"{record_kind} record {record_id!r}: {reason}")


class DestinationNotFound(RouteError):
    def __init__(self, destination_id: str) -> None:
        self.destination_id = destination_id
        super().__init__(f"destination {destination_id!r} is not in the graph")


class EmptyGraph(DestinationNotFound):
    """Query issued against a graph that holds no nodes."""

    def __init__(self, destination_id: str) -> None:
        super().__init__(destination_id)
        self.args = (f"graph is empty; cannot route to {destination_id!r}",)


class NoPathFound(RouteError):
    def __init__(self, start_room: str, destination_id: str) -> None:
        self.start_room = start_room
        self.destination_id = destination_id
        super().__init__(f"no path from room {start_room!r} to {destination_id!r}")


class SearchCancelled(RouteError):
    """The caller abandoned the query before the search finished."""
