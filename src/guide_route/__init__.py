"""Public GuideRoute package exports."""
from .builder import GraphBuilder, build_graph
from .config import Config
from .errors import (
    DestinationNotFound,
    EmptyGraph,
    MalformedRecord,
    NoPathFound,
    RouteError,
    SearchCancelled,
)
from .graph import RouteGraph
from .map_data import MapData, load_map, map_from_dict
from .model import Beacon, Doorway, Edge, EdgeClass, Node, Waypoint
from .planner import RoutePlanner, RouteQuery
from .progress import ProgressTracker, ProgressUpdate
from .result import RouteResult, RouteStep
from .search import find_path
from .simulator import simulate_walk
from .turns import TurnInstruction, TurnTracker, classify_turn, smooth_route

__all__ = [
    "GraphBuilder",
    "build_graph",
    "Config",
    "DestinationNotFound",
    "EmptyGraph",
    "MalformedRecord",
    "NoPathFound",
    "RouteError",
    "SearchCancelled",
    "RouteGraph",
    "MapData",
    "load_map",
    "map_from_dict",
    "Beacon",
    "Doorway",
    "Edge",
    "EdgeClass",
    "Node",
    "Waypoint",
    "RoutePlanner",
    "RouteQuery",
    "ProgressTracker",
    "ProgressUpdate",
    "RouteResult",
    "RouteStep",
    "find_path",
    "simulate_walk",
    "TurnInstruction",
    "TurnTracker",
    "classify_turn",
    "smooth_route",
]
