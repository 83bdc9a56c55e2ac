"""Map loading helpers.

The map-loading collaborator hands over a JSON document with ``beacons``,
``waypoints`` and ``doorways`` lists. Records stay raw here; the builder
decides which of them are usable.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any, Dict, List

from .model import Vec3


@dataclass
class MapData:
    beacons: List[Dict[str, Any]] = field(default_factory=list)
    waypoints: List[Dict[str, Any]] = field(default_factory=list)
    doorways: List[Dict[str, Any]] = field(default_factory=list)
    name: str = "map"

    @property
    def record_count(self) -> int:
        return len(self.beacons) + len(self.waypoints) + len(self.doorways)


def parse_position(value: Any) -> Vec3:
    """Read an ``{x, y, z}`` mapping or a 3-element sequence into a Vec3.

    Missing axes of a mapping default to 0.0. Anything non-numeric raises
    ``ValueError``.
    """
    if isinstance(value, dict):
        if not any(axis in value for axis in ("x", "y", "z")):
            raise ValueError("position has no x/y/z components")
        coords = [value.get(axis, 0.0) for axis in ("x", "y", "z")]
    elif isinstance(value, (list, tuple)):
        if len(value) != 3:
            raise ValueError(f"position needs 3 components, got {len(value)}")
        coords = list(value)
    else:
        raise ValueError(f"unsupported position value {value!r}")
    result = []
    for c in coords:
        if isinstance(c, bool) or not isinstance(c, (int, float)):
            raise ValueError(f"non-numeric coordinate {c!r}")
        result.append(float(c))
    return (result[0], result[1], result[2])


def _record_list(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"Map JSON field '{key}' must be a list")
    return list(value)


def map_from_dict(raw: Any, name: str = "map") -> MapData:
    map_data = raw.get("map") if isinstance(raw, dict) and isinstance(raw.get("map"), dict) else raw
    if not isinstance(map_data, dict):
        raise ValueError("Map JSON must contain a 'map' object or be the map itself")
    return MapData(
        beacons=_record_list(map_data, "beacons"),
        waypoints=_record_list(map_data, "waypoints"),
        doorways=_record_list(map_data, "doorways"),
        name=str(map_data.get("name") or name),
    )


def load_map(path: str | Path) -> MapData:
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)
    return map_from_dict(raw, name=path.stem)
