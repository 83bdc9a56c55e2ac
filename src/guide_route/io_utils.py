"""Helper utilities for saving route output."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict


def _sanitize(segment: str) -> str:
    return "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in segment)


def prepare_output_dir(
    output_root: str,
    map_file: str,
    destination: str,
    start_room: str,
) -> Path:
    map_label = _sanitize(Path(map_file).stem)
    dest_label = _sanitize(destination)
    room_label = _sanitize(start_room)
    tag = f"map_{map_label}_from_{room_label}_to_{dest_label}"
    output_dir = Path(output_root) / tag
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def save_json(path: Path, payload: Dict[str, Any]) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


def load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def save_route(output_dir: Path, route: Dict[str, Any]) -> Path:
    path = output_dir / "route.json"
    save_json(path, route)
    return path


def save_timeline(output_dir: Path, timeline: Any) -> Path:
    path = output_dir / "timeline.json"
    save_json(path, {"timeline": timeline})
    return path
