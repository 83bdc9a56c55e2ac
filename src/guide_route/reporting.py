"""Post-run reporting helpers for GuideRoute."""
from __future__ import annotations

from datetime import datetime
import csv
from pathlib import Path
from typing import Dict, List

from .config import Config
from .graph import RouteGraph
from .result import RouteResult
from .simulator import estimated_duration


CSV_FIELDS = [
    "timestamp",
    "map",
    "start_room",
    "destination",
    "steps",
    "rooms",
    "distance",
    "eta",
]


def seconds_to_hms(seconds: float) -> str:
    total = max(0, int(round(float(seconds or 0.0))))
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def _walk_speed(config: Config) -> float:
    return max(float(getattr(config, "walk_speed", 1.0) or 0.0), 1e-6)


def _resolve_duration(result: RouteResult, timeline: List[dict] | None, config: Config) -> float:
    if timeline:
        duration = estimated_duration(timeline)
        if duration > 0.0:
            return duration
    return result.total_distance / _walk_speed(config)


def summarize_route(
    result: RouteResult,
    timeline: List[dict] | None,
    config: Config,
) -> Dict[str, object]:
    if not result.steps:
        return {}
    doorways = [step.name for step in result.steps if step.type_tag == "doorway"]
    return {
        "start": result.start_name,
        "destination": result.end_name,
        "start_room": result.steps[0].room_id,
        "rooms": result.rooms_visited,
        "doorways": doorways,
        "steps": result.total_steps,
        "distance": result.total_distance,
        "search_cost": result.search_cost,
        "nodes_explored": result.nodes_explored,
        "duration": _resolve_duration(result, timeline, config),
        "instructions": [entry.get("instruction") for entry in timeline or []],
    }


def build_viz_payload(
    graph: RouteGraph,
    result: RouteResult,
    timeline: List[dict] | None,
    config: Config,
) -> dict:
    summary = summarize_route(result, timeline, config)
    if not summary:
        return {}
    return {
        "route": result.to_dict(),
        "timeline": list(timeline or []),
        "summary": summary,
        "meta": {
            "walk_speed_used": config.walk_speed,
            "map_file": config.map_file,
            "rooms": graph.room_ids,
        },
        "T_total": summary["duration"],
    }


def build_result_record(
    result: RouteResult,
    timeline: List[dict] | None,
    config: Config,
    destination_id: str,
) -> Dict[str, object]:
    summary = summarize_route(result, timeline, config)
    if not summary:
        return {}
    return {
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "map": Path(config.map_file).stem,
        "start_room": summary["start_room"],
        "destination": destination_id,
        "steps": summary["steps"],
        "rooms": "->".join(summary["rooms"]) or "N/A",
        "distance": f"{float(summary['distance']):.2f}",
        "eta": seconds_to_hms(float(summary["duration"])),
    }


def append_result_record(record: Dict[str, object], csv_path: Path) -> None:
    if not record:
        return
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    _ensure_header(csv_path)
    with csv_path.open("a", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=CSV_FIELDS)
        writer.writerow({field: record.get(field, "") for field in CSV_FIELDS})


def _ensure_header(csv_path: Path) -> None:
    if not csv_path.exists():
        with csv_path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.DictWriter(handle, fieldnames=CSV_FIELDS)
            writer.writeheader()
        return
    with csv_path.open("r", newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        existing = reader.fieldnames
        if existing == CSV_FIELDS:
            return
        rows = list(reader)
    with csv_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow({field: row.get(field, "") for field in CSV_FIELDS})
