"""Configuration utilities for GuideRoute queries and CLI runs."""
from __future__ import annotations

from dataclasses import dataclass, asdict, fields
import os
from pathlib import Path
from typing import Any, Dict


def _coerce_value(expected_type: Any, value: str) -> Any:
    """Coerce a string value coming from the environment into ``expected_type``."""
    # annotations are strings under ``from __future__ import annotations``
    name = expected_type if isinstance(expected_type, str) else getattr(expected_type, "__name__", "")
    if name == "bool":
        return value.strip().lower() in {"1", "true", "yes", "on"}
    if name == "int":
        return int(value)
    if name == "float":
        return float(value)
    if name == "Path":
        return Path(value)
    return value


@dataclass
class Config:
    """Container for graph, search and run parameters."""

    map_file: str = os.path.join("maps", "sample_home.json")
    search_radius: float = 6.0
    max_virtual_connections: int = 3
    doorway_penalty: float = 1.2
    walk_speed: float = 1.2
    turn_hysteresis: float = 5.0
    arrival_threshold: float = 0.5
    run_simulation: bool = True
    render_visuals: bool = True
    output_root: str = "out"

    def with_env_overrides(self) -> "Config":
        """Return a copy of the config with environment overrides applied."""
        data: Dict[str, Any] = asdict(self)
        for field in fields(self):
            env_key = field.name.upper()
            if env_key in os.environ:
                raw_value = os.environ[env_key]
                data[field.name] = _coerce_value(field.type, raw_value)
        return Config(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
