"""
Run configuration for GuideRoute.

Adjustable parameters live either in this file (configs.py) or in the map
JSON handed over by the map-loading collaborator (maps/*.json). Geometry
lives in the map; speeds and search tuning live here.
"""

from typing import Dict, Any
import os


# Central route settings (used by main.py)
ROUTE_CONFIG: Dict[str, Any] = {
    # Map source
    "map_file": os.environ.get("MAP_FILE",
                               os.path.join(os.path.dirname(os.path.dirname(__file__)), "maps",
                                            "sample_home.json"
                                         )),

    # Virtual start node wiring
    "search_radius": 6.0,
    "max_virtual_connections": 3,

    # Edge weighting (must stay >= 1.0)
    "doorway_penalty": 1.2,

    # Walking (m/s) and turn classification (degrees)
    "walk_speed": 1.2,
    "turn_hysteresis": 5.0,
    # a route step counts as reached within this many meters
    "arrival_threshold": 0.5,

    "run_simulation": True,
    "render_visuals": True,
    "output_root": "out",
}


# === Batch sweep defaults (used by batch.py) ===
# Start position used when --position is not given, and the default CSV.
BATCH_CONFIG: Dict[str, Any] = {
    "position": "0,0,0",
    "categories": "",
    "out": os.path.join("out", "batch_results.csv"),
}
