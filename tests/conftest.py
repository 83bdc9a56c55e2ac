# tests/conftest.py

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure src/ is on sys.path for test imports like `import guide_route`, `import main`.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from guide_route import GraphBuilder, map_from_dict  # noqa: E402

import map_records as mr  # noqa: E402


@pytest.fixture
def sample_map_path() -> Path:
    return PROJECT_ROOT / "maps" / "sample_home.json"


@pytest.fixture
def three_room_graph():
    """kitchen -> D1 -> hall -> D2 -> bedroom, one beacon at each end."""
    return GraphBuilder().build(map_from_dict(mr.three_room_map()))


@pytest.fixture
def disconnected_graph():
    """Two rooms with no doorway between them."""
    raw = {
        "beacons": [
            mr.beacon("K1", "kitchen", (1.0, 0.0, 1.0)),
            mr.beacon("BED", "bedroom", (11.0, 0.0, 1.0)),
        ],
    }
    return GraphBuilder().build(map_from_dict(raw))
