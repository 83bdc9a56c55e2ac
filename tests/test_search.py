"""
End-to-end tests for find_path: routing through doorways, failure modes and
graph hygiene after every query.
"""

from __future__ import annotations

import threading

import pytest

from guide_route import (
    DestinationNotFound,
    EmptyGraph,
    GraphBuilder,
    NoPathFound,
    SearchCancelled,
    find_path,
    load_map,
    map_from_dict,
)

from guide_route.result import route_from_dict

import map_records as mr


def snapshot(graph):
    return (
        dict(graph.nodes),
        {nid: list(edges) for nid, edges in graph.adjacency.items()},
        {room: list(ids) for room, ids in graph.room_nodes.items()},
    )


def test_same_room_destination_is_direct() -> None:
    raw = {"beacons": [mr.beacon("K1", "kitchen", (1.0, 0.0, 1.0))]}
    graph = GraphBuilder().build(map_from_dict(raw))

    result = find_path(graph, (2.0, 0.0, 1.0), "K1")

    assert [step.name for step in result.steps] == ["Start Position", "K1"]
    assert result.total_distance == pytest.approx(1.0)
    assert result.start_name == "Start Position"
    assert result.end_name == "K1"


def test_route_crosses_rooms_only_at_doorways(three_room_graph) -> None:
    result = find_path(three_room_graph, (2.0, 0.0, 1.0), "BED")

    assert [node.node_id for node in result.nodes[1:]] == ["D1", "D2", "BED"]
    assert result.total_distance == pytest.approx(9.0)
    # doorway hops carry the 1.2 penalty in the internal cost
    assert result.search_cost == pytest.approx(2.0 + 4.0 * 1.2 + 3.0 * 1.2)
    assert result.rooms_visited == ["kitchen", "hall", "bedroom"]
    assert result.nodes_explored > 0


def test_steps_are_numbered_and_measured(three_room_graph) -> None:
    result = find_path(three_room_graph, (2.0, 0.0, 1.0), "BED")

    assert [step.index for step in result.steps] == [1, 2, 3, 4]
    assert [step.distance_to_next for step in result.steps[:-1]] == pytest.approx([2.0, 4.0, 3.0])
    assert result.steps[-1].distance_to_next is None
    assert sum(step.distance_to_next for step in result.steps[:-1]) == pytest.approx(result.total_distance)


def test_result_dict_shape(three_room_graph) -> None:
    payload = find_path(three_room_graph, (2.0, 0.0, 1.0), "BED").to_dict()

    assert set(payload) == {"pathCalculated", "totalSteps", "totalDistance", "path", "startNode", "endNode"}
    assert payload["totalSteps"] == 4
    assert payload["endNode"] == "Bed"
    first, last = payload["path"][0], payload["path"][-1]
    assert first["nodeType"] == "waypoint"
    assert first["distanceToNext"] == pytest.approx(2.0)
    assert last["nodeId"] == "BED"
    assert last["nodeType"] == "beacon_destination"
    assert last["position"] == {"x": 11.0, "y": 0.0, "z": 1.0}
    assert "distanceToNext" not in last


def test_unreachable_destination(disconnected_graph) -> None:
    before = snapshot(disconnected_graph)
    with pytest.raises(NoPathFound) as info:
        find_path(disconnected_graph, (1.5, 0.0, 1.0), "BED")

    assert info.value.start_room == "kitchen"
    assert info.value.destination_id == "BED"
    assert snapshot(disconnected_graph) == before


def test_unknown_destination(three_room_graph) -> None:
    before = snapshot(three_room_graph)
    with pytest.raises(DestinationNotFound):
        find_path(three_room_graph, (2.0, 0.0, 1.0), "does-not-exist")
    assert snapshot(three_room_graph) == before


def test_empty_graph() -> None:
    graph = GraphBuilder().build(map_from_dict({}))
    with pytest.raises(EmptyGraph):
        find_path(graph, (0.0, 0.0, 0.0), "anything")
    assert len(graph) == 0


def test_empty_graph_is_a_missing_destination() -> None:
    graph = GraphBuilder().build(map_from_dict({}))
    with pytest.raises(DestinationNotFound):
        find_path(graph, (0.0, 0.0, 0.0), "anything")


def test_preset_cancel_leaves_graph_clean(three_room_graph) -> None:
    before = snapshot(three_room_graph)
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(SearchCancelled):
        find_path(three_room_graph, (2.0, 0.0, 1.0), "BED", cancel_event=cancel)
    assert snapshot(three_room_graph) == before
    assert three_room_graph.virtual_node_id is None


def test_repeated_queries_do_not_accumulate(three_room_graph) -> None:
    before = snapshot(three_room_graph)
    for _ in range(5):
        find_path(three_room_graph, (2.0, 0.0, 1.0), "BED")
        find_path(three_room_graph, (10.0, 0.0, 1.0), "K1")
    assert snapshot(three_room_graph) == before


def test_destination_at_start_position() -> None:
    raw = {"beacons": [mr.beacon("K1", "kitchen", (1.0, 0.0, 1.0))]}
    graph = GraphBuilder().build(map_from_dict(raw))

    result = find_path(graph, (1.0, 0.0, 1.0), "K1")

    assert result.total_steps == 2
    assert result.total_distance == pytest.approx(0.0)


def test_far_start_uses_fallback_edge(three_room_graph) -> None:
    result = find_path(three_room_graph, (1.0, 0.0, 30.0), "BED")

    assert result.nodes[1].node_id == "K1"
    assert result.nodes[-1].node_id == "BED"
    assert result.rooms_visited == ["kitchen", "hall", "bedroom"]


def test_sample_map_route(sample_map_path) -> None:
    graph = GraphBuilder().build(load_map(sample_map_path))
    result = find_path(graph, (1.5, 0.0, 2.5), "b-bed")

    assert [step.name for step in result.steps] == [
        "Start Position",
        "Kitchen Door",
        "Hall Middle",
        "Bedroom Door",
        "Bed",
    ]
    assert result.rooms_visited == ["kitchen", "hall", "bedroom"]
    assert result.total_distance == pytest.approx(12.5 ** 0.5 + 2.5 + 2.5 + 3.0)
    assert result.search_cost >= result.total_distance


def test_search_cost_never_below_distance(sample_map_path) -> None:
    graph = GraphBuilder().build(load_map(sample_map_path))
    for node in graph.beacon_nodes():
        result = find_path(graph, (7.5, 0.0, 1.0), node.node_id)
        assert result.search_cost >= result.total_distance - 1e-9
        assert result.end_name == node.name


def test_cancel_during_expansion_leaves_graph_clean(three_room_graph, monkeypatch) -> None:
    graph = three_room_graph
    before = snapshot(graph)
    cancel = threading.Event()
    expanded = []
    neighbors = graph.get_neighbors

    def expand_then_cancel(node_id):
        expanded.append(node_id)
        if len(expanded) == 2:
            cancel.set()
        return neighbors(node_id)

    monkeypatch.setattr(graph, "get_neighbors", expand_then_cancel)
    with pytest.raises(SearchCancelled):
        find_path(graph, (2.0, 0.0, 1.0), "BED", cancel_event=cancel)

    assert len(expanded) == 2
    assert graph.virtual_node_id is None
    monkeypatch.undo()
    assert snapshot(graph) == before
    # the graph still answers queries afterwards
    assert find_path(graph, (2.0, 0.0, 1.0), "BED").end_name == "Bed"


def test_saved_route_keeps_doorway_rooms(three_room_graph) -> None:
    result = find_path(three_room_graph, (2.0, 0.0, 1.0), "BED")
    payload = result.to_dict()

    assert payload["path"][1]["connectsRooms"] == {"roomA": "kitchen", "roomB": "hall"}
    assert "connectsRooms" not in payload["path"][0]

    reloaded = route_from_dict(payload)
    assert [node.node_type for node in reloaded.nodes] == [node.node_type for node in result.nodes]
    assert reloaded.total_distance == pytest.approx(result.total_distance)
    assert reloaded.calculated_at == result.calculated_at
