"""
RoutePlanner: serialised queries, background submission and cancellation.
"""

from __future__ import annotations

from concurrent.futures import CancelledError, ThreadPoolExecutor
import sys
import threading

import pytest

from guide_route import GraphBuilder, RouteError, RoutePlanner, SearchCancelled, find_path, load_map


def snapshot(graph):
    return (
        dict(graph.nodes),
        {nid: list(edges) for nid, edges in graph.adjacency.items()},
        {room: list(ids) for room, ids in graph.room_nodes.items()},
    )


def test_route_matches_direct_search(three_room_graph) -> None:
    planner = RoutePlanner(three_room_graph)
    result = planner.route((2.0, 0.0, 1.0), "BED")

    assert result.end_name == "Bed"
    assert result.total_distance == pytest.approx(9.0)


def test_submit_returns_result(three_room_graph) -> None:
    with RoutePlanner(three_room_graph) as planner:
        query = planner.submit((2.0, 0.0, 1.0), "BED")
        result = query.result(timeout=10)

    assert query.done()
    assert [node.node_id for node in result.nodes[1:]] == ["D1", "D2", "BED"]
    # nothing left to abandon once finished
    assert query.cancel() is False


def test_route_with_set_event_is_cancelled(three_room_graph) -> None:
    before = snapshot(three_room_graph)
    planner = RoutePlanner(three_room_graph)
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(SearchCancelled):
        planner.route((2.0, 0.0, 1.0), "BED", cancel_event=cancel)
    assert snapshot(three_room_graph) == before


def test_cancel_queued_query(three_room_graph) -> None:
    before = snapshot(three_room_graph)
    with RoutePlanner(three_room_graph) as planner:
        # hold the graph lock so the query cannot finish before cancel()
        with three_room_graph.lock:
            query = planner.submit((2.0, 0.0, 1.0), "BED")
            assert query.cancel() is True
        with pytest.raises((SearchCancelled, CancelledError)):
            query.result(timeout=10)

    assert query.cancelled
    assert snapshot(three_room_graph) == before


def test_concurrent_routes_leave_graph_clean(three_room_graph) -> None:
    before = snapshot(three_room_graph)
    planner = RoutePlanner(three_room_graph)
    jobs = [((2.0, 0.0, 1.0), "BED"), ((10.0, 0.0, 1.0), "K1")] * 10

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda job: planner.route(*job), jobs))

    assert [r.end_name for r in results] == ["Bed", "Kettle"] * 10
    assert all(r.total_distance == pytest.approx(9.0) for r in results)
    assert snapshot(three_room_graph) == before


def test_submit_many_in_order(three_room_graph) -> None:
    with RoutePlanner(three_room_graph) as planner:
        queries = [planner.submit((2.0, 0.0, 1.0), "BED") for _ in range(5)]
        results = [query.result(timeout=10) for query in queries]

    assert len({r.total_steps for r in results}) == 1
    assert three_room_graph.virtual_node_id is None


def test_planners_sharing_a_graph_do_not_interleave(sample_map_path) -> None:
    graph = GraphBuilder().build(load_map(sample_map_path))
    before = snapshot(graph)
    planners = [RoutePlanner(graph), RoutePlanner(graph)]
    destinations = [node.node_id for node in graph.beacon_nodes()]
    jobs = [(planners[i % 2], destinations[i % len(destinations)]) for i in range(400)]

    def run(job):
        planner, destination = job
        try:
            return planner.route((1.5, 0.0, 2.5), destination).nodes[-1].node_id
        except RouteError as err:
            return f"{type(err).__name__}: {err}"

    interval = sys.getswitchinterval()
    sys.setswitchinterval(1e-6)
    try:
        with ThreadPoolExecutor(max_workers=8) as pool:
            reached = list(pool.map(run, jobs))
    finally:
        sys.setswitchinterval(interval)

    assert reached == [destination for _, destination in jobs]
    assert snapshot(graph) == before


def test_direct_search_and_planner_share_the_graph_lock(three_room_graph) -> None:
    planner = RoutePlanner(three_room_graph)
    with ThreadPoolExecutor(max_workers=4) as pool:
        direct = [pool.submit(find_path, three_room_graph, (2.0, 0.0, 1.0), "BED") for _ in range(20)]
        planned = [pool.submit(planner.route, (10.0, 0.0, 1.0), "K1") for _ in range(20)]
        results = [future.result(timeout=10) for future in direct + planned]

    assert [r.end_name for r in results] == ["Bed"] * 20 + ["Kettle"] * 20
    assert three_room_graph.virtual_node_id is None
