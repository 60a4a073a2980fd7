import io

import fakeredis
import pytest

from src.CalltreeActions.CalltreeGraph import CalltreeGraphManager
from src.CalltreeActions.Exceptions import SnapshotNotFound
from src.CalltreeActions.RedisSnapshot.RedisSnapshot import RedisSnapshot


def export(call_tree, **kwargs):
    sink = io.StringIO()
    call_tree.export_graph(sink, **kwargs)
    return sink.getvalue()


@pytest.fixture
def weighted_call_tree(triangle_call_tree):
    triangle_call_tree.add_call_edge(2, 2, "calls", [("calls", "12"), ("time", "0.3")])
    triangle_call_tree.set_edge_weights({0: 0.25, 2: 5.0, 3: 0.125})
    return triangle_call_tree


def test_load_reproduces_call_tree(redis_session, weighted_call_tree):
    snapshot = RedisSnapshot(redis_session=redis_session, graph_name="solver run")
    snapshot.save(weighted_call_tree)

    loaded_call_tree = snapshot.load()

    assert export(loaded_call_tree, rich_edge_labels=True) == export(weighted_call_tree, rich_edge_labels=True)
    assert loaded_call_tree.generate_call_depths() == weighted_call_tree.generate_call_depths()
    assert loaded_call_tree.get_function_node(0) == weighted_call_tree.get_function_node(0)
    assert loaded_call_tree.get_call_edge(3).label == "12"


def test_saved_calls_out_sets(redis_session, weighted_call_tree):
    snapshot = RedisSnapshot(redis_session=redis_session, graph_name="solver run")
    snapshot.save(weighted_call_tree)

    assert snapshot.get_called_function_handles(0) == {1, 2}
    assert snapshot.get_called_function_handles(2) == {2}
    assert snapshot.get_called_function_handles(1) == {2}


def test_save_replaces_earlier_snapshot(redis_session, weighted_call_tree):
    snapshot = RedisSnapshot(redis_session=redis_session, graph_name="solver run")
    snapshot.save(weighted_call_tree)
    call_tree = CalltreeGraphManager()
    call_tree.add_function_node("main", "main.c", 1, "a.out")

    snapshot.save(call_tree)

    loaded_call_tree = snapshot.load()
    assert loaded_call_tree.vertex_count == 1
    assert loaded_call_tree.edge_count == 0
    assert not redis_session.exists(snapshot.get_edge_id(0))


def test_empty_call_tree_snapshot(redis_session, call_tree):
    snapshot = RedisSnapshot(redis_session=redis_session, graph_name="empty")
    snapshot.save(call_tree)

    assert snapshot.exists()
    assert snapshot.load().vertex_count == 0


def test_delete_removes_every_key(redis_session, weighted_call_tree):
    snapshot = RedisSnapshot(redis_session=redis_session, graph_name="solver run")
    snapshot.save(weighted_call_tree)

    snapshot.delete()

    assert not snapshot.exists()
    assert redis_session.keys() == []


def test_snapshots_are_separated_by_name(redis_session, weighted_call_tree):
    RedisSnapshot(redis_session=redis_session, graph_name="first").save(weighted_call_tree)
    RedisSnapshot(redis_session=redis_session, graph_name="second").save(CalltreeGraphManager())

    RedisSnapshot(redis_session=redis_session, graph_name="second").delete()

    assert RedisSnapshot(redis_session=redis_session, graph_name="first").load().edge_count == 4
    assert not RedisSnapshot(redis_session=redis_session, graph_name="second").exists()


def test_load_missing_snapshot(redis_session):
    with pytest.raises(SnapshotNotFound):
        RedisSnapshot(redis_session=redis_session, graph_name="missing").load()


def test_load_with_decoded_responses(weighted_call_tree):
    redis_session = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    snapshot = RedisSnapshot(redis_session=redis_session, graph_name="solver run")
    snapshot.save(weighted_call_tree)

    assert export(snapshot.load()) == export(weighted_call_tree)
