import pytest

from src.CalltreeActions.CalltreeGraph import CalltreeGraphManager
from src.CalltreeActions.Exceptions import SnapshotNotFound
from src.CalltreeActions.RedisSnapshot.RedisSnapshot import RedisSnapshot
from src.CalltreeActionsRunner import CalltreeActionsRunner
from PathSource import get_call_tree_dot_path, get_out_directory_path


def test_runner_applies_weights_and_exports(redis_session, triangle_call_tree, tmp_path):
    RedisSnapshot(redis_session=redis_session, graph_name="run").save(triangle_call_tree)
    output_path = tmp_path / "dot" / "run.dot"

    call_depths = CalltreeActionsRunner(redis_host="localhost", graph_name="run", weights={2: 3.0},
                                        output_path=str(output_path), redis_session=redis_session).run()

    assert call_depths == {(0, 1): 1, (1, 2): 1, (0, 2): 2}
    assert '0->2 [label="3"];' in output_path.read_text(encoding="utf-8").splitlines()


def test_runner_does_not_change_the_snapshot(redis_session, triangle_call_tree, tmp_path):
    snapshot = RedisSnapshot(redis_session=redis_session, graph_name="run")
    snapshot.save(triangle_call_tree)

    CalltreeActionsRunner(redis_host="localhost", graph_name="run", weights={0: 9.0},
                          output_path=str(tmp_path / "run.dot"), redis_session=redis_session).run()

    assert snapshot.load().edge_weight(0) == 1.0


def test_runner_default_output_path(redis_session):
    runner = CalltreeActionsRunner(redis_host="localhost", graph_name="run", redis_session=redis_session)

    assert runner.output_path == get_call_tree_dot_path("run")
    assert runner.output_path.startswith(get_out_directory_path())
    assert runner.output_path.endswith("run.dot")


def test_runner_missing_snapshot(redis_session, tmp_path):
    runner = CalltreeActionsRunner(redis_host="localhost", graph_name="missing",
                                   output_path=str(tmp_path / "missing.dot"), redis_session=redis_session)

    with pytest.raises(SnapshotNotFound):
        runner.run()
    assert not (tmp_path / "missing.dot").exists()


def test_runner_with_empty_snapshot(redis_session, tmp_path):
    RedisSnapshot(redis_session=redis_session, graph_name="empty").save(CalltreeGraphManager())
    output_path = tmp_path / "empty.dot"

    call_depths = CalltreeActionsRunner(redis_host="localhost", graph_name="empty",
                                        output_path=str(output_path), redis_session=redis_session).run()

    assert call_depths == {}
    assert output_path.read_text(encoding="utf-8") == 'digraph G {\n}\n'
