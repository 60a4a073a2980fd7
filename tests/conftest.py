import fakeredis
import pytest

from src.CalltreeActions.CalltreeGraph import CalltreeGraphManager


@pytest.fixture
def call_tree():
    return CalltreeGraphManager()


@pytest.fixture
def triangle_call_tree(call_tree):
    """
    main -> parse -> solve, main -> solve (handles 0, 1, 2, all edges weighted 1)
    """
    main = call_tree.add_function_node("main", "main.c", 12, "a.out", [("inclusive", "10.5")])
    parse = call_tree.add_function_node("parse", "parse.c", 30, "libparse.so")
    solve = call_tree.add_function_node("solve", "solve.c", 40, "a.out")
    call_tree.add_call_edge(main, parse)
    call_tree.add_call_edge(parse, solve)
    call_tree.add_call_edge(main, solve)
    return call_tree


@pytest.fixture
def redis_session():
    return fakeredis.FakeRedis(server=fakeredis.FakeServer())
