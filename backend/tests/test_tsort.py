from __future__ import annotations

import pytest

from seeddump.core.errors import CyclicDependency
from seeddump.ordering.tsort import tsort


def test_dependencies_come_first():
    order = tsort({"comment": {"post"}, "post": {"user"}, "user": set()})
    assert order == ["user", "post", "comment"]


def test_every_edge_is_respected():
    graph = {
        "a": {"b", "c"},
        "b": {"d"},
        "c": {"d", "e"},
        "d": set(),
        "e": {"d"},
        "f": set(),
    }
    order = tsort(graph, key=str)
    pos = {n: i for i, n in enumerate(order)}
    assert sorted(order) == sorted(graph)
    for node, deps in graph.items():
        for dep in deps:
            assert pos[dep] < pos[node], f"{dep} must precede {node}"


def test_independent_nodes_keep_input_order():
    assert tsort({"z": set(), "a": set(), "m": set()}) == ["z", "a", "m"]


def test_children_visited_by_key():
    assert tsort({"x": {"c", "a", "b"}}, key=str) == ["a", "b", "c", "x"]


def test_missing_keys_mean_no_dependencies():
    assert tsort({"post": {"user"}}) == ["user", "post"]


def test_self_dependency_is_not_a_cycle():
    assert tsort({"category": {"category"}, "item": {"category"}}) == ["category", "item"]


def test_two_node_cycle_raises_with_members():
    with pytest.raises(CyclicDependency) as exc:
        tsort({"a": {"b"}, "b": {"a"}})
    assert set(exc.value.cycle) == {"a", "b"}
    assert "a" in str(exc.value) and "b" in str(exc.value)


def test_cycle_reports_only_the_loop():
    with pytest.raises(CyclicDependency) as exc:
        tsort({"root": {"a"}, "a": {"b"}, "b": {"c"}, "c": {"a"}})
    assert exc.value.cycle == ["a", "b", "c"]


def test_repeated_runs_are_identical():
    graph = {"a": {"b", "c"}, "b": {"c"}, "c": set(), "d": {"a"}}
    assert tsort(graph, key=str) == tsort(dict(graph), key=str)


def test_long_chains_do_not_exhaust_the_stack():
    size = 5000
    graph = {i: {i - 1} if i else set() for i in reversed(range(size))}
    assert tsort(graph) == list(range(size))

    graph[0] = {size - 1}
    with pytest.raises(CyclicDependency) as exc:
        tsort(graph)
    assert len(exc.value.cycle) == size
