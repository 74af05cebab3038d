from __future__ import annotations

from typing import Hashable, Mapping, Set, TypeVar


T = TypeVar("T", bound=Hashable)


def build_graph(resolved: Mapping[T, Set[T]]) -> dict[T, set[T]]:
    """Adjacency map with a key for every node, referents included.

    Keys keep the order of `resolved`; nodes that only occur as referents are
    appended with an empty dependency set.
    """
    graph: dict[T, set[T]] = {node: set(deps) for node, deps in resolved.items()}
    for deps in resolved.values():
        for dep in deps:
            graph.setdefault(dep, set())
    return graph
