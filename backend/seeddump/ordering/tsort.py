"""Depth-first topological sort over an explicit adjacency map.

`graph` maps each node to the nodes it depends on. Dependencies are emitted
before their dependents. Nodes that only appear as dependencies count as
having none, and a node listing itself is not a cycle.
"""

from __future__ import annotations

from typing import Any, Callable, Hashable, Iterable, Mapping, Optional, TypeVar

from seeddump.core.errors import CyclicDependency


T = TypeVar("T", bound=Hashable)
_DONE = object()


def tsort(graph: Mapping[T, Iterable[T]], *, key: Optional[Callable[[T], Any]] = None) -> list[T]:
    """Return every node of `graph` with dependencies first.

    Roots are visited in the mapping's iteration order; the dependencies of a
    node are visited sorted by `key` when given, else in iteration order.
    Raises CyclicDependency with the nodes on the offending path.
    """
    visited: set[T] = set()
    on_path: set[T] = set()
    path: list[T] = []
    result: list[T] = []

    def children(node: T) -> list[T]:
        deps = [d for d in graph.get(node, ()) if d != node]
        return sorted(deps, key=key) if key is not None else deps

    for root in graph:
        if root in visited:
            continue
        # Explicit stack of (node, pending dependencies) so deep chains do
        # not hit the interpreter recursion limit.
        path.append(root)
        on_path.add(root)
        stack = [(root, iter(children(root)))]
        while stack:
            node, pending = stack[-1]
            dep = next(pending, _DONE)
            if dep is _DONE:
                stack.pop()
                path.pop()
                on_path.remove(node)
                visited.add(node)
                result.append(node)
            elif dep in on_path:
                raise CyclicDependency(path[path.index(dep):])
            elif dep not in visited:
                path.append(dep)
                on_path.add(dep)
                stack.append((dep, iter(children(dep))))
    return result
