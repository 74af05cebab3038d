"""Dependency ordering of models for seed dumps."""

from __future__ import annotations

import logging
from typing import Iterable

from seeddump.metadata.registry import ModelDescriptor, ModelRegistry
from seeddump.ordering.collapse import collapse
from seeddump.ordering.graph import build_graph
from seeddump.ordering.resolver import resolve
from seeddump.ordering.tsort import tsort


logger = logging.getLogger("seeddump.ordering")


def order_models(registry: ModelRegistry, models: Iterable[ModelDescriptor]) -> list[ModelDescriptor]:
    """Order `models` so every model comes after the models it belongs to.

    Unrelated models keep the order of `models`; dependencies are visited in
    registry order. Models outside `models` still constrain the order but are
    not returned.
    """
    selected = list(models)
    graph = build_graph(resolve(registry, selected))
    ordered = tsort(graph, key=registry.position)
    members = set(selected)
    result = [m for m in collapse(ordered) if m in members]
    logger.debug("dump order: %s", ", ".join(m.name for m in result))
    return result


__all__ = [
    "build_graph",
    "collapse",
    "order_models",
    "resolve",
    "tsort",
]
