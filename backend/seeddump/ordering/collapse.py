"""Drop duplicate many-to-many join models.

A many-to-many relationship declared from both sides yields two join models
over one table; dumping both would write every join row twice.
"""

from __future__ import annotations

from typing import Callable, Sequence

from seeddump.metadata.registry import ModelDescriptor


def _is_join(model: ModelDescriptor) -> bool:
    return model.is_synthetic_join


def collapse(
    ordered: Sequence[ModelDescriptor],
    *,
    is_join: Callable[[ModelDescriptor], bool] = _is_join,
) -> list[ModelDescriptor]:
    """Non-join models in order, then the first join model seen per table."""
    joins = [m for m in ordered if is_join(m)]
    others = [m for m in ordered if not is_join(m)]

    seen_tables: set[str] = set()
    kept: list[ModelDescriptor] = []
    for m in joins:
        if m.table_name in seen_tables:
            continue
        seen_tables.add(m.table_name)
        kept.append(m)
    return others + kept
