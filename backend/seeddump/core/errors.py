from __future__ import annotations

"""Errors raised while ordering and dumping seed data.

Propagation rules:
- Ordering is a one-shot computation; nothing here is retried.
- Any error aborts the whole dump before the first row is written.
"""

from typing import Any, Sequence


class SeedDumpError(RuntimeError):
    """Base error for the seed dump pipeline."""


class ConfigError(SeedDumpError):
    """Raised when an environment option cannot be parsed."""


class MetadataUnavailable(SeedDumpError):
    """Raised when association metadata for a model cannot be obtained."""


class UnresolvableReference(SeedDumpError):
    """Raised when a belongs-to association names a model outside the registry."""

    def __init__(self, model: str, association: str, target: str | None) -> None:
        self.model = model
        self.association = association
        self.target = target
        super().__init__(
            f"{model}.{association} references unknown model {target!r}."
        )


class CyclicDependency(SeedDumpError):
    """Raised when models cannot be put in dependency order."""

    def __init__(self, cycle: Sequence[Any]) -> None:
        self.cycle = list(cycle)
        path = " -> ".join(str(getattr(m, "name", m)) for m in [*self.cycle, self.cycle[0]])
        super().__init__(f"Cyclic dependency between models: {path}")
