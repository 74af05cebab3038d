"""Immutable snapshot of the models known to a dump.

The registry is built once (see `seeddump.metadata.introspect`) and passed
explicitly to the ordering code. Polymorphic belongs-to associations do not
name their target, so the registry keeps a reverse index from inverse name
(`as:` on the has-many side) to the models declaring it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from seeddump.core.errors import MetadataUnavailable


JOIN_MODEL_PREFIX = "HABTM_"


class AssociationKind(str, Enum):
    BELONGS_TO = "belongs_to"
    HAS_MANY = "has_many"


@dataclass(frozen=True, slots=True)
class Association:
    name: str
    kind: AssociationKind
    target: Optional[str] = None         # model name; None for polymorphic belongs-to
    polymorphic: bool = False
    inverse_name: Optional[str] = None   # `as:` of a has-many


@dataclass(frozen=True, slots=True)
class ModelDescriptor:
    """One exportable model: a name, its table and its declared associations."""

    name: str
    table_name: str
    associations: tuple[Association, ...] = ()
    source: Any = field(default=None, compare=False, hash=False, repr=False)

    @property
    def is_synthetic_join(self) -> bool:
        return self.name.startswith(JOIN_MODEL_PREFIX)

    def associations_of(self, kind: AssociationKind) -> tuple[Association, ...]:
        return tuple(a for a in self.associations if a.kind == kind)

    def __str__(self) -> str:
        return self.name


class ModelRegistry:
    """Ordered, read-only collection of `ModelDescriptor` keyed by name."""

    def __init__(self, descriptors: Iterable[ModelDescriptor]) -> None:
        by_name: dict[str, ModelDescriptor] = {}
        for d in descriptors:
            if d.name in by_name:
                raise ValueError(f"Duplicate model name in registry: {d.name!r}")
            by_name[d.name] = d
        self._by_name = by_name
        self._position = {name: i for i, name in enumerate(by_name)}

        inverse: dict[str, list[ModelDescriptor]] = {}
        for d in by_name.values():
            for a in d.associations_of(AssociationKind.HAS_MANY):
                if a.inverse_name is None:
                    continue
                members = inverse.setdefault(a.inverse_name, [])
                if d not in members:
                    members.append(d)
        self._inverse = {k: tuple(v) for k, v in inverse.items()}

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self):
        return iter(self._by_name.values())

    def __contains__(self, item: object) -> bool:
        name = item.name if isinstance(item, ModelDescriptor) else item
        return name in self._by_name

    def candidate_models(self) -> tuple[ModelDescriptor, ...]:
        return tuple(self._by_name.values())

    def get(self, name: str) -> ModelDescriptor:
        try:
            return self._by_name[name]
        except KeyError:
            raise MetadataUnavailable(f"No metadata registered for model {name!r}.") from None

    def position(self, model: ModelDescriptor) -> int:
        """Registration order of `model`; used as the deterministic tie-break."""
        return self._position[self._require(model).name]

    def associations_of(self, model: ModelDescriptor, kind: AssociationKind) -> tuple[Association, ...]:
        return self._require(model).associations_of(kind)

    def table_name_of(self, model: ModelDescriptor) -> str:
        return self._require(model).table_name

    def is_synthetic_join(self, model: ModelDescriptor) -> bool:
        return self._require(model).is_synthetic_join

    def polymorphic_referents(self, name: str) -> tuple[ModelDescriptor, ...]:
        """Models with a has-many declaring `as: name`, in registry order."""
        return self._inverse.get(name, ())

    def lookup(self, token: str) -> ModelDescriptor:
        """Resolve a user supplied name ("User", "users", "user") to a model.

        Class names and table names are matched case-insensitively; a
        trailing "s" is tolerated on either side.
        """
        wanted = token.strip().lower()
        variants = {wanted, wanted[:-1] if wanted.endswith("s") else wanted + "s"}
        for d in self._by_name.values():
            if d.name.lower() in variants or d.table_name.lower() in variants:
                return d
        raise MetadataUnavailable(f"Unknown model {token!r}.")

    def _require(self, model: ModelDescriptor) -> ModelDescriptor:
        found = self._by_name.get(model.name)
        if found is None or found != model:
            raise MetadataUnavailable(f"Model {model.name!r} is not part of this registry.")
        return found
