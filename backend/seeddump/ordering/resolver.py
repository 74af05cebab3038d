"""Association resolver: which models must be dumped before each model."""

from __future__ import annotations

from typing import Iterable

from seeddump.core.errors import UnresolvableReference
from seeddump.metadata.registry import Association, AssociationKind, ModelDescriptor, ModelRegistry


def _referents(registry: ModelRegistry, model: ModelDescriptor, association: Association) -> Iterable[ModelDescriptor]:
    if association.polymorphic:
        # The target type is only known from the `as:` side of a has-many,
        # searched over the whole registry rather than the selection.
        return registry.polymorphic_referents(association.name)
    if association.target is None or association.target not in registry:
        raise UnresolvableReference(model.name, association.name, association.target)
    return (registry.get(association.target),)


def resolve(registry: ModelRegistry, models: Iterable[ModelDescriptor]) -> dict[ModelDescriptor, set[ModelDescriptor]]:
    """Map each of `models` to the models its belongs-to associations reference.

    The result has one entry per input model, in input order. A model may
    reference itself.
    """
    dependencies: dict[ModelDescriptor, set[ModelDescriptor]] = {}
    for model in models:
        referents: set[ModelDescriptor] = set()
        for association in registry.associations_of(model, AssociationKind.BELONGS_TO):
            referents.update(_referents(registry, model, association))
        dependencies[model] = referents
    return dependencies
