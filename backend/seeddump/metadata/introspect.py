"""Build a `ModelRegistry` from SQLAlchemy mapper configuration.

Mapping rules:
- many-to-one relationship -> belongs_to (target = related class)
- foreign key column without a matching relationship -> belongs_to the model
  owning the referenced table
- one-to-many relationship -> has_many; `relationship(info={"as": name})`
  marks it as the inverse side of a polymorphic reference
- many-to-many relationship -> synthetic `HABTM_<Owner><Key>` join model
  backed by the secondary table, belonging to both sides
- `mapped_column(info={"polymorphic": name})` on a reference column declares
  a polymorphic belongs_to called `name`

One model is registered per table. Single-table-inheritance subclasses are
folded into the class that owns their table, and references to a subclass
point at that class.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy import Table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Mapper, RelationshipDirection, registry as sa_registry

from seeddump.core.errors import MetadataUnavailable
from seeddump.metadata.registry import (
    JOIN_MODEL_PREFIX,
    Association,
    AssociationKind,
    ModelDescriptor,
    ModelRegistry,
)


logger = logging.getLogger("seeddump.metadata")


def _camelize(key: str) -> str:
    return "".join(p[:1].upper() + p[1:] for p in key.split("_") if p)


def _resolve_registry(base: Any) -> sa_registry:
    reg = getattr(base, "registry", base)
    if not isinstance(reg, sa_registry):
        raise MetadataUnavailable(f"{base!r} is neither a declarative base nor a SQLAlchemy registry.")
    return reg


def table_owner(mapper: Mapper) -> Mapper:
    """The mapper whose class the rows of `mapper` are dumped under."""
    while mapper.single and mapper.inherits is not None:
        mapper = mapper.inherits
    return mapper


def _owner_name(mapper: Mapper) -> str:
    return table_owner(mapper).class_.__name__


def _join_model(rel: Any) -> ModelDescriptor:
    declared_on = rel.parent.class_.__name__
    secondary = rel.secondary
    table_name = getattr(secondary, "name", None)
    if table_name is None:
        raise MetadataUnavailable(f"{declared_on}.{rel.key} uses a secondary that is not a table.")
    return ModelDescriptor(
        name=f"{JOIN_MODEL_PREFIX}{declared_on}{_camelize(rel.key)}",
        table_name=table_name,
        associations=(
            Association(name="left_side", kind=AssociationKind.BELONGS_TO, target=_owner_name(rel.parent)),
            Association(name=rel.key, kind=AssociationKind.BELONGS_TO, target=_owner_name(rel.mapper)),
        ),
        source=secondary,
    )


def _foreign_key_associations(
    name: str,
    table: Table,
    owners: dict[Table, str],
    declared: list[Association],
) -> list[Association]:
    referenced = {a.target for a in declared if a.kind == AssociationKind.BELONGS_TO}
    found: list[Association] = []
    for column in table.columns:
        for fk in column.foreign_keys:
            try:
                target_table = fk.column.table
            except SQLAlchemyError as e:
                raise MetadataUnavailable(f"{name}.{column.name}: {e}") from e
            target = owners.get(target_table)
            if target is None or target in referenced:
                continue
            referenced.add(target)
            label = column.name[:-3] if column.name.endswith("_id") else column.name
            found.append(Association(name=label, kind=AssociationKind.BELONGS_TO, target=target))
    return found


def describe_mapper(
    mapper: Mapper,
    *,
    owners: dict[Table, str],
    family: Iterable[Mapper] = (),
) -> list[ModelDescriptor]:
    """Descriptor for the table of `mapper` followed by its many-to-many joins.

    `family` lists the single-table subclasses whose relationships belong to
    the same table; `owners` maps every registered table to its model name.
    """
    name = mapper.class_.__name__
    table = mapper.local_table
    table_name = getattr(table, "name", None)
    if table_name is None:
        raise MetadataUnavailable(f"{name} is not mapped to a table.")

    members = [mapper, *family]
    associations: list[Association] = []
    joins: list[ModelDescriptor] = []
    seen: set[int] = set()
    for member in members:
        for rel in member.relationships:
            # Subclass mappers repeat inherited relationships; keep those
            # declared on this table's classes, once each.
            if id(rel) in seen or rel.parent not in members:
                continue
            seen.add(id(rel))
            target = _owner_name(rel.mapper)
            if rel.direction is RelationshipDirection.MANYTOONE:
                association = Association(name=rel.key, kind=AssociationKind.BELONGS_TO, target=target)
            elif rel.direction is RelationshipDirection.ONETOMANY:
                association = Association(
                    name=rel.key,
                    kind=AssociationKind.HAS_MANY,
                    target=target,
                    inverse_name=rel.info.get("as"),
                )
            else:
                joins.append(_join_model(rel))
                continue
            if association not in associations:
                associations.append(association)

    associations.extend(_foreign_key_associations(name, table, owners, associations))

    for column in table.columns:
        poly = column.info.get("polymorphic")
        if poly:
            associations.append(Association(name=poly, kind=AssociationKind.BELONGS_TO, polymorphic=True))

    own = ModelDescriptor(name=name, table_name=table_name, associations=tuple(associations), source=table)
    return [own, *joins]


def registry_from_declarative(base: Any) -> ModelRegistry:
    """Snapshot every mapped table of `base` (a DeclarativeBase or registry).

    Mappers are visited by class name so the registry order, and with it the
    dump order of unrelated models, does not depend on import order.
    """
    reg = _resolve_registry(base)
    try:
        reg.configure()
    except SQLAlchemyError as e:
        raise MetadataUnavailable(f"Mapper configuration failed: {e}") from e

    mappers = sorted(reg.mappers, key=lambda m: m.class_.__name__)
    table_mappers = [m for m in mappers if table_owner(m) is m]
    owners = {m.local_table: m.class_.__name__ for m in table_mappers}

    descriptors: list[ModelDescriptor] = []
    for mapper in table_mappers:
        family = [m for m in mappers if m is not mapper and table_owner(m) is mapper]
        if family:
            logger.debug(
                "folding %s into %s",
                ", ".join(m.class_.__name__ for m in family),
                mapper.class_.__name__,
            )
        descriptors.extend(describe_mapper(mapper, owners=owners, family=family))

    logger.debug("registry built with %d models", len(descriptors))
    return ModelRegistry(descriptors)
