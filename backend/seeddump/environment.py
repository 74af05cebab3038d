"""Dump seed data for a set of models selected through environment options.

Steps:
1. Select candidate models (MODEL/MODELS, MODELS_EXCLUDE), keeping only
   tables that exist and hold rows.
2. Order them so referenced rows come first.
3. Dump each model into one output file; only the first model honours
   APPEND, every later one appends.

The order is computed completely before anything is written, so an ordering
error leaves the output untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from sqlalchemy import inspect, literal_column, select
from sqlalchemy.orm import Session

from seeddump.core import config
from seeddump.core.config import DumpOptions
from seeddump.export.writer import dump
from seeddump.metadata.introspect import registry_from_declarative
from seeddump.metadata.registry import ModelDescriptor, ModelRegistry
from seeddump.ordering import order_models


logger = logging.getLogger("seeddump.environment")

# Tables owned by migration tooling, never part of application data.
INTERNAL_TABLES = frozenset({"alembic_version"})

Dumper = Callable[..., Any]


def _has_rows(session: Session, model: ModelDescriptor) -> bool:
    stmt = select(literal_column("1")).select_from(model.source).limit(1)
    return session.execute(stmt).first() is not None


def _unique(models: list[ModelDescriptor]) -> list[ModelDescriptor]:
    seen: set[ModelDescriptor] = set()
    out: list[ModelDescriptor] = []
    for m in models:
        if m not in seen:
            seen.add(m)
            out.append(m)
    return out


def retrieve_models(env: Mapping[str, str], registry: ModelRegistry, session: Session) -> list[ModelDescriptor]:
    """Models named by MODEL/MODELS (all models if unset) that have data to dump."""
    names = config.retrieve_model_names(env)
    if names is None:
        models = list(registry.candidate_models())
    else:
        models = _unique([registry.lookup(n) for n in names])

    inspector = inspect(session.get_bind())
    selected: list[ModelDescriptor] = []
    for m in models:
        if m.table_name in INTERNAL_TABLES:
            continue
        if not inspector.has_table(m.table_name, schema=getattr(m.source, "schema", None)):
            logger.debug("skipping %s: table %s does not exist", m.name, m.table_name)
            continue
        if not _has_rows(session, m):
            logger.debug("skipping %s: table %s is empty", m.name, m.table_name)
            continue
        selected.append(m)
    return selected


def retrieve_models_exclude(env: Mapping[str, str], registry: ModelRegistry) -> set[ModelDescriptor]:
    return {registry.lookup(n) for n in config.retrieve_models_exclude(env)}


def ordered_models_from_env(env: Mapping[str, str], registry: ModelRegistry, session: Session) -> list[ModelDescriptor]:
    excluded = retrieve_models_exclude(env, registry)
    models = [m for m in retrieve_models(env, registry, session) if m not in excluded]
    return order_models(registry, models)


def dump_using_environment(
    env: Mapping[str, str],
    *,
    session: Session,
    base: Any = None,
    registry: Optional[ModelRegistry] = None,
    dumper: Dumper = dump,
) -> list[ModelDescriptor]:
    """Dump every selected model in dependency order; returns the models dumped.

    `base` is the application's declarative base (or SQLAlchemy registry);
    a prebuilt `registry` may be passed instead.
    """
    if registry is None:
        if base is None:
            raise ValueError("dump_using_environment needs a declarative base or a model registry.")
        registry = registry_from_declarative(base)

    models = ordered_models_from_env(env, registry, session)
    options = DumpOptions.from_env(env)

    append = options.append
    for model in models:
        dumper(
            session,
            model,
            limit=options.limit,
            batch_size=options.batch_size,
            append=append,
            exclude=options.exclude,
            file=options.file,
            stdout=options.stdout,
            import_=options.import_,
        )
        append = True  # the first model alone decides whether the file is truncated

    return models
