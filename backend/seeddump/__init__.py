"""Dependency-ordered seed data dumps for SQLAlchemy applications."""

from seeddump.core.errors import (
    ConfigError,
    CyclicDependency,
    MetadataUnavailable,
    SeedDumpError,
    UnresolvableReference,
)
from seeddump.environment import dump_using_environment
from seeddump.metadata.introspect import registry_from_declarative
from seeddump.metadata.registry import Association, AssociationKind, ModelDescriptor, ModelRegistry
from seeddump.ordering import order_models

__all__ = [
    "Association",
    "AssociationKind",
    "ConfigError",
    "CyclicDependency",
    "MetadataUnavailable",
    "ModelDescriptor",
    "ModelRegistry",
    "SeedDumpError",
    "UnresolvableReference",
    "dump_using_environment",
    "order_models",
    "registry_from_declarative",
]
