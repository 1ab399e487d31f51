"""Minimal inversion-of-control container.

This package builds and caches object graphs from declared components,
resolving dependencies by string token, with singleton/prototype scopes,
configuration values and cycle detection on the active resolution path.

Exports:
- `Container`: registers declared classes and resolves tokens to instances.
- `Scope`: component scope (singleton or prototype).
- `DeclarationTable`: explicit per-type declaration table; `declarations` is
  the default one, used by the module-level decorators `singleton`,
  `prototype`, `inject`, `value`, `inject_constructor` and `inject_method`.
- `ResolutionError`, `UnknownTokenError`, `CyclicDependencyError`: resolution
  failures.
"""

from ._config import MISSING, ConfigurationStore
from ._container import Container
from ._declarations import (
    DeclarationTable,
    declarations,
    inject,
    inject_constructor,
    inject_method,
    prototype,
    singleton,
    value,
)
from ._errors import CyclicDependencyError, ResolutionError, UnknownTokenError
from ._metadata import DependencyDeclaration, MetadataProvider, Site, TypeMetadata
from ._registry import ComponentDescriptor, ComponentRegistry, Scope


__all__ = [
    "MISSING",
    "ComponentDescriptor",
    "ComponentRegistry",
    "ConfigurationStore",
    "Container",
    "CyclicDependencyError",
    "DeclarationTable",
    "DependencyDeclaration",
    "MetadataProvider",
    "ResolutionError",
    "Scope",
    "Site",
    "TypeMetadata",
    "UnknownTokenError",
    "declarations",
    "inject",
    "inject_constructor",
    "inject_method",
    "prototype",
    "singleton",
    "value",
]
