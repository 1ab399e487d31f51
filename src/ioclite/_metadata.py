from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from ._registry import Scope


class Site(Enum):
    CONSTRUCTOR = "constructor"
    FIELD = "field"
    METHOD = "method"


@dataclass(frozen=True)
class DependencyDeclaration:
    """One injection site of a type.

    ``target`` is the parameter index for constructor sites and the attribute
    or method name otherwise. Constructor and field sites carry exactly one
    token; method sites carry the method's ordered argument tokens.
    """

    site: Site
    target: int | str
    tokens: tuple[str, ...]

    @property
    def token(self) -> str:
        return self.tokens[0]


@dataclass(frozen=True)
class TypeMetadata:
    token: str
    scope: Scope = Scope.SINGLETON
    declarations: tuple[DependencyDeclaration, ...] = ()

    @property
    def constructor_tokens(self) -> tuple[str, ...]:
        params = sorted(
            (d for d in self.declarations if d.site is Site.CONSTRUCTOR),
            key=lambda d: d.target,
        )
        return tuple(d.token for d in params)

    @property
    def fields(self) -> tuple[DependencyDeclaration, ...]:
        return tuple(d for d in self.declarations if d.site is Site.FIELD)

    @property
    def methods(self) -> tuple[DependencyDeclaration, ...]:
        return tuple(d for d in self.declarations if d.site is Site.METHOD)


class MetadataProvider(Protocol):
    """Read-only source of per-type declarations consumed by the container.

    Repeated queries for the same type must return equal results as long as
    no new declarations are made for it.
    """

    def token_for(self, cls: type) -> str: ...

    def metadata_for(self, cls: type) -> TypeMetadata: ...
