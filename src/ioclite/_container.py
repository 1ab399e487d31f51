from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._config import MISSING, ConfigurationStore
from ._declarations import declarations
from ._errors import CyclicDependencyError, UnknownTokenError
from ._registry import ComponentDescriptor, ComponentRegistry


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._metadata import MetadataProvider

    T = TypeVar("T")

    Token = type[T] | str


class Container:
    """Minimal IoC container.

    - register declared classes under their token
    - resolve by token or class with constructor, field and method injection
    - scopes: singleton / prototype
    - configuration entries take precedence over components.
    """

    def __init__(
        self,
        metadata: MetadataProvider | None = None,
        configuration: Mapping[str, Any] | None = None,
    ) -> None:
        self._metadata: MetadataProvider = metadata if metadata is not None else declarations
        self._registry = ComponentRegistry()
        self._configuration = ConfigurationStore(configuration)
        self._resolving: dict[str, None] = {}  # ordered set of tokens on the active path
        self._lock = threading.RLock()

    @property
    def registry(self) -> ComponentRegistry:
        return self._registry

    @property
    def configuration(self) -> ConfigurationStore:
        return self._configuration

    def register_class(self, cls: type) -> None:
        """Register ``cls`` under its declared token and scope.

        Registering a token a second time is a no-op.
        """
        meta = self._metadata.metadata_for(cls)
        descriptor = ComponentDescriptor(token=meta.token, constructor=cls, scope=meta.scope)

        with self._lock:
            if self._registry.register(descriptor):
                logger.debug("Registered %s as %r (%s)", cls.__qualname__, meta.token, meta.scope.value)

    def register_annotated_classes(self, *classes: type) -> None:
        for cls in classes:
            self.register_class(cls)

    def set_configuration(self, key: str, value: Any) -> None:
        with self._lock:
            self._configuration.set(key, value)

    def is_registered(self, token: Token[Any]) -> bool:
        return self._token_of(token) in self._registry

    @overload
    def resolve(self, token: type[T]) -> T: ...

    @overload
    def resolve(self, token: str) -> Any: ...

    def resolve(self, token: Token[T]) -> Any:
        """Resolve the token to an instance or configuration value.

        Precedence:
        1. configuration entry
        2. cycle check against the active resolution path
        3. cached singleton
        4. new instance.
        """
        key = self._token_of(token)

        with self._lock:
            value = self._configuration.get(key)
            if value is not MISSING:
                return value

            if key in self._resolving:
                raise CyclicDependencyError(key, self._resolving)

            descriptor = self._registry.lookup(key)
            if descriptor is None:
                raise UnknownTokenError(key)

            # Return cached singleton if present
            if descriptor.is_singleton and descriptor.cached_instance is not None:
                return descriptor.cached_instance

            self._resolving[key] = None
            try:
                instance = self._instantiate(descriptor)
            except Exception:
                logger.debug("Resolution of %r failed", key)
                raise
            finally:
                del self._resolving[key]

            # Cache if singleton
            if descriptor.is_singleton:
                descriptor.cached_instance = instance
                logger.debug("Cached singleton %r", key)

            return instance

    def _instantiate(self, descriptor: ComponentDescriptor) -> object:
        cls = descriptor.constructor
        meta = self._metadata.metadata_for(cls)

        args = [self.resolve(t) for t in meta.constructor_tokens]
        instance = cls(*args)
        logger.debug("Created %s for %r", cls.__qualname__, descriptor.token)

        for decl in meta.fields:
            setattr(instance, decl.target, self.resolve(decl.token))  # type: ignore[arg-type]

        for decl in meta.methods:
            values = [self.resolve(t) for t in decl.tokens]
            getattr(instance, decl.target)(*values)  # type: ignore[call-overload]

        return instance

    def _token_of(self, token: Token[Any]) -> str:
        if isinstance(token, type):
            return self._metadata.token_for(token)
        return token
