from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum


logger = logging.getLogger(__name__)


class Scope(Enum):
    SINGLETON = "singleton"
    PROTOTYPE = "prototype"


@dataclass
class ComponentDescriptor:
    token: str
    constructor: type
    scope: Scope
    cached_instance: object | None = None  # cached singleton

    @property
    def is_singleton(self) -> bool:
        return self.scope is Scope.SINGLETON


class ComponentRegistry:
    """Token to descriptor table.

    The first descriptor registered for a token wins; later registrations for
    the same token are ignored. Descriptors are never removed.
    """

    def __init__(self) -> None:
        self._descriptors: dict[str, ComponentDescriptor] = {}

    def register(self, descriptor: ComponentDescriptor) -> bool:
        """Store ``descriptor`` unless its token is taken. Return whether it was stored."""
        if descriptor.token in self._descriptors:
            logger.debug(
                "Token %r already registered, ignoring %s",
                descriptor.token,
                descriptor.constructor.__qualname__,
            )
            return False

        self._descriptors[descriptor.token] = descriptor
        return True

    def lookup(self, token: str) -> ComponentDescriptor | None:
        return self._descriptors.get(token)

    def tokens(self) -> list[str]:
        """Registered tokens in registration order."""
        return list(self._descriptors)

    def __contains__(self, token: object) -> bool:
        return token in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)
