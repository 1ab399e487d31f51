from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final


if TYPE_CHECKING:
    from collections.abc import Mapping


logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final[Any] = _Missing()


class ConfigurationStore:
    """Key/value table consulted before any component lookup.

    Values are opaque: they are handed out exactly as stored and never resolved
    further. ``None`` is a legal value; absence is signalled by ``MISSING``.
    """

    def __init__(self, entries: Mapping[str, Any] | None = None) -> None:
        self._entries: dict[str, Any] = dict(entries or {})

    def set(self, key: str, value: Any) -> None:
        if key in self._entries:
            logger.debug("Overwriting configuration entry %r", key)
        self._entries[key] = value

    def get(self, key: str, default: Any = MISSING) -> Any:
        return self._entries.get(key, default)

    def update(self, entries: Mapping[str, Any]) -> None:
        for key, value in entries.items():
            self.set(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
