from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterable


class ResolutionError(RuntimeError):
    """Base class for failures raised by ``Container.resolve``."""

    def __init__(self, msg: str, token: str) -> None:
        super().__init__(msg)
        self.token = token


class UnknownTokenError(ResolutionError):
    """No configuration entry and no registered component exist for a token."""

    def __init__(self, token: str) -> None:
        super().__init__(f"No provider found for token: {token}", token)


class CyclicDependencyError(ResolutionError):
    """A token was requested again while it was still being resolved.

    ``path`` holds the tokens of the active resolution path, ending with the
    re-entered token.
    """

    def __init__(self, token: str, path: Iterable[str] = ()) -> None:
        self.path = (*path, token)
        msg = f"Cyclic dependency detected for token: {token} ({' -> '.join(self.path)})"
        super().__init__(msg, token)
