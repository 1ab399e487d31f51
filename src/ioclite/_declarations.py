"""Declaration table and the decorators that populate it.

Annotations are read here, once, when a decorated class is created. The
container never inspects types; it only reads the ``TypeMetadata`` built from
this table.
"""

from __future__ import annotations

import inspect
import logging
import weakref
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._metadata import DependencyDeclaration, Site, TypeMetadata
from ._registry import Scope


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    T = TypeVar("T")
    F = TypeVar("F", bound=Callable[..., Any])

    TokenLike = str | type


logger = logging.getLogger(__name__)

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


@dataclass
class _Entry:
    token: str | None = None
    scope: Scope | None = None
    constructor: tuple[str, ...] | None = None
    fields: dict[str, str] = field(default_factory=dict)
    methods: dict[str, tuple[str, ...]] = field(default_factory=dict)


class DeclarationTable:
    """Explicit, queryable table of per-type injection declarations.

    Populate it imperatively with the ``declare_*`` methods or through the
    decorator methods (``singleton``, ``prototype``, ``inject``, ``value``,
    ``inject_constructor``, ``inject_method``).

    Subclasses inherit declarations along the MRO: the scope of the nearest
    declaring class, the constructor tokens of the class whose ``__init__``
    is used, and field and method declarations merged base-first with
    subclass entries overriding. The token is never inherited.
    """

    def __init__(self) -> None:
        # weak keys: entries go away with classes created at runtime
        self._entries: weakref.WeakKeyDictionary[type, _Entry] = weakref.WeakKeyDictionary()

    # -- imperative API --------------------------------------------------

    def declare_scope(self, cls: type, scope: Scope, token: TokenLike | None = None) -> None:
        entry = self._entry(cls)
        entry.scope = scope
        if token is not None:
            entry.token = self._as_token(token)

    def declare_constructor(self, cls: type, tokens: Iterable[TokenLike]) -> None:
        """Declare the constructor tokens of ``cls``, one per positional parameter, in order."""
        self._entry(cls).constructor = tuple(self._as_token(t) for t in tokens)

    def declare_field(self, cls: type, name: str, token: TokenLike) -> None:
        self._entry(cls).fields[name] = self._as_token(token)

    def declare_method(self, cls: type, name: str, tokens: Iterable[TokenLike]) -> None:
        self._entry(cls).methods[name] = tuple(self._as_token(t) for t in tokens)

    # -- MetadataProvider -------------------------------------------------

    def token_for(self, cls: type) -> str:
        entry = self._entries.get(cls)
        if entry is not None and entry.token is not None:
            return entry.token
        return cls.__name__

    def metadata_for(self, cls: type) -> TypeMetadata:
        chain = [(klass, self._entries.get(klass)) for klass in cls.__mro__]

        scope = next((e.scope for _, e in chain if e is not None and e.scope is not None), Scope.SINGLETON)

        constructor: tuple[str, ...] = ()
        for klass, entry in chain:
            if entry is not None and entry.constructor is not None:
                constructor = entry.constructor
                break
            if "__init__" in klass.__dict__:
                # an undeclared __init__ hides the base's declaration
                break

        fields: dict[str, str] = {}
        methods: dict[str, tuple[str, ...]] = {}
        for _, entry in reversed(chain):
            if entry is not None:
                fields.update(entry.fields)
                methods.update(entry.methods)

        declarations = [
            DependencyDeclaration(Site.CONSTRUCTOR, index, (token,)) for index, token in enumerate(constructor)
        ]
        declarations += [DependencyDeclaration(Site.FIELD, name, (token,)) for name, token in fields.items()]
        declarations += [DependencyDeclaration(Site.METHOD, name, tokens) for name, tokens in methods.items()]
        return TypeMetadata(token=self.token_for(cls), scope=scope, declarations=tuple(declarations))

    def __contains__(self, cls: object) -> bool:
        return cls in self._entries

    # -- decorator API ----------------------------------------------------

    @overload
    def singleton(self, cls: type[T], *, token: TokenLike | None = ...) -> type[T]: ...

    @overload
    def singleton(self, cls: None = ..., *, token: TokenLike | None = ...) -> Callable[[type[T]], type[T]]: ...

    def singleton(self, cls: type[T] | None = None, *, token: TokenLike | None = None) -> Any:
        """Mark a class as a singleton component.

        Usable bare (``@singleton``) or called (``@singleton(token="db")``).
        """
        return self._scoped(Scope.SINGLETON, cls, token)

    @overload
    def prototype(self, cls: type[T], *, token: TokenLike | None = ...) -> type[T]: ...

    @overload
    def prototype(self, cls: None = ..., *, token: TokenLike | None = ...) -> Callable[[type[T]], type[T]]: ...

    def prototype(self, cls: type[T] | None = None, *, token: TokenLike | None = None) -> Any:
        """Mark a class as a prototype component: a new instance per resolution."""
        return self._scoped(Scope.PROTOTYPE, cls, token)

    def inject(self, token: TokenLike | None = None) -> Any:
        """Field injection marker.

        Example:
          @singleton
          class UserService:
              database: Database = inject()
              cache = inject("cache")

        Without a token, the attribute's annotation supplies it.
        """
        return _FieldMarker(self, token)

    def value(self, key: str) -> Any:
        """Field bound to the configuration key ``key``."""
        return _FieldMarker(self, key)

    def inject_constructor(self, *tokens: TokenLike | None, **named: TokenLike) -> Callable[[F], F]:
        """Declare ``__init__`` parameters as injected.

        Positional ``tokens`` apply by parameter index (``None`` skips an
        index), ``named`` tokens by parameter name. Remaining parameters take
        their token from their annotation, or from their name when they have
        none.
        """

        def decorate(func: F) -> F:
            return _ConstructorMarker(self, func, tokens, named)  # type: ignore[return-value]

        return decorate

    def inject_method(self, *tokens: TokenLike) -> Callable[[F], F]:
        """Declare a method to be called once after field injection with the resolved ``tokens``."""

        def decorate(func: F) -> F:
            return _MethodMarker(self, func, tokens)  # type: ignore[return-value]

        return decorate

    # -- helpers -----------------------------------------------------------

    def token_from_annotation(self, annotation: object) -> str | None:
        if annotation is inspect.Parameter.empty or annotation is None:
            return None
        if isinstance(annotation, str):
            # string annotations name the type; no evaluation takes place
            return annotation.strip().strip("'\"").rsplit(".", 1)[-1]
        if isinstance(annotation, type):
            return self.token_for(annotation)
        return getattr(annotation, "__name__", None) or str(annotation)

    def _entry(self, cls: type) -> _Entry:
        entry = self._entries.get(cls)
        if entry is None:
            entry = self._entries[cls] = _Entry()
        return entry

    def _as_token(self, token: TokenLike) -> str:
        if isinstance(token, str):
            return token
        if isinstance(token, type):
            return self.token_for(token)
        msg = f"Token must be a str or a class, got {token!r}"
        raise TypeError(msg)

    def _scoped(self, scope: Scope, cls: type | None, token: TokenLike | None) -> Any:
        def decorate(target: type) -> type:
            self.declare_scope(target, scope, token)
            logger.debug("Declared %s as %s", target.__qualname__, scope.value)
            return target

        if cls is None:
            return decorate
        return decorate(cls)


class _FieldMarker:
    """Placeholder class attribute; replaced by nothing once its owner is created."""

    def __init__(self, table: DeclarationTable, token: TokenLike | None) -> None:
        self._table = table
        self._token = token

    def __set_name__(self, owner: type, name: str) -> None:
        token = self._token
        if token is None:
            annotation = inspect.get_annotations(owner).get(name, inspect.Parameter.empty)
            token = self._table.token_from_annotation(annotation) or name

        self._table.declare_field(owner, name, token)
        delattr(owner, name)

    def __repr__(self) -> str:
        return f"inject({self._token!r})"


class _MethodMarker:
    def __init__(self, table: DeclarationTable, func: Callable[..., Any], tokens: tuple[TokenLike, ...]) -> None:
        self._table = table
        self._func = func
        self._tokens = tokens

    def __set_name__(self, owner: type, name: str) -> None:
        self._table.declare_method(owner, name, self._tokens)
        setattr(owner, name, self._func)


class _ConstructorMarker:
    def __init__(
        self,
        table: DeclarationTable,
        func: Callable[..., Any],
        tokens: tuple[TokenLike | None, ...],
        named: dict[str, TokenLike],
    ) -> None:
        self._table = table
        self._func = func
        self._tokens = tokens
        self._named = named

    def __set_name__(self, owner: type, name: str) -> None:
        if name != "__init__":
            msg = f"inject_constructor() applies to __init__, not {owner.__qualname__}.{name}"
            raise TypeError(msg)

        params = [p for p in inspect.signature(self._func).parameters.values() if p.kind in _POSITIONAL][1:]

        if len(self._tokens) > len(params):
            msg = f"{owner.__qualname__}.__init__ takes {len(params)} injectable parameters, got {len(self._tokens)} tokens"
            raise TypeError(msg)

        unknown = set(self._named) - {p.name for p in params}
        if unknown:
            msg = f"{owner.__qualname__}.__init__ has no positional parameters named {', '.join(sorted(unknown))}"
            raise TypeError(msg)

        doubled = [p.name for p, t in zip(params, self._tokens) if t is not None and p.name in self._named]
        if doubled:
            msg = f"{owner.__qualname__}.__init__ parameters given both positional and named tokens: {', '.join(doubled)}"
            raise TypeError(msg)

        tokens: list[TokenLike] = []
        for index, p in enumerate(params):
            token = self._tokens[index] if index < len(self._tokens) else None
            if token is None:
                token = self._named.get(p.name)
            if token is None:
                token = self._table.token_from_annotation(p.annotation) or p.name
            tokens.append(token)

        self._table.declare_constructor(owner, tokens)
        setattr(owner, name, self._func)


declarations = DeclarationTable()
"""Table used by the module-level decorators and by ``Container()`` by default."""

singleton = declarations.singleton
prototype = declarations.prototype
inject = declarations.inject
value = declarations.value
inject_constructor = declarations.inject_constructor
inject_method = declarations.inject_method
