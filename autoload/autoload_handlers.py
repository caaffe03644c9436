"""
User-level fallback logic.

A handler is split into a cheap predicate (`accepts`) and the steps that do
the work (`synthesize` for install-on-first-use, `handle` for pure
interception). Keeping the predicate separate is what lets introspection
answer "would this resolve?" without running the handler.
"""

import inspect
from typing import Any, Callable, Iterable, Optional

from autoload.autoload_datatypes import Binding, CallRequest, UnresolvedName


class Synthesizer:
    """Builds bindings from a factory.

    `factory(name, context)` must return the binding body, a callable taking
    `(target, *args, **kwargs)`. The body closes over `name` and `context`
    when it is created, so later state changes elsewhere do not affect it.
    Building a body must not have side effects; a losing candidate from an
    install race is simply dropped.
    """

    def __init__(self, factory: Callable[[str, Any], Callable[..., Any]]):
        if not callable(factory):
            raise TypeError("Synthesizer factory must be callable")
        self.factory = factory

    def synthesize(self, name: str, context: Any = None) -> Binding:
        body = self.factory(name, context)
        if inspect.isawaitable(body):
            # Close the coroutine so it does not warn about never being awaited.
            if inspect.iscoroutine(body):
                body.close()
            raise TypeError(f"Synthesizer factory for {name!r} must return a callable, not an awaitable")
        if not callable(body):
            raise TypeError(f"Synthesizer factory for {name!r} returned {type(body).__name__}, expected a callable")
        return Binding(func=body, name=name, context=context)


class FallbackHandler:
    """Base class for fallback logic. The default accepts every name but has no behavior.

    Subclasses override any of:
      - accepts(name, target): cheap "would I handle this" predicate,
      - can_resolve(name, target): the introspection answer; defaults to accepts,
        or False while neither synthesize nor handle is overridden,
      - synthesize(name, target): a Binding to install, or None,
      - handle(request): the result for a call that installs nothing.

    Any of these may be coroutine functions when the namespace is driven
    through its async entry points.
    """

    # Whether this handler installs bindings; consulted by introspection when
    # interceptions are configured as invisible.
    caches = True

    def accepts(self, name: str, target: Any) -> bool:
        return True

    def can_resolve(self, name: str, target: Any) -> bool:
        # Without synthesize or handle overridden every accepted name still declines.
        cls = type(self)
        if cls.synthesize is FallbackHandler.synthesize and cls.handle is FallbackHandler.handle:
            return False
        return self.accepts(name, target)

    def synthesize(self, name: str, target: Any) -> Optional[Binding]:
        return None

    def handle(self, request: CallRequest) -> Any:
        self.decline(request.name, request.target)

    def decline(self, name: str, target: Any = None):
        raise UnresolvedName(name, target, UnresolvedName.DECLINED)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


class SynthesizingHandler(FallbackHandler):
    """Install-on-first-use handler built from a factory and an optional predicate.

    `factory(name, context)` returns the binding body; `context` is the
    handler's `context` if one was given, otherwise the resolving target.
    """

    def __init__(self, factory: Callable[[str, Any], Callable[..., Any]],
                 accepts: Optional[Callable[[str], bool]] = None, context: Any = None):
        self.synthesizer = factory if isinstance(factory, Synthesizer) else Synthesizer(factory)
        self.predicate = accepts
        self.context = context

    def accepts(self, name: str, target: Any) -> bool:
        if self.predicate is None:
            return True
        return bool(self.predicate(name))

    def synthesize(self, name: str, target: Any) -> Binding:
        context = self.context if self.context is not None else target
        return self.synthesizer.synthesize(name, context)


class InterceptingHandler(FallbackHandler):
    """Pure interception: `func(request)` runs on every call, nothing is installed."""
    caches = False

    def __init__(self, func: Callable[[CallRequest], Any], accepts: Optional[Callable[[str], bool]] = None):
        self.func = func
        self.predicate = accepts

    def accepts(self, name: str, target: Any) -> bool:
        if self.predicate is None:
            return True
        return bool(self.predicate(name))

    def handle(self, request: CallRequest) -> Any:
        return self.func(request)


class AccessorHandler(FallbackHandler):
    """Synthesizes `get_<field>` / `set_<field>` accessors for declared fields.

    Values live as plain attributes on the target. A getter for a field that
    was never set raises AttributeError from the target, like any unset
    attribute would.
    """

    def __init__(self, fields: Iterable[str], get_prefix: str = "get_", set_prefix: str = "set_"):
        self.fields = frozenset(fields)
        self.get_prefix = get_prefix
        self.set_prefix = set_prefix

    def _split(self, name: str):
        for kind, prefix in (("get", self.get_prefix), ("set", self.set_prefix)):
            if prefix and name.startswith(prefix):
                fld = name[len(prefix):]
                if fld in self.fields:
                    return kind, fld
        return None, None

    def accepts(self, name: str, target: Any) -> bool:
        kind, _ = self._split(name)
        return kind is not None

    def synthesize(self, name: str, target: Any) -> Binding:
        kind, fld = self._split(name)
        if kind == "get":
            def getter(obj):
                return getattr(obj, fld)
            body = getter
        else:
            def setter(obj, value):
                setattr(obj, fld, value)
                return value
            body = setter
        body.__name__ = name
        body.__qualname__ = name
        return Binding(func=body, name=name, context=fld)

    def __repr__(self) -> str:
        return f"<AccessorHandler fields={sorted(self.fields)}>"
