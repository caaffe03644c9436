"""
The fallback path: what happens once ordinary lookup of a name has failed.

    GuardCheck -> TableLookup -> (hit) TailDispatch
                              -> (miss) Invoke -> InstallAttempt -> TailDispatch
    GuardCheck -> Rejected   (reserved name, UnresolvedName)

Two families of entry points share those steps:

  - resolve_fallback / aresolve_fallback take a CallRequest and return the
    call's result. The binding's result is returned as-is from the resolver's
    frame; the frame is hidden from pytest tracebacks and never recorded in
    the autoload call stack.
  - resolve_binding / aresolve_binding stop before dispatch and hand back a
    callable bound to the target, so the caller invokes the binding itself and
    no resolver frame exists while it runs. Attribute-style access uses these.
"""

import inspect
from typing import Any, Callable, Optional

from autoload.autoload_config import DEFAULT_CONFIG, ResolverConfig, _dbg
from autoload.autoload_datatypes import Binding, CallRequest, UnresolvedName
from autoload.autoload_guard import NameGuard
from autoload.autoload_handlers import FallbackHandler
from autoload.autoload_table import InstallCache, MethodTable, default_installer


def _refuse_awaitable(value: Any, step: str, name: str) -> Any:
    if inspect.isawaitable(value):
        if inspect.iscoroutine(value):
            value.close()
        raise TypeError(f"fallback {step} for {name!r} is asynchronous; use the async entry point")
    return value


async def _settle(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class FallbackResolver:
    """Runs the fallback path for one namespace."""

    def __init__(self, handler: Optional[FallbackHandler], table: Optional[MethodTable] = None,
                 guard: Optional[NameGuard] = None, *, installer: Optional[InstallCache] = None,
                 config: Optional[ResolverConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.handler = handler
        self.table = table if table is not None else MethodTable()
        self.guard = guard if guard is not None else NameGuard.from_config(self.config)
        self.installer = installer or default_installer

    def _dbg(self, *parts):
        _dbg(self.config, *parts)

    def _reject(self, name: Any, target: Any, reason: str):
        self._dbg("fallback reject", repr(name), reason)
        raise UnresolvedName(name, target, reason)

    def _lookup(self, name: Any, target: Any) -> Optional[Binding]:
        """GuardCheck and TableLookup."""
        if not self.guard.is_interceptable(name):
            self._reject(name, target, UnresolvedName.RESERVED)
        binding = self.table.lookup(name)
        if binding is not None:
            self._dbg("fallback hit", name)
        return binding

    def _handler_for(self, name: str, target: Any) -> FallbackHandler:
        if self.handler is None:
            self._reject(name, target, UnresolvedName.MISSING)
        self._dbg("fallback invoke", name, type(self.handler).__name__)
        return self.handler

    def _install(self, name: str, candidate: Any) -> Optional[Binding]:
        """InstallAttempt. Returns None when the handler chose pure interception."""
        if candidate is None:
            return None
        if not isinstance(candidate, Binding):
            raise TypeError(f"fallback synthesize for {name!r} must return a Binding or None, "
                            f"not {type(candidate).__name__}")
        winner = self.installer.install_if_absent(self.table, name, candidate)
        self._dbg("fallback install", name, "won" if winner is candidate else "lost race")
        return winner

    def _invoke(self, name: str, target: Any) -> Optional[Binding]:
        handler = self._handler_for(name, target)
        if not _refuse_awaitable(handler.accepts(name, target), "accepts", name):
            self._reject(name, target, UnresolvedName.DECLINED)
        candidate = _refuse_awaitable(handler.synthesize(name, target), "synthesize", name)
        return self._install(name, candidate)

    async def _ainvoke(self, name: str, target: Any) -> Optional[Binding]:
        handler = self._handler_for(name, target)
        if not await _settle(handler.accepts(name, target)):
            self._reject(name, target, UnresolvedName.DECLINED)
        candidate = await _settle(handler.synthesize(name, target))
        return self._install(name, candidate)

    def _interceptor(self, name: str, target: Any) -> Callable[..., Any]:
        handler = self.handler

        def intercepted(*args, **kwargs):
            return handler.handle(CallRequest(name, args, kwargs, target))
        intercepted.__name__ = name
        intercepted.__qualname__ = name
        return intercepted

    # --- call entry points ---

    def resolve_fallback(self, request: CallRequest) -> Any:
        __tracebackhide__ = True
        name, target = request.name, request.target
        binding = self._lookup(name, target)
        if binding is None:
            binding = self._invoke(name, target)
            if binding is None:
                return self.handler.handle(request)
        return binding(target, *request.args, **request.kwargs)

    async def aresolve_fallback(self, request: CallRequest) -> Any:
        __tracebackhide__ = True
        name, target = request.name, request.target
        binding = self._lookup(name, target)
        if binding is None:
            binding = await self._ainvoke(name, target)
            if binding is None:
                return await _settle(self.handler.handle(request))
        return await _settle(binding(target, *request.args, **request.kwargs))

    # --- binding entry points ---

    def resolve_binding(self, name: str, target: Any = None) -> Callable[..., Any]:
        __tracebackhide__ = True
        binding = self._lookup(name, target)
        if binding is None:
            binding = self._invoke(name, target)
            if binding is None:
                return self._interceptor(name, target)
        return binding.bind(target)

    async def aresolve_binding(self, name: str, target: Any = None) -> Callable[..., Any]:
        binding = self._lookup(name, target)
        if binding is None:
            binding = await self._ainvoke(name, target)
            if binding is None:
                return self._interceptor(name, target)
        return binding.bind(target)

    def __repr__(self) -> str:
        return f"<FallbackResolver handler={self.handler!r} installed={len(self.table)}>"


class IntrospectionBridge:
    """Answers "would `name` resolve?" the same way an invocation would.

    `has_direct(target, name)` is the object model's ordinary lookup; it is
    consulted first because ordinary lookup runs before the fallback path.
    """

    def __init__(self, resolver: FallbackResolver, has_direct: Optional[Callable[[Any, str], bool]] = None):
        self.resolver = resolver
        self.has_direct = has_direct

    def _known(self, name: Any, target: Any) -> Optional[bool]:
        """The answer when the handler need not be asked, else None."""
        if self.has_direct is not None and isinstance(name, str) and self.has_direct(target, name):
            return True
        resolver = self.resolver
        if not resolver.guard.is_interceptable(name):
            return False
        if resolver.table.exists(name):
            return True
        if resolver.handler is None:
            return False
        return None

    def _visible(self, accepted: Any) -> bool:
        if not accepted:
            return False
        handler = self.resolver.handler
        return bool(self.resolver.config.report_interceptions or handler.caches)

    def can_resolve(self, name: Any, target: Any = None) -> bool:
        known = self._known(name, target)
        if known is not None:
            return known
        accepted = self.resolver.handler.can_resolve(name, target)
        return self._visible(_refuse_awaitable(accepted, "can_resolve", name))

    async def acan_resolve(self, name: Any, target: Any = None) -> bool:
        known = self._known(name, target)
        if known is not None:
            return known
        return self._visible(await _settle(self.resolver.handler.can_resolve(name, target)))
