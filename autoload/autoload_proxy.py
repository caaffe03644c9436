"""
Delegation: a namespace that answers missing names by asking another object.

The proxy holds its target privately inside a ProxyDelegate and only ever
reaches it through the target's own resolution, so the target's fallback path
(if it has one) runs as usual and its answers and failures come back unchanged.
"""

import inspect
from typing import Any, Callable, Optional

from autoload.autoload_datatypes import Binding, CallRequest
from autoload.autoload_handlers import FallbackHandler


def _namespace_target(target: Any) -> bool:
    from autoload.autoload_namespace import Namespace
    return isinstance(target, Namespace)


class ProxyDelegate:
    """Forwards calls to a delegation target it references but does not own.

    A Namespace target is invoked through `call`/`acall`, the same path its
    own callers use, so its Python attributes (`keys`, `name`...) never stand
    in for its bindings. Other targets are reached with `resolve(target, name)`,
    `getattr` unless given.
    """

    __slots__ = ("__target", "_resolve")

    def __init__(self, target: Any, resolve: Optional[Callable[[Any, str], Any]] = None):
        self.__target = target
        self._resolve = resolve or getattr

    def forward(self, name: str, args=(), kwargs=None) -> Any:
        __tracebackhide__ = True
        target = self.__target
        if _namespace_target(target):
            return target.call(name, *args, **(kwargs or {}))
        return self._resolve(target, name)(*args, **(kwargs or {}))

    async def aforward(self, name: str, args=(), kwargs=None) -> Any:
        target = self.__target
        if _namespace_target(target):
            return await target.acall(name, *args, **(kwargs or {}))
        result = self._resolve(target, name)(*args, **(kwargs or {}))
        if inspect.isawaitable(result):
            return await result
        return result

    def can_forward(self, name: str) -> bool:
        """Whether forwarding `name` would resolve on the target, without invoking it.

        Namespaces are asked through `can_resolve`, which agrees with their
        `call`; anything else goes through hasattr.
        """
        from autoload.autoload_namespace import can_resolve
        return can_resolve(self.__target, name)

    def __repr__(self) -> str:
        return f"<ProxyDelegate -> {type(self.__target).__name__}>"


class ProxyHandler(FallbackHandler):
    """Fallback handler for a namespace acting purely as a proxy.

    Every interceptable name is forwarded so the target's failures surface
    verbatim. With `cache` on, the decision to forward is installed once the
    target is known to resolve the name; the installed body still forwards on
    every call, so the target's answer itself is never cached.
    """

    def __init__(self, delegate: ProxyDelegate, cache: bool = True):
        self.delegate = delegate
        self.caches = cache

    def accepts(self, name: str, target: Any) -> bool:
        return True

    def can_resolve(self, name: str, target: Any) -> bool:
        return self.delegate.can_forward(name)

    def synthesize(self, name: str, target: Any) -> Optional[Binding]:
        if not self.caches or not self.delegate.can_forward(name):
            return None
        delegate = self.delegate

        def forwarding(proxy, *args, **kwargs):
            return delegate.forward(name, args, kwargs)
        forwarding.__name__ = name
        forwarding.__qualname__ = name
        return Binding(func=forwarding, name=name, context=delegate)

    def handle(self, request: CallRequest) -> Any:
        __tracebackhide__ = True
        return self.delegate.forward(request.name, request.args, request.kwargs)

    def __repr__(self) -> str:
        return f"<ProxyHandler {self.delegate!r} cache={self.caches}>"


def make_proxy(target: Any, *, cache: bool = True, name: Optional[str] = None, **options):
    """Builds a Namespace with no bindings of its own that delegates to `target`."""
    from autoload.autoload_namespace import Namespace
    handler = ProxyHandler(ProxyDelegate(target), cache=cache)
    return Namespace(handler=handler, name=name or f"proxy:{type(target).__name__}", **options)
