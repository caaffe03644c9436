"""
Namespaces that own a method table and send missing names down the fallback path.

Three flavors share one resolver implementation:

  - Namespace: a free-standing table of direct bindings plus the fallback path.
  - Autoload: a mixin making a class the namespace; installed bindings are
    published onto the class so Python's own lookup finds them next time.
  - autoload_module: the same for a module through PEP 562 `__getattr__`.
"""

import inspect
import sys
import types
from typing import Any, Dict, Iterable, List, Optional, Union

from autoload.autoload_config import DEFAULT_CONFIG, ResolverConfig
from autoload.autoload_datatypes import Binding, CallRequest, UnresolvedName
from autoload.autoload_guard import NameGuard
from autoload.autoload_handlers import FallbackHandler
from autoload.autoload_resolver import FallbackResolver, IntrospectionBridge
from autoload.autoload_table import InstallCache, MethodTable
from autoload.autoload_trace import frame

_MISSING = object()


class Namespace:
    """Direct bindings plus a fallback path for every other name.

    `call(name, ...)` invokes the direct binding for `name` if there is one and
    otherwise hands the call to the resolver. Bindings installed by the
    fallback path receive the namespace as their first argument.

    Attribute access (`ns.render(...)`) reaches the same bindings, except for
    names that are attributes of the Namespace object itself (`name`, `call`,
    `keys`, `table`...). Python finds those first, so `ns.keys` stays the
    method even when a binding called "keys" exists. `call`, `acall`, `in` and
    `can_resolve` never look at those attributes.
    """
    def __init__(self, handler: Optional[FallbackHandler] = None, *, name: Optional[str] = None,
                 reserved: Optional[Iterable[str]] = None, config: Optional[ResolverConfig] = None,
                 guard: Optional[NameGuard] = None, installer: Optional[InstallCache] = None):
        self.name = name
        self.bindings: Dict[str, Any] = {}
        self.config = config or DEFAULT_CONFIG
        if guard is None:
            guard = NameGuard.from_config(self.config)
        if reserved:
            guard.register_reserved(*reserved)
        self.guard = guard.freeze()
        self.table = MethodTable(owner=self)
        self.resolver = FallbackResolver(handler, self.table, self.guard, installer=installer, config=self.config)
        self.introspection = IntrospectionBridge(self.resolver, has_direct=_has_direct_binding)

    # --- direct bindings ---

    def __setitem__(self, key: str, value: Any):
        if not isinstance(key, str) or not key:
            raise TypeError(f"binding name must be a non-empty str, not {key!r}")
        self.bindings[key] = value

    def __getitem__(self, key: str) -> Any:
        """Direct bindings only; item access never reaches the fallback path."""
        return self.bindings[key]

    def __delitem__(self, key: str):
        del self.bindings[key]

    def has_direct(self, key: Any) -> bool:
        return isinstance(key, str) and key in self.bindings

    def direct_lookup(self, key: Any) -> Any:
        """Returns the direct binding for key, or None."""
        return self.bindings.get(key) if isinstance(key, str) else None

    def keys(self):
        return self.bindings.keys()

    @property
    def installed(self) -> List[str]:
        return self.table.names()

    # --- dispatch ---

    def call(self, name: str, *args, **kwargs) -> Any:
        """Invokes name: direct binding first, then the fallback path."""
        with frame(name, args, self):
            if self.has_direct(name):
                return self.bindings[name](*args, **kwargs)
            return self.resolver.resolve_fallback(CallRequest(name, args, kwargs, self))

    async def acall(self, name: str, *args, **kwargs) -> Any:
        """Async counterpart of call; awaits async handlers and bindings."""
        with frame(name, args, self):
            if self.has_direct(name):
                result = self.bindings[name](*args, **kwargs)
                if inspect.isawaitable(result):
                    return await result
                return result
            return await self.resolver.aresolve_fallback(CallRequest(name, args, kwargs, self))

    def __getattr__(self, key: str):
        state = self.__dict__
        if "resolver" not in state:
            # Not constructed yet (copy/unpickle); nothing to resolve against.
            raise AttributeError(key)
        if key in state["bindings"]:
            return state["bindings"][key]
        return state["resolver"].resolve_binding(key, self)

    # --- introspection ---

    def can_resolve(self, key: Any) -> bool:
        return self.introspection.can_resolve(key, self)

    async def acan_resolve(self, key: Any) -> bool:
        return await self.introspection.acan_resolve(key, self)

    def __contains__(self, key: Any) -> bool:
        return self.can_resolve(key)

    def __dir__(self) -> List[str]:
        known = set(self.bindings) | set(self.table.names())
        return sorted(set(object.__dir__(self)) | {n for n in known if self.can_resolve(n)})

    def __repr__(self) -> str:
        from autoload.autoload_printer import Printer
        return Printer().pformat(self)


def _has_direct_binding(target: Namespace, key: str) -> bool:
    return target.has_direct(key)


def _has_static_attribute(target: Any, key: str) -> bool:
    return inspect.getattr_static(target, key, _MISSING) is not _MISSING


class Autoload:
    """Mixin that gives a class a fallback path for missing attributes.

        class Widget(Autoload, handler=SomeHandler(), reserved={"destroy"}):
            ...

    Each subclass owns its own method table. A subclass without a `handler`
    keyword reuses its parent's handler and reserved names. Installed bindings
    are set on the class, so after the first call Python finds them without
    reaching `__getattr__` at all.
    """
    __autoload__: Optional[FallbackResolver] = None

    def __init_subclass__(cls, handler: Optional[FallbackHandler] = None, reserved: Iterable[str] = (),
                          config: Optional[ResolverConfig] = None, installer: Optional[InstallCache] = None,
                          **kwargs):
        super().__init_subclass__(**kwargs)
        inherited = cls.__autoload__
        if inherited is not None:
            handler = handler if handler is not None else inherited.handler
            config = config or inherited.config
            installer = installer or inherited.installer
            guard = inherited.guard.copy()
            if config is not inherited.config:
                guard.reserve_dunders = config.reserve_dunders
                guard.register_reserved(*config.reserved)
        else:
            config = config or DEFAULT_CONFIG
            guard = NameGuard.from_config(config)
        if reserved:
            guard.register_reserved(*reserved)

        def publish(name: str, binding: Binding):
            setattr(cls, name, binding.func)

        table = MethodTable(owner=cls, on_install=publish)
        cls.__autoload__ = FallbackResolver(handler, table, guard.freeze(), installer=installer, config=config)

    def __getattr__(self, name: str):
        resolver = type(self).__autoload__
        if resolver is None:
            raise UnresolvedName(name, self)
        return resolver.resolve_binding(name, self)


def autoload_module(module: Union[str, types.ModuleType], handler: FallbackHandler, *,
                    reserved: Iterable[str] = (), config: Optional[ResolverConfig] = None,
                    installer: Optional[InstallCache] = None) -> FallbackResolver:
    """Gives a module a fallback path for missing attributes (PEP 562).

    Installed bindings are bound to the module and published into its globals.
    """
    if isinstance(module, str):
        module = sys.modules[module]
    if "__getattr__" in module.__dict__:
        raise ValueError(f"module {module.__name__!r} already defines __getattr__")
    config = config or DEFAULT_CONFIG
    guard = NameGuard.from_config(config, reserved).freeze()

    def publish(name: str, binding: Binding):
        setattr(module, name, binding.bind(module))

    table = MethodTable(owner=module, on_install=publish)
    resolver = FallbackResolver(handler, table, guard, installer=installer, config=config)

    def __getattr__(name: str):
        return resolver.resolve_binding(name, module)

    module.__getattr__ = __getattr__
    module.__autoload__ = resolver
    return resolver


def resolver_of(obj: Any) -> Optional[FallbackResolver]:
    """The fallback resolver governing obj, if it has one."""
    if isinstance(obj, Namespace):
        return obj.resolver
    if isinstance(obj, types.ModuleType):
        found = obj.__dict__.get("__autoload__")
    else:
        found = getattr(type(obj), "__autoload__", None)
    return found if isinstance(found, FallbackResolver) else None


def can_resolve(obj: Any, name: str) -> bool:
    """Whether `getattr(obj, name)` would succeed, answered without invoking the fallback path.

    Objects without a fallback resolver are asked through hasattr.
    """
    if isinstance(obj, Namespace):
        return obj.can_resolve(name)
    resolver = resolver_of(obj)
    if resolver is None:
        return hasattr(obj, name)
    return IntrospectionBridge(resolver, has_direct=_has_static_attribute).can_resolve(name, obj)
