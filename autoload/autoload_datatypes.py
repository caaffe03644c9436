"""
Defines the core data types shared by the autoload runtime.

A Binding is the executable unit the fallback path installs, a CallRequest is
the per-call value handed to the resolver, and UnresolvedName is the failure
raised when a name cannot be resolved at all.
"""

import functools
import inspect
import types
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple


class UnresolvedName(AttributeError):
    """Raised when a name has no direct binding and the fallback path refuses it.

    Subclasses AttributeError so that `getattr(obj, name, default)` and
    `hasattr` behave exactly as they would for an ordinary missing attribute.
    """

    RESERVED = "reserved"
    DECLINED = "declined"
    MISSING = "missing"

    def __init__(self, name: Any, target: Any = None, reason: str = MISSING):
        if target is None:
            message = f"name {name!r} is not defined"
        elif isinstance(target, types.ModuleType):
            message = f"module {target.__name__!r} has no attribute {name!r}"
        else:
            message = f"{type(target).__name__!r} object has no attribute {name!r}"
        super().__init__(message)
        self.name = name
        self.target = target
        self.reason = reason


@dataclass(frozen=True)
class Binding:
    """An installed implementation for one name.

    `func` is called as `func(target, *args, **kwargs)`, the same shape as a
    method defined on a class. `context` is whatever the synthesizer closed
    over (a class, a delegate...); it is informational only.
    """
    func: Callable[..., Any]
    name: str
    context: Any = None

    def __post_init__(self):
        if not callable(self.func):
            raise TypeError(f"Binding for {self.name!r} requires a callable, got {type(self.func).__name__}")

    def __call__(self, target: Any, *args, **kwargs) -> Any:
        return self.func(target, *args, **kwargs)

    def bind(self, target: Any) -> Callable[..., Any]:
        """Returns the binding as a method bound to `target`."""
        if target is None:
            return functools.partial(self.func, None)
        return types.MethodType(self.func, target)

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.func)

    def __repr__(self) -> str:
        from autoload.autoload_printer import Printer
        return Printer().pformat(self)


@dataclass(frozen=True)
class CallRequest:
    """A single invocation of `name` against `target`; never retained."""
    name: str
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)
    target: Optional[Any] = None

    def __repr__(self) -> str:
        from autoload.autoload_printer import Printer
        return Printer().pformat(self)
