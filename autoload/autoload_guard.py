"""
Name classification for the fallback path.

A reserved name never reaches a fallback handler; resolving it fails the same
way an ordinary missing attribute does.
"""

from typing import FrozenSet, Iterable, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from autoload.autoload_config import ResolverConfig


# Object lifecycle hooks.
LIFECYCLE_HOOKS = frozenset({
    "__init__", "__new__", "__del__", "__init_subclass__", "__set_name__",
    "__post_init__",
})

# copy/pickle protocol probes.
COPY_PROTOCOL_HOOKS = frozenset({
    "__getstate__", "__setstate__", "__reduce__", "__reduce_ex__",
    "__getnewargs__", "__getnewargs_ex__", "__copy__", "__deepcopy__",
})

# Names the import system and PEP 562 look up on modules.
MODULE_HOOKS = frozenset({
    "__getattr__", "__dir__", "__all__", "__path__", "__spec__", "__loader__",
    "__file__",
})

# Attributes that frameworks probe for with getattr/hasattr.
FRAMEWORK_PROBES = frozenset({
    "__wrapped__", "__await__", "__aiter__", "__anext__", "__fspath__",
    "__length_hint__", "__class_getitem__",
})

DEFAULT_RESERVED: FrozenSet[str] = LIFECYCLE_HOOKS | COPY_PROTOCOL_HOOKS | MODULE_HOOKS | FRAMEWORK_PROBES


def is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


class NameGuard:
    """Classifies a requested name as interceptable or reserved.

    The reserved set is configured while the owning namespace is being built
    and is read-only after `freeze()`.
    """

    def __init__(self, reserved: Optional[Iterable[str]] = None, *, reserve_dunders: bool = True,
                 include_defaults: bool = True):
        self._reserved: Set[str] = set(DEFAULT_RESERVED) if include_defaults else set()
        self.reserve_dunders = reserve_dunders
        self._frozen = False
        if reserved:
            self.register_reserved(*reserved)

    @classmethod
    def from_config(cls, config: 'ResolverConfig', reserved: Optional[Iterable[str]] = None) -> 'NameGuard':
        guard = cls(config.reserved, reserve_dunders=config.reserve_dunders)
        if reserved:
            guard.register_reserved(*reserved)
        return guard

    def register_reserved(self, *names: str):
        if self._frozen:
            raise RuntimeError("reserved names are read-only once the namespace is constructed")
        for name in names:
            if not isinstance(name, str) or not name:
                raise TypeError(f"reserved name must be a non-empty str, not {name!r}")
            self._reserved.add(name)

    def freeze(self) -> 'NameGuard':
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def reserved(self) -> FrozenSet[str]:
        return frozenset(self._reserved)

    def is_reserved(self, name: str) -> bool:
        if name in self._reserved:
            return True
        return self.reserve_dunders and isinstance(name, str) and is_dunder(name)

    def is_interceptable(self, name) -> bool:
        if not isinstance(name, str) or not name:
            return False
        return not self.is_reserved(name)

    def copy(self) -> 'NameGuard':
        """Returns an unfrozen guard with the same reserved names."""
        clone = NameGuard(include_defaults=False, reserve_dunders=self.reserve_dunders)
        clone._reserved = set(self._reserved)
        return clone

    def __repr__(self) -> str:
        extra = sorted(self._reserved - DEFAULT_RESERVED)
        return f"<NameGuard extra={extra} dunders={self.reserve_dunders} frozen={self._frozen}>"
