"""
Method tables and the install-once protocol that is their only writer.
"""

import threading
from typing import Any, Callable, Dict, Iterator, List, Optional

from autoload.autoload_datatypes import Binding


class MethodTable:
    """Per-namespace mapping from name to installed Binding.

    Reads never lock: a name maps either to nothing or to a fully built
    Binding. Writes only happen through `InstallCache.install_if_absent`.
    """

    def __init__(self, owner: Any = None, on_install: Optional[Callable[[str, Binding], None]] = None):
        self.owner = owner
        # Runs once per name, for the winning binding, while the write lock is held.
        self.on_install = on_install
        self._bindings: Dict[str, Binding] = {}
        self._write_lock = threading.Lock()

    def lookup(self, name: str) -> Optional[Binding]:
        return self._bindings.get(name)

    def exists(self, name: str) -> bool:
        return name in self._bindings

    def names(self) -> List[str]:
        return list(self._bindings)

    def __contains__(self, name: Any) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._bindings))

    def __repr__(self) -> str:
        from autoload.autoload_printer import Printer
        return Printer().pformat(self)


class InstallCache:
    """Installs synthesized bindings into method tables, exactly once per name."""

    def __init__(self):
        self._stats_lock = threading.Lock()
        self.installs = 0
        self.races_lost = 0

    def install_if_absent(self, table: MethodTable, name: str, binding: Binding) -> Binding:
        """Returns the winning binding for `name`.

        The winner is either `binding` or one a concurrent caller installed
        first. Losing candidates are dropped without being called.
        """
        if not isinstance(binding, Binding):
            raise TypeError(f"install_if_absent expects a Binding, got {type(binding).__name__}")
        winner = table.lookup(name)
        if winner is None:
            with table._write_lock:
                winner = table._bindings.setdefault(name, binding)
                if winner is binding and table.on_install is not None:
                    table.on_install(name, binding)
        with self._stats_lock:
            if winner is binding:
                self.installs += 1
            else:
                self.races_lost += 1
        return winner


# Shared installer used when a resolver is not given its own.
default_installer = InstallCache()
