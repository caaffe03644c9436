"""
A pretty-printer for autoload runtime objects.
"""
import collections.abc
import inspect

from autoload.autoload_datatypes import Binding, CallRequest
from autoload.autoload_table import MethodTable


class Printer:
    """Formats bindings, tables, requests and plain values for diagnostics."""

    def __init__(self, max_items=8):
        self.max_items = max_items
        self._handlers = self._create_handlers()

    def pformat(self, obj, level=0):
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        return handler(obj, level)

    def pformat_arg(self, arg):
        """Short form used for call-stack arguments."""
        match arg:
            case None:
                return "none"
            case bool() | int() | float() | str():
                return self.pformat(arg)
            case list() | tuple():
                return f"#[{len(arg)}]"
            case dict():
                return "#{...}"
        if inspect.ismethod(arg) or inspect.isfunction(arg):
            return getattr(arg, "__name__", None) or "<callable>"
        return self.pformat(arg)

    def _get_handler(self, obj):
        """Dispatcher to find the correct formatting method."""
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        if isinstance(obj, MethodTable): return self._pformat_table
        if isinstance(obj, collections.abc.Mapping): return self._pformat_dict
        if isinstance(obj, (list, tuple)): return self._pformat_list
        from autoload.autoload_namespace import Namespace
        if isinstance(obj, Namespace): return self._pformat_namespace
        # Default to Python's repr for unknown types
        return lambda o, l: repr(o)

    def _create_handlers(self):
        return {
            str: self._pformat_str,
            int: self._pformat_primitive,
            float: self._pformat_primitive,
            bool: self._pformat_bool,
            type(None): self._pformat_none,
            Binding: self._pformat_binding,
            CallRequest: self._pformat_request,
            MethodTable: self._pformat_table,
        }

    def _pformat_primitive(self, obj, level):
        return str(obj)

    def _pformat_str(self, obj, level):
        return repr(obj)

    def _pformat_bool(self, obj, level):
        return 'true' if obj else 'false'

    def _pformat_none(self, obj, level):
        return 'none'

    def _elide(self, items):
        items = list(items)
        if len(items) > self.max_items:
            return items[:self.max_items] + [f"...{len(items) - self.max_items} more"]
        return items

    def _pformat_list(self, obj, level):
        return "#[" + ", ".join(self._elide(self.pformat(v, level + 1) for v in obj)) + "]"

    def _pformat_dict(self, obj, level):
        parts = (f"{k}: {self.pformat(v, level + 1)}" for k, v in obj.items())
        return "#{" + ", ".join(self._elide(parts)) + "}"

    def _pformat_binding(self, obj, level):
        body = getattr(obj.func, "__qualname__", None) or type(obj.func).__name__
        kind = "async binding" if obj.is_async else "binding"
        return f"<{kind} {obj.name} -> {body}>"

    def _pformat_request(self, obj, level):
        parts = [obj.name] + [self.pformat_arg(a) for a in obj.args]
        parts += [f"{k}: {self.pformat_arg(v)}" for k, v in obj.kwargs.items()]
        return "(" + " ".join(parts) + ")"

    def _pformat_table(self, obj, level):
        return "<MethodTable [" + ", ".join(self._elide(sorted(obj.names()))) + "]>"

    def _pformat_namespace(self, obj, level):
        label = obj.name
        direct = sorted(obj.bindings)
        installed = sorted(obj.table.names())
        head = f"<{type(obj).__name__}"
        if label:
            head += f" {label}"
        return f"{head} bindings=[{', '.join(self._elide(direct))}] installed=[{', '.join(self._elide(installed))}]>"
