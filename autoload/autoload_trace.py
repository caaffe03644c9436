"""
The autoload call stack: one frame per dispatched name.

Frames are pushed by the namespace for every dispatch, whether the name was
bound directly, installed earlier, or resolved by the fallback path a moment
ago. The fallback machinery never pushes a frame of its own, so a stack read
from inside a binding shows a direct call to the binding's name.

The stack lives in a ContextVar and is isolated per thread and per asyncio task.
"""

import contextvars
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Tuple

Frame = Dict[str, Any]

_call_stack: contextvars.ContextVar[Tuple[Frame, ...]] = contextvars.ContextVar("autoload_call_stack", default=())


@contextmanager
def frame(name: str, args: Tuple[Any, ...] = (), namespace: Any = None) -> Iterator[Frame]:
    entry = {"name": name, "args": tuple(args), "namespace": namespace}
    token = _call_stack.set(_call_stack.get() + (entry,))
    try:
        yield entry
    finally:
        _call_stack.reset(token)


def current_stack() -> List[Frame]:
    """Frames outermost first."""
    return list(_call_stack.get())


def format_stacktrace(stack: List[Frame] = None) -> str:
    stack = current_stack() if stack is None else stack
    if not stack:
        return ""
    from autoload.autoload_printer import Printer
    printer = Printer()
    frames = []
    for entry in stack:
        name = entry.get("name") or "<call>"
        args_s = " ".join(printer.pformat_arg(a) for a in entry.get("args") or ()).strip()
        frames.append(f"({name} {args_s})" if args_s else f"({name})")
    return "autoload stacktrace: " + " ".join(frames)
