"""
autoload: missing-member dispatch for Python namespaces.

When a name has no direct binding, a single fallback handler decides what
happens: compute the answer, forward it to another object, or synthesize an
implementation that is installed so later calls never reach the fallback again.
"""

from autoload.autoload_config import (
    ConfigError, ResolverConfig, DEFAULT_CONFIG, parse_config, load_config, dump_config,
)
from autoload.autoload_datatypes import Binding, CallRequest, UnresolvedName
from autoload.autoload_guard import DEFAULT_RESERVED, NameGuard
from autoload.autoload_handlers import (
    AccessorHandler, FallbackHandler, InterceptingHandler, Synthesizer, SynthesizingHandler,
)
from autoload.autoload_namespace import Autoload, Namespace, autoload_module, can_resolve, resolver_of
from autoload.autoload_proxy import ProxyDelegate, ProxyHandler, make_proxy
from autoload.autoload_resolver import FallbackResolver, IntrospectionBridge
from autoload.autoload_table import InstallCache, MethodTable
from autoload.autoload_trace import current_stack, format_stacktrace

__version__ = "0.1.0"

__all__ = [
    "AccessorHandler",
    "Autoload",
    "Binding",
    "CallRequest",
    "ConfigError",
    "DEFAULT_CONFIG",
    "DEFAULT_RESERVED",
    "FallbackHandler",
    "FallbackResolver",
    "InstallCache",
    "InterceptingHandler",
    "IntrospectionBridge",
    "MethodTable",
    "NameGuard",
    "Namespace",
    "ProxyDelegate",
    "ProxyHandler",
    "ResolverConfig",
    "Synthesizer",
    "SynthesizingHandler",
    "UnresolvedName",
    "autoload_module",
    "can_resolve",
    "current_stack",
    "dump_config",
    "format_stacktrace",
    "load_config",
    "make_proxy",
    "parse_config",
    "resolver_of",
]
