"""
Resolver configuration, loadable from YAML (or JSON, which YAML accepts).

A configuration document looks like:

    autoload:
      reserved: [destroy, teardown]
      reserve_dunders: true
      report_interceptions: true
      debug: false

The top-level `autoload:` key is optional.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, FrozenSet, Mapping, Optional

import yaml


DEBUG_ENV_VAR = "AUTOLOAD_DEBUG"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ResolverConfig:
    """Options shared by the guard, resolver and introspection bridge."""
    # Added on top of the default reserved hooks.
    reserved: FrozenSet[str] = field(default_factory=frozenset)
    reserve_dunders: bool = True
    # Whether can_resolve reports names that would only ever be intercepted
    # (handled each call, never installed).
    report_interceptions: bool = True
    debug: bool = False

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> 'ResolverConfig':
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigError(f"autoload config must be a mapping, not {type(data).__name__}")
        if "autoload" in data and len(data) == 1:
            return cls.from_mapping(data["autoload"])
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown autoload config keys: {', '.join(map(str, unknown))}")
        kwargs = {}
        if "reserved" in data:
            reserved = data["reserved"]
            if reserved is None:
                reserved = []
            if isinstance(reserved, str) or not isinstance(reserved, (list, tuple, set, frozenset)):
                raise ConfigError("'reserved' must be a list of names")
            for name in reserved:
                if not isinstance(name, str) or not name:
                    raise ConfigError(f"reserved name must be a non-empty string, not {name!r}")
            kwargs["reserved"] = frozenset(reserved)
        for flag in ("reserve_dunders", "report_interceptions", "debug"):
            if flag in data:
                value = data[flag]
                if not isinstance(value, bool):
                    raise ConfigError(f"{flag!r} must be true or false, not {value!r}")
                kwargs[flag] = value
        return cls(**kwargs)

    def to_mapping(self) -> dict:
        return {
            "reserved": sorted(self.reserved),
            "reserve_dunders": self.reserve_dunders,
            "report_interceptions": self.report_interceptions,
            "debug": self.debug,
        }


def parse_config(text: str) -> ResolverConfig:
    """Parses a YAML (or JSON) document into a ResolverConfig."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid autoload config: {e}") from e
    return ResolverConfig.from_mapping(data)


def load_config(path: str | os.PathLike) -> ResolverConfig:
    return parse_config(Path(path).read_text(encoding="utf-8"))


def dump_config(config: ResolverConfig) -> str:
    return yaml.safe_dump({"autoload": config.to_mapping()}, sort_keys=False)


def debug_enabled(config: Optional[ResolverConfig] = None) -> bool:
    if config is not None and config.debug:
        return True
    return bool(os.environ.get(DEBUG_ENV_VAR))


def _dbg(config: Optional[ResolverConfig], *parts):
    if debug_enabled(config):
        print("[DBG]", *parts, file=sys.stderr)


DEFAULT_CONFIG = ResolverConfig()


__all__ = [
    "ConfigError",
    "ResolverConfig",
    "DEFAULT_CONFIG",
    "parse_config",
    "load_config",
    "dump_config",
    "debug_enabled",
]
