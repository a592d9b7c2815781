"""
Traversal configuration.

Selection and exclusion rules are passed explicitly to every traversal call
instead of living in module-level registries. Models remember the config they
were built with so that every later discovery pass walks the graph the same way.

Container policy:
    Tuples, lists, named tuples, dataclasses and objects implementing the
    rebuild protocol are walked. Mappings and sets are excluded by default:
    they have no stable positional identity, so their contents are kept
    verbatim and never searched for parameters.
"""
from collections.abc import Mapping, Set
from dataclasses import dataclass, replace
from typing import Any, Callable, Tuple

from paramstate.param import AbstractParam, DEFAULT_UNITS_HOOK, UnitsHook


def is_param(value: Any) -> bool:
    """Default selection predicate: any AbstractParam instance."""
    return isinstance(value, AbstractParam)


DEFAULT_EXCLUDE_KINDS: Tuple[type, ...] = (str, bytes, bytearray, Mapping, Set, range, type)


@dataclass(frozen=True)
class TraversalConfig:
    """Rules for discovering and rebuilding parameters in an object graph.

    Attributes:
        select: Predicate marking a value as a parameter leaf.
        exclude_kinds: Types treated as opaque leaves; never descended into.
        recurse_objects: Also walk plain class instances via ``__dict__``.
        units: Units hook used when coercing parameters to plain values.
    """
    select: Callable[[Any], bool] = is_param
    exclude_kinds: Tuple[type, ...] = DEFAULT_EXCLUDE_KINDS
    recurse_objects: bool = False
    units: UnitsHook = DEFAULT_UNITS_HOOK

    def replace(self, **changes) -> 'TraversalConfig':
        """Return a copy with some settings changed."""
        return replace(self, **changes)

    def excluding(self, *kinds: type) -> 'TraversalConfig':
        """Return a copy that additionally excludes ``kinds``."""
        extra = tuple(k for k in kinds if k not in self.exclude_kinds)
        return replace(self, exclude_kinds=self.exclude_kinds + extra)

    def is_excluded(self, value: Any) -> bool:
        return isinstance(value, self.exclude_kinds)


DEFAULT_CONFIG = TraversalConfig()


def resolve_config(config=None) -> TraversalConfig:
    """Return ``config`` or the default configuration."""
    return DEFAULT_CONFIG if config is None else config
