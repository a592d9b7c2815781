"""
Discovery and reconstruction of parameters in arbitrary object graphs.

The walk is depth-first and left-to-right over container children:

    dataclass      -> fields in declaration order (names)
    named tuple    -> fields in order (names)
    tuple / list   -> elements in order (0-based indices)
    rebuildable    -> whatever __param_children__() returns
    plain object   -> instance __dict__ (only with config.recurse_objects)

A value matching ``config.select`` is a leaf and is reported. A value of an
excluded kind is an opaque leaf and is skipped. Any other non-composite value
is skipped silently. Because the order depends only on the structure of the
graph, two walks over structurally identical graphs report the same leaves in
the same order, which is what makes positional replacement possible.

Rebuild protocol:
    Any class can take part in the walk by defining

        def __param_children__(self) -> Sequence[Tuple[name, value]]
        def __param_rebuild__(self, values) -> same type

    where ``values`` holds the (possibly replaced) children in the same order.
"""
from dataclasses import dataclass, fields as dataclass_fields, is_dataclass
import copy
import logging
from types import FunctionType, ModuleType
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple, Union

from paramstate.config import TraversalConfig, resolve_config
from paramstate.errors import ArityError
from paramstate.param import AbstractParam, PRIMARY_FIELD

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParamSite:
    """Where a discovered parameter lives in the object graph.

    component: class of the enclosing container (or its ``__param_component__``)
    fieldname: field name, or 0-based position inside a tuple/list
    path: dotted path from the root, e.g. ``'inner.j'`` or ``'pair.1'``
    """
    component: Any
    fieldname: Union[str, int, None]
    path: str


def component_of(container: Any) -> Any:
    """Identity reported in the ``component`` column for ``container``'s fields.

    Classes may override it with a ``__param_component__`` class attribute.
    """
    obj_type = type(container)
    return getattr(obj_type, '__param_component__', obj_type)


# ==================== CHILD ACCESS ====================

def _is_namedtuple(obj: Any) -> bool:
    return isinstance(obj, tuple) and hasattr(type(obj), '_fields')


def _is_plain_object(obj: Any) -> bool:
    return (
        hasattr(obj, '__dict__')
        and not isinstance(obj, (type, FunctionType, ModuleType))
        and not callable(obj)
    )


def children(obj: Any, config: Optional[TraversalConfig] = None) -> Optional[List[Tuple[Any, Any]]]:
    """Return ``(name, value)`` pairs of a composite, or None for a leaf."""
    config = resolve_config(config)
    obj_type = type(obj)

    if hasattr(obj_type, '__param_children__'):
        return list(obj.__param_children__())

    if is_dataclass(obj) and not isinstance(obj, type):
        # object.__getattribute__ skips any custom attribute resolution
        return [(f.name, object.__getattribute__(obj, f.name)) for f in dataclass_fields(obj)]

    if _is_namedtuple(obj):
        return list(zip(obj._fields, obj))

    if isinstance(obj, (tuple, list)):
        return list(enumerate(obj))

    if config.recurse_objects and _is_plain_object(obj):
        return list(vars(obj).items())

    return None


def rebuild(obj: Any, values: Sequence[Any], config: Optional[TraversalConfig] = None) -> Any:
    """Build a new object of ``obj``'s type from replacement child values.

    ``values`` must be in the order ``children(obj)`` reports them.
    """
    config = resolve_config(config)
    obj_type = type(obj)

    if hasattr(obj_type, '__param_rebuild__'):
        return obj.__param_rebuild__(list(values))

    if is_dataclass(obj) and not isinstance(obj, type):
        init_values = {}
        late_values = {}
        for f, value in zip(dataclass_fields(obj), values):
            if f.init:
                init_values[f.name] = value
            else:
                late_values[f.name] = value
        # Same approach as replace_raw(): call the constructor with every init field
        new_obj = obj_type(**init_values)
        for name, value in late_values.items():
            object.__setattr__(new_obj, name, value)
        return new_obj

    if _is_namedtuple(obj):
        return obj_type._make(values)

    if isinstance(obj, tuple):
        return tuple(values) if obj_type is tuple else obj_type(values)

    if isinstance(obj, list):
        return obj_type(values)

    if config.recurse_objects and _is_plain_object(obj):
        # Non-dataclass instance: shallow copy + set attributes
        new_obj = copy.copy(obj)
        for name, value in zip(list(vars(obj)), values):
            object.__setattr__(new_obj, name, value)
        return new_obj

    raise TypeError(f"Cannot rebuild object of type {obj_type.__name__}")


# ==================== DISCOVERY ====================

def _collect(value: Any, config: TraversalConfig, found: List[Tuple[ParamSite, Any]],
             parent: Any, name: Any, path: str) -> None:
    if config.select(value):
        component = component_of(parent) if parent is not None else None
        found.append((ParamSite(component, name, path), value))
        return
    if config.is_excluded(value):
        return
    kids = children(value, config)
    if kids is None:
        return
    for child_name, child in kids:
        child_path = f'{path}.{child_name}' if path else str(child_name)
        _collect(child, config, found, value, child_name, child_path)


def discover_sites(root: Any, config: Optional[TraversalConfig] = None) -> List[Tuple[ParamSite, Any]]:
    """Return ``(site, param)`` for every parameter in ``root``, in walk order."""
    config = resolve_config(config)
    found: List[Tuple[ParamSite, Any]] = []
    _collect(root, config, found, None, None, '')
    logger.debug(f"Discovered {len(found)} parameter(s) in {type(root).__name__}")
    return found


def discover(root: Any, config: Optional[TraversalConfig] = None) -> List[Any]:
    """Return every parameter in ``root``, in walk order."""
    return [param for _, param in discover_sites(root, config)]


def params(root: Any, config: Optional[TraversalConfig] = None) -> Tuple[Any, ...]:
    """Tuple of all parameters in ``root``."""
    return tuple(discover(root, config))


def has_params(root: Any, config: Optional[TraversalConfig] = None) -> bool:
    """True if ``root`` holds at least one parameter."""
    return len(discover_sites(root, config)) > 0


# ==================== RECONSTRUCTION ====================

def _replace(value: Any, config: TraversalConfig, replacements: Iterator[Any]) -> Any:
    if config.select(value):
        return next(replacements)
    if config.is_excluded(value):
        return value
    kids = children(value, config)
    if kids is None:
        return value
    new_values = [_replace(child, config, replacements) for _, child in kids]
    if all(new is old for new, (_, old) in zip(new_values, kids)):
        # Nothing below changed: keep the original subtree
        return value
    return rebuild(value, new_values, config)


def reconstruct(root: Any, replacements: Sequence[Any], config: Optional[TraversalConfig] = None) -> Any:
    """Return a copy of ``root`` with the i-th parameter replaced by ``replacements[i]``.

    Replacements may be parameters or plain values. Every other field and
    every excluded subtree is kept as is; ``root`` itself is never modified.

    Raises:
        ArityError: ``len(replacements)`` differs from the number of parameters.
    """
    config = resolve_config(config)
    replacements = list(replacements)
    expected = len(discover_sites(root, config))
    if len(replacements) != expected:
        raise ArityError(expected, len(replacements), 'replacements')
    if not replacements:
        return root
    remaining = iter(replacements)
    new_root = _replace(root, config, remaining)
    logger.debug(f"Reconstructed {type(root).__name__} with {expected} replacement(s)")
    return new_root


def modify(fn: Callable[[Any], Any], root: Any, config: Optional[TraversalConfig] = None) -> Any:
    """Rebuild ``root`` with every parameter ``p`` replaced by ``fn(p)``."""
    return reconstruct(root, [fn(p) for p in discover(root, config)], config)


def update_params(root: Any, values: Sequence[Any], config: Optional[TraversalConfig] = None) -> Any:
    """Rebuild ``root`` with new primary values, keeping all other metadata."""
    found = discover(root, config)
    values = list(values)
    if len(values) != len(found):
        raise ArityError(len(found), len(values))
    return reconstruct(root, [p.replace(**{PRIMARY_FIELD: v}) for p, v in zip(found, values)], config)


def _plain_value(param: Any, config: TraversalConfig) -> Any:
    if isinstance(param, AbstractParam):
        return param.with_units(hook=config.units)
    return param


def strip_params(root: Any, config: Optional[TraversalConfig] = None) -> Any:
    """Replace every parameter with its value (units applied)."""
    config = resolve_config(config)
    return modify(lambda p: _plain_value(p, config), root, config)


def param_values(root: Any, config: Optional[TraversalConfig] = None) -> Tuple[Any, ...]:
    """Values of every parameter in ``root`` with units applied."""
    config = resolve_config(config)
    return tuple(_plain_value(p, config) for p in discover(root, config))
