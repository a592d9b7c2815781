"""
Grouped views of a model's parameters.

``group_params(model, 'group', 'fieldname')`` re-nests the flat parameter
table into read-only mappings keyed by the successive values of the given
columns. Leaves are tuples of parameters in their original row order; the
parameters are shared with the model, never copied or modified.

``map_over_leaves`` pushes a per-parameter function (e.g. "take the value")
through such a nested view without flattening it.
"""
from collections.abc import Mapping
import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Sequence, Tuple

from paramstate.errors import GroupKeyError
from paramstate.param import AbstractParam

logger = logging.getLogger(__name__)

DEFAULT_RECURSE_KINDS: Tuple[type, ...] = (Mapping, tuple, list)


def _as_model(obj: Any):
    from paramstate.model import AbstractModel, StaticModel
    if isinstance(obj, AbstractModel):
        return obj
    return StaticModel(obj)


def _typed_key(column: str, value: Any) -> Tuple[type, Any]:
    try:
        hash(value)
    except TypeError:
        raise GroupKeyError(column, value, "is not hashable") from None
    return type(value), value


def _bucket(indices: List[int], params: Sequence[AbstractParam],
            key_columns: List[Tuple[str, Sequence[Any]]]):
    if not key_columns:
        return tuple(params[i] for i in indices)
    (column, keys), rest = key_columns[0], key_columns[1:]
    buckets: Dict[Tuple[type, Any], List[int]] = {}
    for i in indices:
        buckets.setdefault(_typed_key(column, keys[i]), []).append(i)

    grouped: Dict[Any, Any] = {}
    for (_, key), members in buckets.items():
        if key in grouped:
            raise GroupKeyError(column, key, "equals a value of another type in the same column")
        grouped[key] = _bucket(members, params, rest)
    return MappingProxyType(grouped)


def group_params(model: Any, *columns: str):
    """Bucket parameters by the values of ``columns``, outermost first.

    Args:
        model: A model, or any object graph (wrapped in a StaticModel).
        *columns: Column names, including ``component`` and ``fieldname``.

    Returns:
        Nested MappingProxyType keyed in first-seen order, with tuples of
        parameters at the leaves; the plain tuple of parameters when no
        columns are given.

    Raises:
        ColumnError: a column is not part of the model.
        GroupKeyError: a column holds unhashable values, or equal values
                       of different types such as ``1`` and ``True``.
    """
    model = _as_model(model)
    params = model.params()
    # column() raises ColumnError for unknown names
    key_columns = [(name, model.column(name)) for name in columns]
    grouped = _bucket(list(range(len(params))), params, key_columns)
    logger.debug(f"Grouped {len(params)} parameter(s) by {columns}")
    return grouped


def _rebuild_container(container: Any, items):
    if isinstance(container, MappingProxyType):
        return MappingProxyType(dict(items))
    if isinstance(container, Mapping):
        try:
            return type(container)(items)
        except TypeError:
            return dict(items)
    if isinstance(container, tuple) and hasattr(type(container), '_fields'):
        return type(container)._make(items)
    if type(container) is tuple:
        return tuple(items)
    return type(container)(items)


def map_over_leaves(fn: Callable[[Any], Any], nested: Any,
                    recurse_kinds: Tuple[type, ...] = DEFAULT_RECURSE_KINDS) -> Any:
    """Apply ``fn`` to every leaf of ``nested``, keeping its shape.

    Values that are instances of ``recurse_kinds`` are walked into; anything
    else, and any parameter, is a leaf. Passing ``recurse_kinds=(Mapping,)``
    maps ``fn`` over whole buckets of a grouped view instead of single
    parameters.
    """
    if isinstance(nested, AbstractParam) or not isinstance(nested, recurse_kinds):
        return fn(nested)
    if isinstance(nested, Mapping):
        items = [(key, map_over_leaves(fn, value, recurse_kinds)) for key, value in nested.items()]
    else:
        items = [map_over_leaves(fn, value, recurse_kinds) for value in nested]
    return _rebuild_container(nested, items)
