"""
Metadata schema normalization.

Parameters discovered in one object graph usually carry different metadata
keys. Normalizing pads every parameter to the ordered union of all keys, so
each key becomes a column with one value per parameter. Missing values are
filled with ABSENT, never with a zero value of the primary field's type.
"""
import logging
from typing import Any, Iterable, List, Sequence, Tuple

from paramstate.param import ABSENT, AbstractParam

logger = logging.getLogger(__name__)


def ordered_union(key_sequences: Iterable[Iterable[str]]) -> Tuple[str, ...]:
    """Union of keys in first-seen order."""
    seen = {}
    for keys in key_sequences:
        for key in keys:
            if key not in seen:
                seen[key] = None
    return tuple(seen)


def all_keys(params: Iterable[AbstractParam]) -> Tuple[str, ...]:
    """Ordered union of the metadata keys of ``params``."""
    return ordered_union(p.keys() for p in params)


def is_normalized(params: Sequence[AbstractParam]) -> bool:
    """True if every parameter has exactly the same ordered keys."""
    if not params:
        return True
    first = params[0].keys()
    return all(p.keys() == first for p in params)


def pad(param: AbstractParam, keys: Sequence[str]) -> AbstractParam:
    """Rebuild ``param`` over exactly ``keys``, filling missing ones with ABSENT."""
    if param.keys() == tuple(keys):
        return param
    return type(param).from_fields({key: param.get(key, ABSENT) for key in keys})


def normalize(params: Iterable[AbstractParam], base: Sequence[str] = ()) -> List[AbstractParam]:
    """Pad every parameter to the common schema.

    Since every parameter starts with ``val``, the union starts with ``val``
    too, and the padded records stay valid. Keys outside the union never
    appear, so applying normalize twice gives the same schema.

    Args:
        params: Parameters to pad.
        base: Existing schema; its keys come first, in their order, and are
              kept even if no parameter defines them any more.
    """
    params = list(params)
    keys = ordered_union([base, *(p.keys() for p in params)])
    normalized = [pad(p, keys) for p in params]
    logger.debug(f"Normalized {len(normalized)} parameter(s) to keys {keys}")
    return normalized


def add_key(params: Iterable[AbstractParam], key: str, values: Sequence[Any]) -> List[AbstractParam]:
    """Append (or overwrite) ``key`` on each parameter with the matching value."""
    return [p.replace(**{key: value}) for p, value in zip(params, values)]
