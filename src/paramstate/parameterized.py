"""
Declaring parameters on dataclass fields.

Instead of wrapping values in Param by hand, mark fields with ``param_field``
and let ``params_of`` build the parameterized copy:

    @dataclass
    class Growth:
        rate: float = param_field(0.1, description="Intrinsic growth rate", bounds=(0.0, 1.0))
        label: str = "growth"

    Model(params_of(Growth()))   # one row: rate, with description and bounds

The field docstring equivalent is the ``description`` metadata key. Marked
fields holding another dataclass with marked fields are expanded recursively,
passing their extra attributes (e.g. ``group``) down to the nested parameters.
"""
from dataclasses import MISSING, Field, field, fields as dataclass_fields, is_dataclass
import logging
from typing import Any, Tuple

from paramstate.param import AbstractParam, Param
from paramstate.traversal import rebuild

logger = logging.getLogger(__name__)

PARAM_METADATA_KEY = 'paramstate'
DESCRIPTION_KEY = 'description'


def param_field(default: Any = MISSING, *, default_factory: Any = MISSING, description: str = "",
                init: bool = True, repr: bool = True, compare: bool = True, **attrs) -> Field:
    """A dataclass field marked as a parameter.

    Args:
        default: Field default, as for ``dataclasses.field``.
        default_factory: Field default factory, as for ``dataclasses.field``.
        description: Stored in the parameter's ``description`` metadata.
        **attrs: Extra parameter metadata, e.g. ``bounds=(0, 1)``, ``units=...``.
    """
    metadata = {PARAM_METADATA_KEY: {DESCRIPTION_KEY: description, **attrs}}
    return field(default=default, default_factory=default_factory, init=init, repr=repr,
                 compare=compare, metadata=metadata)


def is_param_field(f: Field) -> bool:
    return PARAM_METADATA_KEY in f.metadata


def param_fields(cls_or_obj: Any) -> Tuple[Field, ...]:
    """Fields of a dataclass that are marked with ``param_field``."""
    if not is_dataclass(cls_or_obj):
        return ()
    return tuple(f for f in dataclass_fields(cls_or_obj) if is_param_field(f))


def params_of(obj: Any, param_type: type = Param, **extra) -> Any:
    """Return a copy of ``obj`` with every marked field wrapped as a parameter.

    Args:
        obj: Dataclass instance.
        param_type: Parameter class used for new parameters.
        **extra: Metadata added to every parameter that does not set the key itself.

    Raises:
        TypeError: ``obj`` is not a dataclass instance.
    """
    if not is_dataclass(obj) or isinstance(obj, type):
        raise TypeError(f"params_of() expects a dataclass instance, got {type(obj).__name__}")

    new_values = []
    for f in dataclass_fields(obj):
        value = object.__getattribute__(obj, f.name)
        declared = f.metadata.get(PARAM_METADATA_KEY)
        if declared is None:
            new_values.append(value)
            continue

        if isinstance(value, AbstractParam):
            new_values.append(value)
        elif is_dataclass(value) and not isinstance(value, type) and param_fields(value):
            # Nested parameterized object: pass this field's attributes down
            inherited = {k: v for k, v in declared.items() if k != DESCRIPTION_KEY}
            new_values.append(params_of(value, param_type, **{**extra, **inherited}))
        else:
            metadata = {**extra, **declared}
            # description first, then the rest in declaration order
            ordered = {DESCRIPTION_KEY: metadata.pop(DESCRIPTION_KEY, "")}
            ordered.update(metadata)
            new_values.append(param_type(value, **ordered))

    logger.debug(f"Wrapped {len(param_fields(obj))} field(s) of {type(obj).__name__} as parameters")
    return rebuild(obj, new_values)
