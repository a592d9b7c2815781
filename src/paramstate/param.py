"""
Parameter values: a value wrapped with an ordered metadata record.

A parameter marks a leaf of an object graph as tunable. The metadata record
always starts with the primary field ``val``; any other keys (``bounds``,
``units``, ``label``, ...) describe it. Parameters are immutable: edits go
through ``replace()``, which returns a new parameter of the same class.

Used where a plain number is expected, a parameter behaves as its value with
units applied (see ``with_units``): arithmetic, comparison, hashing and
``float()`` all act on that coerced value, never on the metadata record.

Variants:
    Param      - ParamKind.NUMERIC, any value
    RealParam  - ParamKind.REAL, value must be a real number
"""
from dataclasses import dataclass
from enum import Enum
import logging
import math
import numbers
import operator
from types import MappingProxyType
from typing import Any, Callable, ClassVar, Dict, Iterable, Mapping, Optional, Tuple

from paramstate.errors import SchemaError, ValueTypeError

logger = logging.getLogger(__name__)

PRIMARY_FIELD = 'val'
UNITS_FIELD = 'units'

# Keys with a conventional meaning for consumers such as slider UIs.
# Any other key is allowed and treated as free-form metadata.
PRIVILEGED_KEYS: Tuple[str, ...] = ('val', 'units', 'bounds', 'range', 'label', 'description', 'group')


class _Absent:
    """Singleton marking a metadata key that a parameter does not define."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'ABSENT'

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Absent, ())

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


ABSENT = _Absent()


def is_absent(value: Any) -> bool:
    """True for ABSENT and None, the two ways a metadata slot can be empty."""
    return value is ABSENT or value is None


class ParamKind(Enum):
    NUMERIC = 'numeric'
    REAL = 'real'


@dataclass(frozen=True)
class UnitsHook:
    """Pluggable units arithmetic keyed on a parameter's ``units`` field.

    ``apply(value, units)`` attaches units, ``strip(value, units)`` removes them.
    The defaults multiply and divide, which works for plain scale factors and
    for unit objects from libraries like pint.
    """
    apply: Callable[[Any, Any], Any] = operator.mul
    strip: Callable[[Any, Any], Any] = operator.truediv


DEFAULT_UNITS_HOOK = UnitsHook()


def _elementwise(fn, value: Any, units: Any) -> Any:
    if is_absent(value):
        return value
    if isinstance(value, tuple) and not hasattr(value, '_fields'):
        return tuple(_elementwise(fn, v, units) for v in value)
    if isinstance(value, list):
        return [_elementwise(fn, v, units) for v in value]
    return fn(value, units)


def _coerce(value: Any) -> Any:
    return value.with_units() if isinstance(value, AbstractParam) else value


class AbstractParam:
    """Shared behaviour of all parameter variants.

    Construct with a value and keyword metadata, ``Param(1.0, bounds=(0, 2))``,
    with keywords only, ``Param(val=1.0, bounds=(0, 2))``, or from an existing
    record with ``Param.from_fields(mapping)``. In every case ``val`` must come
    first, otherwise SchemaError is raised.
    """
    __slots__ = ('_fields',)

    kind: ClassVar[ParamKind] = ParamKind.NUMERIC

    # Metadata is positional through __getitem__, but a parameter is a scalar,
    # not a container: block the legacy __getitem__ iteration protocol.
    __iter__ = None

    def __init__(self, *args, **metadata):
        if len(args) > 1:
            raise TypeError(f"{type(self).__name__}() takes at most one positional value, got {len(args)}")
        if args:
            if PRIMARY_FIELD in metadata:
                raise SchemaError(f"'{PRIMARY_FIELD}' given both positionally and as a keyword")
            fields = {PRIMARY_FIELD: args[0]}
            fields.update(metadata)
        else:
            fields = dict(metadata)
        self._init_fields(fields)

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> 'AbstractParam':
        """Build a parameter from an ordered metadata record."""
        obj = cls.__new__(cls)
        obj._init_fields(dict(fields))
        return obj

    def _init_fields(self, fields: Dict[str, Any]) -> None:
        self._validate(fields)
        object.__setattr__(self, '_fields', MappingProxyType(fields))

    @classmethod
    def _validate(cls, fields: Dict[str, Any]) -> None:
        if not fields or next(iter(fields)) != PRIMARY_FIELD:
            raise SchemaError(
                f"First field of {cls.__name__} must be '{PRIMARY_FIELD}', got keys {tuple(fields)}"
            )
        for key in fields:
            if not isinstance(key, str):
                raise SchemaError(f"{cls.__name__} metadata keys must be strings, got {key!r}")

    # ==================== RECORD ACCESS ====================

    def fields(self) -> Mapping[str, Any]:
        """Read-only ordered view of the metadata record."""
        return self._fields

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._fields)

    def values(self) -> Tuple[Any, ...]:
        return tuple(self._fields.values())

    def items(self) -> Tuple[Tuple[str, Any], ...]:
        return tuple(self._fields.items())

    def get(self, key: str, default: Any = None) -> Any:
        """Return metadata field ``key``, or ``default`` if it is not defined."""
        return self._fields.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self._fields

    def __len__(self) -> int:
        """Number of metadata fields, ``val`` included."""
        return len(self._fields)

    def __getitem__(self, key):
        """Positional (``p[0]`` is ``val``) or named access to metadata fields."""
        if isinstance(key, int):
            return tuple(self._fields.values())[key]
        return self._fields[key]

    def __getattr__(self, name: str) -> Any:
        if name == '_fields' or name.startswith('__'):
            raise AttributeError(name)
        try:
            return self._fields[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__} has no field '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable. Use replace({name}=...) instead.")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self):
        return (type(self).from_fields, (dict(self._fields),))

    def replace(self, **changes) -> 'AbstractParam':
        """Return a new parameter with some fields replaced or appended."""
        fields = dict(self._fields)
        fields.update(changes)
        return type(self).from_fields(fields)

    def without(self, *keys: str) -> 'AbstractParam':
        """Return a new parameter with the given (non-primary) keys dropped."""
        if PRIMARY_FIELD in keys:
            raise SchemaError(f"Cannot drop the '{PRIMARY_FIELD}' field")
        return type(self).from_fields({k: v for k, v in self._fields.items() if k not in keys})

    # ==================== UNITS ====================

    def with_units(self, field: str = PRIMARY_FIELD, hook: Optional[UnitsHook] = None) -> Any:
        """Return ``field`` with units attached, if a ``units`` field is set.

        Tuples and lists (e.g. bounds) are converted element-wise. Empty
        slots (ABSENT or None) pass through unchanged.
        """
        value = self._fields.get(field, ABSENT)
        units = self._fields.get(UNITS_FIELD, ABSENT)
        if is_absent(units):
            return value
        return _elementwise((hook or DEFAULT_UNITS_HOOK).apply, value, units)

    def strip_units(self, value: Any, hook: Optional[UnitsHook] = None) -> Any:
        """Inverse of ``with_units``: remove this parameter's units from ``value``."""
        units = self._fields.get(UNITS_FIELD, ABSENT)
        if is_absent(units):
            return value
        return _elementwise((hook or DEFAULT_UNITS_HOOK).strip, value, units)

    # ==================== NUMERIC COERCION ====================

    def __float__(self) -> float:
        return float(self.with_units())

    def __int__(self) -> int:
        return int(self.with_units())

    def __complex__(self) -> complex:
        return complex(self.with_units())

    def __bool__(self) -> bool:
        return bool(self.with_units())

    def __round__(self, ndigits=None):
        return round(self.with_units(), ndigits)

    def __trunc__(self):
        return math.trunc(self.with_units())

    def __floor__(self):
        return math.floor(self.with_units())

    def __ceil__(self):
        return math.ceil(self.with_units())

    def __abs__(self):
        return abs(self.with_units())

    def __neg__(self):
        return -self.with_units()

    def __pos__(self):
        return +self.with_units()

    def __add__(self, other):
        return self.with_units() + _coerce(other)

    def __radd__(self, other):
        return _coerce(other) + self.with_units()

    def __sub__(self, other):
        return self.with_units() - _coerce(other)

    def __rsub__(self, other):
        return _coerce(other) - self.with_units()

    def __mul__(self, other):
        return self.with_units() * _coerce(other)

    def __rmul__(self, other):
        return _coerce(other) * self.with_units()

    def __truediv__(self, other):
        return self.with_units() / _coerce(other)

    def __rtruediv__(self, other):
        return _coerce(other) / self.with_units()

    def __floordiv__(self, other):
        return self.with_units() // _coerce(other)

    def __rfloordiv__(self, other):
        return _coerce(other) // self.with_units()

    def __mod__(self, other):
        return self.with_units() % _coerce(other)

    def __rmod__(self, other):
        return _coerce(other) % self.with_units()

    def __pow__(self, other):
        return self.with_units() ** _coerce(other)

    def __rpow__(self, other):
        return _coerce(other) ** self.with_units()

    def __eq__(self, other):
        return self.with_units() == _coerce(other)

    def __ne__(self, other):
        return self.with_units() != _coerce(other)

    def __lt__(self, other):
        return self.with_units() < _coerce(other)

    def __le__(self, other):
        return self.with_units() <= _coerce(other)

    def __gt__(self, other):
        return self.with_units() > _coerce(other)

    def __ge__(self, other):
        return self.with_units() >= _coerce(other)

    def __hash__(self) -> int:
        return hash(self.with_units())

    def __format__(self, format_spec: str) -> str:
        if format_spec:
            return format(self.with_units(), format_spec)
        return repr(self)

    def __repr__(self) -> str:
        inner = ', '.join(f'{k}={v!r}' for k, v in self._fields.items())
        return f'{type(self).__name__}({inner})'


class Param(AbstractParam):
    """A parameter holding any value."""
    __slots__ = ()
    kind = ParamKind.NUMERIC


class RealParam(AbstractParam):
    """A parameter whose value must be a real number (bools are rejected)."""
    __slots__ = ()
    kind = ParamKind.REAL

    @classmethod
    def _validate(cls, fields: Dict[str, Any]) -> None:
        super()._validate(fields)
        value = fields[PRIMARY_FIELD]
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise ValueTypeError(f"{cls.__name__} value must be a real number, got {type(value).__name__}")


PARAM_KINDS: Dict[ParamKind, type] = {
    ParamKind.NUMERIC: Param,
    ParamKind.REAL: RealParam,
}


def param_class(kind: ParamKind) -> type:
    """Return the parameter class implementing ``kind``."""
    return PARAM_KINDS[kind]


def same_fields(a: AbstractParam, b: AbstractParam) -> bool:
    """Structural comparison: same class and identical ordered metadata."""
    return type(a) is type(b) and tuple(a.items()) == tuple(b.items())


def all_same_fields(xs: Iterable[AbstractParam], ys: Iterable[AbstractParam]) -> bool:
    xs, ys = list(xs), list(ys)
    return len(xs) == len(ys) and all(same_fields(a, b) for a, b in zip(xs, ys))
