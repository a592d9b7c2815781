"""
Error taxonomy for paramstate.

Structural errors are fatal to the operation that raised them and propagate
unchanged. The only soft failure is NoParameterWarning, issued when a model
is built over an object graph without any parameters.
"""


class ParamStateError(Exception):
    """Base class for all paramstate errors."""


class SchemaError(ParamStateError, ValueError):
    """Malformed parameter metadata, e.g. a missing or misplaced ``val`` field."""


class ValueTypeError(SchemaError, TypeError):
    """The primary value does not match the type a parameter variant requires."""


class ArityError(ParamStateError, ValueError):
    """Replacement or value sequence length does not match the selected rows."""

    def __init__(self, expected: int, got: int, what: str = "values"):
        self.expected = expected
        self.got = got
        super().__init__(f"Expected {expected} {what}, got {got}")


class ReservedColumnError(ParamStateError, ValueError):
    """Attempted write to a synthesized read-only column."""

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"Cannot set the '{column}' column, it is synthesized from the object graph")


class ColumnError(ParamStateError, IndexError):
    """Unknown column name."""

    def __init__(self, column: str, available=()):
        self.column = column
        self.available = tuple(available)
        super().__init__(f"No column '{column}', available columns: {self.available}")


class GroupKeyError(ParamStateError, TypeError):
    """Values of a grouping column cannot serve as distinct mapping keys.

    Raised for unhashable values (e.g. list tags) and for values of different
    types that compare equal (e.g. ``1`` and ``True``), which one mapping
    cannot keep apart.
    """

    def __init__(self, column: str, value, reason: str):
        self.column = column
        self.value = value
        super().__init__(f"Cannot group by column '{column}': value {value!r} {reason}")


class NoParameterWarning(UserWarning):
    """The wrapped object graph holds no parameters; the model has zero rows."""
