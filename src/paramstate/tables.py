"""
Tabular adapter for models.

Exports a model's columns as plain rows, a column-type schema, a pandas
DataFrame or a text grid, and reads columns back from external tables for
``Model.update``. Accepted table sources:

- anything with ``column_names()`` and ``get_column(name)`` (models included)
- a pandas DataFrame
- a mapping of column name to sequence of values
- a sequence of row mappings (missing keys read as ABSENT)

Persistence is left to pandas, e.g. ``to_dataframe(model).to_csv(path)``.
"""
from collections.abc import Mapping, Sequence
import logging
from typing import Any, Dict, List, TextIO, Tuple

from tabulate import tabulate

from paramstate.errors import ArityError
from paramstate.param import ABSENT
from paramstate.schema import ordered_union

logger = logging.getLogger(__name__)

TABLE_FORMAT = 'simple_grid'


def column_names(model: Any) -> Tuple[str, ...]:
    return tuple(model.column_names())


def to_columns(model: Any) -> Dict[str, List[Any]]:
    """Column name -> list of values, in column order."""
    return {name: list(model.get_column(name)) for name in column_names(model)}


def column_types(model: Any) -> Dict[str, Tuple[type, ...]]:
    """Distinct runtime types observed in each column, in first-seen order.

    Columns can be heterogeneous, e.g. ``bounds`` holding tuples and ABSENT.
    """
    schema = {}
    for name, values in to_columns(model).items():
        schema[name] = tuple(dict.fromkeys(type(v) for v in values))
    return schema


def to_rows(model: Any) -> List[Dict[str, Any]]:
    """One dict per parameter, keyed by column name."""
    columns = to_columns(model)
    names = list(columns)
    return [dict(zip(names, values)) for values in zip(*columns.values())]


def to_dataframe(model: Any):
    """Export the model's columns as a pandas DataFrame."""
    import pandas as pd
    columns = to_columns(model)
    return pd.DataFrame(columns, columns=list(columns))


def _is_dataframe(source: Any) -> bool:
    import pandas as pd
    return isinstance(source, pd.DataFrame)


def read_columns(source: Any) -> Dict[str, List[Any]]:
    """Read an external table into an ordered dict of equally long columns.

    Raises:
        TypeError: ``source`` is not a supported table.
        ArityError: columns differ in length.
    """
    if hasattr(source, 'column_names') and hasattr(source, 'get_column'):
        columns = {name: list(source.get_column(name)) for name in source.column_names()}
    elif _is_dataframe(source):
        columns = {name: source[name].tolist() for name in source.columns}
    elif isinstance(source, Mapping):
        columns = {name: list(values) for name, values in source.items()}
    elif isinstance(source, Sequence) and not isinstance(source, (str, bytes)) \
            and all(isinstance(row, Mapping) for row in source):
        names = ordered_union(row.keys() for row in source)
        columns = {name: [row.get(name, ABSENT) for row in source] for name in names}
    else:
        raise TypeError(f"Cannot read columns from {type(source).__name__}")

    lengths = [len(values) for values in columns.values()]
    if lengths and any(n != lengths[0] for n in lengths):
        bad = next(n for n in lengths if n != lengths[0])
        raise ArityError(lengths[0], bad, 'rows per column')
    logger.debug(f"Read {len(columns)} column(s) from {type(source).__name__}")
    return columns


def _display(value: Any) -> Any:
    if isinstance(value, type):
        return value.__name__
    if value is ABSENT:
        return ''
    if isinstance(value, (tuple, list)):
        return str(value)
    return value


def format_table(model: Any) -> str:
    """Render the model's columns as a text grid."""
    columns = to_columns(model)
    rows = [[_display(v) for v in values] for values in zip(*columns.values())]
    return tabulate(rows, headers=list(columns), tablefmt=TABLE_FORMAT)


def print_params(obj: Any, file: TextIO = None) -> None:
    """Print the parameter table of a model or any object graph."""
    from paramstate.model import AbstractModel, StaticModel
    model = obj if isinstance(obj, AbstractModel) else StaticModel(obj)
    print(format_table(model), file=file)
