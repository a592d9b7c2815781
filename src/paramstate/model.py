"""
Model: a flat, tabular handle over the parameters of an object graph.

Rows are the discovered parameters, in walk order. Columns are the two
synthesized columns ``component`` and ``fieldname`` followed by every key of
the normalized metadata schema (``val`` first).

    m = Model(obj)
    m['val']                 # column as a tuple
    m[0]                     # first parameter
    m[0, 'bounds']           # single cell
    m['val'] = [v * 2 for v in m['val']]
    m.update(dataframe)      # ingest any table with matching rows
    plain = m.strip_params() # object graph with values instead of parameters

Writes never touch the object graph in place: each one rebuilds a new graph
and swaps the model's reference to it. Results of earlier reads stay valid.

Lifecycle:
- Construction discovers and normalizes the parameters (a model over a graph
  without parameters is allowed, with a NoParameterWarning).
- Model writes replace the parent wholesale; StaticModel returns new models.
"""
import logging
import numbers
from typing import Any, Callable, Iterator, List, Mapping, Optional, Sequence, Tuple
import warnings

from paramstate.config import TraversalConfig, resolve_config
from paramstate.errors import ArityError, ColumnError, NoParameterWarning, ReservedColumnError, SchemaError
from paramstate.param import ABSENT, AbstractParam, PRIMARY_FIELD
from paramstate.schema import normalize
from paramstate.traversal import ParamSite, discover_sites, reconstruct, strip_params
from paramstate import grouping, tables

logger = logging.getLogger(__name__)

COMPONENT_COLUMN = 'component'
FIELDNAME_COLUMN = 'fieldname'
RESERVED_COLUMNS: Tuple[str, ...] = (COMPONENT_COLUMN, FIELDNAME_COLUMN)

RowSelection = Any  # None, int, slice, or iterable of row indices
State = Tuple[Any, Tuple[AbstractParam, ...]]


def _apply_result(param: AbstractParam, result: Any) -> AbstractParam:
    """Merge what an update function returned into ``param``."""
    if isinstance(result, AbstractParam):
        return result
    if isinstance(result, Mapping):
        return param.replace(**result)
    return param.replace(**{PRIMARY_FIELD: result})


class AbstractModel:
    """Read-only tabular view over the parameters of ``parent``.

    Args:
        parent: Object graph to wrap, or another model (its parent is reused).
        config: Traversal rules; defaults to DEFAULT_CONFIG, or to the
                wrapped model's config when ``parent`` is a model.
    """

    def __init__(self, parent: Any, config: Optional[TraversalConfig] = None):
        if isinstance(parent, AbstractModel):
            config = config if config is not None else parent.config
            parent = parent.parent
        self._config = resolve_config(config)

        found = discover_sites(parent, self._config)
        for site, param in found:
            if not isinstance(param, AbstractParam):
                raise SchemaError(f"Selected value at '{site.path}' is not a parameter: {param!r}")
        if not found:
            logger.warning(f"{type(self).__name__} over {type(parent).__name__} has no parameters")
            warnings.warn(
                f"{type(parent).__name__} object has no parameters, the model has zero rows",
                NoParameterWarning,
                stacklevel=2,
            )

        # Make sure all params have the same keys
        normalized = tuple(normalize(param for _, param in found))
        self._parent = reconstruct(parent, normalized, self._config)
        self._sites: Tuple[ParamSite, ...] = tuple(site for site, _ in found)
        self._params: Tuple[AbstractParam, ...] = normalized
        logger.debug(f"Created {type(self).__name__}: parent={type(parent).__name__}, rows={len(normalized)}")

    @classmethod
    def _from_state(cls, parent: Any, sites: Tuple[ParamSite, ...], params: Tuple[AbstractParam, ...],
                    config: TraversalConfig) -> 'AbstractModel':
        """Build a model from already discovered and normalized state."""
        obj = cls.__new__(cls)
        obj._config = config
        obj._parent = parent
        obj._sites = sites
        obj._params = params
        return obj

    # ==================== STRUCTURE ====================

    @property
    def parent(self) -> Any:
        """The wrapped object graph."""
        return self._parent

    @property
    def config(self) -> TraversalConfig:
        return self._config

    def params(self) -> Tuple[AbstractParam, ...]:
        return self._params

    def sites(self) -> Tuple[ParamSite, ...]:
        return self._sites

    def paths(self) -> Tuple[str, ...]:
        """Dotted path of each parameter from the root."""
        return tuple(site.path for site in self._sites)

    def metadata_keys(self) -> Tuple[str, ...]:
        """Keys of the normalized metadata schema."""
        return self._params[0].keys() if self._params else ()

    def keys(self) -> Tuple[str, ...]:
        """All column names: the synthesized columns, then the metadata keys."""
        return RESERVED_COLUMNS + self.metadata_keys()

    def has_column(self, name: str) -> bool:
        return name in RESERVED_COLUMNS or name in self.metadata_keys()

    def __contains__(self, name: str) -> bool:
        return self.has_column(name)

    def __len__(self) -> int:
        return len(self._params)

    def __iter__(self) -> Iterator[AbstractParam]:
        return iter(self._params)

    # ==================== READS ====================

    def _check_column(self, name: str) -> None:
        if not self.has_column(name):
            raise ColumnError(name, self.keys())

    def _row_index(self, index: int) -> int:
        if isinstance(index, bool) or not isinstance(index, numbers.Integral):
            raise TypeError(f"Row index must be an int, got {type(index).__name__}")
        n = len(self._params)
        if not -n <= index < n:
            raise IndexError(f"Row {index} out of range for model with {n} rows")
        return int(index) % n

    def column(self, name: str) -> Tuple[Any, ...]:
        """All values of column ``name``, one per row."""
        if name == COMPONENT_COLUMN:
            return tuple(site.component for site in self._sites)
        if name == FIELDNAME_COLUMN:
            return tuple(site.fieldname for site in self._sites)
        self._check_column(name)
        return tuple(param[name] for param in self._params)

    def row(self, index: int) -> AbstractParam:
        return self._params[self._row_index(index)]

    def cell(self, index: int, name: str) -> Any:
        index = self._row_index(index)
        if name == COMPONENT_COLUMN:
            return self._sites[index].component
        if name == FIELDNAME_COLUMN:
            return self._sites[index].fieldname
        self._check_column(name)
        return self._params[index][name]

    def __getitem__(self, key):
        if isinstance(key, str):
            return self.column(key)
        if isinstance(key, slice):
            return self._params[key]
        if isinstance(key, tuple) and len(key) == 2:
            return self.cell(*key)
        return self.row(key)

    def column_names(self) -> Tuple[str, ...]:
        return self.keys()

    def get_column(self, name: str) -> Tuple[Any, ...]:
        return self.column(name)

    def with_units(self, column: str = PRIMARY_FIELD) -> Tuple[Any, ...]:
        """Column values with each row's units applied."""
        self._check_column(column)
        return tuple(p.with_units(column, hook=self._config.units) for p in self._params)

    def strip_units(self, values: Sequence[Any]) -> Tuple[Any, ...]:
        """Remove each row's units from the matching value in ``values``."""
        values = list(values)
        if len(values) != len(self._params):
            raise ArityError(len(self._params), len(values))
        return tuple(p.strip_units(v, hook=self._config.units) for p, v in zip(self._params, values))

    def strip_params(self) -> Any:
        """The parent object graph with every parameter replaced by its value."""
        return strip_params(self._parent, self._config)

    def rows_where(self, where: Callable[[Any, Any, AbstractParam], bool]) -> List[int]:
        """Indices of rows for which ``where(component, fieldname, param)`` holds."""
        return [
            i for i, (site, param) in enumerate(zip(self._sites, self._params))
            if where(site.component, site.fieldname, param)
        ]

    def group(self, *columns: str):
        """Nested read-only mapping of parameters bucketed by ``columns``."""
        return grouping.group_params(self, *columns)

    def schema(self):
        return tables.column_types(self)

    def to_rows(self) -> List[dict]:
        return tables.to_rows(self)

    def to_dataframe(self):
        return tables.to_dataframe(self)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__} with parent object of type: \n\n"
            f"{type(self._parent).__name__}\n\n"
            f"And parameters:\n{tables.format_table(self)}"
        )

    # ==================== EDITS (pure) ====================

    def _select_rows(self, rows: RowSelection) -> List[int]:
        n = len(self._params)
        if rows is None:
            return list(range(n))
        if isinstance(rows, slice):
            return list(range(n))[rows]
        if isinstance(rows, numbers.Integral) and not isinstance(rows, bool):
            return [self._row_index(rows)]
        return [self._row_index(i) for i in rows]

    def _set_column(self, state: State, column: str, values: Sequence[Any], rows: RowSelection) -> State:
        if column in RESERVED_COLUMNS:
            raise ReservedColumnError(column)
        parent, current = state
        selected = self._select_rows(rows)
        values = list(values)
        if len(values) != len(selected):
            raise ArityError(len(selected), len(values))

        new_params = list(current)
        is_new_column = bool(new_params) and column not in new_params[0]
        if is_new_column:
            logger.info(f"Adding column '{column}' to {len(new_params)} parameter(s)")
            unselected = set(range(len(new_params))) - set(selected)
            for i in unselected:
                new_params[i] = new_params[i].replace(**{column: ABSENT})
        for i, value in zip(selected, values):
            new_params[i] = new_params[i].replace(**{column: value})
        if is_new_column:
            new_params = normalize(new_params, base=current[0].keys())
        elif not new_params:
            # No row can hold the column, so the schema stays empty
            logger.debug(f"Column '{column}' not added: model has no rows")

        return self._rebuilt(parent, new_params)

    def _update_table(self, state: State, table: Any, rows: RowSelection) -> State:
        columns = tables.read_columns(table)
        for name, values in columns.items():
            if name in RESERVED_COLUMNS:
                continue
            state = self._set_column(state, name, values, rows)
        logger.info(f"Updated {len(columns)} column(s) from {type(table).__name__}")
        return state

    def _update_values(self, state: State, values: Any,
                       where: Optional[Callable[[Any, Any, AbstractParam], bool]]) -> State:
        parent, current = state
        selected = list(range(len(current))) if where is None else self.rows_where(where)
        new_params = list(current)
        if callable(values):
            for i in selected:
                new_params[i] = _apply_result(new_params[i], values(new_params[i]))
            # Existing columns keep their order; new keys are appended
            new_params = normalize(new_params, base=current[0].keys() if current else ())
        else:
            values = list(values)
            if len(values) != len(selected):
                raise ArityError(len(selected), len(values))
            for i, value in zip(selected, values):
                new_params[i] = new_params[i].replace(**{PRIMARY_FIELD: value})
        return self._rebuilt(parent, new_params)

    def _rebuilt(self, parent: Any, new_params: Sequence[AbstractParam]) -> State:
        """Rebuild ``parent`` around ``new_params``.

        Every row must still match the model's selector, otherwise the next
        discovery pass would see fewer rows than the model holds.

        Raises:
            SchemaError: an edited parameter is no longer selected.
        """
        rejected = [i for i, param in enumerate(new_params) if not self._config.select(param)]
        if rejected:
            raise SchemaError(
                f"Edited row(s) {rejected} would no longer be selected as parameters, write rejected"
            )
        return reconstruct(parent, new_params, self._config), tuple(new_params)


class Model(AbstractModel):
    """Mutable handle: edits rebuild the object graph and replace ``parent``.

    Each write either completes or raises with the parent left untouched.
    """

    def _commit(self, state: State) -> 'Model':
        self._parent, self._params = state
        return self

    def set(self, column: str, values: Sequence[Any], rows: RowSelection = None) -> 'Model':
        """Write ``values`` into ``column`` for the selected rows (all by default).

        A column missing from the schema is added to every row; rows outside
        the selection get ABSENT. Columns live on the parameters, so on a
        model with zero rows ``set(column, [])`` is a no-op and ``keys()``
        does not grow.

        Raises:
            ReservedColumnError: ``column`` is ``component`` or ``fieldname``.
            ArityError: ``len(values)`` differs from the number of selected rows.
            IndexError: a row index is out of range.
            SchemaError: an edited row no longer matches ``config.select``.
        """
        state = self._set_column((self._parent, self._params), column, values, rows)
        logger.debug(f"Set column '{column}' (rows={'all' if rows is None else rows})")
        return self._commit(state)

    def __setitem__(self, key, values) -> None:
        if isinstance(key, tuple) and len(key) == 2:
            index, column = key
            self.set(column, [values], rows=[index])
        else:
            self.set(key, values)

    def update(self, table: Any, rows: RowSelection = None) -> 'Model':
        """Ingest every column of ``table`` except the synthesized ones, row-aligned by position."""
        return self._commit(self._update_table((self._parent, self._params), table, rows))

    def update_values(self, values: Any, where: Optional[Callable[[Any, Any, AbstractParam], bool]] = None) -> 'Model':
        """Replace primary values of the selected rows.

        Args:
            values: Sequence of new values, one per selected row, or a function
                    of the parameter returning a new value, a mapping of fields
                    to merge (e.g. ``{'val': 2.0, 'bounds': (1.0, 3.0)}``), or a
                    whole parameter.
            where: ``where(component, fieldname, param)`` selecting rows; all
                   rows when None.
        """
        return self._commit(self._update_values((self._parent, self._params), values, where))


class StaticModel(AbstractModel):
    """Immutable model: edits return a new StaticModel and leave this one as is."""

    def _evolve(self, state: State) -> 'StaticModel':
        parent, params = state
        return type(self)._from_state(parent, self._sites, params, self._config)

    def with_column(self, column: str, values: Sequence[Any], rows: RowSelection = None) -> 'StaticModel':
        return self._evolve(self._set_column((self._parent, self._params), column, values, rows))

    def with_table(self, table: Any, rows: RowSelection = None) -> 'StaticModel':
        return self._evolve(self._update_table((self._parent, self._params), table, rows))

    def updated(self, values: Any, where: Optional[Callable[[Any, Any, AbstractParam], bool]] = None) -> 'StaticModel':
        return self._evolve(self._update_values((self._parent, self._params), values, where))
