"""
Flat, editable parameter tables over nested immutable object graphs.

This package finds every parameter (a value wrapped with metadata) in an
arbitrary object graph, exposes them as one order-stable table, and rebuilds
an equivalent object graph after the table is edited. No per-model
conversion code is needed.

Key Features:
- Param / RealParam: immutable values with ordered metadata (val first)
- Discovery and reconstruction over dataclasses, tuples, lists, named tuples
  and any class implementing the rebuild protocol
- Metadata normalization: every parameter gets the same columns
- Model: row/column/cell reads, column writes, table ingestion
- Grouped views by metadata columns
- pandas and text-table export

Quick Start:
    >>> from dataclasses import dataclass
    >>> from paramstate import Model, Param
    >>>
    >>> @dataclass(frozen=True)
    ... class Growth:
    ...     rate: float
    ...     capacity: float
    >>>
    >>> m = Model(Growth(Param(0.1, bounds=(0.0, 1.0)), Param(100.0)))
    >>> m['val']
    (0.1, 100.0)
    >>> m['val'] = [0.2, 150.0]
    >>> m.parent.rate
    Param(val=0.2, bounds=(0.0, 1.0))
    >>> m.strip_params()
    Growth(rate=0.2, capacity=150.0)

Architecture:
    Discovery:  object graph -> flat parameter list -> normalized table
    Mutation:   table edit -> flat parameter list -> rebuilt object graph

Modules:
    - param: Param entity, ABSENT sentinel, units hook
    - config: TraversalConfig (selection / exclusion rules)
    - traversal: discover / reconstruct and functional helpers
    - schema: metadata normalization
    - model: Model and StaticModel tabular handles
    - grouping: grouped views and map_over_leaves
    - tables: row/column/DataFrame/text adapters
    - parameterized: param_field / params_of for dataclass declarations
    - errors: error and warning types
"""

# Parameters
from paramstate.param import (
    ABSENT,
    PRIMARY_FIELD,
    PRIVILEGED_KEYS,
    AbstractParam,
    Param,
    RealParam,
    ParamKind,
    UnitsHook,
    is_absent,
    param_class,
    same_fields,
)

# Configuration
from paramstate.config import (
    TraversalConfig,
    DEFAULT_CONFIG,
    is_param,
)

# Traversal
from paramstate.traversal import (
    ParamSite,
    discover,
    discover_sites,
    reconstruct,
    modify,
    params,
    has_params,
    update_params,
    strip_params,
    param_values,
    component_of,
)

# Schema
from paramstate.schema import normalize, ordered_union, is_normalized

# Models
from paramstate.model import (
    AbstractModel,
    Model,
    StaticModel,
    RESERVED_COLUMNS,
)

# Grouping
from paramstate.grouping import group_params, map_over_leaves

# Tables
from paramstate.tables import (
    column_types,
    to_rows,
    to_dataframe,
    read_columns,
    format_table,
    print_params,
)

# Declarations
from paramstate.parameterized import param_field, params_of, param_fields

# Errors
from paramstate.errors import (
    ParamStateError,
    SchemaError,
    ValueTypeError,
    ArityError,
    ReservedColumnError,
    ColumnError,
    GroupKeyError,
    NoParameterWarning,
)

__all__ = [
    # Parameters
    'ABSENT',
    'PRIMARY_FIELD',
    'PRIVILEGED_KEYS',
    'AbstractParam',
    'Param',
    'RealParam',
    'ParamKind',
    'UnitsHook',
    'is_absent',
    'param_class',
    'same_fields',
    # Configuration
    'TraversalConfig',
    'DEFAULT_CONFIG',
    'is_param',
    # Traversal
    'ParamSite',
    'discover',
    'discover_sites',
    'reconstruct',
    'modify',
    'params',
    'has_params',
    'update_params',
    'strip_params',
    'param_values',
    'component_of',
    # Schema
    'normalize',
    'ordered_union',
    'is_normalized',
    # Models
    'AbstractModel',
    'Model',
    'StaticModel',
    'RESERVED_COLUMNS',
    # Grouping
    'group_params',
    'map_over_leaves',
    # Tables
    'column_types',
    'to_rows',
    'to_dataframe',
    'read_columns',
    'format_table',
    'print_params',
    # Declarations
    'param_field',
    'params_of',
    'param_fields',
    # Errors
    'ParamStateError',
    'SchemaError',
    'ValueTypeError',
    'ArityError',
    'ReservedColumnError',
    'ColumnError',
    'GroupKeyError',
    'NoParameterWarning',
]

__version__ = '1.0.0'
__description__ = 'Flat, editable parameter tables over nested immutable object graphs'
