"""Tests for Model and StaticModel.

Covers the table shape, row/column/cell reads, column writes (existing and
new columns, row subsets), update_values, the synthesized read-only columns
and the all-or-nothing behaviour of failed writes.
"""
import pytest
from dataclasses import dataclass
from typing import Any

from paramstate import (
    ABSENT,
    AbstractParam,
    ArityError,
    ColumnError,
    Model,
    NoParameterWarning,
    Param,
    RealParam,
    ReservedColumnError,
    SchemaError,
    StaticModel,
    TraversalConfig,
    ValueTypeError,
)


@dataclass(frozen=True)
class Rates:
    birth: Any
    death: Any
    label: str = "rates"


class TestTableShape:

    def test_keys(self, s1):
        m = Model(s1)
        assert m.keys() == ('component', 'fieldname', 'val', 'bounds')
        assert m.metadata_keys() == ('val', 'bounds')
        assert len(m) == 6

    def test_val_column(self, s1):
        assert Model(s1)['val'] == (1.0, 2.0, 3.0, 4.0, 99, 100.0)

    def test_bounds_column_has_absent(self, s1):
        bounds = Model(s1)['bounds']
        assert bounds == ((5.0, 15.0), (5.0, 15.0), (5.0, 15.0), ABSENT, ABSENT, (50.0, 150.0))

    def test_synthesized_columns(self, s1):
        m = Model(s1)
        assert m['component'] == (type(s1),) * 4 + (type(s1.e),) * 2
        assert m['fieldname'] == ('a', 'b', 'c', 'd', 'h', 'j')
        assert m.paths() == ('a', 'b', 'c', 'd', 'e.h', 'e.j')

    def test_parent_is_normalized(self, s1):
        m = Model(s1)
        assert m.parent.d.keys() == ('val', 'bounds')
        assert m.parent.d.bounds is ABSENT
        assert m.parent.e.i == 7
        # The wrapped graph itself is never modified
        assert s1.d.keys() == ('val',)

    def test_contains_and_iter(self, s1):
        m = Model(s1)
        assert 'bounds' in m
        assert 'component' in m
        assert 'units' not in m
        assert [p.val for p in m] == [1.0, 2.0, 3.0, 4.0, 99, 100.0]

    def test_wrapping_a_model(self, s1):
        config = TraversalConfig().excluding(list)
        m = Model(s1, config)
        again = Model(m)
        assert again.parent is m.parent
        assert again.config is config

    def test_zero_parameters_warns(self, plain):
        with pytest.warns(NoParameterWarning):
            m = Model(plain)
        assert len(m) == 0
        assert m.keys() == ('component', 'fieldname')
        assert m.parent is plain
        assert m.to_rows() == []

    def test_new_column_on_zero_rows(self, plain):
        """Columns live on the parameters, so an empty model gains none."""
        with pytest.warns(NoParameterWarning):
            m = Model(plain)
        m.set('label', [])
        assert m.keys() == ('component', 'fieldname')
        assert m.parent is plain
        with pytest.raises(ArityError):
            m.set('label', ['x'])

    def test_selected_value_must_be_param(self, s1):
        config = TraversalConfig(select=lambda v: isinstance(v, int) and not isinstance(v, bool))
        with pytest.raises(SchemaError):
            Model(s1, config)


class TestReads:

    def test_row(self, s1):
        m = Model(s1)
        assert m.row(0).val == 1.0
        assert m[-1].val == 100.0
        assert m[-1].bounds == (50.0, 150.0)

    def test_row_out_of_range(self, s1):
        m = Model(s1)
        with pytest.raises(IndexError):
            m.row(6)
        with pytest.raises(IndexError):
            m[-7]

    def test_row_index_type(self, s1):
        with pytest.raises(TypeError):
            Model(s1).row(1.5)

    def test_cell(self, s1):
        m = Model(s1)
        assert m.cell(4, 'val') == 99
        assert m[0, 'bounds'] == (5.0, 15.0)
        assert m[0, 'component'] is type(s1)
        assert m[5, 'fieldname'] == 'j'

    def test_slice(self, s1):
        rows = Model(s1)[1:3]
        assert [p.val for p in rows] == [2.0, 3.0]

    def test_unknown_column(self, s1):
        m = Model(s1)
        with pytest.raises(ColumnError):
            m['nope']
        # ColumnError is an IndexError for callers expecting lookup failures
        with pytest.raises(IndexError):
            m.cell(0, 'nope')

    def test_rows_where(self, s1):
        m = Model(s1)
        assert m.rows_where(lambda component, fieldname, p: component is type(s1.e)) == [4, 5]
        assert m.rows_where(lambda component, fieldname, p: p.val > 3) == [3, 4, 5]

    def test_strip_params(self, s1):
        plain = Model(s1).strip_params()
        assert (plain.a, plain.e.h, plain.e.i, plain.e.j) == (1.0, 99, 7, 100.0)
        assert not isinstance(plain.a, Param)

    def test_units(self, grouped_obj):
        m = Model(grouped_obj)
        with_units = m.with_units('val')
        assert with_units == (1.0, 4.0, 9.0, 16.0, 5.0, 6.0, 70.0, 8.0)
        assert m.with_units('bounds')[1] == (10.0, 30.0)
        assert m.strip_units(with_units) == m['val']
        with pytest.raises(ArityError):
            m.strip_units([1.0])

    def test_repr(self, s1):
        text = repr(Model(s1))
        assert text.startswith("Model with parent object of type:")
        assert "S1" in text
        assert "S2" in text
        assert "bounds" in text


class TestSet:

    def test_set_existing_column(self, s1):
        m = Model(s1)
        old_parent = m.parent
        old_vals = m['val']
        m['val'] = [v * 2 for v in m['val']]

        assert m['val'] == (2.0, 4.0, 6.0, 8.0, 198, 200.0)
        assert m['bounds'][0] == (5.0, 15.0)
        assert m.parent.e.j.val == 200.0
        assert m.parent.e.i == 7
        # Earlier reads stay valid
        assert old_parent.a.val == 1.0
        assert old_vals == (1.0, 2.0, 3.0, 4.0, 99, 100.0)

    def test_set_returns_model(self, s1):
        m = Model(s1)
        assert m.set('val', [0] * 6) is m

    def test_set_row_subset(self, s1):
        m = Model(s1)
        m.set('val', [0.0, 0.5], rows=[1, 4])
        assert m['val'] == (1.0, 0.0, 3.0, 4.0, 0.5, 100.0)

    def test_set_cell(self, s1):
        m = Model(s1)
        m[4, 'val'] = 7
        assert m[4, 'val'] == 7
        assert m.parent.e.h.val == 7

    def test_new_column(self, s1):
        m = Model(s1)
        m['newfield'] = list(range(6))
        assert m.keys() == ('component', 'fieldname', 'val', 'bounds', 'newfield')
        assert m['newfield'] == (0, 1, 2, 3, 4, 5)
        assert m.parent.e.j.newfield == 5

    def test_new_column_on_row_subset(self, s1):
        m = Model(s1)
        m.set('group', ['A', 'B'], rows=[0, 5])
        assert m['group'] == ('A', ABSENT, ABSENT, ABSENT, ABSENT, 'B')
        assert all(p.keys() == ('val', 'bounds', 'group') for p in m)

    def test_slice_selection(self, s1):
        m = Model(s1)
        m.set('val', [0, 0], rows=slice(0, 2))
        assert m['val'][:3] == (0, 0, 3.0)

    def test_reserved_columns(self, s1):
        m = Model(s1)
        before = m.parent
        for column in ('component', 'fieldname'):
            with pytest.raises(ReservedColumnError):
                m[column] = ['x'] * 6
        assert m.parent is before

    def test_arity_mismatch_leaves_model_unchanged(self, s1):
        m = Model(s1)
        before = m.parent
        with pytest.raises(ArityError):
            m['val'] = [1, 2]
        assert m.parent is before
        assert m['val'] == (1.0, 2.0, 3.0, 4.0, 99, 100.0)

    def test_row_out_of_range(self, s1):
        m = Model(s1)
        with pytest.raises(IndexError):
            m.set('val', [1], rows=[10])

    def test_type_check_failure_leaves_model_unchanged(self):
        m = Model(Rates(RealParam(0.1), RealParam(0.05)))
        before = m.parent
        with pytest.raises(ValueTypeError):
            m['val'] = [0.2, "fast"]
        assert m.parent is before

    def test_config_is_reused(self):
        """Writes rediscover with the config the model was built with."""
        root = Rates(RealParam(0.1), Param(0.05))
        m = Model(root, TraversalConfig(select=lambda v: isinstance(v, RealParam)))
        m['val'] = [0.3]
        assert m.parent.birth.val == 0.3
        assert m.parent.death.val == 0.05

    def test_write_that_deselects_a_row_is_rejected(self):
        """A row must stay selectable, or the next write would see fewer rows."""
        config = TraversalConfig(select=lambda v: isinstance(v, AbstractParam) and v.get('tune') is True)
        m = Model(Rates(Param(1.0, tune=True), Param(2.0, tune=True)), config)
        before = m.parent

        with pytest.raises(SchemaError):
            m.set('tune', [False, True])
        assert m.parent is before
        assert len(m) == 2

        with pytest.raises(SchemaError):
            m.update_values(lambda p: Param(p.val))
        assert m.parent is before

        m['val'] = [10.0, 20.0]
        assert m['val'] == (10.0, 20.0)
        assert m.parent.death.tune is True

    def test_update_from_mapping(self, s1):
        m = Model(s1)
        m.update({'component': ['ignored'] * 6, 'val': [0] * 6, 'units': [1] * 6})
        assert m['val'] == (0,) * 6
        assert m['units'] == (1,) * 6
        assert m['component'][0] is type(s1)


class TestUpdateValues:

    def test_sequence(self, s1):
        m = Model(s1)
        m.update_values([v + 1 for v in m['val']])
        assert m['val'] == (2.0, 3.0, 4.0, 5.0, 100, 101.0)
        assert m['bounds'][0] == (5.0, 15.0)

    def test_where(self, s1):
        m = Model(s1)
        m.update_values([1, 2], where=lambda component, fieldname, p: component is type(s1.e))
        assert m['val'] == (1.0, 2.0, 3.0, 4.0, 1, 2)

    def test_arity(self, s1):
        with pytest.raises(ArityError):
            Model(s1).update_values([1, 2, 3])

    def test_function_of_param(self, s1):
        m = Model(s1)
        m.update_values(lambda p: p.val * 2)
        assert m['val'] == (2.0, 4.0, 6.0, 8.0, 198, 200.0)

    def test_function_returning_mapping(self, s1):
        m = Model(s1)
        m.update_values(lambda p: {'val': p.val * 10, 'bounds': (0, 100)},
                        where=lambda component, fieldname, p: fieldname == 'a')
        assert m[0].val == 10.0
        assert m[0].bounds == (0, 100)
        assert m[1].val == 2.0

    def test_function_returning_param(self, s1):
        m = Model(s1)
        m.update_values(lambda p: Param(0.0, label="x"),
                        where=lambda component, fieldname, p: fieldname == 'j')
        assert m.keys() == ('component', 'fieldname', 'val', 'bounds', 'label')
        assert m['label'] == (ABSENT,) * 5 + ("x",)
        assert m[5, 'bounds'] is ABSENT

    def test_function_result_keeps_column_order(self, s1):
        """Returned parameters with keys in another order do not reorder the table."""
        m = Model(s1)
        m.update_values(lambda p: Param(p.val * 2, units=2.0, bounds=p.bounds))
        assert m.keys() == ('component', 'fieldname', 'val', 'bounds', 'units')
        assert m[0].items() == (('val', 2.0), ('bounds', (5.0, 15.0)), ('units', 2.0))
        assert m['bounds'][3] is ABSENT

    def test_dropped_keys_stay_columns(self, s1):
        m = Model(s1)
        m.update_values(lambda p: Param(p.val))
        assert m.keys() == ('component', 'fieldname', 'val', 'bounds')
        assert m['bounds'] == (ABSENT,) * 6


class TestStaticModel:

    def test_with_column_returns_new_model(self, s1):
        sm = StaticModel(s1)
        changed = sm.with_column('val', [0] * 6)
        assert isinstance(changed, StaticModel)
        assert changed['val'] == (0,) * 6
        assert sm['val'] == (1.0, 2.0, 3.0, 4.0, 99, 100.0)
        assert changed['fieldname'] == sm['fieldname']

    def test_updated(self, s1):
        sm = StaticModel(s1)
        changed = sm.updated(lambda p: p.val + 1)
        assert changed['val'] == (2.0, 3.0, 4.0, 5.0, 100, 101.0)
        assert sm.parent.a.val == 1.0

    def test_no_mutating_api(self, s1):
        sm = StaticModel(s1)
        assert not hasattr(sm, 'set')
        with pytest.raises(TypeError):
            sm['val'] = [0] * 6
