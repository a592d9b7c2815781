"""Tests for the tabular adapter: rows, schema, DataFrames and text output."""
import io

import pandas as pd
import pytest

from paramstate import (
    ABSENT,
    ArityError,
    Model,
    StaticModel,
    column_types,
    format_table,
    print_params,
    read_columns,
    to_dataframe,
    to_rows,
)


class TestExport:

    def test_to_rows(self, s1):
        rows = to_rows(Model(s1))
        assert len(rows) == 6
        assert rows[0] == {
            'component': type(s1),
            'fieldname': 'a',
            'val': 1.0,
            'bounds': (5.0, 15.0),
        }
        assert rows[3]['bounds'] is ABSENT

    def test_column_types(self, s1):
        schema = column_types(Model(s1))
        assert list(schema) == ['component', 'fieldname', 'val', 'bounds']
        assert schema['val'] == (float, int)
        assert schema['bounds'] == (tuple, type(ABSENT))
        assert schema['fieldname'] == (str,)

    def test_model_schema_matches(self, s1):
        m = Model(s1)
        assert m.schema() == column_types(m)

    def test_to_dataframe(self, s1):
        m = Model(s1)
        df = to_dataframe(m)
        assert list(df.columns) == list(m.keys())
        assert len(df) == 6
        assert df['val'].tolist() == list(m['val'])
        assert df['fieldname'].tolist() == ['a', 'b', 'c', 'd', 'h', 'j']

    def test_format_table(self, s1):
        text = format_table(Model(s1))
        for header in ('component', 'fieldname', 'val', 'bounds'):
            assert header in text
        assert 'S2' in text
        assert 'ABSENT' not in text

    def test_print_params(self, s1):
        out = io.StringIO()
        print_params(s1, file=out)
        assert 'fieldname' in out.getvalue()


class TestDataFrameRoundTrip:
    """Export to a DataFrame, edit it, and write it back."""

    def test_scaled_values_written_back(self, s1):
        m = Model(s1)
        df = m.to_dataframe()
        df['val'] = df['val'] * 3
        m.update(df)
        assert m['val'] == tuple(df['val'].tolist())
        assert m['val'] == (3.0, 6.0, 9.0, 12.0, 297.0, 300.0)
        assert m.parent.e.j.val == 300.0

    def test_metadata_survives(self, s1):
        m = Model(s1)
        m.update(m.to_dataframe())
        assert m['bounds'] == ((5.0, 15.0),) * 3 + (ABSENT, ABSENT, (50.0, 150.0))
        assert m['component'][4] is type(s1.e)

    def test_new_column_from_dataframe(self, s1):
        m = Model(s1)
        df = m.to_dataframe()
        df['label'] = [f"p{i}" for i in range(len(df))]
        m.update(df)
        assert m.keys()[-1] == 'label'
        assert m.parent.e.h.label == 'p4'

    def test_static_model(self, s1):
        sm = StaticModel(s1)
        df = sm.to_dataframe()
        df['val'] = 0.0
        changed = sm.with_table(df)
        assert changed['val'] == (0.0,) * 6
        assert sm['val'][0] == 1.0

    def test_row_subset(self, s1):
        m = Model(s1)
        m.update(pd.DataFrame({'val': [10.0, 20.0]}), rows=[0, 5])
        assert m['val'] == (10.0, 2.0, 3.0, 4.0, 99, 20.0)


class TestReadColumns:

    def test_from_model(self, s1):
        m = Model(s1)
        columns = read_columns(m)
        assert list(columns) == list(m.keys())

    def test_from_row_mappings(self):
        columns = read_columns([{'val': 1, 'units': 2}, {'val': 3}])
        assert columns == {'val': [1, 3], 'units': [2, ABSENT]}

    def test_from_mapping(self):
        assert read_columns({'val': (1, 2)}) == {'val': [1, 2]}

    def test_unequal_columns(self):
        with pytest.raises(ArityError):
            read_columns({'val': [1, 2], 'units': [1]})

    def test_unsupported_source(self):
        with pytest.raises(TypeError):
            read_columns(42)

    def test_wrong_row_count(self, s1):
        m = Model(s1)
        with pytest.raises(ArityError):
            m.update({'val': [1.0, 2.0]})
        assert m['val'][0] == 1.0

    def test_model_to_model(self, s1, s1_factory):
        source = Model(s1)
        source['val'] = [0] * 6
        target = Model(s1_factory())
        target.update(source)
        assert target['val'] == (0,) * 6
