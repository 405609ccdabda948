"""
Tests for best-effort field lookup on loosely-named sheet records.
"""

import math

import numpy as np
import pandas as pd

from ops_dashboard.data.fields import (
    FIELD_CANDIDATES,
    as_id,
    id_series,
    is_blank,
    number_series,
    resolve,
    resolve_column,
    resolve_field,
    text_series,
)


class TestResolve:
    def test_exact_match(self):
        assert resolve({"project_id": "P1"}, ["project_id"]) == "P1"

    def test_case_and_separator_insensitive(self):
        assert resolve({"Project_Id": "P1"}, ["project id"]) == "P1"
        assert resolve({"PROJECT ID": "P2"}, ["project_id"]) == "P2"

    def test_missing_field_is_none(self):
        assert resolve({"other": 1}, ["project_id"]) is None

    def test_candidate_order_wins(self):
        record = {"name": "fallback", "Project Name": "Primary"}
        assert resolve(record, ["Project Name", "name"]) == "Primary"

    def test_exact_match_preferred_over_normalized(self):
        record = {"Status": "normalized", "status": "exact"}
        assert resolve(record, ["status"]) == "exact"

    def test_blank_values_are_skipped(self):
        record = {"Project Name": "  ", "name": "Named"}
        assert resolve(record, ["Project Name", "name"]) == "Named"

    def test_nan_is_treated_as_missing(self):
        assert resolve({"project_id": float("nan")}, ["project_id"]) is None

    def test_non_mapping_record(self):
        assert resolve(None, ["project_id"]) is None
        assert resolve(42, ["project_id"]) is None

    def test_works_on_series(self):
        row = pd.Series({"Project id": "P9"})
        assert resolve_field(row, "task.project_id") == "P9"

    def test_unknown_field_name(self):
        assert resolve_field({"x": 1}, "no.such.field") is None


class TestResolveColumn:
    def test_exact_then_normalized(self):
        assert resolve_column(["Project id", "title"], FIELD_CANDIDATES["task.project_id"]) == "Project id"
        assert resolve_column(["project_ID"], ["Project id"]) == "project_ID"

    def test_no_match(self):
        assert resolve_column(["a", "b"], ["c"]) is None


class TestIdCoercion:
    def test_as_id(self):
        assert as_id("P1 ") == "P1"
        assert as_id(1.0) == "1"
        assert as_id(7) == "7"
        assert as_id(2.5) == "2.5"
        assert as_id(None) == ""
        assert as_id(np.nan) == ""

    def test_is_blank(self):
        assert is_blank(None)
        assert is_blank("   ")
        assert is_blank(math.nan)
        assert is_blank(pd.NA)
        assert not is_blank(0)
        assert not is_blank("x")
        assert not is_blank({"a": 1})

    def test_id_series_coerces_float_ids(self):
        df = pd.DataFrame({"User_id": [1.0, 2.0, np.nan]})
        assert list(id_series(df, "person.id")) == ["1", "2", ""]

    def test_id_series_missing_column(self):
        df = pd.DataFrame({"other": [1, 2]})
        assert list(id_series(df, "person.id")) == ["", ""]

    def test_id_series_empty_frame_supports_str_accessor(self):
        df = pd.DataFrame({"status": []})
        assert text_series(df, "task.status").str.lower().empty


class TestNumbers:
    def test_non_numeric_becomes_zero(self):
        df = pd.DataFrame({"weekly_hours_capacity": [40, "n/a", None, "12.5"]})
        assert list(number_series(df, "person.capacity")) == [40.0, 0.0, 0.0, 12.5]

    def test_missing_column_is_zero(self):
        df = pd.DataFrame({"x": [1]})
        assert list(number_series(df, "person.capacity")) == [0.0]
