"""
Unit tests for filter normalization and application.
"""

import pytest

from core.data import load_dashboard_data, prepare_context
from core.errors import InvalidInputError
from core.filters import DashboardFilters, filter_employees, filter_sleep, normalize_filters


class TestNormalizeFilters:
    """Test cases for normalize_filters."""

    def test_empty(self):
        assert normalize_filters({}) == DashboardFilters()
        assert normalize_filters(None) == DashboardFilters()

    def test_blank_gender_means_all(self):
        assert normalize_filters({"gender": ""}).gender is None

    def test_gender_case_insensitive(self):
        assert normalize_filters({"gender": " Female "}).gender == "female"

    def test_other_gender_accepted(self):
        assert normalize_filters({"gender": "other"}).gender == "other"

    def test_unknown_gender_rejected(self):
        with pytest.raises(InvalidInputError):
            normalize_filters({"gender": "robot"})

    def test_non_string_gender_rejected(self):
        with pytest.raises(InvalidInputError):
            normalize_filters({"gender": 1})
        with pytest.raises(InvalidInputError):
            normalize_filters({"gender": ["male"]})

    def test_ranges_coerced_and_ordered(self):
        filters = normalize_filters({"age_range": ["40", 30], "height_range": (150, 180)})
        assert filters.age_range == (30.0, 40.0)
        assert filters.height_range == (150.0, 180.0)
        assert filters.weight_range is None

    def test_bad_range_rejected(self):
        with pytest.raises(InvalidInputError):
            normalize_filters({"weight_range": [40]})
        with pytest.raises(InvalidInputError):
            normalize_filters({"weight_range": ["a", "b"]})

    def test_date_range_open_end(self):
        assert normalize_filters({"date_range": ["2023-12-01", ""]}).date_range == ("2023-12-01", None)
        assert normalize_filters({"date_range": ["2023-12-01"]}).date_range == ("2023-12-01", None)

    def test_date_range_requires_start(self):
        assert normalize_filters({"date_range": ["", "2023-12-05"]}).date_range is None

    def test_date_range_accepts_timestamps(self):
        assert normalize_filters({"date_range": ["2023-12-01T00:00:00Z", None]}).date_range == ("2023-12-01", None)

    def test_bad_date_rejected(self):
        with pytest.raises(InvalidInputError):
            normalize_filters({"date_range": ["yesterday", None]})

    def test_trailing_garbage_after_date_rejected(self):
        with pytest.raises(InvalidInputError):
            normalize_filters({"date_range": ["2023-12-01garbage", None]})
        with pytest.raises(InvalidInputError):
            normalize_filters({"date_range": ["2023-12-01", "2023-12-10xyz"]})

    def test_date_range_accepts_space_separated_time(self):
        assert normalize_filters({"date_range": ["2023-12-01 08:30", None]}).date_range == ("2023-12-01", None)


class TestFilterEmployees:
    """Test cases for filter_employees."""

    def test_no_filters_keeps_everyone(self, data_ctx):
        assert len(filter_employees(data_ctx["employees"], DashboardFilters())) == 50

    def test_gender(self, data_ctx):
        out = filter_employees(data_ctx["employees"], DashboardFilters(gender="female"))
        assert len(out) == 25
        assert set(out["gender"]) == {"female"}

    def test_other_gender_is_empty(self, data_ctx):
        assert filter_employees(data_ctx["employees"], DashboardFilters(gender="other")).empty

    def test_age_range_inclusive(self, data_ctx):
        out = filter_employees(data_ctx["employees"], DashboardFilters(age_range=(25, 29)))
        assert sorted(out["id"]) == [1, 2, 3, 4, 5, 31, 32, 33, 34, 35]

    def test_wide_biometric_ranges(self, data_ctx):
        filters = DashboardFilters(age_range=(20, 70), height_range=(140, 200), weight_range=(40, 120))
        assert len(filter_employees(data_ctx["employees"], filters)) == 50

    def test_combined(self, data_ctx):
        out = filter_employees(data_ctx["employees"], DashboardFilters(gender="male", age_range=(25, 29)))
        assert sorted(out["id"]) == [1, 3, 5, 31, 33, 35]


class TestFilterSleep:
    """Test cases for filter_sleep."""

    def test_by_employee(self, data_ctx):
        out = filter_sleep(data_ctx["sleep"], [1, 2], DashboardFilters())
        assert len(out) == 60

    def test_date_window_inclusive(self, data_ctx):
        filters = DashboardFilters(date_range=("2023-12-01", "2023-12-07"))
        out = filter_sleep(data_ctx["sleep"], range(1, 51), filters)
        assert len(out) == 7 * 50
        assert out["date"].min() == "2023-12-01"
        assert out["date"].max() == "2023-12-07"

    def test_open_ended_window(self, data_ctx):
        filters = DashboardFilters(date_range=("2023-12-20", None))
        out = filter_sleep(data_ctx["sleep"], [1], filters)
        assert len(out) == 10

    def test_window_outside_data(self, data_ctx):
        filters = DashboardFilters(date_range=("2024-01-01", "2024-01-31"))
        assert filter_sleep(data_ctx["sleep"], [1], filters).empty


class TestPrepareContext:
    def test_accepts_raw_dict(self, data_ctx):
        ctx = prepare_context({"gender": "male", "date_range": ["2023-12-01", "2023-12-10"]}, data_ctx)
        assert isinstance(ctx["filters"], DashboardFilters)
        assert len(ctx["filtered_employees"]) == 25
        assert len(ctx["filtered_sleep"]) == 25 * 10
        assert len(ctx["sleep"]) == 1500

    def test_does_not_mutate_source(self, data_ctx):
        prepare_context(DashboardFilters(gender="female"), data_ctx)
        assert len(data_ctx["employees"]) == 50
        assert len(data_ctx["sleep"]) == 1500

    def test_cached_frames_survive_filtering(self):
        data_ctx = load_dashboard_data()
        ctx = prepare_context({"gender": "female", "date_range": ["2023-12-01", "2023-12-10"]}, data_ctx)
        ctx["employees"].drop(ctx["employees"].index, inplace=True)
        ctx["sleep"]["duration"] = 0.0
        again = load_dashboard_data()
        assert again is data_ctx
        assert len(again["employees"]) == 50
        assert again["sleep"]["duration"].between(4, 10).all()
