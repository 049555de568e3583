"""Tests for latency_dashboard.services.aggregator — averaging and daily series."""
from datetime import date, datetime
from decimal import Decimal

import pytest

from latency_dashboard.services.aggregator import (
    average_by_function_database, daily_series, daily_series_by_database, function_daily_series,
)
from latency_dashboard.services.benchmark_data import (
    AverageLatency, DatabaseTarget, FunctionRegion, Observation,
)

NOW = datetime(2024, 5, 31, 12, 0)


def _fn(fn_id, code='eu-central-1'):
    return FunctionRegion(id=fn_id, name=f'fn-{fn_id}', region_code=code, region_label=code)


def _db(db_id, method='http'):
    return DatabaseTarget(id=db_id, name=f'db-{db_id}', provider='neon',
                          region_code='eu-central-1', region_label='Europe Central 1',
                          connection_method=method)


def _obs(fn_id, db_id, query_type, latency, timestamp=NOW):
    value = None if latency is None else Decimal(str(latency))
    return Observation(function_id=fn_id, database_id=db_id, query_type=query_type,
                       latency_ms=value, timestamp=timestamp)


# ---------------------------------------------------------------------------
# average_by_function_database
# ---------------------------------------------------------------------------

class TestAverageByFunctionDatabase:

    def test_splits_by_query_type(self):
        rows = [_obs(1, 1, 'cold', 200), _obs(1, 1, 'hot', 10), _obs(1, 1, 'hot', 20)]
        result = average_by_function_database(rows, [_fn(1)], [_db(1)])
        assert result['cold'][1][1] == 200.0
        assert result['hot'][1][1] == 15.0

    def test_every_pair_seeded_with_none(self):
        result = average_by_function_database([], [_fn(1), _fn(2)], [_db(1), _db(2)])
        assert result == {
            'cold': {1: {1: None, 2: None}, 2: {1: None, 2: None}},
            'hot': {1: {1: None, 2: None}, 2: {1: None, 2: None}},
        }

    def test_missing_sentinel_zero(self):
        result = average_by_function_database([_obs(1, 1, 'hot', 5)], [_fn(1)], [_db(1), _db(2)],
                                              missing=0)
        assert result['hot'][1] == {1: 5.0, 2: 0}
        assert result['cold'][1] == {1: 0, 2: 0}

    def test_pairs_are_not_confused_by_id_digits(self):
        # (1, 12) and (11, 2) would collide under a naive "1" + "12" key
        rows = [_obs(1, 12, 'hot', 10), _obs(11, 2, 'hot', 90)]
        result = average_by_function_database(rows, [_fn(1), _fn(11)], [_db(2), _db(12)])
        assert result['hot'][1][12] == 10.0
        assert result['hot'][11][2] == 90.0
        assert result['hot'][1][2] is None

    def test_sums_in_decimal(self):
        rows = [_obs(1, 1, 'hot', '0.1'), _obs(1, 1, 'hot', '0.2')]
        result = average_by_function_database(rows, [_fn(1)], [_db(1)])
        assert result['hot'][1][1] == 0.15

    def test_accepts_sql_average_rows(self):
        rows = [AverageLatency(function_id=1, database_id=1, query_type='cold',
                               latency_ms=Decimal('412.50'))]
        result = average_by_function_database(rows, [_fn(1)], [_db(1)])
        assert result['cold'][1][1] == 412.5

    def test_skips_null_latency_and_unknown_query_type(self):
        rows = [_obs(1, 1, 'hot', None), _obs(1, 1, 'warm', 50)]
        result = average_by_function_database(rows, [_fn(1)], [_db(1)])
        assert result['hot'][1][1] is None
        assert 'warm' not in result

    def test_rows_outside_reference_lists_still_counted(self):
        result = average_by_function_database([_obs(7, 8, 'hot', 30)], [_fn(1)], [_db(1)])
        assert result['hot'][7] == {8: 30.0}
        assert result['hot'][1] == {1: None}


# ---------------------------------------------------------------------------
# daily_series
# ---------------------------------------------------------------------------

class TestDailySeries:

    def test_groups_by_date_ascending(self):
        rows = [
            _obs(1, 1, 'hot', 10, datetime(2024, 5, 30, 9, 0)),
            _obs(2, 1, 'hot', 20, datetime(2024, 5, 30, 18, 0)),
            _obs(1, 1, 'cold', 100, datetime(2024, 5, 30, 9, 0)),
            _obs(1, 1, 'cold', 50, datetime(2024, 5, 29, 9, 0)),
        ]
        series = daily_series(rows, 1, 30, now=NOW)
        assert series == [
            {'date': date(2024, 5, 29), 'cold_latency_avg': 50.0, 'hot_latency_avg': None},
            {'date': date(2024, 5, 30), 'cold_latency_avg': 100.0, 'hot_latency_avg': 15.0},
        ]

    def test_ignores_other_databases(self):
        rows = [_obs(1, 2, 'hot', 10, datetime(2024, 5, 30))]
        assert daily_series(rows, 1, 30, now=NOW) == []

    def test_window_boundary(self):
        cutoff = datetime(2024, 5, 1, 12, 0)
        rows = [
            _obs(1, 1, 'hot', 10, cutoff),
            _obs(1, 1, 'hot', 99, datetime(2024, 5, 1, 11, 59)),
        ]
        series = daily_series(rows, 1, 30, now=NOW)
        assert series == [
            {'date': date(2024, 5, 1), 'cold_latency_avg': None, 'hot_latency_avg': 10.0},
        ]

    def test_by_database_includes_every_requested_id(self):
        rows = [_obs(1, 1, 'cold', 300, datetime(2024, 5, 30))]
        result = daily_series_by_database(rows, [1, 99], 30, now=NOW)
        assert set(result) == {1, 99}
        assert result[99] == []
        assert result[1][0]['cold_latency_avg'] == 300.0


# ---------------------------------------------------------------------------
# function_daily_series
# ---------------------------------------------------------------------------

class TestFunctionDailySeries:

    def test_per_function_values_rounded(self):
        rows = [
            _obs(2, 1, 'hot', '12.3456', datetime(2024, 5, 30, 9, 0)),
            _obs(1, 1, 'cold', 300, datetime(2024, 5, 30, 9, 0)),
            _obs(1, 1, 'hot', 10, datetime(2024, 5, 28, 9, 0)),
        ]
        series = function_daily_series(rows, 1, 30, now=NOW)
        assert [entry['date'] for entry in series] == [date(2024, 5, 28), date(2024, 5, 30)]
        assert series[0]['functions'] == {1: {'cold': None, 'hot': 10.0}}
        assert series[1]['functions'] == {
            1: {'cold': 300.0, 'hot': None},
            2: {'cold': None, 'hot': 12.35},
        }

    @pytest.mark.parametrize('window_days', [0, 1])
    def test_empty_when_nothing_in_window(self, window_days):
        rows = [_obs(1, 1, 'hot', 10, datetime(2024, 5, 20))]
        assert function_daily_series(rows, 1, window_days, now=NOW) == []


def test_documented_average_scenario():
    day1 = datetime(2024, 5, 30, 9, 0)
    rows = [
        _obs(1, 1, 'cold', 100, day1),
        _obs(1, 1, 'cold', 300, day1),
        _obs(1, 1, 'hot', 10, day1),
    ]
    result = average_by_function_database(rows, [_fn(1)], [_db(1)])
    assert result['cold'][1][1] == pytest.approx(200)
    assert result['hot'][1][1] == pytest.approx(10)
