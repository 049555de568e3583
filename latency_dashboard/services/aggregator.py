"""
Latency aggregation — pure functions over flat latency rows.

Rows are anything exposing function_id, database_id, query_type and
latency_ms (raw Observations, or AverageLatency rows from the SQL average);
the time-series helpers additionally need a timestamp.

Sums and divisions run in Decimal; values become float only once averaged.
"No data" is always None unless a caller opts into another sentinel.
"""
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from latency_dashboard.config import QUERY_TYPES


def _mean(values) -> Optional[float]:
    values = [v for v in values if v is not None]
    if not values:
        return None
    total = sum((Decimal(str(v)) for v in values), Decimal(0))
    return float(total / len(values))


def average_by_function_database(rows: Iterable, functions, databases, missing=None) -> Dict:
    """
    Average latency per (function, database), split by query type.

    Returns {'cold': {function_id: {database_id: avg}}, 'hot': {...}}.
    Every (function, database) pair from the reference lists is present;
    pairs without rows hold `missing`. Pass missing=0 for the legacy
    seeded-zero shape.
    """
    result = {qt: {} for qt in QUERY_TYPES}
    for fn in functions:
        for qt in QUERY_TYPES:
            result[qt][fn.id] = {db.id: missing for db in databases}

    partitions = defaultdict(list)
    for row in rows:
        if row.query_type not in result or row.latency_ms is None:
            continue
        partitions[(row.function_id, row.database_id, row.query_type)].append(row.latency_ms)

    for (function_id, database_id, query_type), values in partitions.items():
        result[query_type].setdefault(function_id, {})[database_id] = _mean(values)

    return result


def _in_window(rows, database_id, window_days, now):
    now = now or datetime.now()
    cutoff = now - timedelta(days=window_days)
    return [r for r in rows if r.database_id == database_id and r.timestamp >= cutoff]


def _day(timestamp) -> date:
    return timestamp.date() if isinstance(timestamp, datetime) else timestamp


def daily_series(rows: Iterable, database_id: int, window_days: int,
                 now: Optional[datetime] = None) -> List[Dict]:
    """
    Daily cold/hot averages for one database over the trailing window.

    One entry per calendar date present, ascending. A query type with no
    rows on a date is None, not 0.
    """
    by_day = defaultdict(lambda: {qt: [] for qt in QUERY_TYPES})
    for row in _in_window(rows, database_id, window_days, now):
        if row.query_type in QUERY_TYPES:
            by_day[_day(row.timestamp)][row.query_type].append(row.latency_ms)

    return [
        {
            'date': day,
            'cold_latency_avg': _mean(by_day[day]['cold']),
            'hot_latency_avg': _mean(by_day[day]['hot']),
        }
        for day in sorted(by_day)
    ]


def daily_series_by_database(rows: Iterable, database_ids: Iterable[int], window_days: int,
                             now: Optional[datetime] = None) -> Dict[int, List[Dict]]:
    """daily_series for several databases; every requested id gets an entry."""
    rows = list(rows)
    now = now or datetime.now()
    return {db_id: daily_series(rows, db_id, window_days, now=now) for db_id in database_ids}


def function_daily_series(rows: Iterable, database_id: int, window_days: int,
                          now: Optional[datetime] = None) -> List[Dict]:
    """
    Per-function daily averages for one database, for the historical chart.

    [{'date': d, 'functions': {function_id: {'cold': 12.5, 'hot': None}}}, ...]
    Averages are rounded to 2 decimals.
    """
    grouped = defaultdict(lambda: defaultdict(lambda: {qt: [] for qt in QUERY_TYPES}))
    for row in _in_window(rows, database_id, window_days, now):
        if row.query_type in QUERY_TYPES:
            grouped[_day(row.timestamp)][row.function_id][row.query_type].append(row.latency_ms)

    series = []
    for day in sorted(grouped):
        functions = {}
        for function_id in sorted(grouped[day]):
            functions[function_id] = {}
            for qt in QUERY_TYPES:
                avg = _mean(grouped[day][function_id][qt])
                functions[function_id][qt] = round(avg, 2) if avg is not None else None
        series.append({'date': day, 'functions': functions})
    return series
