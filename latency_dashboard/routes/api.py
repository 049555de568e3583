"""
JSON API — table payload, daily series, reference data, breaker health.

All view endpoints accept the same query parameters as the dashboard page.
"""
from dataclasses import asdict
from datetime import datetime

from flask import Blueprint, jsonify

from latency_dashboard.config import WINDOW_DAYS
from latency_dashboard.routes.dashboard import load_view
from latency_dashboard.services.aggregator import (
    average_by_function_database, daily_series_by_database, function_daily_series,
)
from latency_dashboard.services.benchmark_data import (
    DataUnavailableError, fetch_average_latency, fetch_recent_observations, fetch_reference_data,
)
from latency_dashboard.services.circuit_breaker import get_all_breakers
from latency_dashboard.services.latency_table import build_table
from latency_dashboard.services.view_state import encode, visible_databases

bp = Blueprint('api', __name__, url_prefix='/api')


@bp.errorhandler(DataUnavailableError)
def data_unavailable(error):
    return jsonify({'error': 'data unavailable'}), 503


def _series_json(series):
    return [
        {
            'date': entry['date'].isoformat(),
            'cold_latency_avg': entry['cold_latency_avg'],
            'hot_latency_avg': entry['hot_latency_avg'],
        }
        for entry in series
    ]


@bp.route('/latency')
def latency():
    """Pivoted 30-day averages for the decoded view state."""
    functions, databases, state = load_view()
    averages = fetch_average_latency(WINDOW_DAYS)
    latency_data = average_by_function_database(averages, functions, databases)
    return jsonify({
        'params': encode(state, databases),
        'window_days': WINDOW_DAYS,
        'table': build_table(state, functions, databases, latency_data),
    })


@bp.route('/history')
def history():
    """Daily cold/hot averages for every visible database."""
    _functions, databases, state = load_view()
    visible = visible_databases(state, databases)
    now = datetime.now()
    observations = fetch_recent_observations(WINDOW_DAYS, now=now) if visible else []
    series = daily_series_by_database(observations, [db.id for db in visible], WINDOW_DAYS,
                                      now=now)
    return jsonify({
        'params': encode(state, databases),
        'window_days': WINDOW_DAYS,
        'databases': [
            {**asdict(db), 'series': _series_json(series[db.id])}
            for db in visible
        ],
    })


@bp.route('/history/<int:database_id>')
def database_history(database_id):
    """Per-function daily averages for one database."""
    functions, databases = fetch_reference_data()
    database = next((db for db in databases if db.id == database_id), None)
    if database is None:
        return jsonify({'error': f'Unknown database: {database_id}'}), 404

    now = datetime.now()
    observations = fetch_recent_observations(WINDOW_DAYS, now=now)
    series = function_daily_series(observations, database_id, WINDOW_DAYS, now=now)
    return jsonify({
        'database': asdict(database),
        'functions': [asdict(fn) for fn in functions],
        'window_days': WINDOW_DAYS,
        'series': [
            {
                'date': entry['date'].isoformat(),
                'functions': {str(fid): values for fid, values in entry['functions'].items()},
            }
            for entry in series
        ],
    })


@bp.route('/reference')
def reference():
    """Functions and databases, without connection secrets."""
    functions, databases = fetch_reference_data()
    return jsonify({
        'functions': [asdict(fn) for fn in functions],
        'databases': [asdict(db) for db in databases],
    })


# ── Circuit breaker health ───────────────────────────────────────────────────

@bp.route('/health')
def api_health():
    """State and counters of every registered circuit breaker."""
    return jsonify({
        'services': {name: b.get_health() for name, b in get_all_breakers().items()},
    })


@bp.route('/health/<service>/reset', methods=['POST'])
def reset_circuit(service):
    breaker = get_all_breakers().get(service)
    if breaker is None:
        return jsonify({'error': f'Unknown service: {service}'}), 404
    breaker.reset()
    return jsonify({'ok': True, 'service': service, 'state': breaker.state})
