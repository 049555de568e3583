"""
Dashboard routes — latency table page, view-state transitions, history page, health check.

The query string is the view state. Pages redirect to the canonical
encoding of the state they render; /view/<action> applies one transition
and redirects back to the table.
"""
import logging
from datetime import datetime

from flask import Blueprint, abort, jsonify, redirect, render_template, request, url_for

from latency_dashboard.config import FAQ, WINDOW_DAYS
from latency_dashboard.services.aggregator import (
    average_by_function_database, daily_series_by_database,
)
from latency_dashboard.services.benchmark_data import (
    DataUnavailableError, fetch_average_latency, fetch_recent_observations, fetch_reference_data,
)
from latency_dashboard.services.latency_table import build_table
from latency_dashboard.services.sidebar import sidebar_groups
from latency_dashboard.services.view_state import (
    decode, encode, is_canonical, set_connection_filter, set_query_type_filter,
    set_region_filter, toggle_all, toggle_database, toggle_group, visible_databases,
)

logger = logging.getLogger('routes.dashboard')

bp = Blueprint('dashboard', __name__)


@bp.errorhandler(DataUnavailableError)
def data_unavailable(error):
    return render_template('unavailable.html'), 503


def load_view():
    """Reference data plus the state decoded from the current query string."""
    functions, databases = fetch_reference_data()
    return functions, databases, decode(request.args, databases)


def _parse_ids(raw):
    try:
        return [int(t) for t in raw.split(',') if t.strip()]
    except ValueError:
        raise ValueError(f'Invalid database ids: {raw!r}') from None


def apply_action(action, state, args, databases):
    """Apply one named transition; raises ValueError for bad values."""
    value = args.get('value', '')
    if action == 'toggle-database':
        ids = _parse_ids(value)
        if len(ids) != 1:
            raise ValueError(f'Expected one database id, got {value!r}')
        return toggle_database(state, ids[0], databases)
    if action == 'toggle-group':
        checked = args.get('checked', '1') not in ('0', 'false')
        return toggle_group(state, _parse_ids(value), checked, databases)
    if action == 'toggle-all':
        return toggle_all(state, databases)
    if action == 'connection':
        return set_connection_filter(state, value, databases)
    if action == 'queries':
        return set_query_type_filter(state, value)
    if action == 'regions':
        return set_region_filter(state, value)
    raise ValueError(f'Unknown view action: {action!r}')


VIEW_ACTIONS = ('toggle-database', 'toggle-group', 'toggle-all', 'connection', 'queries', 'regions')


@bp.route('/')
def index():
    """Latency table with sidebar, filters and FAQ."""
    functions, databases, state = load_view()
    params = encode(state, databases)
    if not is_canonical(request.args, state, databases):
        return redirect(url_for('dashboard.index', **params))

    averages = fetch_average_latency(WINDOW_DAYS)
    latency = average_by_function_database(averages, functions, databases)
    table = build_table(state, functions, databases, latency)

    return render_template(
        'dashboard.html',
        active_page='dashboard',
        state=state,
        params=params,
        table=table,
        sidebar=sidebar_groups(databases, state.selected_database_ids),
        all_selected=len(state.selected_database_ids) == len(databases),
        total_functions=len(functions),
        window_days=WINDOW_DAYS,
        faq=FAQ,
    )


@bp.route('/view/<action>')
def apply_view_action(action):
    """Apply a single view-state transition and redirect to the new canonical URL."""
    if action not in VIEW_ACTIONS:
        abort(404)
    _functions, databases, state = load_view()
    try:
        state = apply_action(action, state, request.args, databases)
    except ValueError as e:
        logger.info("Rejected view action %s: %s", action, e)
        abort(400, description=str(e))
    return redirect(url_for('dashboard.index', **encode(state, databases)))


@bp.route('/history')
def history():
    """Daily cold/hot averages for each visible database."""
    _functions, databases, state = load_view()
    params = encode(state, databases)
    if not is_canonical(request.args, state, databases):
        return redirect(url_for('dashboard.history', **params))

    visible = visible_databases(state, databases)
    now = datetime.now()
    observations = fetch_recent_observations(WINDOW_DAYS, now=now) if visible else []
    series = daily_series_by_database(observations, [db.id for db in visible], WINDOW_DAYS,
                                      now=now)

    charts = [
        {
            'id': db.id,
            'name': db.name,
            'region_label': db.region_label,
            'connection_method': db.connection_method,
            'labels': [entry['date'].isoformat() for entry in series[db.id]],
            'cold': [entry['cold_latency_avg'] for entry in series[db.id]],
            'hot': [entry['hot_latency_avg'] for entry in series[db.id]],
        }
        for db in visible
    ]

    return render_template(
        'history.html',
        active_page='history',
        params=params,
        charts=charts,
        window_days=WINDOW_DAYS,
    )


@bp.route('/health')
def health_check():
    """Health check endpoint."""
    return jsonify({"status": "healthy"}), 200
