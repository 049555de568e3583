"""
Dashboard view state — filter dimensions, transitions, and the URL codec.

ViewFilterState is immutable; every transition returns a new state and is
applied in a single step. The web layer decodes the state from the query
string, applies at most one transition, and redirects to encode(state).

Conflict rule between the connection filter and the database selection:
  - changing the connection filter prunes selected databases that no longer
    match, unless that would empty the selection, in which case the filter
    widens to 'all' and the selection is kept;
  - adding a database whose connection method conflicts with the active
    filter widens the filter to 'all'.
"""
from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterable, List, Mapping

from latency_dashboard.config import (
    CONNECTION_FILTERS, QUERY_TYPE_FILTERS, REGION_FILTERS,
    DEFAULT_CONNECTION_FILTER, DEFAULT_QUERY_TYPE_FILTER, DEFAULT_REGION_FILTER,
)

# query-string value ↔ state value
_QUERIES_PARAM = {'cold': 'cold', 'hot': 'hot', 'all': 'both'}
_REGIONS_PARAM = {'match': 'matching', 'all': 'all'}

URL_PARAMS = ('databases', 'connection', 'queries', 'regions')


@dataclass(frozen=True)
class ViewFilterState:
    selected_database_ids: FrozenSet[int]
    connection_filter: str = DEFAULT_CONNECTION_FILTER
    query_type_filter: str = DEFAULT_QUERY_TYPE_FILTER
    region_filter: str = DEFAULT_REGION_FILTER


def initial_state(databases) -> ViewFilterState:
    return ViewFilterState(selected_database_ids=frozenset(db.id for db in databases))


def _matches(db, connection_filter) -> bool:
    return connection_filter == 'all' or db.connection_method == connection_filter


def _widen_for(state, added_ids, databases) -> str:
    """Connection filter after adding added_ids: 'all' if any of them conflicts."""
    if state.connection_filter == 'all':
        return 'all'
    by_id = {db.id: db for db in databases}
    for db_id in added_ids:
        db = by_id.get(db_id)
        if db is not None and not _matches(db, state.connection_filter):
            return 'all'
    return state.connection_filter


# ── Transitions ──────────────────────────────────────────────────────────────

def toggle_database(state: ViewFilterState, database_id: int, databases) -> ViewFilterState:
    if database_id in state.selected_database_ids:
        return replace(state, selected_database_ids=state.selected_database_ids - {database_id})
    return replace(
        state,
        selected_database_ids=state.selected_database_ids | {database_id},
        connection_filter=_widen_for(state, [database_id], databases),
    )


def toggle_group(state: ViewFilterState, group_database_ids: Iterable[int], checked: bool,
                 databases) -> ViewFilterState:
    """Sidebar region-group checkbox: select or deselect every database in the group."""
    group = frozenset(group_database_ids)
    if not checked:
        return replace(state, selected_database_ids=state.selected_database_ids - group)
    added = group - state.selected_database_ids
    return replace(
        state,
        selected_database_ids=state.selected_database_ids | group,
        connection_filter=_widen_for(state, added, databases),
    )


def toggle_all(state: ViewFilterState, databases) -> ViewFilterState:
    """'Select all' / 'Deselect all' button."""
    all_ids = frozenset(db.id for db in databases)
    if all_ids and all_ids <= state.selected_database_ids:
        return replace(state, selected_database_ids=frozenset())
    added = all_ids - state.selected_database_ids
    return replace(
        state,
        selected_database_ids=state.selected_database_ids | all_ids,
        connection_filter=_widen_for(state, added, databases),
    )


def set_connection_filter(state: ViewFilterState, method: str, databases) -> ViewFilterState:
    if method not in CONNECTION_FILTERS:
        raise ValueError(f'Unknown connection filter: {method!r}')

    if not state.selected_database_ids:
        # Nothing selected: pick every database the new filter shows
        matching = frozenset(db.id for db in databases if _matches(db, method))
        return replace(state, connection_filter=method, selected_database_ids=matching)

    if method == 'all':
        return replace(state, connection_filter=method)

    by_id = {db.id: db for db in databases}
    kept = frozenset(
        db_id for db_id in state.selected_database_ids
        if db_id in by_id and _matches(by_id[db_id], method)
    )
    if not kept:
        return replace(state, connection_filter='all')
    return replace(state, connection_filter=method, selected_database_ids=kept)


def set_query_type_filter(state: ViewFilterState, value: str) -> ViewFilterState:
    if value not in QUERY_TYPE_FILTERS:
        raise ValueError(f'Unknown query type filter: {value!r}')
    return replace(state, query_type_filter=value)


def set_region_filter(state: ViewFilterState, value: str) -> ViewFilterState:
    if value not in REGION_FILTERS:
        raise ValueError(f'Unknown region filter: {value!r}')
    return replace(state, region_filter=value)


# ── Derived views ────────────────────────────────────────────────────────────

def visible_databases(state: ViewFilterState, databases) -> List:
    """Selected databases matching the connection filter, in reference order."""
    return [
        db for db in databases
        if db.id in state.selected_database_ids and _matches(db, state.connection_filter)
    ]


def is_same_region(region_code_a: str, region_code_b: str) -> bool:
    return region_code_a.lower() == region_code_b.lower()


def filter_functions_by_region(functions, selected_databases, region_filter: str) -> List:
    """With 'matching', keep functions sharing a region code with any selected database."""
    if region_filter == 'all':
        return list(functions)
    codes = {db.region_code.lower() for db in selected_databases}
    return [fn for fn in functions if fn.region_code.lower() in codes]


# ── URL codec ────────────────────────────────────────────────────────────────

def encode(state: ViewFilterState, databases) -> Dict[str, str]:
    all_ids = {db.id for db in databases}
    selected = state.selected_database_ids
    if not selected:
        databases_param = 'none'
    elif all_ids and set(selected) == all_ids:
        databases_param = 'all'
    else:
        databases_param = ','.join(str(i) for i in sorted(selected))

    return {
        'databases': databases_param,
        'connection': state.connection_filter,
        'queries': 'all' if state.query_type_filter == 'both' else state.query_type_filter,
        'regions': 'match' if state.region_filter == 'matching' else 'all',
    }


def _decode_databases(raw, all_ids) -> FrozenSet[int]:
    if raw is None or raw == 'all':
        # Absent parameter is a first load: everything selected
        return frozenset(all_ids)
    if raw == 'none':
        return frozenset()
    tokens = [t.strip() for t in raw.split(',') if t.strip()]
    if not tokens:
        return frozenset(all_ids)
    try:
        ids = frozenset(int(t) for t in tokens)
    except ValueError:
        # '²' passes str.isdigit() but not int()
        return frozenset(all_ids)
    return (ids & frozenset(all_ids)) or frozenset(all_ids)


def decode(params: Mapping[str, str], databases) -> ViewFilterState:
    """Build a state from query parameters; each malformed parameter falls back to its default."""
    all_ids = [db.id for db in databases]

    connection = params.get('connection')
    if connection not in CONNECTION_FILTERS:
        connection = DEFAULT_CONNECTION_FILTER

    return ViewFilterState(
        selected_database_ids=_decode_databases(params.get('databases'), all_ids),
        connection_filter=connection,
        query_type_filter=_QUERIES_PARAM.get(params.get('queries'), DEFAULT_QUERY_TYPE_FILTER),
        region_filter=_REGIONS_PARAM.get(params.get('regions'), DEFAULT_REGION_FILTER),
    )


def is_canonical(params: Mapping[str, str], state: ViewFilterState, databases) -> bool:
    """True when the view parameters in params already equal encode(state)."""
    encoded = encode(state, databases)
    return all(params.get(key) == encoded[key] for key in URL_PARAMS)
