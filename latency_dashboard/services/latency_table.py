"""
Latency table pivot — function rows × region/connection column groups.

Columns group the visible databases by (region label, connection method);
rows are the functions that survive the region filter. Both are ordered by
the canonical region order in config.REGION_ORDER.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from latency_dashboard.config import CONNECTION_LABELS, LATENCY_BANDS, REGION_ORDER
from latency_dashboard.services.view_state import (
    ViewFilterState, filter_functions_by_region, is_same_region, visible_databases,
)

_REGION_INDEX = {code: i for i, (code, _label) in enumerate(REGION_ORDER)}


@dataclass
class RegionGroup:
    region_label: str
    region_code: str
    connection_method: str
    databases: List = field(default_factory=list)

    @property
    def key(self):
        return (self.region_label, self.connection_method)


def region_index(region_code: str) -> int:
    """Position in the canonical order; unknown regions sort last."""
    return _REGION_INDEX.get(region_code.lower(), len(REGION_ORDER))


def region_groups(databases) -> List[RegionGroup]:
    groups: Dict[tuple, RegionGroup] = {}
    for db in databases:
        key = (db.region_label, db.connection_method)
        if key not in groups:
            groups[key] = RegionGroup(
                region_label=db.region_label,
                region_code=db.region_code,
                connection_method=db.connection_method,
            )
        groups[key].databases.append(db)
    return sorted(
        groups.values(),
        key=lambda g: (region_index(g.region_code), g.connection_method),
    )


def sort_functions(functions) -> List:
    return sorted(functions, key=lambda fn: region_index(fn.region_code))


def group_latency(latency: Dict, function_id: int, group: RegionGroup,
                  query_type: str) -> Optional[float]:
    """Mean of the group's positive database averages for a function, or None."""
    per_db = latency.get(query_type, {}).get(function_id, {})
    values = [
        v for v in (per_db.get(db.id) for db in group.databases)
        if isinstance(v, (int, float)) and v > 0
    ]
    if not values:
        return None
    return sum(values) / len(values)


def latency_band(latency: Optional[float], query_type: str) -> str:
    if latency is None:
        return 'none'
    for band, threshold in LATENCY_BANDS[query_type]:
        if latency > threshold:
            return band
    return 'fast'


def format_latency(latency: Optional[float]) -> str:
    if latency is None:
        return 'N/A'
    return f'{latency:.2f}ms'


def shown_query_types(query_type_filter: str) -> List[str]:
    return ['cold', 'hot'] if query_type_filter == 'both' else [query_type_filter]


def build_table(state: ViewFilterState, functions, databases, latency: Dict) -> Dict:
    """
    Assemble the table for the current view.

    Returns a JSON-serializable dict:
        {'query_types': [...], 'columns': [...], 'rows': [{'function': ..., 'cells': [...]}]}
    """
    visible = visible_databases(state, databases)
    groups = region_groups(visible)
    query_types = shown_query_types(state.query_type_filter)
    functions = filter_functions_by_region(sort_functions(functions), visible, state.region_filter)

    columns = [
        {
            'region_label': g.region_label,
            'region_code': g.region_code,
            'connection_method': g.connection_method,
            'connection_label': CONNECTION_LABELS.get(g.connection_method, g.connection_method),
            'database_ids': [db.id for db in g.databases],
        }
        for g in groups
    ]

    rows = []
    for fn in functions:
        cells = []
        for g in groups:
            cell = {
                'same_region': is_same_region(g.region_code, fn.region_code),
                'values': {},
            }
            for qt in query_types:
                value = group_latency(latency, fn.id, g, qt)
                cell['values'][qt] = {
                    'latency_ms': round(value, 2) if value is not None else None,
                    'text': format_latency(value),
                    'band': latency_band(value, qt),
                }
            cells.append(cell)
        rows.append({
            'function': {
                'id': fn.id,
                'name': fn.name,
                'region_code': fn.region_code,
                'region_label': fn.region_label,
            },
            'cells': cells,
        })

    return {
        'query_types': query_types,
        'columns': columns,
        'rows': rows,
        'selected_count': len(visible),
        'function_count': len(functions),
    }
