"""
Sidebar grouping for the database picker.

Neon databases are nested by connection method, then region label; other
providers are listed flat.
"""
from collections import OrderedDict

from latency_dashboard.config import CONNECTION_LABELS, PROVIDER_LABELS


def _region_group(region_label, method, dbs, selected):
    ids = [db.id for db in dbs]
    return {
        'region_label': region_label,
        'connection_method': method,
        'database_ids': ids,
        'all_selected': all(i in selected for i in ids),
        'any_selected': any(i in selected for i in ids),
    }


def sidebar_groups(databases, selected_ids):
    """
    [{'provider': 'Neon Postgres', 'nested': True, 'methods': [
        {'connection_method': 'http', 'label': ..., 'regions': [region group, ...]}]},
     {'provider': 'other', 'nested': False, 'databases': [{'id', 'name', 'region_label', 'selected'}]}]
    """
    selected = set(selected_ids)
    by_provider = OrderedDict()
    for db in databases:
        by_provider.setdefault(db.provider, []).append(db)

    groups = []
    for provider, dbs in by_provider.items():
        label = PROVIDER_LABELS.get(provider, provider)
        if provider != 'neon':
            groups.append({
                'provider': label,
                'nested': False,
                'databases': [
                    {'id': db.id, 'name': db.name, 'region_label': db.region_label,
                     'selected': db.id in selected}
                    for db in dbs
                ],
            })
            continue

        by_method = {}
        for db in dbs:
            by_method.setdefault(db.connection_method, {}).setdefault(db.region_label, []).append(db)

        methods = []
        for method in sorted(by_method):
            regions = by_method[method]
            methods.append({
                'connection_method': method,
                'label': CONNECTION_LABELS.get(method, method),
                'regions': [
                    _region_group(region_label, method, regions[region_label], selected)
                    for region_label in sorted(regions)
                ],
            })
        groups.append({'provider': label, 'nested': True, 'methods': methods})

    return groups
