#!/usr/bin/env python3
"""
Seed benchmark data for verifying the dashboard locally.

Creates one Vercel function per region in SEED_REGIONS, a Neon database per
(region, connection method) paired with the function in the same region, and
WINDOW_DAYS days of cold/hot measurements from every function to every
database. Latency grows with the distance between function and database
region so the same-region diagonal stands out in the table.

Usage:
    python scripts/seed_test_data.py          # seed
    python scripts/seed_test_data.py --clear  # wipe seeded data first

Requires: DATABASE_URL set (or defaults to sqlite:///local.db).
"""
import sys
import os
import random
import argparse
from datetime import datetime, timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from latency_dashboard.config import CONNECTION_METHODS, REGION_ORDER, WINDOW_DAYS
from latency_dashboard.database import get_session, engine, Base
from latency_dashboard.models.function import Function
from latency_dashboard.models.stat import Stat
from latency_dashboard.models.target_database import TargetDatabase

SEED_PREFIX = 'seed-'

SEED_REGIONS = ['eu-central-1', 'us-east-1', 'us-west-2', 'ap-southeast-1']

# Base hot latency in ms per connection method; cold adds a startup penalty
BASE_HOT_MS = {'http': 8.0, 'ws': 12.0, 'tcp': 5.0}
COLD_STARTUP_MS = 450.0
CROSS_REGION_MS = 70.0
RUNS_PER_DAY = 4


def _label(region_code):
    return dict(REGION_ORDER).get(region_code, region_code)


def seed_functions(session):
    functions = {}
    for code in SEED_REGIONS:
        fn = Function(
            name=f'{SEED_PREFIX}vercel-{code}',
            region_code=code,
            region_label=_label(code),
            platform='vercel',
        )
        session.add(fn)
        functions[code] = fn
    session.flush()
    print(f'  + {len(functions)} functions')
    return functions


def seed_databases(session, functions):
    databases = []
    for code in SEED_REGIONS:
        for method in CONNECTION_METHODS:
            db = TargetDatabase(
                name=f'{SEED_PREFIX}neon-{code}-{method}',
                provider='neon',
                region_code=code,
                region_label=_label(code),
                function_id=functions[code].id,
                connection_method=method,
                connection_url=f'postgresql://seed:seed@{code}.example.invalid/neondb',
                neon_project_id=f'{SEED_PREFIX}{code}',
            )
            session.add(db)
            databases.append(db)
    session.flush()
    print(f'  + {len(databases)} databases')
    return databases


def seed_stats(session, functions, databases, days, rng):
    now = datetime.now()
    count = 0
    for day in range(days):
        for run in range(RUNS_PER_DAY):
            taken_at = now - timedelta(days=day, hours=run * 24 // RUNS_PER_DAY)
            for fn in functions.values():
                for db in databases:
                    distance = 0.0 if fn.region_code == db.region_code else CROSS_REGION_MS
                    hot = BASE_HOT_MS[db.connection_method] + distance + rng.uniform(0, 6)
                    cold = hot + COLD_STARTUP_MS + rng.uniform(0, 250)
                    for query_type, latency in (('hot', hot), ('cold', cold)):
                        session.add(Stat(
                            date_time=taken_at,
                            function_id=fn.id,
                            database_id=db.id,
                            latency_ms=round(latency, 2),
                            query_type=query_type,
                        ))
                        count += 1
    session.flush()
    print(f'  + {count} stats over {days} days')


def clear_seeded_data(session):
    """Remove all seeded functions, databases and their stats."""
    fn_ids = [f.id for f in session.query(Function).filter(Function.name.like(f'{SEED_PREFIX}%')).all()]
    db_ids = [d.id for d in session.query(TargetDatabase).filter(
        TargetDatabase.name.like(f'{SEED_PREFIX}%')).all()]

    if not fn_ids and not db_ids:
        print('No seeded data found.')
        return

    deleted_stats = session.query(Stat).filter(
        Stat.function_id.in_(fn_ids) | Stat.database_id.in_(db_ids)
    ).delete(synchronize_session=False)
    deleted_dbs = session.query(TargetDatabase).filter(
        TargetDatabase.id.in_(db_ids)).delete(synchronize_session=False)
    deleted_fns = session.query(Function).filter(
        Function.id.in_(fn_ids)).delete(synchronize_session=False)
    session.commit()

    print(f'Cleared {deleted_fns} functions, {deleted_dbs} databases, {deleted_stats} stats.')


def main():
    parser = argparse.ArgumentParser(description='Seed benchmark data for local UI verification')
    parser.add_argument('--clear', action='store_true', help='Clear seeded data before (or instead of) seeding')
    parser.add_argument('--clear-only', action='store_true', help='Only clear, do not re-seed')
    parser.add_argument('--days', type=int, default=WINDOW_DAYS, help='Days of measurements to generate')
    parser.add_argument('--seed', type=int, default=42, help='Random seed for latency jitter')
    args = parser.parse_args()

    # Ensure tables exist (for SQLite local dev)
    Base.metadata.create_all(engine)

    session = get_session()
    try:
        if args.clear or args.clear_only:
            clear_seeded_data(session)
            if args.clear_only:
                return

        print('Seeding benchmark data...')
        functions = seed_functions(session)
        databases = seed_databases(session, functions)
        seed_stats(session, functions, databases, args.days, random.Random(args.seed))
        session.commit()
        print('\nDone! Visit http://localhost:8080/ to verify.')

    except Exception as e:
        session.rollback()
        print(f'Error: {e}')
        raise
    finally:
        session.close()


if __name__ == '__main__':
    main()
