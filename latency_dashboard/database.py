"""
Engine and session factory for the benchmark store.

The dashboard only reads; stats are written by the benchmark runner. SQLite
backs local dev and tests, Postgres (Neon) backs production, where every
statement runs under DB_STATEMENT_TIMEOUT_MS so a slow store trips the
circuit breaker instead of hanging a page.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from latency_dashboard.config import (
    DATABASE_URL, DB_CONNECT_TIMEOUT, DB_POOL_SIZE, DB_STATEMENT_TIMEOUT_MS,
)


class Base(DeclarativeBase):
    pass


def normalize_url(raw):
    """postgres:// → postgresql:// (SQLAlchemy 2.x dropped the short alias)."""
    if raw.startswith('postgres://'):
        return 'postgresql://' + raw[len('postgres://'):]
    return raw


def engine_options(url):
    if url.startswith('sqlite'):
        return {'connect_args': {'check_same_thread': False}}
    return {
        'pool_pre_ping': True,
        'pool_size': DB_POOL_SIZE,
        'max_overflow': DB_POOL_SIZE * 2,
        # Neon closes idle connections; recycle before that happens
        'pool_recycle': 300,
        'connect_args': {
            'connect_timeout': DB_CONNECT_TIMEOUT,
            'options': f'-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}',
        },
    }


url = normalize_url(DATABASE_URL)
engine = create_engine(url, **engine_options(url))

SessionLocal = sessionmaker(bind=engine)


def get_session():
    """Return a new DB session; the caller closes it."""
    return SessionLocal()
