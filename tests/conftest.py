"""Shared test fixtures."""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from unittest.mock import patch
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from latency_dashboard.database import Base


class FakeRedis:
    """Minimal in-memory Redis fake for circuit breaker state."""

    def __init__(self):
        self.get_store = {}
        self.hash_store = {}

    def get(self, key):
        return self.get_store.get(key)

    def set(self, key, value):
        self.get_store[key] = str(value)

    def incr(self, key):
        val = int(self.get_store.get(key, 0)) + 1
        self.get_store[key] = str(val)
        return val

    def delete(self, *keys):
        for k in keys:
            self.get_store.pop(k, None)
            self.hash_store.pop(k, None)

    def hset(self, key, field, value):
        self.hash_store.setdefault(key, {})[field] = str(value)

    def hincrby(self, key, field, amount):
        h = self.hash_store.setdefault(key, {})
        h[field] = str(int(h.get(field, 0)) + amount)

    def hgetall(self, key):
        return dict(self.hash_store.get(key, {}))

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:
    """Fake Redis pipeline that applies queued commands on execute()."""

    def __init__(self, redis):
        self._redis = redis
        self._ops = []

    def __getattr__(self, name):
        def queue(*args):
            self._ops.append((name, args))
            return self
        return queue

    def execute(self):
        for name, args in self._ops:
            getattr(self._redis, name)(*args)
        self._ops = []


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created."""
    engine = create_engine('sqlite:///:memory:')
    import latency_dashboard.models.function
    import latency_dashboard.models.target_database
    import latency_dashboard.models.stat
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """SQLAlchemy session bound to in-memory SQLite. Rolls back after each test."""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(autouse=True)
def patch_get_session(db_session):
    """Route all get_session() calls to the test session.

    close() is disabled so the data layer's finally blocks don't
    invalidate the shared test session.
    """
    _real_close = db_session.close
    db_session.close = lambda: None
    with patch('latency_dashboard.database.get_session', return_value=db_session), \
            patch('latency_dashboard.services.benchmark_data.get_session', return_value=db_session):
        yield db_session
    db_session.close = _real_close


@pytest.fixture(autouse=True)
def fake_redis():
    """In-memory Redis behind extensions.redis_client; breaker registry starts empty."""
    from latency_dashboard.services import circuit_breaker
    fake = FakeRedis()
    circuit_breaker._registry.clear()
    with patch('latency_dashboard.extensions.redis_client', fake):
        yield fake
    circuit_breaker._registry.clear()


@pytest.fixture
def app():
    """Flask test app."""
    from latency_dashboard import create_app
    app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def seeded(db_session):
    """
    Two functions, four Neon databases and a handful of stats.

        functions: 1 eu-central-1, 2 us-east-1
        databases: 1 eu http, 2 eu ws, 3 us http, 4 us tcp
        stats (one day ago): fn1→db1 hot 10, 20 / cold 300; fn1→db3 hot 80; fn2→db3 hot 12.5
        stats (40 days ago): fn1→db1 hot 999, outside the window
    """
    from latency_dashboard.models.function import Function
    from latency_dashboard.models.stat import Stat
    from latency_dashboard.models.target_database import TargetDatabase

    db_session.add_all([
        Function(id=1, name='vercel-fra1', region_code='eu-central-1',
                 region_label='Europe Central 1', platform='vercel'),
        Function(id=2, name='vercel-iad1', region_code='us-east-1',
                 region_label='US East 1', platform='vercel'),
    ])
    db_session.flush()

    databases = [
        (1, 'neon-eu-http', 'eu-central-1', 'Europe Central 1', 1, 'http'),
        (2, 'neon-eu-ws', 'eu-central-1', 'Europe Central 1', 1, 'ws'),
        (3, 'neon-us-http', 'us-east-1', 'US East 1', 2, 'http'),
        (4, 'neon-us-tcp', 'us-east-1', 'US East 1', 2, 'tcp'),
    ]
    for db_id, name, code, label, fn_id, method in databases:
        db_session.add(TargetDatabase(
            id=db_id, name=name, provider='neon', region_code=code, region_label=label,
            function_id=fn_id, connection_method=method,
            connection_url=f'postgresql://user:secret@{name}.example.invalid/db',
            neon_project_id=f'project-{name}',
        ))
    db_session.flush()

    recent = datetime.now() - timedelta(days=1)
    old = datetime.now() - timedelta(days=40)
    stats = [
        (recent, 1, 1, '10.00', 'hot'),
        (recent, 1, 1, '20.00', 'hot'),
        (recent, 1, 1, '300.00', 'cold'),
        (recent, 1, 3, '80.00', 'hot'),
        (recent, 2, 3, '12.50', 'hot'),
        (old, 1, 1, '999.00', 'hot'),
    ]
    for taken_at, fn_id, db_id, latency, query_type in stats:
        db_session.add(Stat(date_time=taken_at, function_id=fn_id, database_id=db_id,
                            latency_ms=Decimal(latency), query_type=query_type))
    db_session.commit()
    return db_session
