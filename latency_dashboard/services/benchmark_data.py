"""
Benchmark data service — read-only access to functions, databases and stats.

Every read goes through the benchmark_db circuit breaker. Any failure
(SQLAlchemy error or open circuit) surfaces as a single DataUnavailableError
so the web layer can render one "data unavailable" state.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from latency_dashboard.config import (
    BREAKER_NAME, BREAKER_FAILURE_THRESHOLD, BREAKER_RESET_TIMEOUT,
)
from latency_dashboard.database import get_session
from latency_dashboard.models.function import Function
from latency_dashboard.models.stat import Stat
from latency_dashboard.models.target_database import TargetDatabase
from latency_dashboard.services.circuit_breaker import CircuitOpenError, get_breaker

logger = logging.getLogger('services.benchmark_data')


class DataUnavailableError(Exception):
    """The benchmark store could not be read."""


@dataclass(frozen=True)
class FunctionRegion:
    id: int
    name: str
    region_code: str
    region_label: str


@dataclass(frozen=True)
class DatabaseTarget:
    id: int
    name: str
    provider: str
    region_code: str
    region_label: str
    connection_method: str   # 'http' | 'ws' | 'tcp'


@dataclass(frozen=True)
class Observation:
    function_id: int
    database_id: int
    query_type: str          # 'cold' | 'hot'
    latency_ms: Decimal
    timestamp: datetime


@dataclass(frozen=True)
class AverageLatency:
    function_id: int
    database_id: int
    query_type: str
    latency_ms: Optional[Decimal]


def _read(label, loader):
    """Run loader(session) through the breaker with a fresh session."""
    breaker = get_breaker(
        BREAKER_NAME,
        failure_threshold=BREAKER_FAILURE_THRESHOLD,
        reset_timeout=BREAKER_RESET_TIMEOUT,
    )
    try:
        session = get_session()
    except SQLAlchemyError as e:
        logger.error("Failed to get session for %s: %s", label, e)
        raise DataUnavailableError(label) from e
    try:
        return breaker.call(loader, session)
    except CircuitOpenError as e:
        logger.warning("Skipping %s: %s", label, e)
        raise DataUnavailableError(label) from e
    except SQLAlchemyError as e:
        logger.error("Failed to load %s", label, exc_info=True)
        raise DataUnavailableError(label) from e
    finally:
        session.close()


def fetch_reference_data() -> Tuple[List[FunctionRegion], List[DatabaseTarget]]:
    """All functions and databases, ordered by id. Connection secrets are never selected."""
    def load(session):
        functions = [
            FunctionRegion(id=row.id, name=row.name,
                           region_code=row.region_code, region_label=row.region_label)
            for row in session.query(
                Function.id, Function.name, Function.region_code, Function.region_label,
            ).order_by(Function.id).all()
        ]
        databases = [
            DatabaseTarget(id=row.id, name=row.name, provider=row.provider,
                           region_code=row.region_code, region_label=row.region_label,
                           connection_method=row.connection_method)
            for row in session.query(
                TargetDatabase.id,
                TargetDatabase.name,
                TargetDatabase.provider,
                TargetDatabase.region_code,
                TargetDatabase.region_label,
                TargetDatabase.connection_method,
            ).order_by(TargetDatabase.id).all()
        ]
        return functions, databases

    return _read('reference data', load)


def fetch_recent_observations(window_days: int,
                              now: Optional[datetime] = None) -> List[Observation]:
    """Raw measurements from the trailing window (timestamp >= now - window_days)."""
    cutoff = (now or datetime.now()) - timedelta(days=window_days)

    def load(session):
        rows = session.query(
            Stat.function_id, Stat.database_id, Stat.query_type,
            Stat.latency_ms, Stat.date_time,
        ).filter(
            Stat.date_time >= cutoff,
        ).order_by(Stat.date_time).all()
        return [
            Observation(function_id=r.function_id, database_id=r.database_id,
                        query_type=r.query_type, latency_ms=Decimal(str(r.latency_ms)),
                        timestamp=r.date_time)
            for r in rows
        ]

    return _read('recent observations', load)


def fetch_average_latency(window_days: int,
                          now: Optional[datetime] = None) -> List[AverageLatency]:
    """SQL-side AVG(latency_ms) per (function, database, query type) over the window."""
    cutoff = (now or datetime.now()) - timedelta(days=window_days)

    def load(session):
        rows = session.query(
            Stat.function_id,
            Stat.database_id,
            Stat.query_type,
            func.avg(Stat.latency_ms).label('avg_latency_ms'),
        ).filter(
            Stat.date_time >= cutoff,
        ).group_by(
            Stat.function_id, Stat.database_id, Stat.query_type,
        ).all()
        return [
            AverageLatency(
                function_id=r.function_id, database_id=r.database_id, query_type=r.query_type,
                latency_ms=Decimal(str(r.avg_latency_ms)) if r.avg_latency_ms is not None else None,
            )
            for r in rows
        ]

    return _read('average latency', load)
