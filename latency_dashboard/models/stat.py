"""
Stat model — a single latency measurement written by the benchmark runner.
"""
from sqlalchemy import Column, Integer, Numeric, DateTime, Enum, ForeignKey

from latency_dashboard.database import Base


class Stat(Base):
    __tablename__ = 'stats'

    id = Column(Integer, primary_key=True, autoincrement=True)
    date_time = Column(DateTime, nullable=False, index=True)
    function_id = Column(Integer, ForeignKey('functions.id'), nullable=False)
    database_id = Column(Integer, ForeignKey('databases.id'), nullable=False)
    latency_ms = Column(Numeric(10, 2), nullable=False)
    query_type = Column(Enum('cold', 'hot', name='query_type'), nullable=False)
