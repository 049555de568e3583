"""
TargetDatabase model — one benchmarked database endpoint.

connection_url and neon_project_id are secrets; the data layer never selects them.
"""
from sqlalchemy import Column, Integer, String, Enum, ForeignKey, UniqueConstraint

from latency_dashboard.database import Base


class TargetDatabase(Base):
    __tablename__ = 'databases'
    __table_args__ = (
        UniqueConstraint(
            'function_id', 'connection_method', 'region_code',
            name='uq_databases_function_connection_region',
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    provider = Column(String(50), nullable=False)
    region_code = Column(String(50), nullable=False)
    region_label = Column(String(255), nullable=False)
    function_id = Column(Integer, ForeignKey('functions.id'), nullable=False)
    connection_method = Column(Enum('http', 'ws', 'tcp', name='connection_method'), nullable=False)
    connection_url = Column(String(255), nullable=False)
    neon_project_id = Column(String(255), nullable=False)
