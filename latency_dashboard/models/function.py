"""
Function model — a serverless function deployment the benchmark queries from.
"""
from sqlalchemy import Column, Integer, String, Enum

from latency_dashboard.database import Base


class Function(Base):
    __tablename__ = 'functions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    region_code = Column(String(50), nullable=False)
    region_label = Column(String(255), nullable=False)
    platform = Column(Enum('vercel', name='platform'), nullable=False)
