import uuid

from sqlalchemy import Column, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    pass


class SearchHistory(Base):
    """Append-only record of every completed flight search."""

    __tablename__ = "search_history"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=True, index=True)
    query = Column(Text, nullable=False)
    origin = Column(String(3), nullable=False, index=True)
    destination = Column(String(3), nullable=False, index=True)
    departure_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=True)
    results_count = Column(Integer, nullable=False)
    search_time_ms = Column(Integer, nullable=False)
    cabin_class = Column(String(50), nullable=False)
    passengers = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
