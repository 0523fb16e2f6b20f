"""SQLAlchemy models for the narrative stores.

Both collections use load-all/overwrite-all semantics, so each row keeps
the serialized record in `payload` plus its position in the collection.
"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class StickySignalRow(Base):
    """Table: sticky_signals"""

    __tablename__ = "sticky_signals"

    position = Column(Integer, primary_key=True)
    record_id = Column(Text, nullable=False, unique=True)
    payload = Column(Text, nullable=False)  # JSON-encoded StickySignal
    recorded_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<StickySignalRow(id={self.record_id})>"


class NarrativeScoreRow(Base):
    """Table: narrative_history"""

    __tablename__ = "narrative_history"

    position = Column(Integer, primary_key=True)
    record_id = Column(Text, nullable=False)
    payload = Column(Text, nullable=False)  # JSON-encoded NarrativeScore
    recorded_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<NarrativeScoreRow(id={self.record_id})>"
