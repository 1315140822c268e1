"""SQLAlchemy models for local SQLite consultation storage.

Each row is one consultation. The full context and result are kept as JSON;
the scores and primary focus are also stored in columns so history can be
inspected with plain SQL.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class ConsultationRecord(Base):
    """A consultation computed for one business at one point in time."""

    __tablename__ = "consultations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    consultation_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    business_key: Mapped[str] = mapped_column(String(300), nullable=False)
    company_name: Mapped[str] = mapped_column(String(200), nullable=False)
    industry: Mapped[str] = mapped_column(String(100), nullable=False)
    business_stage: Mapped[str] = mapped_column(String(100), nullable=False)
    score_e: Mapped[int] = mapped_column(Integer, nullable=False)
    score_p: Mapped[int] = mapped_column(Integer, nullable=False)
    score_i: Mapped[int] = mapped_column(Integer, nullable=False)
    score_c: Mapped[int] = mapped_column(Integer, nullable=False)
    primary_focus: Mapped[str] = mapped_column(String(1), nullable=False)
    context_json: Mapped[str] = mapped_column(Text, nullable=False)
    result_json: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_consultation_key_created", "business_key", "created_at"),
    )
