from __future__ import annotations

from datetime import date

from sqlalchemy import BigInteger, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from parlor.infrastructure.db.models.base import Base


class DailyAggregateModel(Base):
    __tablename__ = "daily_aggregates"

    business_date: Mapped[date] = mapped_column(Date, primary_key=True)
    total_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    session_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    friendly_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class DailyBreakdownModel(Base):
    __tablename__ = "daily_aggregate_breakdowns"

    business_date: Mapped[date] = mapped_column(Date, primary_key=True)
    dimension: Mapped[str] = mapped_column(String(20), primary_key=True)
    key: Mapped[str] = mapped_column(String(20), primary_key=True)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
