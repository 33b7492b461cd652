"""SQLAlchemy table definitions for the latest-value table and the log."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class BankRateRow(Base):
    __tablename__ = "bank_rates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bank_name = Column(String(100), nullable=False)
    bank_class = Column(String(50), nullable=False, unique=True)
    dollar_buy_rate = Column(Float, nullable=False)
    dollar_sell_rate = Column(Float, nullable=False)
    updated_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True))


class BankRateLogRow(Base):
    __tablename__ = "bank_rates_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bank_name = Column(String(100), nullable=False)
    bank_class = Column(String(50), nullable=False, index=True)
    dollar_buy_rate = Column(Float, nullable=False)
    dollar_sell_rate = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True))


__all__ = ["Base", "BankRateRow", "BankRateLogRow"]
