"""
Investment domain model.

A single recorded stock purchase, persisted in the ``investments`` table.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, SQLModel

# NUMERIC(10, 2): eight integer digits, two fractional.
PRICE_MAX_DIGITS = 10
PRICE_DECIMAL_PLACES = 2

# Largest value of a 32-bit INTEGER column (``id``, ``shares``).
INTEGER_MAX = 2**31 - 1


class Investment(SQLModel, table=True):
    """
    SQLModel / SQLAlchemy table definition for investments.

    - ``id`` is an auto-incrementing integer that is never reused, even after
      the newest row is deleted (``sqlite_autoincrement`` on SQLite; a serial
      sequence on PostgreSQL).
    - ``purchase_price`` is an exact NUMERIC(10, 2).
    - ``purchase_date`` is a date-only column.
    - ``created_at`` is indexed because listings sort on it.
    """

    __tablename__ = "investments"  # type: ignore[assignment]

    # Backstops for the validation layer; also cover seed data and manual SQL.
    __table_args__ = (
        CheckConstraint("shares > 0", name="ck_investments_shares_positive"),
        CheckConstraint("purchase_price > 0", name="ck_investments_price_positive"),
        CheckConstraint("length(company_name) > 0", name="ck_investments_company_not_empty"),
        CheckConstraint("length(ticker_symbol) > 0", name="ck_investments_ticker_not_empty"),
        CheckConstraint("ticker_symbol = upper(ticker_symbol)", name="ck_investments_ticker_upper"),
        {"sqlite_autoincrement": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    company_name: str
    ticker_symbol: str = Field(index=True)
    shares: int
    purchase_price: Decimal = Field(
        max_digits=PRICE_MAX_DIGITS, decimal_places=PRICE_DECIMAL_PLACES
    )
    purchase_date: date
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Investment id={self.id} ticker={self.ticker_symbol} "
            f"shares={self.shares} price={self.purchase_price}>"
        )
