"""
Pydantic schemas for investment procedure inputs and outputs.

Inputs are validated here, before the service layer runs:

- ``InvestmentCreate``  for ``createInvestment``
- ``InvestmentUpdate``  for ``updateInvestment`` (sparse: only supplied fields change)
- ``InvestmentLookup``  for ``getInvestmentById``
- ``InvestmentDelete``  for ``deleteInvestment``

``InvestmentRead`` is the output shape of every procedure that returns a row.
Prices are fixed-point ``Decimal`` values rounded to cents and serialised as
JSON numbers; purchase dates are calendar dates with no time-of-day.
"""

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)

from investment_tracker.models.investment import (
    INTEGER_MAX,
    PRICE_DECIMAL_PLACES,
    PRICE_MAX_DIGITS,
)

_CENT = Decimal(1).scaleb(-PRICE_DECIMAL_PLACES)
PRICE_LIMIT = Decimal(10) ** (PRICE_MAX_DIGITS - PRICE_DECIMAL_PLACES)

UPDATABLE_FIELDS = (
    "company_name",
    "ticker_symbol",
    "shares",
    "purchase_price",
    "purchase_date",
)


def round_price(value: Decimal) -> Decimal:
    """Round a price to cents, halves away from zero."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def to_calendar_date(value: Any) -> Any:
    """
    Reduce datetime-like input to its UTC calendar date.

    Plain ``YYYY-MM-DD`` strings and ``date`` objects pass through untouched
    for pydantic to parse.  Aware datetimes are converted to UTC first; naive
    ones are taken as UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, str) and len(value.strip()) > 10:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(
                "purchase_date must be a date (YYYY-MM-DD) or an ISO-8601 datetime"
            ) from None
        return to_calendar_date(parsed)
    return value


class _InvestmentRules(BaseModel):
    """
    Per-field rules shared by create and update inputs.

    Validators let ``None`` through: on updates an omitted field is ``None``,
    and explicit nulls are rejected separately by ``InvestmentUpdate``.
    Numbers must arrive as JSON numbers; numeric text and booleans are
    rejected rather than coerced.
    """

    @field_validator("company_name", "ticker_symbol", check_fields=False)
    @classmethod
    def validate_not_blank(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        # Stored as given; whitespace-only counts as blank.
        if v is not None and not v.strip():
            label = "Company name" if info.field_name == "company_name" else "Ticker symbol"
            raise ValueError(f"{label} is required")
        return v

    @field_validator("shares", check_fields=False)
    @classmethod
    def validate_shares_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("Number of shares must be a positive integer")
        return v

    @field_validator("purchase_price", mode="before", check_fields=False)
    @classmethod
    def require_numeric_price(cls, v: Any) -> Any:
        if isinstance(v, bool) or not isinstance(v, (int, float, Decimal, type(None))):
            raise ValueError("Purchase price must be a number")
        if isinstance(v, float):
            # Decimal of the shortest repr, so 10.005 rounds as written.
            return Decimal(repr(v))
        return v

    @field_validator("purchase_price", check_fields=False)
    @classmethod
    def validate_price(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is None:
            return v
        if not v.is_finite():
            raise ValueError("Purchase price must be a number")
        if abs(v) < PRICE_LIMIT:
            v = round_price(v)
        if v <= 0:
            raise ValueError("Purchase price must be positive")
        if v >= PRICE_LIMIT:
            raise ValueError(f"Purchase price must be less than {PRICE_LIMIT}")
        return v

    @field_validator("purchase_date", mode="before", check_fields=False)
    @classmethod
    def validate_date_only(cls, v: Any) -> Any:
        return to_calendar_date(v)


class InvestmentCreate(_InvestmentRules):
    """Input of ``createInvestment``.  Every field is required."""

    company_name: str = Field(..., description="Name of the company", examples=["Apple Inc."])
    ticker_symbol: str = Field(
        ..., description="Ticker symbol; stored upper-case, otherwise as given", examples=["aapl"]
    )
    shares: int = Field(
        ..., strict=True, le=INTEGER_MAX, description="Number of shares purchased", examples=[100]
    )
    purchase_price: Decimal = Field(
        ..., description="Price per share, rounded to cents", examples=[150.25]
    )
    purchase_date: date = Field(
        ..., description="Calendar date of the purchase (ISO-8601)", examples=["2024-01-15"]
    )


class InvestmentUpdate(_InvestmentRules):
    """
    Input of ``updateInvestment``.

    Only fields present in the payload are applied; see :meth:`changes`.
    """

    id: int = Field(..., strict=True, description="Id of the investment to update")
    company_name: Optional[str] = None
    ticker_symbol: Optional[str] = None
    shares: Optional[int] = Field(None, strict=True, le=INTEGER_MAX)
    purchase_price: Optional[Decimal] = None
    purchase_date: Optional[date] = None

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "InvestmentUpdate":
        nulls = sorted(
            name
            for name in self.model_fields_set
            if name in UPDATABLE_FIELDS and getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"Fields cannot be set to null: {', '.join(nulls)}")
        return self

    def changes(self) -> Dict[str, Any]:
        """Mapping of field name to new value for the fields actually supplied."""
        return {
            name: getattr(self, name)
            for name in UPDATABLE_FIELDS
            if name in self.model_fields_set
        }


class InvestmentLookup(BaseModel):
    """Input of ``getInvestmentById``."""

    id: int = Field(..., strict=True, description="Id of the investment")


class InvestmentDelete(InvestmentLookup):
    """Input of ``deleteInvestment``."""


class InvestmentRead(BaseModel):
    """An investment as returned to callers."""

    id: int
    company_name: str
    ticker_symbol: str
    shares: int
    purchase_price: Decimal
    purchase_date: date
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("purchase_price")
    @classmethod
    def round_to_cents(cls, v: Decimal) -> Decimal:
        return round_price(v)

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive timestamps; they were written in UTC.
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_serializer("purchase_price")
    def serialize_decimal_as_number(self, v: Decimal) -> float:
        """Emit the price as a JSON number rather than pydantic's default string."""
        return float(v)
