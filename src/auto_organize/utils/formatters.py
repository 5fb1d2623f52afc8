"""Formatting utilities for display values."""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal


def format_currency(value: float) -> str:
    """Format a float as USD currency."""
    return f"${value:,.2f}"


def format_date(value: str | date | None) -> str:
    """Format an ISO date (or date) as MM/DD/YYYY; blank for None."""
    if not value:
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value).date()
        except ValueError:
            return value
    return value.strftime("%m/%d/%Y")


def round_money(value: float) -> float:
    """Round half-up to whole cents."""
    cents = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(cents)
