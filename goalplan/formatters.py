"""Display formatting for money, percentages, horizons and dates."""

from __future__ import annotations

from datetime import datetime
import math

NOT_AVAILABLE = "Not available"

ZERO_FRACTION_CURRENCIES = {"INR", "JPY", "KRW", "VND"}

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
    "KRW": "₩",
}


def format_money(amount: float, currency: str = "USD", *, digits: int | None = None) -> str:
    if not math.isfinite(amount):
        return NOT_AVAILABLE
    code = currency.upper()
    if digits is None:
        digits = 0 if code in ZERO_FRACTION_CURRENCIES else 2
    sign = "-" if amount < 0 else ""
    body = f"{abs(amount):,.{digits}f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol is None:
        return f"{sign}{code} {body}"
    return f"{sign}{symbol}{body}"


def format_percent(rate: float) -> str:
    """Format a percentage given in points (6.5 -> '6.5%')."""
    if not math.isfinite(rate):
        return NOT_AVAILABLE
    if float(rate).is_integer():
        return f"{rate:.0f}%"
    return f"{rate:.1f}%"


def format_horizon(years: int = 0, months: int = 0, total_months: float | None = None) -> str:
    if total_months is not None and math.isfinite(total_months):
        total = max(round(total_months), 0)
    else:
        total = max(round(years), 0) * 12 + max(round(months), 0)

    whole_years, rest = divmod(total, 12)
    parts: list[str] = []
    if whole_years > 0:
        parts.append(f"{whole_years} {'year' if whole_years == 1 else 'years'}")
    if rest > 0:
        parts.append(f"{rest} {'month' if rest == 1 else 'months'}")
    return " ".join(parts) if parts else "0 months"


def format_date(value: datetime, *, with_day: bool = True) -> str:
    if with_day:
        return f"{value:%B} {value.day}, {value.year}"
    return f"{value:%B %Y}"
