"""
Formatting helpers for amounts, dates and rent periods in replies and receipts.
"""
from datetime import date, datetime, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# Locales whose short dates put the month first
_MONTH_FIRST_LOCALES = {"en-US"}

DEFAULT_TIMEZONE = "Africa/Kampala"


def format_amount(amount: Union[int, float]) -> str:
    """Group thousands with commas: 500000 -> '500,000'."""
    return f"{int(amount):,}"


def to_local(value: datetime, tz: str = DEFAULT_TIMEZONE) -> datetime:
    """Convert ``value`` to ``tz``; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(tz))


def current_period(today: Optional[date] = None, tz: str = DEFAULT_TIMEZONE) -> str:
    """Calendar month of ``today`` (default: now in ``tz``) as YYYY-MM."""
    today = today or datetime.now(ZoneInfo(tz)).date()
    return today.strftime("%Y-%m")


def format_short_date(value: datetime, locale: str = "en-UG", tz: str = DEFAULT_TIMEZONE) -> str:
    """Numeric calendar date in ``tz``, day first unless the locale is month-first."""
    value = to_local(value, tz)
    if locale in _MONTH_FIRST_LOCALES:
        return f"{value.month}/{value.day}/{value.year}"
    return f"{value.day:02d}/{value.month:02d}/{value.year}"


def format_long_date(value: datetime, locale: str = "en-UG", tz: str = DEFAULT_TIMEZONE) -> str:
    """Long-form date in ``tz`` such as '19 October 2026'."""
    value = to_local(value, tz)
    month = MONTH_NAMES[value.month - 1]
    if locale in _MONTH_FIRST_LOCALES:
        return f"{month} {value.day}, {value.year}"
    return f"{value.day} {month} {value.year}"


def receipt_filename(tenant_name: str, period: str) -> str:
    """Document filename sent with a receipt."""
    return f"Receipt_{'_'.join(tenant_name.split())}_{period}.pdf"
