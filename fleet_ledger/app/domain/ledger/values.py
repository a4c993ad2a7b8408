"""
Value helpers shared by the ledger derivations.

Read paths are defensive: unparseable dates become None and unusable
amounts become 0 instead of raising.
"""

import math
from datetime import date, datetime, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo

from fleet_ledger.app.core.config import settings


def ledger_zone() -> tzinfo:
    """Time zone the ledger's calendar (buckets, "today") is anchored to."""
    return ZoneInfo(settings.ledger_timezone)


def ledger_now() -> datetime:
    return datetime.now(ledger_zone())


def ledger_today() -> date:
    return ledger_now().date()


def parse_ledger_datetime(value: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Interpret a stored date/datetime as an aware datetime in the ledger zone.

    Calendar dates map to midnight, naive datetimes are read as ledger-zone
    wall time. Anything unparseable returns None.
    """
    tz = tz or ledger_zone()

    if value is None:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=tz)
        return value.astimezone(tz)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=tz)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parse_ledger_datetime(parsed, tz)

    return None


def parse_ledger_date(value: Any, tz: Optional[tzinfo] = None) -> Optional[date]:
    parsed = parse_ledger_datetime(value, tz)
    return parsed.date() if parsed else None


def as_amount(value: Any) -> float:
    """Lenient numeric parse: None, blanks, garbage and non-finite values are 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    return amount


def format_amount(amount: float) -> str:
    """String form used for search: integral amounts drop the fractional part."""
    if float(amount).is_integer():
        return str(int(amount))
    return str(amount)


def enum_value(value: Any) -> Optional[str]:
    """Raw string for an enum member or plain string column."""
    if value is None:
        return None
    return getattr(value, "value", value)
