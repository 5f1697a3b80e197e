"""Date helpers and budget period boundaries."""

from datetime import date, datetime, timedelta, timezone

from spendwise.core.exceptions import InvalidSpecError

BUDGET_PERIODS = ("weekly", "monthly", "yearly")
DEFAULT_PERIOD = "monthly"


def now_utc() -> datetime:
    """Return current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Return current UTC date."""
    return now_utc().date()


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite drops tzinfo) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def month_bounds(on: date) -> tuple[date, date]:
    """Return [first day of month, first day of next month)."""
    start = on.replace(day=1)
    if start.month == 12:
        end = date(start.year + 1, 1, 1)
    else:
        end = date(start.year, start.month + 1, 1)
    return start, end


def period_bounds(period: str, on: date | None = None) -> tuple[date, date]:
    """Return the half-open date range of ``period`` containing ``on``.

    Monthly periods follow the calendar month, weekly periods start on
    Monday, yearly periods follow the calendar year.

    Raises:
        InvalidSpecError: If the period is not one of BUDGET_PERIODS
    """
    target = on or utc_today()
    if period == "monthly":
        return month_bounds(target)
    if period == "weekly":
        start = target - timedelta(days=target.weekday())
        return start, start + timedelta(days=7)
    if period == "yearly":
        return date(target.year, 1, 1), date(target.year + 1, 1, 1)
    raise InvalidSpecError(details={"field": "period", "value": period})
