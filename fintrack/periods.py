import calendar
import re
from datetime import date, datetime, timedelta

from fintrack.domain import Transaction

# Zero-padded ISO form; lexicographic order equals chronological order only
# for strings of exactly this shape.
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def by_date_range(start: str, end: str):
    def _filter(t: Transaction) -> bool:
        return start <= t.date <= end

    return _filter


def on_or_before(day: str):
    def _filter(t: Transaction) -> bool:
        return t.date <= day

    return _filter


def month_key(day: str) -> str:
    return day[:7]


def same_month(day: str, today: str) -> bool:
    return month_key(day) == month_key(today)


def month_bounds(today: str) -> tuple[str, str]:
    """First and last day of the month containing ``today``."""
    d = date.fromisoformat(today)
    last = calendar.monthrange(d.year, d.month)[1]
    return d.replace(day=1).isoformat(), d.replace(day=last).isoformat()


def is_provisioned(t: Transaction, today: str) -> bool:
    return t.date > today


def sort_for_display(trans) -> tuple[Transaction, ...]:
    # newest first; sorted() is stable so same-day entries keep their order
    return tuple(sorted(trans, key=lambda t: t.date, reverse=True))


def is_iso_date(value) -> bool:
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def today_iso() -> str:
    return date.today().isoformat()


def next_day(day: str) -> str:
    return (date.fromisoformat(day) + timedelta(days=1)).isoformat()
