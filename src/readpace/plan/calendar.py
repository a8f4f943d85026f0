"""Calendar arithmetic for reading plans.

All plan bookkeeping is keyed by calendar date, never by timestamp, so
every value that enters here is reduced to a ``date`` first.
"""

from datetime import date, datetime
from typing import Callable, Optional, Union

DateLike = Union[date, datetime, str]


def _as_date(value: Union[date, datetime]) -> date:
    # datetime is a subclass of date, so it has to be checked first
    if isinstance(value, datetime):
        return value.date()
    return value


def days_until(target_date: Union[date, datetime], today: Union[date, datetime]) -> int:
    """Whole days from ``today`` to ``target_date``.

    Time of day is ignored on both sides. The result is zero when the
    target is today and negative once it has passed.
    """
    return (_as_date(target_date) - _as_date(today)).days


def today_key(clock: Optional[Callable[[], datetime]] = None) -> date:
    """Current local calendar date according to ``clock``."""
    now = clock() if clock is not None else datetime.now()
    return _as_date(now)


def parse_date_key(value: DateLike) -> date:
    """Parse a stored date key.

    Accepts ``date``/``datetime`` objects and ISO strings. A full ISO
    timestamp such as ``2025-03-01T08:00:00.000Z`` is cut to its date part.

    Raises:
        ValueError: If the value cannot be read as a calendar date.
    """
    if isinstance(value, (date, datetime)):
        return _as_date(value)
    if isinstance(value, str):
        text = value.strip()
        if len(text) >= 10:
            try:
                return date.fromisoformat(text[:10])
            except ValueError:
                pass
    raise ValueError(f"Not a calendar date: {value!r}")
