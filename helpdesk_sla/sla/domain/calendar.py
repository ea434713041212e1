"""
Business-Hours Calendar
=======================

Defines which instants count as business time and provides date arithmetic
that respects it.

The calendar is a plain value object passed explicitly to every calculation,
so a company can carry its own working window without any global state.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import FrozenSet, Iterable, Optional, Tuple

from helpdesk_sla.core import BusinessTimeRangeException

_ONE_DAY = timedelta(days=1)
_MAX_SCAN_DAYS = 3660

# Ten years of round-the-clock time
MAX_BUSINESS_HOURS = 87600.0


@dataclass(frozen=True)
class BusinessCalendar:
    """
    Working-time window: active weekdays plus a daily [start_hour, end_hour)
    interval in a single time zone.

    Weekdays follow ``datetime.weekday()`` (Monday=0 ... Sunday=6).
    When ``tz`` is set, naive inputs are read as local wall time in that zone
    and aware inputs are converted to it. When it is unset, inputs are used
    as given, and a naive value compared with an aware one is taken as UTC.
    """

    start_hour: int = 8
    end_hour: int = 18
    work_days: FrozenSet[int] = frozenset({0, 1, 2, 3, 4})
    tz: Optional[tzinfo] = None
    holidays: FrozenSet[date] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "work_days", frozenset(self.work_days))
        object.__setattr__(self, "holidays", frozenset(self.holidays))

        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError(
                f"Invalid business window {self.start_hour}-{self.end_hour}: "
                "expected 0 <= start_hour < end_hour <= 24"
            )
        if not self.work_days or any(day not in range(7) for day in self.work_days):
            raise ValueError("work_days must be a non-empty subset of 0..6")

    @classmethod
    def build(
        cls,
        start_hour: int = 8,
        end_hour: int = 18,
        work_days: Iterable[int] = (0, 1, 2, 3, 4),
        tz: Optional[tzinfo] = None,
        holidays: Iterable[date] = (),
    ) -> "BusinessCalendar":
        """Build a calendar from loose iterables."""
        return cls(
            start_hour=start_hour,
            end_hour=end_hour,
            work_days=frozenset(work_days),
            tz=tz,
            holidays=frozenset(holidays),
        )

    @property
    def daily_hours(self) -> int:
        """Business hours in a full working day."""
        return self.end_hour - self.start_hour

    # ========== Queries ==========

    def is_business_day(self, day: date) -> bool:
        """Return True if the date is a working weekday and not a holiday."""
        return day.weekday() in self.work_days and day not in self.holidays

    def is_business_time(self, moment: datetime) -> bool:
        """Return True if the instant falls inside a business window."""
        local = self.localize(moment)
        if not self.is_business_day(local.date()):
            return False
        opens, closes = self._bounds(local.date(), local.tzinfo)
        return opens <= local < closes

    def next_business_open(self, moment: datetime) -> datetime:
        """
        Return ``moment`` itself when it is business time, otherwise the
        opening instant of the next business window.
        """
        local = self.localize(moment)
        day = local.date()

        if self.is_business_day(day):
            opens, closes = self._bounds(day, local.tzinfo)
            if local < opens:
                return opens
            if local < closes:
                return local

        day += _ONE_DAY
        for _ in range(_MAX_SCAN_DAYS):
            if self.is_business_day(day):
                return self._bounds(day, local.tzinfo)[0]
            day += _ONE_DAY

        raise BusinessTimeRangeException(
            f"No business day found within {_MAX_SCAN_DAYS} days of {moment}",
            {"moment": moment.isoformat()}
        )

    # ========== Arithmetic ==========

    def add_business_time(self, start: datetime, hours: float) -> datetime:
        """
        Advance ``start`` by ``hours`` of business time.

        A start outside business hours is first moved to the next window
        opening, so ``add_business_time(start, 0)`` returns the clamped start.
        A duration ending exactly at a window close returns that close.
        """
        if not 0 <= hours <= MAX_BUSINESS_HOURS:
            raise BusinessTimeRangeException(
                f"hours must be between 0 and {MAX_BUSINESS_HOURS:g}, got {hours}",
                {"hours": hours}
            )

        remaining = timedelta(hours=hours)

        try:
            current = self.next_business_open(start)
            while remaining > timedelta(0):
                closes = self._bounds(current.date(), current.tzinfo)[1]
                available = closes - current
                if remaining <= available:
                    return current + remaining
                remaining -= available
                current = self.next_business_open(closes)
        except OverflowError as e:
            raise BusinessTimeRangeException(
                f"Adding {hours} business hours to {start} leaves the supported date range",
                {"start": start.isoformat(), "hours": hours}
            ) from e

        return current

    def business_hours_between(self, start: datetime, end: datetime) -> float:
        """
        Business hours contained in ``[start, end]``.

        Returns 0.0 when ``end <= start``. Non-working days and holidays
        contribute nothing.
        """
        end = self.align(end, start)
        start = self.localize(start)
        end = self.localize(end)
        if start.tzinfo is not None and end.tzinfo is not None:
            end = end.astimezone(start.tzinfo)

        if end <= start:
            return 0.0

        total = timedelta(0)
        first_day = start.date()
        for offset in range((end.date() - first_day).days + 1):
            day = first_day + timedelta(days=offset)
            if self.is_business_day(day):
                opens, closes = self._bounds(day, start.tzinfo)
                lower = max(start, opens)
                upper = min(end, closes)
                if upper > lower:
                    total += upper - lower

        return total.total_seconds() / 3600

    # ========== Helpers ==========

    def localize(self, moment: datetime) -> datetime:
        """Express ``moment`` in the calendar's time zone (if it has one)."""
        if self.tz is None:
            return moment
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.tz)
        return moment.astimezone(self.tz)

    def align(self, moment: datetime, reference: datetime) -> datetime:
        """
        Give ``moment`` the same naive or aware form as ``reference``.

        Naive values stand for wall time in the calendar's zone, or UTC when
        the calendar has none.
        """
        zone = self.tz or timezone.utc
        if reference.tzinfo is None and moment.tzinfo is not None:
            return moment.astimezone(zone).replace(tzinfo=None)
        if reference.tzinfo is not None and moment.tzinfo is None:
            return moment.replace(tzinfo=zone)
        return moment

    def _bounds(self, day: date, tz: Optional[tzinfo]) -> Tuple[datetime, datetime]:
        midnight = datetime.combine(day, time(0, 0), tzinfo=tz)
        return (
            midnight + timedelta(hours=self.start_hour),
            midnight + timedelta(hours=self.end_hour),
        )


DEFAULT_CALENDAR = BusinessCalendar()


def add_business_time(
    start: datetime,
    hours: float,
    calendar: BusinessCalendar = DEFAULT_CALENDAR
) -> datetime:
    """Advance ``start`` by ``hours`` of business time on ``calendar``."""
    return calendar.add_business_time(start, hours)


def business_hours_between(
    start: datetime,
    end: datetime,
    calendar: BusinessCalendar = DEFAULT_CALENDAR
) -> float:
    """Business hours between two instants on ``calendar``."""
    return calendar.business_hours_between(start, end)
