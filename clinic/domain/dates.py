import datetime as dt
from collections.abc import Iterable, Iterator, Sequence
from functools import total_ordering

from pydantic import BaseModel, ConfigDict, Field, model_validator

MIN_YEAR = 1900
MAX_YEAR = 9999

_DAYS_IN_MONTH = (0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
_MINUTES_PER_DAY = 24 * 60


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def parse_digits(token: str) -> int:
    """Convert a plain ASCII digit string; signs, spaces and underscores are rejected."""
    if not (token.isascii() and token.isdigit()):
        raise ValueError(f"Expected digits, got {token!r}")
    return int(token)


def days_in_month(month: int, year: int) -> int:
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS_IN_MONTH[month]


@total_ordering
class CalendarDate(BaseModel):
    """A calendar day between 1900 and 9999.

    The constructor rejects impossible dates. :meth:`parse` does not: values
    read from user tokens must be checked with :meth:`is_valid` before use.
    """

    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    day: int

    @model_validator(mode="after")
    def _check_calendar(self) -> "CalendarDate":
        if not self.is_valid():
            raise ValueError(f"{self} is not a valid calendar date")
        return self

    @classmethod
    def parse(cls, token: str) -> "CalendarDate":
        """Read ``M/D/YYYY`` without range checks.

        Raises:
            ValueError: If the token is not three ``/``-separated digit runs.
        """
        parts = token.split("/")
        if len(parts) != 3:
            raise ValueError(f"Expected M/D/YYYY, got {token!r}")
        month, day, year = (parse_digits(part) for part in parts)
        return cls.model_construct(year=year, month=month, day=day)

    @classmethod
    def from_date(cls, value: dt.date) -> "CalendarDate":
        return cls(year=value.year, month=value.month, day=value.day)

    @classmethod
    def today(cls) -> "CalendarDate":
        return cls.from_date(dt.date.today())

    def is_valid(self) -> bool:
        if not MIN_YEAR <= self.year <= MAX_YEAR:
            return False
        if not 1 <= self.month <= 12:
            return False
        return 1 <= self.day <= days_in_month(self.month, self.year)

    def is_weekend(self) -> bool:
        return self.to_date().weekday() >= 5

    def add_months(self, months: int) -> "CalendarDate":
        """Shift by whole months, clamping the day to the target month's length."""
        offset = self.month - 1 + months
        year = self.year + offset // 12
        month = offset % 12 + 1
        return CalendarDate(year=year, month=month, day=min(self.day, days_in_month(month, year)))

    def to_date(self) -> dt.date:
        return dt.date(self.year, self.month, self.day)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CalendarDate):
            return NotImplemented
        return (self.year, self.month, self.day) < (other.year, other.month, other.day)

    def __str__(self) -> str:
        return f"{self.month}/{self.day}/{self.year}"


@total_ordering
class Timeslot(BaseModel):
    """A bookable time of day."""

    model_config = ConfigDict(frozen=True)

    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)

    @classmethod
    def from_offset(cls, hour: int, minute: int, offset_minutes: int) -> "Timeslot":
        """Build the slot ``offset_minutes`` after ``hour:minute``, wrapping past midnight."""
        total = (hour * 60 + minute + offset_minutes) % _MINUTES_PER_DAY
        return cls(hour=total // 60, minute=total % 60)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Timeslot):
            return NotImplemented
        return (self.hour, self.minute) < (other.hour, other.minute)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


class TimeslotGrid:
    """Insertion-ordered catalogue of daily timeslots addressed by 1-based id."""

    START_ID = 1

    def __init__(self, timeslots: Iterable[Timeslot] = ()) -> None:
        self._timeslots: list[Timeslot] = list(timeslots)

    @classmethod
    def build(
        cls, block_starts: Sequence[int], slots_per_block: int, slot_minutes: int
    ) -> "TimeslotGrid":
        """Lay out ``slots_per_block`` slots from each starting hour, in block order."""
        grid = cls()
        for start_hour in block_starts:
            for slot in range(slots_per_block):
                grid.add(Timeslot.from_offset(start_hour, 0, slot * slot_minutes))
        return grid

    def add(self, timeslot: Timeslot) -> int:
        self._timeslots.append(timeslot)
        return len(self._timeslots) - 1 + self.START_ID

    def get(self, slot_id: int) -> Timeslot | None:
        index = slot_id - self.START_ID
        if 0 <= index < len(self._timeslots):
            return self._timeslots[index]
        return None

    def lookup(self, token: str) -> Timeslot | None:
        """Resolve a textual id; ``None`` for non-numeric or unknown ids."""
        try:
            slot_id = parse_digits(token)
        except ValueError:
            return None
        return self.get(slot_id)

    def __iter__(self) -> Iterator[Timeslot]:
        return iter(self._timeslots)

    def __len__(self) -> int:
        return len(self._timeslots)
