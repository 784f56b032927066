"""Date filtering models for the gallery."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

DECEMBER = 12


@dataclass(frozen=True)
class DateFilter:
    """Year, year+month or year+month+day selection."""

    year: int | None = None
    month: int | None = None
    day: int | None = None

    def __post_init__(self) -> None:
        if self.month is not None and self.year is None:
            raise ValueError("A month filter requires a year")
        if self.day is not None and self.month is None:
            raise ValueError("A day filter requires a month")

    @property
    def is_empty(self) -> bool:
        """Whether no date component was selected."""
        return self.year is None

    def bounds(self, tz: ZoneInfo) -> tuple[datetime, datetime] | None:
        """Return the half-open UTC range for the most specific component."""
        if self.year is None:
            return None
        if self.month is None:
            start = datetime(self.year, 1, 1, tzinfo=tz)
            end = start.replace(year=self.year + 1)
        elif self.day is None:
            start = datetime(self.year, self.month, 1, tzinfo=tz)
            if self.month == DECEMBER:
                end = start.replace(year=self.year + 1, month=1)
            else:
                end = start.replace(month=self.month + 1)
        else:
            start = datetime(self.year, self.month, self.day, tzinfo=tz)
            end = start + timedelta(days=1)
        return start.astimezone(UTC), end.astimezone(UTC)


@dataclass(frozen=True)
class DateOptions:
    """Selectable filter values derived from a viewer's sessions."""

    years: list[int]
    months: list[int]
    days: list[int]
