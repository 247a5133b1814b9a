import math
from collections.abc import Iterator
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from datetime import datetime
from datetime import timedelta
from datetime import UTC

from contrib_heatmap.schemas.heatmap import CalendarTotals


QUARTILES = (0.25, 0.5, 0.75)


@dataclass(frozen=True)
class DateWindow:
    """Inclusive range of calendar dates covered by the heatmap."""

    start: date
    end: date

    @classmethod
    def trailing(cls, end: date, days: int = 365) -> "DateWindow":
        return cls(start=end - timedelta(days=days - 1), end=end)

    def days(self) -> Iterator[date]:
        current_day = self.start
        while current_day <= self.end:
            yield current_day
            current_day += timedelta(days=1)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def utc_today() -> date:
    return datetime.now(UTC).date()


def date_range_map(start: date, end: date) -> dict[str, int]:
    """Return every ISO date from start to end (inclusive) mapped to zero."""

    return {day.isoformat(): 0 for day in DateWindow(start, end).days()}


def merge_calendars(
    base: Mapping[str, int],
    sources: Mapping[str, Mapping[str, int]],
) -> tuple[dict[str, int], CalendarTotals]:
    """Add each source's counts onto the base range.

    Dates missing from `base` are dropped, so the range never grows. Totals
    only include the counts that landed inside the range.
    """

    merged = dict(base)
    by_source: dict[str, int] = {}

    for label, counts in sources.items():
        source_total = 0
        for day, count in counts.items():
            if day not in merged:
                continue
            merged[day] += count
            source_total += count
        by_source[label] = source_total

    totals = CalendarTotals(total=sum(merged.values()), by_source=by_source)
    return merged, totals


def quantile_thresholds(values: list[int]) -> tuple[int, int, int]:
    """Nearest-rank 25th/50th/75th percentiles of the given counts."""

    if not values:
        return 0, 0, 0

    ordered = sorted(values)
    last_index = len(ordered) - 1
    q1, q2, q3 = (ordered[math.floor(last_index * p)] for p in QUARTILES)
    return q1, q2, q3


def contribution_level(count: int, thresholds: tuple[int, int, int]) -> int:
    """Map daily contribution count to a heatmap level in range 0..4."""

    q1, q2, q3 = thresholds
    if count <= 0:
        return 0
    if count <= q1:
        return 1
    if count <= q2:
        return 2
    if count <= q3:
        return 3
    return 4


def compute_levels(counts: Mapping[str, int]) -> dict[str, int]:
    """Bucket every date into a level using quartiles of the whole calendar."""

    thresholds = quantile_thresholds(list(counts.values()))
    return {day: contribution_level(count, thresholds) for day, count in counts.items()}
