from datetime import date

from pydantic import BaseModel
from pydantic import Field


class HeatmapDay(BaseModel):
    """Single grid cell of the rendered heatmap."""

    date: date
    weekday: int = Field(ge=0, le=6)
    count: int = Field(default=0, ge=0)
    level: int = Field(default=0, ge=0, le=4)
    in_window: bool = True


class HeatmapWeek(BaseModel):
    """Sunday-first column of seven grid cells."""

    week_start: date
    days: list[HeatmapDay]


class CalendarTotals(BaseModel):
    """Merged contribution totals, overall and per source label."""

    total: int = 0
    by_source: dict[str, int] = Field(default_factory=dict)
