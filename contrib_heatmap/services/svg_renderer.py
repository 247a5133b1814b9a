import io
import math
from collections.abc import Mapping
from datetime import date
from datetime import timedelta

import svgwrite

from contrib_heatmap.schemas.heatmap import CalendarTotals
from contrib_heatmap.schemas.heatmap import HeatmapDay
from contrib_heatmap.schemas.heatmap import HeatmapWeek
from contrib_heatmap.services.heatmap_service import DateWindow


# Light -> dark, indexed by level.
PALETTE = ("#ebedf0", "#c6e48b", "#7bc96f", "#239a3b", "#196127")

CELL_SIZE = 10
CELL_GAP = 2
CELL_RADIUS = 2
HEADER_HEIGHT = 26
FONT_FAMILY = (
    "system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,Cantarell,Noto Sans,sans-serif"
)


def sunday_weekday(day: date) -> int:
    """Weekday index with Sunday as 0 and Saturday as 6."""

    return (day.weekday() + 1) % 7


def grid_bounds(window: DateWindow) -> tuple[date, date]:
    """Return the Sunday on/before window start and the Saturday on/after its end."""

    grid_start = window.start - timedelta(days=sunday_weekday(window.start))
    grid_end = window.end + timedelta(days=6 - sunday_weekday(window.end))
    return grid_start, grid_end


def week_count(grid_start: date, grid_end: date) -> int:
    return math.ceil((grid_end - grid_start).days / 7) + 1


def build_weeks(
    window: DateWindow,
    counts: Mapping[str, int],
    levels: Mapping[str, int],
) -> list[HeatmapWeek]:
    """Lay the window out as Sunday-first week columns.

    Padding days outside the window, any date without data and any negative
    count or out-of-range level get count 0 and level 0.
    """

    grid_start, grid_end = grid_bounds(window)
    weeks: list[HeatmapWeek] = []

    for column in range(week_count(grid_start, grid_end)):
        week_start = grid_start + timedelta(weeks=column)
        days: list[HeatmapDay] = []
        for row in range(7):
            day = week_start + timedelta(days=row)
            key = day.isoformat()
            in_window = window.contains(day)
            count = counts.get(key, 0) if in_window else 0
            level = levels.get(key, 0) if in_window else 0
            days.append(
                HeatmapDay(
                    date=day,
                    weekday=row,
                    count=count if isinstance(count, int) and count > 0 else 0,
                    level=level if level in range(len(PALETTE)) else 0,
                    in_window=in_window,
                )
            )
        weeks.append(HeatmapWeek(week_start=week_start, days=days))

    return weeks


def contribution_tooltip(day: date, count: int) -> str:
    suffix = "" if count == 1 else "s"
    return f"{day.isoformat()}: {count} contribution{suffix}"


def summary_label(totals: CalendarTotals) -> str:
    parts = " • ".join(f"{label} {count}" for label, count in totals.by_source.items())
    return f"Total: {totals.total} ({parts})"


def render_svg(
    window: DateWindow,
    counts: Mapping[str, int],
    levels: Mapping[str, int],
    totals: CalendarTotals | None = None,
) -> str:
    """Render the heatmap as a standalone SVG document.

    A header band with the totals summary and the covered date range is
    reserved above the grid only when `totals` is given.
    """

    weeks = build_weeks(window, counts, levels)
    header_height = HEADER_HEIGHT if totals is not None else 0
    width = len(weeks) * (CELL_SIZE + CELL_GAP) + CELL_GAP
    height = header_height + 7 * (CELL_SIZE + CELL_GAP) + CELL_GAP

    drawing = svgwrite.Drawing(
        size=(width, height),
        viewBox=f"0 0 {width} {height}",
        debug=False,
        role="img",
        aria_label="Combined contributions",
    )
    window_days = (window.end - window.start).days + 1
    drawing.set_desc(
        title=f"Combined GitHub + GitLab Contributions (last {window_days} days)"
    )
    drawing.add(drawing.rect(insert=(0, 0), size=("100%", "100%"), fill="#fff"))

    if totals is not None:
        drawing.add(
            drawing.text(
                summary_label(totals),
                insert=(CELL_GAP, 16),
                font_family=FONT_FAMILY,
                font_size=12,
                fill="#24292f",
            )
        )
        drawing.add(
            drawing.text(
                f"{window.start.isoformat()} → {window.end.isoformat()}",
                insert=(width - CELL_GAP, 16),
                text_anchor="end",
                font_family=FONT_FAMILY,
                font_size=11,
                fill="#57606a",
            )
        )

    for column, week in enumerate(weeks):
        x = CELL_GAP + column * (CELL_SIZE + CELL_GAP)
        for day in week.days:
            y = header_height + CELL_GAP + day.weekday * (CELL_SIZE + CELL_GAP)
            cell = drawing.rect(
                insert=(x, y),
                size=(CELL_SIZE, CELL_SIZE),
                rx=CELL_RADIUS,
                ry=CELL_RADIUS,
                fill=PALETTE[day.level],
            )
            cell.set_desc(title=contribution_tooltip(day.date, day.count))
            drawing.add(cell)

    buffer = io.StringIO()
    drawing.write(buffer)
    return buffer.getvalue()
