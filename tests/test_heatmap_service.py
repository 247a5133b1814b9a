from datetime import date
from datetime import timedelta

from contrib_heatmap.services.heatmap_service import compute_levels
from contrib_heatmap.services.heatmap_service import contribution_level
from contrib_heatmap.services.heatmap_service import date_range_map
from contrib_heatmap.services.heatmap_service import DateWindow
from contrib_heatmap.services.heatmap_service import merge_calendars
from contrib_heatmap.services.heatmap_service import quantile_thresholds


TODAY = date(2024, 12, 30)


def zero_calendar() -> dict[str, int]:
    window = DateWindow.trailing(TODAY)
    return date_range_map(window.start, window.end)


def test_trailing_window_covers_365_days_ending_today() -> None:
    calendar = zero_calendar()
    keys = list(calendar)

    assert len(keys) == 365
    assert keys[-1] == "2024-12-30"
    assert keys[0] == (TODAY - timedelta(days=364)).isoformat()
    assert set(calendar.values()) == {0}


def test_date_range_map_includes_end_date_and_keeps_order() -> None:
    calendar = date_range_map(date(2024, 2, 27), date(2024, 3, 1))

    assert list(calendar) == ["2024-02-27", "2024-02-28", "2024-02-29", "2024-03-01"]


def test_date_range_map_single_day() -> None:
    assert date_range_map(TODAY, TODAY) == {"2024-12-30": 0}


def test_iso_keys_are_retrievable_verbatim() -> None:
    calendar = zero_calendar()
    window = DateWindow.trailing(TODAY)

    for day in window.days():
        assert day.isoformat() in calendar


def test_merge_sums_sources_inside_range() -> None:
    merged, totals = merge_calendars(
        zero_calendar(),
        {
            "GH": {"2024-12-01": 3, "2024-12-02": 1},
            "GL": {"2024-12-01": 2, "2024-12-30": 4},
        },
    )

    assert merged["2024-12-01"] == 5
    assert merged["2024-12-02"] == 1
    assert merged["2024-12-30"] == 4
    assert len(merged) == 365
    assert totals.total == 10
    assert totals.by_source == {"GH": 4, "GL": 6}


def test_merge_drops_dates_outside_range() -> None:
    base = zero_calendar()
    far_past = (TODAY - timedelta(days=400)).isoformat()
    tomorrow = (TODAY + timedelta(days=1)).isoformat()

    merged, totals = merge_calendars(base, {"GH": {far_past: 9, tomorrow: 2}, "GL": {}})

    assert merged == base
    assert far_past not in merged
    assert totals.total == 0
    assert totals.by_source == {"GH": 0, "GL": 0}


def test_merge_does_not_mutate_base() -> None:
    base = zero_calendar()

    merge_calendars(base, {"GH": {"2024-12-01": 1}})

    assert base["2024-12-01"] == 0


def test_quantile_thresholds_use_nearest_rank() -> None:
    assert quantile_thresholds([5, 1, 3, 2, 4]) == (2, 3, 4)
    assert quantile_thresholds([]) == (0, 0, 0)


def test_contribution_level_ties_resolve_to_lower_level() -> None:
    thresholds = (2, 5, 9)

    assert contribution_level(0, thresholds) == 0
    assert contribution_level(2, thresholds) == 1
    assert contribution_level(3, thresholds) == 2
    assert contribution_level(5, thresholds) == 2
    assert contribution_level(9, thresholds) == 3
    assert contribution_level(10, thresholds) == 4


def test_all_zero_calendar_maps_to_level_zero() -> None:
    levels = compute_levels(zero_calendar())

    assert set(levels.values()) == {0}


def test_single_outlier_on_sparse_data_is_level_four() -> None:
    counts = zero_calendar()
    counts["2024-01-01"] = 5

    levels = compute_levels(counts)

    assert levels["2024-01-01"] == 4
    assert sum(1 for level in levels.values() if level == 0) == 364


def test_levels_are_monotonic_in_count() -> None:
    counts = {f"day-{value}": value for value in range(1, 101)}

    levels = compute_levels(counts)
    ordered = [levels[f"day-{value}"] for value in range(1, 101)]

    assert ordered == sorted(ordered)
    assert set(ordered) == {1, 2, 3, 4}


def test_zero_count_is_level_zero_with_busy_calendar() -> None:
    counts = {f"day-{value}": value for value in range(0, 50)}

    assert compute_levels(counts)["day-0"] == 0
