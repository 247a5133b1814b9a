import asyncio
import logging
from collections.abc import Sequence
from datetime import date
from pathlib import Path

import httpx
import sentry_sdk
from pydantic import ValidationError

from contrib_heatmap.clients.base import CalendarSource
from contrib_heatmap.clients.github_client import GitHubCalendarSource
from contrib_heatmap.clients.gitlab_client import GitLabCalendarSource
from contrib_heatmap.core.observability import configure_logging
from contrib_heatmap.core.observability import init_sentry
from contrib_heatmap.services.heatmap_service import compute_levels
from contrib_heatmap.services.heatmap_service import date_range_map
from contrib_heatmap.services.heatmap_service import DateWindow
from contrib_heatmap.services.heatmap_service import merge_calendars
from contrib_heatmap.services.heatmap_service import utc_today
from contrib_heatmap.services.svg_renderer import render_svg
from contrib_heatmap.settings import ConfigurationError
from contrib_heatmap.settings import Settings


logger = logging.getLogger(__name__)


def build_sources(settings: Settings) -> list[CalendarSource]:
    return [
        GitHubCalendarSource(
            username=(settings.gh_username or "").strip(),
            token=settings.github_access_token,
            graphql_url=settings.github_graphql_url,
        ),
        GitLabCalendarSource(
            username=(settings.gitlab_username or "").strip(),
            base_url=settings.gitlab_base_url,
        ),
    ]


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.http_timeout_seconds)


async def fetch_calendars(
    client: httpx.AsyncClient,
    sources: Sequence[CalendarSource],
    window: DateWindow,
) -> list[dict[str, int]]:
    """Fetch all sources concurrently; the first failure aborts the run."""

    return list(
        await asyncio.gather(
            *(source.fetch_calendar(client, window) for source in sources)
        )
    )


async def build_contribution_svg(settings: Settings, today: date | None = None) -> str:
    """Fetch, merge, classify and render the trailing-year heatmap."""

    window = DateWindow.trailing(today or utc_today(), days=settings.window_days)
    base = date_range_map(window.start, window.end)
    sources = build_sources(settings)

    async with create_http_client(settings) as client:
        calendars = await fetch_calendars(client, sources, window)

    merged, totals = merge_calendars(
        base, {source.label: counts for source, counts in zip(sources, calendars)}
    )
    for label, count in totals.by_source.items():
        logger.info("%s contributions: %d", label, count)
    logger.info("Total contributions: %d", totals.total)

    levels = compute_levels(merged)
    return render_svg(window, merged, levels, totals)


def write_svg(path: Path, svg: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(svg, encoding="utf-8")
    return path


def main() -> int:
    """Run the pipeline once; return the process exit status."""

    try:
        settings = Settings()
    except ValidationError as exc:
        configure_logging()
        logger.error("Invalid configuration: %s", exc)
        return 1

    configure_logging(settings.log_level)
    init_sentry(settings)

    try:
        settings.validate_credentials()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1

    try:
        svg = asyncio.run(build_contribution_svg(settings))
        out_path = write_svg(Path.cwd() / settings.output_path, svg)
    except Exception as exc:
        sentry_sdk.capture_exception(exc)
        logger.exception("Contribution heatmap build failed: %s", exc)
        return 1

    logger.info("Wrote %s", out_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
