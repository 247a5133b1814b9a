import logging
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from contrib_heatmap.clients.base import CalendarPayloadError
from contrib_heatmap.clients.base import ensure_success
from contrib_heatmap.clients.base import USER_AGENT
from contrib_heatmap.services.heatmap_service import DateWindow


logger = logging.getLogger(__name__)


@dataclass
class GitLabCalendarSource:
    """Public GitLab calendar, served as a flat {"YYYY-MM-DD": count} object."""

    username: str
    base_url: str = "https://gitlab.com"
    name: str = "GitLab"
    label: str = "GL"

    @property
    def calendar_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/users/{quote(self.username, safe='')}/calendar.json"

    async def fetch_calendar(
        self, client: httpx.AsyncClient, window: DateWindow
    ) -> dict[str, int]:
        # The endpoint always covers roughly the last year; the window is
        # applied later when merging.
        logger.info("Fetching GitLab calendar for %s", self.username)
        response = await client.get(
            self.calendar_url, headers={"User-Agent": USER_AGENT}
        )
        ensure_success(self.name, response)

        if not response.content.strip():
            return {}

        payload = response.json()
        if payload is None:
            return {}
        if not isinstance(payload, Mapping):
            raise CalendarPayloadError(
                self.name, response.status_code, "calendar response is not an object"
            )

        counts = {
            day: count
            for day, count in payload.items()
            if isinstance(day, str)
            and isinstance(count, int)
            and not isinstance(count, bool)
            and count >= 0
        }
        logger.debug("GitLab returned %d days", len(counts))
        return counts
