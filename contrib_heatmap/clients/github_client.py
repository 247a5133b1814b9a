import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from contrib_heatmap.clients.base import CalendarPayloadError
from contrib_heatmap.clients.base import ensure_success
from contrib_heatmap.clients.base import USER_AGENT
from contrib_heatmap.services.heatmap_service import DateWindow


logger = logging.getLogger(__name__)

CONTRIBUTION_CALENDAR_QUERY = """
query($login: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $login) {
    contributionsCollection(from: $from, to: $to) {
      contributionCalendar {
        weeks {
          contributionDays {
            date
            contributionCount
          }
        }
      }
    }
  }
}
"""


def flatten_contribution_weeks(weeks: Any) -> dict[str, int]:
    """Flatten GraphQL weeks/contributionDays into a date -> count mapping."""

    counts: dict[str, int] = {}
    if not isinstance(weeks, list):
        return counts

    for week in weeks:
        if not isinstance(week, Mapping):
            continue
        contribution_days = week.get("contributionDays")
        if not isinstance(contribution_days, list):
            continue
        for item in contribution_days:
            if not isinstance(item, Mapping):
                continue
            raw_date = item.get("date")
            raw_count = item.get("contributionCount")
            if (
                isinstance(raw_date, str)
                and isinstance(raw_count, int)
                and not isinstance(raw_count, bool)
                and raw_count >= 0
            ):
                counts[raw_date] = counts.get(raw_date, 0) + raw_count

    return counts


@dataclass
class GitHubCalendarSource:
    """Contribution calendar from the GitHub GraphQL API."""

    username: str
    token: str
    graphql_url: str = "https://api.github.com/graphql"
    name: str = "GitHub"
    label: str = "GH"

    def build_request_body(self, window: DateWindow) -> dict[str, object]:
        return {
            "query": CONTRIBUTION_CALENDAR_QUERY,
            "variables": {
                "login": self.username,
                "from": f"{window.start.isoformat()}T00:00:00Z",
                "to": f"{window.end.isoformat()}T23:59:59Z",
            },
        }

    async def fetch_calendar(
        self, client: httpx.AsyncClient, window: DateWindow
    ) -> dict[str, int]:
        """Fetch one-year contribution days for a user from GitHub GraphQL API."""

        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

        logger.info("Fetching GitHub calendar for %s", self.username)
        response = await client.post(
            self.graphql_url,
            json=self.build_request_body(window),
            headers=headers,
        )
        ensure_success(self.name, response)

        payload = response.json()
        if not isinstance(payload, Mapping):
            raise CalendarPayloadError(
                self.name, response.status_code, "GraphQL response is invalid"
            )

        if payload.get("errors"):
            raise CalendarPayloadError(self.name, response.status_code, response.text)

        data = payload.get("data")
        user = data.get("user") if isinstance(data, Mapping) else None
        if not isinstance(user, Mapping):
            raise CalendarPayloadError(
                self.name, response.status_code, f"user {self.username} not found"
            )

        collection = user.get("contributionsCollection")
        calendar = (
            collection.get("contributionCalendar")
            if isinstance(collection, Mapping)
            else None
        )
        weeks = calendar.get("weeks") if isinstance(calendar, Mapping) else None

        counts = flatten_contribution_weeks(weeks)
        logger.debug("GitHub returned %d days", len(counts))
        return counts
