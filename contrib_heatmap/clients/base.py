from typing import Protocol

import httpx

from contrib_heatmap.services.heatmap_service import DateWindow


USER_AGENT = "contrib-heatmap"


class CalendarFetchError(Exception):
    """Raised when a remote calendar request fails."""

    def __init__(self, source: str, status_code: int | None, body: str) -> None:
        self.source = source
        self.status_code = status_code
        self.body = body
        super().__init__(f"{source} calendar error: {status_code} {body}".rstrip())


class CalendarPayloadError(CalendarFetchError):
    """Raised when a successful response does not contain a usable calendar."""


class CalendarSource(Protocol):
    """Anything that can produce a date -> count mapping for a window."""

    name: str
    label: str

    async def fetch_calendar(
        self, client: httpx.AsyncClient, window: DateWindow
    ) -> dict[str, int]: ...


def ensure_success(source: str, response: httpx.Response) -> None:
    if response.is_success:
        return
    raise CalendarFetchError(source, response.status_code, response.text)
