from datetime import datetime, timedelta, timezone

import httpx

from sentrydigest.models.items import NormalizedItem
from sentrydigest.services.threat_intel import ThreatIntelClient

BASE_URL = "https://ti.test/api/v3"
GUI_URL = "https://ti.test/gui"
DAY_ZERO = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_item(source: str, link: str, day: int, title: str | None = None) -> NormalizedItem:
    return NormalizedItem(
        title=title or f"{source} day {day}",
        link=link,
        published_at=DAY_ZERO + timedelta(days=day),
        source_name=source,
    )


def api_path(request: httpx.Request) -> str:
    """Path relative to the API root, e.g. 'threat_actors/apt1/campaigns'."""
    return request.url.path.removeprefix("/api/v3/")


def make_ti_client(handler, api_key: str | None = "test-key") -> ThreatIntelClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ThreatIntelClient(http, api_key=api_key, base_url=BASE_URL, gui_url=GUI_URL, retry_attempts=1)
