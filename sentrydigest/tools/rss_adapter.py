import httpx
import feedparser
from bs4 import BeautifulSoup
from typing import List
from datetime import datetime, timezone
from sentrydigest.tools.base_adapter import SourceAdapter
from sentrydigest.models.items import NormalizedItem, truncate_summary, utc_now
from sentrydigest.models.sources import SourceConfig
from sentrydigest.services.logger import logger

def plain_text(markup: str) -> str:
    """Strip tags and entities from a feed description."""
    if not markup:
        return ""
    text = BeautifulSoup(markup, "html.parser").get_text(" ")
    return " ".join(text.split())

class RSSAdapter(SourceAdapter):
    def __init__(self, source: SourceConfig, client: httpx.AsyncClient):
        super().__init__(source)
        self.client = client

    async def fetch_items(self) -> List[NormalizedItem]:
        logger.info(f"Fetching RSS feed for {self.source.name}")
        try:
            resp = await self.client.get(self.source.url, follow_redirects=True)
            resp.raise_for_status()
            feed = feedparser.parse(resp.content)
            if feed.bozo and not feed.entries:
                raise ValueError(f"unparseable feed: {feed.get('bozo_exception')}")
            items = [item for item in (self._to_item(entry) for entry in feed.entries) if item]
        except Exception as e:
            logger.warning(f"Error fetching from {self.source.name}: {e}")
            return []

        logger.info(f"Found {len(items)} items from {self.source.name}")
        return items

    def _to_item(self, entry) -> NormalizedItem | None:
        link = entry.get('link')
        if not link:
            return None

        # Parse time
        published = entry.get('published_parsed') or entry.get('updated_parsed')
        if published:
            dt = datetime(*published[:6], tzinfo=timezone.utc)
        else:
            dt = utc_now() # Fallback

        snippet = plain_text(entry.get('summary', '') or entry.get('description', ''))

        return NormalizedItem(
            title=entry.get('title', 'No Title'),
            link=link,
            published_at=dt,
            source_name=self.source.name,
            summary=truncate_summary(snippet),
        )
