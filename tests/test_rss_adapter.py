"""RSS adapter: parsing, summary trimming and failure handling."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from sentrydigest.models.sources import SourceConfig
from sentrydigest.tools.rss_adapter import RSSAdapter, plain_text

FEED = """<?xml version="1.0"?>
<rss version="2.0">
  <channel>
    <title>Krebs on Security</title>
    <item>
      <title>Breach at Example Corp</title>
      <link>https://krebsonsecurity.com/2024/01/breach/</link>
      <description>&lt;p&gt;Attackers &lt;b&gt;stole&lt;/b&gt; data.&lt;/p&gt;</description>
      <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Undated post</title>
      <link>https://krebsonsecurity.com/undated/</link>
      <description>{long}</description>
    </item>
    <item>
      <title>No link here</title>
      <description>Skipped</description>
    </item>
  </channel>
</rss>
""".replace("{long}", "word " * 100)

SOURCE = SourceConfig(name="Krebs on Security", url="https://krebsonsecurity.com/feed/", kind="rss")


def _adapter(handler) -> RSSAdapter:
    return RSSAdapter(SOURCE, httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_feed_entries_become_items():
    requested = []

    def handler(request):
        requested.append(str(request.url))
        return httpx.Response(200, content=FEED.encode())

    items = await _adapter(handler).fetch_items()

    assert requested == ["https://krebsonsecurity.com/feed/"]
    assert [item.title for item in items] == ["Breach at Example Corp", "Undated post"]

    first = items[0]
    assert first.link == "https://krebsonsecurity.com/2024/01/breach/"
    assert first.source_name == "Krebs on Security"
    assert first.published_at == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert first.summary == "Attackers stole data."


@pytest.mark.asyncio
async def test_missing_date_defaults_to_now_and_long_summary_is_trimmed():
    items = await _adapter(lambda request: httpx.Response(200, content=FEED.encode())).fetch_items()

    undated = items[1]
    assert datetime.now(timezone.utc) - undated.published_at < timedelta(minutes=1)
    assert len(undated.summary) == 203
    assert undated.summary.endswith("...")


@pytest.mark.asyncio
async def test_http_error_returns_empty():
    items = await _adapter(lambda request: httpx.Response(503)).fetch_items()
    assert items == []


@pytest.mark.asyncio
async def test_transport_error_returns_empty():
    def handler(request):
        raise httpx.ConnectError("dns failure", request=request)

    assert await _adapter(handler).fetch_items() == []


@pytest.mark.asyncio
async def test_garbage_body_returns_empty():
    items = await _adapter(lambda request: httpx.Response(200, content=b"<<< not a feed")).fetch_items()
    assert items == []


def test_plain_text_strips_markup():
    assert plain_text("<p>One &amp; <i>two</i></p>\n three") == "One & two three"
    assert plain_text("") == ""


def test_plain_text_keeps_bare_angle_brackets():
    assert plain_text("5 < 6 and 7 > 3") == "5 < 6 and 7 > 3"
    assert plain_text("&lt;script&gt; tag in prose") == "<script> tag in prose"
