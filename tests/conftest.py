from __future__ import annotations

from pathlib import Path

import pytest
import requests

from news_taxonomy import Taxonomy

ROOT = Path(__file__).resolve().parent.parent

SMALL_TAXONOMY = {
    "include": ["council", "council tax", "housing", "mp", "funding", "election", "budget"],
    "exclude": ["strictly come dancing", "premier league", "love island"],
    "stop_words": ["the", "a", "and", "of", "to", "for", "in", "on", "uk", "today", "council", "councils"],
    "places": ["Bolton", "Wigan", "Manchester", "St Helens", "London", "Hamm"],
    "domain_to_place": {
        "theboltonnews.co.uk": "Bolton",
        "standard.co.uk": "London",
    },
    "source_to_place": {
        "Evening Standard": "London",
    },
}


@pytest.fixture
def taxonomy() -> Taxonomy:
    return Taxonomy.from_mapping(SMALL_TAXONOMY)


def rss(title: str, *items: str) -> bytes:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>{title}</title>
    <link>https://example.co.uk/</link>
    {''.join(items)}
  </channel>
</rss>""".encode("utf-8")


def rss_item(title: str, link: str, pub: str = "", description: str = "") -> str:
    pub_xml = f"<pubDate>{pub}</pubDate>" if pub else ""
    return f"""
    <item>
      <title>{title}</title>
      <link>{link}</link>
      <description><![CDATA[{description}]]></description>
      {pub_xml}
    </item>"""


class FakeResponse:
    def __init__(self, content: bytes = b"", status_code: int = 200, chunks: list | None = None) -> None:
        self.content = content
        self.chunks = chunks if chunks is not None else ([content] if content else [])
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self.closed = False

    def iter_content(self, chunk_size=1):
        yield from self.chunks

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Stands in for requests.Session: url -> FakeResponse or exception instance."""

    def __init__(self, routes: dict) -> None:
        self.routes = routes
        self.calls: list[tuple[str, float]] = []

    def get(self, url, timeout=None, allow_redirects=True, **kwargs):
        self.calls.append((url, timeout))
        result = self.routes.get(url)
        if result is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    import fetch_news

    monkeypatch.setattr(fetch_news.time, "sleep", lambda s: None)
