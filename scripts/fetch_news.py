#!/usr/bin/env python3
# scripts/fetch_news.py
#
# Build public/data/news.json from config/sources.txt.
#
# - One feed per source: candidates tried in order, first one that parses
#   and has entries wins, the rest are never requested
# - Fixed courtesy delay before every attempt, fixed per-attempt timeout,
#   no retries beyond the candidate list
# - A source whose candidates all fail is logged and skipped
# - Politics filter (exclude beats include) from config/taxonomy.json5
# - De-dup by source+title keeping the newest, newest-first, capped
#
# Usage:
#   python3 scripts/fetch_news.py --out public/data/news.json

from __future__ import annotations

import argparse
import calendar
import os
import re
import sys
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, List, Tuple

import feedparser  # type: ignore
import requests    # type: ignore
from bs4 import BeautifulSoup  # type: ignore

from news_artifacts import atomic_write_json, utc_now_iso
from news_sources import DEFAULT_SOURCES_PATH, Source, load_sources
from news_taxonomy import DEFAULT_TAXONOMY_PATH, Taxonomy, TaxonomyError, load_taxonomy
from politics_filter import is_political

# ---------------- Tunables ----------------
HTTP_TIMEOUT_S = float(os.getenv("UKM_HTTP_TIMEOUT", "15"))
FETCH_DELAY_S  = float(os.getenv("UKM_FETCH_DELAY", "0.1"))
MAX_ITEMS      = int(os.getenv("UKM_MAX_ITEMS", "200"))

USER_AGENT = os.getenv("UKM_UA", "UKPoliticalMood/1.0 (politics feed)")
ACCEPT_HEADER = "application/rss+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.5"

DEFAULT_OUT_PATH = os.path.join("public", "data", "news.json")

WS_RE = re.compile(r"\s+")
READ_CHUNK = 16 * 1024

clock = time.monotonic


class FeedError(Exception):
    """A candidate (or every candidate of a source) produced no usable feed."""


# ---------------- HTTP ----------------
def new_session() -> requests.Session:
    s = requests.Session()
    s.headers.update({
        "User-Agent": USER_AGENT,
        "Accept": ACCEPT_HEADER,
    })
    adapter = requests.adapters.HTTPAdapter(pool_connections=8, pool_maxsize=8, max_retries=0)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    return s


def read_body(resp, url: str, deadline: float) -> bytes:
    """Drain a streamed response, giving up once the attempt runs past its deadline."""
    chunks: List[bytes] = []
    for chunk in resp.iter_content(chunk_size=READ_CHUNK):
        if clock() > deadline:
            raise FeedError(f"{url}: body still arriving after attempt timeout")
        chunks.append(chunk)
    return b"".join(chunks)


def fetch_candidate(session: requests.Session, url: str, timeout: float = HTTP_TIMEOUT_S):
    """One attempt at one URL. Returns the parsed feed or raises FeedError.

    requests only bounds connect and each socket read, so the body is streamed
    and the whole attempt is held to `timeout` seconds.
    """
    deadline = clock() + timeout
    try:
        resp = session.get(url, timeout=timeout, allow_redirects=True, stream=True)
    except requests.RequestException as e:
        raise FeedError(f"{url}: {type(e).__name__}: {e}") from e
    try:
        if not getattr(resp, "ok", False):
            raise FeedError(f"{url}: HTTP {getattr(resp, 'status_code', '?')}")
        body = read_body(resp, url, deadline)
    except requests.RequestException as e:
        raise FeedError(f"{url}: {type(e).__name__}: {e}") from e
    finally:
        resp.close()
    if not body:
        raise FeedError(f"{url}: empty body")
    try:
        parsed = feedparser.parse(body)
    except Exception as e:
        raise FeedError(f"{url}: parse failed: {type(e).__name__}: {e}") from e
    if not parsed.entries:
        why = getattr(parsed, "bozo_exception", None)
        raise FeedError(f"{url}: no entries" + (f" ({why})" if why else ""))
    return parsed


def fetch_with_fallback(
    session: requests.Session,
    source: Source,
    timeout: float = HTTP_TIMEOUT_S,
    delay: float = FETCH_DELAY_S,
):
    last_err: FeedError | None = None
    for url in source.candidates:
        time.sleep(delay)
        try:
            return fetch_candidate(session, url, timeout), url
        except FeedError as e:
            last_err = e
            print(f"[miss]    {source.name}: {e}", flush=True)
    raise FeedError(f"all {len(source.candidates)} candidates failed; last: {last_err}")


# ---------------- Dates ----------------
def to_iso_from_struct(t) -> str | None:
    try:
        epoch = calendar.timegm(t)
        return datetime.fromtimestamp(epoch, tz=timezone.utc).isoformat().replace("+00:00", "Z")
    except (TypeError, ValueError, OverflowError):
        return None


def _to_iso_utc(dt: datetime) -> str | None:
    try:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
    except (OverflowError, ValueError):
        # e.g. 0001-01-01T00:00:00+01:00 has no UTC equivalent
        return None


def parse_any_dt_str(s: str) -> str | None:
    if not s:
        return None
    try:
        return _to_iso_utc(parsedate_to_datetime(s))
    except (TypeError, ValueError, IndexError, OverflowError):
        pass
    try:
        return _to_iso_utc(datetime.fromisoformat(s.replace("Z", "+00:00")))
    except (ValueError, OverflowError):
        return None


def pick_published(entry) -> str | None:
    for key in ("published_parsed", "updated_parsed", "created_parsed"):
        t = entry.get(key)
        if t:
            iso = to_iso_from_struct(t)
            if iso:
                return iso
    for key in ("published", "updated", "created", "issued", "date"):
        val = entry.get(key)
        if isinstance(val, str):
            iso = parse_any_dt_str(val.strip())
            if iso:
                return iso
    return None


def _ts(iso: str | None) -> float:
    """Sort key; missing or unparseable dates rank oldest."""
    if not iso:
        return float("-inf")
    try:
        dt = datetime.fromisoformat(iso.replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.timestamp()
    except (ValueError, OverflowError):
        return float("-inf")


# ---------------- Normalize / filter / dedup ----------------
def html_to_text(html: str) -> str:
    if not html:
        return ""
    if "<" not in html:
        return html
    return BeautifulSoup(html, "html.parser").get_text(" ")


def entry_summary(entry) -> str:
    raw = entry.get("summary") or entry.get("description") or ""
    if not raw:
        content = entry.get("content") or []
        if content and isinstance(content[0], dict):
            raw = content[0].get("value") or ""
    return WS_RE.sub(" ", html_to_text(raw)).strip()


def normalize_entry(entry, source_name: str) -> Dict[str, Any]:
    return {
        "title": (entry.get("title") or "").strip(),
        "link": (entry.get("link") or "").strip(),
        "pubDate": pick_published(entry),
        "source": source_name,
        "summary": entry_summary(entry),
    }


def dedupe_key(item: Dict[str, Any]) -> str:
    return f"{item.get('source') or ''}__{item.get('title') or ''}".lower()


def dedupe_and_rank(items: List[Dict[str, Any]], max_items: int = MAX_ITEMS) -> List[Dict[str, Any]]:
    best: Dict[str, Dict[str, Any]] = {}
    for it in items:
        key = dedupe_key(it)
        prev = best.get(key)
        if prev is None or _ts(it.get("pubDate")) > _ts(prev.get("pubDate")):
            best[key] = it
    ranked = sorted(best.values(), key=lambda x: _ts(x.get("pubDate")), reverse=True)
    return ranked[:max_items]


def collect(
    session: requests.Session,
    sources: List[Source],
    taxonomy: Taxonomy,
    timeout: float = HTTP_TIMEOUT_S,
    delay: float = FETCH_DELAY_S,
) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    collected: List[Dict[str, Any]] = []
    stats: Dict[str, Any] = {"sources_ok": 0, "sources_failed": [], "entries_seen": 0, "entries_dropped": 0, "political": 0}

    for idx, src in enumerate(sources, 1):
        try:
            parsed, url = fetch_with_fallback(session, src, timeout=timeout, delay=delay)
        except FeedError as e:
            stats["sources_failed"].append(src.name)
            print(f"[skip]    {src.name}: {e}", file=sys.stderr, flush=True)
            continue

        source_name = (parsed.feed.get("title") or "").strip() or src.name
        kept: List[Dict[str, Any]] = []
        for n, entry in enumerate(parsed.entries, 1):
            try:
                item = normalize_entry(entry, source_name)
            except Exception as e:
                stats["entries_dropped"] += 1
                print(f"[error]   {src.name}: entry {n} dropped: {type(e).__name__}: {e}", file=sys.stderr, flush=True)
                continue
            if is_political(item["title"], item["summary"], taxonomy):
                kept.append(item)

        stats["sources_ok"] += 1
        stats["entries_seen"] += len(parsed.entries)
        stats["political"] += len(kept)
        collected.extend(kept)
        print(f"[fetch]   {idx}/{len(sources)} {src.name} <- {url} entries={len(parsed.entries)} kept={len(kept)}", flush=True)

    return collected, stats


# ---------- Build ----------
def build(sources: List[Source], taxonomy: Taxonomy, out_path: str, session: requests.Session | None = None) -> dict:
    start = time.time()
    session = session or new_session()
    print(f"[fetch] sources={len(sources)} timeout={HTTP_TIMEOUT_S}s delay={FETCH_DELAY_S}s cap={MAX_ITEMS}", flush=True)

    collected, stats = collect(session, sources, taxonomy)
    items = dedupe_and_rank(collected, MAX_ITEMS)

    out = {"updatedAt": utc_now_iso(), "items": items}
    atomic_write_json(out_path, out)

    elapsed = time.time() - start
    print(f"[done] wrote {len(items)} political items to {out_path} elapsed={elapsed:.1f}s", flush=True)
    print("Debug:", {
        "sources_total": len(sources),
        "sources_ok": stats["sources_ok"],
        "sources_failed": stats["sources_failed"],
        "entries_seen": stats["entries_seen"],
        "entries_dropped": stats["entries_dropped"],
        "political": stats["political"],
        "kept": len(items),
        "elapsed_sec": round(elapsed, 2),
    }, flush=True)
    return out


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Build news.json from the UK politics feed registry")
    ap.add_argument("--sources-file", default=DEFAULT_SOURCES_PATH, help="Path to sources.txt")
    ap.add_argument("--taxonomy", default=DEFAULT_TAXONOMY_PATH, help="Path to taxonomy.json5")
    ap.add_argument("--out", default=DEFAULT_OUT_PATH, help="Output JSON file")
    args = ap.parse_args(argv)

    try:
        taxonomy = load_taxonomy(args.taxonomy)
        sources = load_sources(args.sources_file)
    except (TaxonomyError, OSError) as e:
        print(f"[error] config: {e}", file=sys.stderr, flush=True)
        return 1

    try:
        build(sources, taxonomy, args.out)
    except OSError as e:
        # previous news.json is left as it was
        print(f"[error] write failed: {e}", file=sys.stderr, flush=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
