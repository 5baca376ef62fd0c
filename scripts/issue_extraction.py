#!/usr/bin/env python3
# scripts/issue_extraction.py
#
# Per-place phrase tables.
#
# Tokens: lowercase, URLs dropped, anything but [a-z0-9 -] blanked, split on
# whitespace; then short (<3), all-digit and stop-word tokens are removed.
# Bigrams are built from the *filtered* sequence, so "tax on pensioners"
# yields "tax pensioners".
#
#   issues   = top bigrams by count (ties: first seen)
#   keywords = top unigrams by count, minus any contained in an issue

from __future__ import annotations

import os
import re
from collections import Counter
from typing import Any, Dict, Iterable, List, Tuple

from news_taxonomy import Taxonomy
from place_inference import infer_places, ordered_places

TOP_PHRASES  = int(os.getenv("UKM_TOP_PHRASES", "10"))
MAX_EXAMPLES = int(os.getenv("UKM_MAX_EXAMPLES", "8"))

URL_RE     = re.compile(r"https?://\S+")
NONWORD_RE = re.compile(r"[^a-z0-9\s\-]")
DIGITS_RE  = re.compile(r"^\d+$")


def tokenize(text: str) -> List[str]:
    s = URL_RE.sub(" ", str(text or "").lower())
    return NONWORD_RE.sub(" ", s).split()


def is_content(tok: str, stop_words: Iterable[str]) -> bool:
    return len(tok) > 2 and tok not in stop_words and not DIGITS_RE.match(tok)


def content_tokens(text: str, stop_words: Iterable[str]) -> List[str]:
    return [t for t in tokenize(text) if is_content(t, stop_words)]


def phrase_counts(title: str, summary: str, stop_words: Iterable[str]) -> Tuple[Counter, Counter]:
    toks = content_tokens(f"{title or ''} {summary or ''}", stop_words)
    uni = Counter(toks)
    bi = Counter(f"{a} {b}" for a, b in zip(toks, toks[1:]))
    return uni, bi


def top_n(counts: Counter, n: int = TOP_PHRASES) -> List[str]:
    # sorted() is stable, so equal counts keep first-seen order
    return [text for text, _ in sorted(counts.items(), key=lambda kv: -kv[1])[:n]]


def example_of(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "title": item.get("title") or "",
        "link": item.get("link") or "",
        "source": item.get("source") or "",
        "pubDate": item.get("pubDate"),
    }


def pick_examples(items: List[Dict[str, Any]], limit: int = MAX_EXAMPLES) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    seen = set()
    for it in items:
        key = it.get("link") or it.get("title") or ""
        if key in seen:
            continue
        seen.add(key)
        out.append(example_of(it))
        if len(out) >= limit:
            break
    return out


class Bucket:
    """Running tallies for one place."""

    def __init__(self, place: str) -> None:
        self.place = place
        self.items: List[Dict[str, Any]] = []
        self.uni: Counter = Counter()
        self.bi: Counter = Counter()

    def add(self, item: Dict[str, Any], uni: Counter, bi: Counter) -> None:
        self.items.append(item)
        self.uni.update(uni)
        self.bi.update(bi)

    def summarize(self, n: int = TOP_PHRASES, max_examples: int = MAX_EXAMPLES) -> Dict[str, Any]:
        issues = top_n(self.bi, n)
        keywords = [w for w in top_n(self.uni, n) if not any(w in issue for issue in issues)]
        return {
            "place": self.place,
            "sampleCount": len(self.items),
            "issues": issues,
            "keywords": keywords,
            "examples": pick_examples(self.items, max_examples),
        }


def build_areas(items: List[Dict[str, Any]], taxonomy: Taxonomy) -> List[Dict[str, Any]]:
    buckets: Dict[str, Bucket] = {}
    for it in items:
        places = infer_places(it, taxonomy)
        if not places:
            continue
        uni, bi = phrase_counts(it.get("title") or "", it.get("summary") or "", taxonomy.stop_words)
        for place in ordered_places(places, taxonomy):
            bucket = buckets.get(place)
            if bucket is None:
                bucket = buckets[place] = Bucket(place)
            bucket.add(it, uni, bi)

    areas = [b.summarize() for b in buckets.values()]
    areas.sort(key=lambda a: -a["sampleCount"])
    return areas
