#!/usr/bin/env python3
# scripts/news_sources.py
#
# Source registry: config/sources.txt, one feed per line:
#
#   # ===== North West =====
#   Wigan Today | https://www.wigantoday.net/rss | https://www.wigantoday.net/news/rss
#
# First URL is the primary, the rest are mirrors tried in order.

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import List, Tuple

DEFAULT_SOURCES_PATH = os.getenv("UKM_SOURCES", os.path.join("config", "sources.txt"))
SOURCE_LIMIT = int(os.getenv("UKM_SOURCE_LIMIT", "0"))  # >0 = smoke run on the first N sources


@dataclass(frozen=True)
class Source:
    name: str
    candidates: Tuple[str, ...]


def parse_source_line(line: str) -> Source | None:
    parts = [p.strip() for p in line.split("|")]
    name, urls = parts[0], parts[1:]
    candidates: List[str] = []
    for u in urls:
        if u and u not in candidates:
            candidates.append(u)
    if not name or not candidates:
        return None
    return Source(name=name, candidates=tuple(candidates))


def load_sources(path: str = DEFAULT_SOURCES_PATH, limit: int = SOURCE_LIMIT) -> list[Source]:
    sources: list[Source] = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, raw in enumerate(f, 1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            src = parse_source_line(line)
            if src is None:
                print(f"[sources] {path}:{lineno} skipped (need 'Name | url')", file=sys.stderr, flush=True)
                continue
            sources.append(src)
    if limit > 0:
        sources = sources[:limit]
    return sources
