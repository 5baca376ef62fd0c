#!/usr/bin/env python3
# scripts/politics_filter.py
#
# Politics-only filter. Exclusions (TV, football, gossip...) always win over
# inclusions; otherwise one include hit is enough.

from __future__ import annotations

from news_taxonomy import Taxonomy


def haystack(title: str | None, summary: str | None) -> str:
    return f"{title or ''} {summary or ''}"


def excluded_by(text: str, taxonomy: Taxonomy) -> bool:
    return any(rx.search(text) for rx in taxonomy.exclude)


def is_political(title: str | None, summary: str | None, taxonomy: Taxonomy) -> bool:
    text = haystack(title, summary)
    if excluded_by(text, taxonomy):
        return False
    return any(rx.search(text) for rx in taxonomy.include)
