#!/usr/bin/env python3
# scripts/place_inference.py
#
# Which area(s) is a news item about? Every heuristic below runs and the
# results are unioned:
#   1) place names in title + summary (whole word)
#   2) link hostname -> domain_to_place (subdomains fall back to parent)
#   3) source display name -> source_to_place
#   4) place names inside the source display name itself

from __future__ import annotations

from typing import Any, Callable, Dict, List, Set
from urllib.parse import urlparse

from news_taxonomy import Taxonomy

HOST_PREFIXES = ("www.", "m.", "amp.")


def places_in(text: str, taxonomy: Taxonomy) -> Set[str]:
    if not text:
        return set()
    return {name for name, rx in taxonomy.places if rx.search(text)}


def host_of(url: str) -> str:
    try:
        host = (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""
    for prefix in HOST_PREFIXES:
        if host.startswith(prefix) and "." in host[len(prefix):]:
            host = host[len(prefix):]
            break
    return host


def places_in_text(item: Dict[str, Any], taxonomy: Taxonomy) -> Set[str]:
    return places_in(f"{item.get('title') or ''} {item.get('summary') or ''}", taxonomy)


def places_from_domain(item: Dict[str, Any], taxonomy: Taxonomy) -> Set[str]:
    host = host_of(item.get("link") or "")
    labels = host.split(".") if host else []
    # feeds.example.co.uk -> example.co.uk -> co.uk ...; first hit wins
    while len(labels) >= 2:
        place = taxonomy.domain_to_place.get(".".join(labels))
        if place:
            return {place}
        labels = labels[1:]
    return set()


def places_from_source(item: Dict[str, Any], taxonomy: Taxonomy) -> Set[str]:
    place = taxonomy.source_to_place.get((item.get("source") or "").strip().lower())
    return {place} if place else set()


def places_in_source_name(item: Dict[str, Any], taxonomy: Taxonomy) -> Set[str]:
    return places_in(item.get("source") or "", taxonomy)


HEURISTICS: List[Callable[[Dict[str, Any], Taxonomy], Set[str]]] = [
    places_in_text,
    places_from_domain,
    places_from_source,
    places_in_source_name,
]


def infer_places(item: Dict[str, Any], taxonomy: Taxonomy) -> Set[str]:
    found: Set[str] = set()
    for heuristic in HEURISTICS:
        found |= heuristic(item, taxonomy)
    return found


def ordered_places(places: Set[str], taxonomy: Taxonomy) -> List[str]:
    """Stable order for a place set: configured order first, mapped-only places after, A-Z."""
    rank = {name: i for i, name in enumerate(taxonomy.place_names())}
    return sorted(places, key=lambda p: (rank.get(p, len(rank)), p))
