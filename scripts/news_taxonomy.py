#!/usr/bin/env python3
# scripts/news_taxonomy.py
#
# Load the classification/geography tables from config/taxonomy.json5.
#
# Keys:
#   include, exclude   phrase lists for the politics filter
#   stop_words         closed list dropped before phrase counting
#   places             place names matched whole-word in item text
#   domain_to_place    registrable hostname -> place
#   source_to_place    feed display name   -> place
#
# Tables are read once at start-up and frozen; tests build their own
# Taxonomy via from_mapping() to swap tables in.

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Tuple

import json5  # type: ignore

DEFAULT_TAXONOMY_PATH = os.getenv("UKM_TAXONOMY", os.path.join("config", "taxonomy.json5"))


class TaxonomyError(Exception):
    """Taxonomy file missing or malformed."""


def phrase_pattern(phrase: str) -> re.Pattern:
    """Whole-word, case-insensitive pattern; inner spaces match any run of whitespace."""
    body = r"\s+".join(re.escape(part) for part in phrase.strip().split())
    head = r"\b" if re.match(r"\w", phrase.strip()) else ""
    tail = r"\b" if re.search(r"\w$", phrase.strip()) else ""
    return re.compile(f"{head}{body}{tail}", re.I)


def _str_list(data: Mapping[str, Any], key: str) -> List[str]:
    raw = data.get(key, [])
    if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
        raise TaxonomyError(f"'{key}' must be a list of strings")
    return [x.strip() for x in raw if x.strip()]


def _str_map(data: Mapping[str, Any], key: str) -> Dict[str, str]:
    raw = data.get(key, {})
    if not isinstance(raw, dict):
        raise TaxonomyError(f"'{key}' must be an object")
    out: Dict[str, str] = {}
    for k, v in raw.items():
        if not isinstance(v, str):
            raise TaxonomyError(f"'{key}.{k}' must be a string")
        out[str(k).strip().lower()] = v.strip()
    return out


@dataclass(frozen=True)
class Taxonomy:
    include: Tuple[re.Pattern, ...]
    exclude: Tuple[re.Pattern, ...]
    stop_words: frozenset
    places: Tuple[Tuple[str, re.Pattern], ...]
    domain_to_place: Mapping[str, str]
    source_to_place: Mapping[str, str]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Taxonomy":
        if not isinstance(data, Mapping):
            raise TaxonomyError("taxonomy root must be an object")
        places: List[Tuple[str, re.Pattern]] = []
        seen = set()
        for name in _str_list(data, "places"):
            if name.lower() in seen:
                continue
            seen.add(name.lower())
            places.append((name, phrase_pattern(name)))
        return cls(
            include=tuple(phrase_pattern(p) for p in _str_list(data, "include")),
            exclude=tuple(phrase_pattern(p) for p in _str_list(data, "exclude")),
            stop_words=frozenset(w.lower() for w in _str_list(data, "stop_words")),
            places=tuple(places),
            domain_to_place=_str_map(data, "domain_to_place"),
            source_to_place=_str_map(data, "source_to_place"),
        )

    def place_names(self) -> Iterable[str]:
        return (name for name, _ in self.places)


def load_taxonomy(path: str = DEFAULT_TAXONOMY_PATH) -> Taxonomy:
    # json5 keeps the last value for a repeated key, which the maps rely on.
    if not os.path.exists(path):
        raise TaxonomyError(f"taxonomy file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json5.load(f)
    except (OSError, ValueError) as e:
        raise TaxonomyError(f"{path}: {type(e).__name__}: {e}") from e
    return Taxonomy.from_mapping(data)
