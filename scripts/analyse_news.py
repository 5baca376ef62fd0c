#!/usr/bin/env python3
# scripts/analyse_news.py
#
# Step 2: read news.json, bucket items by inferred place, and write mood.json
#   {"updatedAt": ..., "areas": [{place, sampleCount, issues, keywords, examples}]}
# Areas are ordered by sampleCount, busiest first.
#
# news.json is required: if it is missing or unreadable we exit 1 and leave
# the previous mood.json in place.
#
# Usage:
#   python3 scripts/analyse_news.py --in public/data/news.json --out public/data/mood.json
#
# Safe to run repeatedly.

from __future__ import annotations

import argparse
import os
import sys
import time
from typing import List

from issue_extraction import build_areas
from news_artifacts import ArtifactError, atomic_write_json, read_items, utc_now_iso
from news_taxonomy import DEFAULT_TAXONOMY_PATH, Taxonomy, TaxonomyError, load_taxonomy

DEFAULT_IN_PATH  = os.path.join("public", "data", "news.json")
DEFAULT_OUT_PATH = os.path.join("public", "data", "mood.json")


def analyse(in_path: str, out_path: str, taxonomy: Taxonomy) -> dict:
    start = time.time()
    items = read_items(in_path)
    areas = build_areas(items, taxonomy)

    out = {"updatedAt": utc_now_iso(), "areas": areas}
    atomic_write_json(out_path, out)

    placed = sum(a["sampleCount"] for a in areas)
    print(f"[analyse] wrote mood.json for {len(areas)} places -> {out_path}", flush=True)
    print("Debug:", {
        "items": len(items),
        "areas": len(areas),
        "placements": placed,
        "elapsed_sec": round(time.time() - start, 2),
    }, flush=True)
    return out


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Build mood.json (per-place issues) from news.json")
    ap.add_argument("--in", dest="in_path", default=DEFAULT_IN_PATH, help="Input news.json")
    ap.add_argument("--out", default=DEFAULT_OUT_PATH, help="Output mood.json")
    ap.add_argument("--taxonomy", default=DEFAULT_TAXONOMY_PATH, help="Path to taxonomy.json5")
    args = ap.parse_args(argv)

    try:
        taxonomy = load_taxonomy(args.taxonomy)
    except TaxonomyError as e:
        print(f"[error] config: {e}", file=sys.stderr, flush=True)
        return 1

    try:
        analyse(args.in_path, args.out, taxonomy)
    except ArtifactError as e:
        print(f"[error] cannot read news: {e}", file=sys.stderr, flush=True)
        return 1
    except OSError as e:
        print(f"[error] write failed: {e}", file=sys.stderr, flush=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
