#!/usr/bin/env python3
# scripts/news_artifacts.py
#
# Read/write the two published artifacts:
#   news.json  {"updatedAt": ..., "items": [...]}
#   mood.json  {"updatedAt": ..., "areas": [...]}
# Writes go through a temp file + os.replace so a failed run never clobbers
# the previous artifact.
#
# read_items() is the strict reader used by analyse_news.py. read_json_or_empty()
# is the display layer's reader: it turns a missing or broken file into []
# so a page can render before the first run. The pipeline itself never calls it.

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, List


class ArtifactError(Exception):
    """An input artifact is missing or unusable."""


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def atomic_write_json(path: str, data: dict) -> None:
    # Serialize before touching the filesystem so encoding errors leave no temp file behind.
    body = json.dumps(data, ensure_ascii=False, indent=2) + "\n"
    dstdir = os.path.dirname(path) or "."
    os.makedirs(dstdir, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".ukm_", suffix=".json", dir=dstdir)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(body)
        os.replace(tmp, path)
    except Exception:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def read_items(path: str) -> List[Dict[str, Any]]:
    """Items of a news.json artifact. Anything short of a readable {"items": [...]} is an error."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            root = json.load(f)
    except FileNotFoundError as e:
        raise ArtifactError(f"{path}: not found") from e
    except (OSError, ValueError) as e:
        raise ArtifactError(f"{path}: {type(e).__name__}: {e}") from e
    items = root.get("items") if isinstance(root, dict) else None
    if not isinstance(items, list):
        raise ArtifactError(f"{path}: no 'items' list")
    return [it for it in items if isinstance(it, dict)]


def read_json_or_empty(path: str, key: str) -> List[Any]:
    """Reader-side view: a missing or broken file is just an empty list."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            root = json.load(f)
    except (OSError, ValueError):
        return []
    v = root.get(key) if isinstance(root, dict) else None
    return v if isinstance(v, list) else []
