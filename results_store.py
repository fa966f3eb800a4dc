"""JSON file store for resolution results (the resume cache)."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, Iterable

from models import ResolutionResult

CITATION_DATA_PATH = os.getenv("CITATION_DATA_PATH", "scripts/citation-data.json")

LOGGER = logging.getLogger(__name__)

_JSON_KEYS = {
    "paper_id": "id",
    "citation_count": "citationCount",
    "matched": "matched",
    "matched_title": "matchedTitle",
    "match_score": "matchScore",
    "note": "note",
    "tier": "tier",
}


def load_results(path: str | Path | None = None) -> dict[str, ResolutionResult]:
    """Return prior results keyed by paper_id, or {} when no file exists yet."""
    source = Path(path or CITATION_DATA_PATH)
    if not source.exists():
        return {}

    with source.open(encoding="utf-8") as fh:
        payload = json.load(fh)

    if not isinstance(payload, list):
        raise RuntimeError(f"Unexpected citation data shape in {source}: expected a list")

    results: dict[str, ResolutionResult] = {}
    for item in payload:
        if isinstance(item, dict) and (item.get("id") or item.get("file")):
            result = _result_from_dict(item)
            results[result.paper_id] = result

    LOGGER.info(
        "Loaded %s prior results (%s matched) from %s",
        len(results),
        sum(1 for r in results.values() if r.matched),
        source,
    )
    return results


def save_results(results: Iterable[ResolutionResult], path: str | Path | None = None) -> None:
    """Rewrite the whole results file; a temp file + rename keeps it intact on crash."""
    target = Path(path or CITATION_DATA_PATH)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = [_result_to_dict(result) for result in results]

    tmp = target.with_name(target.name + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    os.replace(tmp, target)


def _result_to_dict(result: ResolutionResult) -> dict[str, Any]:
    return {_JSON_KEYS[key]: value for key, value in asdict(result).items()}


def _result_from_dict(item: dict[str, Any]) -> ResolutionResult:
    score = item.get("matchScore")
    count = item.get("citationCount")
    return ResolutionResult(
        paper_id=str(item.get("id") or item["file"]),
        citation_count=count if isinstance(count, int) else None,
        matched=bool(item.get("matched")),
        matched_title=item.get("matchedTitle"),
        match_score=float(score) if isinstance(score, (int, float)) else None,
        note=item.get("note"),
        tier=item.get("tier"),
    )
