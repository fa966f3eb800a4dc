"""Metadata extraction from paper pages (frontmatter + labelled body lines)."""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

from models import PaperRecord

PAPERS_DIR = os.getenv("PAPERS_DIR", "src/content/docs/papers")
PAPERS_GLOB = os.getenv("PAPERS_GLOB", "*.mdx")
METADATA_PATH = os.getenv("METADATA_PATH", "scripts/paper-metadata.json")

LOGGER = logging.getLogger(__name__)

_FRONTMATTER_RE = re.compile(r"\A---\n(.*?)\n---", re.DOTALL)
_DESCRIPTION_RE = re.compile(r'^description:\s*"(.+)"$', re.MULTILINE)
_AUTHORS_RE = re.compile(r"\*\*Authors:\*\*\s*(.+)")
_PUBLISHED_RE = re.compile(r"\*\*Published:\*\*\s*(\d{4})")


def extract_record(paper_id: str, text: str) -> PaperRecord | None:
    """Build a PaperRecord from a page's raw text.

    Returns None (and logs a warning) when the page has no frontmatter block.
    Missing title/authors default to "" and a missing year to None.
    """
    fm_match = _FRONTMATTER_RE.match(text)
    if not fm_match:
        LOGGER.warning("No frontmatter in %s, skipping", paper_id)
        return None

    desc_match = _DESCRIPTION_RE.search(fm_match.group(1))
    authors_match = _AUTHORS_RE.search(text)
    pub_match = _PUBLISHED_RE.search(text)

    return PaperRecord(
        paper_id=paper_id,
        title=desc_match.group(1) if desc_match else "",
        authors_raw=authors_match.group(1).strip() if authors_match else "",
        year=int(pub_match.group(1)) if pub_match else None,
    )


def extract_metadata(papers_dir: str | Path | None = None, pattern: str | None = None) -> list[PaperRecord]:
    """Extract records for every page in papers_dir, sorted by file name."""
    directory = Path(papers_dir or PAPERS_DIR)
    if not directory.is_dir():
        raise FileNotFoundError(f"Papers directory not found: {directory}")
    records: list[PaperRecord] = []

    for path in sorted(directory.glob(pattern or PAPERS_GLOB)):
        record = extract_record(path.name, path.read_text(encoding="utf-8"))
        if record is not None:
            records.append(record)

    LOGGER.info("Extracted metadata for %s papers from %s", len(records), directory)
    return records


def save_records(records: list[PaperRecord], path: str | Path | None = None) -> None:
    target = Path(path or METADATA_PATH)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = [_record_to_dict(record) for record in records]
    target.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    LOGGER.info("Wrote %s records -> %s", len(records), target)


def load_records(path: str | Path | None = None) -> list[PaperRecord]:
    """Load records written by save_records. Raises FileNotFoundError if absent."""
    source = Path(path or METADATA_PATH)
    with source.open(encoding="utf-8") as fh:
        payload = json.load(fh)

    if not isinstance(payload, list):
        raise RuntimeError(f"Unexpected metadata payload shape in {source}: expected a list")
    return [_record_from_dict(item) for item in payload if isinstance(item, dict)]


def _record_to_dict(record: PaperRecord) -> dict[str, Any]:
    return {
        "id": record.paper_id,
        "title": record.title,
        "authors": record.authors_raw,
        "year": record.year,
    }


def _record_from_dict(item: dict[str, Any]) -> PaperRecord:
    year = item.get("year")
    return PaperRecord(
        paper_id=str(item.get("id", "")),
        title=item.get("title") or "",
        authors_raw=item.get("authors") or "",
        year=year if isinstance(year, int) else None,
    )
