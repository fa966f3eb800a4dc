"""Post-run reporting: a review table of results that need a human look.

One output file is produced after every lookup run:

  citation_review.csv: every unmatched paper (with the reason it was
                        rejected) plus matched papers whose score sits below
                        LOW_CONFIDENCE_SCORE, worst first.

Also runnable standalone against an existing citation data file:
    python report.py [citation-data.json]
"""

from __future__ import annotations

import csv
import logging
import os
from pathlib import Path

from models import ResolutionResult

LOGGER = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configurable paths / limits
# ---------------------------------------------------------------------------

REVIEW_REPORT_PATH = os.getenv("REVIEW_REPORT_PATH", "citation_review.csv")
LOW_CONFIDENCE_SCORE = float(os.getenv("LOW_CONFIDENCE_SCORE", "0.8"))

REVIEW_COLUMNS = [
    "paper_id",
    "matched",
    "citation_count",
    "matched_title",
    "match_score",
    "note",
]


def _needs_review(result: ResolutionResult) -> bool:
    if not result.matched:
        return True
    return result.match_score is not None and result.match_score < LOW_CONFIDENCE_SCORE


def _build_review_rows(results: list[ResolutionResult]) -> list[dict]:
    flagged = [r for r in results if _needs_review(r)]
    # unmatched first, then low-confidence matches by ascending score
    flagged.sort(key=lambda r: (r.matched, r.match_score or 0.0))
    return [
        {
            "paper_id": r.paper_id,
            "matched": r.matched,
            "citation_count": "" if r.citation_count is None else r.citation_count,
            "matched_title": r.matched_title or "",
            "match_score": "" if r.match_score is None else r.match_score,
            "note": r.note or "",
        }
        for r in flagged
    ]


def generate_review(results: list[ResolutionResult], path: str | Path | None = None) -> int:
    """Write the review CSV and return the number of flagged rows."""
    target = Path(path or REVIEW_REPORT_PATH)
    rows = _build_review_rows(results)

    with target.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=REVIEW_COLUMNS)
        writer.writeheader()
        writer.writerows(rows)

    LOGGER.info("report: %d papers flagged for review → %s", len(rows), target)
    return len(rows)


# ---------------------------------------------------------------------------
# Standalone execution
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import sys

    from dotenv import load_dotenv

    from results_store import load_results

    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    source = sys.argv[1] if len(sys.argv) > 1 else None
    flagged = generate_review(list(load_results(source).values()))
    print(f"{flagged} papers to review → {REVIEW_REPORT_PATH}")
