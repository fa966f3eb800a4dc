"""Citation resolution: query, score, accept or reject, one record at a time."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import replace
from typing import Callable, Mapping

from matching import best_candidate, is_acceptable
from models import Candidate, PaperRecord, ResolutionResult
from scholar_client import search_papers

LOOKUP_DELAY_SECONDS = float(os.getenv("LOOKUP_DELAY_SECONDS", "3.5"))
SEARCH_LIMIT = 5

LOGGER = logging.getLogger(__name__)

SearchFn = Callable[[str, int], list[Candidate]]


def resolve(
    records: list[PaperRecord],
    prior_results: Mapping[str, ResolutionResult],
    *,
    search: SearchFn = search_papers,
    on_result: Callable[[list[ResolutionResult]], None] | None = None,
    delay_seconds: float | None = None,
) -> list[ResolutionResult]:
    """Resolve every record, reusing prior matched results untouched.

    Unmatched prior results are retried. Requests are strictly sequential with
    a fixed pause after each one. on_result, when given, receives the results
    accumulated so far after every record so callers can persist as they go.
    """
    delay = LOOKUP_DELAY_SECONDS if delay_seconds is None else delay_seconds
    results: list[ResolutionResult] = []
    total = len(records)

    for index, record in enumerate(records, 1):
        prior = prior_results.get(record.paper_id)
        if prior is not None and prior.matched:
            LOGGER.info("[%s/%s] Already matched: %s", index, total, record.paper_id)
            results.append(prior)
            if on_result is not None:
                on_result(results)
            continue

        LOGGER.info("[%s/%s] Looking up: %s", index, total, record.title[:60])
        result = resolve_record(record, search=search)
        if prior is not None and prior.tier and result.tier is None:
            result = replace(result, tier=prior.tier)
        results.append(result)
        if on_result is not None:
            on_result(results)

        time.sleep(delay)

    return results


def resolve_record(record: PaperRecord, search: SearchFn = search_papers) -> ResolutionResult:
    """Resolve one record; any lookup failure becomes an unmatched result."""
    try:
        candidates = search(record.title, SEARCH_LIMIT)
    except Exception as exc:  # broad so one bad record never stops the batch
        LOGGER.error("Lookup failed for %s: %s", record.paper_id, exc)
        return ResolutionResult(paper_id=record.paper_id, citation_count=None, matched=False, note=str(exc))

    if not candidates:
        LOGGER.warning("No results for %s", record.paper_id)
        return ResolutionResult(paper_id=record.paper_id, citation_count=None, matched=False, note="No results")

    candidate, score = best_candidate(record, candidates)
    if candidate is None:
        return ResolutionResult(paper_id=record.paper_id, citation_count=None, matched=False, note="No results")

    if is_acceptable(score):
        LOGGER.info(
            "Matched (score=%.2f): %s [%s citations]",
            score,
            candidate.title,
            candidate.citation_count,
        )
        return ResolutionResult(
            paper_id=record.paper_id,
            citation_count=candidate.citation_count,
            matched=True,
            matched_title=candidate.title,
            match_score=round(score, 2),
        )

    LOGGER.warning("No confident match for %s (best score=%.2f)", record.paper_id, score)
    return ResolutionResult(
        paper_id=record.paper_id,
        citation_count=None,
        matched=False,
        note=f'Best score {score:.2f}: "{candidate.title}"',
    )


def summarize(results: list[ResolutionResult]) -> tuple[int, int]:
    """Return (matched, unmatched) counts."""
    matched = sum(1 for result in results if result.matched)
    return matched, len(results) - matched
