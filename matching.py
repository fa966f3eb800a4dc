"""Title/author/year heuristic for picking the right search hit (no API calls)."""

from __future__ import annotations

import re

from models import Candidate, PaperRecord

MATCH_THRESHOLD = 0.6

EXACT_TITLE_SCORE = 1.0
CONTAINED_TITLE_SCORE = 0.85
SAME_YEAR_BONUS = 0.15
ADJACENT_YEAR_BONUS = 0.05
FIRST_AUTHOR_BONUS = 0.20

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lowercase, drop punctuation/non-ASCII, collapse whitespace."""
    cleaned = _NON_ALNUM_RE.sub("", text.lower())
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def title_similarity(a: str, b: str) -> float:
    """Score two titles in [0, 1].

    Exact match after normalization scores 1.0, containment in either
    direction 0.85, anything else the Jaccard index of the word sets.
    """
    a_norm = normalize(a)
    b_norm = normalize(b)
    if a_norm == b_norm:
        return EXACT_TITLE_SCORE
    if not a_norm or not b_norm:
        return 0.0
    if a_norm in b_norm or b_norm in a_norm:
        return CONTAINED_TITLE_SCORE

    a_words = set(a_norm.split(" "))
    b_words = set(b_norm.split(" "))
    return len(a_words & b_words) / len(a_words | b_words)


def year_bonus(record_year: int | None, candidate_year: int | None) -> float:
    if record_year is None or candidate_year is None:
        return 0.0
    if record_year == candidate_year:
        return SAME_YEAR_BONUS
    if abs(record_year - candidate_year) == 1:
        # preprint vs. proceedings year
        return ADJACENT_YEAR_BONUS
    return 0.0


def first_author_last_name(authors_raw: str) -> str:
    """Last token of the first comma-separated author, lowercased."""
    first_author = authors_raw.split(",")[0].strip()
    parts = first_author.split()
    return parts[-1].lower() if parts else ""


def author_bonus(record: PaperRecord, candidate: Candidate) -> float:
    expected = first_author_last_name(record.authors_raw)
    actual = (candidate.first_author_last_name or "").lower()
    if expected and actual == expected:
        return FIRST_AUTHOR_BONUS
    return 0.0


def score_candidate(record: PaperRecord, candidate: Candidate) -> float:
    """Composite score; tops out at 1.35 and is deliberately not clamped."""
    return (
        title_similarity(record.title, candidate.title)
        + year_bonus(record.year, candidate.year)
        + author_bonus(record, candidate)
    )


def best_candidate(record: PaperRecord, candidates: list[Candidate]) -> tuple[Candidate | None, float]:
    """Return the highest-scoring candidate; ties keep the API's ranking order."""
    best: Candidate | None = None
    best_score = -1.0
    for candidate in candidates:
        score = score_candidate(record, candidate)
        if score > best_score:
            best, best_score = candidate, score
    return best, best_score


def is_acceptable(score: float) -> bool:
    return score >= MATCH_THRESHOLD
