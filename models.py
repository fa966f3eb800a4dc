"""Shared typed models for the citation pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PaperRecord:
    """Metadata extracted from one paper page, keyed by its file name."""

    paper_id: str
    title: str
    authors_raw: str
    year: int | None


@dataclass(frozen=True, slots=True)
class Candidate:
    """One search hit returned by the bibliographic API."""

    title: str
    year: int | None
    first_author_last_name: str | None
    citation_count: int | None


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome of matching one PaperRecord against search candidates."""

    paper_id: str
    citation_count: int | None
    matched: bool
    matched_title: str | None = None
    match_score: float | None = None
    note: str | None = None
    tier: str | None = None
