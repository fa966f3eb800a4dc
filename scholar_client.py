"""Semantic Scholar paper-search client with rate-limit backoff."""

from __future__ import annotations

import logging
import os
import time
from typing import Any

import requests

from models import Candidate

SEMANTIC_SCHOLAR_SEARCH_URL = "https://api.semanticscholar.org/graph/v1/paper/search"
SEARCH_FIELDS = "title,citationCount,year,authors"
REQUEST_TIMEOUT_SECONDS = 30
RETRY_DELAY_SECONDS = float(os.getenv("RETRY_DELAY_SECONDS", "10"))
MAX_RETRIES = int(os.getenv("SCHOLAR_MAX_RETRIES", "3"))

LOGGER = logging.getLogger(__name__)


class ScholarAPIError(RuntimeError):
    """A search request failed and will not be retried."""


class RateLimitedError(ScholarAPIError):
    """Still receiving 429 after every retry was spent."""


def search_papers(query: str, limit: int = 5) -> list[Candidate]:
    """Free-text paper search, returning candidates in the API's ranking order."""
    params = {"query": query, "fields": SEARCH_FIELDS, "limit": limit}
    response = _get_with_backoff(SEMANTIC_SCHOLAR_SEARCH_URL, params=params, headers=_headers())
    try:
        body = response.json()
    except ValueError as exc:
        raise ScholarAPIError(f"Unexpected non-JSON search response: {exc}") from exc
    return _parse_candidates(body)


def _headers() -> dict[str, str]:
    api_key = os.getenv("SEMANTIC_SCHOLAR_API_KEY")
    return {"x-api-key": api_key} if api_key else {}


def _get_with_backoff(
    url: str,
    *,
    params: dict[str, Any],
    headers: dict[str, str],
) -> requests.Response:
    """GET with linear backoff on 429; any other non-2xx status is fatal."""
    attempts = MAX_RETRIES + 1

    for attempt in range(1, attempts + 1):
        try:
            response = requests.get(url, params=params, headers=headers, timeout=REQUEST_TIMEOUT_SECONDS)
        except requests.RequestException as exc:
            raise ScholarAPIError(f"Request failed: {exc}") from exc

        if response.ok:
            return response

        if response.status_code != 429:
            raise ScholarAPIError(f"API error {response.status_code}")

        if attempt == attempts:
            break

        wait = RETRY_DELAY_SECONDS * attempt
        LOGGER.info(
            "Rate limited, waiting %ss (attempt %s/%s)",
            wait,
            attempt,
            attempts,
        )
        time.sleep(wait)

    raise RateLimitedError("Rate limited after all retries")


def _parse_candidates(body: Any) -> list[Candidate]:
    if not isinstance(body, dict):
        raise ScholarAPIError("Unexpected search payload shape: expected an object")

    items = body.get("data") or []
    if not isinstance(items, list):
        raise ScholarAPIError("Unexpected search payload shape: data is not a list")
    candidates: list[Candidate] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        candidates.append(
            Candidate(
                title=str(item.get("title") or ""),
                year=_as_int(item.get("year")),
                first_author_last_name=_first_author_last_name(item.get("authors")),
                citation_count=_as_int(item.get("citationCount")),
            )
        )
    return candidates


def _first_author_last_name(authors: Any) -> str | None:
    if not isinstance(authors, list) or not authors or not isinstance(authors[0], dict):
        return None
    parts = str(authors[0].get("name") or "").split()
    return parts[-1].lower() if parts else None


def _as_int(value: Any) -> int | None:
    return value if isinstance(value, int) and not isinstance(value, bool) else None
