"""Insert an "Impact" callout with the citation count into paper pages."""

from __future__ import annotations

import logging
from pathlib import Path

from metadata import PAPERS_DIR
from models import ResolutionResult

ANNOTATION_MARKER = "import { Aside }"
IMPORT_LINE = "import { Aside } from '@astrojs/starlight/components';"
CITATION_SOURCE = "Semantic Scholar"
FRONTMATTER_DELIMITER = "---"

# (min citations, tier label), checked top-down
_TIERS: tuple[tuple[int, str], ...] = (
    (10_000, "Landmark"),
    (1_000, "Influential"),
    (100, "Notable"),
    (0, "Emerging"),
)

LOGGER = logging.getLogger(__name__)


def round_citations(count: int) -> int:
    """Round to a magnitude-dependent step so the callout doesn't imply false precision.

    >= 10,000 rounds to the nearest 500, >= 1,000 to the nearest 100, anything
    smaller to the nearest 50. Halves round up.
    """
    if count >= 10_000:
        step = 500
    elif count >= 1_000:
        step = 100
    else:
        step = 50
    return (count + step // 2) // step * step


def format_count(count: int) -> str:
    return f"{round_citations(count):,}"


def citation_tier(count: int) -> str:
    for minimum, label in _TIERS:
        if count >= minimum:
            return label
    return _TIERS[-1][1]


def build_callout(result: ResolutionResult) -> str:
    count = result.citation_count or 0
    tier = result.tier or citation_tier(count)
    return "\n".join([
        '<Aside type="tip" title="Impact">',
        f"**Tier:** {tier} | **Citations:** ~{format_count(count)} ({CITATION_SOURCE})",
        "</Aside>",
    ])


def annotate(document: str, result: ResolutionResult) -> str:
    """Return the document with the callout inserted right after its frontmatter.

    The document is returned unchanged when there is no citation count, when it
    already carries the callout import, or when the frontmatter never closes.
    """
    if result.citation_count is None:
        LOGGER.warning("Skipping %s: no citation data", result.paper_id)
        return document

    if ANNOTATION_MARKER in document:
        LOGGER.info("Already annotated: %s", result.paper_id)
        return document

    start = document.find(FRONTMATTER_DELIMITER)
    end = document.find(FRONTMATTER_DELIMITER, start + len(FRONTMATTER_DELIMITER)) if start != -1 else -1
    if end == -1:
        LOGGER.warning("No frontmatter end in %s, skipping", result.paper_id)
        return document

    split_at = end + len(FRONTMATTER_DELIMITER)
    frontmatter, body = document[:split_at], document[split_at:]
    return f"{frontmatter}\n\n{IMPORT_LINE}\n\n{build_callout(result)}\n{body}"


def apply_citations(
    results: list[ResolutionResult],
    papers_dir: str | Path | None = None,
    dry_run: bool = False,
) -> tuple[int, int]:
    """Annotate every matched paper page in place. Returns (applied, skipped)."""
    directory = Path(papers_dir or PAPERS_DIR)
    applied = 0
    skipped = 0

    for result in results:
        if not result.matched or result.citation_count is None:
            LOGGER.warning("Skipping %s: no citation data", result.paper_id)
            skipped += 1
            continue

        path = directory / result.paper_id
        if not path.exists():
            LOGGER.warning("Skipping %s: file not found in %s", result.paper_id, directory)
            skipped += 1
            continue

        content = path.read_text(encoding="utf-8")
        updated = annotate(content, result)
        if updated == content:
            skipped += 1
            continue

        if dry_run:
            LOGGER.info("[dry-run] Would annotate %s", result.paper_id)
        else:
            path.write_text(updated, encoding="utf-8")
            LOGGER.info(
                "Annotated %s (~%s citations)",
                result.paper_id,
                format_count(result.citation_count),
            )
        applied += 1

    LOGGER.info("Apply complete. applied=%s skipped=%s", applied, skipped)
    return applied, skipped
