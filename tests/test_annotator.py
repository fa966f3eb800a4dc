from __future__ import annotations

from pathlib import Path

import pytest

from annotator import (
    IMPORT_LINE,
    annotate,
    apply_citations,
    citation_tier,
    format_count,
    round_citations,
)
from models import ResolutionResult

PAGE = """---
title: Transformer
description: "Attention Is All You Need"
---

**Authors:** Vaswani, A., Shazeer, N.
**Published:** 2017
"""


def _result(count: int | None = 90000, matched: bool = True, tier: str | None = None,
            paper_id: str = "attention.mdx") -> ResolutionResult:
    return ResolutionResult(paper_id=paper_id, citation_count=count, matched=matched, tier=tier)


@pytest.mark.parametrize("count,expected", [
    (43, 50),
    (24, 0),
    (25, 50),
    (999, 1000),
    (1234, 1200),
    (1250, 1300),
    (9999, 10000),
    (12345, 12500),
    (90000, 90000),
])
def test_round_citations(count: int, expected: int) -> None:
    assert round_citations(count) == expected


def test_format_count_uses_thousands_separators() -> None:
    assert format_count(90000) == "90,000"
    assert format_count(1234) == "1,200"
    assert format_count(43) == "50"


@pytest.mark.parametrize("count,tier", [
    (90000, "Landmark"),
    (1500, "Influential"),
    (150, "Notable"),
    (12, "Emerging"),
])
def test_citation_tier(count: int, tier: str) -> None:
    assert citation_tier(count) == tier


def test_annotate_inserts_callout_after_frontmatter() -> None:
    updated = annotate(PAGE, _result())

    frontmatter_end = PAGE.index("---", 3) + 3
    assert updated.startswith(PAGE[:frontmatter_end] + "\n\n" + IMPORT_LINE + "\n\n")
    assert '<Aside type="tip" title="Impact">' in updated
    assert "**Tier:** Landmark | **Citations:** ~90,000 (Semantic Scholar)" in updated
    assert updated.endswith("</Aside>\n" + PAGE[frontmatter_end:])


def test_annotate_prefers_curated_tier() -> None:
    updated = annotate(PAGE, _result(tier="Foundational"))
    assert "**Tier:** Foundational |" in updated


def test_annotate_is_idempotent() -> None:
    once = annotate(PAGE, _result())
    twice = annotate(once, _result())
    assert twice == once


def test_annotate_without_citation_count_is_noop() -> None:
    assert annotate(PAGE, _result(count=None)) == PAGE


def test_annotate_without_frontmatter_end_is_noop() -> None:
    broken = "---\ntitle: Never closed\n\nBody text.\n"
    assert annotate(broken, _result()) == broken


def test_apply_citations_writes_matched_pages(tmp_path: Path) -> None:
    (tmp_path / "attention.mdx").write_text(PAGE, encoding="utf-8")
    (tmp_path / "obscure.mdx").write_text(PAGE, encoding="utf-8")

    applied, skipped = apply_citations(
        [
            _result(),
            _result(count=None, matched=False, paper_id="obscure.mdx"),
            _result(paper_id="missing.mdx"),
        ],
        tmp_path,
    )

    assert (applied, skipped) == (1, 2)
    assert IMPORT_LINE in (tmp_path / "attention.mdx").read_text(encoding="utf-8")
    assert (tmp_path / "obscure.mdx").read_text(encoding="utf-8") == PAGE


def test_apply_citations_second_run_skips_annotated_pages(tmp_path: Path) -> None:
    (tmp_path / "attention.mdx").write_text(PAGE, encoding="utf-8")

    apply_citations([_result()], tmp_path)
    first = (tmp_path / "attention.mdx").read_text(encoding="utf-8")
    applied, skipped = apply_citations([_result()], tmp_path)

    assert (applied, skipped) == (0, 1)
    assert (tmp_path / "attention.mdx").read_text(encoding="utf-8") == first


def test_apply_citations_dry_run_leaves_files_untouched(tmp_path: Path) -> None:
    (tmp_path / "attention.mdx").write_text(PAGE, encoding="utf-8")

    applied, _ = apply_citations([_result()], tmp_path, dry_run=True)

    assert applied == 1
    assert (tmp_path / "attention.mdx").read_text(encoding="utf-8") == PAGE
