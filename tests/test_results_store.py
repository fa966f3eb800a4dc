from __future__ import annotations

import json
from pathlib import Path

from models import ResolutionResult
from results_store import load_results, save_results

MATCHED = ResolutionResult(
    paper_id="attention.mdx",
    citation_count=90000,
    matched=True,
    matched_title="Attention Is All You Need",
    match_score=1.35,
)
UNMATCHED = ResolutionResult(
    paper_id="obscure.mdx",
    citation_count=None,
    matched=False,
    note='Best score 0.45: "Something Else"',
)


def test_load_results_missing_file_is_empty(tmp_path: Path) -> None:
    assert load_results(tmp_path / "citation-data.json") == {}


def test_save_results_writes_camel_case_json(tmp_path: Path) -> None:
    path = tmp_path / "citation-data.json"
    save_results([MATCHED], path)

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload == [{
        "id": "attention.mdx",
        "citationCount": 90000,
        "matched": True,
        "matchedTitle": "Attention Is All You Need",
        "matchScore": 1.35,
        "note": None,
        "tier": None,
    }]
    assert not (tmp_path / "citation-data.json.tmp").exists()


def test_results_survive_save_and_load(tmp_path: Path) -> None:
    path = tmp_path / "out" / "citation-data.json"
    save_results([MATCHED, UNMATCHED], path)

    loaded = load_results(path)

    assert loaded == {"attention.mdx": MATCHED, "obscure.mdx": UNMATCHED}


def test_load_results_keeps_hand_curated_tier(tmp_path: Path) -> None:
    path = tmp_path / "citation-data.json"
    path.write_text(json.dumps([
        {"id": "attention.mdx", "citationCount": 90000, "matched": True, "tier": "Foundational",
         "title": "Attention Is All You Need", "authors": "Vaswani, A."},
        {"title": "entry without an id is ignored"},
    ]), encoding="utf-8")

    loaded = load_results(path)

    assert list(loaded) == ["attention.mdx"]
    assert loaded["attention.mdx"].tier == "Foundational"
    assert loaded["attention.mdx"].match_score is None


def test_load_results_accepts_file_keyed_entries(tmp_path: Path) -> None:
    path = tmp_path / "citation-data.json"
    path.write_text(json.dumps([
        {"file": "attention.mdx", "title": "Attention Is All You Need", "authors": "Vaswani, A.",
         "year": 2017, "citationCount": 90000, "matched": True, "matchScore": 1.35, "tier": "Foundational"},
    ]), encoding="utf-8")

    loaded = load_results(path)

    assert loaded["attention.mdx"].tier == "Foundational"
    assert loaded["attention.mdx"].citation_count == 90000
