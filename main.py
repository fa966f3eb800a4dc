"""CLI entrypoint for the citation enrichment pipeline."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

import metadata
import report
import resolver
import results_store
from annotator import apply_citations
from metadata import extract_metadata, load_records, save_records
from models import PaperRecord, ResolutionResult
from resolver import resolve, summarize
from results_store import load_results, save_results

MODES = ["extract", "lookup", "apply", "report", "all"]


def parse_args() -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Enrich paper pages with Semantic Scholar citation counts")
    parser.add_argument(
        "--mode",
        choices=MODES,
        default="all",
        help=(
            "Pipeline stage to run. 'extract': pages -> metadata JSON. 'lookup': metadata -> "
            "citation data (resumes from prior output). 'apply': insert callouts into pages. "
            "'report': write the review CSV. 'all' (default): every stage in order."
        ),
    )
    parser.add_argument("--limit", type=int, default=None, help="Maximum number of papers to resolve this run")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log what would be looked up or annotated, without API calls or page writes",
    )
    parser.add_argument(
        "--papers-dir",
        default=os.getenv("PAPERS_DIR", metadata.PAPERS_DIR),
        help="Directory holding the paper pages",
    )
    parser.add_argument("--metadata-path", default=os.getenv("METADATA_PATH", metadata.METADATA_PATH))
    parser.add_argument(
        "--citation-data-path",
        default=os.getenv("CITATION_DATA_PATH", results_store.CITATION_DATA_PATH),
    )
    parser.add_argument("--review-path", default=os.getenv("REVIEW_REPORT_PATH", report.REVIEW_REPORT_PATH))
    return parser.parse_args()


def run_extract(papers_dir: str, metadata_path: str) -> None:
    records = extract_metadata(papers_dir)
    save_records(records, metadata_path)


def run_lookup(
    metadata_path: str,
    citation_data_path: str,
    limit: int | None,
    dry_run: bool,
) -> list[ResolutionResult]:
    """Resolve citation counts, persisting after every paper so a kill loses nothing."""
    records = load_records(metadata_path)
    prior = load_results(citation_data_path)

    pending = [r for r in records if not _already_matched(prior, r.paper_id)]
    logging.info(
        "Resuming: %s already matched, %s to look up",
        len(records) - len(pending),
        len(pending),
    )

    deferred: set[str] = set()
    if limit is not None and len(pending) > limit:
        deferred = {r.paper_id for r in pending[limit:]}
        logging.info("Limit %s: deferring %s papers to a later run", limit, len(deferred))
        pending = pending[:limit]

    if dry_run:
        for record in pending:
            logging.info("[dry-run] Would look up: %s", record.title)
        return list(prior.values())

    to_resolve = [r for r in records if r.paper_id not in deferred]

    def checkpoint(done: list[ResolutionResult]) -> None:
        save_results(_merge_in_order(records, done, prior), citation_data_path)

    delay = float(os.getenv("LOOKUP_DELAY_SECONDS", resolver.LOOKUP_DELAY_SECONDS))
    results = resolve(to_resolve, prior, on_result=checkpoint, delay_seconds=delay)
    final = _merge_in_order(records, results, prior)
    save_results(final, citation_data_path)

    matched, unmatched = summarize(results)
    logging.info("Lookup complete. matched=%s unmatched=%s output=%s", matched, unmatched, citation_data_path)
    return final


def _merge_in_order(
    records: list[PaperRecord],
    done: list[ResolutionResult],
    prior: dict[str, ResolutionResult],
) -> list[ResolutionResult]:
    """Results in metadata order; papers not resolved yet keep their prior result."""
    by_id = {result.paper_id: result for result in done}
    merged: list[ResolutionResult] = []
    for record in records:
        result = by_id.get(record.paper_id) or prior.get(record.paper_id)
        if result is not None:
            merged.append(result)
    return merged


def _already_matched(prior: dict[str, ResolutionResult], paper_id: str) -> bool:
    result = prior.get(paper_id)
    return result is not None and result.matched


def run_apply(citation_data_path: str, papers_dir: str, dry_run: bool) -> None:
    results = list(load_results(citation_data_path).values())
    if not results:
        logging.warning("No citation data at %s; nothing to apply", citation_data_path)
        return
    apply_citations(results, papers_dir, dry_run=dry_run)


def run_report(citation_data_path: str, review_path: str) -> None:
    results = list(load_results(citation_data_path).values())
    report.generate_review(results, review_path)


def run(args: argparse.Namespace) -> None:
    """Run the requested stage(s) in order."""
    mode = args.mode

    if mode in ("extract", "all"):
        run_extract(args.papers_dir, args.metadata_path)

    if mode in ("lookup", "all"):
        run_lookup(args.metadata_path, args.citation_data_path, args.limit, args.dry_run)

    if mode in ("apply", "all"):
        run_apply(args.citation_data_path, args.papers_dir, args.dry_run)

    if mode == "report":
        run_report(args.citation_data_path, args.review_path)
    elif mode == "all" and not args.dry_run:
        try:
            run_report(args.citation_data_path, args.review_path)
        except Exception as exc:
            logging.warning("Review report failed (non-fatal): %s", exc)


def main() -> None:
    """Initialize config and execute the pipeline."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args()

    try:
        run(args)
    except FileNotFoundError as exc:
        logging.error("Missing input file: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
