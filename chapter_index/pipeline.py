"""
Segmentation pipeline: pages → index discovery → boundary resolution →
per-chapter assembly (fan-out) → merge/dedup (fan-in) → aggregation.

Stages are pure transformations over the in-memory page list. The only
external call is the index oracle, made once during discovery. Once the
top-level chapters have disjoint page ranges, each chapter's subchapter
resolution, text extraction and token counting run on a bounded thread pool;
every task owns one chapter. Merge/dedup only starts after all chapters are
joined back in document order.

A threading.Event passed as cancel_event is checked between stages and before
each chapter task; a cancelled run raises SegmentationCancelled and returns
no partial result. Re-running is always safe.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from chapter_index.aggregator import aggregate_document
from chapter_index.assembler import build_chapter
from chapter_index.corpus import PageCorpus
from chapter_index.discovery import IndexDiscovery, discover_index
from chapter_index.merge import merge_duplicate_chapters
from chapter_index.models import (
    ChapterNode,
    DocumentModel,
    IndexCandidate,
    Page,
    ResolutionReport,
    ResolvedRange,
    SegmentationConfig,
    SegmentationResult,
)
from chapter_index.oracle import IndexOracle
from chapter_index.resolver import (
    estimate_page_offset,
    iter_ranges,
    resolve_children,
    resolve_top_level,
)
from chapter_index.tokenizer import Tokenizer, get_tokenizer

log = logging.getLogger(__name__)


class SegmentationCancelled(Exception):
    """Raised when a run is cancelled through its cancel_event."""


def _check_cancelled(cancel_event: threading.Event | None, stage: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        log.info("Segmentation cancelled before %s", stage)
        raise SegmentationCancelled(f"Segmentation cancelled before {stage}")


def body_start_page(corpus: PageCorpus, index_pages: list[int]) -> int:
    """First page that is not part of a leading table of contents."""
    skipped = set(index_pages)
    for page in corpus.pages:
        if page.page_number not in skipped:
            return page.page_number
    return corpus.first_page


def front_matter_range(
    corpus: PageCorpus, ranges: list[ResolvedRange], body_start: int, title: str
) -> ResolvedRange | None:
    """
    Range for body pages before the first resolved title (all body pages when
    nothing resolved), or None when the first title sits on the body start.
    """
    first = min((r.from_page for r in ranges if r.resolved), default=corpus.last_page + 1)
    if first <= body_start:
        return None
    return ResolvedRange(title=title, from_page=body_start, to_page=first - 1)


def _process_chapter(
    corpus: PageCorpus,
    candidate: IndexCandidate,
    rng: ResolvedRange,
    position: int,
    tokenizer: Tokenizer,
    cancel_event: threading.Event | None,
) -> ChapterNode:
    _check_cancelled(cancel_event, f"chapter {position}")
    resolve_children(corpus, candidate, rng)
    return build_chapter(corpus, rng, position, tokenizer)


def build_chapters(
    corpus: PageCorpus,
    candidates: list[IndexCandidate],
    ranges: list[ResolvedRange],
    tokenizer: Tokenizer,
    max_workers: int = 4,
    cancel_event: threading.Event | None = None,
) -> list[ChapterNode]:
    """Per-chapter work on a bounded pool; results are returned in chapter order."""
    jobs = list(zip(candidates, ranges))
    if max_workers <= 1 or len(jobs) <= 1:
        return [
            _process_chapter(corpus, cand, rng, i, tokenizer, cancel_event)
            for i, (cand, rng) in enumerate(jobs, start=1)
        ]
    results: list[ChapterNode | None] = [None] * len(jobs)
    with ThreadPoolExecutor(max_workers=min(max_workers, len(jobs))) as executor:
        futures = {
            executor.submit(_process_chapter, corpus, cand, rng, i, tokenizer, cancel_event): i
            for i, (cand, rng) in enumerate(jobs, start=1)
        }
        for future in as_completed(futures):
            results[futures[future] - 1] = future.result()
    return [r for r in results if r is not None]


def _build_report(
    discovery: IndexDiscovery,
    ranges: list[ResolvedRange],
    merged_titles: list[str],
) -> ResolutionReport:
    report = ResolutionReport(
        index_source=discovery.source,
        index_pages=discovery.index_pages,
        merged_titles=merged_titles,
        warnings=list(discovery.warnings),
    )
    if discovery.source == "fallback":
        return report
    for rng in iter_ranges(ranges):
        if rng.resolved:
            report.resolved_count += 1
        else:
            report.unresolved_count += 1
            report.unresolved_titles.append(rng.title)
    report.page_offset = estimate_page_offset(ranges)
    return report


def segment_pages(
    pages: list[Page],
    config: SegmentationConfig | None = None,
    oracle: IndexOracle | None = None,
    tokenizer: Tokenizer | None = None,
    cancel_event: threading.Event | None = None,
) -> SegmentationResult:
    """
    Segment a page corpus into chapters and subchapters.

    Args:
        pages: Ordered pages (unique, increasing page_number). Empty → empty model.
        config: Index location and worker options.
        oracle: Optional IndexOracle used when no index is found (or config.use_oracle).
        tokenizer: Token counter (heuristic by default).
        cancel_event: Set it from another thread to cancel between stages.

    Returns:
        SegmentationResult with the DocumentModel and a ResolutionReport.

    Raises:
        InvalidPageCorpusError: duplicate or non-increasing page numbers.
        SegmentationCancelled: cancel_event was set.
    """
    config = config or SegmentationConfig()
    tokenizer = tokenizer or get_tokenizer()
    corpus = PageCorpus(pages)
    if not len(corpus):
        log.info("Empty page corpus; nothing to segment")
        return SegmentationResult(document=DocumentModel(), report=ResolutionReport())

    _check_cancelled(cancel_event, "index discovery")
    discovery = discover_index(corpus.pages, config, oracle)

    _check_cancelled(cancel_event, "boundary resolution")
    if discovery.candidates:
        # index pages are never matched as chapter titles and carry no chapter text
        corpus = corpus.without(discovery.index_pages)
        candidates = list(discovery.candidates)
        body_start = body_start_page(corpus, discovery.index_pages)
        ranges = resolve_top_level(corpus, candidates, body_start)
        lead_in = front_matter_range(corpus, ranges, body_start, config.front_matter_title)
        if lead_in is not None:
            log.info("Pages %d-%d precede the first chapter", lead_in.from_page, lead_in.to_page)
            candidates = [IndexCandidate(title=lead_in.title)] + candidates
            chapter_ranges = [lead_in] + ranges
        else:
            chapter_ranges = ranges
    else:
        discovery.source = "fallback"
        candidates = [IndexCandidate(title=config.fallback_title)]
        ranges = [
            ResolvedRange(
                title=config.fallback_title,
                from_page=corpus.first_page,
                to_page=corpus.last_page,
            )
        ]
        chapter_ranges = ranges
    log.info(
        "Resolved %d/%d chapters (index source: %s)",
        sum(1 for r in ranges if r.resolved), len(ranges), discovery.source,
    )

    _check_cancelled(cancel_event, "chapter assembly")
    chapters = build_chapters(
        corpus, candidates, chapter_ranges, tokenizer, config.max_workers, cancel_event
    )

    _check_cancelled(cancel_event, "merge")
    merged, merged_titles = merge_duplicate_chapters(chapters)

    _check_cancelled(cancel_event, "aggregation")
    document = aggregate_document(merged)
    report = _build_report(discovery, ranges, merged_titles)
    log.info(
        "Segmented %d pages into %d chapters, %d tokens (%d unresolved titles)",
        len(corpus), len(document.chapters), document.total_tokens, report.unresolved_count,
    )
    return SegmentationResult(document=document, report=report)
