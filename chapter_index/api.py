"""
Public API: run segmentation from code.

    from chapter_index import segment_document, segment_file
    result = segment_document(pages, has_index=True, index_from_page=2, index_to_page=3)
    result = segment_file("book.pdf", llm_oracle=True)
"""

import logging
import threading
from pathlib import Path

from chapter_index.backends import backend_for_path, get_backend
from chapter_index.config import load_tools_config
from chapter_index.models import Page, SegmentationConfig, SegmentationResult
from chapter_index.oracle import IndexOracle, LLMIndexOracle
from chapter_index.pipeline import segment_pages
from chapter_index.tokenizer import Tokenizer, get_tokenizer

log = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4
DEFAULT_SCAN_PAGES = 10


def _resolve_tokenizer(tokenizer: Tokenizer | str | None) -> Tokenizer:
    if tokenizer is None:
        tokenizer = load_tools_config().get("tokenizer")
    if tokenizer is None or isinstance(tokenizer, str):
        return get_tokenizer(tokenizer)
    return tokenizer


def _resolve_workers(max_workers: int | None) -> int:
    if max_workers is None:
        max_workers = load_tools_config().get("max_workers", DEFAULT_MAX_WORKERS)
    return max(1, int(max_workers))


def segment_document(
    pages: list[Page],
    *,
    has_index: bool = False,
    index_from_page: int | None = None,
    index_to_page: int | None = None,
    use_oracle: bool = False,
    oracle: IndexOracle | None = None,
    tokenizer: Tokenizer | str | None = None,
    max_workers: int | None = None,
    scan_pages: int | None = None,
    cancel_event: threading.Event | None = None,
) -> SegmentationResult:
    """
    Segment an in-memory page corpus (library entry point).

    Args:
        pages: Ordered pages with unique, increasing page_number.
        has_index: The document has a table of contents at index_from_page..index_to_page.
        index_from_page: First index page (1-based).
        index_to_page: Last index page; None means a single page.
        use_oracle: Ask the oracle even when a table of contents is found.
        oracle: IndexOracle used when no index is found (or use_oracle).
        tokenizer: Tokenizer instance or registry name; default from chapter_index_tools.py.
        max_workers: Per-chapter worker threads; default from chapter_index_tools.py.
        scan_pages: Leading pages searched for a table of contents (default 10).
        cancel_event: Set from another thread to abort the run.

    Returns:
        SegmentationResult with the DocumentModel and a ResolutionReport.
    """
    config = SegmentationConfig(
        has_index=has_index,
        index_from_page=index_from_page,
        index_to_page=index_to_page,
        use_oracle=use_oracle,
        max_workers=_resolve_workers(max_workers),
        scan_pages=scan_pages or DEFAULT_SCAN_PAGES,
    )
    return segment_pages(
        pages,
        config=config,
        oracle=oracle,
        tokenizer=_resolve_tokenizer(tokenizer),
        cancel_event=cancel_event,
    )


def load_pages(path: str | Path, backend: str | None = None) -> list[Page]:
    """Read a document into pages with the named page source (picked from the suffix when None)."""
    path = Path(path)
    name = backend or backend_for_path(path)
    return get_backend(name)().load(path)


def segment_file(
    path: str | Path,
    *,
    backend: str | None = None,
    has_index: bool = False,
    index_from_page: int | None = None,
    index_to_page: int | None = None,
    use_oracle: bool = False,
    llm_oracle: bool = False,
    llm_model: str | None = None,
    oracle: IndexOracle | None = None,
    tokenizer: Tokenizer | str | None = None,
    max_workers: int | None = None,
    scan_pages: int | None = None,
    cancel_event: threading.Event | None = None,
) -> SegmentationResult:
    """
    Load a PDF or page-corpus JSON and segment it.

    llm_oracle builds an LLMIndexOracle (OpenRouter) when no oracle is given;
    llm_model overrides the model configured for the "index" tool.
    """
    pages = load_pages(path, backend)
    if oracle is None and (llm_oracle or use_oracle):
        oracle = LLMIndexOracle(model=llm_model)
    log.info("Loaded %d pages from %s", len(pages), Path(path).name)
    return segment_document(
        pages,
        has_index=has_index,
        index_from_page=index_from_page,
        index_to_page=index_to_page,
        use_oracle=use_oracle,
        oracle=oracle,
        tokenizer=tokenizer,
        max_workers=max_workers,
        scan_pages=scan_pages,
        cancel_event=cancel_event,
    )
