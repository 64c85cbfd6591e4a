"""
Detect tool: locate and parse a document's table of contents without resolving
boundaries. Independent, atomic.
"""

from pathlib import Path

from chapter_index.api import load_pages
from chapter_index.discovery import IndexDiscovery, discover_index
from chapter_index.models import IndexCandidate, SegmentationConfig


def run(
    path: Path,
    backend: str | None = None,
    index_from_page: int | None = None,
    index_to_page: int | None = None,
    scan_pages: int = 10,
) -> IndexDiscovery:
    """Load the document and run index discovery only (no oracle)."""
    pages = load_pages(path, backend)
    config = SegmentationConfig(
        has_index=index_from_page is not None,
        index_from_page=index_from_page,
        index_to_page=index_to_page,
        scan_pages=scan_pages,
    )
    return discover_index(pages, config)


def format_candidates(candidates: list[IndexCandidate], depth: int = 1) -> list[str]:
    """Indented '- Title (p. N)' lines, hints shown as given by the index."""
    lines = []
    for cand in candidates:
        page = cand.from_hint if cand.from_hint is not None else "?"
        lines.append(f"{'  ' * (depth - 1)}- {cand.title} (p. {page})")
        lines.extend(format_candidates(cand.subchapters, depth + 1))
    return lines
