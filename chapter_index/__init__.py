"""
Chapter Index: split long paginated documents into chapters and subchapters
with exact page ranges, text and token counts.

Use as a library:

    from chapter_index import segment_document
    result = segment_document(pages, has_index=True, index_from_page=2)
    for chapter in result.document.chapters:
        print(chapter.title, chapter.from_page, chapter.to_page, chapter.token_count)

Or run the CLI:

    chapter-index segment path/to/book.pdf -o outputs/book.json
"""

from chapter_index.api import segment_document, segment_file
from chapter_index.models import (
    ChapterNode,
    DocumentModel,
    IndexCandidate,
    InvalidPageCorpusError,
    Page,
    ResolutionReport,
    SegmentationConfig,
    SegmentationResult,
    SubchapterNode,
)
from chapter_index.oracle import IndexOracle, IndexOracleError, LLMIndexOracle
from chapter_index.pipeline import SegmentationCancelled, segment_pages

__all__ = [
    "segment_document",
    "segment_file",
    "segment_pages",
    "ChapterNode",
    "DocumentModel",
    "IndexCandidate",
    "IndexOracle",
    "IndexOracleError",
    "InvalidPageCorpusError",
    "LLMIndexOracle",
    "Page",
    "ResolutionReport",
    "SegmentationCancelled",
    "SegmentationConfig",
    "SegmentationResult",
    "SubchapterNode",
]
