"""Data models for the page corpus, index candidates, the resolved tree and run results."""

from typing import Literal

from pydantic import BaseModel, Field


class InvalidPageCorpusError(ValueError):
    """Raised when page numbers are duplicated or not strictly increasing."""


class Page(BaseModel):
    """One page of extracted text, as produced by the document-analysis step."""

    page_number: int = Field(ge=1, description="1-based page number")
    lines: list[str] = Field(default_factory=list, description="Text lines in reading order")

    model_config = {"frozen": True}


class IndexCandidate(BaseModel):
    """An unresolved chapter/subchapter proposal: title text plus untrusted page hints."""

    title: str
    from_hint: int | None = Field(default=None, description="Page hint from the index (unreliable)")
    to_hint: int | None = Field(default=None, description="End page hint (unreliable)")
    subchapters: list["IndexCandidate"] = Field(default_factory=list)


class ResolvedRange(BaseModel):
    """A candidate after boundary resolution: the page window it actually occupies."""

    title: str
    from_page: int
    to_page: int
    resolved: bool = True
    from_hint: int | None = None
    children: list["ResolvedRange"] = Field(default_factory=list)


class SubchapterNode(BaseModel):
    """Subchapter owned by a chapter. chapter_title is a display reference, not a link."""

    chapter_title: str
    title: str
    from_page: int
    to_page: int
    text: str = ""
    token_count: int = 0
    resolved: bool = True


class ChapterNode(BaseModel):
    """Top-level chapter. text holds only the chapter's own pages (not its subchapters')."""

    id: str = Field(description="e.g. ch01, ch02")
    title: str
    from_page: int
    to_page: int
    text: str = ""
    own_token_count: int = Field(default=0, description="Tokens of the chapter's own text")
    token_count: int = Field(default=0, description="own_token_count + sum of subchapter tokens")
    resolved: bool = True
    subchapters: list[SubchapterNode] = Field(default_factory=list)


class DocumentModel(BaseModel):
    """Final segmented document handed to the indexing collaborator."""

    chapters: list[ChapterNode] = Field(default_factory=list)
    total_tokens: int = 0


IndexSource = Literal["explicit", "heuristic", "oracle", "fallback", "empty"]


class ResolutionReport(BaseModel):
    """Diagnostics for the caller: how the index was obtained and what failed to resolve."""

    index_source: IndexSource = "empty"
    index_pages: list[int] = Field(default_factory=list)
    resolved_count: int = 0
    unresolved_count: int = 0
    unresolved_titles: list[str] = Field(default_factory=list)
    merged_titles: list[str] = Field(default_factory=list)
    page_offset: int | None = Field(
        default=None,
        description="Median of (resolved page - index page hint); None when no hints",
    )
    warnings: list[str] = Field(default_factory=list)


class SegmentationConfig(BaseModel):
    """Options for one segmentation run."""

    has_index: bool = Field(default=False, description="Caller states the document has an index")
    index_from_page: int | None = Field(default=None, description="First index page (1-based)")
    index_to_page: int | None = Field(default=None, description="Last index page (1-based)")
    use_oracle: bool = Field(
        default=False,
        description="Ask the index oracle even when a table of contents was found",
    )
    max_workers: int = Field(default=4, ge=1, description="Worker threads for per-chapter work")
    scan_pages: int = Field(default=10, ge=1, description="Pages scanned by heuristic detection")
    max_index_pages: int = Field(default=3, ge=1, description="Max consecutive index pages parsed")
    fallback_title: str = Field(default="Complete Document")
    front_matter_title: str = Field(
        default="Front Matter",
        description="Chapter holding body pages before the first resolved title",
    )


class SegmentationResult(BaseModel):
    """Result of a segmentation run."""

    document: DocumentModel
    report: ResolutionReport


def validate_pages(pages: list[Page]) -> None:
    """Raise InvalidPageCorpusError unless page numbers are unique and strictly increasing."""
    previous = 0
    for page in pages:
        if page.page_number <= previous:
            raise InvalidPageCorpusError(
                f"Page numbers must be unique and increasing: {page.page_number} after {previous}"
            )
        previous = page.page_number
