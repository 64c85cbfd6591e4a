"""Read-only view over the page list with pre-normalized lines for title search."""

import re

from chapter_index.models import Page, validate_pages

_WS_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Trim, collapse whitespace and casefold, so matching is case- and spacing-insensitive."""
    return _WS_RE.sub(" ", text).strip().casefold()


class PageCorpus:
    """
    Ordered pages of one document. Validates page numbering on construction
    (InvalidPageCorpusError on duplicates or decreasing numbers).

    skip_pages (e.g. the table of contents) stay in the page list but are never
    matched by find() and contribute no text.
    """

    def __init__(self, pages: list[Page], skip_pages: set[int] | None = None):
        validate_pages(pages)
        self.pages = list(pages)
        self.skip_pages = frozenset(skip_pages or ())
        self._norm_lines = [[normalize_text(ln) for ln in p.lines] for p in self.pages]

    def without(self, page_numbers: list[int]) -> "PageCorpus":
        """Same pages with page_numbers added to skip_pages."""
        return PageCorpus(self.pages, set(self.skip_pages) | set(page_numbers))

    def __len__(self) -> int:
        return len(self.pages)

    @property
    def first_page(self) -> int:
        return self.pages[0].page_number if self.pages else 0

    @property
    def last_page(self) -> int:
        return self.pages[-1].page_number if self.pages else 0

    def pages_in(self, start: int, end: int) -> list[Page]:
        """Pages with start <= page_number <= end, in order."""
        return [p for p in self.pages if start <= p.page_number <= end]

    def find(self, needle: str, start: int, end: int) -> int | None:
        """
        First page in [start, end] with a line containing the normalized needle.
        Pages are scanned in order and lines top to bottom, so the earliest match wins.
        """
        if not needle or start > end:
            return None
        for page, lines in zip(self.pages, self._norm_lines):
            if page.page_number < start or page.page_number in self.skip_pages:
                continue
            if page.page_number > end:
                break
            for line in lines:
                if needle in line:
                    return page.page_number
        return None

    def text_in(self, start: int, end: int, exclude: list[tuple[int, int]] | None = None) -> str:
        """
        Lines of pages in [start, end] joined with newlines, skipping pages that
        fall inside any (from, to) window in exclude.
        """
        exclude = exclude or []
        lines: list[str] = []
        for page in self.pages_in(start, end):
            if page.page_number in self.skip_pages:
                continue
            if any(lo <= page.page_number <= hi for lo, hi in exclude):
                continue
            lines.extend(page.lines)
        return "\n".join(lines)
