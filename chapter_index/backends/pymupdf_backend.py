"""PyMuPDF page source: PDF → ordered pages of text lines (layout order, figure text dropped)."""

import logging
from dataclasses import dataclass
from pathlib import Path

import fitz  # PyMuPDF

from chapter_index.backends.base import PageSource
from chapter_index.models import Page

log = logging.getLogger(__name__)

# Tolerance (points) for considering two spans on the same line
LINE_Y_TOLERANCE = 2.5


@dataclass
class _Span:
    """Single text span with position."""
    text: str
    x0: float
    y0: float
    x1: float
    y1: float


def _get_image_rects(page: fitz.Page) -> list[tuple[float, float, float, float]]:
    """(x0, y0, x1, y1) of every image on the page, to drop text rendered inside figures."""
    rects: list[tuple[float, float, float, float]] = []
    for img_item in page.get_images(full=True):
        for r in page.get_image_rects(img_item[0], transform=True):
            rects.append((r.x0, r.y0, r.x1, r.y1))
    return rects


def _inside_any_rect(span: _Span, rects: list[tuple[float, float, float, float]]) -> bool:
    cx = (span.x0 + span.x1) / 2
    cy = (span.y0 + span.y1) / 2
    return any(x0 <= cx <= x1 and y0 <= cy <= y1 for (x0, y0, x1, y1) in rects)


def _collect_spans(page: fitz.Page) -> list[_Span]:
    image_rects = _get_image_rects(page)
    spans: list[_Span] = []
    blocks = page.get_text("dict", flags=fitz.TEXT_PRESERVE_WHITESPACE)["blocks"]
    for block in blocks:
        for line in block.get("lines", []):
            for span in line["spans"]:
                text = span.get("text", "").strip()
                if not text:
                    continue
                x0, y0, x1, y1 = span.get("bbox", (0, 0, 0, 0))
                s = _Span(text=text, x0=x0, y0=y0, x1=x1, y1=y1)
                if not _inside_any_rect(s, image_rects):
                    spans.append(s)
    return spans


def _group_spans_into_lines(spans: list[_Span]) -> list[str]:
    """Spans sharing a baseline (within LINE_Y_TOLERANCE) form one line, left to right."""
    if not spans:
        return []
    ordered = sorted(spans, key=lambda s: (round(s.y0 / LINE_Y_TOLERANCE) * LINE_Y_TOLERANCE, s.x0))
    lines: list[list[_Span]] = []
    current_y: float | None = None
    for s in ordered:
        if current_y is None or abs(s.y0 - current_y) > LINE_Y_TOLERANCE:
            current_y = s.y0
            lines.append([s])
        else:
            lines[-1].append(s)
    return [" ".join(s.text for s in line) for line in lines]


def page_lines(page: fitz.Page) -> list[str]:
    return _group_spans_into_lines(_collect_spans(page))


class PyMuPDFPageSource(PageSource):
    """Extract text lines per PDF page with PyMuPDF."""

    @property
    def name(self) -> str:
        return "pymupdf"

    def load(self, path: Path) -> list[Page]:
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"PDF not found: {path}")
        try:
            doc = fitz.open(path)
        except Exception as e:
            raise ValueError(f"Failed to open PDF {path}: {e}") from e
        pages: list[Page] = []
        try:
            for page_num in range(len(doc)):
                pages.append(Page(page_number=page_num + 1, lines=page_lines(doc[page_num])))
        finally:
            doc.close()
        log.info("Extracted %d pages from %s", len(pages), path.name)
        return pages
