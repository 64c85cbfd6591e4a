"""
Index discovery: decide where the document's table of contents is and turn it
into an ordered list of IndexCandidate (chapters with nested subchapters).

Order of precedence:
  1. Explicit range (has_index + index_from_page/index_to_page) from the caller.
     An empty slice is a warning and falls through to detection.
  2. Heuristic detection over the first pages: keyword indicators or at least
     three lines shaped like index entries.
  3. The index oracle (LLM), when no usable index was found or when the caller
     asks for it. Oracle failure leaves the candidate list empty and the
     pipeline falls back to one chapter spanning the document.

Index lines are parsed with an ordered table of (pattern, extractor) pairs;
the first pattern that matches wins. Entries that look like sub-index lines
(1.1, 1.a, indented, very short) are attached to the preceding chapter.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable

from chapter_index.corpus import normalize_text
from chapter_index.models import IndexCandidate, Page, SegmentationConfig
from chapter_index.oracle import IndexOracle
from chapter_index.resolver import title_keys

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

INDEX_INDICATORS = (
    "table of contents",
    "contents",
    "índice",
    "indice",
    "contenido",
    "chapter",
    "capítulo",
    "capitulo",
    "section",
    "sección",
)

STRUCTURE_PATTERNS = (
    re.compile(r".*\.{2,}.*\d+\s*$"),  # dotted leader + trailing number
    re.compile(r".*\s+\d+\s*$"),  # trailing number
    re.compile(r"^\d+[\.\s]+.*\s+\d+\s*$"),  # numbered entry with trailing page
)

MIN_STRUCTURED_LINES = 3
MAX_PAGE_NUMBER = 10000


def has_index_keyword(lines: list[str]) -> bool:
    """True if any index indicator appears in the page text (case-insensitive)."""
    text = " ".join(lines).lower()
    return any(indicator in text for indicator in INDEX_INDICATORS)


def count_structured_lines(lines: list[str]) -> int:
    """Number of non-empty lines matching one of the index-entry shapes."""
    count = 0
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        if any(p.match(stripped) for p in STRUCTURE_PATTERNS):
            count += 1
    return count


def has_index_structure(lines: list[str]) -> bool:
    return count_structured_lines(lines) >= MIN_STRUCTURED_LINES


def is_index_page(page: Page) -> bool:
    return has_index_keyword(page.lines) or has_index_structure(page.lines)


def find_index_page(pages: list[Page], scan_pages: int = 10) -> Page | None:
    """First page among the first scan_pages that looks like a table of contents."""
    for page in pages[: min(scan_pages, len(pages))]:
        if is_index_page(page):
            log.info("Index found on page %d", page.page_number)
            return page
    log.info("No index found in the first %d pages", min(scan_pages, len(pages)))
    return None


def select_explicit_index_pages(
    pages: list[Page], index_from_page: int, index_to_page: int | None
) -> list[Page]:
    """
    Pages inside the caller-supplied index window. With no end page, only the
    start page is used.
    """
    end = index_to_page if index_to_page is not None else index_from_page
    return [p for p in pages if index_from_page <= p.page_number <= end]


def _continuation_pages(pages: list[Page], first: Page, max_index_pages: int) -> list[Page]:
    """
    The index page plus following pages that still read as index entries. A page
    stops the run when it has no parsable entries or when one of its lines is a
    title already listed, i.e. the body has started.
    """
    start = pages.index(first)
    selected = [first]
    listed = {key for entry in parse_index_lines(first.lines) for key in title_keys(entry.title)}
    for page in pages[start + 1 : start + max_index_pages]:
        if not has_index_structure(page.lines):
            break
        entries = parse_index_lines(page.lines)
        if not entries:
            break
        if any(normalize_text(line) in listed for line in page.lines):
            log.debug("Page %d opens a listed chapter; index ends", page.page_number)
            break
        selected.append(page)
        listed.update(key for entry in entries for key in title_keys(entry.title))
    return selected


# ---------------------------------------------------------------------------
# Line parsing
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class IndexEntry:
    """One parsed index line."""

    title: str
    page: int
    is_sub: bool = False


@dataclass(frozen=True)
class _LinePattern:
    name: str
    regex: re.Pattern
    extract: Callable[[re.Match], tuple[str, str]]


def _numbered_title(m: re.Match) -> tuple[str, str]:
    num, title, page = m.group(1), m.group(2).strip(), m.group(3)
    if "." in num:
        return f"{num} {title}", page
    return f"{num}. {title}", page


LINE_PATTERNS: tuple[_LinePattern, ...] = (
    # "Chapter 1: Title.....5"
    _LinePattern(
        "chapter",
        re.compile(
            r"^(Chapter|Capítulo|Capitulo|Cap\.?)\s*(\d+)[:\.\s]+(.*?)\.{2,}\s*(\d+)\s*$",
            re.IGNORECASE,
        ),
        lambda m: (f"{m.group(1)} {m.group(2)}: {m.group(3).strip()}", m.group(4)),
    ),
    # "1. Title.....5", "1.2 Title.....7", "1.a Title.....9"
    _LinePattern(
        "numbered",
        re.compile(r"^(\d+(?:\.\d+)*(?:\.[a-z])?)[\.\s]+(.*?)\.{2,}\s*(\d+)\s*$"),
        _numbered_title,
    ),
    # "Introduction.....5"
    _LinePattern(
        "leader",
        re.compile(r"^([A-Za-zÀ-ÿ].*?)\s*\.{2,}\s*(\d+)\s*$"),
        lambda m: (m.group(1).strip(), m.group(2)),
    ),
    # "INTRODUCTION 5"
    _LinePattern(
        "caps",
        re.compile(r"^([A-ZÁÉÍÓÚÑÜ][A-ZÁÉÍÓÚÑÜ\s]{2,})\s+(\d+)\s*$"),
        lambda m: (m.group(1).strip(), m.group(2)),
    ),
    # "2 Methods 14" (no leaders)
    _LinePattern(
        "numbered_trailing",
        re.compile(r"^(\d+(?:\.\d+)*(?:\.[a-z])?)[\.\s]+(.+?)\s+(\d+)\s*$"),
        _numbered_title,
    ),
)

_SUB_NUMBER_RE = re.compile(r"^\d+\.(?:\d+|[a-z])(?![a-z])")
_INDENT = ("    ", "\t")
MIN_CHAPTER_TITLE = 3


def is_sub_entry(title: str, raw_line: str = "") -> bool:
    """Dotted/lettered numbering, indentation or a very short title mark a sub-index line."""
    return (
        bool(_SUB_NUMBER_RE.match(title))
        or raw_line.startswith(_INDENT)
        or len(title) < MIN_CHAPTER_TITLE
    )


def parse_index_line(line: str) -> IndexEntry | None:
    """Parse one index line. Returns None for noise (no pattern, or page outside 1..9999)."""
    stripped = line.strip()
    if not stripped:
        return None
    for pattern in LINE_PATTERNS:
        m = pattern.regex.match(stripped)
        if not m:
            continue
        title, page_str = pattern.extract(m)
        try:
            page = int(page_str)
        except ValueError:
            return None
        if not 0 < page < MAX_PAGE_NUMBER:
            log.debug("Discarding index line with page %d: %r", page, stripped)
            return None
        title = " ".join(title.split())
        return IndexEntry(title=title, page=page, is_sub=is_sub_entry(title, line))
    return None


def parse_index_lines(lines: list[str]) -> list[IndexEntry]:
    entries = []
    for line in lines:
        entry = parse_index_line(line)
        if entry is not None:
            entries.append(entry)
    return entries


def _fill_to_hints(candidates: list[IndexCandidate], parent_to: int | None = None) -> None:
    """to_hint = next sibling's from_hint - 1; last sibling inherits the parent's hint."""
    for i, cand in enumerate(candidates):
        nxt = candidates[i + 1] if i + 1 < len(candidates) else None
        if nxt is not None and nxt.from_hint is not None:
            cand.to_hint = max(nxt.from_hint - 1, cand.from_hint or 1)
        else:
            cand.to_hint = parent_to
        _fill_to_hints(cand.subchapters, cand.to_hint)


def build_candidates(entries: list[IndexEntry]) -> list[IndexCandidate]:
    """Nest sub-entries under the preceding chapter entry, keeping source order."""
    chapters: list[IndexCandidate] = []
    for entry in entries:
        cand = IndexCandidate(title=entry.title, from_hint=entry.page)
        if entry.is_sub:
            if not chapters:
                log.debug("Sub-entry before any chapter, skipped: %s", entry.title)
                continue
            chapters[-1].subchapters.append(cand)
        else:
            chapters.append(cand)
    _fill_to_hints(chapters)
    return chapters


def parse_index_pages(pages: list[Page]) -> list[IndexCandidate]:
    lines: list[str] = []
    for page in pages:
        lines.extend(page.lines)
    return build_candidates(parse_index_lines(lines))


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

@dataclass
class IndexDiscovery:
    """Outcome of index discovery. Empty candidates with source 'fallback' means no index."""

    candidates: list[IndexCandidate] = field(default_factory=list)
    source: str = "fallback"
    index_pages: list[int] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _locate_index_pages(
    pages: list[Page], config: SegmentationConfig, warnings: list[str]
) -> tuple[list[Page], str]:
    if config.has_index and config.index_from_page is not None:
        selected = select_explicit_index_pages(pages, config.index_from_page, config.index_to_page)
        if selected:
            log.info(
                "Using index pages %d-%d",
                selected[0].page_number,
                selected[-1].page_number,
            )
            return selected, "explicit"
        msg = (
            f"No pages found in index range {config.index_from_page}-"
            f"{config.index_to_page}; falling back to detection"
        )
        log.warning(msg)
        warnings.append(msg)
    first = find_index_page(pages, config.scan_pages)
    if first is None:
        return [], "fallback"
    return _continuation_pages(pages, first, config.max_index_pages), "heuristic"


def discover_index(
    pages: list[Page],
    config: SegmentationConfig | None = None,
    oracle: IndexOracle | None = None,
) -> IndexDiscovery:
    """Find or propose the document's index. Never raises for data problems."""
    config = config or SegmentationConfig()
    warnings: list[str] = []
    index_pages, source = _locate_index_pages(pages, config, warnings)
    candidates: list[IndexCandidate] = []
    if index_pages:
        candidates = parse_index_pages(index_pages)
        log.info(
            "Parsed %d chapters (%d subchapters) from %d index page(s)",
            len(candidates),
            sum(len(c.subchapters) for c in candidates),
            len(index_pages),
        )
        if not candidates:
            warnings.append("Index pages contained no parsable entries")
            if source == "heuristic":
                # a keyword hit on a body page, not a real table of contents
                index_pages = []

    if not candidates or config.use_oracle:
        if oracle is None:
            if not candidates:
                log.info("No index and no oracle; using a single chapter")
                source = "fallback"
        else:
            try:
                proposed = oracle.propose_index(pages)
            except Exception as e:
                log.warning("Index oracle failed: %s", e)
                warnings.append(f"Index oracle failed: {e}")
                proposed = []
            if proposed:
                candidates = proposed
                source = "oracle"
            elif not candidates:
                warnings.append("Index oracle returned no chapters")
                source = "fallback"

    return IndexDiscovery(
        candidates=candidates,
        source=source,
        index_pages=[p.page_number for p in index_pages],
        warnings=warnings,
    )
