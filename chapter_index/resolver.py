"""
Boundary resolution: map candidate titles to the pages where they actually start.

  1. Each top-level title is searched front to back from the page after the
     previous resolved chapter's start (the first one from the body start).
     The first page with a line containing the title (case-insensitive,
     whitespace-normalized) is from_page.
  2. to_page = next resolved sibling's from_page - 1; the last one runs to the
     end of its window (the document's last page for chapters).
  3. Subchapters are searched the same way but only inside the parent's
     [from_page, to_page]; they never cross into a sibling chapter.
  4. A title that cannot be found is kept as unresolved, collapsed to the first
     page of its search window, so callers can count and audit it.

Page hints from the index are never used for boundaries.
"""

import logging
import re
import statistics

from chapter_index.corpus import PageCorpus, normalize_text
from chapter_index.models import IndexCandidate, ResolvedRange

log = logging.getLogger(__name__)

# "Chapter 3:", "Capítulo 2 -", "2.", "1.1", "1.a)" at the start of a title
_NUMBER_PREFIX_RE = re.compile(
    r"^(?:(?:chapter|capítulo|capitulo|cap\.?)\s*\d+\s*[:.\-]?\s*|\d+(?:\.\d+)*(?:\.[a-z])?[.)]?\s+)",
    re.IGNORECASE,
)
MIN_CORE_TITLE = 3


def strip_number_prefix(title: str) -> str:
    """'2. Methods' -> 'Methods', 'Chapter 1: Intro' -> 'Intro'."""
    return _NUMBER_PREFIX_RE.sub("", title.strip()).strip()


def title_keys(title: str) -> list[str]:
    """Search keys in priority order: the full title, then the title without its numbering."""
    full = normalize_text(title)
    keys = [full] if full else []
    core = normalize_text(strip_number_prefix(title))
    if core and core != full and len(core) >= MIN_CORE_TITLE:
        keys.append(core)
    return keys


def find_title_page(corpus: PageCorpus, title: str, start: int, end: int) -> int | None:
    for key in title_keys(title):
        page = corpus.find(key, start, end)
        if page is not None:
            return page
    return None


def _unresolved(cand: IndexCandidate, page: int) -> ResolvedRange:
    """Collapsed node; its subchapters are collapsed onto the same page."""
    return ResolvedRange(
        title=cand.title,
        from_page=page,
        to_page=page,
        resolved=False,
        from_hint=cand.from_hint,
        children=[_unresolved(sub, page) for sub in cand.subchapters],
    )


def resolve_siblings(
    corpus: PageCorpus,
    candidates: list[IndexCandidate],
    window_start: int,
    window_end: int,
) -> list[ResolvedRange]:
    """
    Resolve one level of candidates inside [window_start, window_end].
    Children are not resolved here (see resolve_children).
    """
    starts: list[tuple[IndexCandidate, int | None, int]] = []
    cursor = window_start
    for cand in candidates:
        collapse_at = min(cursor, window_end)
        found = find_title_page(corpus, cand.title, cursor, window_end)
        if found is None:
            log.debug("Title not found in pages %d-%d: %s", cursor, window_end, cand.title)
        else:
            log.debug("Title %r found on page %d", cand.title, found)
            cursor = found + 1
        starts.append((cand, found, collapse_at))

    resolved_starts = [found for _, found, _ in starts if found is not None]
    ranges: list[ResolvedRange] = []
    for cand, found, collapse_at in starts:
        if found is None:
            ranges.append(_unresolved(cand, collapse_at))
            continue
        later = [s for s in resolved_starts if s > found]
        to_page = later[0] - 1 if later else window_end
        ranges.append(
            ResolvedRange(
                title=cand.title,
                from_page=found,
                to_page=to_page,
                resolved=True,
                from_hint=cand.from_hint,
            )
        )
    return ranges


def resolve_children(
    corpus: PageCorpus, candidate: IndexCandidate, parent: ResolvedRange
) -> ResolvedRange:
    """
    Fill parent.children by resolving candidate.subchapters (recursively) inside
    the parent's page range. Unresolved parents already carry collapsed children.
    """
    if not parent.resolved or not candidate.subchapters:
        return parent
    children = resolve_siblings(
        corpus, candidate.subchapters, parent.from_page, parent.to_page
    )
    for sub_cand, child in zip(candidate.subchapters, children):
        resolve_children(corpus, sub_cand, child)
    parent.children = children
    return parent


def resolve_top_level(
    corpus: PageCorpus,
    candidates: list[IndexCandidate],
    body_start: int | None = None,
) -> list[ResolvedRange]:
    """Resolve chapters over [body_start, last page]; subchapters are left for resolve_children."""
    if not len(corpus):
        return []
    start = body_start if body_start is not None else corpus.first_page
    start = max(corpus.first_page, min(start, corpus.last_page))
    return resolve_siblings(corpus, candidates, start, corpus.last_page)


def resolve_tree(
    corpus: PageCorpus,
    candidates: list[IndexCandidate],
    body_start: int | None = None,
) -> list[ResolvedRange]:
    """Sequential resolution of chapters and all their subchapters."""
    chapters = resolve_top_level(corpus, candidates, body_start)
    for cand, chapter in zip(candidates, chapters):
        resolve_children(corpus, cand, chapter)
    return chapters


def iter_ranges(ranges: list[ResolvedRange]):
    """Depth-first walk over ranges and their children."""
    for r in ranges:
        yield r
        yield from iter_ranges(r.children)


def estimate_page_offset(ranges: list[ResolvedRange]) -> int | None:
    """Median of (resolved from_page - index hint) over resolved chapters with hints."""
    deltas = [r.from_page - r.from_hint for r in ranges if r.resolved and r.from_hint is not None]
    if not deltas:
        return None
    return int(round(statistics.median(deltas)))
