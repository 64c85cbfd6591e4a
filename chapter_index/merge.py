"""
Merge chapters that share an identical title (running headers, repeated
detections) into the first occurrence.

For each repeated title the first node absorbs the later ones: their
subchapters are appended in encounter order, own text is joined with a blank
line, the page range widens to the min/max, and token counts are summed as
computed on each occurrence (never recounted on the merged text). Output
keeps each title at the position of its first occurrence. Running the merge
on an already merged list changes nothing.
"""

import logging

from chapter_index.models import ChapterNode

log = logging.getLogger(__name__)

TEXT_SEPARATOR = "\n\n"


def _join_text(first: str, second: str) -> str:
    if not first:
        return second
    if not second:
        return first
    return first + TEXT_SEPARATOR + second


def _absorb(target: ChapterNode, other: ChapterNode) -> None:
    target.subchapters.extend(
        sub.model_copy(update={"chapter_title": target.title}) for sub in other.subchapters
    )
    target.text = _join_text(target.text, other.text)
    if other.resolved:
        if target.resolved:
            target.from_page = min(target.from_page, other.from_page)
            target.to_page = max(target.to_page, other.to_page)
        else:
            target.from_page, target.to_page = other.from_page, other.to_page
            target.resolved = True
    target.own_token_count += other.own_token_count
    target.token_count += other.token_count


def merge_duplicate_chapters(chapters: list[ChapterNode]) -> tuple[list[ChapterNode], list[str]]:
    """
    Return (merged chapters, titles that were merged). The input list is not
    modified; merged nodes are copies of the first occurrence.
    """
    position: dict[str, int] = {}
    order: list[ChapterNode] = []
    merged_titles: list[str] = []
    for chapter in chapters:
        idx = position.get(chapter.title)
        if idx is None:
            position[chapter.title] = len(order)
            order.append(chapter.model_copy(deep=True))
            continue
        target = order[idx]
        if chapter.title not in merged_titles:
            merged_titles.append(chapter.title)
        log.info(
            "Merging duplicate chapter %r (pages %d-%d) into %s",
            chapter.title, chapter.from_page, chapter.to_page, target.id,
        )
        _absorb(target, chapter)
    return order, merged_titles
