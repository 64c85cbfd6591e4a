"""
Hierarchy assembly: turn resolved ranges into ChapterNode / SubchapterNode with text.

Text is page-granular. A subchapter owns every line of the pages in its range.
A chapter owns only the pages of its range not claimed by a resolved
subchapter (lead-in before the first subchapter, trailing pages after the
last). A chapter with no subchapters owns its whole range. Unresolved nodes
own nothing.
"""

import logging

from chapter_index.corpus import PageCorpus
from chapter_index.models import ChapterNode, ResolvedRange, SubchapterNode
from chapter_index.tokenizer import Tokenizer, get_tokenizer

log = logging.getLogger(__name__)


def chapter_id(position: int) -> str:
    """Stable id from the chapter's position in the resolved list: ch01, ch02, ..."""
    return f"ch{position:02d}"


def build_subchapter(
    corpus: PageCorpus,
    chapter_title: str,
    rng: ResolvedRange,
    tokenizer: Tokenizer,
) -> SubchapterNode:
    text = corpus.text_in(rng.from_page, rng.to_page) if rng.resolved else ""
    return SubchapterNode(
        chapter_title=chapter_title,
        title=rng.title,
        from_page=rng.from_page,
        to_page=rng.to_page,
        text=text,
        token_count=tokenizer.count(text),
        resolved=rng.resolved,
    )


def build_chapter(
    corpus: PageCorpus,
    rng: ResolvedRange,
    position: int,
    tokenizer: Tokenizer | None = None,
) -> ChapterNode:
    """
    Build one chapter and its subchapters. token_count is left equal to the own
    tokens plus subchapter tokens; aggregate_document recomputes it after merging.
    """
    tokenizer = tokenizer or get_tokenizer()
    subs = [build_subchapter(corpus, rng.title, child, tokenizer) for child in rng.children]
    if rng.resolved:
        claimed = [(s.from_page, s.to_page) for s in subs if s.resolved]
        text = corpus.text_in(rng.from_page, rng.to_page, exclude=claimed)
    else:
        text = ""
    own_tokens = tokenizer.count(text)
    log.debug(
        "Chapter %r pages %d-%d: %d subchapters, %d own tokens",
        rng.title, rng.from_page, rng.to_page, len(subs), own_tokens,
    )
    return ChapterNode(
        id=chapter_id(position),
        title=rng.title,
        from_page=rng.from_page,
        to_page=rng.to_page,
        text=text,
        own_token_count=own_tokens,
        token_count=own_tokens + sum(s.token_count for s in subs),
        resolved=rng.resolved,
        subchapters=subs,
    )


def assemble_chapters(
    corpus: PageCorpus,
    ranges: list[ResolvedRange],
    tokenizer: Tokenizer | None = None,
) -> list[ChapterNode]:
    """Sequential assembly of all chapters (the pipeline fans this out per chapter)."""
    tokenizer = tokenizer or get_tokenizer()
    return [build_chapter(corpus, rng, i, tokenizer) for i, rng in enumerate(ranges, start=1)]
