"""Bottom-up token totals and packaging of the final DocumentModel. No I/O."""

from chapter_index.models import ChapterNode, DocumentModel


def chapter_total(chapter: ChapterNode) -> int:
    return chapter.own_token_count + sum(sub.token_count for sub in chapter.subchapters)


def aggregate_document(chapters: list[ChapterNode]) -> DocumentModel:
    """Set every chapter's token_count from its parts and sum them into total_tokens."""
    for chapter in chapters:
        chapter.token_count = chapter_total(chapter)
    return DocumentModel(
        chapters=chapters,
        total_tokens=sum(c.token_count for c in chapters),
    )
