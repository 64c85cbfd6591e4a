"""
Index oracle: proposes a chapter/subchapter list when the document has no usable
table of contents (or when the caller asks for AI-assisted indexing).

The pipeline only depends on the IndexOracle protocol. LLMIndexOracle is the
default implementation; it sends a compact digest of the pages to the LLM
backend and parses a nested JSON title list. Page numbers in the answer are
kept as hints only; boundaries are always resolved against the page text.
"""

import json
import logging
import time
from typing import Any, Protocol, runtime_checkable

from chapter_index.llm.base import LLMBackend
from chapter_index.models import IndexCandidate, Page

log = logging.getLogger(__name__)


class IndexOracleError(Exception):
    """Raised when the oracle's answer cannot be turned into index candidates."""


@runtime_checkable
class IndexOracle(Protocol):
    """Interface for anything that can propose an index for a page corpus."""

    def propose_index(self, pages: list[Page]) -> list[IndexCandidate]:
        """Return top-level candidates (with nested subchapters) in document order."""
        ...


INDEX_PROPOSE_SYSTEM = """You are a document indexer. You are given the text of a document page by page ("=== PAGE N ===" followed by the page's lines). Infer its table of contents.

Rules:
- List the main chapters in the order they appear, with their subchapters nested under them.
- Use titles EXACTLY as they are written in the page text (same words, same numbering) so they can be located again.
- Do not invent chapters that have no heading in the text. Skip the document title, running headers and page footers.
- "from_page" is the page where the heading appears; "to_page" is the last page of that chapter (optional).
Output valid JSON only: an array of objects, each with "title" (string), "from_page" (integer), "to_page" (integer or null) and "subchapters" (array of the same objects, may be empty)."""

INDEX_PROPOSE_USER_PREFIX = """Infer the table of contents of this document:

"""

# Keep prompts bounded for very long documents
DEFAULT_MAX_LINES_PER_PAGE = 40
DEFAULT_MAX_CHARS = 60000


def build_page_digest(
    pages: list[Page],
    max_lines_per_page: int = DEFAULT_MAX_LINES_PER_PAGE,
    max_chars: int = DEFAULT_MAX_CHARS,
) -> str:
    """Compact 'page marker + first lines' text for the LLM, truncated to max_chars."""
    parts: list[str] = []
    used = 0
    for page in pages:
        lines = [ln.strip() for ln in page.lines if ln.strip()][:max_lines_per_page]
        block = f"=== PAGE {page.page_number} ===\n" + "\n".join(lines)
        if used + len(block) > max_chars:
            log.info("Page digest truncated at page %d", page.page_number)
            break
        parts.append(block)
        used += len(block) + 1
    return "\n".join(parts)


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if "```" in text:
        start = text.find("[")
        end = text.rfind("]") + 1
        if start >= 0 and end > start:
            text = text[start:end]
    return text


def _as_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _candidates_from_items(items: list[Any]) -> list[IndexCandidate]:
    out = []
    for item in items:
        if isinstance(item, str):
            item = {"title": item}
        if not isinstance(item, dict):
            continue
        title = item.get("title")
        if not title or not isinstance(title, str) or len(title.strip()) < 2:
            continue
        subs = item.get("subchapters") or []
        out.append(
            IndexCandidate(
                title=" ".join(title.split()),
                from_hint=_as_int(item.get("from_page", item.get("page"))),
                to_hint=_as_int(item.get("to_page")),
                subchapters=_candidates_from_items(subs if isinstance(subs, list) else []),
            )
        )
    return out


def parse_oracle_response(response: str | None) -> list[IndexCandidate]:
    """Parse the LLM's JSON answer. Raises IndexOracleError if it is not a JSON array."""
    if not response or not response.strip():
        raise IndexOracleError("Empty response from index oracle")
    text = _strip_code_fence(response)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise IndexOracleError(f"Index oracle response not valid JSON: {e}") from e
    if isinstance(data, dict):
        data = data.get("chapters", data.get("index"))
    if not isinstance(data, list):
        raise IndexOracleError("Index oracle response is not a JSON array")
    return _candidates_from_items(data)


class LLMIndexOracle:
    """IndexOracle backed by an LLM completion backend (OpenRouter by default)."""

    def __init__(
        self,
        client: LLMBackend | None = None,
        model: str | None = None,
        max_lines_per_page: int = DEFAULT_MAX_LINES_PER_PAGE,
        max_chars: int = DEFAULT_MAX_CHARS,
    ):
        self._client = client
        self._model = model
        self._max_lines_per_page = max_lines_per_page
        self._max_chars = max_chars

    def _backend(self) -> LLMBackend:
        if self._client is None:
            from chapter_index.llm import get_client

            self._client = get_client(model=self._model, tool="index")
        return self._client

    def propose_index(self, pages: list[Page]) -> list[IndexCandidate]:
        from chapter_index.llm import complete

        if not any(ln.strip() for page in pages for ln in page.lines):
            return []
        digest = build_page_digest(pages, self._max_lines_per_page, self._max_chars)
        log.info("index: calling LLM for index proposal (%d pages, tool=index)", len(pages))
        t0 = time.monotonic()
        response = complete(
            INDEX_PROPOSE_USER_PREFIX + digest,
            system=INDEX_PROPOSE_SYSTEM,
            model=self._model,
            temperature=0.0,
            max_tokens=8192,
            client=self._backend(),
        )
        log.info("LLM responded in %.1fs. Parsing response...", time.monotonic() - t0)
        candidates = parse_oracle_response(response)
        log.info("Index oracle proposed %d chapters", len(candidates))
        return candidates
