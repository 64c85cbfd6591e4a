"""
Page corpus stored as JSON, as written by `chapter-index extract` or by an
external document-analysis service. Accepted shapes:

    [{"page_number": 1, "lines": ["..."]}, ...]
    {"pages": [{"pageNumber": 1, "linesText": ["..."]}, ...]}
"""

import json
from pathlib import Path
from typing import Any

from chapter_index.backends.base import PageSource
from chapter_index.models import Page

_NUMBER_KEYS = ("page_number", "pageNumber", "PageNumber")
_LINES_KEYS = ("lines", "linesText", "LinesText")


def _first(item: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in item:
            return item[key]
    return None


def pages_from_json(data: Any) -> list[Page]:
    """Build pages from parsed JSON. Raises ValueError if the shape is not recognised."""
    if isinstance(data, dict):
        data = data.get("pages", data.get("DocumentPages"))
    if not isinstance(data, list):
        raise ValueError("Page corpus JSON must be a list of pages or an object with 'pages'")
    pages = []
    for i, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            raise ValueError(f"Page entry {i} is not an object")
        number = _first(item, _NUMBER_KEYS)
        lines = _first(item, _LINES_KEYS) or []
        if isinstance(lines, str):
            lines = lines.splitlines()
        pages.append(Page(page_number=int(number) if number is not None else i, lines=list(lines)))
    return pages


def write_pages(pages: list[Page], out_path: Path) -> None:
    """Write pages as a JSON corpus file (the list shape)."""
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump([p.model_dump() for p in pages], f, indent=2, ensure_ascii=False)


class JsonPageSource(PageSource):
    """Load a page corpus JSON file."""

    @property
    def name(self) -> str:
        return "json"

    def load(self, path: Path) -> list[Page]:
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Page corpus not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid page corpus JSON in {path}: {e}") from e
        return pages_from_json(data)
