"""Page sources: each reads one file format into the ordered Page list."""

from pathlib import Path

from chapter_index.backends.base import PageSource
from chapter_index.backends.json_backend import JsonPageSource
from chapter_index.backends.pymupdf_backend import PyMuPDFPageSource

__all__ = ["PageSource", "JsonPageSource", "PyMuPDFPageSource", "REGISTRY", "get_backend", "backend_for_path"]

REGISTRY: dict[str, type[PageSource]] = {
    "json": JsonPageSource,
    "pymupdf": PyMuPDFPageSource,
}

_BY_SUFFIX = {
    ".json": "json",
    ".pdf": "pymupdf",
}


def get_backend(name: str) -> type[PageSource]:
    """Return page source class for the given name. Raises KeyError if unknown."""
    if name not in REGISTRY:
        raise KeyError(f"Unknown backend: {name}. Available: {list(REGISTRY)}")
    return REGISTRY[name]


def backend_for_path(path: Path) -> str:
    """Backend name from the file suffix (.pdf → pymupdf, .json → json). Raises KeyError otherwise."""
    suffix = Path(path).suffix.lower()
    if suffix not in _BY_SUFFIX:
        raise KeyError(f"No backend for '{suffix}' files. Use one of: {', '.join(_BY_SUFFIX)}")
    return _BY_SUFFIX[suffix]
