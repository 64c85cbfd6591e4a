"""Interface for page sources: turn a document file into the ordered Page list the engine consumes."""

from abc import ABC, abstractmethod
from pathlib import Path

from chapter_index.models import Page


class PageSource(ABC):
    """Each source reads one file format and returns pages with 1-based, increasing numbers."""

    @abstractmethod
    def load(self, path: Path) -> list[Page]:
        """Read the file at path. Raises FileNotFoundError or ValueError on unreadable input."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Source identifier (e.g. 'pymupdf', 'json')."""
        ...
