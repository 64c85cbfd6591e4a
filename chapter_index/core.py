"""
Shared primitives over a segmented document: JSON persistence, TOC listing and
title search. No CLI, no Typer.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from chapter_index.models import DocumentModel, SegmentationResult


def write_model(result: SegmentationResult, out_path: Path) -> Path:
    """Write the result (document + report) as JSON."""
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(result.model_dump_json(indent=2))
    return out_path


def load_model(path: Path) -> SegmentationResult:
    """
    Load a result written by write_model. A bare DocumentModel JSON (no "report")
    is accepted too and gets an empty report.
    """
    with open(Path(path), "r", encoding="utf-8") as f:
        data = json.load(f)
    if "document" in data:
        return SegmentationResult.model_validate(data)
    return SegmentationResult.model_validate({"document": DocumentModel.model_validate(data), "report": {}})


def flatten_sections(document: DocumentModel) -> List[Dict[str, Any]]:
    """Chapters and subchapters as flat dicts in document order."""
    flat = []
    for chapter in document.chapters:
        flat.append({
            "title": chapter.title,
            "level": 1,
            "id": chapter.id,
            "from_page": chapter.from_page,
            "to_page": chapter.to_page,
            "token_count": chapter.token_count,
            "resolved": chapter.resolved,
            "path": chapter.title,
        })
        for sub in chapter.subchapters:
            flat.append({
                "title": sub.title,
                "level": 2,
                "id": chapter.id,
                "from_page": sub.from_page,
                "to_page": sub.to_page,
                "token_count": sub.token_count,
                "resolved": sub.resolved,
                "path": chapter.title + " > " + sub.title,
            })
    return flat


def search_sections(document: DocumentModel, query: str) -> List[Dict[str, Any]]:
    """Sections whose title contains the query (case-insensitive)."""
    query = query.lower().strip()
    return [sec for sec in flatten_sections(document) if query in sec["title"].lower()]


def list_toc(document: DocumentModel, max_depth: int = 2) -> List[str]:
    """Return formatted table of contents lines."""
    lines = []
    for sec in flatten_sections(document):
        if sec["level"] > max_depth:
            continue
        indent = "  " * (sec["level"] - 1)
        mark = "" if sec["resolved"] else " [unresolved]"
        lines.append(
            f"{indent}- {sec['title']} (pp. {sec['from_page']}-{sec['to_page']}, "
            f"{sec['token_count']} tokens){mark}"
        )
    return lines
