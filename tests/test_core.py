"""Tests for chapter_index.core: result persistence, TOC listing and title search."""

import json

from chapter_index.core import flatten_sections, list_toc, load_model, search_sections, write_model
from chapter_index.pipeline import segment_pages


def test_write_and_load_result(tmp_path, two_chapter_pages):
    result = segment_pages(two_chapter_pages)
    path = write_model(result, tmp_path / "out" / "result.json")
    assert path.is_file()
    loaded = load_model(path)
    assert loaded == result


def test_load_bare_document(tmp_path, two_chapter_pages):
    document = segment_pages(two_chapter_pages).document
    path = tmp_path / "doc.json"
    path.write_text(json.dumps(document.model_dump()), encoding="utf-8")
    loaded = load_model(path)
    assert loaded.document == document
    assert loaded.report.index_source == "empty"


def test_flatten_and_search(repeated_results_pages):
    document = segment_pages(repeated_results_pages).document
    flat = flatten_sections(document)
    assert [(s["level"], s["title"]) for s in flat] == [
        (1, "Front Matter"),
        (1, "Results"),
        (2, "3.1 Data"),
        (2, "3.2 Analysis"),
    ]
    assert flat[3]["path"] == "Results > 3.2 Analysis"
    assert [s["title"] for s in search_sections(document, "  ANALYSIS ")] == ["3.2 Analysis"]
    assert search_sections(document, "missing") == []


def test_list_toc_depth(repeated_results_pages):
    document = segment_pages(repeated_results_pages).document
    top = list_toc(document, max_depth=1)
    assert len(top) == 2
    assert top[0].startswith("- Front Matter (pp. 2-2, ")
    assert top[1].startswith("- Results (pp. 3-12, ")
    full = list_toc(document)
    assert full[2].startswith("  - 3.1 Data (pp. 4-8, ")
