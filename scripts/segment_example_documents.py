#!/usr/bin/env python3
"""
Segment every PDF and page-corpus JSON in example_documents/ into
outputs/<slug>.chapters.json.

Run from repo root:
    python scripts/segment_example_documents.py
"""
from pathlib import Path

from chapter_index import InvalidPageCorpusError, segment_file
from chapter_index.core import write_model

REPO_ROOT = Path(__file__).resolve().parent.parent
EXAMPLE_DOCUMENTS = REPO_ROOT / "example_documents"
OUTPUTS = REPO_ROOT / "outputs"


def main() -> None:
    if not EXAMPLE_DOCUMENTS.is_dir():
        print(f"Missing {EXAMPLE_DOCUMENTS}")
        return
    OUTPUTS.mkdir(parents=True, exist_ok=True)
    docs = sorted(p for p in EXAMPLE_DOCUMENTS.iterdir() if p.suffix.lower() in (".pdf", ".json"))
    if not docs:
        print(f"No PDFs or corpus JSON files in {EXAMPLE_DOCUMENTS}")
        return
    for doc in docs:
        slug = doc.stem[:50].replace(" ", "-").lower()
        out = OUTPUTS / f"{slug}.chapters.json"
        print(f"Segmenting {doc.name} → {out} ...")
        try:
            result = segment_file(doc)
        except (InvalidPageCorpusError, ValueError) as e:
            print(f"  Error: {e}")
            continue
        write_model(result, out)
        report = result.report
        print(
            f"  {len(result.document.chapters)} chapters, {result.document.total_tokens} tokens "
            f"(index: {report.index_source}, unresolved: {report.unresolved_count})"
        )


if __name__ == "__main__":
    main()
