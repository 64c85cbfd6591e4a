"""
CLI entry point: segment documents and inspect results from the shell.

    chapter-index segment path/to/book.pdf -o outputs/book.json
    chapter-index segment corpus.json --index-from 2 --index-to 3
    chapter-index detect path/to/book.pdf      # show the parsed table of contents
    chapter-index extract path/to/book.pdf -o corpus.json
    chapter-index toc outputs/book.json
    chapter-index search "term" outputs/book.json
"""

import logging
from pathlib import Path

import typer

from chapter_index.api import load_pages, segment_file
from chapter_index.backends import REGISTRY
from chapter_index.backends.json_backend import write_pages
from chapter_index.config import load_config
from chapter_index.core import list_toc, load_model, search_sections, write_model
from chapter_index.models import InvalidPageCorpusError
from chapter_index.oracle import IndexOracleError
from chapter_index.pipeline import SegmentationCancelled
from chapter_index.tools.config import config_app
from chapter_index.tools.detect import format_candidates, run as detect_run

app = typer.Typer(
    name="chapter-index",
    help="Split long paginated documents into chapters and subchapters with page ranges and token counts.",
)
app.add_typer(config_app, name="config")


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(message)s")


def _check_backend(backend: str | None) -> None:
    if backend is not None and backend not in REGISTRY:
        typer.echo(f"Error: unknown backend '{backend}'. Choose: {', '.join(REGISTRY)}", err=True)
        raise typer.Exit(1)


def _check_document(path: Path) -> None:
    if not path.is_file():
        typer.echo(f"Error: file not found: {path}", err=True)
        raise typer.Exit(1)


@app.command("segment")
def segment(
    document: Path = typer.Argument(..., help="PDF or page corpus JSON", path_type=Path),
    output: Path | None = typer.Option(
        None,
        "-o",
        "--output",
        help="Output JSON (default: <output_root>/<name>.chapters.json)",
        path_type=Path,
    ),
    index_from: int | None = typer.Option(None, "--index-from", help="First page of the table of contents"),
    index_to: int | None = typer.Option(None, "--index-to", help="Last page of the table of contents"),
    llm: bool = typer.Option(False, "--llm", help="Ask the LLM for an index when none is found"),
    use_oracle: bool = typer.Option(
        False, "--use-oracle", help="Ask the LLM for the index even when a table of contents is found"
    ),
    model: str | None = typer.Option(None, "--model", help="LLM model id for the index oracle"),
    backend: str | None = typer.Option(
        None, "--backend", "-b", help=f"Page source: {', '.join(REGISTRY)} (default: from suffix)"
    ),
    tokenizer: str | None = typer.Option(None, "--tokenizer", help="heuristic or tiktoken"),
    workers: int | None = typer.Option(None, "--workers", "-w", help="Worker threads per chapter"),
    scan_pages: int | None = typer.Option(None, "--scan-pages", help="Pages scanned for a table of contents"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Print progress"),
) -> None:
    """Segment a document into chapters and write the result JSON."""
    _setup_logging(verbose)
    _check_document(document)
    cfg = load_config()
    backend = backend or cfg.get("backend")
    _check_backend(backend)
    try:
        result = segment_file(
            document,
            backend=backend,
            has_index=index_from is not None,
            index_from_page=index_from,
            index_to_page=index_to,
            use_oracle=use_oracle,
            llm_oracle=llm,
            llm_model=model,
            tokenizer=tokenizer or cfg.get("tokenizer"),
            max_workers=workers or cfg.get("max_workers"),
            scan_pages=scan_pages or cfg.get("scan_pages"),
        )
    except (InvalidPageCorpusError, IndexOracleError, SegmentationCancelled, KeyError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if output is None:
        output = Path(cfg.get("output_root") or "outputs") / f"{document.stem}.chapters.json"
    write_model(result, output)

    report = result.report
    for warning in report.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    typer.echo(f"Wrote {output}")
    typer.echo(f"  Chapters:   {len(result.document.chapters)}")
    typer.echo(f"  Tokens:     {result.document.total_tokens}")
    typer.echo(f"  Index:      {report.index_source} {report.index_pages or ''}".rstrip())
    typer.echo(f"  Resolved:   {report.resolved_count}")
    typer.echo(f"  Unresolved: {report.unresolved_count}")
    if report.page_offset is not None:
        typer.echo(f"  Offset:     {report.page_offset}")
    if report.merged_titles:
        typer.echo(f"  Merged:     {', '.join(report.merged_titles)}")
    if report.unresolved_titles:
        typer.echo("\nUnresolved titles:")
        for title in report.unresolved_titles:
            typer.echo(f"  {title}")


@app.command("detect")
def detect_cmd(
    document: Path = typer.Argument(..., help="PDF or page corpus JSON", path_type=Path),
    index_from: int | None = typer.Option(None, "--index-from", help="First page of the table of contents"),
    index_to: int | None = typer.Option(None, "--index-to", help="Last page of the table of contents"),
    scan_pages: int | None = typer.Option(None, "--scan-pages", help="Pages scanned for a table of contents"),
    backend: str | None = typer.Option(None, "--backend", "-b", help=f"Page source: {', '.join(REGISTRY)}"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Print progress"),
) -> None:
    """Locate and parse the table of contents (no boundary resolution)."""
    _setup_logging(verbose)
    _check_document(document)
    _check_backend(backend)
    scan_pages = scan_pages or load_config().get("scan_pages") or 10
    try:
        discovery = detect_run(document, backend, index_from, index_to, scan_pages)
    except (KeyError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    for warning in discovery.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    if not discovery.candidates:
        typer.echo("No table of contents found.")
        return
    pages = ", ".join(str(p) for p in discovery.index_pages)
    typer.echo(f"Index pages: {pages} ({discovery.source})")
    for line in format_candidates(discovery.candidates):
        typer.echo(line)


@app.command("extract")
def extract_cmd(
    document: Path = typer.Argument(..., help="Path to the PDF file", path_type=Path),
    output: Path = typer.Option(..., "-o", "--output", help="Page corpus JSON to write", path_type=Path),
    backend: str = typer.Option("pymupdf", "--backend", "-b", help=f"Page source: {', '.join(REGISTRY)}"),
) -> None:
    """Extract text lines per page into a page corpus JSON."""
    _check_document(document)
    _check_backend(backend)
    try:
        pages = load_pages(document, backend)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    write_pages(pages, output)
    typer.echo(f"Wrote {len(pages)} pages to {output}")


def _load_result(path: Path):
    if not path.is_file():
        typer.echo(f"Error: result JSON not found: {path}", err=True)
        raise typer.Exit(1)
    try:
        return load_model(path)
    except ValueError as e:
        typer.echo(f"Error: not a segmentation result: {e}", err=True)
        raise typer.Exit(1)


@app.command("toc")
def toc_cmd(
    result_path: Path = typer.Argument(..., help="Result JSON written by 'segment'", path_type=Path),
    depth: int = typer.Option(2, "--depth", "-d", help="Max depth to display"),
) -> None:
    """Show chapters with page ranges and token counts."""
    result = _load_result(result_path)
    for line in list_toc(result.document, max_depth=depth):
        typer.echo(line)
    typer.echo(f"Total tokens: {result.document.total_tokens}")


@app.command("search")
def search_cmd(
    query: str = typer.Argument(..., help="Search query string"),
    result_path: Path = typer.Argument(..., help="Result JSON written by 'segment'", path_type=Path),
) -> None:
    """Search chapters and subchapters by title."""
    result = _load_result(result_path)
    matches = search_sections(result.document, query)
    if not matches:
        typer.echo("No matches found.")
        return
    for m in matches:
        typer.echo(f"[{m['level']}] {m['path']} (pp. {m['from_page']}-{m['to_page']})")


def main() -> None:
    """Entry point for the chapter-index console script."""
    app()


if __name__ == "__main__":
    main()
