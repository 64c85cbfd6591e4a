"""
Config tool: CLI subapp only. Implementation in chapter_index.config.
"""

import typer

from chapter_index import config as config_module

config_app = typer.Typer(help="Engine config (.chapter_index.json) and LLM model choice (chapter_index_tools.py).")


@config_app.command("show")
def _show() -> None:
    """Show main config and the tools config."""
    data = config_module.get_config()
    cf = data.get("_config_file", "")
    if data.get("_no_file", False):
        typer.echo(f"Config file: {cf} (not found; using defaults)")
    elif data.get("_load_error"):
        typer.echo(f"Config file: {cf} (unreadable; using defaults)")
    else:
        typer.echo(f"Config file: {cf}")
    typer.echo(f"Output root: {data.get('output_root')}")
    typer.echo(f"Backend: {data.get('backend') or '(from file suffix)'}")
    typer.echo(f"Tokenizer: {data.get('tokenizer') or '(from tools file)'}")
    typer.echo(f"Max workers: {data.get('max_workers') or '(from tools file)'}")
    typer.echo(f"Scan pages: {data.get('scan_pages')}")
    tools = data.get("_tools", {})
    tools_path = config_module.get_tools_config_path()
    typer.echo(f"Tools config: {tools_path} (exists: {tools_path.exists()})")
    typer.echo(f"LLM model: {tools.get('llm_model', '(default)')}")
    for tool, model in (tools.get("llm_models") or {}).items():
        typer.echo(f"  {tool}: {model}")


@config_app.command("set")
def _set(
    key: str = typer.Argument(..., help="Config key (output_root, backend, tokenizer, max_workers, scan_pages)"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set one value in .chapter_index.json."""
    result = config_module.set_config_value(key, value)
    if not result["ok"]:
        typer.echo(result["error"], err=True)
        raise typer.Exit(1)
    typer.echo(f"{key} set to: {result[key]}")


@config_app.command("set-llm-model")
def _set_llm_model(
    model_id: str = typer.Argument(..., help="OpenRouter model id (e.g. openai/gpt-4o-mini, anthropic/claude-3-haiku)"),
) -> None:
    """Set the default LLM model for the index oracle. Writes chapter_index_tools.py."""
    result = config_module.set_llm_model(model_id)
    if not result["ok"]:
        typer.echo(result["error"], err=True)
        raise typer.Exit(1)
    typer.echo(f"LLM model set to: {result.get('llm_model', model_id)}")


@config_app.command("path")
def _path() -> None:
    """Print the config file path in use."""
    typer.echo(config_module.get_config_path())
