"""
LLM access for the index oracle (chapter list proposal for documents without a
usable table of contents).

OpenRouter is the default provider. Pass a different backend to complete(), or
implement chapter_index.llm.base.LLMBackend.

    from chapter_index.llm import get_client, complete

    client = get_client(tool="index")
    text = complete("List the chapters of this document.", system="You are an indexer.", client=client)
"""

import logging
import os
from typing import Any

from chapter_index.llm.base import LLMBackend, build_messages
from chapter_index.llm.openrouter import OpenRouterBackend

log = logging.getLogger(__name__)

__all__ = [
    "LLMBackend",
    "OpenRouterBackend",
    "get_client",
    "complete",
]

_REGISTRY: dict[str, type[LLMBackend]] = {
    "openrouter": OpenRouterBackend,
}

_DEFAULT_PROVIDER = os.environ.get("CHAPTER_INDEX_LLM_PROVIDER", "openrouter")


def _model_from_tools_config(tool: str | None) -> str | None:
    """Per-tool model from chapter_index_tools.py (LLM_MODELS[tool], then default, then LLM_MODEL)."""
    from chapter_index.config import load_tools_config

    tools = load_tools_config()
    models = tools.get("llm_models") or {}
    return (tool and models.get(tool)) or models.get("default") or tools.get("llm_model")


def get_client(
    provider: str | None = None,
    model: str | None = None,
    tool: str | None = None,
    **kwargs: Any,
) -> LLMBackend:
    """
    Return an LLM backend instance.

    Args:
        provider: Registered provider name; None uses CHAPTER_INDEX_LLM_PROVIDER or openrouter.
        model: Explicit model (overrides the tools config).
        tool: Tool name (e.g. "index") used to pick a model from LLM_MODELS.
        **kwargs: Passed to the backend constructor (e.g. api_key).
    """
    name = provider or _DEFAULT_PROVIDER
    if name not in _REGISTRY:
        raise KeyError(f"Unknown LLM provider: {name}. Available: {list(_REGISTRY)}")
    cfg_model = model or _model_from_tools_config(tool)
    if cfg_model:
        kwargs["default_model"] = cfg_model
    log.debug("LLM client: provider=%s model=%s", name, cfg_model or "(backend default)")
    return _REGISTRY[name](**kwargs)


def complete(
    prompt: str,
    *,
    system: str | None = None,
    model: str | None = None,
    max_tokens: int = 4096,
    temperature: float = 0.0,
    client: LLMBackend | None = None,
) -> str:
    """One-shot completion: build messages, call the backend (get_client() if None), return text."""
    backend = client or get_client()
    return backend.complete(
        build_messages(prompt, system),
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
    )
