# chapter-index tools config (how the engine's collaborators run). Edit as needed.

# Default model when a tool doesn't have its own entry in LLM_MODELS.
LLM_MODEL = "openai/gpt-4o-mini"

# Optional: per-tool model overrides. Keys are tool names ("index" = index oracle).
LLM_MODELS = {
    "default": "openai/gpt-4o-mini",
    "index": "google/gemini-2.0-flash-001",
}

# Worker threads for per-chapter resolution/assembly.
MAX_WORKERS = 4

# Token counter: "heuristic" (chars/words average) or "tiktoken" (cl100k_base).
TOKENIZER = "heuristic"
