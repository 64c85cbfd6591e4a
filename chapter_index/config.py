"""
Configuration: the main JSON config (.chapter_index.json) plus the tools file
(chapter_index_tools.py at the repo root) that holds LLM model choices.

Config lookup: env CHAPTER_INDEX_CONFIG, then the repo root, then cwd and its
parents. Missing files mean defaults; a broken file is reported in the
returned dict (_load_error) rather than raised.
"""

import importlib.util
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict

log = logging.getLogger(__name__)

CONFIG_FILENAME = ".chapter_index.json"
TOOLS_FILENAME = "chapter_index_tools.py"
DEFAULT_OUTPUT_ROOT = "outputs"

# Keys written by save_config, with their defaults. None defers to chapter_index_tools.py.
_CONFIG_DEFAULTS: Dict[str, Any] = {
    "output_root": DEFAULT_OUTPUT_ROOT,
    "backend": None,
    "tokenizer": None,
    "max_workers": None,
    "scan_pages": 10,
}
_INT_KEYS = ("max_workers", "scan_pages")


def _find_repo_root() -> Path | None:
    """Walk up from the package dir to a directory containing pyproject.toml or the config file."""
    start = Path(__file__).resolve().parent
    for parent in [start, *start.parents]:
        if (parent / "pyproject.toml").exists() or (parent / CONFIG_FILENAME).exists():
            return parent
    return None


def get_config_path() -> Path:
    """Path to the config file. Env CHAPTER_INDEX_CONFIG wins; else cwd; else repo root."""
    env_path = os.environ.get("CHAPTER_INDEX_CONFIG")
    if env_path:
        return Path(env_path).resolve()
    cwd_file = (Path.cwd() / CONFIG_FILENAME).resolve()
    if cwd_file.exists():
        return cwd_file
    repo = _find_repo_root()
    if repo is not None:
        return repo / CONFIG_FILENAME
    return cwd_file


def _find_config_file() -> Path | None:
    """Existing config file, or None."""
    env_path = os.environ.get("CHAPTER_INDEX_CONFIG")
    if env_path:
        p = Path(env_path).resolve()
        return p if p.exists() else None
    for d in [Path.cwd(), *Path.cwd().parents]:
        cf = (d / CONFIG_FILENAME).resolve()
        if cf.exists():
            return cf
    repo = _find_repo_root()
    if repo is not None and (repo / CONFIG_FILENAME).exists():
        return (repo / CONFIG_FILENAME).resolve()
    return None


def _default_config() -> Dict[str, Any]:
    return dict(_CONFIG_DEFAULTS)


def load_config() -> Dict[str, Any]:
    """Load config from file or return defaults. Unknown keys are kept; missing keys get defaults."""
    path = _find_config_file()
    if path is None:
        out = _default_config()
        out["_config_file"] = str(get_config_path())
        out["_no_file"] = True
        return out
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Could not read config %s: %s", path, e)
        out = _default_config()
        out["_config_file"] = str(path)
        out["_load_error"] = True
        return out
    if not isinstance(data, dict):
        data = {}
    for key, value in _CONFIG_DEFAULTS.items():
        data.setdefault(key, value)
    data["_config_file"] = str(path)
    data["_no_file"] = False
    return data


def save_config(data: Dict[str, Any]) -> Path:
    """Write the known config keys. Returns the path written."""
    path = Path(data["_config_file"]) if data.get("_config_file") else get_config_path()
    to_save = {key: data.get(key, default) for key, default in _CONFIG_DEFAULTS.items()}
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(to_save, f, indent=2)
    return path


def set_config_value(key: str, value: Any) -> Dict[str, Any]:
    """Set one known config key and save."""
    if key not in _CONFIG_DEFAULTS:
        return {"ok": False, "error": f"Unknown config key '{key}'. Known: {', '.join(_CONFIG_DEFAULTS)}"}
    data = load_config()
    if data.get("_load_error"):
        return {"ok": False, "error": f"Config file {data['_config_file']} is not valid JSON."}
    if key in _INT_KEYS:
        try:
            value = int(value)
        except (TypeError, ValueError):
            return {"ok": False, "error": f"'{key}' must be an integer."}
    data[key] = value
    path = save_config(data)
    return {"ok": True, "config_file": str(path), key: value}


# ---------------------------------------------------------------------------
# Tools file (chapter_index_tools.py)
# ---------------------------------------------------------------------------

def get_tools_config_path() -> Path:
    """Env CHAPTER_INDEX_TOOLS, else repo root, else cwd."""
    env_path = os.environ.get("CHAPTER_INDEX_TOOLS")
    if env_path:
        return Path(env_path).resolve()
    repo = _find_repo_root()
    if repo is not None:
        return repo / TOOLS_FILENAME
    return Path.cwd() / TOOLS_FILENAME


def load_tools_config() -> Dict[str, Any]:
    """
    Read LLM_MODEL, LLM_MODELS, MAX_WORKERS and TOKENIZER from the tools file.
    Returns lower-case keys; {} when the file does not exist.
    """
    path = get_tools_config_path()
    if not path.is_file():
        return {}
    spec = importlib.util.spec_from_file_location("chapter_index_tools", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    out: Dict[str, Any] = {}
    for name in ("LLM_MODEL", "LLM_MODELS", "MAX_WORKERS", "TOKENIZER"):
        if hasattr(module, name):
            out[name.lower()] = getattr(module, name)
    return out


_LLM_MODEL_LINE_RE = re.compile(r'^LLM_MODEL\s*=\s*.*$', re.MULTILINE)


def set_llm_model(model_id: str) -> Dict[str, Any]:
    """Set LLM_MODEL in the tools file (created when missing)."""
    model_id = (model_id or "").strip()
    if not model_id:
        return {"ok": False, "error": "Model id cannot be empty."}
    path = get_tools_config_path()
    line = f"LLM_MODEL = {model_id!r}"
    if path.is_file():
        text = path.read_text(encoding="utf-8")
        if _LLM_MODEL_LINE_RE.search(text):
            text = _LLM_MODEL_LINE_RE.sub(line.replace("\\", "\\\\"), text, count=1)
        else:
            text = text.rstrip("\n") + "\n\n" + line + "\n"
    else:
        text = "# chapter-index tools config\n\n" + line + "\n"
    path.write_text(text, encoding="utf-8")
    return {"ok": True, "llm_model": model_id, "tools_file": str(path)}


def get_config() -> Dict[str, Any]:
    """Main config plus the tools config under '_tools'."""
    data = load_config()
    data["_tools_file"] = str(get_tools_config_path())
    data["_tools"] = load_tools_config()
    return data
