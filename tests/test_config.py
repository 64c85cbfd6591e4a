"""Tests for chapter_index.config (config file and tools file), isolated with env overrides."""

import json

import pytest

from chapter_index import config as config_module
from chapter_index.api import _resolve_tokenizer, _resolve_workers
from chapter_index.llm import _model_from_tools_config


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / ".chapter_index.json"
    monkeypatch.setenv("CHAPTER_INDEX_CONFIG", str(path))
    return path


@pytest.fixture
def tools_file(tmp_path, monkeypatch):
    path = tmp_path / "chapter_index_tools.py"
    monkeypatch.setenv("CHAPTER_INDEX_TOOLS", str(path))
    return path


def test_defaults_without_file(config_file):
    data = config_module.load_config()
    assert data["_no_file"] is True
    assert data["_config_file"] == str(config_file.resolve())
    assert data["output_root"] == "outputs"
    assert data["tokenizer"] is None
    assert data["max_workers"] is None
    assert data["scan_pages"] == 10
    assert config_module.get_config_path() == config_file.resolve()


def test_set_value_round_trip(config_file):
    result = config_module.set_config_value("max_workers", "8")
    assert result["ok"]
    assert result["max_workers"] == 8
    data = config_module.load_config()
    assert data["_no_file"] is False
    assert data["max_workers"] == 8
    assert json.loads(config_file.read_text(encoding="utf-8"))["max_workers"] == 8


def test_set_value_rejects_unknown_key_and_bad_int(config_file):
    assert not config_module.set_config_value("colour", "blue")["ok"]
    assert not config_module.set_config_value("max_workers", "many")["ok"]
    assert not config_file.exists()


def test_unreadable_config_reported(config_file):
    config_file.write_text("{broken", encoding="utf-8")
    data = config_module.load_config()
    assert data["_load_error"] is True
    assert data["max_workers"] is None
    assert not config_module.set_config_value("tokenizer", "tiktoken")["ok"]


def test_save_keeps_only_known_keys(config_file):
    data = config_module.load_config()
    data["output_root"] = "segments"
    data["stray"] = 1
    config_module.save_config(data)
    assert json.loads(config_file.read_text(encoding="utf-8")) == {
        "output_root": "segments",
        "backend": None,
        "tokenizer": None,
        "max_workers": None,
        "scan_pages": 10,
    }


def test_missing_tools_file(tools_file):
    assert config_module.load_tools_config() == {}


def test_set_llm_model_creates_and_updates(tools_file):
    result = config_module.set_llm_model("openai/gpt-4o-mini")
    assert result["ok"]
    assert config_module.load_tools_config()["llm_model"] == "openai/gpt-4o-mini"

    tools_file.write_text(
        'LLM_MODEL = "old/model"\nLLM_MODELS = {"index": "fast/model"}\nMAX_WORKERS = 2\n',
        encoding="utf-8",
    )
    config_module.set_llm_model("anthropic/claude-3-haiku")
    tools = config_module.load_tools_config()
    assert tools["llm_model"] == "anthropic/claude-3-haiku"
    assert tools["llm_models"] == {"index": "fast/model"}
    assert tools["max_workers"] == 2


def test_set_llm_model_rejects_empty(tools_file):
    assert not config_module.set_llm_model("  ")["ok"]
    assert not tools_file.exists()


def test_per_tool_model_lookup(tools_file):
    tools_file.write_text(
        'LLM_MODEL = "base/model"\nLLM_MODELS = {"index": "index/model"}\n', encoding="utf-8"
    )
    assert _model_from_tools_config("index") == "index/model"
    assert _model_from_tools_config("other") == "base/model"


def test_scan_pages_is_an_integer_key(config_file):
    assert config_module.set_config_value("scan_pages", "3")["scan_pages"] == 3
    assert not config_module.set_config_value("scan_pages", "few")["ok"]
    assert config_module.load_config()["scan_pages"] == 3


def test_tools_file_supplies_workers_and_tokenizer(config_file, tools_file):
    tools_file.write_text('MAX_WORKERS = 2\nTOKENIZER = "heuristic"\n', encoding="utf-8")
    data = config_module.load_config()
    assert _resolve_workers(data.get("max_workers")) == 2
    assert _resolve_tokenizer(data.get("tokenizer")).name == "heuristic"
    assert _resolve_workers(6) == 6
