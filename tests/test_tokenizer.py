"""Tests for chapter_index.tokenizer"""

import pytest

from chapter_index.tokenizer import (
    HeuristicTokenizer,
    TiktokenTokenizer,
    Tokenizer,
    count_tokens,
    get_tokenizer,
)


def test_heuristic_empty_and_blank_text_is_zero():
    tok = HeuristicTokenizer()
    assert tok.count("") == 0
    assert tok.count("   \n\t ") == 0


def test_heuristic_averages_chars_and_words():
    # 19 chars -> 19 // 4 = 4; 4 words; (4 + 4) / 2 = 4
    assert HeuristicTokenizer().count("alpha beta gamma de") == 4
    # 11 chars -> 2; 2 words; (2 + 2) / 2 = 2
    assert HeuristicTokenizer().count("hello world") == 2


def test_heuristic_is_deterministic():
    text = "Some chapter text\nwith a second line"
    tok = HeuristicTokenizer()
    assert tok.count(text) == tok.count(text) == count_tokens(text)


def test_get_tokenizer_default_and_by_name():
    assert get_tokenizer().name == "heuristic"
    assert get_tokenizer("heuristic").name == "heuristic"
    assert isinstance(get_tokenizer("tiktoken"), TiktokenTokenizer)


def test_get_tokenizer_unknown_name():
    with pytest.raises(KeyError):
        get_tokenizer("nope")


def test_tokenizers_satisfy_protocol():
    assert isinstance(HeuristicTokenizer(), Tokenizer)
    assert isinstance(TiktokenTokenizer(), Tokenizer)


def test_tiktoken_blank_text_does_not_load_encoding():
    tok = TiktokenTokenizer()
    assert tok.count("  ") == 0
    assert tok._encoding is None


def test_count_tokens_with_custom_tokenizer():
    class WordCounter:
        name = "words"

        def count(self, text: str) -> int:
            return len(text.split())

    assert count_tokens("one two three", WordCounter()) == 3
