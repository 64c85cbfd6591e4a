"""Tests for chapter_index.discovery: detection, line parsing and candidate nesting."""

from conftest import FakeOracle, FailingOracle, make_pages

from chapter_index.discovery import (
    build_candidates,
    count_structured_lines,
    discover_index,
    find_index_page,
    has_index_keyword,
    is_sub_entry,
    parse_index_line,
    parse_index_lines,
    parse_index_pages,
    select_explicit_index_pages,
)
from chapter_index.models import IndexCandidate, Page, SegmentationConfig


# ============================================================================
# Detection
# ============================================================================

def test_keyword_detection_is_case_insensitive():
    assert has_index_keyword(["TABLE OF CONTENTS"])
    assert has_index_keyword(["Índice general"])
    assert not has_index_keyword(["Nothing to see here"])


def test_structured_page_flagged_and_scan_stops():
    """Page 2 has four dotted-leader lines: it is the index page, later pages are not scanned."""
    pages = make_pages(
        {
            2: [
                "Alpha .......... 3",
                "Beta .......... 5",
                "Gamma .......... 8",
                "Delta .......... 11",
            ],
            4: ["Table of contents"],
        },
        total=12,
    )
    assert count_structured_lines(pages[1].lines) == 4
    found = find_index_page(pages)
    assert found is not None
    assert found.page_number == 2


def test_two_structured_lines_are_not_enough():
    pages = make_pages({1: ["Alpha .......... 3", "Beta .......... 5", "plain words"]}, total=3)
    assert find_index_page(pages) is None


def test_scan_limited_to_first_pages():
    pages = make_pages({11: ["Contents"]}, total=12)
    assert find_index_page(pages, scan_pages=10) is None
    assert find_index_page(pages, scan_pages=11).page_number == 11


def test_explicit_window_single_page_when_no_end():
    pages = make_pages({}, total=5)
    assert [p.page_number for p in select_explicit_index_pages(pages, 2, None)] == [2]
    assert [p.page_number for p in select_explicit_index_pages(pages, 2, 4)] == [2, 3, 4]


# ============================================================================
# Line parsing
# ============================================================================

def test_chapter_pattern():
    entry = parse_index_line("Chapter 1: Getting Started .......... 5")
    assert entry.title == "Chapter 1: Getting Started"
    assert entry.page == 5
    assert not entry.is_sub


def test_numbered_patterns():
    assert parse_index_line("1. Introduction .......... 2").title == "1. Introduction"
    sub = parse_index_line("1.2 Scope .......... 4")
    assert sub.title == "1.2 Scope"
    assert sub.is_sub


def test_leader_and_caps_patterns():
    assert parse_index_line("Introduction........12").title == "Introduction"
    caps = parse_index_line("INTRODUCTION 5")
    assert caps.title == "INTRODUCTION"
    assert caps.page == 5


def test_leader_titles_may_contain_periods_or_be_short():
    entry = parse_index_line("Dr. Smith's notes .... 5")
    assert entry.title == "Dr. Smith's notes"
    assert entry.page == 5
    short = parse_index_line("Art .... 5")
    assert short.title == "Art"
    assert not short.is_sub


def test_numbered_without_leaders():
    entry = parse_index_line("2 Methods 14")
    assert entry.title == "2. Methods"
    assert entry.page == 14


def test_page_out_of_range_and_noise_discarded():
    assert parse_index_line("Introduction .......... 0") is None
    assert parse_index_line("Introduction .......... 10000") is None
    assert parse_index_line("just some prose") is None
    assert parse_index_line("   ") is None


def test_sub_entry_markers():
    assert is_sub_entry("1.a Details")
    assert is_sub_entry("Background", "    Background .... 3")
    assert is_sub_entry("Ab")
    assert not is_sub_entry("1. Introduction", "1. Introduction .... 2")


def test_sub_entries_nest_under_previous_chapter():
    entries = parse_index_lines(
        [
            "1. Introduction .......... 2",
            "1.1 Motivation .......... 3",
            "1.2 Scope .......... 4",
            "2. Methods .......... 7",
        ]
    )
    chapters = build_candidates(entries)
    assert [c.title for c in chapters] == ["1. Introduction", "2. Methods"]
    assert [s.title for s in chapters[0].subchapters] == ["1.1 Motivation", "1.2 Scope"]
    assert chapters[0].to_hint == 6
    assert chapters[0].subchapters[0].to_hint == 3
    assert chapters[0].subchapters[1].to_hint == 6
    assert chapters[1].to_hint is None


def test_leading_sub_entry_dropped():
    chapters = build_candidates(parse_index_lines(["    Preface .... 1", "Introduction .... 2"]))
    assert [c.title for c in chapters] == ["Introduction"]


def test_parse_index_pages_joins_pages():
    pages = [
        Page(page_number=1, lines=["Contents", "Alpha .... 3"]),
        Page(page_number=2, lines=["Beta .... 9"]),
    ]
    assert [c.title for c in parse_index_pages(pages)] == ["Alpha", "Beta"]


# ============================================================================
# Discovery
# ============================================================================

def test_explicit_range(two_chapter_pages):
    config = SegmentationConfig(has_index=True, index_from_page=1, index_to_page=1)
    found = discover_index(two_chapter_pages, config)
    assert found.source == "explicit"
    assert found.index_pages == [1]
    assert [c.title for c in found.candidates] == ["Introduction", "Methodology"]


def test_empty_explicit_window_falls_back_to_detection(two_chapter_pages):
    config = SegmentationConfig(has_index=True, index_from_page=40, index_to_page=42)
    found = discover_index(two_chapter_pages, config)
    assert found.source == "heuristic"
    assert found.index_pages == [1]
    assert any("40-42" in w for w in found.warnings)


def test_no_index_no_oracle_is_fallback(plain_pages):
    found = discover_index(plain_pages)
    assert found.source == "fallback"
    assert found.candidates == []


def test_oracle_used_when_no_index(plain_pages):
    oracle = FakeOracle([IndexCandidate(title="Prologue")])
    found = discover_index(plain_pages, oracle=oracle)
    assert found.source == "oracle"
    assert oracle.calls == 1
    assert [c.title for c in found.candidates] == ["Prologue"]


def test_oracle_not_called_when_index_found(two_chapter_pages):
    oracle = FakeOracle([IndexCandidate(title="Prologue")])
    found = discover_index(two_chapter_pages, oracle=oracle)
    assert found.source == "heuristic"
    assert oracle.calls == 0


def test_use_oracle_overrides_found_index(two_chapter_pages):
    oracle = FakeOracle([IndexCandidate(title="Prologue")])
    found = discover_index(two_chapter_pages, SegmentationConfig(use_oracle=True), oracle)
    assert found.source == "oracle"
    assert [c.title for c in found.candidates] == ["Prologue"]


def test_oracle_failure_records_warning(plain_pages):
    found = discover_index(plain_pages, oracle=FailingOracle())
    assert found.source == "fallback"
    assert found.candidates == []
    assert any("LLM unavailable" in w for w in found.warnings)


def test_keyword_page_without_entries_is_not_an_index():
    pages = make_pages({3: ["This section covers the basics"]}, total=6)
    found = discover_index(pages)
    assert found.candidates == []
    assert found.index_pages == []
    assert found.source == "fallback"


# ============================================================================
# Multi-page index
# ============================================================================

def test_index_continues_onto_next_page():
    pages = make_pages(
        {
            1: ["Contents", "Alpha .......... 4", "Beta .......... 6", "Gamma .......... 8"],
            2: ["Delta .......... 10", "Epsilon .......... 11", "Zeta .......... 12"],
        },
        total=12,
    )
    found = discover_index(pages)
    assert found.source == "heuristic"
    assert found.index_pages == [1, 2]
    assert [c.title for c in found.candidates] == [
        "Alpha", "Beta", "Gamma", "Delta", "Epsilon", "Zeta",
    ]


def test_index_pages_capped_at_max_index_pages():
    pages = make_pages(
        {
            1: ["Contents", "Alpha .... 5", "Beta .... 5", "Gamma .... 6"],
            2: ["Delta .... 6", "Epsilon .... 7", "Zeta .... 7"],
            3: ["Eta .... 8", "Theta .... 8", "Iota .... 9"],
            4: ["Kappa .... 9", "Lambda .... 10", "Mu .... 10"],
        },
        total=12,
    )
    found = discover_index(pages)
    assert found.index_pages == [1, 2, 3]
    assert "Kappa" not in [c.title for c in found.candidates]

    wider = discover_index(pages, SegmentationConfig(max_index_pages=4))
    assert wider.index_pages == [1, 2, 3, 4]


def test_chapter_page_full_of_numbers_ends_the_index():
    """Page 2 is a table of figures that parses as entries, but its heading is a listed title."""
    pages = make_pages(
        {
            1: ["Contents", "Sales figures .......... 2", "Costs .......... 6"],
            2: ["Sales figures", "NORTH 120", "SOUTH 95", "EAST 80", "WEST 60"],
            6: ["Costs", "Spending was flat"],
        },
        total=8,
    )
    found = discover_index(pages)
    assert found.index_pages == [1]
    assert [c.title for c in found.candidates] == ["Sales figures", "Costs"]


def test_numeric_rows_without_entries_end_the_index():
    pages = make_pages(
        {
            1: ["Contents", "Sales .......... 2", "Costs .......... 6"],
            2: ["Quarterly totals", "North 2019 120", "South 2019 95", "East 2019 80"],
        },
        total=8,
    )
    assert discover_index(pages).index_pages == [1]
