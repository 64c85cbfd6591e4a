"""
Shared fixtures: small synthetic page corpora and fake collaborators.

No test talks to the network; the index oracle and the LLM backend are fakes.
"""

import pytest

from chapter_index.models import IndexCandidate, Page

FILLER = "The quick brown fox jumps over the lazy dog while the river keeps flowing"


def make_pages(contents: dict[int, list[str]], total: int) -> list[Page]:
    """Pages 1..total; pages missing from contents get one filler line."""
    return [Page(page_number=n, lines=contents.get(n, [f"{FILLER} on leaf {_word(n)}"])) for n in range(1, total + 1)]


def _word(n: int) -> str:
    # page numbers as words so filler lines never end with a digit
    words = ["zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine"]
    return "-".join(words[int(d)] for d in str(n))


class FakeOracle:
    """Returns a fixed proposal and records the calls."""

    def __init__(self, candidates: list[IndexCandidate]):
        self.candidates = candidates
        self.calls = 0

    def propose_index(self, pages: list[Page]) -> list[IndexCandidate]:
        self.calls += 1
        return [c.model_copy(deep=True) for c in self.candidates]


class FailingOracle:
    def propose_index(self, pages: list[Page]) -> list[IndexCandidate]:
        raise RuntimeError("LLM unavailable")


class FakeLLMBackend:
    """LLMBackend stand-in that replies with a canned string."""

    def __init__(self, reply: str):
        self.reply = reply
        self.messages = None
        self.model = None

    def complete(self, messages, *, model=None, max_tokens=4096, temperature=0.0) -> str:
        self.messages = messages
        self.model = model
        return self.reply

    @property
    def name(self) -> str:
        return "fake"


@pytest.fixture
def two_chapter_pages() -> list[Page]:
    """12 pages, index on page 1, Introduction on page 2, Methodology on page 7."""
    return make_pages(
        {
            1: ["Contents", "Introduction .......... 2", "Methodology .......... 7"],
            2: ["Introduction", "We describe the problem at length"],
            7: ["Methodology", "Samples were collected by hand"],
        },
        total=12,
    )


@pytest.fixture
def repeated_results_pages() -> list[Page]:
    """'Results' listed twice in the index, each with one subchapter."""
    return make_pages(
        {
            1: [
                "Contents",
                "Results .......... 3",
                "    3.1 Data .......... 4",
                "Results .......... 9",
                "    3.2 Analysis .......... 10",
            ],
            3: ["Results", "First part of the findings"],
            4: ["3.1 Data", "Tables and measurements"],
            9: ["Results", "Second part of the findings"],
            10: ["3.2 Analysis", "Interpretation of the tables"],
        },
        total=12,
    )


@pytest.fixture
def plain_pages() -> list[Page]:
    """15 pages of prose with no index signal anywhere."""
    return make_pages({}, total=15)


@pytest.fixture
def fake_oracle_factory():
    return FakeOracle


@pytest.fixture
def failing_oracle() -> FailingOracle:
    return FailingOracle()


@pytest.fixture
def fake_llm_factory():
    return FakeLLMBackend
