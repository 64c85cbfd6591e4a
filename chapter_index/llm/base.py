"""LLM backend interface used by the index oracle. Implement it to add a provider."""

from typing import Protocol, runtime_checkable

# {"role": "system"|"user"|"assistant", "content": "..."}
Message = dict[str, str]


def build_messages(prompt: str, system: str | None = None) -> list[Message]:
    """Single-turn chat: optional system message followed by the user prompt."""
    messages: list[Message] = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    return messages


@runtime_checkable
class LLMBackend(Protocol):
    """Chat-completion provider. complete() returns the reply text ('' when empty) or raises."""

    def complete(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.0,
    ) -> str:
        ...

    @property
    def name(self) -> str:
        ...
