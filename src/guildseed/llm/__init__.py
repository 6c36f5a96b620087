"""Model client abstraction plus a scripted client for tests and dry runs."""

from typing import Any, Callable

from .base import LLMClient, LLMResponse, Message

__all__ = [
    "LLMClient",
    "LLMResponse",
    "Message",
    "MockLLMClient",
]


# Builds a reply from (messages, system) when canned replies aren't enough
Responder = Callable[[list[Message], "str | None"], str]


class MockLLMClient(LLMClient):
    """
    Scripted client.

    Replies come from `responses` in order, wrapping around when they run
    out, unless a responder callable is given. Every call is recorded in
    `calls` so tests can check prompts and sampling settings.
    """

    def __init__(
        self,
        responses: list[str] | None = None,
        model_name: str = "mock-model",
        responder: Responder | None = None,
    ):
        self.responses = list(responses or ["Mock response"])
        self.responder = responder
        self.calls: list[dict[str, Any]] = []
        self._model_name = model_name

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def last_prompt(self) -> str | None:
        """Content of the final message of the latest call."""
        if not self.calls or not self.calls[-1]["messages"]:
            return None
        return self.calls[-1]["messages"][-1].content

    def chat(
        self,
        messages: list[Message],
        system: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> LLMResponse:
        self.calls.append({
            "messages": list(messages),
            "system": system,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.responder is not None:
            content = self.responder(messages, system)
        else:
            content = self.responses[(len(self.calls) - 1) % len(self.responses)]
        return LLMResponse(content=content, output_tokens=len(content.split()))

    def reset(self) -> None:
        self.calls.clear()
