"""
Model client seam for quest execution and rubric scoring.

guildseed ships no network backend. Hosts wrap their provider in an
LLMClient subclass and hand it to LLMQuestExecutor or LLMCriterionScorer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal


Role = Literal["system", "user", "assistant"]


@dataclass
class Message:
    role: Role
    content: str


@dataclass
class LLMResponse:
    """A completed reply. Only content is read by the seeders."""
    content: str
    finish_reason: str = "stop"
    input_tokens: int = 0
    output_tokens: int = 0


class LLMClient(ABC):
    """
    A chat-completion backend.

    Subclasses implement chat() and model_name. Trainees call chat() with
    their own AgentConfig settings; judges go through ask() with a fixed
    low temperature and a tiny token budget.
    """

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...

    @abstractmethod
    def chat(
        self,
        messages: list[Message],
        system: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> LLMResponse:
        """Complete a conversation. Errors propagate to the caller's round."""
        ...

    def ask(self, prompt: str, system: str | None = None, **kwargs) -> str:
        """One user turn in, reply text out."""
        reply = self.chat([Message(role="user", content=prompt)], system=system, **kwargs)
        return reply.content
