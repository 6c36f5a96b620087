"""
Quest executors: produce an agent's output for a training quest.

SimulatedExecutor is the default and never calls a model. LLMQuestExecutor
runs the quest through an LLMClient using the agent's own configuration.
"""

import json
from datetime import datetime
from typing import Protocol, runtime_checkable

from ..llm.base import LLMClient, Message
from ..state.schema import Agent, Payload
from .templates import QuestTemplate


@runtime_checkable
class QuestExecutor(Protocol):
    def execute(self, agent: Agent, template: QuestTemplate) -> Payload:
        ...


class SimulatedExecutor:
    """Returns a canned response tagged with who did what, and when."""

    def __init__(self, response: str = "Simulated training response"):
        self.response = response

    def execute(self, agent: Agent, template: QuestTemplate) -> Payload:
        return {
            "response": self.response,
            "agent": agent.name,
            "quest": template.title,
            "difficulty": template.difficulty.name.lower(),
            "timestamp": datetime.now().isoformat(),
        }


class LLMQuestExecutor:
    """Sends the quest to a model as a single user message."""

    def __init__(self, client: LLMClient):
        self.client = client

    def build_prompt(self, template: QuestTemplate) -> str:
        parts = [f"# {template.title}", template.description]
        if template.input is not None:
            parts.append("Input:")
            parts.append(json.dumps(template.input, indent=2, default=str))
        if template.criteria:
            parts.append("You will be judged on: " + ", ".join(template.criteria))
        return "\n\n".join(p for p in parts if p)

    def execute(self, agent: Agent, template: QuestTemplate) -> Payload:
        config = agent.config
        response = self.client.chat(
            [Message(role="user", content=self.build_prompt(template))],
            system=config.system_prompt or None,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )
        return {
            "response": response.content,
            "agent": agent.name,
            "quest": template.title,
        }
