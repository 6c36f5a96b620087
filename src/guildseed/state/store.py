"""
Agent and guild storage abstraction.

Separates persistence from seeding logic for testability.
"""

import json
import logging
import secrets
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol, runtime_checkable

from .schema import Agent, Guild

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Storage operation failed."""
    pass


class AgentNotFoundError(StoreError):
    def __init__(self, instance: str):
        self.instance = instance
        super().__init__(f"agent not found: {instance}")


class GuildNotFoundError(StoreError):
    def __init__(self, guild_id: str):
        self.guild_id = guild_id
        super().__init__(f"guild not found: {guild_id}")


# -----------------------------------------------------------------------------
# Entity IDs
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class BoardConfig:
    """
    Namespace for entity IDs.

    Full IDs have six dot-separated parts:
        org.platform.game.board.type.instance
    """
    org: str = "default"
    platform: str = "local"
    board: str = "main"

    def prefix(self) -> str:
        return f"{self.org}.{self.platform}.game.{self.board}"

    def entity_id(self, entity_type: str, instance: str) -> str:
        return f"{self.prefix()}.{entity_type}.{instance}"

    def agent_entity_id(self, instance: str) -> str:
        return self.entity_id("agent", instance)

    def quest_entity_id(self, instance: str) -> str:
        return self.entity_id("quest", instance)

    def guild_entity_id(self, instance: str) -> str:
        return self.entity_id("guild", instance)


def generate_instance() -> str:
    """Random 16-character hex instance ID."""
    return secrets.token_hex(8)


def extract_instance(entity_id: str) -> str:
    """Last segment of a dotted entity ID (the whole ID if undotted)."""
    return entity_id.rsplit(".", 1)[-1]


GuildMutator = Callable[[Guild], None]


@runtime_checkable
class AgentStore(Protocol):
    """
    Storage interface for agents and guilds.

    Implementations:
    - JsonStore: File-based persistence
    - MemoryStore: In-memory storage (testing)

    update_guild must be an atomic read-modify-write so concurrent seeders
    appending members to the same guild never lose an append.
    """

    def put_agent(self, instance: str, agent: Agent) -> None:
        ...

    def get_agent(self, instance: str) -> Agent:
        """Raises AgentNotFoundError if missing."""
        ...

    def list_all_agents(self) -> list[Agent]:
        """All agents in insertion order."""
        ...

    def put_guild(self, guild_id: str, guild: Guild) -> None:
        ...

    def get_guild(self, guild_id: str) -> Guild:
        """Raises GuildNotFoundError if missing."""
        ...

    def update_guild(self, guild_id: str, mutator: GuildMutator) -> None:
        ...

    def config(self) -> BoardConfig:
        ...


class MemoryStore:
    """
    In-memory agent and guild storage.

    Returns copies so callers can't mutate stored state without a put.
    """

    def __init__(self, board_config: BoardConfig | None = None):
        self._config = board_config or BoardConfig()
        self.agents: dict[str, Agent] = {}
        self.guilds: dict[str, Guild] = {}
        self._lock = threading.Lock()

    def put_agent(self, instance: str, agent: Agent) -> None:
        with self._lock:
            self.agents[instance] = agent.model_copy(deep=True)

    def get_agent(self, instance: str) -> Agent:
        with self._lock:
            agent = self.agents.get(instance)
            if agent is None:
                raise AgentNotFoundError(instance)
            return agent.model_copy(deep=True)

    def list_all_agents(self) -> list[Agent]:
        with self._lock:
            return [a.model_copy(deep=True) for a in self.agents.values()]

    def put_guild(self, guild_id: str, guild: Guild) -> None:
        with self._lock:
            self.guilds[guild_id] = guild.model_copy(deep=True)

    def get_guild(self, guild_id: str) -> Guild:
        with self._lock:
            guild = self.guilds.get(guild_id)
            if guild is None:
                raise GuildNotFoundError(guild_id)
            return guild.model_copy(deep=True)

    def update_guild(self, guild_id: str, mutator: GuildMutator) -> None:
        with self._lock:
            guild = self.guilds.get(guild_id)
            if guild is None:
                raise GuildNotFoundError(guild_id)
            working = guild.model_copy(deep=True)
            mutator(working)
            self.guilds[guild_id] = working

    def config(self) -> BoardConfig:
        return self._config

    def clear(self) -> None:
        """Drop everything (test utility)."""
        with self._lock:
            self.agents.clear()
            self.guilds.clear()


class JsonStore:
    """
    File-based storage using one JSON file per entity.

    Layout:
        <root>/agents/<instance>.json
        <root>/guilds/<guild_id>.json
    """

    def __init__(self, root: Path | str = "seed_data", board_config: BoardConfig | None = None):
        self.root = Path(root)
        self.agents_dir = self.root / "agents"
        self.guilds_dir = self.root / "guilds"
        self.agents_dir.mkdir(parents=True, exist_ok=True)
        self.guilds_dir.mkdir(parents=True, exist_ok=True)
        self._config = board_config or BoardConfig()
        self._lock = threading.Lock()

    def _agent_file(self, instance: str) -> Path:
        return self.agents_dir / f"{instance}.json"

    def _guild_file(self, guild_id: str) -> Path:
        return self.guilds_dir / f"{guild_id}.json"

    def put_agent(self, instance: str, agent: Agent) -> None:
        try:
            self._agent_file(instance).write_text(agent.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise StoreError(f"failed to write agent {instance}: {e}") from e

    def get_agent(self, instance: str) -> Agent:
        path = self._agent_file(instance)
        if not path.exists():
            raise AgentNotFoundError(instance)
        try:
            return Agent.model_validate_json(path.read_text(encoding="utf-8"))
        except ValueError as e:
            raise StoreError(f"corrupt agent file {path.name}: {e}") from e

    def list_all_agents(self) -> list[Agent]:
        agents = []
        for f in sorted(self.agents_dir.glob("*.json")):
            try:
                agents.append(Agent.model_validate(json.loads(f.read_text(encoding="utf-8"))))
            except ValueError as e:
                logger.warning(f"Skipping unreadable agent file {f.name}: {e}")
        # Rewrites touch mtime, so creation order comes from the record itself
        agents.sort(key=lambda a: a.created_at)
        return agents

    def put_guild(self, guild_id: str, guild: Guild) -> None:
        try:
            self._guild_file(guild_id).write_text(guild.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise StoreError(f"failed to write guild {guild_id}: {e}") from e

    def get_guild(self, guild_id: str) -> Guild:
        path = self._guild_file(guild_id)
        if not path.exists():
            raise GuildNotFoundError(guild_id)
        try:
            return Guild.model_validate_json(path.read_text(encoding="utf-8"))
        except ValueError as e:
            raise StoreError(f"corrupt guild file {path.name}: {e}") from e

    def update_guild(self, guild_id: str, mutator: GuildMutator) -> None:
        with self._lock:
            guild = self.get_guild(guild_id)
            mutator(guild)
            self.put_guild(guild_id, guild)

    def config(self) -> BoardConfig:
        return self._config
