"""
Pytest fixtures for guildseed tests.

Provides in-memory stores, a quest board, and mock clients for isolated testing.
"""

import pytest

from guildseed.llm import MockLLMClient
from guildseed.seeding import (
    AgentSpec,
    ArenaConfig,
    ArenaJudge,
    GuildSpec,
    LevelDistribution,
    RosterConfig,
)
from guildseed.state import (
    Agent,
    AgentConfig,
    AgentStatus,
    MemoryStore,
    SkillTag,
    generate_instance,
    initialize_agent_at_level,
    initialize_skill_proficiencies,
)
from guildseed.systems import MemoryQuestBoard


@pytest.fixture
def memory_store():
    """In-memory agent store for testing."""
    return MemoryStore()


@pytest.fixture
def board(memory_store):
    """Quest board over the in-memory store."""
    return MemoryQuestBoard(memory_store)


@pytest.fixture
def agent_config():
    """Opaque LLM config used for every test agent."""
    return AgentConfig(provider="local", model="test-model")


@pytest.fixture
def make_agent(memory_store):
    """Factory that stores an agent at a level with the given skills."""
    def _make(name, level=1, skills=(), status=AgentStatus.IDLE, is_npc=False):
        instance = generate_instance()
        agent = Agent(
            id=memory_store.config().agent_entity_id(instance),
            name=name,
            is_npc=is_npc,
        )
        initialize_agent_at_level(agent, level)
        initialize_skill_proficiencies(agent, list(skills))
        agent.status = status
        memory_store.put_agent(instance, agent)
        return agent
    return _make


@pytest.fixture
def arena_config(agent_config):
    """Two trainees on bundled code quests, converging at level 2."""
    return ArenaConfig(
        agent_configs=[agent_config, agent_config],
        target_distribution=LevelDistribution(min_level=2),
        max_training_quests=10,
        quest_domain="code",
    )


@pytest.fixture
def roster_config(agent_config):
    """One guild, three guild apprentices, and an NPC mentor."""
    return RosterConfig(
        name="test-roster",
        description="Roster for tests",
        guilds=[
            GuildSpec(id="guild-test", name="Test Guild", culture="Careful"),
        ],
        agents=[
            AgentSpec(
                name_pattern="apprentice-{n}",
                count=3,
                level=3,
                skills=[SkillTag.ANALYSIS],
                config=agent_config,
                guild_id="guild-test",
            ),
            AgentSpec(
                name_pattern="mentor-{n}",
                count=1,
                level=8,
                skills=[SkillTag.TRAINING],
                config=agent_config,
                is_npc=True,
            ),
        ],
    )


@pytest.fixture
def mock_client():
    """Mock LLM client that always replies with a passing score."""
    return MockLLMClient(responses=["0.9"])


@pytest.fixture
def judge():
    """Baseline judge: every submission passes at 0.8 quality."""
    return ArenaJudge()
