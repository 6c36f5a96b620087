"""Agent, guild, and quest state for guildseed."""

from .schema import (
    Agent,
    AgentConfig,
    AgentStats,
    AgentStatus,
    Guild,
    GuildMember,
    GuildRank,
    GuildStatus,
    Payload,
    ProficiencyLevel,
    Quest,
    QuestDifficulty,
    QuestStatus,
    SkillProficiency,
    SkillTag,
    TrustTier,
)
from .progression import (
    LevelEvent,
    apply_xp,
    default_xp_for_difficulty,
    initialize_agent_at_level,
    initialize_skill_proficiencies,
    tier_from_difficulty,
    tier_from_level,
    xp_for_level,
    xp_to_next_level,
)
from .store import (
    AgentNotFoundError,
    AgentStore,
    BoardConfig,
    GuildNotFoundError,
    JsonStore,
    MemoryStore,
    StoreError,
    extract_instance,
    generate_instance,
)

__all__ = [
    # Schema
    "Agent",
    "AgentConfig",
    "AgentStats",
    "AgentStatus",
    "Guild",
    "GuildMember",
    "GuildRank",
    "GuildStatus",
    "Payload",
    "ProficiencyLevel",
    "Quest",
    "QuestDifficulty",
    "QuestStatus",
    "SkillProficiency",
    "SkillTag",
    "TrustTier",
    # Progression
    "LevelEvent",
    "apply_xp",
    "default_xp_for_difficulty",
    "initialize_agent_at_level",
    "initialize_skill_proficiencies",
    "tier_from_difficulty",
    "tier_from_level",
    "xp_for_level",
    "xp_to_next_level",
    # Store
    "AgentNotFoundError",
    "AgentStore",
    "BoardConfig",
    "GuildNotFoundError",
    "JsonStore",
    "MemoryStore",
    "StoreError",
    "extract_instance",
    "generate_instance",
]
