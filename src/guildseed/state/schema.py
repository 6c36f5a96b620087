"""
Pydantic models for guildseed agent, guild, and quest state.

Designed to serialize to JSON but structured like database tables.
Agents and guilds are persisted by an AgentStore; quests live on a QuestBoard.
"""

from datetime import datetime
from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, Field, JsonValue, field_validator


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class TrustTier(IntEnum):
    """Capability band derived from agent level. Ordered."""
    APPRENTICE = 0     # Levels 1-5: read-only, summarize, simple transforms
    JOURNEYMAN = 1     # Levels 6-10: tools, API requests
    EXPERT = 2         # Levels 11-15: modify state, spend budget
    MASTER = 3         # Levels 16-18: supervise, decompose, lead parties
    GRANDMASTER = 4    # Levels 19-20: create quests, manage guilds

    @property
    def display_name(self) -> str:
        return self.name.title()


class QuestDifficulty(IntEnum):
    """Quest hardness. Ordering drives all fallback search."""
    TRIVIAL = 0
    EASY = 1
    MODERATE = 2
    HARD = 3
    EPIC = 4
    LEGENDARY = 5

    @classmethod
    def parse(cls, value: Any) -> "QuestDifficulty":
        """Accept an enum member, its integer value, or its lower-case name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if value.isdigit():
                return cls(int(value))
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"unknown quest difficulty: {value!r}") from None
        return cls(value)


class SkillTag(str, Enum):
    CODE_GENERATION = "code_generation"
    CODE_REVIEW = "code_review"
    DATA_TRANSFORMATION = "data_transformation"
    SUMMARIZATION = "summarization"
    RESEARCH = "research"
    PLANNING = "planning"
    CUSTOMER_COMMUNICATIONS = "customer_communications"
    ANALYSIS = "analysis"
    TRAINING = "training"  # Can lead training parties as mentor


class ProficiencyLevel(IntEnum):
    NOVICE = 1
    APPRENTICE = 2
    JOURNEYMAN = 3
    EXPERT = 4
    MASTER = 5


class AgentStatus(str, Enum):
    IDLE = "idle"
    ON_QUEST = "on_quest"
    IN_BATTLE = "in_battle"
    COOLDOWN = "cooldown"
    RETIRED = "retired"


class QuestStatus(str, Enum):
    POSTED = "posted"
    CLAIMED = "claimed"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class GuildStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class GuildRank(str, Enum):
    INITIATE = "initiate"
    MEMBER = "member"
    VETERAN = "veteran"
    OFFICER = "officer"
    GUILDMASTER = "guildmaster"


# Quest input and output payloads: any JSON-compatible value
# (str, int, float, bool, None, list, dict), validated recursively.
Payload = JsonValue


# -----------------------------------------------------------------------------
# Agents
# -----------------------------------------------------------------------------

class AgentConfig(BaseModel):
    """LLM configuration backing an agent. Opaque to the seeders."""
    provider: str = ""          # "anthropic", "openai", "local", ...
    model: str = ""
    system_prompt: str = ""
    temperature: float = 0.7
    max_tokens: int = 2048
    metadata: dict[str, str] = Field(default_factory=dict)


class SkillProficiency(BaseModel):
    """An agent's mastery of one skill."""
    level: ProficiencyLevel = ProficiencyLevel.NOVICE
    progress: int = 0       # 0-99 points toward next proficiency level
    total_xp: int = 0       # Lifetime XP earned using this skill
    quests_used: int = 0


class AgentStats(BaseModel):
    quests_completed: int = 0
    quests_failed: int = 0
    total_xp_earned: int = 0
    total_xp_lost: int = 0


class Agent(BaseModel):
    """
    An agent with RPG-style progression.

    Tier is always derived from level; callers should go through
    progression.initialize_agent_at_level / apply_xp rather than setting
    level directly.
    """
    id: str
    name: str                                  # Idempotency key for seeding
    status: AgentStatus = AgentStatus.IDLE

    level: int = 1                             # 1-20
    xp: int = 0                                # XP within the current level
    xp_to_level: int = 0                       # XP needed for next level
    tier: TrustTier = TrustTier.APPRENTICE

    skill_proficiencies: dict[SkillTag, SkillProficiency] = Field(default_factory=dict)
    guilds: list[str] = Field(default_factory=list)

    config: AgentConfig = Field(default_factory=AgentConfig)
    stats: AgentStats = Field(default_factory=AgentStats)
    is_npc: bool = False  # Bootstrap/trainer NPCs

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def has_skill(self, skill: SkillTag) -> bool:
        return skill in self.skill_proficiencies

    def skill_tags(self) -> list[SkillTag]:
        return list(self.skill_proficiencies)

    def join_guild(self, guild_id: str) -> None:
        """Record guild membership, ignoring duplicates."""
        if guild_id not in self.guilds:
            self.guilds.append(guild_id)


# -----------------------------------------------------------------------------
# Guilds
# -----------------------------------------------------------------------------

class GuildMember(BaseModel):
    agent_id: str
    rank: GuildRank = GuildRank.INITIATE
    joined_at: datetime = Field(default_factory=datetime.now)
    contribution: int = 0


class Guild(BaseModel):
    id: str
    name: str
    description: str = ""
    culture: str = ""
    status: GuildStatus = GuildStatus.ACTIVE
    members: list[GuildMember] = Field(default_factory=list)
    min_level: int = 1
    max_members: int = 20
    reputation: float = 0.5  # 0.0-1.0
    founded: datetime = Field(default_factory=datetime.now)
    created_at: datetime = Field(default_factory=datetime.now)

    def has_member(self, agent_id: str) -> bool:
        return any(m.agent_id == agent_id for m in self.members)


# -----------------------------------------------------------------------------
# Quests
# -----------------------------------------------------------------------------

class Quest(BaseModel):
    """A unit of work on the quest board."""
    id: str = ""
    title: str
    description: str = ""
    status: QuestStatus = QuestStatus.POSTED
    difficulty: QuestDifficulty = QuestDifficulty.TRIVIAL

    required_skills: list[SkillTag] = Field(default_factory=list)
    min_tier: TrustTier = TrustTier.APPRENTICE
    criteria: list[str] = Field(default_factory=list)

    base_xp: int = 0
    input: Payload = None
    output: Payload = None

    require_review: bool = True
    max_attempts: int = 3
    attempts: int = 0
    claimed_by: str | None = None
    template_id: str | None = None

    posted_at: datetime | None = None
    completed_at: datetime | None = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _parse_difficulty(cls, value: Any) -> QuestDifficulty:
        return QuestDifficulty.parse(value)
