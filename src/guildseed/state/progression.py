"""
Progression rules: tiers, XP curve, and level transitions.

These are the reference rules the stores and boards in this package use.
The seeders never change an agent's level themselves; they initialize agents
through here and leave every later change to whoever applies verdicts.
"""

from dataclasses import dataclass
from datetime import datetime

from .schema import (
    Agent,
    AgentStatus,
    ProficiencyLevel,
    QuestDifficulty,
    SkillProficiency,
    SkillTag,
    TrustTier,
)


MIN_LEVEL = 1
MAX_LEVEL = 20

# Upper level bound (inclusive) of each tier
TIER_LEVEL_CEILINGS: list[tuple[int, TrustTier]] = [
    (5, TrustTier.APPRENTICE),
    (10, TrustTier.JOURNEYMAN),
    (15, TrustTier.EXPERT),
    (18, TrustTier.MASTER),
]

DEFAULT_XP_BY_DIFFICULTY: dict[QuestDifficulty, int] = {
    QuestDifficulty.TRIVIAL: 25,
    QuestDifficulty.EASY: 50,
    QuestDifficulty.MODERATE: 100,
    QuestDifficulty.HARD: 250,
    QuestDifficulty.EPIC: 500,
    QuestDifficulty.LEGENDARY: 1000,
}


def tier_from_level(level: int) -> TrustTier:
    """Step function over five bands: 1-5, 6-10, 11-15, 16-18, 19-20."""
    for ceiling, tier in TIER_LEVEL_CEILINGS:
        if level <= ceiling:
            return tier
    return TrustTier.GRANDMASTER


def tier_from_difficulty(difficulty: QuestDifficulty) -> TrustTier:
    """Minimum tier expected to take on a quest of this difficulty."""
    if difficulty <= QuestDifficulty.EASY:
        return TrustTier.APPRENTICE
    if difficulty <= QuestDifficulty.MODERATE:
        return TrustTier.JOURNEYMAN
    if difficulty <= QuestDifficulty.HARD:
        return TrustTier.EXPERT
    if difficulty <= QuestDifficulty.EPIC:
        return TrustTier.MASTER
    return TrustTier.GRANDMASTER


def default_xp_for_difficulty(difficulty: QuestDifficulty) -> int:
    return DEFAULT_XP_BY_DIFFICULTY.get(difficulty, 50)


def xp_to_next_level(level: int) -> int:
    """Gentle exponential curve. Level 1->2: 100 XP, level 19->20: ~8300 XP."""
    return int(100.0 * level ** 1.5)


def xp_for_level(target_level: int) -> int:
    """Total XP needed to climb from level 1 to target_level."""
    return sum(xp_to_next_level(level) for level in range(MIN_LEVEL, target_level))


@dataclass
class LevelEvent:
    """Records a level change (or the lack of one) after XP is applied."""
    agent_id: str
    old_level: int
    new_level: int
    old_tier: TrustTier
    new_tier: TrustTier
    direction: str = "none"  # "up" or "none"
    xp_current: int = 0
    xp_needed: int = 0

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


def apply_xp(agent: Agent, delta: int) -> LevelEvent:
    """
    Add (or remove) XP and handle level-ups.

    XP never drops below zero; losing XP never costs a level.
    """
    event = LevelEvent(
        agent_id=agent.id,
        old_level=agent.level,
        new_level=agent.level,
        old_tier=agent.tier,
        new_tier=agent.tier,
    )

    agent.xp = max(0, agent.xp + delta)
    if agent.xp_to_level <= 0:
        agent.xp_to_level = xp_to_next_level(agent.level)

    while agent.xp >= agent.xp_to_level and agent.level < MAX_LEVEL:
        agent.xp -= agent.xp_to_level
        agent.level += 1
        agent.xp_to_level = xp_to_next_level(agent.level)
        event.direction = "up"

    agent.tier = tier_from_level(agent.level)
    agent.updated_at = datetime.now()

    event.new_level = agent.level
    event.new_tier = agent.tier
    event.xp_current = agent.xp
    event.xp_needed = agent.xp_to_level
    return event


def initialize_agent_at_level(agent: Agent, level: int) -> None:
    """Set up a fresh agent at a level with that level's XP baseline."""
    now = datetime.now()
    agent.level = level
    agent.tier = tier_from_level(level)
    agent.xp = 0  # Start at 0 XP within the current level
    agent.xp_to_level = xp_to_next_level(level)
    agent.status = AgentStatus.IDLE
    agent.created_at = now
    agent.updated_at = now


def initialize_skill_proficiencies(agent: Agent, skills: list[SkillTag]) -> None:
    """Every listed skill starts at Novice with no progress."""
    for skill in skills:
        agent.skill_proficiencies[skill] = SkillProficiency(
            level=ProficiencyLevel.NOVICE,
            progress=0,
            total_xp=0,
            quests_used=0,
        )
