"""Tests for tiers, the XP curve, and level transitions."""

import pytest

from guildseed.state import (
    Agent,
    AgentStatus,
    ProficiencyLevel,
    QuestDifficulty,
    SkillTag,
    TrustTier,
    apply_xp,
    default_xp_for_difficulty,
    initialize_agent_at_level,
    initialize_skill_proficiencies,
    tier_from_difficulty,
    tier_from_level,
    xp_for_level,
    xp_to_next_level,
)


def fresh_agent(level=1):
    agent = Agent(id="default.local.game.main.agent.abc", name="tester")
    initialize_agent_at_level(agent, level)
    return agent


class TestTierFromLevel:
    """Test tier derivation."""

    @pytest.mark.parametrize("level,tier", [
        (1, TrustTier.APPRENTICE),
        (5, TrustTier.APPRENTICE),
        (6, TrustTier.JOURNEYMAN),
        (10, TrustTier.JOURNEYMAN),
        (11, TrustTier.EXPERT),
        (15, TrustTier.EXPERT),
        (16, TrustTier.MASTER),
        (18, TrustTier.MASTER),
        (19, TrustTier.GRANDMASTER),
        (20, TrustTier.GRANDMASTER),
    ])
    def test_band_edges(self, level, tier):
        """Each band boundary maps to the right tier."""
        assert tier_from_level(level) == tier

    def test_monotonic(self):
        """Tier never decreases as level rises."""
        tiers = [tier_from_level(level) for level in range(1, 21)]
        assert tiers == sorted(tiers)

    def test_display_name(self):
        assert TrustTier.GRANDMASTER.display_name == "Grandmaster"


class TestDifficultyRules:
    """Test difficulty-derived values."""

    def test_default_xp(self):
        assert default_xp_for_difficulty(QuestDifficulty.TRIVIAL) == 25
        assert default_xp_for_difficulty(QuestDifficulty.MODERATE) == 100
        assert default_xp_for_difficulty(QuestDifficulty.EPIC) == 500
        assert default_xp_for_difficulty(QuestDifficulty.LEGENDARY) == 1000

    def test_tier_from_difficulty(self):
        assert tier_from_difficulty(QuestDifficulty.EASY) == TrustTier.APPRENTICE
        assert tier_from_difficulty(QuestDifficulty.MODERATE) == TrustTier.JOURNEYMAN
        assert tier_from_difficulty(QuestDifficulty.HARD) == TrustTier.EXPERT
        assert tier_from_difficulty(QuestDifficulty.EPIC) == TrustTier.MASTER
        assert tier_from_difficulty(QuestDifficulty.LEGENDARY) == TrustTier.GRANDMASTER

    def test_parse_difficulty(self):
        """Difficulties parse from names, digits, and ints."""
        assert QuestDifficulty.parse("moderate") == QuestDifficulty.MODERATE
        assert QuestDifficulty.parse("HARD") == QuestDifficulty.HARD
        assert QuestDifficulty.parse("4") == QuestDifficulty.EPIC
        assert QuestDifficulty.parse(1) == QuestDifficulty.EASY

    def test_parse_unknown_difficulty(self):
        with pytest.raises(ValueError):
            QuestDifficulty.parse("impossible")


class TestXPCurve:
    """Test XP thresholds."""

    def test_xp_to_next_level(self):
        assert xp_to_next_level(1) == 100
        assert xp_to_next_level(2) == 282
        assert xp_to_next_level(4) == 800

    def test_xp_for_level(self):
        assert xp_for_level(1) == 0
        assert xp_for_level(3) == 100 + 282


class TestApplyXP:
    """Test XP application and level-ups."""

    def test_gain_without_level_up(self):
        agent = fresh_agent()
        event = apply_xp(agent, 40)
        assert agent.xp == 40
        assert agent.level == 1
        assert not event.leveled_up

    def test_single_level_up_carries_remainder(self):
        agent = fresh_agent()
        event = apply_xp(agent, 120)
        assert agent.level == 2
        assert agent.xp == 20
        assert agent.xp_to_level == 282
        assert event.leveled_up
        assert event.direction == "up"

    def test_multiple_level_ups(self):
        """Enough XP climbs several levels at once."""
        agent = fresh_agent()
        apply_xp(agent, 100 + 282)
        assert agent.level == 3
        assert agent.xp == 0

    def test_tier_follows_level(self):
        agent = fresh_agent(level=5)
        event = apply_xp(agent, xp_to_next_level(5))
        assert agent.level == 6
        assert agent.tier == TrustTier.JOURNEYMAN
        assert event.old_tier == TrustTier.APPRENTICE
        assert event.new_tier == TrustTier.JOURNEYMAN

    def test_penalty_floors_at_zero(self):
        """Losing XP never goes negative or costs a level."""
        agent = fresh_agent(level=3)
        apply_xp(agent, -500)
        assert agent.xp == 0
        assert agent.level == 3

    def test_level_capped_at_twenty(self):
        agent = fresh_agent(level=20)
        apply_xp(agent, 1_000_000)
        assert agent.level == 20
        assert agent.tier == TrustTier.GRANDMASTER


class TestInitialization:
    """Test agent setup helpers."""

    def test_initialize_at_level(self):
        agent = Agent(id="x", name="veteran", status=AgentStatus.RETIRED)
        initialize_agent_at_level(agent, 12)
        assert agent.level == 12
        assert agent.tier == TrustTier.EXPERT
        assert agent.xp == 0
        assert agent.xp_to_level == xp_to_next_level(12)
        assert agent.status == AgentStatus.IDLE

    def test_initialize_skills_at_novice(self):
        agent = fresh_agent()
        initialize_skill_proficiencies(agent, [SkillTag.ANALYSIS, SkillTag.TRAINING])
        assert agent.skill_tags() == [SkillTag.ANALYSIS, SkillTag.TRAINING]
        for proficiency in agent.skill_proficiencies.values():
            assert proficiency.level == ProficiencyLevel.NOVICE
            assert proficiency.quests_used == 0
