"""Preset rosters and configs."""

from ..state.schema import AgentConfig, SkillTag
from .config import AgentSpec, GuildSpec, RosterConfig, SeedConfig, SeedMode


# Bootstrap mentors sit at Journeyman so they qualify as mentors
MENTOR_LEVEL = 8
MENTOR_NAME_PATTERN = "trainer-npc-{n}"


def dev_team_roster(config: AgentConfig) -> RosterConfig:
    """Juniors, mids, a senior, and a mentor."""
    return RosterConfig(
        name="dev-team",
        description="Standard development team with juniors, seniors, and a mentor",
        agents=[
            AgentSpec(
                name_pattern="junior-dev-{n}",
                count=3,
                level=3,
                skills=[SkillTag.CODE_GENERATION],
                config=config,
            ),
            AgentSpec(
                name_pattern="mid-dev-{n}",
                count=2,
                level=7,
                skills=[SkillTag.CODE_GENERATION, SkillTag.CODE_REVIEW],
                config=config,
            ),
            AgentSpec(
                name_pattern="senior-dev-{n}",
                count=1,
                level=12,
                skills=[SkillTag.CODE_GENERATION, SkillTag.CODE_REVIEW, SkillTag.PLANNING],
                config=config,
            ),
            AgentSpec(
                name_pattern="mentor-{n}",
                count=1,
                level=MENTOR_LEVEL,
                skills=[SkillTag.TRAINING, SkillTag.CODE_REVIEW],
                config=config,
            ),
        ],
    )


def bootstrap_mentor_roster(count: int, config: AgentConfig) -> RosterConfig:
    """NPC mentors spawned when an arena has nobody to train under."""
    return RosterConfig(
        name="bootstrap-mentors",
        description="NPC mentors for training arena bootstrap",
        agents=[
            AgentSpec(
                name_pattern=MENTOR_NAME_PATTERN,
                count=count,
                level=MENTOR_LEVEL,
                skills=[SkillTag.TRAINING],
                config=config,
                is_npc=True,
            ),
        ],
    )


def e2e_test_roster(config: AgentConfig) -> RosterConfig:
    """
    Fixed data for end-to-end tests.

    Covers every tier, two guilds, and one unaffiliated freelancer.
    """
    return RosterConfig(
        name="e2e-test-roster",
        description="Consistent test data for end-to-end tests",
        guilds=[
            GuildSpec(
                id="guild-alpha",
                name="Alpha Guild",
                description="Primary test guild for code generation and analysis",
                culture="Methodical and thorough",
                min_level=1,
            ),
            GuildSpec(
                id="guild-beta",
                name="Beta Guild",
                description="Secondary test guild for research and review",
                culture="Creative and exploratory",
                min_level=6,
            ),
        ],
        agents=[
            # Apprentice (1-5)
            AgentSpec(
                name_pattern="apprentice-{n}",
                count=3,
                level=3,
                skills=[SkillTag.ANALYSIS],
                config=config,
                guild_id="guild-alpha",
            ),
            # Journeyman (6-10)
            AgentSpec(
                name_pattern="journeyman-{n}",
                count=2,
                level=8,
                skills=[SkillTag.CODE_GENERATION, SkillTag.DATA_TRANSFORMATION],
                config=config,
                guild_id="guild-alpha",
            ),
            # Expert (11-15)
            AgentSpec(
                name_pattern="expert-{n}",
                count=2,
                level=12,
                skills=[SkillTag.CODE_GENERATION, SkillTag.CODE_REVIEW, SkillTag.PLANNING],
                config=config,
                guild_id="guild-beta",
            ),
            # Master (16-18)
            AgentSpec(
                name_pattern="master-{n}",
                count=1,
                level=17,
                skills=[SkillTag.PLANNING, SkillTag.TRAINING, SkillTag.CODE_REVIEW],
                config=config,
                guild_id="guild-beta",
            ),
            # Grandmaster (19-20), no guild
            AgentSpec(
                name_pattern="grandmaster-{n}",
                count=1,
                level=20,
                skills=[
                    SkillTag.PLANNING,
                    SkillTag.TRAINING,
                    SkillTag.CODE_REVIEW,
                    SkillTag.CODE_GENERATION,
                ],
                config=config,
            ),
            # Freelancer for guild recruitment
            AgentSpec(
                name_pattern="freelancer-{n}",
                count=1,
                level=5,
                skills=[SkillTag.ANALYSIS, SkillTag.RESEARCH],
                config=config,
            ),
        ],
    )


def new_e2e_test_config(config: AgentConfig) -> SeedConfig:
    """Tiered roster over e2e_test_roster, safe to re-run."""
    return SeedConfig(
        mode=SeedMode.TIERED_ROSTER,
        dry_run=False,
        idempotent=True,
        roster=e2e_test_roster(config),
    )
