"""
Seeding configuration.

Two modes share one top-level SeedConfig:
- training_arena: agents start at level 1 and train on judged quests
- tiered_roster: agents are created directly at their target levels

Models accept anything structurally valid; validate_config() enforces the
semantic rules and raises ConfigurationError before any side effect.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..state.progression import MAX_LEVEL, MIN_LEVEL
from ..state.schema import AgentConfig, SkillTag
from .errors import ConfigurationError
from .judge import JudgeCriterion, JudgeRubric

logger = logging.getLogger(__name__)


NAME_PLACEHOLDER = "{n}"


class SeedMode(str, Enum):
    TRAINING_ARENA = "training_arena"
    TIERED_ROSTER = "tiered_roster"


# -----------------------------------------------------------------------------
# Training arena
# -----------------------------------------------------------------------------

class LevelDistribution(BaseModel):
    """Desired final levels. Training converges on min_level."""
    min_level: int = 1
    max_level: int = 0  # 0 = no cap

    # Per-tier targets, recorded for reporting
    apprentice_count: int = 0     # Levels 1-5
    journeyman_count: int = 0     # Levels 6-10
    expert_count: int = 0         # Levels 11-15
    master_count: int = 0         # Levels 16-18
    grandmaster_count: int = 0    # Levels 19-20

    def validate_config(self) -> None:
        if not MIN_LEVEL <= self.min_level <= MAX_LEVEL:
            raise ConfigurationError("min_level must be between 1 and 20")
        if self.max_level and self.max_level < self.min_level:
            raise ConfigurationError("max_level must not be below min_level")


class ArenaConfig(BaseModel):
    agent_configs: list[AgentConfig] = Field(default_factory=list)
    target_distribution: LevelDistribution = Field(default_factory=LevelDistribution)

    # Caps total quests per agent
    max_training_quests: int = 10
    xp_multiplier: float = 1.0

    quest_domain: str = ""
    quest_file: str | None = None  # Overrides quest_domain

    judge_config: AgentConfig = Field(default_factory=AgentConfig)
    judge_rubric: list[JudgeCriterion] | None = None  # None = baseline judging

    bootstrap_mentors: int = 0
    use_mentored_training: bool = False
    trainees_per_mentor: int = 3

    def validate_config(self) -> None:
        if not self.agent_configs:
            raise ConfigurationError("at least one agent config required")
        if self.max_training_quests <= 0:
            raise ConfigurationError("max_training_quests must be positive")
        if not self.quest_domain and not self.quest_file:
            raise ConfigurationError("quest_domain or quest_file required")
        self.target_distribution.validate_config()
        if self.use_mentored_training and self.trainees_per_mentor <= 0:
            raise ConfigurationError("trainees_per_mentor must be positive")
        if self.judge_rubric is not None:
            # Raises ZeroWeightRubricError for an empty rubric
            JudgeRubric(self.judge_rubric)

    def rubric(self) -> JudgeRubric | None:
        if self.judge_rubric is None:
            return None
        return JudgeRubric(self.judge_rubric)


# -----------------------------------------------------------------------------
# Tiered roster
# -----------------------------------------------------------------------------

class AgentSpec(BaseModel):
    """
    Template for a batch of agents.

    name_pattern uses "{n}" for the 1-based index: "analyst-{n}" with
    count 3 yields analyst-1, analyst-2, analyst-3.
    """
    name_pattern: str = ""
    count: int = 1
    level: int = 1
    skills: list[SkillTag] = Field(default_factory=list)
    config: AgentConfig = Field(default_factory=AgentConfig)
    is_npc: bool = False
    guild_id: str | None = None

    def validate_config(self) -> None:
        if not self.name_pattern:
            raise ConfigurationError("name_pattern required")
        if self.count <= 0:
            raise ConfigurationError("count must be positive")
        if not MIN_LEVEL <= self.level <= MAX_LEVEL:
            raise ConfigurationError("level must be between 1 and 20")


class GuildSpec(BaseModel):
    id: str
    name: str
    description: str = ""
    culture: str = ""
    min_level: int = 1


class RosterConfig(BaseModel):
    name: str = ""
    description: str = ""
    agents: list[AgentSpec] = Field(default_factory=list)
    guilds: list[GuildSpec] = Field(default_factory=list)

    def validate_config(self) -> None:
        if not self.name:
            raise ConfigurationError("roster name required")
        if not self.agents:
            raise ConfigurationError("at least one agent spec required")
        for spec in self.agents:
            spec.validate_config()

    def total_agents(self) -> int:
        return sum(spec.count for spec in self.agents)


# -----------------------------------------------------------------------------
# Top level
# -----------------------------------------------------------------------------

class SeedConfig(BaseModel):
    # Unknown modes are kept as raw strings so validate_config can report them
    mode: SeedMode | str = SeedMode.TRAINING_ARENA
    dry_run: bool = False       # Log actions without touching storage
    idempotent: bool = False    # Skip existing agents by name
    arena: ArenaConfig | None = None
    roster: RosterConfig | None = None

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> Any:
        try:
            return SeedMode(value)
        except ValueError:
            return value

    @property
    def mode_name(self) -> str:
        return self.mode.value if isinstance(self.mode, SeedMode) else str(self.mode)

    def validate_config(self) -> None:
        if self.mode == SeedMode.TRAINING_ARENA:
            if self.arena is None:
                raise ConfigurationError("arena config required for training_arena mode")
            self.arena.validate_config()
        elif self.mode == SeedMode.TIERED_ROSTER:
            if self.roster is None:
                raise ConfigurationError("roster config required for tiered_roster mode")
            self.roster.validate_config()
        else:
            raise ConfigurationError("invalid seeding mode")


def load_config(path: Path | str, validate: bool = True) -> SeedConfig:
    """
    Load a SeedConfig from a JSON or YAML file.

    Any read, decode, or structural error surfaces as ConfigurationError.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"failed to read config {path}: {e}") from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"failed to parse config {path.name}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"config {path.name} must contain an object")

    try:
        config = SeedConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"invalid config {path.name}: {e}") from e

    if validate:
        config.validate_config()
    logger.debug(f"Loaded {config.mode_name} config from {path}")
    return config
