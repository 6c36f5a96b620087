"""
Environment seeding for guildseed.

Two modes:
- Training arena: agents start at level 1 and level up on judged quests
- Tiered roster: agents are created directly at their target levels
"""

from .arena import ArenaSeeder
from .config import (
    AgentSpec,
    ArenaConfig,
    GuildSpec,
    LevelDistribution,
    RosterConfig,
    SeedConfig,
    SeedMode,
    load_config,
)
from .context import RunContext
from .errors import (
    ConfigurationError,
    CreationError,
    MentorBootstrapError,
    ResourceLoadError,
    RoundError,
    SeedCancelledError,
    SeedingError,
    TemplateLoadError,
    ZeroWeightRubricError,
)
from .executor import LLMQuestExecutor, QuestExecutor, SimulatedExecutor
from .judge import (
    ArenaJudge,
    CriterionScorer,
    FixedScorer,
    JudgeCriterion,
    JudgeResult,
    JudgeRubric,
    LLMCriterionScorer,
    SimulatedScorer,
    Verdict,
)
from .presets import (
    bootstrap_mentor_roster,
    dev_team_roster,
    e2e_test_roster,
    new_e2e_test_config,
)
from .progress import (
    CallbackProgressSink,
    LoggingProgressSink,
    NullProgressSink,
    ProgressEvent,
    ProgressSink,
    RichProgressSink,
)
from .result import AgentSummary, SeedResult, render_result
from .roster import RosterSeeder
from .seeder import Seeder
from .templates import (
    BundledTemplateSource,
    FileTemplateSource,
    QuestTemplate,
    QuestTemplateIndex,
    TemplateSource,
    default_code_templates,
    load_quest_templates,
    template_source_for,
)

__all__ = [
    # Seeders
    "Seeder",
    "ArenaSeeder",
    "RosterSeeder",
    "RunContext",
    # Config
    "AgentSpec",
    "ArenaConfig",
    "GuildSpec",
    "LevelDistribution",
    "RosterConfig",
    "SeedConfig",
    "SeedMode",
    "load_config",
    # Presets
    "bootstrap_mentor_roster",
    "dev_team_roster",
    "e2e_test_roster",
    "new_e2e_test_config",
    # Results
    "AgentSummary",
    "SeedResult",
    "render_result",
    # Templates
    "BundledTemplateSource",
    "FileTemplateSource",
    "QuestTemplate",
    "QuestTemplateIndex",
    "TemplateSource",
    "default_code_templates",
    "load_quest_templates",
    "template_source_for",
    # Judging and execution
    "ArenaJudge",
    "CriterionScorer",
    "FixedScorer",
    "JudgeCriterion",
    "JudgeResult",
    "JudgeRubric",
    "LLMCriterionScorer",
    "SimulatedScorer",
    "Verdict",
    "LLMQuestExecutor",
    "QuestExecutor",
    "SimulatedExecutor",
    # Progress
    "CallbackProgressSink",
    "LoggingProgressSink",
    "NullProgressSink",
    "ProgressEvent",
    "ProgressSink",
    "RichProgressSink",
    # Errors
    "ConfigurationError",
    "CreationError",
    "MentorBootstrapError",
    "ResourceLoadError",
    "RoundError",
    "SeedCancelledError",
    "SeedingError",
    "TemplateLoadError",
    "ZeroWeightRubricError",
]
