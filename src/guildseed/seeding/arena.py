"""
Training arena: grows agents from level 1 by running judged quests.

Phases, in order:
    1. Load quest templates                 (fatal on failure)
    2. Create or reuse level-1 trainees      (fatal on failure)
    3. Ensure mentors, spawning NPCs if none (never fatal)
    4. Training rounds until every trainee reaches the target level
       or the quest budget runs out          (per-round failures skipped)

The arena never changes an agent's level itself. The quest board applies
each verdict; the arena re-reads agents from the store to see the result.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Callable

from ..state.progression import initialize_agent_at_level, tier_from_level
from ..state.schema import Agent, AgentConfig, AgentStatus, SkillTag, TrustTier
from ..state.store import AgentStore, extract_instance, generate_instance
from .config import ArenaConfig, SeedMode
from .context import RunContext
from .errors import (
    CreationError,
    MentorBootstrapError,
    RoundError,
    SeedCancelledError,
    SeedingError,
)
from .executor import QuestExecutor, SimulatedExecutor
from .judge import ArenaJudge
from .presets import bootstrap_mentor_roster
from .progress import (
    PHASE_AGENTS,
    PHASE_TRAINING,
    ProgressEvent,
    ProgressSink,
    as_sink,
    emit,
)
from .result import AgentSummary, SeedResult
from .roster import RosterSeeder, find_agent_by_name
from .templates import QuestTemplate, QuestTemplateIndex, load_quest_templates, template_source_for

if TYPE_CHECKING:
    from ..systems.questboard import QuestBoard, SubmissionResult


TRAINEE_NAME_FORMAT = "trainee-{}"

# Round steps after which the agent holds the quest
CLAIMED_STEPS = ("start", "execute", "judge", "submit")


class ArenaSeeder:
    """Runs progressive training sessions against a quest board."""

    def __init__(
        self,
        board: "QuestBoard",
        store: AgentStore,
        config: ArenaConfig,
        judge: ArenaJudge | None = None,
        executor: QuestExecutor | None = None,
        logger: logging.Logger | None = None,
        progress: ProgressSink | Callable[[ProgressEvent], None] | None = None,
        rng: random.Random | None = None,
    ):
        self.board = board
        self.store = store
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.judge = judge or ArenaJudge(config.judge_config, logger=self.logger)
        self.executor = executor or SimulatedExecutor()
        self.progress = as_sink(progress)
        self.rng = rng

        self.rubric = config.rubric()
        self.templates: QuestTemplateIndex | None = None

    def seed(
        self,
        ctx: RunContext | None = None,
        dry_run: bool = False,
        idempotent: bool = False,
    ) -> SeedResult:
        """
        Run all arena phases.

        Fatal errors are re-raised with the partial result attached.
        A dry run stops after planning the trainees.
        """
        ctx = ctx or RunContext()
        result = SeedResult(mode=SeedMode.TRAINING_ARENA.value)

        try:
            self.load_templates()
            agents = self.create_initial_agents(ctx, dry_run, idempotent, result)
            if dry_run:
                return result

            if self.config.use_mentored_training:
                try:
                    self.ensure_mentors_available(ctx, result)
                except MentorBootstrapError as e:
                    self.logger.warning(f"Failed to ensure mentors: {e}")

            self.run_training_rounds(ctx, agents, result)
        except SeedingError as e:
            result.fail(str(e))
            e.result = result
            raise

        return result

    # -------------------------------------------------------------------------
    # Phase 1: templates
    # -------------------------------------------------------------------------

    def load_templates(self) -> QuestTemplateIndex:
        source = template_source_for(self.config.quest_domain, self.config.quest_file)
        self.templates = load_quest_templates(source)
        self.logger.info(f"Loaded {len(self.templates)} quest templates from {source.describe()}")
        return self.templates

    # -------------------------------------------------------------------------
    # Phase 2: trainees
    # -------------------------------------------------------------------------

    def create_initial_agents(
        self,
        ctx: RunContext,
        dry_run: bool,
        idempotent: bool,
        result: SeedResult,
    ) -> list[Agent]:
        agents: list[Agent] = []
        total = len(self.config.agent_configs)

        for i, agent_config in enumerate(self.config.agent_configs, start=1):
            ctx.check()
            name = TRAINEE_NAME_FORMAT.format(i)
            emit(
                self.progress,
                ProgressEvent.make(
                    PHASE_AGENTS, i, total,
                    f"Creating trainee: {name}",
                    agent_name=name,
                ),
                self.logger,
            )

            if idempotent and not dry_run:
                existing = find_agent_by_name(self.store, name, self.logger)
                if existing is not None:
                    self.logger.debug(f"Skipping existing agent {name}")
                    result.agents_skipped += 1
                    result.add_agent(existing)
                    agents.append(existing)
                    continue

            if dry_run:
                self.logger.info(
                    f"Dry run: would create trainee {name} ({agent_config.model or 'default model'})"
                )
                result.agents_created += 1
                continue

            agent = self.create_trainee(name, agent_config)
            agents.append(agent)
            result.agents_created += 1
            result.add_agent(agent)
            self.logger.info(f"Created trainee {name} ({agent.id})")

        return agents

    def create_trainee(self, name: str, agent_config: AgentConfig) -> Agent:
        """A level-1 agent with no skills yet. Raises CreationError."""
        instance = generate_instance()
        agent = Agent(
            id=self.store.config().agent_entity_id(instance),
            name=name,
            config=agent_config.model_copy(deep=True),
        )
        initialize_agent_at_level(agent, 1)
        agent.skill_proficiencies = {}

        try:
            self.store.put_agent(instance, agent)
        except Exception as e:
            raise CreationError(name, e) from e
        return agent

    # -------------------------------------------------------------------------
    # Phase 3: mentors
    # -------------------------------------------------------------------------

    def find_available_mentors(self) -> list[Agent]:
        """Idle Journeyman-or-better agents who can train others."""
        return [
            agent
            for agent in self.store.list_all_agents()
            if agent.has_skill(SkillTag.TRAINING)
            and tier_from_level(agent.level) >= TrustTier.JOURNEYMAN
            and agent.status == AgentStatus.IDLE
        ]

    def ensure_mentors_available(self, ctx: RunContext, result: SeedResult) -> None:
        """Spawn NPC mentors through a roster run when nobody qualifies."""
        try:
            mentors = self.find_available_mentors()
        except Exception as e:
            raise MentorBootstrapError(f"failed to look up mentors: {e}") from e

        if mentors:
            self.logger.info(f"Found {len(mentors)} available mentors")
            return

        count = self.config.bootstrap_mentors
        if count <= 0:
            self.logger.warning("No mentors available and bootstrap disabled")
            return

        self.logger.info(f"Spawning {count} bootstrap mentor NPCs")
        roster = RosterSeeder(
            self.store,
            bootstrap_mentor_roster(count, self.config.judge_config),
            logger=self.logger,
        )
        try:
            roster_result = roster.seed(ctx, dry_run=False, idempotent=True)
        except SeedCancelledError:
            raise
        except SeedingError as e:
            raise MentorBootstrapError(f"failed to spawn NPC mentors: {e}") from e

        result.npcs_spawned += roster_result.npcs_spawned
        result.errors.extend(roster_result.errors)

    # -------------------------------------------------------------------------
    # Phase 4: training
    # -------------------------------------------------------------------------

    def run_training_rounds(
        self,
        ctx: RunContext,
        agents: list[Agent],
        result: SeedResult,
    ) -> None:
        """
        Train until convergence or until the quest budget is spent.

        Every attempted round uses budget, failed ones included.
        """
        quests_run = 0
        max_quests = self.config.max_training_quests * len(agents)

        while quests_run < max_quests:
            ctx.check()
            agents = self.refresh_agents(agents)

            if self.all_agents_at_target(agents):
                self.logger.info("All agents reached target level")
                break

            template = self.templates.select_for_level(self.avg_agent_level(agents), self.rng)
            if template is None:
                self.logger.warning("No suitable quest template found")
                break

            emit(
                self.progress,
                ProgressEvent.make(
                    PHASE_TRAINING, quests_run + 1, max_quests,
                    f"Running training quest: {template.title}",
                    quest_title=template.title,
                ),
                self.logger,
            )

            for agent in agents:
                if self.agent_at_target(agent):
                    continue
                ctx.check()

                try:
                    self.run_training_quest(agent, template)
                except RoundError as e:
                    self.logger.warning(f"Training quest failed: {e}")
                else:
                    result.quests_completed += 1

                quests_run += 1
                if quests_run >= max_quests:
                    break

        result.agents = [AgentSummary.from_agent(a) for a in self.refresh_agents(agents)]

    def run_training_quest(self, agent: Agent, template: QuestTemplate) -> "SubmissionResult":
        """One full board lifecycle for one agent. Raises RoundError."""
        quest = template.to_quest()
        if self.config.xp_multiplier > 0:
            quest.base_xp = int(quest.base_xp * self.config.xp_multiplier)

        step = "post"
        try:
            posted = self.board.post_quest(quest)
            step = "claim"
            self.board.claim_quest(posted.id, agent.id)
            step = "start"
            self.board.start_quest(posted.id)
            step = "execute"
            output = self.executor.execute(agent, template)
            step = "judge"
            verdict = self.judge.review(posted, output, self.rubric)
            step = "submit"
            return self.board.submit_result(posted.id, output, verdict)
        except Exception as e:
            if step == "claim":
                self.withdraw_quest(posted.id, e)
            elif step in CLAIMED_STEPS:
                self.release_quest(posted.id, agent, e)
            raise RoundError(agent.name, template.title, step, e) from e

    def release_quest(self, quest_id: str, agent: Agent, cause: Exception) -> None:
        """Fail a claimed quest so its agent is free for the next round."""
        try:
            self.board.fail_quest(quest_id, str(cause))
        except Exception as e:
            self.logger.warning(f"Could not release quest {quest_id} for {agent.name}: {e}")

    def withdraw_quest(self, quest_id: str, cause: Exception) -> None:
        """Cancel a posted quest that could not be claimed."""
        try:
            self.board.cancel_quest(quest_id, str(cause))
        except Exception as e:
            self.logger.warning(f"Could not cancel quest {quest_id}: {e}")

    def refresh_agents(self, agents: list[Agent]) -> list[Agent]:
        """Latest stored state of each agent, or the copy in hand if unreadable."""
        refreshed = []
        for agent in agents:
            try:
                refreshed.append(self.store.get_agent(extract_instance(agent.id)))
            except Exception as e:
                self.logger.debug(f"Keeping cached state for {agent.name}: {e}")
                refreshed.append(agent)
        return refreshed

    def all_agents_at_target(self, agents: list[Agent]) -> bool:
        return all(self.agent_at_target(agent) for agent in agents)

    def agent_at_target(self, agent: Agent) -> bool:
        return agent.level >= self.config.target_distribution.min_level

    @staticmethod
    def avg_agent_level(agents: list[Agent]) -> int:
        """Integer mean level, 1 for an empty list."""
        if not agents:
            return 1
        return sum(agent.level for agent in agents) // len(agents)
