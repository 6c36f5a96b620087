"""
Roster seeder: creates agents directly at their target levels.

Guilds are created first since agent specs may reference them. A failed
guild write ends the run; a failed agent write is recorded and the
remaining agents are still created.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from ..state.progression import initialize_agent_at_level, initialize_skill_proficiencies
from ..state.schema import Agent, Guild, GuildMember, GuildRank, GuildStatus
from ..state.store import AgentStore, generate_instance
from .config import NAME_PLACEHOLDER, AgentSpec, GuildSpec, RosterConfig, SeedMode
from .context import RunContext
from .errors import CreationError, SeedingError
from .progress import (
    PHASE_AGENTS,
    PHASE_GUILDS,
    ProgressEvent,
    ProgressSink,
    as_sink,
    emit,
)
from .result import SeedResult


# Guild defaults for newly founded guilds
GUILD_MAX_MEMBERS = 20
GUILD_STARTING_REPUTATION = 0.5


def expand_name_pattern(pattern: str, n: int) -> str:
    """Replace every "{n}" in pattern with n."""
    return pattern.replace(NAME_PLACEHOLDER, str(n))


def find_agent_by_name(store: AgentStore, name: str, log: logging.Logger) -> Agent | None:
    """
    Linear scan for an agent with exactly this name.

    A listing failure counts as "not found" so seeding can go on creating.
    """
    try:
        agents = store.list_all_agents()
    except Exception as e:
        log.warning(f"Could not list agents while looking up {name!r}: {e}")
        return None

    for agent in agents:
        if agent.name == name:
            return agent
    return None


class RosterSeeder:
    """Expands a RosterConfig into stored guilds and agents."""

    def __init__(
        self,
        store: AgentStore,
        config: RosterConfig,
        logger: logging.Logger | None = None,
        progress: ProgressSink | Callable[[ProgressEvent], None] | None = None,
    ):
        self.store = store
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.progress = as_sink(progress)

    def seed(
        self,
        ctx: RunContext | None = None,
        dry_run: bool = False,
        idempotent: bool = False,
    ) -> SeedResult:
        """
        Create the roster's guilds, then its agents.

        Fatal errors are re-raised with the partial result attached.
        """
        ctx = ctx or RunContext()
        result = SeedResult(mode=SeedMode.TIERED_ROSTER.value)

        try:
            self.seed_guilds(ctx, dry_run, result)
            self.seed_agents(ctx, dry_run, idempotent, result)
        except SeedingError as e:
            result.fail(str(e))
            e.result = result
            raise

        return result

    # -------------------------------------------------------------------------
    # Guilds
    # -------------------------------------------------------------------------

    def seed_guilds(self, ctx: RunContext, dry_run: bool, result: SeedResult) -> None:
        total = len(self.config.guilds)
        for i, spec in enumerate(self.config.guilds, start=1):
            ctx.check()
            emit(
                self.progress,
                ProgressEvent.make(PHASE_GUILDS, i, total, f"Creating guild: {spec.name}"),
                self.logger,
            )

            if dry_run:
                self.logger.info(f"Dry run: would create guild {spec.id} ({spec.name})")
                result.guilds_created += 1
                continue

            guild = self.build_guild(spec)
            try:
                self.store.put_guild(spec.id, guild)
            except Exception as e:
                err = CreationError(f"guild {spec.id}", e)
                self.logger.warning(str(err))
                result.errors.append(str(err))
                continue

            self.logger.info(f"Created guild {spec.id} ({spec.name})")
            result.guilds_created += 1

    @staticmethod
    def build_guild(spec: GuildSpec) -> Guild:
        now = datetime.now()
        return Guild(
            id=spec.id,
            name=spec.name,
            description=spec.description,
            culture=spec.culture,
            status=GuildStatus.ACTIVE,
            members=[],
            min_level=spec.min_level,
            max_members=GUILD_MAX_MEMBERS,
            reputation=GUILD_STARTING_REPUTATION,
            founded=now,
            created_at=now,
        )

    # -------------------------------------------------------------------------
    # Agents
    # -------------------------------------------------------------------------

    def seed_agents(
        self,
        ctx: RunContext,
        dry_run: bool,
        idempotent: bool,
        result: SeedResult,
    ) -> None:
        total = self.config.total_agents()
        agent_num = 0

        for spec in self.config.agents:
            for i in range(1, spec.count + 1):
                ctx.check()
                agent_num += 1
                name = expand_name_pattern(spec.name_pattern, i)

                emit(
                    self.progress,
                    ProgressEvent.make(
                        PHASE_AGENTS, agent_num, total,
                        f"Creating agent: {name}",
                        agent_name=name,
                    ),
                    self.logger,
                )

                if idempotent and not dry_run:
                    existing = find_agent_by_name(self.store, name, self.logger)
                    if existing is not None:
                        self.logger.debug(f"Skipping existing agent {name} ({existing.id})")
                        result.agents_skipped += 1
                        result.add_agent(existing)
                        continue

                if dry_run:
                    self.logger.info(
                        f"Dry run: would create agent {name} at level {spec.level}"
                        f" (npc={spec.is_npc})"
                    )
                    result.agents_created += 1
                    if spec.is_npc:
                        result.npcs_spawned += 1
                    continue

                try:
                    agent = self.create_agent(name, spec)
                except CreationError as e:
                    self.logger.warning(str(e))
                    result.errors.append(str(e))
                    continue

                result.agents_created += 1
                if spec.is_npc:
                    result.npcs_spawned += 1
                result.add_agent(agent)

                self.logger.info(
                    f"Created agent {name} ({agent.id}) at level {agent.level}"
                    f" [{agent.tier.display_name}]"
                )

    def create_agent(self, name: str, spec: AgentSpec) -> Agent:
        """Build and store one agent, then enroll it. Raises CreationError."""
        instance = generate_instance()
        agent = Agent(
            id=self.store.config().agent_entity_id(instance),
            name=name,
            config=spec.config.model_copy(deep=True),
            is_npc=spec.is_npc,
        )
        initialize_agent_at_level(agent, spec.level)
        initialize_skill_proficiencies(agent, spec.skills)

        if spec.guild_id:
            agent.join_guild(spec.guild_id)

        try:
            self.store.put_agent(instance, agent)
        except Exception as e:
            raise CreationError(name, e) from e

        if spec.guild_id:
            try:
                self.add_agent_to_guild(agent, spec.guild_id)
            except Exception as e:
                # Membership is best-effort; the agent is still created
                self.logger.warning(f"Failed to add {name} to guild {spec.guild_id}: {e}")

        return agent

    def add_agent_to_guild(self, agent: Agent, guild_id: str) -> None:
        """Append the agent to the guild's members unless already there."""

        def enroll(guild: Guild) -> None:
            if guild.has_member(agent.id):
                return
            guild.members.append(GuildMember(
                agent_id=agent.id,
                rank=GuildRank.INITIATE,
                joined_at=datetime.now(),
                contribution=0,
            ))

        self.store.update_guild(guild_id, enroll)
