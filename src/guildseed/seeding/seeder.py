"""
Top-level seeder: validates a SeedConfig and runs the mode's sub-seeder.

Usage:
    seeder = Seeder(board, store, config)
    result = seeder.seed()

    # With progress reporting
    result = seeder.seed_with_progress(RichProgressSink())
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

from ..state.store import AgentStore
from .arena import ArenaSeeder
from .config import SeedConfig, SeedMode
from .context import RunContext
from .errors import ConfigurationError, SeedingError
from .executor import QuestExecutor
from .judge import ArenaJudge
from .progress import ProgressEvent, ProgressSink, as_sink
from .result import SeedResult
from .roster import RosterSeeder

if TYPE_CHECKING:
    from ..systems.questboard import QuestBoard


class Seeder:
    """
    Entry point for environment seeding.

    Configuration is validated at construction, before anything is
    touched. The seeder's logger is shared with its sub-seeder.
    """

    def __init__(
        self,
        board: "QuestBoard",
        store: AgentStore,
        config: SeedConfig,
        logger: logging.Logger | None = None,
        judge: ArenaJudge | None = None,
        executor: QuestExecutor | None = None,
    ):
        config.validate_config()

        self.board = board
        self.store = store
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

        self.arena: ArenaSeeder | None = None
        self.roster: RosterSeeder | None = None

        if config.mode == SeedMode.TRAINING_ARENA:
            self.arena = ArenaSeeder(
                board,
                store,
                config.arena,
                judge=judge,
                executor=executor,
                logger=self.logger,
            )
        elif config.mode == SeedMode.TIERED_ROSTER:
            self.roster = RosterSeeder(store, config.roster, logger=self.logger)

    @property
    def sub_seeder(self) -> ArenaSeeder | RosterSeeder:
        sub = self.arena or self.roster
        if sub is None:
            raise ConfigurationError("invalid seeding mode")
        return sub

    def seed(self, ctx: RunContext | None = None) -> SeedResult:
        """
        Run the configured mode.

        On a fatal error the partial result (with duration and mode set)
        stays attached to the raised exception.
        """
        ctx = ctx or RunContext()
        mode = self.config.mode_name
        start = time.monotonic()

        self.logger.info(
            f"Starting seeding: mode={mode} dry_run={self.config.dry_run} "
            f"idempotent={self.config.idempotent}"
        )

        try:
            result = self.sub_seeder.seed(ctx, self.config.dry_run, self.config.idempotent)
        except SeedingError as e:
            duration = time.monotonic() - start
            if e.result is not None:
                e.result.mode = mode
                e.result.duration = duration
            self.logger.error(f"Seeding failed: mode={mode} error={e} duration={duration:.2f}s")
            raise

        result.mode = mode
        result.duration = time.monotonic() - start

        self.logger.info(
            f"Seeding completed: mode={mode} created={result.agents_created} "
            f"skipped={result.agents_skipped} guilds={result.guilds_created} "
            f"npcs={result.npcs_spawned} quests={result.quests_completed} "
            f"duration={result.duration:.2f}s"
        )
        return result

    def seed_with_progress(
        self,
        progress: ProgressSink | Callable[[ProgressEvent], None],
        ctx: RunContext | None = None,
    ) -> SeedResult:
        """Seed, reporting progress to a sink or plain callback."""
        self.sub_seeder.progress = as_sink(progress)
        return self.seed(ctx)
