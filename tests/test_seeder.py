"""Tests for the top-level seeder and result rendering."""

import io

import pytest
from rich.console import Console

from guildseed.seeding import (
    ArenaConfig,
    ArenaSeeder,
    ConfigurationError,
    LevelDistribution,
    RosterSeeder,
    RunContext,
    SeedCancelledError,
    SeedConfig,
    SeedMode,
    Seeder,
    SeedResult,
    TemplateLoadError,
    new_e2e_test_config,
    render_result,
)
from guildseed.seeding.result import AgentSummary
from guildseed.state import Agent, SkillTag, TrustTier


class TestSeederConstruction:
    """Test validation and mode dispatch."""

    def test_arena_mode(self, board, memory_store, arena_config):
        seeder = Seeder(board, memory_store, SeedConfig(arena=arena_config))
        assert isinstance(seeder.sub_seeder, ArenaSeeder)
        assert seeder.roster is None

    def test_roster_mode(self, board, memory_store, roster_config):
        config = SeedConfig(mode=SeedMode.TIERED_ROSTER, roster=roster_config)
        seeder = Seeder(board, memory_store, config)
        assert isinstance(seeder.sub_seeder, RosterSeeder)

    def test_logger_shared(self, board, memory_store, arena_config):
        seeder = Seeder(board, memory_store, SeedConfig(arena=arena_config))
        assert seeder.arena.logger is seeder.logger

    @pytest.mark.parametrize("config,message", [
        (SeedConfig(), "arena config required"),
        (SeedConfig(mode="tiered_roster"), "roster config required"),
        (SeedConfig(mode="chaos"), "invalid seeding mode"),
    ])
    def test_invalid_config_rejected(self, board, memory_store, config, message):
        with pytest.raises(ConfigurationError, match=message):
            Seeder(board, memory_store, config)

    def test_nothing_touched_on_invalid_config(self, board, memory_store, agent_config):
        config = SeedConfig(arena=ArenaConfig(agent_configs=[agent_config]))
        with pytest.raises(ConfigurationError):
            Seeder(board, memory_store, config)
        assert memory_store.list_all_agents() == []


class TestSeed:
    """Test full runs."""

    def test_arena_run(self, board, memory_store, arena_config):
        result = Seeder(board, memory_store, SeedConfig(arena=arena_config)).seed()

        assert result.success
        assert result.mode == "training_arena"
        assert result.agents_created == 2
        assert result.quests_completed == 10
        assert result.duration >= 0

    def test_roster_run(self, board, memory_store, roster_config):
        config = SeedConfig(mode=SeedMode.TIERED_ROSTER, roster=roster_config)
        result = Seeder(board, memory_store, config).seed()

        assert result.mode == "tiered_roster"
        assert result.agents_created == 4
        assert result.guilds_created == 1

    def test_dry_run_flag(self, board, memory_store, roster_config):
        config = SeedConfig(mode=SeedMode.TIERED_ROSTER, dry_run=True, roster=roster_config)
        result = Seeder(board, memory_store, config).seed()

        assert result.agents_created == 4
        assert memory_store.list_all_agents() == []

    def test_e2e_preset_is_rerunnable(self, board, memory_store, agent_config):
        config = new_e2e_test_config(agent_config)
        first = Seeder(board, memory_store, config).seed()
        second = Seeder(board, memory_store, config).seed()

        assert first.agents_created == 10
        assert second.agents_created == 0
        assert second.agents_skipped == 10
        assert len(memory_store.list_all_agents()) == 10

    def test_fatal_error_keeps_partial_result(self, board, memory_store, agent_config, tmp_path):
        arena = ArenaConfig(
            agent_configs=[agent_config],
            quest_file=str(tmp_path / "missing.json"),
            target_distribution=LevelDistribution(min_level=2),
        )
        seeder = Seeder(board, memory_store, SeedConfig(arena=arena))

        with pytest.raises(TemplateLoadError) as exc_info:
            seeder.seed()

        result = exc_info.value.result
        assert result.mode == "training_arena"
        assert result.success is False
        assert result.duration >= 0
        assert result.errors

    def test_seed_with_progress_callback(self, board, memory_store, roster_config):
        config = SeedConfig(mode=SeedMode.TIERED_ROSTER, roster=roster_config)
        events = []
        Seeder(board, memory_store, config).seed_with_progress(events.append)

        assert len(events) == 5
        assert events[0].phase == "guilds"

    def test_failing_progress_sink_ignored(self, board, memory_store, roster_config):
        def explode(event):
            raise RuntimeError("sink down")

        config = SeedConfig(mode=SeedMode.TIERED_ROSTER, roster=roster_config)
        result = Seeder(board, memory_store, config).seed_with_progress(explode)
        assert result.success
        assert result.agents_created == 4

    def test_deadline(self, board, memory_store, arena_config):
        with pytest.raises(SeedCancelledError, match="deadline"):
            Seeder(board, memory_store, SeedConfig(arena=arena_config)).seed(RunContext(timeout=0))


class TestResult:
    """Test result summaries and rendering."""

    def sample_result(self):
        agent = Agent(id="default.local.game.main.agent.a1", name="mentor-1", level=8,
                      tier=TrustTier.JOURNEYMAN, is_npc=True)
        result = SeedResult(mode="tiered_roster", agents_created=1, npcs_spawned=1)
        result.add_agent(agent)
        return result

    def test_fail(self):
        result = SeedResult()
        result.fail("boom")
        assert result.success is False
        assert result.errors == ["boom"]

    def test_to_dict(self):
        data = self.sample_result().to_dict()
        assert data["mode"] == "tiered_roster"
        assert data["agents"][0]["tier"] == "journeyman"
        assert data["agents"][0]["is_npc"] is True

    def test_summary_skills(self):
        summary = AgentSummary(id="x", name="n", level=1, tier=TrustTier.APPRENTICE,
                               skills=[SkillTag.RESEARCH])
        assert summary.to_dict()["skills"] == ["research"]

    def test_render(self):
        buffer = io.StringIO()
        console = Console(file=buffer, width=120, force_terminal=False)
        result = self.sample_result()
        result.fail("one agent failed")

        table = render_result(result, console)

        output = buffer.getvalue()
        assert table.row_count == 1
        assert "mentor-1" in output
        assert "Journeyman" in output
        assert "one agent failed" in output
