"""
Seeding results and their console rendering.

A SeedResult is built fresh by each seed() call and never persisted.
"""

from dataclasses import dataclass, field
from typing import Any

from rich.console import Console
from rich.table import Table

from ..state.schema import Agent, SkillTag, TrustTier


@dataclass
class AgentSummary:
    """Brief snapshot of a seeded agent."""
    id: str
    name: str
    level: int
    tier: TrustTier
    skills: list[SkillTag] = field(default_factory=list)
    is_npc: bool = False

    @classmethod
    def from_agent(cls, agent: Agent) -> "AgentSummary":
        return cls(
            id=agent.id,
            name=agent.name,
            level=agent.level,
            tier=agent.tier,
            skills=agent.skill_tags(),
            is_npc=agent.is_npc,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "tier": self.tier.name.lower(),
            "skills": [s.value for s in self.skills],
            "is_npc": self.is_npc,
        }


@dataclass
class SeedResult:
    """Outcome of a seeding run."""
    mode: str = ""
    success: bool = True
    agents_created: int = 0
    agents_skipped: int = 0       # Idempotent skips
    guilds_created: int = 0
    npcs_spawned: int = 0
    quests_completed: int = 0     # Arena only
    errors: list[str] = field(default_factory=list)
    duration: float = 0.0         # Seconds
    agents: list[AgentSummary] = field(default_factory=list)

    def fail(self, message: str) -> None:
        """Mark the run failed and record why."""
        self.success = False
        self.errors.append(message)

    def add_agent(self, agent: Agent) -> None:
        self.agents.append(AgentSummary.from_agent(agent))

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "success": self.success,
            "agents_created": self.agents_created,
            "agents_skipped": self.agents_skipped,
            "guilds_created": self.guilds_created,
            "npcs_spawned": self.npcs_spawned,
            "quests_completed": self.quests_completed,
            "errors": list(self.errors),
            "duration": self.duration,
            "agents": [a.to_dict() for a in self.agents],
        }


def render_result(result: SeedResult, console: Console | None = None) -> Table:
    """Print a summary table of a seeding run and return it."""
    console = console or Console()

    status = "[green]success[/green]" if result.success else "[red]failed[/red]"
    table = Table(
        title=f"[bold]Seeding ({result.mode or 'unknown'})[/bold] {status}",
        caption=(
            f"created {result.agents_created} · skipped {result.agents_skipped} · "
            f"guilds {result.guilds_created} · npcs {result.npcs_spawned} · "
            f"quests {result.quests_completed} · {result.duration:.2f}s"
        ),
    )
    table.add_column("Name", style="bold")
    table.add_column("Level", justify="right")
    table.add_column("Tier")
    table.add_column("Skills", style="dim")
    table.add_column("NPC", justify="center")

    for agent in result.agents:
        table.add_row(
            agent.name,
            str(agent.level),
            agent.tier.display_name,
            ", ".join(s.value for s in agent.skills) or "-",
            "yes" if agent.is_npc else "",
        )

    console.print(table)
    for error in result.errors:
        console.print(f"[red]error:[/red] {error}")
    return table
