"""
Progress reporting for long seeding runs.

Seeders push ProgressEvents into a ProgressSink. Sinks are fire-and-forget:
the seeder never waits on them and a sink that raises is logged and ignored.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from rich.console import Console

logger = logging.getLogger(__name__)


PHASE_GUILDS = "guilds"
PHASE_AGENTS = "agents"
PHASE_TRAINING = "training"


@dataclass
class ProgressEvent:
    """One step of a seeding phase."""
    phase: str              # guilds, agents, training
    current: int
    total: int
    percent: float
    message: str
    agent_name: str | None = None
    quest_title: str | None = None

    @classmethod
    def make(
        cls,
        phase: str,
        current: int,
        total: int,
        message: str,
        agent_name: str | None = None,
        quest_title: str | None = None,
    ) -> "ProgressEvent":
        """Build an event, deriving percent from current/total."""
        percent = (current / total * 100.0) if total > 0 else 0.0
        return cls(
            phase=phase,
            current=current,
            total=total,
            percent=percent,
            message=message,
            agent_name=agent_name,
            quest_title=quest_title,
        )


@runtime_checkable
class ProgressSink(Protocol):
    def report(self, event: ProgressEvent) -> None:
        ...


class NullProgressSink:
    """Discards every event."""

    def report(self, event: ProgressEvent) -> None:
        pass


class LoggingProgressSink:
    """Writes each event to a logger at a fixed level."""

    def __init__(self, log: logging.Logger | None = None, level: int = logging.INFO):
        self.log = log or logger
        self.level = level

    def report(self, event: ProgressEvent) -> None:
        self.log.log(
            self.level,
            f"[{event.phase}] {event.current}/{event.total} ({event.percent:.0f}%) {event.message}",
        )


class CallbackProgressSink:
    """Adapts a plain callable to the sink interface."""

    def __init__(self, callback: Callable[[ProgressEvent], None]):
        self.callback = callback

    def report(self, event: ProgressEvent) -> None:
        self.callback(event)


PHASE_STYLES = {
    PHASE_GUILDS: "magenta",
    PHASE_AGENTS: "cyan",
    PHASE_TRAINING: "green",
}


class RichProgressSink:
    """One styled console line per event."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def report(self, event: ProgressEvent) -> None:
        style = PHASE_STYLES.get(event.phase, "white")
        line = (
            f"[bold {style}]{event.phase:>8}[/bold {style}] "
            f"[dim]{event.current}/{event.total}[/dim] "
            f"{event.percent:5.1f}%  {event.message}"
        )
        if event.quest_title:
            line += f" [dim]({event.quest_title})[/dim]"
        self.console.print(line)


def as_sink(progress: "ProgressSink | Callable[[ProgressEvent], None] | None") -> ProgressSink:
    """Normalize None, a callable, or a sink into a sink."""
    if progress is None:
        return NullProgressSink()
    if isinstance(progress, ProgressSink):
        return progress
    if callable(progress):
        return CallbackProgressSink(progress)
    raise TypeError(f"not a progress sink: {progress!r}")


def emit(sink: ProgressSink, event: ProgressEvent, log: logging.Logger | None = None) -> None:
    """Report an event, logging and discarding any sink failure."""
    try:
        sink.report(event)
    except Exception as e:
        (log or logger).warning(f"Progress sink failed on {event.phase} event: {e}")
