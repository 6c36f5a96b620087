"""
Seeding error taxonomy.

Fatal errors carry the partially-populated SeedResult (if any) so callers can
report whatever completed before the failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .result import SeedResult


class SeedingError(Exception):
    """Base class for seeding failures."""

    def __init__(self, message: str, result: "SeedResult | None" = None):
        self.result = result
        super().__init__(message)


class ConfigurationError(SeedingError):
    """Configuration is invalid. Raised before any side effect."""
    pass


class ZeroWeightRubricError(ConfigurationError):
    """A judge rubric whose weights sum to zero can't be averaged."""

    def __init__(self, total_weight: float = 0.0):
        self.total_weight = total_weight
        super().__init__(f"rubric total weight must be positive, got {total_weight}")


class TemplateLoadError(SeedingError):
    """Quest template resource is missing or malformed."""
    pass


# The resource-level name used in error reports
ResourceLoadError = TemplateLoadError


class CreationError(SeedingError):
    """Storing a new agent or guild failed."""

    def __init__(self, name: str, cause: Exception | str, result: "SeedResult | None" = None):
        self.name = name
        self.cause = cause
        super().__init__(f"failed to create {name}: {cause}", result)


class RoundError(SeedingError):
    """A single training round failed (board lifecycle or judge)."""

    def __init__(self, agent_name: str, quest_title: str, step: str, cause: Exception):
        self.agent_name = agent_name
        self.quest_title = quest_title
        self.step = step
        self.cause = cause
        super().__init__(f"failed to {step} quest {quest_title!r} for {agent_name}: {cause}")


class MentorBootstrapError(SeedingError):
    """Finding or spawning mentors failed. Never fatal."""
    pass


class SeedCancelledError(SeedingError):
    """The run context was cancelled or its deadline passed."""
    pass
