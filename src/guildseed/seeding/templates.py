"""
Training quest templates.

Templates are loaded per domain from JSON bundled with the package, or from
a file on disk that overrides the domain. Once loaded, an index buckets them
by difficulty so the arena can pick a quest suited to an agent's level.
"""

from __future__ import annotations

import json
import random
from importlib import resources
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..state.progression import (
    default_xp_for_difficulty,
    tier_from_difficulty,
    tier_from_level,
)
from ..state.schema import Payload, Quest, QuestDifficulty, SkillTag, TrustTier
from .errors import TemplateLoadError


# Package-relative location of bundled template files
BUNDLED_TEMPLATES_PACKAGE = "guildseed"
BUNDLED_TEMPLATES_PATH = ("data", "quests")

# Target difficulty for each tier; scanning goes downward from here
TIER_TARGET_DIFFICULTY: dict[TrustTier, QuestDifficulty] = {
    TrustTier.APPRENTICE: QuestDifficulty.TRIVIAL,
    TrustTier.JOURNEYMAN: QuestDifficulty.MODERATE,
    TrustTier.EXPERT: QuestDifficulty.HARD,
    TrustTier.MASTER: QuestDifficulty.EPIC,
    TrustTier.GRANDMASTER: QuestDifficulty.EPIC,
}


class QuestTemplate(BaseModel):
    """A training quest definition. Immutable once loaded."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    difficulty: QuestDifficulty
    skills: list[SkillTag] = Field(default_factory=list)
    input: Payload = None
    criteria: list[str] = Field(default_factory=list)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _parse_difficulty(cls, value: Any) -> QuestDifficulty:
        return QuestDifficulty.parse(value)

    def to_quest(self) -> Quest:
        """Instantiate a postable quest from this template."""
        return Quest(
            title=self.title,
            description=self.description,
            difficulty=self.difficulty,
            required_skills=list(self.skills),
            input=self.input,
            criteria=list(self.criteria),
            base_xp=default_xp_for_difficulty(self.difficulty),
            min_tier=tier_from_difficulty(self.difficulty),
            require_review=True,
            max_attempts=3,
            template_id=self.id,
        )


class QuestTemplateFile(BaseModel):
    """On-disk shape of a template resource."""
    domain: str = ""
    description: str = ""
    quests: list[QuestTemplate] = Field(default_factory=list)


class QuestTemplateIndex:
    """
    Ordered templates plus a difficulty index built once at construction.

    Bucket order is the order templates were encountered in.
    """

    def __init__(
        self,
        templates: list[QuestTemplate],
        domain: str = "",
        description: str = "",
    ):
        self.domain = domain
        self.description = description
        self.templates: tuple[QuestTemplate, ...] = tuple(templates)
        self._by_difficulty: dict[QuestDifficulty, tuple[QuestTemplate, ...]] = {}

        buckets: dict[QuestDifficulty, list[QuestTemplate]] = {}
        for template in self.templates:
            buckets.setdefault(template.difficulty, []).append(template)
        self._by_difficulty = {d: tuple(ts) for d, ts in buckets.items()}

    def __len__(self) -> int:
        return len(self.templates)

    def by_difficulty(self, difficulty: QuestDifficulty) -> list[QuestTemplate]:
        """Templates at exactly this difficulty (empty if none)."""
        return list(self._by_difficulty.get(difficulty, ()))

    def select_by_skill(self, skill: SkillTag) -> list[QuestTemplate]:
        """Templates that exercise a skill, in load order."""
        return [t for t in self.templates if skill in t.skills]

    def select_for_level(
        self,
        level: int,
        rng: random.Random | None = None,
    ) -> QuestTemplate | None:
        """
        Pick a template suited to an agent level.

        Maps the level's tier to a target difficulty, then walks down to
        Trivial and takes the first template of the first non-empty bucket.
        With an rng, a random member of that bucket is chosen instead.
        Falls back to the first template overall; None if the index is empty.
        """
        target = TIER_TARGET_DIFFICULTY[tier_from_level(level)]

        for value in range(target, QuestDifficulty.TRIVIAL - 1, -1):
            bucket = self._by_difficulty.get(QuestDifficulty(value))
            if bucket:
                return rng.choice(bucket) if rng is not None else bucket[0]

        if self.templates:
            return self.templates[0]
        return None


# -----------------------------------------------------------------------------
# Template sources
# -----------------------------------------------------------------------------

@runtime_checkable
class TemplateSource(Protocol):
    """Where template text comes from."""

    def read(self) -> tuple[str, str]:
        """Return (text, format) where format is "json" or "yaml"."""
        ...

    def describe(self) -> str:
        ...


class BundledTemplateSource:
    """Templates shipped inside the package, keyed by domain name."""

    def __init__(self, domain: str):
        self.domain = domain

    def describe(self) -> str:
        return f"bundled template {self.domain!r}"

    def read(self) -> tuple[str, str]:
        resource = resources.files(BUNDLED_TEMPLATES_PACKAGE)
        for part in BUNDLED_TEMPLATES_PATH:
            resource = resource / part
        resource = resource / f"{self.domain}.json"
        try:
            return resource.read_text(encoding="utf-8"), "json"
        except OSError as e:
            raise TemplateLoadError(f"failed to load {self.describe()}: {e}") from e


class FileTemplateSource:
    """Templates read from a path at runtime. YAML if the suffix says so."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def describe(self) -> str:
        return f"template file {str(self.path)!r}"

    def read(self) -> tuple[str, str]:
        fmt = "yaml" if self.path.suffix.lower() in (".yaml", ".yml") else "json"
        try:
            return self.path.read_text(encoding="utf-8"), fmt
        except OSError as e:
            raise TemplateLoadError(f"failed to read {self.describe()}: {e}") from e


def template_source_for(domain: str = "", quest_file: Path | str | None = None) -> TemplateSource:
    """A quest file, when given, overrides the domain."""
    if quest_file:
        return FileTemplateSource(quest_file)
    if not domain:
        raise TemplateLoadError("quest_domain or quest_file required")
    return BundledTemplateSource(domain)


def parse_quest_templates(text: str, fmt: str = "json") -> QuestTemplateIndex:
    """Decode template text and build the index."""
    try:
        data = yaml.safe_load(text) if fmt == "yaml" else json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise TemplateLoadError(f"failed to parse templates: {e}") from e

    if not isinstance(data, dict):
        raise TemplateLoadError("failed to parse templates: expected an object at top level")

    try:
        parsed = QuestTemplateFile.model_validate(data)
    except ValidationError as e:
        raise TemplateLoadError(f"failed to parse templates: {e}") from e

    return QuestTemplateIndex(parsed.quests, domain=parsed.domain, description=parsed.description)


def load_quest_templates(source: TemplateSource) -> QuestTemplateIndex:
    text, fmt = source.read()
    return parse_quest_templates(text, fmt)


# -----------------------------------------------------------------------------
# Built-in templates
# -----------------------------------------------------------------------------

def default_code_templates() -> QuestTemplateIndex:
    """Built-in code training templates, independent of bundled files."""
    templates = [
        QuestTemplate(
            id="code-trivial-classify",
            title="Classify Code Snippet",
            description="Identify the programming language and purpose of the given code.",
            difficulty=QuestDifficulty.TRIVIAL,
            skills=[SkillTag.ANALYSIS],
            input={
                "code": "def add(a, b):\n    return a + b",
                "task": "Identify the language and describe what this code does.",
            },
            criteria=["correct_language", "accurate_description"],
        ),
        QuestTemplate(
            id="code-easy-unittest",
            title="Write Unit Test",
            description="Write a unit test for the given function.",
            difficulty=QuestDifficulty.EASY,
            skills=[SkillTag.CODE_GENERATION],
            input={
                "function": "def reverse(s: str) -> str: ...",
                "task": "Write comprehensive unit tests for this function.",
            },
            criteria=["tests_run", "covers_edge_cases", "assertions_correct"],
        ),
        QuestTemplate(
            id="code-moderate-refactor",
            title="Refactor for Clarity",
            description="Improve code readability without changing functionality.",
            difficulty=QuestDifficulty.MODERATE,
            skills=[SkillTag.CODE_GENERATION, SkillTag.CODE_REVIEW],
            input={
                "code": "def f(x):\n    return 1 if x == 0 else x * f(x - 1)",
                "task": "Refactor this function to be more readable and maintainable.",
            },
            criteria=["correctness", "readability", "naming"],
        ),
        QuestTemplate(
            id="code-hard-optimize",
            title="Optimize for Performance",
            description="Improve performance of the given code.",
            difficulty=QuestDifficulty.HARD,
            skills=[SkillTag.CODE_GENERATION, SkillTag.CODE_REVIEW, SkillTag.ANALYSIS],
            input={
                "code": "# O(n^2) sorting implementation...",
                "task": "Optimize this code for better performance while maintaining correctness.",
            },
            criteria=["correctness", "measurable_improvement", "code_quality"],
        ),
    ]
    return QuestTemplateIndex(
        templates,
        domain="code",
        description="Software development training quests",
    )
