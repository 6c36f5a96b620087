"""
Quest board: the lifecycle every training quest goes through.

    POSTED → CLAIMED → IN_PROGRESS → IN_REVIEW → COMPLETED | FAILED
    POSTED → CANCELLED

Submission is where progression happens. The board turns a verdict into an
XP change on the claiming agent and persists the agent through the store.
Callers that judge quests themselves pass the verdict in; otherwise the
board reviews the output with its own judge.

Usage:
    board = MemoryQuestBoard(store)
    posted = board.post_quest(template.to_quest())
    board.claim_quest(posted.id, agent.id)
    board.start_quest(posted.id)
    submission = board.submit_result(posted.id, output, verdict)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from ..seeding.judge import ArenaJudge, JudgeResult, Verdict
from ..state.progression import LevelEvent, apply_xp, tier_from_level
from ..state.schema import AgentStatus, Payload, Quest, QuestStatus
from ..state.store import AgentStore, StoreError, extract_instance, generate_instance


# Allowed status changes; anything else is an out-of-order call
VALID_TRANSITIONS: dict[QuestStatus, set[QuestStatus]] = {
    QuestStatus.POSTED: {QuestStatus.CLAIMED, QuestStatus.CANCELLED},
    QuestStatus.CLAIMED: {QuestStatus.IN_PROGRESS, QuestStatus.POSTED, QuestStatus.FAILED},
    QuestStatus.IN_PROGRESS: {QuestStatus.IN_REVIEW, QuestStatus.COMPLETED, QuestStatus.FAILED},
    QuestStatus.IN_REVIEW: {QuestStatus.COMPLETED, QuestStatus.FAILED},
    QuestStatus.COMPLETED: set(),
    QuestStatus.FAILED: set(),
    QuestStatus.CANCELLED: set(),
}


class QuestBoardError(Exception):
    """A board call failed or was made out of order."""
    pass


class InvalidTransitionError(QuestBoardError):
    def __init__(self, quest_id: str, current: QuestStatus, target: QuestStatus):
        self.quest_id = quest_id
        self.current = current
        self.target = target
        super().__init__(
            f"quest {quest_id} cannot move from {current.value} to {target.value}"
        )


class QuestNotFoundError(QuestBoardError):
    def __init__(self, quest_id: str):
        self.quest_id = quest_id
        super().__init__(f"quest not found: {quest_id}")


@dataclass
class SubmissionResult:
    """What a submission did to the quest and its agent."""
    quest: Quest
    verdict: Verdict
    level_event: LevelEvent | None = None


@runtime_checkable
class QuestBoard(Protocol):
    def post_quest(self, quest: Quest) -> Quest:
        """Add a quest to the board. Returns it with an ID assigned."""
        ...

    def claim_quest(self, quest_id: str, agent_id: str) -> None:
        ...

    def start_quest(self, quest_id: str) -> None:
        ...

    def submit_result(
        self,
        quest_id: str,
        output: Payload,
        verdict: Verdict | None = None,
    ) -> SubmissionResult:
        """Record output and apply the verdict to the claiming agent."""
        ...

    def fail_quest(self, quest_id: str, reason: str) -> None:
        """Fail a claimed or running quest and free its agent."""
        ...

    def cancel_quest(self, quest_id: str, reason: str) -> None:
        """Withdraw a quest nobody has claimed."""
        ...


class MemoryQuestBoard:
    """
    In-process quest board over an AgentStore.

    With enforce_requirements, claims also check the quest's minimum tier
    and required skills. Training arenas leave it off: trainees start with
    no skills at all.
    """

    def __init__(
        self,
        store: AgentStore,
        judge: ArenaJudge | None = None,
        enforce_requirements: bool = False,
        logger: logging.Logger | None = None,
    ):
        self.store = store
        self.judge = judge or ArenaJudge()
        self.enforce_requirements = enforce_requirements
        self.logger = logger or logging.getLogger(__name__)
        self.quests: dict[str, Quest] = {}
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def post_quest(self, quest: Quest) -> Quest:
        posted = quest.model_copy(deep=True)
        if not posted.id:
            posted.id = self.store.config().quest_entity_id(generate_instance())
        posted.status = QuestStatus.POSTED
        posted.posted_at = datetime.now()

        with self._lock:
            if posted.id in self.quests:
                raise QuestBoardError(f"quest already posted: {posted.id}")
            self.quests[posted.id] = posted

        self.logger.debug(f"Posted quest {posted.title!r} ({posted.id})")
        return posted.model_copy(deep=True)

    def claim_quest(self, quest_id: str, agent_id: str) -> None:
        agent = self._load_agent(agent_id)

        with self._lock:
            quest = self._get(quest_id)
            self._check_transition(quest, QuestStatus.CLAIMED)

            if agent.status != AgentStatus.IDLE:
                raise QuestBoardError(f"agent not idle: {agent.status.value}")
            if self.enforce_requirements:
                if tier_from_level(agent.level) < quest.min_tier:
                    raise QuestBoardError("agent tier too low")
                if quest.required_skills and not any(
                    agent.has_skill(skill) for skill in quest.required_skills
                ):
                    raise QuestBoardError("agent lacks required skills")

            quest.status = QuestStatus.CLAIMED
            quest.claimed_by = agent.id
            quest.attempts += 1

        agent.status = AgentStatus.ON_QUEST
        self._save_agent(agent)

    def start_quest(self, quest_id: str) -> None:
        with self._lock:
            quest = self._get(quest_id)
            self._check_transition(quest, QuestStatus.IN_PROGRESS)
            quest.status = QuestStatus.IN_PROGRESS

    def submit_result(
        self,
        quest_id: str,
        output: Payload,
        verdict: Verdict | None = None,
    ) -> SubmissionResult:
        with self._lock:
            quest = self._get(quest_id)
            if quest.status != QuestStatus.IN_PROGRESS:
                raise QuestBoardError(f"quest not in_progress: {quest.status.value}")
            quest.output = output
            if quest.require_review:
                quest.status = QuestStatus.IN_REVIEW
            snapshot = quest.model_copy(deep=True)

        if verdict is None:
            verdict = self._review(snapshot, output)

        final = QuestStatus.COMPLETED if verdict.passed else QuestStatus.FAILED
        with self._lock:
            self._check_transition(quest, final)
            quest.status = final
            quest.completed_at = datetime.now()
            snapshot = quest.model_copy(deep=True)

        level_event = None
        if quest.claimed_by:
            level_event = self._apply_verdict(quest.claimed_by, verdict)

        return SubmissionResult(quest=snapshot, verdict=verdict, level_event=level_event)

    def fail_quest(self, quest_id: str, reason: str) -> None:
        with self._lock:
            quest = self._get(quest_id)
            self._check_transition(quest, QuestStatus.FAILED)
            quest.status = QuestStatus.FAILED
            quest.completed_at = datetime.now()
            agent_id = quest.claimed_by

        self.logger.info(f"Quest {quest.title!r} failed: {reason}")
        if agent_id:
            agent = self._load_agent(agent_id)
            agent.status = AgentStatus.IDLE
            agent.stats.quests_failed += 1
            self._save_agent(agent)

    def cancel_quest(self, quest_id: str, reason: str) -> None:
        with self._lock:
            quest = self._get(quest_id)
            self._check_transition(quest, QuestStatus.CANCELLED)
            quest.status = QuestStatus.CANCELLED
            quest.completed_at = datetime.now()

        self.logger.info(f"Quest {quest.title!r} cancelled: {reason}")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_quest(self, quest_id: str) -> Quest:
        with self._lock:
            return self._get(quest_id).model_copy(deep=True)

    def list_quests(self, status: QuestStatus | None = None) -> list[Quest]:
        with self._lock:
            return [
                q.model_copy(deep=True)
                for q in self.quests.values()
                if status is None or q.status == status
            ]

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _get(self, quest_id: str) -> Quest:
        quest = self.quests.get(quest_id)
        if quest is None:
            raise QuestNotFoundError(quest_id)
        return quest

    def _check_transition(self, quest: Quest, target: QuestStatus) -> None:
        if target not in VALID_TRANSITIONS[quest.status]:
            raise InvalidTransitionError(quest.id, quest.status, target)

    def _review(self, quest: Quest, output: Payload) -> Verdict:
        if not quest.require_review:
            return JudgeResult(
                passed=True,
                quality_score=1.0,
                feedback="Accepted without review.",
            ).to_verdict(quest.base_xp)
        return self.judge.review(quest, output)

    def _load_agent(self, agent_id: str):
        try:
            return self.store.get_agent(extract_instance(agent_id))
        except StoreError as e:
            raise QuestBoardError(f"failed to load agent {agent_id}: {e}") from e

    def _save_agent(self, agent) -> None:
        try:
            self.store.put_agent(extract_instance(agent.id), agent)
        except StoreError as e:
            raise QuestBoardError(f"failed to save agent {agent.id}: {e}") from e

    def _apply_verdict(self, agent_id: str, verdict: Verdict) -> LevelEvent:
        agent = self._load_agent(agent_id)

        if verdict.passed:
            event = apply_xp(agent, verdict.xp_awarded)
            agent.stats.quests_completed += 1
            agent.stats.total_xp_earned += verdict.xp_awarded
        else:
            event = apply_xp(agent, -verdict.xp_penalty)
            agent.stats.quests_failed += 1
            agent.stats.total_xp_lost += verdict.xp_penalty

        agent.status = AgentStatus.IDLE
        self._save_agent(agent)

        if event.leveled_up:
            self.logger.info(
                f"{agent.name} reached level {event.new_level} ({event.new_tier.display_name})"
            )
        return event
