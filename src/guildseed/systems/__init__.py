"""
Runtime systems the seeders drive.

The quest board owns quest lifecycle and applies verdicts to agents.
"""

from .questboard import (
    InvalidTransitionError,
    MemoryQuestBoard,
    QuestBoard,
    QuestBoardError,
    QuestNotFoundError,
    SubmissionResult,
    VALID_TRANSITIONS,
)

__all__ = [
    "InvalidTransitionError",
    "MemoryQuestBoard",
    "QuestBoard",
    "QuestBoardError",
    "QuestNotFoundError",
    "SubmissionResult",
    "VALID_TRANSITIONS",
]
