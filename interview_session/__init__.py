"""Interview session workflow: models, ledger and reducer."""
from .errors import (
    AiUnavailable,
    DuplicateQuestion,
    InterviewError,
    InvalidTransition,
    LedgerError,
    LedgerFull,
    PersistenceFailure,
    UnknownQuestion,
    ValidationFailure,
)
from .machine import initial_snapshot, transition
from .models import (
    MAX_QUESTIONS,
    CandidateProfile,
    ChatMessage,
    InterviewSession,
    QuestionEntry,
    SessionSnapshot,
)

__all__ = [
    "InterviewError",
    "AiUnavailable",
    "LedgerError",
    "DuplicateQuestion",
    "LedgerFull",
    "UnknownQuestion",
    "InvalidTransition",
    "PersistenceFailure",
    "ValidationFailure",
    "initial_snapshot",
    "transition",
    "MAX_QUESTIONS",
    "CandidateProfile",
    "ChatMessage",
    "InterviewSession",
    "QuestionEntry",
    "SessionSnapshot",
]
