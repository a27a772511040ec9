from __future__ import annotations  # Error taxonomy for the interview workflow


class InterviewError(RuntimeError):  # Base error for interview workflow failures
    pass


class AiUnavailable(InterviewError):  # AI gateway retries exhausted; the step may be retried
    pass


class LedgerError(InterviewError):  # Internal consistency violation in the question ledger
    pass


class DuplicateQuestion(LedgerError):  # questionId already recorded
    def __init__(self, question_id: str) -> None:
        super().__init__(f"Question '{question_id}' already recorded")
        self.question_id = question_id


class LedgerFull(LedgerError):  # Attempt to record a question beyond the fixed count
    def __init__(self, limit: int) -> None:
        super().__init__(f"Ledger already holds {limit} questions")
        self.limit = limit


class UnknownQuestion(LedgerError):  # questionId not present in the ledger
    def __init__(self, question_id: str) -> None:
        super().__init__(f"Question '{question_id}' not found")
        self.question_id = question_id


class InvalidTransition(InterviewError):  # Event not accepted in the current session status
    def __init__(self, event: str, status: str) -> None:
        super().__init__(f"Event '{event}' not allowed while status is '{status}'")
        self.event = event
        self.status = status


class PersistenceFailure(InterviewError):  # Checkpoint write failed; logged, never surfaced
    pass


class ValidationFailure(InterviewError):  # Malformed request or profile; caller must correct it
    pass


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
]
