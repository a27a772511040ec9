"""Reducer-style state machine for an interview session.

``transition(snapshot, event)`` maps an immutable ``SessionSnapshot`` to the
next one. Side effects (AI calls, checkpoints, timers) live in the driver; the
``pending`` field of the session names the continuation the driver runs next.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from services.scoring import compute_total_score

from . import ledger
from .errors import InvalidTransition, ValidationFailure
from .models import (
    MAX_QUESTIONS,
    PROFILE_FIELDS,
    REQUIRED_FIELDS,
    ChatMessage,
    InterviewSession,
    QuestionEntry,
    SessionSnapshot,
)

logger = logging.getLogger(__name__)

RUNNABLE_STEPS = ("generate_question", "evaluate", "summarize", "finalize")


class Event(BaseModel):  # Base for reducer input events
    model_config = ConfigDict(frozen=True)

    at: str = ""


class ResumeUploaded(Event):
    resume_text: str
    extracted: Dict[str, Any] = Field(default_factory=dict)
    missing: List[str] = Field(default_factory=list)
    message: str = ""


class FieldSupplied(Event):
    field: str
    value: str


class StartConfirmed(Event):
    session_id: str


class QuestionGenerated(Event):
    entry: QuestionEntry
    started_at: float


class DraftUpdated(Event):
    text: str


class AnswerSubmitted(Event):
    question_id: str
    answer: str
    time_taken: int


class AnswerEvaluated(Event):
    question_id: str
    score: Any
    feedback: str = ""


class SummaryReady(Event):
    total_score: Any = None
    breakdown: List[Dict[str, Any]] = Field(default_factory=list)
    summary: str = ""


class Finalized(Event):
    candidate_id: str


class StepFailed(Event):
    step: str
    message: str


class ErrorDismissed(Event):
    pass


class StartOver(Event):
    pass


class Restored(Event):
    pass


class ResumeChosen(Event):
    choice: Literal["continue", "restart"]
    started_at: float


def initial_snapshot() -> SessionSnapshot:
    return SessionSnapshot()


def transition(snapshot: SessionSnapshot, event: Event) -> SessionSnapshot:
    """Apply ``event`` and return the next snapshot.

    Raises ``InvalidTransition`` when the event is not accepted in the current
    status, and ledger errors when an invariant would be violated.
    """

    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unsupported event {type(event).__name__}")
    session = snapshot.session
    name = type(event).__name__
    if session.awaiting_resume_choice and not isinstance(event, (ResumeChosen, StartOver)):
        raise InvalidTransition(name, "awaiting-resume-choice")
    updated = handler(snapshot, event)
    entry = {
        "event": name,
        "from": session.status,
        "to": updated.session.status,
        "pending": updated.session.pending,
        "at": event.at,
    }
    return updated.model_copy(
        update={"session": updated.session.model_copy(update={"events": updated.session.events + (entry,)})}
    )


def next_question_number(session: InterviewSession) -> int:
    return len(session.questions) + 1


def previous_questions(session: InterviewSession) -> List[str]:
    return [entry.question for entry in session.questions]


def time_remaining(session: InterviewSession, now: float) -> Optional[int]:
    """Seconds left on the current question's countdown, ``None`` when idle."""

    current = session.current_question
    if session.pending != "await_answer" or current is None or session.question_started_at is None:
        return None
    elapsed = max(0.0, now - session.question_started_at)
    return max(0, math.ceil(current.time_limit - elapsed))


def time_taken(session: InterviewSession, now: float) -> int:
    current = session.current_question
    if current is None or session.question_started_at is None:
        return 0
    elapsed = int(max(0.0, now - session.question_started_at))
    return min(elapsed, current.time_limit) if current.time_limit else elapsed


def _require(session: InterviewSession, event: Event, status: str, pending: Optional[str] = None) -> None:
    if session.status != status or (pending is not None and session.pending != pending):
        current = session.status if pending is None else f"{session.status}/{session.pending}"
        raise InvalidTransition(type(event).__name__, current)


def _with_session(snapshot: SessionSnapshot, **changes: Any) -> SessionSnapshot:
    return snapshot.model_copy(update={"session": snapshot.session.model_copy(update=changes)})


def _ai_line(text: str, at: str) -> ChatMessage:
    return ChatMessage(sender="ai", text=text, timestamp=at)


def _on_resume_uploaded(snapshot: SessionSnapshot, event: ResumeUploaded) -> SessionSnapshot:
    _require(snapshot.session, event, "idle")
    values = {
        name: str(value or "").strip()
        for name, value in event.extracted.items()
        if name in PROFILE_FIELDS
    }
    profile = snapshot.profile.model_copy(update=values)
    missing: List[str] = []
    for name in [*event.missing, *REQUIRED_FIELDS]:
        if name in PROFILE_FIELDS and name not in missing and not getattr(profile, name).strip():
            missing.append(name)
    chat = list(snapshot.chat)
    chat.append(_ai_line(event.message or "Resume uploaded successfully!", event.at))
    if missing:
        chat.append(_ai_line(f"I couldn't find your {missing[0]} in the resume. Could you please share it?", event.at))
        status = "collecting-fields"
    else:
        status = "ready"
    session = snapshot.session.model_copy(
        update={"status": status, "resume_text": event.resume_text, "missing_fields": tuple(missing)}
    )
    return SessionSnapshot(session=session, profile=profile, chat=tuple(chat))


def _on_field_supplied(snapshot: SessionSnapshot, event: FieldSupplied) -> SessionSnapshot:
    session = snapshot.session
    _require(session, event, "collecting-fields")
    if event.field not in session.missing_fields:
        raise ValidationFailure(f"Field '{event.field}' is not awaiting a value")
    value = event.value.strip()
    if not value:
        raise ValidationFailure(f"A value for '{event.field}' is required")
    profile = snapshot.profile.model_copy(update={event.field: value})
    remaining = tuple(name for name in session.missing_fields if name != event.field)
    chat = list(snapshot.chat)
    chat.append(ChatMessage(sender="user", text=value, timestamp=event.at))
    chat.append(_ai_line(f"Thank you for providing your {event.field}.", event.at))
    if remaining:
        chat.append(_ai_line(f"Could you also provide your {remaining[0]}?", event.at))
    status = "collecting-fields" if remaining else "ready"
    return SessionSnapshot(
        session=session.model_copy(update={"status": status, "missing_fields": remaining}),
        profile=profile,
        chat=tuple(chat),
    )


def _on_start_confirmed(snapshot: SessionSnapshot, event: StartConfirmed) -> SessionSnapshot:
    _require(snapshot.session, event, "ready")
    return _with_session(
        snapshot,
        status="interviewing",
        session_id=event.session_id,
        start_time=event.at or None,
        current_question_index=0,
        draft_answer="",
        pending="generate_question",
    )


def _on_question_generated(snapshot: SessionSnapshot, event: QuestionGenerated) -> SessionSnapshot:
    session = snapshot.session
    _require(session, event, "interviewing", "generate_question")
    questions = ledger.append_question(session.questions, event.entry)
    if event.entry.question_number != len(questions) or len(questions) != session.current_question_index + 1:
        raise InvalidTransition(type(event).__name__, f"expected question {session.current_question_index + 1}")
    return _with_session(
        snapshot,
        questions=questions,
        pending="await_answer",
        draft_answer="",
        question_started_at=event.started_at,
    )


def _on_draft_updated(snapshot: SessionSnapshot, event: DraftUpdated) -> SessionSnapshot:
    _require(snapshot.session, event, "interviewing", "await_answer")
    return _with_session(snapshot, draft_answer=event.text)


def _on_answer_submitted(snapshot: SessionSnapshot, event: AnswerSubmitted) -> SessionSnapshot:
    session = snapshot.session
    _require(session, event, "interviewing", "await_answer")
    questions = ledger.record_answer(session.questions, event.question_id, event.answer, event.time_taken)
    current = session.current_question
    if current is None or current.question_id != event.question_id:
        raise InvalidTransition(type(event).__name__, f"current question is {current.question_id if current else None}")
    return _with_session(snapshot, questions=questions, pending="evaluate", draft_answer=event.answer)


def _on_answer_evaluated(snapshot: SessionSnapshot, event: AnswerEvaluated) -> SessionSnapshot:
    session = snapshot.session
    _require(session, event, "interviewing", "evaluate")
    questions = ledger.record_evaluation(session.questions, event.question_id, event.score, event.feedback)
    if session.current_question_index < MAX_QUESTIONS - 1:
        return _with_session(
            snapshot,
            questions=questions,
            current_question_index=session.current_question_index + 1,
            pending="generate_question",
            draft_answer="",
            question_started_at=None,
        )
    return _with_session(snapshot, questions=questions, pending="summarize", question_started_at=None)


def _on_summary_ready(snapshot: SessionSnapshot, event: SummaryReady) -> SessionSnapshot:
    session = snapshot.session
    _require(session, event, "interviewing", "summarize")
    total = compute_total_score([entry.score for entry in session.questions], event.total_score)
    return _with_session(
        snapshot,
        status="completed",
        total_score=total,
        summary=event.summary,
        breakdown=tuple(event.breakdown),
        pending="finalize",
    )


def _on_finalized(snapshot: SessionSnapshot, event: Finalized) -> SessionSnapshot:
    _require(snapshot.session, event, "completed", "finalize")
    return _with_session(snapshot, pending=None, candidate_id=event.candidate_id)


def _on_step_failed(snapshot: SessionSnapshot, event: StepFailed) -> SessionSnapshot:
    session = snapshot.session
    previous = session.previous_status if session.status == "error" else session.status
    logger.warning("Step %s failed in status %s: %s", event.step, session.status, event.message)
    return _with_session(snapshot, status="error", previous_status=previous, error=event.message)


def _on_error_dismissed(snapshot: SessionSnapshot, event: ErrorDismissed) -> SessionSnapshot:
    session = snapshot.session
    _require(session, event, "error")
    return _with_session(snapshot, status=session.previous_status or "idle", previous_status=None, error=None)


def _on_start_over(snapshot: SessionSnapshot, event: StartOver) -> SessionSnapshot:
    return initial_snapshot()


def _on_restored(snapshot: SessionSnapshot, event: Restored) -> SessionSnapshot:
    session = snapshot.session
    if session.status == "interviewing" and session.questions:
        return _with_session(snapshot, awaiting_resume_choice=True)
    if session.status in ("interviewing", "completed") and session.pending in RUNNABLE_STEPS:
        return _with_session(snapshot, awaiting_resume_choice=True)
    return snapshot


def _on_resume_chosen(snapshot: SessionSnapshot, event: ResumeChosen) -> SessionSnapshot:
    session = snapshot.session
    if not session.awaiting_resume_choice:
        raise InvalidTransition(type(event).__name__, session.status)
    if event.choice == "restart":
        return initial_snapshot()
    started_at = event.started_at if session.pending == "await_answer" else session.question_started_at
    return _with_session(snapshot, awaiting_resume_choice=False, question_started_at=started_at)


_HANDLERS: Dict[Type[Event], Callable[[SessionSnapshot, Any], SessionSnapshot]] = {
    ResumeUploaded: _on_resume_uploaded,
    FieldSupplied: _on_field_supplied,
    StartConfirmed: _on_start_confirmed,
    QuestionGenerated: _on_question_generated,
    DraftUpdated: _on_draft_updated,
    AnswerSubmitted: _on_answer_submitted,
    AnswerEvaluated: _on_answer_evaluated,
    SummaryReady: _on_summary_ready,
    Finalized: _on_finalized,
    StepFailed: _on_step_failed,
    ErrorDismissed: _on_error_dismissed,
    StartOver: _on_start_over,
    Restored: _on_restored,
    ResumeChosen: _on_resume_chosen,
}


__all__ = [
    "RUNNABLE_STEPS",
    "Event",
    "ResumeUploaded",
    "FieldSupplied",
    "StartConfirmed",
    "QuestionGenerated",
    "DraftUpdated",
    "AnswerSubmitted",
    "AnswerEvaluated",
    "SummaryReady",
    "Finalized",
    "StepFailed",
    "ErrorDismissed",
    "StartOver",
    "Restored",
    "ResumeChosen",
    "initial_snapshot",
    "transition",
    "next_question_number",
    "previous_questions",
    "time_remaining",
    "time_taken",
]
