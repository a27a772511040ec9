"""Interviewee-side workflow driver.

The driver owns the current ``SessionSnapshot`` and feeds events through
``machine.transition``. After each transition it writes the local snapshot
and runs the ``pending`` continuation: the next question is requested only
after the previous evaluation has been applied.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from observability import log_event, span
from services.checkpoints import ProgressCheckpointer

from . import ledger, machine
from .checkpointer import DEFAULT_SLOT, clear_snapshot, load_snapshot, save_snapshot
from .errors import AiUnavailable, InvalidTransition, LedgerError, PersistenceFailure, ValidationFailure
from .http_client import HttpInterviewClient
from .models import MAX_QUESTIONS, InterviewSession, SessionSnapshot

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class InterviewDriver:
    def __init__(
        self,
        client: HttpInterviewClient,
        *,
        checkpointer: Optional[ProgressCheckpointer] = None,
        clock: Callable[[], float] = time.time,
        slot: str = DEFAULT_SLOT,
        snapshot_dir: Optional[str] = None,
        persist: bool = True,
    ) -> None:
        self._client = client
        self._checkpointer = checkpointer if checkpointer is not None else ProgressCheckpointer(client)
        self._clock = clock
        self._slot = slot
        self._snapshot_dir = snapshot_dir
        self._persist = persist
        self._processing = False
        self._session_id = uuid4().hex
        self.snapshot: SessionSnapshot = machine.initial_snapshot()

    @property
    def session(self) -> InterviewSession:
        return self.snapshot.session

    @property
    def session_id(self) -> str:
        return self.snapshot.session.session_id or self._session_id

    @property
    def processing(self) -> bool:
        return self._processing

    def time_remaining(self) -> Optional[int]:
        return machine.time_remaining(self.session, self._clock())

    # Pre-interview

    def upload(self, filename: str, data: bytes) -> SessionSnapshot:
        """Upload a resume and move to field collection or ready.

        ``ValidationFailure`` (bad file) propagates with the state unchanged;
        an unavailable AI moves the session to ``error``.
        """

        if self.session.status != "idle":
            raise InvalidTransition("ResumeUploaded", self.session.status)
        try:
            with span(self.session_id, "upload"):
                result = self._client.upload_resume(filename, data)
        except AiUnavailable as exc:
            return self._fail("upload", exc)
        self._apply(
            machine.ResumeUploaded(
                resume_text=result.get("resumeText", ""),
                extracted=result.get("fields") or {},
                missing=result.get("missing") or [],
                message=result.get("message", ""),
                at=_now_iso(),
            )
        )
        self._checkpoint(chat_only=True)
        return self.snapshot

    def supply_field(self, field: str, value: str) -> SessionSnapshot:
        self._apply(machine.FieldSupplied(field=field, value=value, at=_now_iso()))
        self._checkpoint(chat_only=True)
        return self.snapshot

    def start(self) -> SessionSnapshot:
        self._apply(machine.StartConfirmed(session_id=self._session_id, at=_now_iso()))
        self._checkpoint()
        self._run_pending()
        return self.snapshot

    # Interview

    def update_draft(self, text: str) -> SessionSnapshot:
        return self._apply(machine.DraftUpdated(text=text, at=_now_iso()))

    def submit_answer(self, answer: Optional[str] = None) -> bool:
        """Submit ``answer`` (or the current draft) for the current question.

        Returns ``False`` when a submission is already being processed.
        """

        if self._processing:
            logger.info("Ignoring answer submission while another is in flight")
            return False
        self._processing = True
        try:
            session = self.session
            current = session.current_question
            if current is None or session.pending != "await_answer":
                raise InvalidTransition("AnswerSubmitted", f"{session.status}/{session.pending}")
            text = session.draft_answer if answer is None else answer
            taken = machine.time_taken(session, self._clock())
            self._apply(
                machine.AnswerSubmitted(question_id=current.question_id, answer=text, time_taken=taken, at=_now_iso())
            )
            self._run_pending()
        finally:
            self._processing = False
        return True

    def tick(self, now: Optional[float] = None) -> bool:
        """Auto-submit the draft when the countdown has expired."""

        moment = self._clock() if now is None else now
        remaining = machine.time_remaining(self.session, moment)
        if remaining is None or remaining > 0 or self._processing or self.session.awaiting_resume_choice:
            return False
        current = self.session.current_question
        logger.info("Time expired for %s, submitting draft", current.question_id if current else None)
        return self.submit_answer(self.session.draft_answer)

    # Errors and lifecycle

    def dismiss_error(self) -> SessionSnapshot:
        return self._apply(machine.ErrorDismissed(at=_now_iso()))

    def retry(self) -> SessionSnapshot:  # Dismiss the error and re-run the pending step
        self.dismiss_error()
        self._run_pending()
        return self.snapshot

    def start_over(self) -> SessionSnapshot:
        self._apply(machine.StartOver(at=_now_iso()))
        self._reset_identity()
        return self.snapshot

    def restore(self) -> bool:
        """Load the local snapshot; ``True`` when a resume choice is required."""

        stored = load_snapshot(self._slot, self._snapshot_dir)
        if stored is None:
            return False
        self.snapshot = stored
        if stored.session.session_id:
            self._session_id = stored.session.session_id
        self._apply(machine.Restored(at=_now_iso()))
        return self.session.awaiting_resume_choice

    def choose_resume(self, choice: str) -> SessionSnapshot:
        self._apply(machine.ResumeChosen(choice=choice, started_at=self._clock(), at=_now_iso()))
        if choice == "restart":
            self._reset_identity()
        else:
            self._run_pending()
        return self.snapshot

    def close(self) -> None:
        self._checkpointer.close()

    # Internals

    def _apply(self, event: machine.Event) -> SessionSnapshot:
        self.snapshot = machine.transition(self.snapshot, event)
        entry = self.snapshot.session.events[-1]
        log_event(
            "transition",
            self.session_id,
            event=entry["event"],
            pending=entry["pending"],
            **{"from": entry["from"], "to": entry["to"]},
        )
        if self._persist:
            save_snapshot(self.snapshot, self._slot, self._snapshot_dir)
        return self.snapshot

    def _fail(self, step: str, exc: Exception) -> SessionSnapshot:
        log_event("step_failed", self.session_id, step=step, outcome=str(exc))
        return self._apply(machine.StepFailed(step=step, message=str(exc), at=_now_iso()))

    def _checkpoint(self, *, chat_only: bool = False) -> None:
        self._checkpointer.checkpoint(self.snapshot, self.session_id, chat_only=chat_only)

    def _reset_identity(self) -> None:
        self._checkpointer.reset()
        self._session_id = uuid4().hex
        if self._persist:
            clear_snapshot(self._slot, self._snapshot_dir)

    def _run_pending(self) -> None:
        """Run continuations in sequence until the session waits or fails."""

        while self.session.status in ("interviewing", "completed") and self.session.pending in machine.RUNNABLE_STEPS:
            step = self.session.pending
            try:
                with span(self.session_id, step):
                    self._run_step(step)
            except (AiUnavailable, PersistenceFailure, ValidationFailure) as exc:
                self._fail(step, exc)
                return
            except (LedgerError, InvalidTransition):
                logger.exception("Fatal workflow error during %s", step)
                raise

    def _run_step(self, step: str) -> None:
        session = self.session
        if step == "generate_question":
            number = machine.next_question_number(session)
            result = self._client.next_question(
                number,
                ledger.difficulty_for(number),
                session.resume_text,
                machine.previous_questions(session),
            )
            entry = ledger.coerce_question(result, number)
            self._apply(machine.QuestionGenerated(entry=entry, started_at=self._clock(), at=_now_iso()))
        elif step == "evaluate":
            current = session.current_question
            result = self._client.submit_answer(
                current,
                current.answer,
                is_last=session.current_question_index == MAX_QUESTIONS - 1,
            )
            self._apply(
                machine.AnswerEvaluated(
                    question_id=current.question_id,
                    score=result.get("score"),
                    feedback=result.get("feedback", ""),
                    at=_now_iso(),
                )
            )
            scored = self.session.questions[session.current_question_index]
            log_event("evaluated", self.session_id, question_id=scored.question_id, score=scored.score)
            self._checkpoint()
        elif step == "summarize":
            result = self._client.generate_summary(session.questions, self.snapshot.profile.name)
            self._apply(
                machine.SummaryReady(
                    total_score=result.get("totalScore"),
                    breakdown=result.get("breakdown") or [],
                    summary=result.get("summary", ""),
                    at=_now_iso(),
                )
            )
        elif step == "finalize":
            result = self._client.save_candidate(
                self.snapshot.profile,
                session_id=session.session_id,
                resume_text=session.resume_text,
                questions=session.questions,
                total_score=session.total_score,
                summary=session.summary,
                chat=self.snapshot.chat,
            )
            self._apply(machine.Finalized(candidate_id=result["candidateId"], at=_now_iso()))
            log_event("finalized", self.session_id, score=session.total_score, outcome=result["candidateId"])
        else:
            raise InvalidTransition(step, session.status)


__all__ = ["InterviewDriver"]
