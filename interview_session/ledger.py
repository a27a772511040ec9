"""Question/answer ledger operations.

The ledger is an ordered tuple of at most six ``QuestionEntry`` values. Every
operation returns a new tuple; entries are never removed individually.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional, Tuple

from config.settings import settings

from .errors import DuplicateQuestion, LedgerFull, UnknownQuestion, ValidationFailure
from .models import MAX_QUESTIONS, Difficulty, QuestionEntry

logger = logging.getLogger(__name__)

Ledger = Tuple[QuestionEntry, ...]


def difficulty_for(question_number: int) -> Difficulty:
    """Map a 1-based position to its difficulty: 1-2 easy, 3-4 medium, 5-6 hard."""

    _check_number(question_number)
    if question_number <= 2:
        return "easy"
    if question_number <= 4:
        return "medium"
    return "hard"


def question_id_for(question_number: int) -> str:
    _check_number(question_number)
    return f"q{question_number}"


def coerce_question(raw: Mapping[str, Any], question_number: int) -> QuestionEntry:
    """Build a ledger entry from untrusted generator output.

    Identity, position, difficulty and time limit always come from
    ``question_number``; only the question text is taken from ``raw``.
    """

    expected_id = question_id_for(question_number)
    difficulty = difficulty_for(question_number)
    text = str(raw.get("question") or "").strip()
    if not text:
        raise ValidationFailure(f"Generated question {expected_id} has no text")
    echoed_id = raw.get("questionId")
    if echoed_id and echoed_id != expected_id:
        logger.warning("Generated question id %r overwritten with %s", echoed_id, expected_id)
    echoed_difficulty = raw.get("difficulty")
    if echoed_difficulty and echoed_difficulty != difficulty:
        logger.warning("Generated difficulty %r overwritten with %s for %s", echoed_difficulty, difficulty, expected_id)
    return QuestionEntry(
        question_id=expected_id,
        question_number=question_number,
        difficulty=difficulty,
        question=text,
        time_limit=settings.time_limit_for(difficulty),
    )


def append_question(entries: Ledger, entry: QuestionEntry) -> Ledger:
    """Append ``entry``; duplicates and a seventh entry are rejected."""

    if any(existing.question_id == entry.question_id for existing in entries):
        raise DuplicateQuestion(entry.question_id)
    if len(entries) >= MAX_QUESTIONS:
        raise LedgerFull(MAX_QUESTIONS)
    return entries + (entry,)


def record_answer(entries: Ledger, question_id: str, answer: str, time_taken: int) -> Ledger:
    """Set answer and time taken; repeated calls overwrite."""

    index = _index_of(entries, question_id)
    updated = entries[index].model_copy(update={"answer": answer or "", "time_taken": max(0, int(time_taken))})
    return entries[:index] + (updated,) + entries[index + 1 :]


def record_evaluation(entries: Ledger, question_id: str, score: Any, feedback: str) -> Ledger:
    """Set score and feedback; out-of-range scores are clamped to 0-100."""

    index = _index_of(entries, question_id)
    bounded = clamp_score(score, question_id=question_id)
    updated = entries[index].model_copy(update={"score": bounded, "feedback": feedback or ""})
    return entries[:index] + (updated,) + entries[index + 1 :]


def clamp_score(score: Any, *, question_id: Optional[str] = None) -> int:
    """Round an untrusted score half-up and clamp it into 0-100."""

    if isinstance(score, bool):
        raise ValidationFailure(f"Score for {question_id} must be numeric")
    try:
        numeric = float(score)
    except (TypeError, ValueError) as exc:
        raise ValidationFailure(f"Score for {question_id} must be numeric") from exc
    if math.isnan(numeric):
        raise ValidationFailure(f"Score for {question_id} must be numeric")
    rounded = int(math.floor(numeric + 0.5)) if math.isfinite(numeric) else (100 if numeric > 0 else 0)
    bounded = max(0, min(100, rounded))
    if bounded != rounded:
        logger.warning("Score %s for %s clamped to %d", score, question_id, bounded)
    return bounded


def _index_of(entries: Ledger, question_id: str) -> int:
    for index, entry in enumerate(entries):
        if entry.question_id == question_id:
            return index
    raise UnknownQuestion(question_id)


def _check_number(question_number: int) -> None:
    if not 1 <= int(question_number) <= MAX_QUESTIONS:
        raise ValidationFailure(f"Question number must be between 1 and {MAX_QUESTIONS}")


__all__ = [
    "Ledger",
    "difficulty_for",
    "question_id_for",
    "coerce_question",
    "append_question",
    "record_answer",
    "record_evaluation",
    "clamp_score",
]
