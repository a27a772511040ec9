from __future__ import annotations  # Re-export ai_gateway public API

from .ai_gateway import (  # noqa: F401
    AnswerEvaluation,
    ExtractedFields,
    GeneratedQuestion,
    InterviewSummary,
    ProfileExtraction,
    SCHEMAS,
    ScoreBreakdown,
    UNAVAILABLE_MESSAGE,
    bind_from_config,
    evaluate_answer,
    extract_profile_fields,
    generate_question,
    invoke,
    summarize,
)

__all__ = [
    "AnswerEvaluation",
    "ExtractedFields",
    "GeneratedQuestion",
    "InterviewSummary",
    "ProfileExtraction",
    "SCHEMAS",
    "ScoreBreakdown",
    "UNAVAILABLE_MESSAGE",
    "bind_from_config",
    "evaluate_answer",
    "extract_profile_fields",
    "generate_question",
    "invoke",
    "summarize",
]
