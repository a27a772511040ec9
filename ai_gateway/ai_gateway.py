from __future__ import annotations  # Language-model operations used by the interview workflow

import logging
from functools import partial
from pathlib import Path
from textwrap import dedent
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config import (
    EVALUATE_KEY,
    EXTRACT_KEY,
    QUESTION_KEY,
    SUMMARY_KEY,
    LlmRoute,
    bind_model,
    get_model,
    load_app_registry,
)
from interview_session.errors import AiUnavailable
from llm_gateway import LlmGatewayError, call

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "AI service unavailable. Please try again in a moment."
NO_ANSWER_FEEDBACK = "No answer was provided, so no understanding of the topic could be demonstrated."


class ExtractedFields(BaseModel):  # Profile values found in the resume
    name: str = ""
    email: str = ""
    phone: str = ""
    designation: str = ""
    location: str = ""
    github: str = ""
    linkedin: str = ""


class ProfileExtraction(BaseModel):  # Extraction result with missing field names
    model_config = ConfigDict(populate_by_name=True)

    extracted: ExtractedFields = Field(default_factory=ExtractedFields, alias="fields")
    missing: List[str] = Field(default_factory=list)
    message: str = ""


class GeneratedQuestion(BaseModel):  # Question proposed by the model
    questionId: str = ""
    difficulty: str = ""
    question: str = Field(min_length=1)
    timeLimit: Optional[int] = None


class AnswerEvaluation(BaseModel):  # Score and feedback for one answer
    score: float
    feedback: str = ""


class ScoreBreakdown(BaseModel):  # Per-question score echoed by the summary
    questionId: str
    score: Optional[float] = None


class InterviewSummary(BaseModel):  # Aggregate assessment of the interview
    totalScore: Optional[float] = None
    breakdown: List[ScoreBreakdown] = Field(default_factory=list)
    summary: str = ""


SCHEMAS: Dict[str, Type[BaseModel]] = {
    EXTRACT_KEY: ProfileExtraction,
    QUESTION_KEY: GeneratedQuestion,
    EVALUATE_KEY: AnswerEvaluation,
    SUMMARY_KEY: InterviewSummary,
}

T = TypeVar("T", bound=BaseModel)


def extract_profile_fields(resume_text: str, *, route: LlmRoute) -> ProfileExtraction:  # Pull profile fields from resume text
    return _invoke(_build_extract_task(resume_text), ProfileExtraction, route)


def generate_question(
    difficulty: str,
    question_number: int,
    resume_text: str,
    previous_questions: Sequence[str] = (),
    *,
    route: LlmRoute,
) -> GeneratedQuestion:  # Ask the model for one interview question
    task = _build_question_task(difficulty, question_number, resume_text, previous_questions)
    return _invoke(task, GeneratedQuestion, route)


def evaluate_answer(question: str, answer: str, difficulty: str, *, route: LlmRoute) -> AnswerEvaluation:  # Grade an answer on a 0-100 rubric
    if not (answer or "").strip():
        return AnswerEvaluation(score=0, feedback=NO_ANSWER_FEEDBACK)
    return _invoke(_build_evaluation_task(question, answer, difficulty), AnswerEvaluation, route)


def summarize(questions: Sequence[Mapping[str, Any]], candidate_name: str, *, route: LlmRoute) -> InterviewSummary:  # Aggregate scores into a summary
    return _invoke(_build_summary_task(questions, candidate_name), InterviewSummary, route)


def bind_from_config(config_path: Path) -> None:  # Bind gateway operations to configured routes
    registry = load_app_registry(config_path, SCHEMAS)
    operations = {
        EXTRACT_KEY: extract_profile_fields,
        QUESTION_KEY: generate_question,
        EVALUATE_KEY: evaluate_answer,
        SUMMARY_KEY: summarize,
    }
    for key, operation in operations.items():
        route, _ = registry[key]
        bind_model(key, partial(operation, route=route))
        logger.info("Bound %s to route=%s model=%s", key, route.name, route.model)


def invoke(key: str, **kwargs: Any) -> Any:  # Run a bound operation and validate its result shape
    schema = SCHEMAS[key]
    try:
        operation = get_model(key)
    except KeyError as exc:
        logger.error("No AI operation bound for %s", key)
        raise AiUnavailable(UNAVAILABLE_MESSAGE) from exc
    raw = operation(**kwargs)
    if isinstance(raw, schema):
        return raw
    try:
        if isinstance(raw, BaseModel):
            raw = raw.model_dump(by_alias=True)
        return schema.model_validate(raw)
    except ValidationError as exc:
        logger.warning("AI output for %s failed validation: %s", key, exc)
        raise AiUnavailable(UNAVAILABLE_MESSAGE) from exc


def _invoke(task: str, schema: Type[T], route: LlmRoute) -> T:
    try:
        return call(task, schema, cfg=route)
    except LlmGatewayError as exc:
        logger.error("AI gateway call failed route=%s: %s", route.name, exc)
        raise AiUnavailable(UNAVAILABLE_MESSAGE) from exc


def _build_extract_task(resume_text: str) -> str:  # Build extraction prompt
    return dedent(
        f"""
        You are a JSON-only extractor. Given the resume text, return the candidate profile.

        Respond with a JSON object following this contract:
        - fields: object with name, email, phone, designation, location, github, linkedin.
            Use an empty string for anything the resume does not state.
        - missing: names among name, email, phone that are empty.
        - message: a short conversational message to show to the candidate.

        Resume:
        {resume_text}

        Return only JSON without markdown fences, text, or commentary.
        """
    ).strip()


def _build_question_task(
    difficulty: str,
    question_number: int,
    resume_text: str,
    previous_questions: Sequence[str],
) -> str:  # Build question generation prompt
    asked = "\n".join(f"- {text}" for text in previous_questions if text.strip()) or "- none"
    return dedent(
        f"""
        You are a concise interview question generator for Full Stack React/Node roles.
        Generate ONE interview question of difficulty "{difficulty}".
        This is question number {question_number} of 6.

        Questions already asked (do not repeat them):
        {asked}

        Context from resume:
        {resume_text[:500]}

        Respond with a JSON object following this contract:
        - questionId: "q{question_number}"
        - difficulty: "{difficulty}"
        - question: the question text.
        Return only JSON without markdown fences, text, or commentary.
        """
    ).strip()


def _build_evaluation_task(question: str, answer: str, difficulty: str) -> str:  # Build grading prompt
    return dedent(
        f"""
        You are an objective grader for technical interviews.

        Grading rubric (total 100 points):
        - Correctness: 0-40 points
        - Completeness (edge cases/examples): 0-30 points
        - Clarity & explanation: 0-20 points
        - Efficiency/best practices: 0-10 points

        Question: {question}
        Candidate's answer: {answer}
        Difficulty: {difficulty}

        Respond with a JSON object following this contract:
        - score: integer between 0 and 100.
        - feedback: one or two sentences on what was good and what was missing.
        Return only JSON without markdown fences, text, or commentary.
        """
    ).strip()


def _build_summary_task(questions: Sequence[Mapping[str, Any]], candidate_name: str) -> str:  # Build summary prompt
    lines = []
    for position, entry in enumerate(questions, start=1):
        score = entry.get("score")
        shown = "unscored" if score is None else f"{score}/100"
        lines.append(f"Q{position} ({entry.get('difficulty', 'unknown')}): {shown}")
    scores_text = "\n".join(lines)
    return dedent(
        f"""
        You are an interview summary generator.
        Aggregate the following question scores into a final assessment.

        Candidate: {candidate_name}
        Scores:
        {scores_text}

        Respond with a JSON object following this contract:
        - totalScore: the average score as an integer between 0 and 100.
        - breakdown: array of objects with questionId and score.
        - summary: a professional 3-4 sentence summary of the candidate's performance.
        Return only JSON without markdown fences, text, or commentary.
        """
    ).strip()
