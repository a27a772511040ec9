"""FastAPI routes for the interview assistant."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

import ai_gateway
from api.schemas import (
    CandidateDetailResp,
    CandidateListResp,
    CheckCandidateReq,
    CheckCandidateResp,
    DeleteCandidateResp,
    EvaluationResp,
    FieldSavedResp,
    HealthResp,
    InterviewActionReq,
    NextQuestionPayload,
    QuestionResp,
    SaveCandidateReq,
    SaveCandidateResp,
    SaveProgressReq,
    SaveProgressResp,
    SubmitAnswerPayload,
    SubmitFieldPayload,
    SummaryReq,
    SummaryResp,
    UpdateChatReq,
    UpdateChatResp,
    UploadResp,
)
from candidate_records import CandidateStore
from config import EVALUATE_KEY, EXTRACT_KEY, QUESTION_KEY, SUMMARY_KEY, is_bound
from config.settings import settings
from interview_session import ledger
from interview_session.errors import AiUnavailable, ValidationFailure
from interview_session.models import PROFILE_FIELDS, REQUIRED_FIELDS
from resume_parsing import SUPPORTED_EXTENSIONS, extract_resume_text
from services.scoring import compute_total_score


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _candidate_store() -> CandidateStore:  # Construct candidate store
    return CandidateStore(Path(settings.DB_PATH))


def _parse(model, payload: Dict[str, Any]):
    try:
        return model.model_validate(payload or {})
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid payload: {exc.errors()[0]['msg']}") from exc


@router.get("/health", response_model=HealthResp)
def health() -> HealthResp:
    configured = all(is_bound(key) for key in (EXTRACT_KEY, QUESTION_KEY, EVALUATE_KEY, SUMMARY_KEY))
    return HealthResp(status="ok", aiConfigured=configured)


@router.post("/upload-resume", response_model=UploadResp)
async def upload_resume(resume: UploadFile = File(...)) -> UploadResp:
    filename = resume.filename or ""
    if not filename.lower().endswith(SUPPORTED_EXTENSIONS):
        raise HTTPException(status_code=400, detail="Only PDF and DOCX files are allowed")
    data = await resume.read()
    try:
        text = await run_in_threadpool(extract_resume_text, filename, data)
        extraction = await run_in_threadpool(ai_gateway.invoke, EXTRACT_KEY, resume_text=text)
    except ValidationFailure as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except AiUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error while processing resume")
        raise HTTPException(status_code=500, detail="Failed to process resume") from exc
    fields = extraction.extracted.model_dump()
    missing: List[str] = []
    for name in [*extraction.missing, *REQUIRED_FIELDS]:
        if name in PROFILE_FIELDS and name not in missing and not fields.get(name, "").strip():
            missing.append(name)
    return UploadResp(fields=fields, missing=missing, message=extraction.message, resumeText=text)


@router.post("/interview-action")
def interview_action(req: InterviewActionReq) -> Dict[str, Any]:
    handlers = {
        "submit_field": _submit_field,
        "next_question": _next_question,
        "submit_answer": _submit_answer,
    }
    handler = handlers.get(req.action)
    if handler is None:
        raise HTTPException(
            status_code=400,
            detail="Invalid action. Use: submit_field, next_question, or submit_answer",
        )
    try:
        return handler(req.payload).model_dump()
    except ValidationFailure as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except AiUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def _submit_field(payload: Dict[str, Any]) -> FieldSavedResp:
    body = _parse(SubmitFieldPayload, payload)
    if body.fieldName not in PROFILE_FIELDS:
        raise ValidationFailure(f"Unknown field '{body.fieldName}'")
    value = body.fieldValue.strip()
    if not value:
        raise ValidationFailure(f"A value for '{body.fieldName}' is required")
    return FieldSavedResp(
        field=body.fieldName,
        value=value,
        message=f"Thank you for providing your {body.fieldName}.",
    )


def _next_question(payload: Dict[str, Any]) -> QuestionResp:
    body = _parse(NextQuestionPayload, payload)
    expected = ledger.difficulty_for(body.questionNumber)
    if body.difficulty and body.difficulty != expected:
        logger.warning("Requested difficulty %s for question %d, using %s", body.difficulty, body.questionNumber, expected)
    generated = ai_gateway.invoke(
        QUESTION_KEY,
        difficulty=expected,
        question_number=body.questionNumber,
        resume_text=body.resumeText,
        previous_questions=body.previousQuestions,
    )
    entry = ledger.coerce_question(generated.model_dump(), body.questionNumber)
    return QuestionResp(
        questionId=entry.question_id,
        questionNumber=entry.question_number,
        difficulty=entry.difficulty,
        question=entry.question,
        timeLimit=entry.time_limit,
    )


def _submit_answer(payload: Dict[str, Any]) -> EvaluationResp:
    body = _parse(SubmitAnswerPayload, payload)
    evaluation = ai_gateway.invoke(
        EVALUATE_KEY,
        question=body.question,
        answer=body.answer,
        difficulty=body.difficulty,
    )
    return EvaluationResp(
        questionId=body.questionId,
        score=ledger.clamp_score(evaluation.score, question_id=body.questionId),
        feedback=evaluation.feedback,
        moveToSummary=body.isLastQuestion,
    )


@router.post("/generate-summary", response_model=SummaryResp)
def generate_summary(req: SummaryReq) -> SummaryResp:
    if not req.questions:
        raise HTTPException(status_code=400, detail="No questions provided for summary generation")
    try:
        result = ai_gateway.invoke(SUMMARY_KEY, questions=req.questions, candidate_name=req.candidateName)
    except AiUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    scores = [item.get("score") for item in req.questions]
    return SummaryResp(
        totalScore=compute_total_score(scores, result.totalScore),
        breakdown=[item.model_dump() for item in result.breakdown],
        summary=result.summary,
    )


@router.post("/save-candidate", response_model=SaveCandidateResp, status_code=201)
def save_candidate(req: SaveCandidateReq) -> SaveCandidateResp:
    profile = {name: getattr(req, name) for name in PROFILE_FIELDS}
    try:
        candidate_id = _candidate_store().finalize(
            profile=profile,
            questions=req.questions,
            session_id=req.sessionId,
            resume_text=req.resumeText,
            total_score=req.totalScore,
            summary=req.summary,
            chat=req.preInterviewChat,
        )
    except ValidationFailure as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unable to save candidate")
        raise HTTPException(status_code=500, detail="Failed to save candidate") from exc
    return SaveCandidateResp(message="Candidate saved successfully", candidateId=candidate_id)


@router.post("/save-progress", response_model=SaveProgressResp)
def save_progress(req: SaveProgressReq) -> SaveProgressResp:
    try:
        candidate_id, created = _candidate_store().save_progress(
            session_id=req.sessionId,
            profile=req.profile,
            chat=req.preInterviewChat,
            questions=req.questions,
            resume_text=req.resumeText,
            interview_started_at=req.interviewStartedAt,
        )
    except ValidationFailure as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unable to save progress")
        raise HTTPException(status_code=500, detail="Failed to save progress") from exc
    message = "Progress saved (new record)" if created else "Progress saved"
    return SaveProgressResp(success=True, message=message, candidateId=candidate_id)


@router.post("/update-chat", response_model=UpdateChatResp)
def update_chat(req: UpdateChatReq) -> UpdateChatResp:
    if not req.email or req.chatMessages is None:
        raise HTTPException(status_code=400, detail="Email and chat messages are required")
    try:
        _candidate_store().update_chat(req.email, req.chatMessages)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Candidate not found") from exc
    return UpdateChatResp(success=True, message="Chat updated")


@router.post("/check-candidate", response_model=CheckCandidateResp)
def check_candidate(req: CheckCandidateReq) -> CheckCandidateResp:
    if not req.email:
        raise HTTPException(status_code=400, detail="Email is required")
    candidate_id = _candidate_store().find_by_email(req.email)
    return CheckCandidateResp(exists=candidate_id is not None, candidateId=candidate_id)


@router.get("/candidates", response_model=CandidateListResp)
def list_candidates() -> CandidateListResp:
    records = _candidate_store().list_candidates()
    return CandidateListResp(candidates=[record.to_wire() for record in records], count=len(records))


@router.get("/candidate/{candidate_id}", response_model=CandidateDetailResp)
def get_candidate(candidate_id: str) -> CandidateDetailResp:
    try:
        record = _candidate_store().get(candidate_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Candidate not found") from exc
    return CandidateDetailResp(candidate=record.to_wire())


@router.delete("/candidate/{candidate_id}", response_model=DeleteCandidateResp)
def delete_candidate(candidate_id: str) -> DeleteCandidateResp:
    try:
        record = _candidate_store().delete(candidate_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Candidate not found") from exc
    return DeleteCandidateResp(
        message="Candidate deleted successfully",
        deletedCandidate={"id": record.id, "name": record.name, "email": record.email},
    )
