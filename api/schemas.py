"""Pydantic schemas for the interview assistant API."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class InterviewActionReq(BaseModel):
    action: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    candidateId: Optional[str] = None
    sessionId: Optional[str] = None


class NextQuestionPayload(BaseModel):
    questionNumber: int
    difficulty: Optional[str] = None
    resumeText: str = ""
    previousQuestions: List[str] = Field(default_factory=list)


class SubmitAnswerPayload(BaseModel):
    questionId: str
    question: str
    answer: str = ""
    difficulty: str = "medium"
    isLastQuestion: bool = False


class SubmitFieldPayload(BaseModel):
    fieldName: str
    fieldValue: str = ""


class QuestionResp(BaseModel):
    type: Literal["question"] = "question"
    questionId: str
    questionNumber: int
    difficulty: str
    question: str
    timeLimit: int


class EvaluationResp(BaseModel):
    type: Literal["eval"] = "eval"
    questionId: str
    score: int
    feedback: str
    moveToSummary: bool


class FieldSavedResp(BaseModel):
    type: Literal["field_saved"] = "field_saved"
    field: str
    value: str
    message: str


class SummaryReq(BaseModel):
    questions: List[Dict[str, Any]] = Field(default_factory=list)
    candidateName: str = "Candidate"


class SummaryResp(BaseModel):
    type: Literal["final"] = "final"
    totalScore: int
    breakdown: List[Dict[str, Any]] = Field(default_factory=list)
    summary: str


class UploadResp(BaseModel):
    fields: Dict[str, str]
    missing: List[str]
    message: str
    resumeText: str


class SaveCandidateReq(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    designation: str = ""
    location: str = ""
    github: str = ""
    linkedin: str = ""
    sessionId: Optional[str] = None
    resumeText: str = ""
    questions: List[Dict[str, Any]] = Field(default_factory=list)
    totalScore: Optional[Any] = None
    summary: str = ""
    preInterviewChat: Optional[List[Dict[str, Any]]] = None


class SaveCandidateResp(BaseModel):
    message: str
    candidateId: str


class SaveProgressReq(BaseModel):
    sessionId: Optional[str] = None
    profile: Dict[str, Any] = Field(default_factory=dict)
    preInterviewChat: Optional[List[Dict[str, Any]]] = None
    questions: Optional[List[Dict[str, Any]]] = None
    resumeText: str = ""
    interviewStartedAt: Optional[str] = None


class SaveProgressResp(BaseModel):
    success: bool
    message: str
    candidateId: str


class UpdateChatReq(BaseModel):
    email: Optional[str] = None
    chatMessages: Optional[List[Dict[str, Any]]] = None


class UpdateChatResp(BaseModel):
    success: bool
    message: str


class CheckCandidateReq(BaseModel):
    email: Optional[str] = None


class CheckCandidateResp(BaseModel):
    exists: bool
    candidateId: Optional[str] = None


class CandidateListResp(BaseModel):
    candidates: List[Dict[str, Any]]
    count: int


class CandidateDetailResp(BaseModel):
    candidate: Dict[str, Any]


class DeletedCandidate(BaseModel):
    id: str
    name: str
    email: str


class DeleteCandidateResp(BaseModel):
    message: str
    deletedCandidate: DeletedCandidate


class HealthResp(BaseModel):
    status: str
    aiConfigured: bool
