from __future__ import annotations  # Interview session value models

from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Difficulty = Literal["easy", "medium", "hard"]
SessionStatus = Literal["idle", "collecting-fields", "ready", "interviewing", "completed", "error"]
PendingStep = Literal["generate_question", "await_answer", "evaluate", "summarize", "finalize"]

MAX_QUESTIONS = 6
PROFILE_FIELDS: Tuple[str, ...] = ("name", "email", "phone", "designation", "location", "github", "linkedin")
REQUIRED_FIELDS: Tuple[str, ...] = ("name", "email", "phone")


class WireModel(BaseModel):  # Immutable model serialized with camelCase keys
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class CandidateProfile(WireModel):  # Profile fields collected before the interview
    name: str = ""
    email: str = ""
    phone: str = ""
    designation: str = ""
    location: str = ""
    github: str = ""
    linkedin: str = ""

    def missing(self, names: Sequence[str] = REQUIRED_FIELDS) -> List[str]:  # Names whose value is blank
        return [name for name in names if not getattr(self, name, "").strip()]

    def has_identity(self) -> bool:  # Name and email are both present
        return bool(self.name.strip() and self.email.strip())


class QuestionEntry(WireModel):  # One ledger row: question, answer and evaluation
    question_id: str
    question_number: int = Field(ge=1, le=MAX_QUESTIONS)
    difficulty: Difficulty
    question: str
    answer: str = ""
    score: Optional[int] = None
    feedback: str = ""
    time_limit: int = 0
    time_taken: int = 0

    @property
    def evaluated(self) -> bool:
        return self.score is not None


class ChatMessage(WireModel):  # Pre-interview transcript line
    sender: Literal["ai", "user"]
    text: str
    timestamp: str


class InterviewSession(WireModel):  # Workflow state owned by one interviewee
    session_id: Optional[str] = None
    status: SessionStatus = "idle"
    resume_text: str = ""
    questions: Tuple[QuestionEntry, ...] = ()
    current_question_index: int = Field(default=0, ge=0, le=MAX_QUESTIONS - 1)
    missing_fields: Tuple[str, ...] = ()
    total_score: int = 0
    summary: str = ""
    breakdown: Tuple[Dict[str, Any], ...] = ()
    error: Optional[str] = None
    start_time: Optional[str] = None
    pending: Optional[PendingStep] = None
    previous_status: Optional[SessionStatus] = None
    draft_answer: str = ""
    question_started_at: Optional[float] = None
    awaiting_resume_choice: bool = False
    candidate_id: Optional[str] = None
    events: Tuple[Dict[str, Any], ...] = ()

    @property
    def current_question(self) -> Optional[QuestionEntry]:
        if self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None


class SessionSnapshot(WireModel):  # Session, profile and transcript as one value
    session: InterviewSession = Field(default_factory=InterviewSession)
    profile: CandidateProfile = Field(default_factory=CandidateProfile)
    chat: Tuple[ChatMessage, ...] = ()


__all__ = [
    "Difficulty",
    "SessionStatus",
    "PendingStep",
    "MAX_QUESTIONS",
    "PROFILE_FIELDS",
    "REQUIRED_FIELDS",
    "WireModel",
    "CandidateProfile",
    "QuestionEntry",
    "ChatMessage",
    "InterviewSession",
    "SessionSnapshot",
]
