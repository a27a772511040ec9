from __future__ import annotations  # Candidate record domain models

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

RecordStatus = Literal["in-progress", "completed"]


class RecordModel(BaseModel):  # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class StoredQuestion(RecordModel):  # Question row as persisted with a record
    question_id: str = ""
    question_number: int = 0
    difficulty: str = ""
    question: str = ""
    answer: str = ""
    score: Optional[float] = None
    feedback: str = ""
    time_limit: int = 0
    time_taken: int = 0


class StoredMessage(RecordModel):  # Pre-interview chat line
    sender: str = "ai"
    text: str = ""
    timestamp: str = ""


class ProfileFields(RecordModel):  # Identity and contact fields
    name: str = ""
    email: str = ""
    phone: str = ""
    designation: str = ""
    location: str = ""
    github: str = ""
    linkedin: str = ""


class CandidateRecord(ProfileFields):  # Persistent outcome of one interview
    id: str
    session_id: Optional[str] = None
    resume_text: str = ""
    questions: List[StoredQuestion] = Field(default_factory=list)
    total_score: int = 0
    summary: str = ""
    pre_interview_chat: List[StoredMessage] = Field(default_factory=list)
    status: RecordStatus = "in-progress"
    interview_started_at: Optional[str] = None
    completed_at: Optional[str] = None
    created_at: str
    updated_at: str


__all__ = [
    "RecordStatus",
    "RecordModel",
    "StoredQuestion",
    "StoredMessage",
    "ProfileFields",
    "CandidateRecord",
]
