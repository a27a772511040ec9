from __future__ import annotations  # HTTP client for the interview assistant API

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .errors import AiUnavailable, PersistenceFailure, ValidationFailure
from .models import ChatMessage, CandidateProfile, QuestionEntry

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"


class HttpInterviewClient:  # Typed wrapper over the /api endpoints
    def __init__(self, http: Optional[httpx.Client] = None, *, base_url: str = DEFAULT_BASE_URL, timeout: float = 60.0) -> None:
        self._owns_http = http is None
        self._http = http if http is not None else httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:  # Release the underlying HTTP client when owned
        if self._owns_http:
            self._http.close()

    def upload_resume(self, filename: str, data: bytes) -> Dict[str, Any]:  # Extract profile fields from a resume file
        return self._request("POST", "/api/upload-resume", files={"resume": (filename, data)})

    def next_question(
        self,
        question_number: int,
        difficulty: str,
        resume_text: str,
        previous_questions: Sequence[str] = (),
    ) -> Dict[str, Any]:  # Request the question at a ledger position
        payload = {
            "questionNumber": question_number,
            "difficulty": difficulty,
            "resumeText": resume_text,
            "previousQuestions": list(previous_questions),
        }
        return self._action("next_question", payload)

    def submit_answer(self, entry: QuestionEntry, answer: str, *, is_last: bool) -> Dict[str, Any]:  # Ask for an evaluation
        payload = {
            "questionId": entry.question_id,
            "question": entry.question,
            "answer": answer,
            "difficulty": entry.difficulty,
            "isLastQuestion": is_last,
        }
        return self._action("submit_answer", payload)

    def submit_field(self, field: str, value: str) -> Dict[str, Any]:
        return self._action("submit_field", {"fieldName": field, "fieldValue": value})

    def generate_summary(self, questions: Sequence[QuestionEntry], candidate_name: str) -> Dict[str, Any]:
        body = {"questions": [entry.to_wire() for entry in questions], "candidateName": candidate_name or "Candidate"}
        return self._request("POST", "/api/generate-summary", json=body)

    def save_candidate(
        self,
        profile: CandidateProfile,
        *,
        session_id: Optional[str],
        resume_text: str,
        questions: Sequence[QuestionEntry],
        total_score: int,
        summary: str,
        chat: Sequence[ChatMessage],
    ) -> Dict[str, Any]:  # Persist the completed interview
        body = {
            **profile.to_wire(),
            "sessionId": session_id,
            "resumeText": resume_text,
            "questions": [entry.to_wire() for entry in questions],
            "totalScore": total_score,
            "summary": summary,
            "preInterviewChat": [message.to_wire() for message in chat],
        }
        return self._request("POST", "/api/save-candidate", json=body, checkpoint=True)

    def save_progress(
        self,
        profile: CandidateProfile,
        *,
        session_id: str,
        resume_text: str,
        questions: Sequence[QuestionEntry],
        chat: Sequence[ChatMessage],
        interview_started_at: Optional[str],
    ) -> Dict[str, Any]:  # Upsert the in-progress record
        body = {
            "sessionId": session_id,
            "profile": profile.to_wire(),
            "preInterviewChat": [message.to_wire() for message in chat],
            "questions": [entry.to_wire() for entry in questions],
            "resumeText": resume_text,
            "interviewStartedAt": interview_started_at,
        }
        return self._request("POST", "/api/save-progress", json=body, checkpoint=True)

    def update_chat(self, email: str, chat: Sequence[ChatMessage]) -> Dict[str, Any]:
        body = {"email": email, "chatMessages": [message.to_wire() for message in chat]}
        return self._request("POST", "/api/update-chat", json=body, checkpoint=True)

    def check_candidate(self, email: str) -> Dict[str, Any]:
        return self._request("POST", "/api/check-candidate", json={"email": email})

    def list_candidates(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/candidates")["candidates"]

    def get_candidate(self, candidate_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/candidate/{candidate_id}")["candidate"]

    def delete_candidate(self, candidate_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/candidate/{candidate_id}")

    def _action(self, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/interview-action", json={"action": action, "payload": payload})

    def _request(self, method: str, path: str, *, checkpoint: bool = False, **kwargs: Any) -> Dict[str, Any]:
        """Send a request and translate failures into interview errors.

        Checkpoint requests raise ``PersistenceFailure`` for any failure;
        other requests raise ``AiUnavailable`` for transport errors and 5xx
        responses, ``KeyError`` for 404 and ``ValidationFailure`` for other
        4xx responses.
        """

        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            if checkpoint:
                raise PersistenceFailure(f"{path}: {exc}") from exc
            raise AiUnavailable("AI service unavailable. Please try again in a moment.") from exc
        if response.status_code < 400:
            try:
                return response.json()
            except ValueError as exc:
                logger.warning("%s %s returned a non-JSON body", method, path)
                if checkpoint:
                    raise PersistenceFailure(f"{path}: invalid response body") from exc
                raise AiUnavailable("AI service unavailable. Please try again in a moment.") from exc
        detail = _detail(response)
        logger.warning("%s %s -> %d %s", method, path, response.status_code, detail)
        if checkpoint:
            raise PersistenceFailure(f"{path}: {response.status_code} {detail}")
        if response.status_code == 404:
            raise KeyError(detail or path)
        if response.status_code >= 500:
            raise AiUnavailable(detail or "AI service unavailable. Please try again in a moment.")
        raise ValidationFailure(detail or f"Request failed with status {response.status_code}")


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or "")
    return ""


__all__ = ["HttpInterviewClient", "DEFAULT_BASE_URL"]
