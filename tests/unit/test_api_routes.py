from __future__ import annotations

from io import BytesIO

from docx import Document
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import router
from config.registry import EVALUATE_KEY, EXTRACT_KEY, QUESTION_KEY, bind_model
from interview_session.errors import AiUnavailable


app = FastAPI()
app.include_router(router)
client = TestClient(app)


def _docx_bytes(text: str) -> bytes:
    document = Document()
    document.add_paragraph(text)
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _unavailable(**_):
    raise AiUnavailable("AI service unavailable. Please try again in a moment.")


def test_health():
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["aiConfigured"] is True


def test_upload_resume_returns_fields_and_missing():
    resp = client.post(
        "/api/upload-resume",
        files={"resume": ("cv.docx", _docx_bytes("Ada Lovelace, ada@example.com"), "application/octet-stream")},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["fields"]["name"] == "Ada Lovelace"
    assert body["missing"] == ["phone"]
    assert "Ada Lovelace" in body["resumeText"]


def test_upload_rejects_other_file_types():
    resp = client.post("/api/upload-resume", files={"resume": ("cv.txt", b"hello", "text/plain")})
    assert resp.status_code == 400


def test_upload_maps_ai_failure_to_503():
    bind_model(EXTRACT_KEY, _unavailable)
    resp = client.post("/api/upload-resume", files={"resume": ("cv.docx", _docx_bytes("Ada"), "application/octet-stream")})
    assert resp.status_code == 503


def test_next_question_enforces_position():
    resp = client.post(
        "/api/interview-action",
        json={"action": "next_question", "payload": {"questionNumber": 5, "difficulty": "easy", "resumeText": "cv"}},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["type"] == "question"
    assert body["questionId"] == "q5"
    assert body["difficulty"] == "hard"
    assert body["timeLimit"] == 120


def test_next_question_out_of_range():
    resp = client.post("/api/interview-action", json={"action": "next_question", "payload": {"questionNumber": 7}})
    assert resp.status_code == 400


def test_submit_answer_clamps_and_flags_last_question():
    bind_model(EVALUATE_KEY, lambda **_: {"score": 104.6, "feedback": "excellent"})
    resp = client.post(
        "/api/interview-action",
        json={
            "action": "submit_answer",
            "payload": {"questionId": "q6", "question": "Q?", "answer": "A", "difficulty": "hard", "isLastQuestion": True},
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body == {"type": "eval", "questionId": "q6", "score": 100, "feedback": "excellent", "moveToSummary": True}


def test_submit_field_acknowledges():
    resp = client.post(
        "/api/interview-action",
        json={"action": "submit_field", "payload": {"fieldName": "phone", "fieldValue": " 555 "}},
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Thank you for providing your phone."
    assert resp.json()["value"] == "555"


def test_invalid_action():
    resp = client.post("/api/interview-action", json={"action": "dance", "payload": {}})
    assert resp.status_code == 400


def test_ai_unavailable_is_503():
    bind_model(QUESTION_KEY, _unavailable)
    resp = client.post("/api/interview-action", json={"action": "next_question", "payload": {"questionNumber": 1}})
    assert resp.status_code == 503
    assert resp.json()["detail"] == "AI service unavailable. Please try again in a moment."


def test_generate_summary_falls_back_to_mean():
    questions = [{"questionId": f"q{n}", "score": score} for n, score in enumerate([90, 80, 70, 60, 50, 40], 1)]
    resp = client.post("/api/generate-summary", json={"questions": questions, "candidateName": "Ada"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["type"] == "final"
    assert body["totalScore"] == 65


def test_generate_summary_requires_questions():
    resp = client.post("/api/generate-summary", json={"questions": []})
    assert resp.status_code == 400


def test_unknown_interview_action_is_rejected():
    response = client.post("/api/interview-action", json={"action": "skip_question", "payload": {}})
    assert response.status_code == 400
    assert "Invalid action" in response.json()["detail"]
