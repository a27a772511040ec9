import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import settings
from config.registry import bind_model, EVALUATE_KEY, EXTRACT_KEY, QUESTION_KEY, SUMMARY_KEY


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch, tmp_path):
    db_path = tmp_path / "test.db"
    monkeypatch.setattr(settings, "DB_PATH", str(db_path), raising=False)
    monkeypatch.setattr(settings, "SNAPSHOT_DIR", str(tmp_path / "sessions"), raising=False)
    yield db_path


def _fake_evaluate(question: str, answer: str, difficulty: str, **_) -> dict:
    if not answer.strip():
        return {"score": 0, "feedback": "No answer was provided."}
    return {"score": 80, "feedback": "Good coverage of the main points."}


@pytest.fixture(autouse=True)
def fake_models():
    calls: list[str] = []

    def extract(resume_text: str, **_):
        calls.append(EXTRACT_KEY)
        return {
            "fields": {"name": "Ada Lovelace", "email": "ada@example.com", "phone": ""},
            "missing": ["phone"],
            "message": "Resume uploaded successfully!",
        }

    def question(difficulty: str, question_number: int, **_):
        calls.append(QUESTION_KEY)
        return {
            "questionId": f"q{question_number}",
            "difficulty": difficulty,
            "question": f"Question {question_number}: explain a {difficulty} React concept.",
        }

    def evaluate(**kwargs):
        calls.append(EVALUATE_KEY)
        return _fake_evaluate(**kwargs)

    def summary(questions, candidate_name: str, **_):
        calls.append(SUMMARY_KEY)
        return {"totalScore": 0, "breakdown": [], "summary": f"{candidate_name} showed solid fundamentals."}

    bind_model(EXTRACT_KEY, extract)
    bind_model(QUESTION_KEY, question)
    bind_model(EVALUATE_KEY, evaluate)
    bind_model(SUMMARY_KEY, summary)
    return calls
