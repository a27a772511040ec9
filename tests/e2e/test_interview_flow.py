from io import BytesIO

from docx import Document
from fastapi.testclient import TestClient

from api_server import app
from config.registry import QUESTION_KEY, bind_model
from interview_session.driver import InterviewDriver
from interview_session.errors import AiUnavailable
from interview_session.http_client import HttpInterviewClient
from services.checkpoints import ProgressCheckpointer


def _resume() -> bytes:
    document = Document()
    document.add_paragraph("Ada Lovelace")
    document.add_paragraph("ada@example.com")
    document.add_paragraph("Full stack developer, React and Node.js")
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


class Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _driver(tmp_path, clock):
    api = HttpInterviewClient(TestClient(app))
    return InterviewDriver(
        api,
        checkpointer=ProgressCheckpointer(api, inline=True),
        clock=clock,
        snapshot_dir=str(tmp_path / "snapshots"),
    ), api


def test_full_interview_over_http(tmp_path, fake_models):
    clock = Clock()
    driver, api = _driver(tmp_path, clock)

    driver.upload("resume.docx", _resume())
    assert driver.session.status == "collecting-fields"
    driver.supply_field("phone", "555-0100")
    assert driver.session.status == "ready"

    driver.start()
    for index in range(6):
        assert driver.session.current_question_index == index
        if index == 2:
            clock.now += 120
            assert driver.tick()
        else:
            driver.update_draft("A detailed answer")
            driver.submit_answer()

    session = driver.session
    assert session.status == "completed"
    assert session.questions[2].answer == ""
    assert session.questions[2].score == 0
    assert session.total_score == 67

    candidates = api.list_candidates()
    assert len(candidates) == 1
    record = candidates[0]
    assert record["id"] == session.candidate_id
    assert record["status"] == "completed"
    assert record["phone"] == "555-0100"
    assert [item["questionNumber"] for item in record["questions"]] == [1, 2, 3, 4, 5, 6]
    assert record["preInterviewChat"]


def test_ai_outage_is_recoverable(tmp_path):
    clock = Clock()
    driver, _ = _driver(tmp_path, clock)
    driver.upload("resume.docx", _resume())
    driver.supply_field("phone", "555-0100")

    def down(**_):
        raise AiUnavailable("AI service unavailable. Please try again in a moment.")

    bind_model(QUESTION_KEY, down)
    driver.start()
    assert driver.session.status == "error"
    assert driver.session.error

    bind_model(QUESTION_KEY, lambda question_number, **_: {"question": f"Question {question_number}?"})
    driver.retry()
    assert driver.session.pending == "await_answer"
    assert driver.session.questions[0].difficulty == "easy"
