import pytest

from interview_session.driver import InterviewDriver
from interview_session.errors import AiUnavailable, ValidationFailure
from services.checkpoints import ProgressCheckpointer


class FakeClient:
    def __init__(self) -> None:
        self.fail_next_question = False
        self.on_submit = None
        self.saved = []
        self.progress = []
        self.crash_on_save = False

    def upload_resume(self, filename, data):
        if not filename.endswith((".pdf", ".docx")):
            raise ValidationFailure("Only PDF and DOCX files are allowed")
        return {
            "fields": {"name": "Ada", "email": "ada@example.com", "phone": ""},
            "missing": ["phone"],
            "message": "Resume uploaded successfully!",
            "resumeText": "React and Node developer",
        }

    def next_question(self, number, difficulty, resume_text, previous):
        if self.fail_next_question:
            raise AiUnavailable("AI service unavailable. Please try again in a moment.")
        return {"questionId": f"q{number}", "difficulty": difficulty, "question": f"Question {number}?"}

    def submit_answer(self, entry, answer, *, is_last):
        if self.on_submit is not None:
            self.on_submit()
        score = 0 if not answer.strip() else 50 + 5 * entry.question_number
        return {"type": "eval", "questionId": entry.question_id, "score": score, "feedback": "ok", "moveToSummary": is_last}

    def generate_summary(self, questions, candidate_name):
        return {"type": "final", "totalScore": 0, "breakdown": [], "summary": "Done."}

    def save_candidate(self, profile, **kwargs):
        if self.crash_on_save:
            raise RuntimeError("connection reset during save")
        self.saved.append(kwargs)
        return {"message": "saved", "candidateId": "cand-1"}

    def save_progress(self, profile, **kwargs):
        self.progress.append(kwargs)
        return {"success": True, "candidateId": "cand-1"}

    def update_chat(self, email, chat):
        return {"success": True}


class Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def driver(client, clock, tmp_path):
    return InterviewDriver(
        client,
        checkpointer=ProgressCheckpointer(client, inline=True),
        clock=clock,
        snapshot_dir=str(tmp_path),
    )


def _ready(driver):
    driver.upload("cv.pdf", b"data")
    driver.supply_field("phone", "555-0100")
    return driver


def test_upload_then_collect_missing_field(driver):
    driver.upload("cv.pdf", b"data")
    assert driver.session.status == "collecting-fields"
    driver.supply_field("phone", "555-0100")
    assert driver.session.status == "ready"
    assert driver.snapshot.profile.phone == "555-0100"


def test_bad_upload_leaves_state_unchanged(driver):
    with pytest.raises(ValidationFailure):
        driver.upload("cv.txt", b"data")
    assert driver.session.status == "idle"


def test_full_interview_runs_sequentially(driver, client):
    _ready(driver).start()
    assert driver.session.pending == "await_answer"
    assert driver.time_remaining() == 20
    for _ in range(6):
        assert driver.submit_answer("A thoughtful answer")
    session = driver.session
    assert session.status == "completed"
    assert session.pending is None
    assert [entry.difficulty for entry in session.questions] == ["easy", "easy", "medium", "medium", "hard", "hard"]
    assert session.total_score == 68
    assert session.candidate_id == "cand-1"
    assert len(client.saved) == 1
    assert client.saved[0]["session_id"] == session.session_id


def test_timer_expiry_submits_empty_draft(driver, clock):
    _ready(driver).start()
    clock.now += 25
    assert driver.tick()
    first = driver.session.questions[0]
    assert first.answer == ""
    assert first.score == 0
    assert first.time_taken == 20
    assert driver.session.current_question_index == 1


def test_tick_before_expiry_does_nothing(driver, clock):
    _ready(driver).start()
    driver.update_draft("partial")
    clock.now += 5
    assert not driver.tick()
    assert driver.session.questions[0].answer == ""


def test_tick_waits_for_the_full_time_limit(driver, clock):
    _ready(driver).start()
    clock.now += 19.5
    assert driver.time_remaining() == 1
    assert not driver.tick()
    clock.now += 0.5
    assert driver.time_remaining() == 0
    assert driver.tick()
    assert driver.session.current_question_index == 1


def test_reentrant_submission_is_rejected(driver, client):
    _ready(driver).start()
    results = []
    client.on_submit = lambda: results.append(driver.submit_answer("again"))
    assert driver.submit_answer("first")
    assert results == [False]
    assert driver.session.questions[0].answer == "first"


def test_ai_failure_moves_to_error_and_retry_recovers(driver, client):
    _ready(driver)
    client.fail_next_question = True
    driver.start()
    assert driver.session.status == "error"
    assert driver.session.pending == "generate_question"

    client.fail_next_question = False
    driver.retry()
    assert driver.session.status == "interviewing"
    assert driver.session.pending == "await_answer"
    assert len(driver.session.questions) == 1


def test_restore_offers_continue(driver, client, clock, tmp_path):
    _ready(driver).start()
    driver.submit_answer("one")
    driver.submit_answer("two")

    revived = InterviewDriver(client, checkpointer=ProgressCheckpointer(client, inline=True), clock=clock, snapshot_dir=str(tmp_path))
    assert revived.restore()
    clock.now += 300
    revived.choose_resume("continue")
    assert revived.session.current_question_index == 2
    assert len(revived.session.questions) == 3
    assert revived.time_remaining() == 60


def test_restore_restart_clears_state(driver, client, clock, tmp_path):
    _ready(driver).start()
    revived = InterviewDriver(client, checkpointer=ProgressCheckpointer(client, inline=True), clock=clock, snapshot_dir=str(tmp_path))
    assert revived.restore()
    revived.choose_resume("restart")
    assert revived.session.status == "idle"
    assert revived.session.questions == ()


def test_start_over_resets_session_id(driver):
    _ready(driver).start()
    previous = driver.session_id
    driver.start_over()
    assert driver.session.status == "idle"
    assert driver.session_id != previous


def test_restore_while_finalizing_saves_the_candidate(driver, client, clock, tmp_path):
    _ready(driver).start()
    client.crash_on_save = True
    for number in range(1, 6):
        driver.submit_answer(f"answer {number}")
    with pytest.raises(RuntimeError):
        driver.submit_answer("answer 6")
    assert client.saved == []

    client.crash_on_save = False
    revived = InterviewDriver(client, checkpointer=ProgressCheckpointer(client, inline=True), clock=clock, snapshot_dir=str(tmp_path))
    assert revived.restore()
    assert revived.session.status == "completed"
    assert revived.session.pending == "finalize"

    revived.choose_resume("continue")
    assert revived.session.pending is None
    assert revived.session.candidate_id == "cand-1"
    assert len(client.saved) == 1
