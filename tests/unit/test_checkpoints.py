from interview_session import machine
from interview_session.errors import PersistenceFailure
from services.checkpoints import ProgressCheckpointer


class RecordingClient:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = []

    def save_progress(self, profile, **kwargs):
        self.calls.append(("save_progress", kwargs["session_id"]))
        if self.fail:
            raise PersistenceFailure("records service down")
        return {"success": True, "candidateId": "c1"}

    def update_chat(self, email, chat):
        self.calls.append(("update_chat", email))
        return {"success": True}


def _snapshot(email="ada@example.com"):
    return machine.transition(
        machine.initial_snapshot(),
        machine.ResumeUploaded(resume_text="cv", extracted={"name": "Ada", "email": email, "phone": "1"}),
    )


def test_first_checkpoint_saves_then_chat_updates():
    client = RecordingClient()
    checkpointer = ProgressCheckpointer(client, inline=True)
    checkpointer.checkpoint(_snapshot(), "s1", chat_only=True)
    checkpointer.checkpoint(_snapshot(), "s1", chat_only=True)
    checkpointer.checkpoint(_snapshot(), "s1")
    assert client.calls == [("save_progress", "s1"), ("update_chat", "ada@example.com"), ("save_progress", "s1")]
    assert checkpointer.candidate_id == "c1"


def test_skips_until_identity_known():
    client = RecordingClient()
    checkpointer = ProgressCheckpointer(client, inline=True)
    checkpointer.checkpoint(_snapshot(email=""), "s1", chat_only=True)
    assert client.calls == []


def test_failures_are_swallowed():
    client = RecordingClient(fail=True)
    checkpointer = ProgressCheckpointer(client, inline=True)
    checkpointer.checkpoint(_snapshot(), "s1")
    assert checkpointer.failures == 1
    assert checkpointer.candidate_id is None


def test_background_worker_runs_in_order():
    client = RecordingClient()
    checkpointer = ProgressCheckpointer(client)
    try:
        for _ in range(3):
            checkpointer.checkpoint(_snapshot(), "s1")
        checkpointer.flush(timeout=5)
    finally:
        checkpointer.close()
    assert client.calls == [("save_progress", "s1")] * 3


def test_reset_forgets_record():
    client = RecordingClient()
    checkpointer = ProgressCheckpointer(client, inline=True)
    checkpointer.checkpoint(_snapshot(), "s1")
    checkpointer.reset()
    assert checkpointer.candidate_id is None


class BrokenClient(RecordingClient):
    def save_progress(self, profile, **kwargs):
        self.calls.append(("save_progress", kwargs["session_id"]))
        raise ValueError("Expecting value: line 1 column 1 (char 0)")


def test_unexpected_errors_are_swallowed_inline():
    checkpointer = ProgressCheckpointer(BrokenClient(), inline=True)
    checkpointer.checkpoint(_snapshot(), "s1")
    checkpointer.reset()
    assert checkpointer.failures == 1


def test_unexpected_errors_do_not_surface_from_reset():
    client = BrokenClient()
    checkpointer = ProgressCheckpointer(client)
    try:
        checkpointer.checkpoint(_snapshot(), "s1")
        checkpointer.reset()
    finally:
        checkpointer.close()
    assert checkpointer.failures == 1
    assert checkpointer.candidate_id is None
