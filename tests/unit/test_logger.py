import json
import logging

from observability import logger as obs_logger


def _record(payload):
    record = logging.LogRecord("interview", logging.INFO, "", 0, payload["kind"], (), None)
    record.payload = payload
    return record


def test_event_renders_as_human_line_and_json():
    payload = {"ts": 1.0, "kind": "transition", "session_id": "s1", "from": "ready", "to": "interviewing", "extra": 3}
    human = obs_logger._HumanFormatter().format(_record(payload))
    assert human.endswith("session=s1 kind=transition from=ready to=interviewing")

    line = obs_logger._JsonFormatter().format(_record(payload))
    assert json.loads(line) == payload


def test_log_event_reaches_handlers():
    seen = []

    class Collect(logging.Handler):
        def emit(self, record):
            seen.append(record.payload)

    handler = Collect()
    obs_logger._ensure_handlers()
    obs_logger._logger.addHandler(handler)
    try:
        obs_logger.log_event("evaluated", "s2", question_id="q1", score=80)
    finally:
        obs_logger._logger.removeHandler(handler)
    assert seen[-1]["kind"] == "evaluated"
    assert seen[-1]["score"] == 80
