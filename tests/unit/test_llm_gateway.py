import json

import pytest
from pydantic import BaseModel

import llm_gateway.llm_gateway as gw
from config import LlmRoute


class Verdict(BaseModel):
    score: int
    feedback: str


class FakeResponse:
    def __init__(self, status_code: int, body=None, text: str = "") -> None:
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("not json")
        return self._body


class FakeClient:
    def __init__(self, responses) -> None:
        self._responses = list(responses)
        self.requests = []

    def post(self, url, *, json, headers, timeout):
        self.requests.append({"url": url, "json": json, "headers": headers})
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _route(**overrides) -> LlmRoute:
    values = dict(
        name="test",
        base_url="http://example.com",
        endpoint="/v1/chat/completions",
        model="test-model",
        timeout_s=1.0,
        retry_delay_s=0.0,
    )
    values.update(overrides)
    return LlmRoute(**values)


def _ok(content: str) -> FakeResponse:
    return FakeResponse(200, {"choices": [{"message": {"content": content}}]})


def test_call_parses_fenced_json():
    client = FakeClient([_ok('```json\n{"score": 70, "feedback": "ok"}\n```')])
    result = gw.call("grade this", Verdict, cfg=_route(), client=client)
    assert result == Verdict(score=70, feedback="ok")
    assert client.requests[0]["url"] == "http://example.com/v1/chat/completions"
    assert client.requests[0]["json"]["messages"][0]["role"] == "system"


def test_retries_every_failure_kind_then_succeeds(monkeypatch):
    sleeps = []
    monkeypatch.setattr(gw.time, "sleep", lambda seconds: sleeps.append(seconds))
    client = FakeClient([FakeResponse(503, text="busy"), _ok("not json"), _ok(json.dumps({"score": 5, "feedback": "x"}))])
    result = gw.call("grade", Verdict, cfg=_route(retry_delay_s=1.0), client=client)
    assert result.score == 5
    assert sleeps == [1.0, 1.0]
    hint = client.requests[2]["json"]["messages"][-1]
    assert hint["role"] == "system"
    assert "failed validation" in hint["content"]


def test_raises_after_max_retries():
    client = FakeClient([RuntimeError("boom")] * 3)
    with pytest.raises(gw.LlmGatewayError):
        gw.call("grade", Verdict, cfg=_route(), client=client)
    assert len(client.requests) == 3


def test_api_key_header_from_environment(monkeypatch):
    monkeypatch.setenv("TEST_LLM_KEY", "secret")
    client = FakeClient([_ok('{"score": 1, "feedback": "f"}')])
    gw.call("grade", Verdict, cfg=_route(api_key_env="TEST_LLM_KEY"), client=client)
    assert client.requests[0]["headers"]["Authorization"] == "Bearer secret"
