import pytest
import requests

import feedback
from errors import UpstreamError
from feedback import FeedbackClient, build_feedback_prompt

MARKS = {"tamil": 80, "english": 75, "maths": 90, "science": 65, "social": 70}


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


def _gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


@pytest.fixture
def captured(monkeypatch):
    calls = {}

    def install(response=None, error=None):
        def fake_post(url, **kwargs):
            calls["url"] = url
            calls.update(kwargs)
            if error:
                raise error
            return response
        monkeypatch.setattr(feedback.requests, "post", fake_post)
        return calls
    return install


def test_prompt_includes_name_and_marks():
    prompt = build_feedback_prompt("Asha", MARKS)
    assert "Student name: Asha" in prompt
    assert "- Maths: 90" in prompt
    assert prompt.index("Tamil") < prompt.index("Social")


def test_returns_first_candidate_verbatim(captured):
    calls = captured(FakeResponse(body=_gemini_body("  Great job, Asha!\n")))
    client = FeedbackClient("secret", model="gemini-test", timeout=5)

    assert client.request_feedback("Asha", MARKS) == "  Great job, Asha!\n"
    assert calls["url"].endswith("/models/gemini-test:generateContent")
    assert calls["params"] == {"key": "secret"}
    assert calls["timeout"] == 5
    assert "Asha" in calls["json"]["contents"][0]["parts"][0]["text"]


def test_non_success_status(captured):
    captured(FakeResponse(status_code=403, text="API key not valid"))
    with pytest.raises(UpstreamError):
        FeedbackClient("bad").request_feedback("Asha", MARKS)


@pytest.mark.parametrize("body", [None, {}, {"candidates": []}, {"candidates": [{"content": {}}]}])
def test_malformed_response(captured, body):
    captured(FakeResponse(body=body))
    with pytest.raises(UpstreamError):
        FeedbackClient("secret").request_feedback("Asha", MARKS)


def test_connection_failure(captured):
    captured(error=requests.ConnectionError("name resolution failed"))
    with pytest.raises(UpstreamError) as exc:
        FeedbackClient("secret").request_feedback("Asha", MARKS)
    assert "name resolution" not in exc.value.message
