import base64

import pytest
import requests

from optical_axis_app.config import GenerationConfig, generation_config
from optical_axis_app.models.prompt_state import PromptMode, PromptState
from optical_axis_app.services.text_generation import GeminiClient, TextGenerationError, extract_text


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def _answer(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _client(session, api_key="test-key"):
    return GeminiClient(api_key=api_key, config=GenerationConfig(model="test-model"), session=session)


def test_payload_shape_with_image():
    client = _client(FakeSession())
    payload = client.build_payload("system", "hello", 0.5, image_png=b"\x89PNG")

    assert payload["systemInstruction"] == {"parts": [{"text": "system"}]}
    parts = payload["contents"][0]["parts"]
    assert payload["contents"][0]["role"] == "user"
    assert parts[0] == {"text": "hello"}
    assert parts[1]["inlineData"]["mimeType"] == "image/png"
    assert base64.b64decode(parts[1]["inlineData"]["data"]) == b"\x89PNG"
    assert payload["generationConfig"] == {"temperature": 0.5}


def test_payload_without_image_has_single_part():
    payload = _client(FakeSession()).build_payload("system", "hello", 0.3)
    assert len(payload["contents"][0]["parts"]) == 1


def test_generate_brief_posts_to_model_endpoint():
    session = FakeSession(FakeResponse(body=_answer("解析")))
    text = _client(session).generate_brief(PromptState(description="rain"), image_png=b"png")

    assert text == "解析"
    url, kwargs = session.calls[0]
    assert url.endswith("/models/test-model:generateContent")
    assert kwargs["headers"]["x-goog-api-key"] == "test-key"
    assert kwargs["json"]["generationConfig"]["temperature"] == pytest.approx(0.7)
    prompt = kwargs["json"]["contents"][0]["parts"][0]["text"]
    assert "Description: rain" in prompt
    assert "請看附圖" in prompt
    assert kwargs["timeout"] == 60.0


def test_compile_final_prompt_uses_lower_temperature():
    session = FakeSession(FakeResponse(body=_answer("**prompt**")))
    text = _client(session).compile_final_prompt("brief text", PromptMode.VIDEO)

    assert text == "**prompt**"
    _, kwargs = session.calls[0]
    assert kwargs["json"]["generationConfig"]["temperature"] == pytest.approx(0.3)
    assert "Video Generation" in kwargs["json"]["systemInstruction"]["parts"][0]["text"]


def test_compile_rejects_blank_brief_without_request():
    session = FakeSession(FakeResponse(body=_answer("unused")))
    with pytest.raises(TextGenerationError):
        _client(session).compile_final_prompt("   ", PromptMode.IMAGE)
    assert session.calls == []


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    client = _client(FakeSession(), api_key=None)
    assert not client.has_api_key
    with pytest.raises(TextGenerationError, match="API key"):
        client.generate("s", "p", 0.1)


def test_api_key_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    session = FakeSession(FakeResponse(body=_answer("ok")))
    _client(session, api_key="").generate("s", "p", 0.1)
    assert session.calls[0][1]["headers"]["x-goog-api-key"] == "from-env"


def test_http_error_status_raises():
    session = FakeSession(FakeResponse(status_code=403, text="forbidden"))
    with pytest.raises(TextGenerationError, match="403"):
        _client(session).generate("s", "p", 0.1)


def test_transport_error_is_wrapped():
    session = FakeSession(error=requests.ConnectionError("offline"))
    with pytest.raises(TextGenerationError) as excinfo:
        _client(session).generate("s", "p", 0.1)
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_invalid_json_raises():
    session = FakeSession(FakeResponse(body=None))
    with pytest.raises(TextGenerationError, match="JSON"):
        _client(session).generate("s", "p", 0.1)


def test_extract_text_joins_parts():
    body = {"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}
    assert extract_text(body) == "ab"


def test_extract_text_reports_block_reason():
    with pytest.raises(TextGenerationError, match="SAFETY"):
        extract_text({"promptFeedback": {"blockReason": "SAFETY"}})
    with pytest.raises(TextGenerationError):
        extract_text({"candidates": [{"content": {"parts": [{"text": "  "}]}}]})


def test_model_override_from_environment(monkeypatch):
    monkeypatch.setenv("OPTICAL_AXIS_MODEL", "gemini-custom")
    assert generation_config().model == "gemini-custom"
    monkeypatch.delenv("OPTICAL_AXIS_MODEL")
    assert generation_config().model == GenerationConfig().model
