import pytest
import requests

from rapflow.core.config import BackendConfig
from rapflow.core.errors import ConfigurationError, EmptyResponseError, UpstreamError
from rapflow.core.generation_client import (
    GENERIC_FAILURE,
    LyricsClient,
    build_messages,
    error_payload,
)
from rapflow.core.models import LENGTH_PROFILES, GenerationRequest, Length


class FakeResponse:
    def __init__(self, body=None, status=200, invalid_json=False):
        self.body = body
        self.status = status
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} Server Error")

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.body


class FakeSession:
    def __init__(self, response=None):
        self.headers = {}
        self.response = response
        self.posts = []

    def post(self, url, **kwargs):
        self.posts.append((url, kwargs))
        return self.response


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_client(response=None, api_key="sk-test"):
    session = FakeSession(response)
    config = BackendConfig(api_key=api_key, base_url="https://api.groq.com/openai/v1/", model="llama-3.1-8b-instant")
    return LyricsClient(config, session=session), session


REQUEST = GenerationRequest("Ocean Waves", "Chill", Length.SHORT)
PROFILE = LENGTH_PROFILES[Length.SHORT]


def test_posts_chat_completion():
    client, session = make_client(FakeResponse(completion("  wave after wave\n")))

    assert client.generate(REQUEST, PROFILE) == "wave after wave"

    url, kwargs = session.posts[0]
    assert url == "https://api.groq.com/openai/v1/chat/completions"
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["json"]["model"] == "llama-3.1-8b-instant"
    assert kwargs["json"]["max_tokens"] == 200
    assert kwargs["json"]["temperature"] == 0.85
    assert kwargs["timeout"] == 60.0
    assert session.headers["User-Agent"].startswith("rapflow/")


def test_prompt_names_theme_mood_and_length():
    messages = build_messages(REQUEST, PROFILE)
    assert messages[0]["role"] == "system"
    user = messages[1]["content"]
    assert "Ocean Waves" in user
    assert "Chill" in user
    assert "8 lines" in user


def test_missing_key_never_calls_backend():
    client, session = make_client(api_key="")
    with pytest.raises(ConfigurationError) as info:
        client.generate(REQUEST, PROFILE)
    assert str(info.value) == GENERIC_FAILURE
    assert session.posts == []


def test_http_error():
    client, _ = make_client(FakeResponse(status=502))
    with pytest.raises(UpstreamError) as info:
        client.generate(REQUEST, PROFILE)
    assert "502" in info.value.detail


def test_invalid_json():
    client, _ = make_client(FakeResponse(invalid_json=True))
    with pytest.raises(UpstreamError):
        client.generate(REQUEST, PROFILE)


@pytest.mark.parametrize("body", [{}, {"choices": []}, {"choices": [{}]}, None])
def test_unexpected_shape(body):
    client, _ = make_client(FakeResponse(body))
    with pytest.raises(UpstreamError):
        client.generate(REQUEST, PROFILE)


@pytest.mark.parametrize("content", ["", "   \n", None])
def test_empty_content(content):
    client, _ = make_client(FakeResponse(completion(content)))
    with pytest.raises(EmptyResponseError):
        client.generate(REQUEST, PROFILE)


def test_health():
    client, _ = make_client()
    health = client.health()
    assert health["status"] == "ok"
    assert "T" in health["timestamp"]


class TestErrorPayload:
    def test_production_hides_details(self):
        err = UpstreamError(GENERIC_FAILURE, detail="401 Unauthorized")
        assert error_payload(err, expose_details=False) == {"error": GENERIC_FAILURE}

    def test_development_includes_details(self):
        err = UpstreamError(GENERIC_FAILURE, detail="401 Unauthorized")
        assert error_payload(err, expose_details=True) == {
            "error": GENERIC_FAILURE,
            "details": "401 Unauthorized",
        }
