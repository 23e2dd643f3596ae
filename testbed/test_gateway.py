import pytest

from src.sns_writer.gateway import (
    SYSTEM_INSTRUCTION,
    GenerationGateway,
    ServiceError,
    ValidationError,
    extract_error_message,
)
from src.sns_writer.llm_client import UpstreamError
from src.sns_writer.settings import GatewaySettings


class CountingClient:
    def __init__(self, response=None, error=None):
        self.response = response if response is not None else {
            "choices": [{"message": {"role": "assistant", "content": "生成された文章"}}]
        }
        self.error = error
        self.calls = []

    def create_chat_completion(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.response


class ErrorWithBody(Exception):
    def __init__(self, body):
        super().__init__("")
        self.error = body


def _gateway(client, use_mock=False):
    return GenerationGateway(GatewaySettings(use_mock=use_mock, api_key="sk-test"), client=client)


@pytest.mark.parametrize("prompt", ["", "   ", "\n\t", None])
def test_blank_prompt_is_rejected_without_upstream_call(prompt):
    client = CountingClient()

    result = _gateway(client).generate(prompt)

    assert not result.ok
    assert isinstance(result.error, ValidationError)
    assert result.error.message == "prompt is required"
    assert result.status_code == 400
    assert result.to_payload() == {"error": "prompt is required"}
    assert client.calls == []


def test_mock_mode_embeds_prompt_and_skips_client():
    client = CountingClient()

    result = _gateway(client, use_mock=True).generate("猫の写真")

    assert result.ok
    assert "猫の写真" in result.text
    assert result.source == "mock"
    assert client.calls == []


def test_real_call_sends_instruction_and_prompt_verbatim():
    client = CountingClient()

    result = _gateway(client).generate("  お題そのまま  ")

    assert result.ok
    assert result.text == "生成された文章"
    assert result.status_code == 200
    assert client.calls == [
        [
            {"role": "developer", "content": SYSTEM_INSTRUCTION},
            {"role": "user", "content": "  お題そのまま  "},
        ]
    ]


@pytest.mark.parametrize("response", [
    {"choices": []},
    {"choices": [{"message": {"content": None}}]},
    {"choices": [{}]},
    {},
])
def test_missing_completion_content_is_empty_success(response):
    result = _gateway(CountingClient(response=response)).generate("お題")

    assert result.ok
    assert result.text == ""
    assert result.to_payload() == {"text": ""}


def test_upstream_error_message_is_passed_through():
    client = CountingClient(error=RuntimeError("rate limit exceeded"))

    result = _gateway(client).generate("お題")

    assert isinstance(result.error, ServiceError)
    assert result.error.message == "rate limit exceeded"
    assert result.status_code == 500
    assert len(client.calls) == 1


def test_nested_upstream_message_wins_over_generic_message():
    error = UpstreamError(
        "OpenAI API error (429): {...}",
        status=429,
        upstream_message="rate limit exceeded",
    )

    result = _gateway(CountingClient(error=error)).generate("お題")

    assert result.to_payload() == {"error": "rate limit exceeded"}


def test_upstream_failure_is_logged(caplog):
    with caplog.at_level("ERROR", logger="src.sns_writer.gateway"):
        _gateway(CountingClient(error=RuntimeError("boom"))).generate("お題")

    assert "OpenAI error" in caplog.text


def test_extract_error_message_prefers_nested_body():
    assert extract_error_message(ErrorWithBody({"message": "quota exceeded"})) == "quota exceeded"


def test_extract_error_message_falls_back_to_fixed_text():
    assert extract_error_message(ErrorWithBody({})) == "Server error"
    assert extract_error_message(RuntimeError()) == "Server error"
    assert extract_error_message(None) == "Server error"


def test_extract_error_message_uses_generic_message():
    assert extract_error_message(UpstreamError("Network error: timed out")) == "Network error: timed out"
