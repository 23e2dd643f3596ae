import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol

from .llm_client import ChatMessage, OpenAIChatClient
from .settings import GatewaySettings

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are an assistant that writes Japanese text for SNS posts, note articles, and blog posts."
)
FALLBACK_ERROR_MESSAGE = "Server error"


class ChatCompletionClient(Protocol):
    def create_chat_completion(self, messages: List[ChatMessage]) -> Dict[str, Any]:
        ...


class GenerationError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(GenerationError):
    status_code = 400


class ServiceError(GenerationError):
    status_code = 500


@dataclass
class GenerationResult:
    text: Optional[str] = None
    error: Optional[GenerationError] = None
    source: str = "llm"

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        return 200 if self.error is None else self.error.status_code

    def to_payload(self) -> Dict[str, str]:
        if self.error is not None:
            return {"error": self.error.message}
        return {"text": self.text or ""}


class GenerationGateway:
    def __init__(
        self,
        settings: GatewaySettings,
        client: Optional[ChatCompletionClient] = None,
    ) -> None:
        self.settings = settings
        self.client = client or OpenAIChatClient(
            api_key=settings.api_key,
            model=settings.model,
            timeout_seconds=settings.timeout_seconds,
        )

    def generate(self, prompt: Optional[str]) -> GenerationResult:
        if not isinstance(prompt, str) or not prompt.strip():
            logger.info("Rejected generation request: prompt is required")
            return GenerationResult(error=ValidationError("prompt is required"), source="validation")

        if self.settings.use_mock:
            logger.info("Mock mode: returning placeholder text (prompt_chars=%d)", len(prompt))
            return GenerationResult(text=build_mock_text(prompt), source="mock")

        try:
            response = self.client.create_chat_completion(build_messages(prompt))
        except Exception as exc:
            logger.exception("OpenAI error")
            return GenerationResult(error=ServiceError(extract_error_message(exc)))

        text = extract_completion_text(response)
        logger.info("Generated text (prompt_chars=%d, text_chars=%d)", len(prompt), len(text))
        return GenerationResult(text=text)


def build_messages(prompt: str) -> List[ChatMessage]:
    return [
        {"role": "developer", "content": SYSTEM_INSTRUCTION},
        {"role": "user", "content": prompt},
    ]


def build_mock_text(prompt: str) -> str:
    return (
        "（開発用ダミー応答です）\n\n"
        f"お題: {prompt}\n\n"
        "ここに本来はAIの文章が入ります。"
    )


def extract_completion_text(response: Any) -> str:
    if not isinstance(response, Mapping):
        return ""
    choices = response.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, Mapping):
        return ""
    message = first.get("message")
    if not isinstance(message, Mapping):
        return ""
    content = message.get("content")
    if content is None:
        return ""
    return str(content)


def extract_error_message(error: Any) -> str:
    """Pick the most specific readable message from an upstream failure.

    Order: a nested upstream message (``upstream_message`` or
    ``error["message"]``), then the error's own message, then
    ``"Server error"``.
    """
    nested = getattr(error, "upstream_message", None)
    if not nested:
        body = getattr(error, "error", None)
        if isinstance(body, Mapping):
            nested = body.get("message")
    if isinstance(nested, str) and nested.strip():
        return nested

    generic = getattr(error, "message", None)
    if not isinstance(generic, str) or not generic.strip():
        generic = str(error) if error is not None else ""
    if generic.strip():
        return generic
    return FALLBACK_ERROR_MESSAGE
