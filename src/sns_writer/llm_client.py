import json
import urllib.error
import urllib.request
from typing import Any, Dict, List, Optional

ChatMessage = Dict[str, str]

DEFAULT_BASE_URL = "https://api.openai.com/v1"


class UpstreamError(RuntimeError):
    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        upstream_message: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.upstream_message = upstream_message


class OpenAIChatClient:
    def __init__(
        self,
        api_key: str,
        model: str,
        timeout_seconds: Optional[float] = None,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url.rstrip("/")

    def is_enabled(self) -> bool:
        return bool(self.api_key)

    def create_chat_completion(self, messages: List[ChatMessage]) -> Dict[str, Any]:
        if not self.is_enabled():
            raise UpstreamError("OPENAI_API_KEY is not configured.")

        payload = {"model": self.model, "messages": messages}
        request = urllib.request.Request(
            url=f"{self.base_url}/chat/completions",
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
        )

        try:
            with self._open(request) as response:
                raw = response.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            details = exc.read().decode("utf-8", errors="replace")
            raise UpstreamError(
                f"OpenAI API error ({exc.code}): {details or exc.reason}",
                status=exc.code,
                upstream_message=_nested_error_message(details),
            ) from exc
        except urllib.error.URLError as exc:
            raise UpstreamError(f"Network error: {exc.reason}") from exc

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise UpstreamError("Malformed response from upstream") from exc
        if not isinstance(parsed, dict):
            raise UpstreamError("Malformed response from upstream")
        return parsed

    def _open(self, request: urllib.request.Request):
        if self.timeout_seconds is None:
            return urllib.request.urlopen(request)
        return urllib.request.urlopen(request, timeout=self.timeout_seconds)


def _nested_error_message(body: str) -> Optional[str]:
    try:
        parsed = json.loads(body)
    except (TypeError, ValueError):
        return None
    if not isinstance(parsed, dict):
        return None
    error = parsed.get("error")
    if isinstance(error, dict):
        message = str(error.get("message", "") or "").strip()
        return message or None
    return None
