import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_MODEL = "gpt-4.1-mini"


@dataclass(frozen=True)
class GatewaySettings:
    """Process-wide configuration, resolved once at startup.

    ``use_mock`` is the only behavior switch. The remaining values configure
    the upstream client and are ignored while mock mode is on.
    """

    use_mock: bool = False
    api_key: str = ""
    model: str = DEFAULT_MODEL
    timeout_seconds: Optional[float] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewaySettings":
        env = os.environ if environ is None else environ
        model = str(env.get("OPENAI_MODEL", "") or "").strip() or DEFAULT_MODEL
        return cls(
            use_mock=_parse_flag(env.get("USE_MOCK_GENERATE", "")),
            api_key=str(env.get("OPENAI_API_KEY", "") or "").strip(),
            model=model,
            timeout_seconds=_parse_timeout(env.get("OPENAI_TIMEOUT_SECONDS", "")),
        )


def _parse_flag(raw: Optional[str]) -> bool:
    return str(raw or "").strip().lower() == "true"


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    text = str(raw or "").strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if value > 0 else None
