# interview_prep/config.py
import os
from dataclasses import dataclass
from typing import List

# OpenAI-compatible alias of the generative-language API
DEFAULT_UPSTREAM_URL = "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions"
DEFAULT_TIMEOUT = 60.0


@dataclass(frozen=True)
class ProxyConfig:
    """Everything the completion proxy needs; passed in explicitly."""

    api_key: str = ""
    upstream_url: str = DEFAULT_UPSTREAM_URL
    timeout: float = DEFAULT_TIMEOUT

    @property
    def has_key(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "ProxyConfig":
        return cls(
            api_key=os.getenv("GENAI_API_KEY", "").strip(),
            upstream_url=os.getenv("GENAI_API_URL", "").strip() or DEFAULT_UPSTREAM_URL,
            timeout=float(os.getenv("GENAI_TIMEOUT", str(DEFAULT_TIMEOUT))),
        )


def cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]


def server_port() -> int:
    return int(os.getenv("PORT", "5001"))
