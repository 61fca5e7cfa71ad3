"""Chat Relay — configuration loaded once at startup."""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

from chat_relay.prompts import SYSTEM_PROMPT

DEFAULT_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_API_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_UPSTREAM_TIMEOUT = 300.0


@dataclass(frozen=True)
class Settings:
    """Immutable settings for one process. Build with ``Settings.from_env()``
    or directly in tests."""

    api_key: str = ""
    api_url: str = DEFAULT_API_URL
    api_version: str = DEFAULT_API_VERSION
    model: str = DEFAULT_MODEL
    max_tokens: int = 1024
    system_prompt: str = SYSTEM_PROMPT
    service_name: str = "Royal Medical Spa Chatbot"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: Tuple[str, ...] = ("*",)
    upstream_timeout: float = DEFAULT_UPSTREAM_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        load_dotenv(env_file or os.path.join(os.path.dirname(__file__), "..", ".env"))

        prompt_path = os.getenv("SYSTEM_PROMPT_PATH")
        if prompt_path:
            with open(prompt_path, encoding="utf-8") as f:
                system_prompt = f.read().strip()
            if not system_prompt:
                raise ValueError(f"SYSTEM_PROMPT_PATH {prompt_path} is empty")
        else:
            system_prompt = SYSTEM_PROMPT

        return cls(
            api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            api_url=os.getenv("ANTHROPIC_API_URL", DEFAULT_API_URL),
            api_version=os.getenv("ANTHROPIC_VERSION", DEFAULT_API_VERSION),
            model=os.getenv("ANTHROPIC_MODEL", DEFAULT_MODEL),
            max_tokens=int(os.getenv("MAX_TOKENS", "1024")),
            system_prompt=system_prompt,
            service_name=os.getenv("SERVICE_NAME", "Royal Medical Spa Chatbot"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
            upstream_timeout=float(os.getenv("UPSTREAM_TIMEOUT") or DEFAULT_UPSTREAM_TIMEOUT),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def _split_origins(raw: str) -> Tuple[str, ...]:
    origins = tuple(o.strip() for o in raw.split(",") if o.strip())
    return origins or ("*",)
