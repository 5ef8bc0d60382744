"""Environment-backed settings, read at request time."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Callable, TypeVar

LOGGER = logging.getLogger("speech_transcriber.settings")

N = TypeVar("N", int, float)

DEFAULT_REGION = "eastus"
DEFAULT_CHAT_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1/chat/completions"
DEFAULT_MODEL = "qwen-max"

# Fixed upstream timeout for the rewrite relay.
REWRITE_TIMEOUT_SECONDS = 30.0

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


def _number(name: str, default: N, cast: Callable[[str], N]) -> N:
    """Parse an optional numeric override; malformed values fall back to the default."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


@dataclass(frozen=True)
class SpeechSettings:
    """Azure Speech credentials. Empty strings mean unset."""
    subscription_key: str
    region: str
    custom_endpoint_id: str
    token_timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "SpeechSettings":
        return cls(
            subscription_key=os.getenv("AZURE_SUBSCRIPTION_KEY", ""),
            region=os.getenv("AZURE_SERVICE_REGION", ""),
            custom_endpoint_id=os.getenv("AZURE_CUSTOM_ENDPOINT_ID", ""),
            token_timeout=_number("SPEECH_TOKEN_TIMEOUT", 10.0, float),
        )


@dataclass(frozen=True)
class RewriteSettings:
    """Chat-completion endpoint used by the rewrite relay."""
    api_key: str
    api_url: str = DEFAULT_CHAT_URL
    model: str = DEFAULT_MODEL
    temperature: float = 0.1
    max_tokens: int = 1000
    timeout: float = REWRITE_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "RewriteSettings":
        return cls(
            api_key=os.getenv("QWEN_API_KEY", ""),
            api_url=os.getenv("QWEN_API_URL") or DEFAULT_CHAT_URL,
            model=os.getenv("QWEN_MODEL") or DEFAULT_MODEL,
            temperature=_number("REWRITE_TEMPERATURE", 0.1, float),
            max_tokens=_number("REWRITE_MAX_TOKENS", 1000, int),
        )


@dataclass(frozen=True)
class Settings:
    speech: SpeechSettings
    rewrite: RewriteSettings
    redact_secrets: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Construct from os.environ; called once per request."""
        return cls(
            speech=SpeechSettings.from_env(),
            rewrite=RewriteSettings.from_env(),
            redact_secrets=_flag("CONFIG_REDACT_SECRETS"),
        )
