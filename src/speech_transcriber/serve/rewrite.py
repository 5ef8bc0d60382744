"""Transcript rewriting via an OpenAI-compatible chat-completion endpoint.

One upstream attempt per call. Transport failures and non-2xx statuses raise
UpstreamError; a well-formed reply in an unexpected shape falls back to the
original text.
"""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

from speech_transcriber.common.settings import RewriteSettings
from speech_transcriber.common.templates import load_template, render_prompt
from speech_transcriber.serve.errors import ConfigurationMissingError, UpstreamError

LOGGER = logging.getLogger("speech_transcriber.serve.rewrite")

USER_AGENT = "speech-transcriber-rewrite/0.1"
FAILURE_MESSAGE = "Failed to rewrite text on the server."
FAILURE_SUGGESTION = "Check chat completion API key and endpoint configuration"

Extractor = Callable[[Any], Optional[str]]


@dataclass
class RewriteResult:
    text: str
    # False when the upstream reply had no usable field and the input was echoed.
    extracted: bool


def _first_choice(parsed: Any) -> dict[str, Any] | None:
    if not isinstance(parsed, dict):
        return None
    choices = parsed.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    return choices[0]


def _message_content(parsed: Any) -> str | None:
    choice = _first_choice(parsed)
    message = choice.get("message") if choice else None
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"] or None
    return None


def _choice_text(parsed: Any) -> str | None:
    choice = _first_choice(parsed)
    if choice and isinstance(choice.get("text"), str):
        return choice["text"] or None
    return None


# Tried in order; the first non-empty hit wins.
EXTRACTORS: list[Extractor] = [_message_content, _choice_text]


def extract_text(parsed: Any, extractors: list[Extractor] = EXTRACTORS) -> str | None:
    """Return the rewritten text from a chat-completion reply, or None."""
    for extract in extractors:
        value = extract(parsed)
        if value is not None:
            return value.strip()
    return None


def build_payload(settings: RewriteSettings, text: str, phrases: str) -> dict[str, Any]:
    system_prompt = render_prompt(load_template(), phrases)
    return {
        "model": settings.model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": text},
        ],
        "temperature": settings.temperature,
        "max_tokens": settings.max_tokens,
        "stream": False,
    }


def _error_details(status_code: int, body: str) -> str:
    details = f"Chat completion API failed with status {status_code}"
    if not body:
        return details
    try:
        details += f" | API Error: {json.dumps(json.loads(body), ensure_ascii=False)}"
    except ValueError:
        details += f" | Raw Error: {body[:200]}"
    return details


def rewrite_text(settings: RewriteSettings, text: str, phrases: str = "") -> RewriteResult:
    """
    Rewrite a recognized transcript segment.

    Args:
        settings: Chat endpoint settings; the API key is required.
        text: Recognized text. Blank text is returned unchanged.
        phrases: Comma-separated terminology hint for the system prompt.
    """
    if not settings.api_key:
        LOGGER.error("Missing chat completion API key in environment.")
        raise ConfigurationMissingError(
            "Text rewriting service is not configured on the server.",
            details="QWEN_API_KEY environment variable is missing",
        )

    LOGGER.info("Processing text: %s...", text[:50])
    if not text.strip():
        return RewriteResult(text=text, extracted=False)

    headers = {
        "Authorization": f"Bearer {settings.api_key}",
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }
    payload = build_payload(settings, text, phrases)

    try:
        with httpx.Client(timeout=settings.timeout) as client:
            r = client.post(settings.api_url, headers=headers, json=payload)
    except httpx.TimeoutException as e:
        LOGGER.error("Chat completion request timed out: %s", e)
        raise UpstreamError(
            FAILURE_MESSAGE,
            details=f"Request timeout after {settings.timeout:g} seconds",
            suggestion=FAILURE_SUGGESTION,
        ) from e
    except httpx.HTTPError as e:
        LOGGER.error("Chat completion request failed: %s", e)
        raise UpstreamError(
            FAILURE_MESSAGE, details=f"Request failed: {e}", suggestion=FAILURE_SUGGESTION
        ) from e

    LOGGER.info("Response status: %s (%d bytes)", r.status_code, len(r.content))
    if not 200 <= r.status_code < 300:
        details = _error_details(r.status_code, r.text)
        LOGGER.error("Error calling chat completion API: %s", details)
        raise UpstreamError(FAILURE_MESSAGE, details=details, suggestion=FAILURE_SUGGESTION)

    try:
        parsed = r.json()
    except ValueError as e:
        LOGGER.error("Failed to parse chat completion response as JSON: %s", e)
        LOGGER.error("Response data: %s", r.text[:500])
        raise UpstreamError(
            "Text rewriting service returned invalid data.",
            details="Failed to parse JSON response from chat completion API",
            rawResponse=r.text[:200],
        ) from e

    rewritten = extract_text(parsed)
    if rewritten is None:
        LOGGER.warning(
            "Unexpected response format, using original text: %s",
            json.dumps(parsed, ensure_ascii=False)[:500],
        )
        return RewriteResult(text=text, extracted=False)

    LOGGER.info("Extracted rewritten text (%d chars)", len(rewritten))
    return RewriteResult(text=rewritten, extracted=True)
