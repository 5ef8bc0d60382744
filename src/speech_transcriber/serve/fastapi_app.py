"""FastAPI app exposing the transcriber's server-side handlers.

Endpoints:
- GET /health
- GET /api/config
- POST /api/get-speech-token
- POST /api/rewrite-text  { "text": "...", "relevantPhrases": "..." }
"""
from __future__ import annotations
import logging

from fastapi import Depends, FastAPI, Response
from fastapi.exceptions import RequestValidationError

from speech_transcriber.common.logging_setup import setup_logging
from speech_transcriber.common.schema import ConfigOut, RewriteIn, RewriteOut, TokenOut
from speech_transcriber.common.settings import DEFAULT_REGION, Settings
from speech_transcriber.serve.errors import (
    HandlerError,
    handler_error_response,
    validation_error_response,
)
from speech_transcriber.serve.rewrite import rewrite_text
from speech_transcriber.serve.speech_token import issue_token

LOGGER = logging.getLogger("speech_transcriber.serve.app")
setup_logging()

app = FastAPI(title="speech-transcriber")
app.add_exception_handler(HandlerError, handler_error_response)
app.add_exception_handler(RequestValidationError, validation_error_response)


def get_settings() -> Settings:
    return Settings.from_env()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/config", response_model=ConfigOut)
def config(settings: Settings = Depends(get_settings)) -> ConfigOut:
    speech, rewrite = settings.speech, settings.rewrite
    subscription_key, api_key = speech.subscription_key, rewrite.api_key
    if settings.redact_secrets:
        subscription_key = api_key = ""
    elif subscription_key or api_key:
        LOGGER.warning("Returning API secrets in /api/config; serve to trusted clients only")
    return ConfigOut(
        azure_subscription_key=subscription_key,
        azure_service_region=speech.region or DEFAULT_REGION,
        azure_custom_endpoint_id=speech.custom_endpoint_id,
        qwen_api_key=api_key,
        qwen_api_url=rewrite.api_url,
    )


@app.post("/api/get-speech-token", response_model=TokenOut)
def get_speech_token(settings: Settings = Depends(get_settings)) -> TokenOut:
    token = issue_token(settings.speech)
    return TokenOut(token=token, region=settings.speech.region)


@app.post("/api/rewrite-text", response_model=RewriteOut, response_model_exclude_none=True)
def rewrite(
    response: Response,
    body: RewriteIn | None = None,
    settings: Settings = Depends(get_settings),
) -> RewriteOut:
    body = body or RewriteIn()
    text = body.text or ""
    result = rewrite_text(settings.rewrite, text, body.relevant_phrases or "")
    if not text.strip():
        return RewriteOut(rewritten_text=result.text)

    response.headers["Cache-Control"] = "no-cache"
    return RewriteOut(
        rewritten_text=result.text,
        original_length=len(text),
        rewritten_length=len(result.text),
    )
