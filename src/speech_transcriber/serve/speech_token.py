"""Azure Speech token issuance."""
from __future__ import annotations
import logging

import httpx

from speech_transcriber.common.settings import SpeechSettings
from speech_transcriber.serve.errors import ConfigurationMissingError, UpstreamError

LOGGER = logging.getLogger("speech_transcriber.serve.token")

TOKEN_URL = "https://{region}.api.cognitive.microsoft.com/sts/v1.0/issueToken"


def issue_token(settings: SpeechSettings) -> str:
    """
    Exchange the subscription key for a short-lived bearer token.

    Args:
        settings: Speech credentials; key and region are both required.

    Returns:
        The raw token string returned by the issuer.
    """
    if not settings.subscription_key or not settings.region:
        LOGGER.error("Missing Azure Speech subscription key or region in environment.")
        raise ConfigurationMissingError("Azure Speech configuration is missing on the server.")

    url = TOKEN_URL.format(region=settings.region)
    headers = {"Ocp-Apim-Subscription-Key": settings.subscription_key}
    try:
        with httpx.Client(timeout=settings.token_timeout) as client:
            r = client.post(url, headers=headers, content=b"")
    except httpx.HTTPError as e:
        LOGGER.error("Error getting Azure Speech token: %s", e)
        raise UpstreamError("Failed to obtain Azure Speech token.") from e

    if not 200 <= r.status_code < 300:
        LOGGER.error(
            "Token request failed with status %s: %s", r.status_code, r.text[:200]
        )
        raise UpstreamError("Failed to obtain Azure Speech token.")
    return r.text
