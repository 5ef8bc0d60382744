"""HTTP client for the transcriber's server-side handlers."""
from __future__ import annotations
import logging
from dataclasses import dataclass

import httpx

LOGGER = logging.getLogger("speech_transcriber.client.api")


@dataclass(frozen=True)
class ClientConfig:
    """The parts of GET /api/config the client uses."""
    custom_endpoint_id: str


@dataclass(frozen=True)
class SpeechToken:
    token: str
    region: str


class ApiError(Exception):
    """Raised when a handler call fails or returns an unexpected body."""


class TranscriberApiClient:
    def __init__(self, base_url: str, client: httpx.Client | None = None, timeout: float = 40.0) -> None:
        if client is None:
            client = httpx.Client(base_url=base_url, timeout=timeout)
        self._client = client

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TranscriberApiClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def fetch_config(self) -> ClientConfig:
        try:
            r = self._client.get("/api/config")
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ApiError(f"Failed to load API configuration: {e}") from e
        if not isinstance(data, dict):
            raise ApiError(f"Unexpected API configuration payload: {data!r}")
        # Secrets in the payload are ignored; speech credentials come from the token handler.
        return ClientConfig(custom_endpoint_id=data.get("azureCustomEndpointId") or "")

    def fetch_speech_token(self) -> SpeechToken:
        try:
            r = self._client.post("/api/get-speech-token")
            r.raise_for_status()
            data = r.json()
            return SpeechToken(token=data["token"], region=data["region"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            raise ApiError(f"Failed to obtain speech token: {e}") from e

    def rewrite(self, text: str, phrases: str = "") -> str:
        """Rewrite text via the relay; any failure yields the original text."""
        if not text.strip():
            return text
        try:
            r = self._client.post(
                "/api/rewrite-text", json={"text": text, "relevantPhrases": phrases}
            )
            r.raise_for_status()
            result = r.json()
        except (httpx.HTTPError, ValueError) as e:
            LOGGER.error("Error occurred while calling rewrite API: %s", e)
            return text
        if isinstance(result, dict) and isinstance(result.get("rewrittenText"), str):
            return result["rewrittenText"]
        LOGGER.warning("Unexpected rewrite API response format: %r", result)
        return text
