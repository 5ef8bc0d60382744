from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from speech_transcriber.common.settings import DEFAULT_CHAT_URL


def test_health_ok(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"


def test_config_defaults_when_env_unset(client: TestClient) -> None:
    r = client.get("/api/config")
    assert r.status_code == 200
    assert r.json() == {
        "azureSubscriptionKey": "",
        "azureServiceRegion": "eastus",
        "azureCustomEndpointId": "",
        "qwenApiKey": "",
        "qwenApiUrl": DEFAULT_CHAT_URL,
    }


def test_config_reads_env_at_request_time(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AZURE_SUBSCRIPTION_KEY", "sub-key")
    monkeypatch.setenv("AZURE_SERVICE_REGION", "westeurope")
    monkeypatch.setenv("AZURE_CUSTOM_ENDPOINT_ID", "endpoint-1")
    monkeypatch.setenv("QWEN_API_KEY", "llm-key")
    monkeypatch.setenv("QWEN_API_URL", "https://llm.example/v1/chat/completions")

    data = client.get("/api/config").json()
    assert data["azureSubscriptionKey"] == "sub-key"
    assert data["azureServiceRegion"] == "westeurope"
    assert data["azureCustomEndpointId"] == "endpoint-1"
    assert data["qwenApiKey"] == "llm-key"
    assert data["qwenApiUrl"] == "https://llm.example/v1/chat/completions"


def test_config_redacts_secrets_when_flag_set(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AZURE_SUBSCRIPTION_KEY", "sub-key")
    monkeypatch.setenv("QWEN_API_KEY", "llm-key")
    monkeypatch.setenv("CONFIG_REDACT_SECRETS", "true")

    data = client.get("/api/config").json()
    assert data["azureSubscriptionKey"] == ""
    assert data["qwenApiKey"] == ""
    assert data["azureServiceRegion"] == "eastus"


@pytest.mark.parametrize(
    "env",
    [{}, {"AZURE_SUBSCRIPTION_KEY": "sub-key"}, {"AZURE_SERVICE_REGION": "eastus"}],
)
def test_token_missing_config_returns_500_without_upstream_call(
    client: TestClient, no_upstream, monkeypatch: pytest.MonkeyPatch, env: dict[str, str]
) -> None:
    for name, value in env.items():
        monkeypatch.setenv(name, value)

    r = client.post("/api/get-speech-token")
    assert r.status_code == 500
    assert r.json() == {"error": "Azure Speech configuration is missing on the server."}
    assert no_upstream.requests == []


def test_token_success_returns_raw_body_and_region(
    client: TestClient, upstream, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("AZURE_SUBSCRIPTION_KEY", "sub-key")
    monkeypatch.setenv("AZURE_SERVICE_REGION", "westus2")
    mock = upstream(lambda request: httpx.Response(200, text="abc123"))

    r = client.post("/api/get-speech-token")
    assert r.status_code == 200
    assert r.json() == {"token": "abc123", "region": "westus2"}

    assert len(mock.requests) == 1
    sent = mock.requests[0]
    assert sent.method == "POST"
    assert str(sent.url) == "https://westus2.api.cognitive.microsoft.com/sts/v1.0/issueToken"
    assert sent.headers["Ocp-Apim-Subscription-Key"] == "sub-key"
    assert sent.content == b""


@pytest.mark.parametrize("status", [401, 403, 500])
def test_token_upstream_failure_is_generic_500(
    client: TestClient, upstream, monkeypatch: pytest.MonkeyPatch, status: int
) -> None:
    monkeypatch.setenv("AZURE_SUBSCRIPTION_KEY", "sub-key")
    monkeypatch.setenv("AZURE_SERVICE_REGION", "eastus")
    upstream(lambda request: httpx.Response(status, text="secret upstream detail"))

    r = client.post("/api/get-speech-token")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to obtain Azure Speech token."}


def test_token_network_error_is_generic_500(
    client: TestClient, upstream, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("AZURE_SUBSCRIPTION_KEY", "sub-key")
    monkeypatch.setenv("AZURE_SERVICE_REGION", "eastus")

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    upstream(refuse)
    r = client.post("/api/get-speech-token")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to obtain Azure Speech token."}


@pytest.mark.parametrize("name", ["SPEECH_TOKEN_TIMEOUT", "REWRITE_TEMPERATURE", "REWRITE_MAX_TOKENS"])
def test_config_survives_malformed_numeric_env(
    client: TestClient, monkeypatch: pytest.MonkeyPatch, name: str
) -> None:
    monkeypatch.setenv(name, "lots")
    r = client.get("/api/config")
    assert r.status_code == 200
    assert r.json()["azureServiceRegion"] == "eastus"


@pytest.mark.parametrize("raw, expected", [("5", 5.0), ("ten", 10.0)])
def test_token_timeout_env(
    client: TestClient, upstream, monkeypatch: pytest.MonkeyPatch, raw: str, expected: float
) -> None:
    monkeypatch.setenv("AZURE_SUBSCRIPTION_KEY", "sub-key")
    monkeypatch.setenv("AZURE_SERVICE_REGION", "eastus")
    monkeypatch.setenv("SPEECH_TOKEN_TIMEOUT", raw)
    mock = upstream(lambda request: httpx.Response(200, text="abc123"))

    r = client.post("/api/get-speech-token")
    assert r.status_code == 200
    assert r.json()["token"] == "abc123"
    assert mock.client_kwargs[0]["timeout"] == expected
