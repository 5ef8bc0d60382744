from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

import speech_transcriber.serve.fastapi_app as app_mod

_REAL_CLIENT = httpx.Client

ENV_VARS = (
    "AZURE_SUBSCRIPTION_KEY",
    "AZURE_SERVICE_REGION",
    "AZURE_CUSTOM_ENDPOINT_ID",
    "QWEN_API_KEY",
    "QWEN_API_URL",
    "QWEN_MODEL",
    "CONFIG_REDACT_SECRETS",
    "SPEECH_TOKEN_TIMEOUT",
    "REWRITE_TEMPERATURE",
    "REWRITE_MAX_TOKENS",
)


class Upstream:
    """Records outbound requests and answers them with a handler."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []
        self.client_kwargs: list[dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client() -> TestClient:
    return TestClient(app_mod.app)


@pytest.fixture
def upstream(monkeypatch: pytest.MonkeyPatch) -> Callable[..., Upstream]:
    """Route every httpx.Client created by the handlers to a mock transport."""

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> Upstream:
        mock = Upstream(handler)

        def factory(*args: Any, **kwargs: Any) -> httpx.Client:
            mock.client_kwargs.append(dict(kwargs))
            kwargs["transport"] = httpx.MockTransport(mock)
            return _REAL_CLIENT(*args, **kwargs)

        monkeypatch.setattr(httpx, "Client", factory)
        return mock

    return install


def _fail_if_called(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected upstream call to {request.url}")


@pytest.fixture
def no_upstream(upstream: Callable[..., Upstream]) -> Upstream:
    return upstream(_fail_if_called)
