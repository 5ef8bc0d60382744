"""Handler error types and their JSON rendering."""
from __future__ import annotations
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class HandlerError(Exception):
    """Base error rendered as HTTP 500 with an ``{"error": ...}`` body."""

    status_code = 500

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = {k: v for k, v in extra.items() if v is not None}

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class ConfigurationMissingError(HandlerError):
    """A required secret or setting is absent on the server."""


class UpstreamError(HandlerError):
    """Network error, timeout, non-2xx status or unparseable upstream body."""


async def handler_error_response(request: Request, exc: HandlerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def validation_error_response(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request body.", "details": details})
