"""Login gate for the transcriber client.

This is an access gate for a trusted deployment, not a security mechanism.
"""
from __future__ import annotations
import hmac
from pathlib import Path
from typing import Mapping, Protocol

import yaml


class Authenticator(Protocol):
    def validate(self, username: str, password: str) -> bool: ...


class StaticAuthenticator:
    """Checks credentials against a fixed username -> password table."""

    def __init__(self, users: Mapping[str, str]) -> None:
        self._users = {str(k): str(v) for k, v in users.items()}

    @classmethod
    def from_yaml(cls, path: str | Path) -> "StaticAuthenticator":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls(data.get("users") or {})

    def validate(self, username: str, password: str) -> bool:
        expected = self._users.get(username)
        if expected is None:
            return False
        return hmac.compare_digest(expected.encode("utf-8"), password.encode("utf-8"))
