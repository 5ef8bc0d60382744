"""Small key-value store for user preferences."""
from __future__ import annotations
from pathlib import Path
from typing import Any, Protocol

import yaml

USE_CUSTOM_MODEL = "useCustomModel"
ENABLE_REWRITE = "enableRewrite"
RELEVANT_PHRASES = "relevantPhrases"

DEFAULT_PHRASES = "佛性,釋迦牟尼佛,般若波羅蜜多心經,戒定慧,空性,南無,眾生,三大阿僧祇劫"


class PreferenceStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class InMemoryPreferenceStore:
    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class YamlPreferenceStore:
    """Preferences persisted to a YAML mapping; the file is rewritten on every set."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, allow_unicode=True, sort_keys=True)
