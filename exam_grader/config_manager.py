from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)

DEFAULT_PARSING = {
    "short_token_max_length": 24,
    "text_title": "간편 모드",
    "default_title": "무제 시험",
}


def parsing_option(config: dict[str, Any] | None, key: str, default: Any = None) -> Any:
    """Read ``parsing.<key>`` from a plain config dict, falling back to built-ins."""
    parsing = (config or {}).get("parsing", {})
    if isinstance(parsing, dict) and key in parsing:
        return parsing[key]
    return DEFAULT_PARSING.get(key, default)


class ConfigManager:
    def __init__(
        self,
        default_path: str = "config/default_config.json",
        user_path: str = "config/user_config.json",
    ) -> None:
        self._runtime_root = Path(__file__).resolve().parents[1]
        self.default_path = self._resolve_runtime_path(default_path)
        self.user_path = self._resolve_runtime_path(user_path)
        self._config = self._load()

    def _resolve_runtime_path(self, raw_path: str | Path) -> Path:
        path = Path(raw_path).expanduser()
        if path.is_absolute():
            return path
        return self._runtime_root / path

    def get_runtime_root(self) -> Path:
        return self._runtime_root

    def _load_json_file(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        with path.open("r", encoding="utf-8") as file:
            data = json.load(file)
        if not isinstance(data, dict):
            logger.warning("Ignoring non-object config file: %s", path)
            return {}
        return data

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        merged = dict(base)
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _load(self) -> dict[str, Any]:
        defaults = self._load_json_file(self.default_path)
        user = self._load_json_file(self.user_path)
        return self._deep_merge(defaults, user)

    def reload(self) -> dict[str, Any]:
        self._config = self._load()
        return self._config

    def all(self) -> dict[str, Any]:
        return self._config

    def get(self, path: str, default: Any = None) -> Any:
        current: Any = self._config
        for token in path.split("."):
            if not isinstance(current, dict) or token not in current:
                return default
            current = current[token]
        return current

    def update(self, partial: dict[str, Any]) -> dict[str, Any]:
        self._config = self._deep_merge(self._config, partial)
        existing_user = self._load_json_file(self.user_path)
        merged_user = self._deep_merge(existing_user, partial)
        self.user_path.parent.mkdir(parents=True, exist_ok=True)
        with self.user_path.open("w", encoding="utf-8") as file:
            json.dump(merged_user, file, ensure_ascii=False, indent=2)
        return self._config
