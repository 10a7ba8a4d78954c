"""
Configuration for the teams file organizer.

``config.yaml`` is located from an explicit path, the ``TEAMS_ORGANIZER_CONFIG``
environment variable, or the working directory, in that order. The ``ai`` and
``content`` sections are exposed as typed, validated settings objects.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path("config.yaml")
ENV_CONFIG_PATH = "TEAMS_ORGANIZER_CONFIG"


def _locate(path: Optional[Path]) -> Path:
    if path is None:
        override = os.environ.get(ENV_CONFIG_PATH)
        path = Path(override) if override else DEFAULT_CONFIG_PATH
    path = path.expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    return path


@dataclass(frozen=True)
class AiSettings:
    """Completion endpoint and apply policy for AI categorization."""

    enabled: bool = True
    endpoint: str = "https://apps.abacus.ai/v1/chat/completions"
    model: str = "gpt-4.1-mini"
    api_key_env: str = "ABACUSAI_API_KEY"
    temperature: float = 0.3
    max_tokens: int = 500
    timeout_seconds: Optional[float] = 60.0
    apply_threshold: float = 0.6
    max_concurrency: int = 4

    def __post_init__(self) -> None:
        if not 0.0 <= self.apply_threshold <= 1.0:
            raise ValueError(f"ai.apply_threshold must be within [0, 1], got {self.apply_threshold}")
        if self.max_concurrency < 1:
            raise ValueError(f"ai.max_concurrency must be at least 1, got {self.max_concurrency}")

    @property
    def api_key(self) -> Optional[str]:
        return os.environ.get(self.api_key_env)


@dataclass(frozen=True)
class ContentSettings:
    """Limits applied when downloading and reading file content."""

    text_max_chars: int = 5000
    pdf_max_pages: int = 2
    download_timeout_seconds: float = 30.0


@dataclass(frozen=True)
class AppConfig:
    """Raw configuration mapping anchored at the directory it was loaded from."""

    root_dir: Path
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path | None = None) -> "AppConfig":
        config_path = _locate(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        return cls(root_dir=config_path.parent, raw=data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], root_dir: Path | None = None) -> "AppConfig":
        return cls(root_dir=root_dir or Path.cwd(), raw=dict(data))

    def get(self, *keys: str, default: Any = None) -> Any:
        """Look up a nested value; missing keys at any depth yield ``default``."""
        node: Any = self.raw
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def resolve_path(self, *keys: str, default: str | None = None) -> Path:
        """Resolve a configured path relative to the config file's directory."""
        value = self.get(*keys, default=default)
        if value is None:
            raise KeyError(f"Missing config path for {'.'.join(keys)}")
        path = Path(value).expanduser()
        return path if path.is_absolute() else (self.root_dir / path).resolve()

    @property
    def ai(self) -> AiSettings:
        section = self.get("ai", default={}) or {}
        defaults = AiSettings()
        timeout = section.get("timeout_seconds", defaults.timeout_seconds)
        return AiSettings(
            enabled=bool(section.get("enabled", defaults.enabled)),
            endpoint=str(section.get("endpoint", defaults.endpoint)),
            model=str(section.get("model", defaults.model)),
            api_key_env=str(section.get("api_key_env", defaults.api_key_env)),
            temperature=float(section.get("temperature", defaults.temperature)),
            max_tokens=int(section.get("max_tokens", defaults.max_tokens)),
            timeout_seconds=float(timeout) if timeout else None,
            apply_threshold=float(section.get("apply_threshold", defaults.apply_threshold)),
            max_concurrency=int(section.get("max_concurrency", defaults.max_concurrency)),
        )

    @property
    def content(self) -> ContentSettings:
        section = self.get("content", default={}) or {}
        defaults = ContentSettings()
        return ContentSettings(
            text_max_chars=int(section.get("text_max_chars", defaults.text_max_chars)),
            pdf_max_pages=int(section.get("pdf_max_pages", defaults.pdf_max_pages)),
            download_timeout_seconds=float(
                section.get("download_timeout_seconds", defaults.download_timeout_seconds)
            ),
        )

    @property
    def log_level(self) -> int:
        name = str(self.get("logging", "level", default="INFO")).upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown logging.level: {name}")
        return level
