"""
Chat-completion clients used for AI categorization.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol

import httpx

from config import AppConfig

DEFAULT_ENDPOINT = "https://apps.abacus.ai/v1/chat/completions"
DEFAULT_MODEL = "gpt-4.1-mini"


class CompletionError(RuntimeError):
    """Raised when a completion request fails or returns an unusable body."""


class CompletionClient(Protocol):
    """Anything that turns a prompt into a parsed JSON object."""

    async def complete(self, prompt: str) -> dict[str, Any]:
        ...


class HttpCompletionClient:
    """OpenAI-compatible chat completion endpoint requesting JSON output."""

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        model: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 500,
        timeout_seconds: Optional[float] = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.endpoint = endpoint
        self.model = model
        self.api_key = api_key
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
        self.transport = transport
        self.logger = logger or logging.getLogger("teams_organizer")

    @classmethod
    def from_config(
        cls, config: AppConfig, logger: Optional[logging.Logger] = None
    ) -> "HttpCompletionClient":
        settings = config.ai
        return cls(
            endpoint=settings.endpoint,
            model=settings.model,
            api_key=settings.api_key,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout_seconds=settings.timeout_seconds,
            logger=logger,
        )

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "response_format": {"type": "json_object"},
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    async def complete(self, prompt: str) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
                response = await client.post(self.endpoint, json=self.build_payload(prompt), headers=headers)
        except httpx.HTTPError as exc:
            raise CompletionError(f"Completion request failed: {exc}") from exc
        if response.status_code != 200:
            raise CompletionError(
                f"Completion request failed: HTTP {response.status_code} {response.reason_phrase}"
            )
        return parse_completion_body(response.text)


def parse_completion_body(body: str) -> dict[str, Any]:
    """Extract the JSON object carried in choices[0].message.content."""
    try:
        data = json.loads(body)
        content = data["choices"][0]["message"]["content"]
        parsed = json.loads(content)
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise CompletionError(f"Malformed completion response: {exc}") from exc
    if not isinstance(parsed, dict):
        raise CompletionError("Completion content is not a JSON object")
    return parsed
