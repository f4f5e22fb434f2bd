"""Language-model provider client used for end-client inference.

The provider is asked for a JSON array; responses are validated strictly
first and only fall back to pulling the first ``[...]`` block out of free
text when the strict parse fails. Transport problems and unusable output
raise different exceptions so callers can decide what is worth retrying.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Literal, Protocol

import httpx
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from core.config import get_settings

logger = logging.getLogger(__name__)

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


class ProviderError(Exception):
    pass


class ProviderTransportError(ProviderError):
    """Network failure, timeout or non-2xx status. May succeed on retry."""


class MalformedProviderOutput(ProviderError):
    """The provider answered but the body holds no usable predictions."""


class Prediction(BaseModel):
    company: str
    confidence: Literal["High", "Medium", "Low"]
    reasoning: str = ""

    @field_validator("confidence", mode="before")
    @classmethod
    def _normalize_confidence(cls, value):
        if isinstance(value, str):
            return value.strip().capitalize()
        return value

    @field_validator("reasoning", mode="before")
    @classmethod
    def _default_reasoning(cls, value):
        return "" if value is None else value


class ClientPrediction(BaseModel):
    id: str
    predictions: list[Prediction] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("predictions", mode="before")
    @classmethod
    def _drop_invalid_predictions(cls, value):
        if not isinstance(value, list):
            return value
        kept = []
        for raw in value:
            try:
                kept.append(Prediction.model_validate(raw))
            except ValidationError as exc:
                logger.debug("Skipping unparseable prediction: %s", exc)
        return kept


_PREDICTIONS_ADAPTER = TypeAdapter(list[ClientPrediction])


class CompletionProvider(Protocol):
    def complete(self, prompt: str) -> str: ...


def parse_predictions(text: str) -> list[ClientPrediction]:
    if not text or not text.strip():
        raise MalformedProviderOutput("Empty provider response")
    try:
        return _PREDICTIONS_ADAPTER.validate_json(text.strip())
    except ValidationError:
        pass

    match = _JSON_ARRAY.search(text)
    if not match:
        raise MalformedProviderOutput("No JSON array found in provider response")
    try:
        raw_items = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise MalformedProviderOutput(f"Invalid JSON array: {exc}") from exc
    if not isinstance(raw_items, list):
        raise MalformedProviderOutput("Provider JSON is not an array")

    parsed: list[ClientPrediction] = []
    for item in raw_items:
        try:
            parsed.append(ClientPrediction.model_validate(item))
        except ValidationError as exc:
            logger.debug("Skipping unparseable prediction item: %s", exc)
    return parsed


class AnthropicProvider:
    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        api_url: str | None = None,
        api_version: str | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key
        self.model = model or settings.inference_model
        self.api_url = api_url or settings.anthropic_api_url
        self.api_version = api_version or settings.anthropic_api_version
        self.max_tokens = max_tokens or settings.inference_max_tokens
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=timeout or settings.inference_timeout_seconds
        )

    @classmethod
    def from_settings(cls) -> "AnthropicProvider | None":
        api_key = get_settings().anthropic_api_key
        if not api_key:
            return None
        return cls(api_key=api_key)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "AnthropicProvider":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def complete(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": 0,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }
        try:
            response = self.client.post(self.api_url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise ProviderTransportError(f"Provider request failed: {exc}") from exc
        if response.status_code >= 400:
            raise ProviderTransportError(
                f"Provider returned HTTP {response.status_code}: {response.text[:300]}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedProviderOutput("Provider body is not JSON") from exc
        blocks = data.get("content") if isinstance(data, dict) else None
        texts = [
            block.get("text", "")
            for block in blocks or []
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        if not texts:
            raise MalformedProviderOutput("Provider response has no text content")
        return "".join(texts)
