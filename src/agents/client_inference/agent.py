from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from agents.base import AgentBase
from agents.client_inference.provider import (
    AnthropicProvider,
    CompletionProvider,
    MalformedProviderOutput,
    Prediction,
    ProviderTransportError,
    parse_predictions,
)
from core.config import get_settings
from core.utils.text import strip_term

_PROMPT_HEADER = (
    "You are an expert at identifying which pharmaceutical, biotech, or life sciences "
    "company is the actual end-client hiring through a staffing firm. For each job "
    "description below, predict the top {top_n} most likely end-client companies. "
    "Return ONLY a valid JSON array of objects: "
    '{{"id": string, "predictions": [{{"company": string, '
    '"confidence": "High"|"Medium"|"Low", "reasoning": string}}]}}. '
    "Do not include the staffing firm as a prediction."
)


@dataclass(frozen=True)
class InferenceConfig:
    batch_size: int = 10
    top_n: int = 3

    @classmethod
    def from_settings(cls) -> "InferenceConfig":
        return cls(batch_size=get_settings().inference_batch_size)


@dataclass(frozen=True)
class InferenceInput:
    id: str
    job_title: str
    job_location: str
    job_description: str
    competitor_firm: str

    @classmethod
    def from_signal(cls, signal: Any) -> "InferenceInput":
        detail = getattr(signal, "signal_detail", None) or {}
        return cls(
            id=str(signal.id),
            job_title=str(detail.get("job_title") or ""),
            job_location=str(detail.get("job_location") or ""),
            job_description=str(detail.get("job_description") or ""),
            competitor_firm=str(detail.get("competitor_firm") or ""),
        )

    def redacted_description(self) -> str:
        return strip_term(self.job_description, self.competitor_firm)


def build_prompt(batch: Sequence[InferenceInput], top_n: int = 3) -> str:
    jobs = []
    for index, item in enumerate(batch, start=1):
        jobs.append(
            f"{index}. ID: {item.id}\n"
            f"Title: {item.job_title}\n"
            f"Location: {item.job_location}\n"
            f"Description: {item.redacted_description()}"
        )
    return _PROMPT_HEADER.format(top_n=top_n) + "\n\n" + "\n\n---\n\n".join(jobs)


class ClientInferenceAgent(AgentBase):
    """Best-effort end-client prediction for staffing-firm job postings.

    Batches run one after another. A failed batch is logged and skipped, so
    the result holds whatever the successful batches produced.
    """

    name = "client_inference"

    def __init__(
        self,
        provider: CompletionProvider | None = None,
        config: InferenceConfig | None = None,
    ) -> None:
        self.provider = provider if provider is not None else AnthropicProvider.from_settings()
        self.config = config or InferenceConfig.from_settings()

    def infer(self, signals: Iterable[Any]) -> dict[str, list[Prediction]]:
        inputs = [
            signal if isinstance(signal, InferenceInput) else InferenceInput.from_signal(signal)
            for signal in signals
        ]
        if not inputs:
            return {}
        if self.provider is None:
            self.logger.warning("ANTHROPIC_API_KEY not set, skipping end-client inference")
            return {}

        results: dict[str, list[Prediction]] = {}
        size = self.config.batch_size
        for start in range(0, len(inputs), size):
            batch = inputs[start : start + size]
            batch_num = start // size + 1
            try:
                results.update(self._infer_batch(batch))
            except ProviderTransportError as exc:
                self.logger.warning("Batch %d transport failure: %s", batch_num, exc)
            except MalformedProviderOutput as exc:
                self.logger.warning("Batch %d returned malformed output: %s", batch_num, exc)
            except Exception:
                self.logger.exception("Batch %d failed", batch_num)
        return results

    def close(self) -> None:
        close = getattr(self.provider, "close", None)
        if close is not None:
            close()

    def _infer_batch(self, batch: Sequence[InferenceInput]) -> dict[str, list[Prediction]]:
        text = self.provider.complete(build_prompt(batch, self.config.top_n))
        batch_ids = {item.id for item in batch}
        inferred: dict[str, list[Prediction]] = {}
        for item in parse_predictions(text):
            if item.id not in batch_ids or not item.predictions:
                continue
            inferred[item.id] = item.predictions[: self.config.top_n]
        self.logger.info("%d/%d signals inferred in batch", len(inferred), len(batch))
        return inferred
