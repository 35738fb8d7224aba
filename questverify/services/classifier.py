"""Image classification adapter — zero-shot CLIP labels via Hugging Face.

Classification is optional infrastructure. Every failure mode (disabled,
unconfigured, timeout, non-2xx, malformed payload) collapses to an empty
label list, which the scoring engine treats as absence of evidence.
"""
from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import structlog

from questverify.core.config import settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class LabelScore:
    label: str
    score: float  # 0.0 to 1.0


class ImageClassifier(Protocol):
    backend: str

    async def classify(self, image: str, candidate_labels: Sequence[str]) -> list[LabelScore]:
        """Rank candidate labels for a data-URI / base64 image, best first."""
        ...


class NullClassifier:
    """Fast mode: never classifies."""

    backend = "none"

    async def classify(self, image: str, candidate_labels: Sequence[str]) -> list[LabelScore]:
        return []


class HuggingFaceClipClassifier:
    """Zero-shot image classification against the Hugging Face inference API."""

    backend = "huggingface"

    def __init__(
        self,
        api_key: str,
        api_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = (api_url or settings.HUGGINGFACE_API_URL).rstrip("/")
        self.model = model or settings.CLIP_MODEL
        self.timeout = timeout if timeout is not None else settings.CLASSIFIER_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/{self.model}"

    async def classify(self, image: str, candidate_labels: Sequence[str]) -> list[LabelScore]:
        if not self.api_key:
            logger.warning("classifier.not_configured", backend=self.backend)
            return []
        if not image or not candidate_labels:
            return []

        try:
            # Hard budget for the whole exchange; the pending request is cancelled on expiry
            return await asyncio.wait_for(
                self._request(image, list(candidate_labels)), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning("classifier.timeout", model=self.model, timeout=self.timeout)
            return []
        except Exception as exc:
            logger.warning(
                "classifier.failed",
                model=self.model,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return []

    async def _request(self, image: str, candidate_labels: list[str]) -> list[LabelScore]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(
                self.endpoint,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "inputs": image,
                    "parameters": {"candidate_labels": candidate_labels},
                },
            )

        if resp.status_code >= 400:
            logger.warning(
                "classifier.http_error",
                model=self.model,
                status_code=resp.status_code,
                body=resp.text[:200],
            )
            return []

        return _parse_scores(resp.json())


def _parse_scores(payload: Any) -> list[LabelScore]:
    """Normalise the inference API payload into ranked LabelScores.

    The API answers with ``[{"label": ..., "score": ...}, ...]``; anything else
    raises ValueError.
    """
    if not isinstance(payload, list):
        raise ValueError(f"unexpected classifier payload: {type(payload).__name__}")

    scores: list[LabelScore] = []
    for item in payload:
        if not isinstance(item, dict) or "label" not in item or "score" not in item:
            raise ValueError("classifier item missing label/score")
        score = min(1.0, max(0.0, float(item["score"])))
        scores.append(LabelScore(label=str(item["label"]), score=score))

    scores.sort(key=lambda s: s.score, reverse=True)
    return scores


def get_classifier() -> ImageClassifier:
    """Select the classifier implementation from configuration."""
    if settings.CLASSIFIER_BACKEND == "huggingface" and settings.HUGGINGFACE_API_KEY:
        return HuggingFaceClipClassifier(api_key=settings.HUGGINGFACE_API_KEY)
    if settings.CLASSIFIER_BACKEND == "huggingface":
        logger.warning("classifier.fallback_to_null", reason="HUGGINGFACE_API_KEY not set")
    return NullClassifier()
