"""Tests for the image classification adapter."""

import asyncio
import json
from unittest.mock import patch

import httpx
import pytest

from questverify.services.classifier import (
    HuggingFaceClipClassifier,
    LabelScore,
    NullClassifier,
    get_classifier,
)

IMAGE = "data:image/jpeg;base64,AAAA"
LABELS = ["trash bag", "park", "screenshot"]


def _classifier(handler, **kwargs) -> HuggingFaceClipClassifier:
    return HuggingFaceClipClassifier(
        api_key="hf_test",
        api_url="https://hf.test/models",
        model="openai/clip-vit-large-patch14",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


# ── Successful classification ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_posts_zero_shot_request_and_ranks_scores() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json=[
                {"label": "park", "score": 0.2},
                {"label": "trash bag", "score": 0.75},
                {"label": "screenshot", "score": 0.05},
            ],
        )

    scores = await _classifier(handler).classify(IMAGE, LABELS)

    assert seen["url"] == "https://hf.test/models/openai/clip-vit-large-patch14"
    assert seen["auth"] == "Bearer hf_test"
    assert seen["body"] == {"inputs": IMAGE, "parameters": {"candidate_labels": LABELS}}
    assert [s.label for s in scores] == ["trash bag", "park", "screenshot"]
    assert scores[0] == LabelScore(label="trash bag", score=0.75)


@pytest.mark.asyncio
async def test_scores_are_clamped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"label": "park", "score": 1.7}])

    scores = await _classifier(handler).classify(IMAGE, LABELS)
    assert scores[0].score == 1.0


# ── Degradation to "no labels" ───────────────────────────────────────────────


@pytest.mark.asyncio
async def test_non_2xx_returns_empty() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="model loading")

    assert await _classifier(handler).classify(IMAGE, LABELS) == []


@pytest.mark.asyncio
async def test_malformed_payload_returns_empty() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": "unexpected"})

    assert await _classifier(handler).classify(IMAGE, LABELS) == []


@pytest.mark.asyncio
async def test_transport_error_returns_empty() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    assert await _classifier(handler).classify(IMAGE, LABELS) == []


@pytest.mark.asyncio
async def test_timeout_cancels_and_returns_empty() -> None:
    cancelled = asyncio.Event()

    async def slow_request(self, image, candidate_labels):
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise
        return []

    classifier = _classifier(lambda r: httpx.Response(200, json=[]), timeout=0.05)
    with patch.object(HuggingFaceClipClassifier, "_request", slow_request):
        assert await classifier.classify(IMAGE, LABELS) == []
    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_missing_key_skips_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("no request expected")

    classifier = HuggingFaceClipClassifier(
        api_key="", transport=httpx.MockTransport(handler)
    )
    assert await classifier.classify(IMAGE, LABELS) == []


@pytest.mark.asyncio
async def test_null_classifier_never_labels() -> None:
    assert await NullClassifier().classify(IMAGE, LABELS) == []


# ── Backend selection ────────────────────────────────────────────────────────


class TestGetClassifier:
    def test_defaults_to_null(self) -> None:
        with patch("questverify.services.classifier.settings.CLASSIFIER_BACKEND", "none"):
            assert isinstance(get_classifier(), NullClassifier)

    def test_huggingface_with_key(self) -> None:
        with (
            patch("questverify.services.classifier.settings.CLASSIFIER_BACKEND", "huggingface"),
            patch("questverify.services.classifier.settings.HUGGINGFACE_API_KEY", "hf_key"),
        ):
            classifier = get_classifier()
        assert isinstance(classifier, HuggingFaceClipClassifier)
        assert classifier.backend == "huggingface"

    def test_huggingface_without_key_falls_back(self) -> None:
        with (
            patch("questverify.services.classifier.settings.CLASSIFIER_BACKEND", "huggingface"),
            patch("questverify.services.classifier.settings.HUGGINGFACE_API_KEY", ""),
        ):
            assert isinstance(get_classifier(), NullClassifier)
