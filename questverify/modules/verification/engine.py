"""Confidence scoring for quest submissions.

Deterministic: given the distance to the quest, the photo size and whatever
labels the classifier produced, returns the decision and the human-readable
reasons behind it. All thresholds and weights come from settings.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from questverify.core.config import settings
from questverify.models.enums import QuestCategory
from questverify.modules.verification.labels import NEGATIVE_LABELS, category_labels
from questverify.services.classifier import LabelScore

FAILED_PREFIX = "✗"
TOP_LABELS_KEPT = 3


@dataclass
class VerificationOutcome:
    verified: bool
    confidence: int
    location_match: bool
    object_match: bool
    distance_m: float
    labels: list[str] = field(default_factory=list)
    reasons: list[str] = field(default_factory=list)

    @property
    def rejection_reason(self) -> str | None:
        if self.verified:
            return None
        return "; ".join(r for r in self.reasons if r.startswith(FAILED_PREFIX)) or None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def score_submission(
    distance_m: float,
    category: QuestCategory | str,
    photo_size: int | None,
    label_scores: Sequence[LabelScore] = (),
) -> VerificationOutcome:
    """Score a submission and decide whether it is accepted.

    ``photo_size`` is None when no photo was attached. ``label_scores`` is
    empty when classification was skipped or degraded; the photo-presence
    heuristic then stands in for object detection.
    """
    confidence = 0
    reasons: list[str] = []
    labels: list[str] = []
    object_match = False

    # 1. Location
    radius = settings.LOCATION_RADIUS_METERS
    # NaN distance fails the comparison and is reported as too far
    location_match = distance_m <= radius
    if location_match:
        confidence += settings.LOCATION_MATCH_POINTS
        reasons.append(f"✓ Location verified ({_round_half_up(distance_m)}m from quest)")
    else:
        shown = _round_half_up(distance_m) if math.isfinite(distance_m) else "?"
        reasons.append(f"✗ Too far from quest location ({shown}m away, max {radius:g}m)")

    # 2. Evidence
    if label_scores:
        ranked = sorted(label_scores, key=lambda s: s.score, reverse=True)
        expected = set(category_labels(category))

        fraud = next(
            (
                s for s in ranked
                if s.label in NEGATIVE_LABELS and s.score > settings.FRAUD_LABEL_MIN_SCORE
            ),
            None,
        )
        if fraud:
            confidence -= settings.FRAUD_LABEL_PENALTY
            reasons.append(f"✗ Suspicious image detected: {fraud.label}")

        match = next(
            (
                s for s in ranked
                if s.label in expected and s.score > settings.LABEL_MATCH_MIN_SCORE
            ),
            None,
        )
        if match:
            object_match = True
            confidence += settings.LABEL_MATCH_POINTS
            labels.append(match.label)
            reasons.append(
                f"✓ Detected: {match.label} ({_round_half_up(match.score * 100)}% confidence)"
            )
        else:
            category_name = category.value if isinstance(category, QuestCategory) else category
            reasons.append(f"✗ Could not detect expected objects for {category_name} quest")

        for s in ranked[:TOP_LABELS_KEPT]:
            if s.label not in labels:
                labels.append(s.label)

        if match and match.score > settings.LABEL_HIGH_CONFIDENCE_SCORE:
            confidence += settings.LABEL_HIGH_CONFIDENCE_BONUS
            reasons.append("✓ High confidence match")

    elif photo_size is not None:
        if photo_size > settings.PHOTO_MIN_BYTES:
            object_match = True
            confidence += settings.PHOTO_ADEQUATE_POINTS
            reasons.append("✓ Photo proof submitted")
        else:
            confidence += settings.PHOTO_LOW_QUALITY_POINTS
            reasons.append("⚠️ Photo quality low")

    # 3. Base points for a well-formed submission
    confidence = _clamp(confidence + settings.SUBMISSION_BASE_POINTS)

    verified = confidence >= settings.VERIFY_CONFIDENCE_THRESHOLD and location_match

    return VerificationOutcome(
        verified=verified,
        confidence=confidence,
        location_match=location_match,
        object_match=object_match,
        distance_m=distance_m,
        labels=labels,
        reasons=reasons,
    )


def classifier_failure_outcome(distance_m: float) -> VerificationOutcome:
    """Decision used when the classifier raised instead of degrading.

    Location alone is trusted at reduced confidence; without it the attempt
    is rejected outright.
    """
    if distance_m <= settings.LOCATION_RADIUS_METERS:
        return VerificationOutcome(
            verified=True,
            confidence=settings.AI_FALLBACK_CONFIDENCE,
            location_match=True,
            object_match=False,
            distance_m=distance_m,
            reasons=[
                "⚠️ AI verification unavailable",
                "✓ Location verified - submission accepted with reduced confidence",
            ],
        )
    return VerificationOutcome(
        verified=False,
        confidence=0,
        location_match=False,
        object_match=False,
        distance_m=distance_m,
        reasons=["✗ Verification failed - please try again"],
    )
