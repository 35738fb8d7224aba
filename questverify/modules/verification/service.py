"""Submission verification: score a proof, persist it, apply the XP award."""

from __future__ import annotations

import asyncio
import math
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

import sentry_sdk
import structlog
from fastapi import Depends

from questverify.core.config import settings
from questverify.core.errors import QuestNotFoundError, SubmissionValidationError
from questverify.models.enums import SubmissionStatus
from questverify.modules.gamification.badges import check_earned_badges, new_badges
from questverify.modules.gamification.leveling import LevelInfo, calculate_level_info
from questverify.modules.gamification.streaks import calculate_xp_with_bonus
from questverify.modules.verification.engine import (
    VerificationOutcome,
    classifier_failure_outcome,
    score_submission,
)
from questverify.modules.verification.geo import haversine_distance
from questverify.modules.verification.labels import candidate_labels
from questverify.modules.verification.photos import image_hash, to_data_uri
from questverify.services.classifier import ImageClassifier, LabelScore, get_classifier
from questverify.services.quest_store import (
    ProfileRecord,
    QuestRecord,
    QuestStore,
    SubmissionRecord,
    get_quest_store,
)

logger = structlog.get_logger()

ALREADY_COMPLETED_REASON = "⚠️ Quest already completed - no additional XP awarded"


@dataclass
class SubmissionInput:
    quest_id: uuid.UUID
    user_id: uuid.UUID
    user_quest_id: uuid.UUID
    latitude: float
    longitude: float
    image_url: str = ""
    photo: bytes | None = None
    photo_mime_type: str | None = None


@dataclass
class VerificationResult:
    outcome: VerificationOutcome
    xp_awarded: int = 0
    reasons: list[str] = field(default_factory=list)
    new_badges: list[str] = field(default_factory=list)
    level_info: LevelInfo | None = None
    response_time_ms: int = 0


def _parse_uuid(name: str, value: str | None) -> uuid.UUID:
    if not value or not value.strip():
        raise SubmissionValidationError("Missing required fields", detail={"field": name})
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        raise SubmissionValidationError(
            f"{name} is not a valid id", detail={"field": name}
        ) from None


def _parse_coordinate(name: str, value: str | None, limit: float) -> float:
    try:
        number = float(value) if value is not None else math.nan
    except ValueError:
        number = math.nan
    if not math.isfinite(number) or abs(number) > limit:
        raise SubmissionValidationError(
            f"{name} must be a finite number within ±{limit:g}", detail={"field": name}
        )
    return number


def parse_submission(
    quest_id: str | None,
    user_id: str | None,
    user_quest_id: str | None,
    latitude: str | None,
    longitude: str | None,
    image_url: str | None = None,
    photo: bytes | None = None,
    photo_mime_type: str | None = None,
) -> SubmissionInput:
    """Validate raw form fields. Raises SubmissionValidationError before any work is done."""
    if photo is not None and len(photo) > settings.MAX_PHOTO_BYTES:
        raise SubmissionValidationError(
            "Photo exceeds the maximum upload size",
            detail={"field": "photo", "max_bytes": settings.MAX_PHOTO_BYTES},
        )
    return SubmissionInput(
        quest_id=_parse_uuid("questId", quest_id),
        user_id=_parse_uuid("userId", user_id),
        user_quest_id=_parse_uuid("userQuestId", user_quest_id),
        latitude=_parse_coordinate("latitude", latitude, 90.0),
        longitude=_parse_coordinate("longitude", longitude, 180.0),
        image_url=image_url or "",
        # An empty upload counts as no photo
        photo=photo or None,
        photo_mime_type=photo_mime_type,
    )


class VerificationService:
    """Turns one submission into one terminal decision plus its side effects."""

    def __init__(self, store: QuestStore, classifier: ImageClassifier) -> None:
        self.store = store
        self.classifier = classifier

    async def verify_submission(self, submission: SubmissionInput) -> VerificationResult:
        started = time.perf_counter()

        quest = await self.store.fetch_quest(submission.quest_id)
        if quest is None:
            raise QuestNotFoundError(
                "Quest not found", detail={"quest_id": str(submission.quest_id)}
            )

        distance = haversine_distance(
            submission.latitude, submission.longitude, quest.latitude, quest.longitude
        )

        try:
            label_scores = await self._classify(submission, quest)
        except Exception as exc:
            logger.error(
                "verification.classifier_raised",
                quest_id=str(quest.id),
                backend=getattr(self.classifier, "backend", "unknown"),
                error=str(exc),
                error_type=type(exc).__name__,
            )
            sentry_sdk.capture_exception(exc)
            outcome = classifier_failure_outcome(distance)
        else:
            outcome = score_submission(
                distance,
                quest.category,
                len(submission.photo) if submission.photo else None,
                label_scores,
            )

        result = VerificationResult(outcome=outcome, reasons=list(outcome.reasons))
        if outcome.verified:
            await self._apply_award(submission, quest, result)
        else:
            await self._persist(
                "insert_submission",
                self.store.insert_submission(self._submission_record(submission, outcome)),
                submission,
            )

        result.response_time_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "verification.completed",
            quest_id=str(quest.id),
            user_id=str(submission.user_id),
            verified=outcome.verified,
            confidence=outcome.confidence,
            distance_m=round(distance, 1),
            xp_awarded=result.xp_awarded,
            response_time_ms=result.response_time_ms,
        )
        return result

    async def _classify(self, submission: SubmissionInput, quest: QuestRecord) -> list[LabelScore]:
        if not submission.photo:
            return []
        image = to_data_uri(submission.photo, submission.photo_mime_type)
        return await self.classifier.classify(image, candidate_labels(quest.category))

    def _submission_record(
        self, submission: SubmissionInput, outcome: VerificationOutcome
    ) -> SubmissionRecord:
        return SubmissionRecord(
            user_id=submission.user_id,
            quest_id=submission.quest_id,
            user_quest_id=submission.user_quest_id,
            image_url=submission.image_url,
            image_hash=image_hash(submission.photo) if submission.photo else None,
            submitted_latitude=submission.latitude,
            submitted_longitude=submission.longitude,
            ai_confidence=outcome.confidence,
            ai_labels=list(outcome.labels),
            verification_status=(
                SubmissionStatus.VERIFIED if outcome.verified else SubmissionStatus.REJECTED
            ),
            rejection_reason=outcome.rejection_reason,
            verified_at=datetime.now(timezone.utc) if outcome.verified else None,
        )

    async def _award_amount(self, quest: QuestRecord, user_id: uuid.UUID) -> int:
        xp = quest.xp_reward * settings.FEATURED_XP_MULTIPLIER if quest.is_featured else quest.xp_reward
        if settings.APPLY_STREAK_BONUS:
            profile = await self._persist(
                "fetch_profile", self.store.fetch_profile(user_id), None
            )
            if profile is not None:
                xp = calculate_xp_with_bonus(xp, profile.current_streak)
        return xp

    async def _apply_award(
        self, submission: SubmissionInput, quest: QuestRecord, result: VerificationResult
    ) -> None:
        record = self._submission_record(submission, result.outcome)
        xp = await self._award_amount(quest, submission.user_id)

        claimed = await self._persist(
            "claim_user_quest",
            self.store.claim_user_quest(
                submission.user_quest_id,
                submission.user_id,
                quest.id,
                record.verified_at,
                xp,
            ),
            submission,
        )
        if not claimed:
            if claimed is False:
                result.reasons.append(ALREADY_COMPLETED_REASON)
                logger.info(
                    "verification.already_completed",
                    user_quest_id=str(submission.user_quest_id),
                    user_id=str(submission.user_id),
                )
            await self._persist("insert_submission", self.store.insert_submission(record), submission)
            return

        result.xp_awarded = xp
        steps = ("insert_submission", "increment_profile", "increment_quest_completions")
        # Each store call opens its own session, so these run independently
        outcomes = await asyncio.gather(
            self.store.insert_submission(record),
            self._increment_profile(submission.user_id, xp),
            self.store.increment_quest_completions(quest.id),
            return_exceptions=True,
        )
        for step, outcome in zip(steps, outcomes):
            if isinstance(outcome, Exception):
                self._report_persist_failure(step, outcome, submission)

        profile = outcomes[1] if isinstance(outcomes[1], ProfileRecord) else None
        if profile is None:
            return

        result.level_info = calculate_level_info(profile.total_xp)
        earned = await self._persist(
            "sync_badges", self._sync_badges(submission.user_id, profile), submission
        )
        result.new_badges = earned or []

    async def _increment_profile(self, user_id: uuid.UUID, xp: int) -> ProfileRecord | None:
        try:
            return await self.store.increment_profile(user_id, xp)
        except Exception as exc:
            logger.warning(
                "verification.increment_fallback",
                user_id=str(user_id),
                error=str(exc),
                error_type=type(exc).__name__,
            )

        # Read-then-write can lose a concurrent award; only reached when the atomic path fails
        profile = await self.store.fetch_profile(user_id)
        if profile is None:
            logger.warning("verification.profile_missing", user_id=str(user_id))
            return None
        total_xp = profile.total_xp + xp
        quests_completed = profile.quests_completed + 1
        level = calculate_level_info(total_xp).level
        await self.store.write_profile(user_id, total_xp, quests_completed, level)
        return replace(
            profile, total_xp=total_xp, quests_completed=quests_completed, level=level
        )

    async def _sync_badges(self, user_id: uuid.UUID, profile: ProfileRecord) -> list[str]:
        stats = await self.store.category_completions(user_id)
        earned = check_earned_badges(
            profile.quests_completed, profile.total_xp, profile.current_streak, stats
        )
        fresh = new_badges(profile.badges, earned)
        if fresh:
            await self.store.add_badges(user_id, fresh)
            for badge_id in fresh:
                logger.info("badge.earned", badge=badge_id, user_id=str(user_id))
        return fresh

    async def _persist(self, step: str, coro, submission: SubmissionInput | None):
        """Await a store call; failures are reported and yield None."""
        try:
            return await coro
        except Exception as exc:
            self._report_persist_failure(step, exc, submission)
            return None

    @staticmethod
    def _report_persist_failure(
        step: str, exc: Exception, submission: SubmissionInput | None
    ) -> None:
        logger.error(
            "verification.persist_failed",
            step=step,
            user_id=str(submission.user_id) if submission else None,
            user_quest_id=str(submission.user_quest_id) if submission else None,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        sentry_sdk.capture_exception(exc)


def get_verification_service(
    store: QuestStore = Depends(get_quest_store),
    classifier: ImageClassifier = Depends(get_classifier),
) -> VerificationService:
    return VerificationService(store, classifier)
