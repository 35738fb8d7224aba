"""Verification API response schema (camelCase on the wire)."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from questverify.modules.gamification.schemas import LevelInfoResponse
from questverify.modules.verification.service import VerificationResult


class VerifyQuestResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    verified: bool
    confidence: int
    labels: list[str]
    reasons: list[str]
    location_match: bool
    object_match: bool
    xp_awarded: int
    response_time_ms: int
    new_badges: list[str] = []
    level_info: LevelInfoResponse | None = None

    @classmethod
    def from_result(cls, result: VerificationResult) -> "VerifyQuestResponse":
        outcome = result.outcome
        return cls(
            verified=outcome.verified,
            confidence=outcome.confidence,
            labels=outcome.labels,
            reasons=result.reasons,
            location_match=outcome.location_match,
            object_match=outcome.object_match,
            xp_awarded=result.xp_awarded,
            response_time_ms=result.response_time_ms,
            new_badges=result.new_badges,
            level_info=(
                LevelInfoResponse(**result.level_info.to_dict()) if result.level_info else None
            ),
        )
