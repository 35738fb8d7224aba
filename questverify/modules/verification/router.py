"""Verification API router — photo + GPS proof of quest completion."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile

from questverify.core.config import settings
from questverify.modules.verification.schemas import VerifyQuestResponse
from questverify.modules.verification.service import (
    VerificationService,
    get_verification_service,
    parse_submission,
)

router = APIRouter(tags=["verification"])


@router.post("/verify-quest", response_model=VerifyQuestResponse)
async def verify_quest(
    quest_id: str | None = Form(None, alias="questId"),
    user_id: str | None = Form(None, alias="userId"),
    user_quest_id: str | None = Form(None, alias="userQuestId"),
    image_url: str | None = Form(None, alias="imageUrl"),
    latitude: str | None = Form(None),
    longitude: str | None = Form(None),
    photo: UploadFile | None = File(None),
    service: VerificationService = Depends(get_verification_service),
) -> VerifyQuestResponse:
    photo_bytes = None
    if photo is not None:
        # One byte past the cap is enough for parse_submission to reject it
        photo_bytes = await photo.read(settings.MAX_PHOTO_BYTES + 1)
    submission = parse_submission(
        quest_id=quest_id,
        user_id=user_id,
        user_quest_id=user_quest_id,
        latitude=latitude,
        longitude=longitude,
        image_url=image_url,
        photo=photo_bytes,
        photo_mime_type=photo.content_type if photo is not None else None,
    )

    result = await service.verify_submission(submission)
    return VerifyQuestResponse.from_result(result)
