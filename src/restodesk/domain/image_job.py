"""ImageJob entity: catalog image generation gated by human approval.

Generation runs synchronously for ``from_image``, ``from_new_description``
and ``direct_upload``; ``improve_existing`` and ``from_description`` are
asynchronous and complete out-of-band. Publishing to the live catalog is
only reachable from ``approved``.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationInfo, field_validator

from restodesk.domain.lifecycle import (
    IMAGE_JOB_TRANSITIONS,
    MAX_IMAGE_RETRIES,
    ImageJobStatus,
    is_valid_transition,
)
from restodesk.domain.validation import UuidStr


class ImageJobMode(StrEnum):
    IMPROVE_EXISTING = "improve_existing"
    FROM_IMAGE = "from_image"
    FROM_DESCRIPTION = "from_description"
    FROM_NEW_DESCRIPTION = "from_new_description"
    DIRECT_UPLOAD = "direct_upload"


ASYNC_MODES: frozenset[str] = frozenset(
    {ImageJobMode.IMPROVE_EXISTING, ImageJobMode.FROM_DESCRIPTION}
)

# Modes that cannot start without a caller-provided image.
_SOURCE_IMAGE_MODES: frozenset[str] = frozenset(
    {ImageJobMode.FROM_IMAGE, ImageJobMode.DIRECT_UPLOAD}
)


class ImageJob(BaseModel):
    model_config = {"frozen": True}

    id: str
    catalog_item_id: str
    restaurant_id: str
    mode: ImageJobMode
    status: ImageJobStatus = ImageJobStatus.GENERATING
    prompt: str | None = None
    source_image_url: str | None = None
    generated_image_url: str | None = None
    new_description: str | None = None
    created_by: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejected_by: str | None = None
    rejected_at: datetime | None = None
    applied_at: datetime | None = None
    error_message: str | None = None
    retry_count: int = Field(default=0, ge=0)
    created_at: datetime
    updated_at: datetime

    @property
    def is_async(self) -> bool:
        return ImageJobRules.is_async(self.mode)


class CreateImageJobInput(BaseModel):
    """Payload for starting a generation job on one catalog item."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    catalog_item_id: UuidStr
    mode: ImageJobMode
    prompt: str | None = None
    source_image_url: HttpUrl | None = Field(default=None, validate_default=True)
    new_description: str | None = Field(default=None, validate_default=True)

    @field_validator("source_image_url")
    @classmethod
    def _source_required_for_mode(
        cls, value: HttpUrl | None, info: ValidationInfo
    ) -> HttpUrl | None:
        mode = info.data.get("mode")
        if value is None and mode in _SOURCE_IMAGE_MODES:
            raise ValueError(f"source_image_url is required for mode '{mode}'")
        return value

    @field_validator("new_description")
    @classmethod
    def _description_required_for_mode(cls, value: str | None, info: ValidationInfo) -> str | None:
        if info.data.get("mode") == ImageJobMode.FROM_NEW_DESCRIPTION and not (value or "").strip():
            raise ValueError("new_description is required for mode 'from_new_description'")
        return value


class ImageJobRules:
    """Pure transition and guard predicates for image jobs."""

    @staticmethod
    def can_transition_to(job: ImageJob, target: str) -> bool:
        return is_valid_transition(job.status, target, IMAGE_JOB_TRANSITIONS)

    @staticmethod
    def can_approve(job: ImageJob) -> bool:
        return ImageJobRules.can_transition_to(job, ImageJobStatus.APPROVED)

    @staticmethod
    def can_reject(job: ImageJob) -> bool:
        return ImageJobRules.can_transition_to(job, ImageJobStatus.REJECTED)

    @staticmethod
    def can_apply_to_catalog(job: ImageJob) -> bool:
        return ImageJobRules.can_transition_to(job, ImageJobStatus.APPLIED_TO_CATALOG)

    @staticmethod
    def can_retry(job: ImageJob) -> bool:
        return (
            ImageJobRules.can_transition_to(job, ImageJobStatus.GENERATING)
            and job.retry_count < MAX_IMAGE_RETRIES
        )

    @staticmethod
    def retry_limit_reached(job: ImageJob) -> bool:
        """True for a failed job that has used every retry."""
        return job.status == ImageJobStatus.FAILED and job.retry_count >= MAX_IMAGE_RETRIES

    @staticmethod
    def is_async(mode: str) -> bool:
        return mode in ASYNC_MODES

    @staticmethod
    def initial_status(mode: str) -> ImageJobStatus:
        """Direct uploads already carry their image and skip generation."""
        if mode == ImageJobMode.DIRECT_UPLOAD:
            return ImageJobStatus.READY_FOR_APPROVAL
        return ImageJobStatus.GENERATING
