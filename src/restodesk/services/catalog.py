"""ImageJobService: catalog image generation, approval and publishing.

Publishing (``apply_image_to_catalog``) is the only path that changes a
live catalog item, and it is reachable only from ``approved``.
"""

from __future__ import annotations

from typing import Any

from restodesk.domain.errors import BusinessRuleError, DomainError, NotFoundError, ValidationError
from restodesk.domain.image_job import CreateImageJobInput, ImageJob, ImageJobMode, ImageJobRules
from restodesk.domain.lifecycle import ImageJobStatus
from restodesk.domain.validation import parse_input, require_id, require_text
from restodesk.infrastructure.repositories.contracts import ImageJobFilters
from restodesk.services.base import BaseService, use_case
from restodesk.services.telemetry import traced

ENTITY = "image_job"


def _cannot(job: ImageJob, verb: str, rule: str) -> BusinessRuleError:
    return BusinessRuleError(
        message=f"Image job with status '{job.status}' cannot be {verb}",
        rule=rule,
    )


class ImageJobService(BaseService):
    """Lifecycle operations on image jobs."""

    async def _load(self, job_id: str | None) -> ImageJob | DomainError:
        if err := require_id(job_id, "job_id", "Job ID"):
            return err
        job = await self._repos.image_jobs.get_by_id(job_id)  # type: ignore[arg-type]
        if job is None:
            return NotFoundError.for_entity(ENTITY, job_id)
        return job

    @traced
    @use_case("generate_image")
    async def generate_image(
        self,
        restaurant_id: str,
        data: CreateImageJobInput | dict[str, Any],
        *,
        actor_id: str | None = None,
    ) -> ImageJob | DomainError:
        """Start a generation job for one catalog item.

        ``direct_upload`` jobs carry their image already and move straight
        to ``ready_for_approval``; every other mode stays ``generating``
        until :meth:`complete_image_generation` or :meth:`fail_image_job`.
        """
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        parsed = parse_input(CreateImageJobInput, data)
        if isinstance(parsed, ValidationError):
            return parsed

        item = await self._repos.catalog.get_item_by_id(parsed.catalog_item_id)
        if item is None:
            return NotFoundError.for_entity("catalog_item", parsed.catalog_item_id)
        if item.restaurant_id != restaurant_id:
            return ValidationError(
                message="Catalog item does not belong to this restaurant",
                field="catalog_item_id",
            )
        if parsed.mode == ImageJobMode.IMPROVE_EXISTING and not item.image_url:
            return BusinessRuleError(
                message="Catalog item has no image to improve",
                rule="IMAGE_SOURCE_MISSING",
            )

        job = await self._repos.image_jobs.create(restaurant_id, parsed, created_by=actor_id)
        self._emit_created(ENTITY, job)
        return job

    @traced
    @use_case("approve_image")
    async def approve_image(
        self, job_id: str, *, actor_id: str | None = None
    ) -> ImageJob | DomainError:
        job = await self._load(job_id)
        if isinstance(job, DomainError):
            return job
        if not ImageJobRules.can_approve(job):
            return _cannot(job, "approved", "IMAGE_CANNOT_APPROVE")

        updated = await self._repos.image_jobs.approve(
            job.id, actor_id=actor_id, expected_status=job.status
        )
        self._emit_transition(ENTITY, job.status, updated)
        return updated

    @traced
    @use_case("reject_image")
    async def reject_image(
        self, job_id: str, *, actor_id: str | None = None
    ) -> ImageJob | DomainError:
        job = await self._load(job_id)
        if isinstance(job, DomainError):
            return job
        if not ImageJobRules.can_reject(job):
            return _cannot(job, "rejected", "IMAGE_CANNOT_REJECT")

        updated = await self._repos.image_jobs.reject(
            job.id, actor_id=actor_id, expected_status=job.status
        )
        self._emit_transition(ENTITY, job.status, updated)
        return updated

    @traced
    @use_case("apply_image_to_catalog")
    async def apply_image_to_catalog(self, job_id: str) -> ImageJob | DomainError:
        """Publish an approved image to its catalog item."""
        job = await self._load(job_id)
        if isinstance(job, DomainError):
            return job
        if not ImageJobRules.can_apply_to_catalog(job):
            return _cannot(job, "applied to the catalog", "IMAGE_CANNOT_APPLY")
        if not job.generated_image_url:
            return BusinessRuleError(
                message="Image job has no generated image to publish",
                rule="IMAGE_NOT_GENERATED",
            )

        updated = await self._repos.image_jobs.apply_to_catalog(
            job.id, expected_status=job.status
        )
        self._emit_transition(ENTITY, job.status, updated)
        return updated

    @traced
    @use_case("retry_image_generation")
    async def retry_image_generation(self, job_id: str) -> ImageJob | DomainError:
        job = await self._load(job_id)
        if isinstance(job, DomainError):
            return job
        if ImageJobRules.retry_limit_reached(job):
            return BusinessRuleError(
                message=f"Image job has already been retried {job.retry_count} times",
                rule="IMAGE_RETRY_LIMIT_REACHED",
            )
        if not ImageJobRules.can_retry(job):
            return _cannot(job, "retried", "IMAGE_CANNOT_RETRY")

        updated = await self._repos.image_jobs.retry(job.id, expected_status=job.status)
        self._emit_transition(ENTITY, job.status, updated)
        return updated

    @traced
    @use_case("complete_image_generation")
    async def complete_image_generation(
        self, job_id: str, image_url: str
    ) -> ImageJob | DomainError:
        """Record the output of an out-of-band generation run."""
        if err := require_text(image_url, "image_url", "Image URL is required"):
            return err
        job = await self._load(job_id)
        if isinstance(job, DomainError):
            return job
        if not ImageJobRules.can_transition_to(job, ImageJobStatus.READY_FOR_APPROVAL):
            return _cannot(job, "marked ready for approval", "IMAGE_INVALID_TRANSITION")

        updated = await self._repos.image_jobs.complete_generation(
            job.id, image_url.strip(), expected_status=job.status
        )
        self._emit_transition(ENTITY, job.status, updated)
        return updated

    @traced
    @use_case("fail_image_job")
    async def fail_image_job(self, job_id: str, error_message: str) -> ImageJob | DomainError:
        if err := require_text(error_message, "error_message", "Error message is required"):
            return err
        job = await self._load(job_id)
        if isinstance(job, DomainError):
            return job
        if not ImageJobRules.can_transition_to(job, ImageJobStatus.FAILED):
            return _cannot(job, "marked as failed", "IMAGE_INVALID_TRANSITION")

        updated = await self._repos.image_jobs.mark_failed(
            job.id, error_message.strip(), expected_status=job.status
        )
        self._emit_transition(ENTITY, job.status, updated)
        return updated

    @traced
    @use_case("archive_image_job")
    async def archive_image_job(self, job_id: str) -> ImageJob | DomainError:
        job = await self._load(job_id)
        if isinstance(job, DomainError):
            return job
        if not ImageJobRules.can_transition_to(job, ImageJobStatus.ARCHIVED):
            return _cannot(job, "archived", "IMAGE_INVALID_TRANSITION")

        updated = await self._repos.image_jobs.archive(job.id, expected_status=job.status)
        self._emit_transition(ENTITY, job.status, updated)
        return updated

    @traced
    @use_case("list_image_jobs")
    async def list_image_jobs(
        self, restaurant_id: str, filters: ImageJobFilters | None = None
    ) -> list[ImageJob] | DomainError:
        if err := require_id(restaurant_id, "restaurant_id", "Restaurant ID"):
            return err
        return await self._repos.image_jobs.get_by_restaurant(restaurant_id, filters)
