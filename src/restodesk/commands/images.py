"""Command group: catalog image jobs."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from restodesk.commands._base import RestoGroup
from restodesk.domain.image_job import ImageJobMode
from restodesk.domain.lifecycle import ImageJobStatus
from restodesk.infrastructure.repositories.contracts import ImageJobFilters
from restodesk.services.catalog import ImageJobService

if TYPE_CHECKING:
    from restodesk.commands._context import AppContext

_IMAGE_EXAMPLES = """\
  restodesk image generate <item-id> --mode from_description --prompt "rustic plate"
  restodesk image generate <item-id> --mode direct_upload --source-url https://cdn/x.jpg
  restodesk image approve <job-id>
  restodesk image apply <job-id>
  restodesk image list --status ready_for_approval"""


@click.group(cls=RestoGroup, examples=_IMAGE_EXAMPLES)
@click.pass_obj
def image(app: AppContext) -> None:
    """Generate, review and publish catalog images."""


@image.command(
    examples="""\
  restodesk image generate <item-id> --mode improve_existing
  restodesk image generate <item-id> --mode from_image --source-url https://cdn/ref.jpg
  restodesk image generate <item-id> --mode from_new_description --description "Smoked brisket" """
)
@click.argument("catalog_item_id")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in ImageJobMode]),
    required=True,
    help="How the image is produced.",
)
@click.option("--prompt", default=None, help="Extra guidance for the generator.")
@click.option("--source-url", default=None, help="Reference or uploaded image URL.")
@click.option("--description", "new_description", default=None, help="New item description.")
@click.pass_obj
def generate(
    app: AppContext,
    catalog_item_id: str,
    mode: str,
    prompt: str | None,
    source_url: str | None,
    new_description: str | None,
) -> None:
    """Start an image job for one catalog item."""
    restaurant_id = app.restaurant_id
    data = {
        "catalog_item_id": catalog_item_id,
        "mode": mode,
        "prompt": prompt,
        "source_image_url": source_url,
        "new_description": new_description,
    }
    app.emit(
        app.run(
            lambda backend: ImageJobService(backend).generate_image(
                restaurant_id, data, actor_id=app.actor_id
            )
        )
    )


@image.command()
@click.argument("job_id")
@click.pass_obj
def approve(app: AppContext, job_id: str) -> None:
    """Approve an image that is ready for approval."""
    app.emit(
        app.run(
            lambda backend: ImageJobService(backend).approve_image(job_id, actor_id=app.actor_id)
        )
    )


@image.command()
@click.argument("job_id")
@click.pass_obj
def reject(app: AppContext, job_id: str) -> None:
    """Reject an image that is ready for approval."""
    app.emit(
        app.run(
            lambda backend: ImageJobService(backend).reject_image(job_id, actor_id=app.actor_id)
        )
    )


@image.command()
@click.argument("job_id")
@click.pass_obj
def apply(app: AppContext, job_id: str) -> None:
    """Publish an approved image to its catalog item."""
    app.emit(app.run(lambda backend: ImageJobService(backend).apply_image_to_catalog(job_id)))


@image.command()
@click.argument("job_id")
@click.pass_obj
def retry(app: AppContext, job_id: str) -> None:
    """Regenerate a rejected or failed image."""
    app.emit(app.run(lambda backend: ImageJobService(backend).retry_image_generation(job_id)))


@image.command()
@click.argument("job_id")
@click.argument("image_url")
@click.pass_obj
def complete(app: AppContext, job_id: str, image_url: str) -> None:
    """Record the generated image for a running job."""
    app.emit(
        app.run(
            lambda backend: ImageJobService(backend).complete_image_generation(job_id, image_url)
        )
    )


@image.command()
@click.argument("job_id")
@click.argument("error_message")
@click.pass_obj
def fail(app: AppContext, job_id: str, error_message: str) -> None:
    """Mark a running job as failed."""
    app.emit(
        app.run(lambda backend: ImageJobService(backend).fail_image_job(job_id, error_message))
    )


@image.command()
@click.argument("job_id")
@click.pass_obj
def archive(app: AppContext, job_id: str) -> None:
    """Archive a finished job."""
    app.emit(app.run(lambda backend: ImageJobService(backend).archive_image_job(job_id)))


@image.command(name="list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in ImageJobStatus]),
    default=None,
    help="Filter by status.",
)
@click.option("--item", "catalog_item_id", default=None, help="Filter by catalog item.")
@click.pass_obj
def list_jobs(app: AppContext, status: str | None, catalog_item_id: str | None) -> None:
    """List image jobs for the selected restaurant."""
    restaurant_id = app.restaurant_id
    filters = ImageJobFilters(status=status, catalog_item_id=catalog_item_id)
    app.emit(
        app.run(lambda backend: ImageJobService(backend).list_image_jobs(restaurant_id, filters))
    )
