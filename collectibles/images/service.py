"""Image upload/delete orchestration.

Uploads in a batch run concurrently and each file gets its own outcome, so
one failed file never aborts its siblings. Deletes are best-effort: failures
are logged and swallowed so that removing a category or item is never
blocked by image cleanup.
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

import httpx

from collectibles.images.client import CloudflareImagesClient, ImageServiceError

logger = logging.getLogger(__name__)


class ImageTarget(StrEnum):
    ITEM = "item"
    CATEGORY = "category"


@dataclass(frozen=True)
class ImageUpload:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class UploadOutcome:
    filename: str
    url: str | None = None
    asset_id: str | None = None
    error: str | None = None
    limited: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class ImageService:
    """Applies per-record image limits on top of the image service client."""

    def __init__(
        self,
        client: CloudflareImagesClient,
        max_item_images: int = 4,
        max_category_images: int = 1,
    ) -> None:
        self.client = client
        self.limits = {
            ImageTarget.ITEM: max_item_images,
            ImageTarget.CATEGORY: max_category_images,
        }

    def limit_for(self, target: ImageTarget) -> int:
        return self.limits[target]

    async def _upload_one(self, upload: ImageUpload) -> UploadOutcome:
        try:
            uploaded = await self.client.upload(
                upload.filename, upload.content, upload.content_type
            )
        except ImageServiceError as e:
            logger.warning(
                "Image upload failed",
                extra={"image_name": upload.filename, "error": e.message},
            )
            return UploadOutcome(filename=upload.filename, error=e.message)
        return UploadOutcome(
            filename=upload.filename, url=uploaded.url, asset_id=uploaded.asset_id
        )

    async def upload_batch(
        self,
        uploads: Sequence[ImageUpload],
        target: ImageTarget = ImageTarget.ITEM,
        existing: int = 0,
    ) -> list[UploadOutcome]:
        """Upload files concurrently, one outcome per file in input order.

        Args:
            uploads: The files to upload.
            target: Whether the images belong to an item or a category.
            existing: Images the record already has; they count against the limit.
        """
        remaining = max(self.limit_for(target) - existing, 0)
        accepted, rejected = uploads[:remaining], uploads[remaining:]

        outcomes = list(
            await asyncio.gather(*(self._upload_one(upload) for upload in accepted))
        )
        limit = self.limit_for(target)
        for upload in rejected:
            outcomes.append(
                UploadOutcome(
                    filename=upload.filename,
                    error=f"Maximum of {limit} image(s) allowed per {target.value}",
                    limited=True,
                )
            )
        return outcomes

    async def delete_asset(self, asset_id: str) -> bool:
        """Delete one asset; never raises.

        Returns:
            True if the image service confirmed the asset is gone.
        """
        try:
            await self.client.delete(asset_id)
        except (ImageServiceError, httpx.HTTPError) as e:
            logger.warning(
                "Image cleanup failed",
                extra={"asset_id": asset_id, "error": str(e)},
            )
            return False
        return True

    async def delete_assets(self, asset_ids: Iterable[str | None]) -> int:
        """Best-effort delete of several assets.

        Returns:
            How many assets were confirmed deleted.
        """
        unique = list(dict.fromkeys(asset_id for asset_id in asset_ids if asset_id))
        if not unique:
            return 0
        results = await asyncio.gather(*(self.delete_asset(a) for a in unique))
        return sum(results)
