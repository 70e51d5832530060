"""Access to the application-wide image service."""

from typing import Annotated

from fastapi import Depends, Request

from collectibles.core.exceptions import UpstreamServiceError
from collectibles.images.service import ImageService


def get_image_service(request: Request) -> ImageService:
    service: ImageService | None = getattr(request.app.state, "image_service", None)
    if service is None:
        raise UpstreamServiceError("Image service is not configured")
    return service


ImageServiceDep = Annotated[ImageService, Depends(get_image_service)]
