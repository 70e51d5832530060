"""Request and response bodies for the image endpoints."""

from pydantic import Field

from collectibles.catalog.schemas import CamelModel


class UploadResult(CamelModel):
    filename: str
    success: bool
    image_url: str | None = None
    cloudflare_id: str | None = None
    error: str | None = None


class SingleUploadResponse(CamelModel):
    success: bool = True
    image_url: str
    cloudflare_id: str


class BatchUploadResponse(CamelModel):
    """One result per submitted file, in submission order."""

    success: bool
    results: list[UploadResult]


class DeleteImageRequest(CamelModel):
    """An empty id is answered with a 400 in the proxy error shape."""

    image_id: str = Field("", max_length=255)


class DeleteImageResponse(CamelModel):
    success: bool = True
    message: str


class ImageErrorResponse(CamelModel):
    success: bool = False
    error: str
