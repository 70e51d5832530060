"""Image upload and delete endpoints.

Both endpoints answer failures with ``{"success": false, "error": ...}``
rather than the generic API error body, so existing clients of the upload
and delete proxies keep working.
"""

from fastapi import APIRouter, File, Form, UploadFile, status
from fastapi.responses import JSONResponse

from collectibles.auth.dependencies import OptionalUser
from collectibles.images.client import ImageServiceError
from collectibles.images.dependencies import ImageServiceDep
from collectibles.images.schemas import (
    BatchUploadResponse,
    DeleteImageRequest,
    DeleteImageResponse,
    ImageErrorResponse,
    SingleUploadResponse,
    UploadResult,
)
from collectibles.images.service import ImageTarget, ImageUpload

router = APIRouter(prefix="/images", tags=["images"])


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ImageErrorResponse(error=message).model_dump(by_alias=True),
    )


@router.post(
    "/upload",
    response_model=SingleUploadResponse | BatchUploadResponse,
    responses={400: {"model": ImageErrorResponse}, 401: {"model": ImageErrorResponse}},
    summary="Upload one or more images",
)
async def upload_images(
    image_service: ImageServiceDep,
    user: OptionalUser,
    file: UploadFile | None = File(None, description="A single image"),
    files: list[UploadFile] | None = File(None, description="A batch of images"),
    target: ImageTarget = Form(ImageTarget.ITEM, description="item or category"),
    existing: int = Form(0, ge=0, le=4, description="Images the record already has"),
) -> SingleUploadResponse | BatchUploadResponse | JSONResponse:
    """Upload images to the image service.

    A single ``file`` answers with its URL and asset id; a ``files`` batch
    answers with one result per file, and one failed file does not abort
    the others.
    """
    if user is None:
        return _error("Unauthorized", status.HTTP_401_UNAUTHORIZED)
    if file is None and not files:
        return _error("No file provided", status.HTTP_400_BAD_REQUEST)

    if file is not None and not files:
        upload = ImageUpload(
            filename=file.filename or "upload",
            content=await file.read(),
            content_type=file.content_type or "application/octet-stream",
        )
        (outcome,) = await image_service.upload_batch([upload], target, existing)
        if outcome.limited:
            return _error(outcome.error, status.HTTP_400_BAD_REQUEST)
        if not outcome.ok:
            return _error(outcome.error or "Failed to upload image", status.HTTP_502_BAD_GATEWAY)
        return SingleUploadResponse(image_url=outcome.url, cloudflare_id=outcome.asset_id)

    batch = [f for f in [file, *(files or [])] if f is not None]
    uploads = [
        ImageUpload(
            filename=f.filename or f"upload-{index}",
            content=await f.read(),
            content_type=f.content_type or "application/octet-stream",
        )
        for index, f in enumerate(batch)
    ]
    outcomes = await image_service.upload_batch(uploads, target, existing)
    results = [
        UploadResult(
            filename=outcome.filename,
            success=outcome.ok,
            image_url=outcome.url,
            cloudflare_id=outcome.asset_id,
            error=outcome.error,
        )
        for outcome in outcomes
    ]
    return BatchUploadResponse(success=all(r.success for r in results), results=results)


@router.post(
    "/delete",
    response_model=DeleteImageResponse,
    responses={400: {"model": ImageErrorResponse}, 401: {"model": ImageErrorResponse}},
    summary="Delete an image",
)
async def delete_image(
    data: DeleteImageRequest,
    image_service: ImageServiceDep,
    user: OptionalUser,
) -> DeleteImageResponse | JSONResponse:
    """Delete an asset; one the image service no longer has counts as deleted."""
    if user is None:
        return _error("Unauthorized", status.HTTP_401_UNAUTHORIZED)
    if not data.image_id.strip():
        return _error("No image ID provided", status.HTTP_400_BAD_REQUEST)

    try:
        message = await image_service.client.delete(data.image_id.strip())
    except ImageServiceError as e:
        return _error(e.message, e.status_code)
    return DeleteImageResponse(message=message)
