"""Cloudflare Images API client.

Server-side replacement for the upload/delete proxy functions: the API token
and account hash never leave the server, clients only see the delivery URL
and the asset id.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from collectibles.config.settings import Settings
from collectibles.core.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)


class ImageServiceError(UpstreamServiceError):
    """Raised when the image service cannot complete a request."""


@dataclass(frozen=True)
class UploadedImage:
    url: str
    asset_id: str


class CloudflareImagesClient:
    """Thin async wrapper around the Cloudflare Images v1 endpoints."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self._http = http_client or httpx.AsyncClient(
            timeout=settings.image_service_timeout
        )

    @property
    def _images_url(self) -> str:
        base = self.settings.cloudflare_api_base_url.rstrip("/")
        return f"{base}/accounts/{self.settings.cloudflare_account_id}/images/v1"

    def _headers(self) -> dict[str, str]:
        missing = self.settings.missing_image_credentials
        if missing:
            raise ImageServiceError(
                f"Missing Cloudflare credentials: {', '.join(missing)}"
            )
        token = self.settings.cloudflare_api_token.get_secret_value()  # type: ignore[union-attr]
        return {"Authorization": f"Bearer {token}"}

    def delivery_url(self, asset_id: str) -> str:
        account_hash = self.settings.cloudflare_account_hash
        hash_value = account_hash.get_secret_value() if account_hash else ""
        base = self.settings.image_delivery_base_url.rstrip("/")
        return f"{base}/{hash_value}/{asset_id}/public"

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as e:
            raise ImageServiceError("Image service returned invalid JSON") from e
        if not isinstance(payload, dict):
            raise ImageServiceError("Image service returned an unexpected payload")
        return payload

    async def upload(
        self,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> UploadedImage:
        """Upload one file and return its public URL and asset id."""
        headers = self._headers()
        try:
            response = await self._http.post(
                self._images_url,
                headers=headers,
                files={"file": (filename, content, content_type)},
            )
        except httpx.HTTPError as e:
            raise ImageServiceError(f"Failed to upload to Cloudflare: {e}") from e

        if response.is_error:
            raise ImageServiceError(
                f"Failed to upload to Cloudflare: {response.status_code} - {response.text}"
            )

        payload = self._json(response)
        asset_id = (payload.get("result") or {}).get("id")
        if not payload.get("success") or not asset_id:
            raise ImageServiceError("Failed to upload image to Cloudflare")

        logger.info("Uploaded image", extra={"asset_id": asset_id, "image_name": filename})
        return UploadedImage(url=self.delivery_url(asset_id), asset_id=asset_id)

    async def delete(self, asset_id: str) -> str:
        """Delete an asset; an asset that is already gone counts as deleted.

        Returns:
            A human-readable status message.
        """
        headers = self._headers()
        try:
            response = await self._http.delete(
                f"{self._images_url}/{asset_id}", headers=headers
            )
        except httpx.HTTPError as e:
            raise ImageServiceError(f"Failed to delete from Cloudflare: {e}") from e

        if response.status_code == httpx.codes.NOT_FOUND:
            return "Image already deleted or not found"
        if response.is_error:
            raise ImageServiceError(
                f"Failed to delete from Cloudflare: {response.status_code} - {response.text}"
            )
        if not self._json(response).get("success"):
            raise ImageServiceError("Failed to delete image from Cloudflare")

        logger.info("Deleted image", extra={"asset_id": asset_id})
        return "Image deleted successfully"

    async def aclose(self) -> None:
        await self._http.aclose()
