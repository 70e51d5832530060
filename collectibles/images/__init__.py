"""Image upload and delete orchestration over Cloudflare Images."""

from collectibles.images.client import CloudflareImagesClient, ImageServiceError
from collectibles.images.service import ImageService, ImageTarget

__all__ = ["CloudflareImagesClient", "ImageService", "ImageServiceError", "ImageTarget"]
