"""
Storage Operator - persist generated images and return their public URLs.

Images land in the generated-images bucket under
``{org_id}/{pack_id}/{direction}-{ratio}-{timestamp}.{ext}``.
"""

import base64
import logging
import os
import time
import urllib.request
from uuid import UUID

from operators.errors import ProviderError
from utils.gcs_utils import blob_name_from_public_url, delete_file, upload_file

logger = logging.getLogger(__name__)

GENERATED_IMAGES_BUCKET = os.getenv("GCS_GENERATED_IMAGES_BUCKET", "generated-images")
DOWNLOAD_TIMEOUT_SECONDS = 90

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
}


def build_asset_path(
    org_id: UUID,
    pack_id: UUID,
    direction: str,
    aspect_ratio: str,
    content_type: str = "image/png",
) -> str:
    ext = _EXTENSIONS.get(content_type, "png")
    ratio = aspect_ratio.replace(":", "x")
    return f"{org_id}/{pack_id}/{direction}-{ratio}-{int(time.time() * 1000)}.{ext}"


def upload_bytes(
    image_bytes: bytes,
    path: str,
    content_type: str = "image/png",
    bucket_name: str | None = None,
) -> str:
    if not image_bytes:
        raise ProviderError("Image provider returned an empty image")

    info = upload_file(
        bucket_name=bucket_name or GENERATED_IMAGES_BUCKET,
        contents=image_bytes,
        destination_blob_name=path,
        content_type=content_type,
    )
    if not info:
        raise ProviderError("Failed to upload image to storage")
    return info["url"]


def upload_from_url(url: str, path: str, bucket_name: str | None = None) -> str:
    try:
        with urllib.request.urlopen(url, timeout=DOWNLOAD_TIMEOUT_SECONDS) as response:
            payload = response.read()
            content_type = response.headers.get("Content-Type", "image/png")
    except Exception as exc:
        raise ProviderError(f"Failed to download generated image: {exc}") from exc
    return upload_bytes(payload, path, content_type=content_type, bucket_name=bucket_name)


def upload_base64(
    data: str,
    path: str,
    content_type: str = "image/png",
    bucket_name: str | None = None,
) -> str:
    if data.startswith("data:"):
        header, _, data = data.partition(",")
        if ";" in header:
            content_type = header[5:].split(";", 1)[0] or content_type
    try:
        payload = base64.b64decode(data)
    except ValueError as exc:
        raise ProviderError("Generated image is not valid base64") from exc
    return upload_bytes(payload, path, content_type=content_type, bucket_name=bucket_name)


def delete_generated_image(url: str | None, bucket_name: str | None = None) -> bool:
    bucket = bucket_name or GENERATED_IMAGES_BUCKET
    blob_name = blob_name_from_public_url(bucket, url or "")
    if not blob_name:
        return False
    return delete_file(bucket, blob_name)
