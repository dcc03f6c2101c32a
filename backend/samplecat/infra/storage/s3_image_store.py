from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from samplecat.services._shared.errors import ImageUploadError
from samplecat.services._shared.ports import ImageStore, StoredImage, new_image_key

log = logging.getLogger(__name__)


class S3ImageStore(ImageStore):
    """
    Image store backed by an S3-compatible bucket.

    Objects are written under ``<folder>/<uuid4 hex>`` and served from
    ``public_base_url`` when set, otherwise from the bucket's virtual-hosted
    URL.

    :param bucket: Bucket name.
    :param region: Bucket region.
    :param endpoint_url: Custom endpoint (MinIO, R2, LocalStack...).
    :param public_base_url: CDN or public origin for the objects.
    :param client: Pre-built boto3 S3 client (tests inject a mock).
    """

    def __init__(
        self,
        bucket: str,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.bucket = bucket
        self.region = region or "us-east-1"
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.s3_client = client or boto3.client(
            "s3", region_name=self.region, endpoint_url=endpoint_url
        )

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def upload(self, data: bytes, *, folder: str, content_type: str | None = None) -> StoredImage:
        if not data:
            raise ImageUploadError("Failed to upload file: empty file")

        key = new_image_key(folder)
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type

        try:
            self.s3_client.put_object(**params)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "Unknown")
            log.error("S3 upload failed for %s: %s", key, code)
            raise ImageUploadError(f"Failed to upload file: {code}") from exc
        except BotoCoreError as exc:
            log.error("S3 upload failed for %s: %s", key, exc)
            raise ImageUploadError(f"Failed to upload file: {exc}") from exc

        log.info("Uploaded image", extra={"image_id": key})
        return StoredImage(url=self.public_url(key), image_id=key)

    def delete(self, image_id: str) -> None:
        if not image_id:
            return
        try:
            self.s3_client.delete_object(Bucket=self.bucket, Key=image_id)
        except (ClientError, BotoCoreError) as exc:
            log.warning("Failed to delete image: %s", exc, extra={"image_id": image_id})
