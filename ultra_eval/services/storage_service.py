# ultra_eval/services/storage_service.py
import logging
import os
import uuid
from typing import Any, BinaryIO

from ultra_eval.core.config import Settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


def build_s3_client(settings: Settings) -> Any:
    """Create the S3 client once per process; None when no bucket is configured."""
    if not settings.S3_BUCKET_NAME:
        return None
    import boto3

    return boto3.client(
        "s3",
        region_name=settings.AWS_REGION,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
    )


def make_object_key(filename: str | None) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    return f"attachments/{uuid.uuid4().hex}{ext}"


class AttachmentStorage:
    def __init__(self, client: Any, bucket: str | None, region: str):
        self.client = client
        self.bucket = bucket
        self.region = region

    @property
    def enabled(self) -> bool:
        return self.client is not None and bool(self.bucket)

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def upload(self, fileobj: BinaryIO, filename: str | None, content_type: str | None) -> str:
        """Store one attachment under a random key and return its public URL."""
        if not self.enabled:
            raise StorageError("Object storage is not configured")

        key = make_object_key(filename)
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self.client.upload_fileobj(fileobj, self.bucket, key, ExtraArgs=extra)
        except Exception as e:
            logger.error(f"Upload of {filename} to s3://{self.bucket}/{key} failed: {e}")
            raise StorageError(f"Upload failed: {e}") from e

        logger.info(f"Uploaded {filename} to s3://{self.bucket}/{key}")
        return self.public_url(key)
