# resume_insights/services/storage.py
"""
Object store for uploaded resume bytes.

Tries the configured S3-compatible client (Cloudflare R2 / MinIO), else falls
back to a local directory. Locators:
  - s3://<bucket>/<key>           S3 object
  - <S3_PUBLIC_BASE_URL>/<key>    S3 object exposed over http(s)
  - anything else                 local file path
"""

import asyncio
import logging
import uuid
from functools import partial
from pathlib import Path
from typing import Optional

import aiofiles
import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from resume_insights.core.config import Settings
from resume_insights.core.errors import ExtractionFailed

logger = logging.getLogger(__name__)

S3_SCHEME = "s3://"


def _get_s3_client(settings: Settings):
    """
    Return a boto3 S3 client configured for Cloudflare R2 or MinIO.
    If no S3_ENDPOINT or credentials are configured, returns None.
    """
    endpoint = settings.S3_ENDPOINT
    access_key = settings.S3_ACCESS_KEY
    secret_key = settings.S3_SECRET_KEY

    # If we have MinIO specific env set and S3 provider is minio, prefer that
    if settings.S3_PROVIDER and settings.S3_PROVIDER.lower() == "minio" and settings.MINIO_ENDPOINT:
        endpoint = settings.MINIO_ENDPOINT
        access_key = settings.MINIO_ACCESS_KEY
        secret_key = settings.MINIO_SECRET_KEY

    if not endpoint or not access_key or not secret_key or not settings.S3_BUCKET:
        return None

    # Use signature s3v4 for compatibility (Cloudflare R2 & MinIO)
    return boto3.client(
        "s3",
        endpoint_url=str(endpoint),
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        config=Config(signature_version="s3v4"),
        region_name=(settings.S3_REGION or None),
    )


def ensure_bucket(client, bucket: str) -> bool:
    """
    Ensure the bucket exists. For MinIO this may be necessary in dev.
    Returns True if bucket exists or was created successfully.
    """
    try:
        client.head_bucket(Bucket=bucket)
        return True
    except ClientError:
        # R2 buckets are created in the Cloudflare UI; MinIO accepts create_bucket
        try:
            client.create_bucket(Bucket=bucket)
            return True
        except ClientError:
            return False


class ObjectStore:
    def __init__(self, settings: Settings, s3_client=None):
        self.bucket = settings.S3_BUCKET
        self.public_base_url = (settings.S3_PUBLIC_BASE_URL or "").rstrip("/") or None
        self.local_dir = Path(settings.LOCAL_UPLOAD_DIR)
        self._s3 = s3_client if s3_client is not None else _get_s3_client(settings)
        self._bucket_checked = False

    @property
    def uses_s3(self) -> bool:
        return self._s3 is not None

    async def _run(self, fn, *args, **kwargs):
        # boto3 is blocking
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(fn, *args, **kwargs))

    def _s3_key(self, location: str) -> Optional[str]:
        if location.startswith(S3_SCHEME):
            _, _, rest = location[len(S3_SCHEME):].partition("/")
            return rest or None
        if self.public_base_url and location.startswith(self.public_base_url + "/"):
            return location[len(self.public_base_url) + 1:]
        return None

    def is_s3_location(self, location: str) -> bool:
        return location.startswith(S3_SCHEME)

    async def put(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        """
        Store bytes and return the locator understood by get/delete.
        """
        key = f"resume-{uuid.uuid4().hex}{Path(filename or '').suffix.lower()}"

        if self._s3 is not None:
            if not self._bucket_checked:
                self._bucket_checked = await self._run(ensure_bucket, self._s3, self.bucket)
            await self._run(
                self._s3.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
            logger.debug("Stored %s bytes at s3 key %s", len(data), key)
            if self.public_base_url:
                return f"{self.public_base_url}/{key}"
            return f"{S3_SCHEME}{self.bucket}/{key}"

        self.local_dir.mkdir(parents=True, exist_ok=True)
        local_path = self.local_dir / key
        async with aiofiles.open(local_path, "wb") as out:
            await out.write(data)
        logger.debug("Stored %s bytes at %s", len(data), local_path)
        return str(local_path)

    async def get(self, location: str) -> bytes:
        key = self._s3_key(location)
        if key is not None:
            if self._s3 is None:
                raise ExtractionFailed(f"No S3 client configured to read {location}")
            try:
                resp = await self._run(self._s3.get_object, Bucket=self.bucket, Key=key)
                return await self._run(resp["Body"].read)
            except (ClientError, BotoCoreError) as exc:
                logger.warning("S3 read failed for %s: %s", location, exc)
                raise ExtractionFailed(f"Cannot read stored object {key}: {exc}", cause=exc) from exc

        async with aiofiles.open(location, "rb") as fh:
            return await fh.read()

    async def delete(self, location: str) -> bool:
        """
        Delete object from S3 (or local file). Returns True on success.
        """
        key = self._s3_key(location)
        if key is not None:
            if self._s3 is None:
                logger.warning("Cannot release %s: no S3 client configured", location)
                return False
            try:
                await self._run(self._s3.delete_object, Bucket=self.bucket, Key=key)
                return True
            except (ClientError, BotoCoreError):
                logger.warning("S3 delete failed for %s", location, exc_info=True)
                return False

        p = Path(location)
        try:
            await self._run(p.unlink, missing_ok=True)
            return True
        except OSError:
            logger.warning("Local delete failed for %s", location, exc_info=True)
            return False
