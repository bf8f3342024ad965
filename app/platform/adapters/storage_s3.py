import asyncio
import logging
import re
import unicodedata
import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from app.platform.ports.object_storage import ObjectStoragePort, StoredObject, timestamped_name, thumbnail_key
from app.core.config import settings

log = logging.getLogger("media.storage.s3")

_NOT_FOUND = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}

def sanitize_object_name(file_name: str) -> str:
    """Object-store safe name: diacritics stripped, anything outside [a-z0-9._-] collapsed to `_`, lower-cased."""
    name = unicodedata.normalize("NFD", file_name)
    name = "".join(ch for ch in name if not unicodedata.combining(ch))
    name = name.replace("ñ", "n").replace("Ñ", "N")
    name = re.sub(r"[^a-zA-Z0-9._-]", "_", name)
    name = re.sub(r"_+", "_", name)
    return name.lower()

class S3Storage(ObjectStoragePort):
    name = "s3"

    def __init__(self, client=None, *, endpoint_url: str | None = None, public_base_url: str | None = None,
                 bucket_prefix: str | None = None, write_timeout: float | None = None,
                 access_key: str | None = None, secret_key: str | None = None, region: str | None = None):
        self.endpoint_url = endpoint_url or settings.S3_ENDPOINT_URL
        self.bucket_prefix = settings.S3_BUCKET_PREFIX if bucket_prefix is None else bucket_prefix
        self.public_base_url = (public_base_url or settings.S3_PUBLIC_BASE_URL or self.endpoint_url or "").rstrip("/")
        self.write_timeout = write_timeout or settings.STORAGE_WRITE_TIMEOUT_SECONDS
        if client is None:
            session = boto3.session.Session(
                aws_access_key_id=access_key or settings.S3_ACCESS_KEY,
                aws_secret_access_key=secret_key or settings.S3_SECRET_KEY,
                region_name=region or settings.S3_REGION,
            )
            client = session.client(
                "s3",
                endpoint_url=self.endpoint_url,
                config=Config(
                    signature_version="s3v4",
                    connect_timeout=self.write_timeout,
                    read_timeout=self.write_timeout,
                    retries={"max_attempts": 1},
                ),
            )
        self.s3 = client
        self._reaping: set[asyncio.Task] = set()

    def _split(self, key: str) -> tuple[str, str]:
        category, sep, obj = key.strip("/").partition("/")
        if not sep or not obj:
            raise ValueError(f"Invalid object key (expected '<category>/<name>'): {key!r}")
        return f"{self.bucket_prefix}{category}", obj

    def new_key(self, category: str, file_name: str, content_hash: str | None = None) -> str:
        return f"{category}/{sanitize_object_name(timestamped_name(file_name, content_hash))}"

    def thumbnail_key(self, key: str) -> str:
        return thumbnail_key(key)

    def seed_key(self, reference: str, category: str) -> str:
        base = reference.strip().rstrip("/").rsplit("/", 1)[-1]
        return f"{category}/{sanitize_object_name(base)}"

    def resolve_public_url(self, key: str) -> str:
        bucket, obj = self._split(key)
        return f"{self.public_base_url}/{bucket}/{obj}"

    async def store(self, key: str, data: bytes, content_type: str, category: str) -> StoredObject:
        bucket, obj = self._split(key)
        put = asyncio.ensure_future(
            asyncio.to_thread(self.s3.put_object, Bucket=bucket, Key=obj, Body=data, ContentType=content_type)
        )
        try:
            await asyncio.wait_for(asyncio.shield(put), timeout=self.write_timeout)
        except asyncio.TimeoutError:
            # the put may still land; remove the object once it does
            put.add_done_callback(lambda f: self._reap(f, bucket, obj))
            log.warning("write timed out bucket=%s key=%s category=%s", bucket, obj, category)
            raise
        log.debug("stored bucket=%s key=%s category=%s bytes=%d", bucket, obj, category, len(data))
        return StoredObject(key=key, public_url=self.resolve_public_url(key), size_bytes=len(data))

    def _reap(self, put: asyncio.Future, bucket: str, obj: str) -> None:
        if put.cancelled() or put.exception() is not None:
            return
        task = asyncio.ensure_future(self._delete_quietly(bucket, obj))
        self._reaping.add(task)
        task.add_done_callback(self._reaping.discard)

    async def _delete_quietly(self, bucket: str, obj: str) -> None:
        try:
            await asyncio.to_thread(self.s3.delete_object, Bucket=bucket, Key=obj)
        except (ClientError, BotoCoreError) as e:
            log.error("Could not remove abandoned object bucket=%s key=%s: %s", bucket, obj, e)
        else:
            log.info("Removed abandoned object bucket=%s key=%s", bucket, obj)

    async def delete(self, key: str) -> None:
        bucket, obj = self._split(key)
        try:
            await asyncio.to_thread(self.s3.delete_object, Bucket=bucket, Key=obj)
        except ClientError as e:
            if str(e.response.get("Error", {}).get("Code")) in _NOT_FOUND:
                return
            raise

    async def exists(self, key: str) -> bool:
        bucket, obj = self._split(key)
        try:
            await asyncio.to_thread(self.s3.head_object, Bucket=bucket, Key=obj)
        except ClientError as e:
            if str(e.response.get("Error", {}).get("Code")) in _NOT_FOUND:
                return False
            raise
        return True
