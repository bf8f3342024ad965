import logging
from app.core.config import settings, Settings
from app.platform.ports.object_storage import ObjectStoragePort
from app.platform.adapters.storage_local import LocalFilesystemStorage

log = logging.getLogger("media.storage")

def select_backend(config: Settings) -> ObjectStoragePort:
    """Object storage when endpoint, access key and secret key are all set; local disk otherwise."""
    if config.object_storage_configured:
        # imported lazily so local-only setups never touch boto3
        from app.platform.adapters.storage_s3 import S3Storage
        return S3Storage(
            endpoint_url=config.S3_ENDPOINT_URL,
            public_base_url=config.S3_PUBLIC_BASE_URL,
            bucket_prefix=config.S3_BUCKET_PREFIX,
            write_timeout=config.STORAGE_WRITE_TIMEOUT_SECONDS,
            access_key=config.S3_ACCESS_KEY,
            secret_key=config.S3_SECRET_KEY,
            region=config.S3_REGION,
        )
    return LocalFilesystemStorage(
        config.LOCAL_STORAGE_ROOT,
        public_prefix=config.LOCAL_PUBLIC_PREFIX,
        write_timeout=config.STORAGE_WRITE_TIMEOUT_SECONDS,
    )

class ProviderRegistry:
    _object_storage: ObjectStoragePort | None = None

    @classmethod
    def object_storage(cls) -> ObjectStoragePort:
        # decided once per process; an upload and its thumbnail must never land in different stores
        if cls._object_storage is None:
            cls._object_storage = select_backend(settings)
            log.info("Object storage backend selected: %s", cls._object_storage.name)
        return cls._object_storage

    @classmethod
    def reset(cls) -> None:
        cls._object_storage = None

registry = ProviderRegistry()
