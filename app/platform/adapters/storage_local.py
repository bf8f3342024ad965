import asyncio
import logging
import os
import unicodedata
from pathlib import Path
from app.platform.ports.object_storage import ObjectStoragePort, StoredObject, timestamped_name, thumbnail_key
from app.core.config import settings

log = logging.getLogger("media.storage.local")

class LocalFilesystemStorage(ObjectStoragePort):
    name = "local"

    def __init__(self, root: str | None = None, public_prefix: str | None = None, write_timeout: float | None = None):
        self.root = Path(os.path.abspath(root or settings.LOCAL_STORAGE_ROOT))
        self.public_prefix = "/" + (public_prefix if public_prefix is not None else settings.LOCAL_PUBLIC_PREFIX).strip("/")
        self.write_timeout = write_timeout or settings.STORAGE_WRITE_TIMEOUT_SECONDS
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        clean = key.strip("/")
        if not clean or ".." in Path(clean).parts:
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root.joinpath(clean)

    def new_key(self, category: str, file_name: str, content_hash: str | None = None) -> str:
        return f"{category}/{timestamped_name(file_name, content_hash)}"

    def thumbnail_key(self, key: str) -> str:
        return thumbnail_key(key)

    def seed_key(self, reference: str, category: str) -> str:
        # local disk keeps the referenced relative path so seeded URLs stay exactly as written
        rel = unicodedata.normalize("NFC", reference.strip()).lstrip("/")
        prefix = self.public_prefix.strip("/") + "/"
        if prefix != "/" and rel.startswith(prefix):
            rel = rel[len(prefix):]
        return rel

    def resolve_public_url(self, key: str) -> str:
        return f"{self.public_prefix}/{key.strip('/')}" if self.public_prefix != "/" else f"/{key.strip('/')}"

    def _write(self, path: Path, data: bytes) -> Path:
        # writes only the sibling .part file; the caller publishes it once the write is known to have finished
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = _part_path(path)
        try:
            with open(tmp, "wb") as f:
                f.write(data)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        return tmp

    async def store(self, key: str, data: bytes, content_type: str, category: str) -> StoredObject:
        path = self._path(key)
        write = asyncio.ensure_future(asyncio.to_thread(self._write, path, data))
        try:
            await asyncio.wait_for(asyncio.shield(write), timeout=self.write_timeout)
        except asyncio.TimeoutError:
            # the worker thread cannot be stopped; drop its .part file whenever it finishes
            write.add_done_callback(lambda f: _drop_part(f, path))
            log.warning("write timed out key=%s category=%s", key, category)
            raise
        await asyncio.to_thread(os.replace, _part_path(path), path)
        log.debug("stored key=%s category=%s bytes=%d", key, category, len(data))
        return StoredObject(key=key, public_url=self.resolve_public_url(key), size_bytes=len(data))

    async def delete(self, key: str) -> None:
        path = self._path(key)
        await asyncio.to_thread(path.unlink, missing_ok=True)

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self._path(key).is_file)

def _part_path(path: Path) -> Path:
    return path.with_name(f".{path.name}.part")

def _drop_part(write: asyncio.Future, path: Path) -> None:
    if not write.cancelled() and write.exception() is not None:
        log.debug("abandoned write for %s failed: %s", path, write.exception())
    _part_path(path).unlink(missing_ok=True)
