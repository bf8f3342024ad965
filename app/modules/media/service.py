import asyncio
import io
import logging
import uuid
from typing import BinaryIO
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.platform.ports.object_storage import ObjectStoragePort
from app.modules.media.repository import MediaRepository
from app.modules.media.models import MediaAsset
from app.modules.media.schemas import Asset, IngestOptions
from app.modules.media.categories import Category, category_for
from app.modules.media.hashing import hash_stream
from app.modules.media.thumbnails import make_thumbnail, ThumbnailError
from app.modules.media.errors import (
    TypeNotAllowed, SizeExceeded, DuplicateContent, BackendWriteFailed, InvalidImage,
)

log = logging.getLogger("media.ingest")

def _normalize_type(content_type: str | None) -> str:
    return (content_type or "application/octet-stream").split(";", 1)[0].strip().lower()

def _size_of(data: bytes | BinaryIO) -> int:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return len(data)
    pos = data.tell()
    data.seek(0, io.SEEK_END)
    size = data.tell()
    data.seek(pos)
    return size

def _read_all(data: bytes | BinaryIO) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    data.seek(0)
    return data.read()

class MediaService:
    def __init__(self, session: AsyncSession, storage: ObjectStoragePort):
        self.session = session
        self.repo = MediaRepository(session)
        self.storage = storage

    async def ingest(self, data: bytes | BinaryIO, content_type: str | None, file_name: str,
                     options: IngestOptions | None = None) -> Asset:
        """
        Validate, hash, dedup and store one uploaded file.

        Raises TypeNotAllowed / SizeExceeded / DuplicateContent / InvalidImage before
        any backend write, and BackendWriteFailed if the store itself fails (in which
        case nothing written by this call is left behind).
        """
        options = options or IngestOptions()
        content_type = _normalize_type(content_type)

        if content_type not in options.allowed_types:
            raise TypeNotAllowed(content_type, options.allowed_types)

        size = _size_of(data)
        if size > options.max_size:
            raise SizeExceeded(size, options.max_size)

        content_hash = await asyncio.to_thread(hash_stream, data)
        category = category_for(content_type).value

        existing = await self.repo.find_by_hash(content_hash, category)
        if existing:
            if self._same_owner(existing, options):
                log.info("Re-submit of %s for %s/%s; returning existing asset", content_hash[:12], options.owner_kind, options.owner_id)
                return Asset.from_model(existing)
            raise DuplicateContent(content_hash, category)

        payload = await asyncio.to_thread(_read_all, data)
        thumb = None
        if options.generate_thumbnail and category == Category.IMAGES.value:
            try:
                thumb = await asyncio.to_thread(make_thumbnail, payload, options.thumbnail_width)
            except ThumbnailError as e:
                raise InvalidImage(str(e)) from e

        key = self.storage.new_key(category, file_name, content_hash)
        try:
            # reserving the row first makes the unique constraint decide races before anything is written
            obj = await self.repo.create(
                key=key,
                public_url=self.storage.resolve_public_url(key),
                backend=self.storage.name,
                content_hash=content_hash,
                category=category,
                mime_type=content_type,
                size_bytes=size,
                owner_kind=options.owner_kind,
                owner_id=options.owner_id,
            )
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateContent(content_hash, category)

        written: list[str] = []
        try:
            # a key counts as written as soon as a store is attempted; a timed-out write may still land
            written.append(key)
            stored = await self.storage.store(key, payload, content_type, category)
            obj.public_url = stored.public_url
            if thumb is not None:
                thumb_bytes, thumb_type = thumb
                tkey = self.storage.thumbnail_key(key)
                written.append(tkey)
                stored_thumb = await self.storage.store(tkey, thumb_bytes, thumb_type, category)
                obj.thumbnail_key = tkey
                obj.thumbnail_url = stored_thumb.public_url
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            await self.free(written)
            reason = "write timed out" if isinstance(e, asyncio.TimeoutError) else str(e) or e.__class__.__name__
            log.error("Ingest of %s failed on backend=%s category=%s: %s", file_name, self.storage.name, category, reason)
            raise BackendWriteFailed(self.storage.name, key, category, reason, file_name=file_name) from e

        log.info("Ingested %s as %s (%s, %d bytes, backend=%s)", file_name, key, category, size, self.storage.name)
        return Asset.from_model(obj)

    async def get(self, asset_id: uuid.UUID) -> Asset | None:
        obj = await self.repo.get(asset_id)
        return Asset.from_model(obj) if obj else None

    async def delete_asset(self, asset_id: uuid.UUID) -> bool:
        obj = await self.repo.get(asset_id)
        if not obj:
            return False
        keys = _object_keys(obj)
        await self.repo.delete(obj.id)
        # the row goes first; a failed commit must not leave a record pointing at freed objects
        await self.session.commit()
        await self.free(keys)
        return True

    async def delete_owned(self, owner_kind: str, owner_id: str) -> list[str]:
        """
        Delete the rows of every asset owned by a domain record and return their object keys.
        The caller commits and then hands the keys to `free`.
        """
        assets = await self.repo.list_for_owner(owner_kind, owner_id)
        keys: list[str] = []
        for obj in assets:
            keys.extend(_object_keys(obj))
            await self.repo.delete(obj.id)
        return keys

    async def free(self, keys: list[str]) -> None:
        """Best-effort removal of stored objects; failures are logged, never raised."""
        for key in keys:
            try:
                await self.storage.delete(key)
            except Exception:
                log.exception("Could not free stored object %s (backend=%s)", key, self.storage.name)

    def _same_owner(self, existing: MediaAsset, options: IngestOptions) -> bool:
        return (
            options.owner_id is not None
            and existing.owner_kind == options.owner_kind
            and existing.owner_id == options.owner_id
        )

def _object_keys(obj: MediaAsset) -> list[str]:
    return [obj.key] + ([obj.thumbnail_key] if obj.thumbnail_key else [])
