import uuid
from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from app.modules.media.models import MediaAsset

class MediaRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, *, key: str, public_url: str, backend: str, content_hash: str, category: str,
                     mime_type: str, size_bytes: int, owner_kind: str | None, owner_id: str | None,
                     source: str = "upload") -> MediaAsset:
        obj = MediaAsset(
            key=key, public_url=public_url, backend=backend, content_hash=content_hash,
            category=category, mime_type=mime_type, size_bytes=size_bytes,
            owner_kind=owner_kind, owner_id=owner_id, source=source,
        )
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, asset_id: uuid.UUID) -> MediaAsset | None:
        res = await self.session.execute(select(MediaAsset).where(MediaAsset.id == asset_id))
        return res.scalar_one_or_none()

    async def find_by_hash(self, content_hash: str, category: str) -> MediaAsset | None:
        q = select(MediaAsset).where(
            MediaAsset.content_hash == content_hash,
            MediaAsset.category == category,
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def list_for_owner(self, owner_kind: str, owner_id: str) -> Sequence[MediaAsset]:
        q = select(MediaAsset).where(
            MediaAsset.owner_kind == owner_kind,
            MediaAsset.owner_id == owner_id,
        ).order_by(MediaAsset.created_at.asc())
        res = await self.session.execute(q)
        return res.scalars().all()

    async def delete(self, asset_id: uuid.UUID) -> None:
        await self.session.execute(delete(MediaAsset).where(MediaAsset.id == asset_id))
        await self.session.flush()
