import logging
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from app.platform.ports.object_storage import ObjectStoragePort
from app.modules.content.models import TABLES_BY_KIND
from app.modules.media.service import MediaService

log = logging.getLogger("content")

class UnknownKind(LookupError):
    pass

class ContentService:
    """The slice of the CRUD layer the media core depends on: deleting a record frees its stored files."""

    def __init__(self, session: AsyncSession, storage: ObjectStoragePort):
        self.session = session
        self.media = MediaService(session, storage)

    def _model(self, kind: str):
        model = TABLES_BY_KIND.get(kind)
        if model is None:
            raise UnknownKind(kind)
        return model

    async def exists(self, kind: str, record_id: str) -> bool:
        model = self._model(kind)
        res = await self.session.execute(select(model.id).where(model.id == record_id))
        return res.scalar_one_or_none() is not None

    async def delete_record(self, kind: str, record_id: str) -> bool:
        model = self._model(kind)
        if not await self.exists(kind, record_id):
            return False
        keys = await self.media.delete_owned(kind, record_id)
        await self.session.execute(delete(model).where(model.id == record_id))
        await self.session.commit()
        # objects are freed only once the rows are gone for good
        await self.media.free(keys)
        log.info("Deleted %s/%s and freed %d stored object(s)", kind, record_id, len(keys))
        return True
