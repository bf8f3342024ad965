from typing import Any, Sequence
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

BATCH_SIZE = 500

def _insert_for(session: AsyncSession):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"conflict-ignoring insert not supported on {dialect}")
    return insert

class BulkRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert_ignoring_conflicts(self, model, rows: Sequence[dict[str, Any]]) -> int:
        """INSERT ... ON CONFLICT DO NOTHING; returns how many rows were actually inserted."""
        if not rows:
            return 0
        insert = _insert_for(self.session)
        inserted = 0
        for start in range(0, len(rows), BATCH_SIZE):
            chunk = list(rows[start:start + BATCH_SIZE])
            stmt = insert(model).values(chunk).on_conflict_do_nothing().returning(model.id)
            res = await self.session.execute(stmt)
            inserted += len(res.all())
        return inserted

    async def clear(self, *models) -> None:
        for model in models:
            await self.session.execute(delete(model))
