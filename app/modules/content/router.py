from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import SessionLocal
from app.platform.provider_registry import registry
from app.modules.content.service import ContentService, UnknownKind

router = APIRouter()

async def get_session():
    async with SessionLocal() as session:
        yield session

def svc(session: AsyncSession = Depends(get_session)) -> ContentService:
    return ContentService(session, registry.object_storage())

@router.delete("/{kind}/{record_id}", status_code=204)
async def delete_record(kind: str, record_id: str, service: ContentService = Depends(svc)):
    try:
        deleted = await service.delete_record(kind, record_id)
    except UnknownKind:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown content kind: {kind}")
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Record not found")
