import uuid
from fastapi import APIRouter, UploadFile, File, Form, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import SessionLocal
from app.platform.provider_registry import registry
from app.modules.media.schemas import AssetOut, UPLOAD_CONTEXTS
from app.modules.media.service import MediaService

router = APIRouter()

async def get_session():
    async with SessionLocal() as session:
        yield session

def svc(session: AsyncSession = Depends(get_session)) -> MediaService:
    return MediaService(session, registry.object_storage())

@router.post("/{context}", response_model=AssetOut, status_code=201)
async def upload_media(
    context: str,
    file: UploadFile = File(...),
    owner_id: str | None = Form(None),
    owner_kind: str | None = Form(None),
    generate_thumbnail: bool | None = Form(None),
    service: MediaService = Depends(svc),
):
    preset = UPLOAD_CONTEXTS.get(context)
    if preset is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown upload context: {context}")
    options = preset.for_owner((owner_kind or context) if owner_id else None, owner_id, generate_thumbnail=generate_thumbnail)
    asset = await service.ingest(file.file, file.content_type, file.filename or "upload", options)
    return AssetOut.model_validate(asset)

@router.get("/{asset_id}", response_model=AssetOut)
async def get_media(asset_id: uuid.UUID, service: MediaService = Depends(svc)):
    obj = await service.get(asset_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
    return AssetOut.model_validate(obj)

@router.delete("/{asset_id}", status_code=204)
async def delete_media(asset_id: uuid.UUID, service: MediaService = Depends(svc)):
    if not await service.delete_asset(asset_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
