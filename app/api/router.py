from fastapi import APIRouter
from app.modules.media.router import router as media_router
from app.modules.content.router import router as content_router

api_router = APIRouter()
api_router.include_router(media_router, prefix="/media", tags=["media"])
api_router.include_router(content_router, prefix="/content", tags=["content"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
