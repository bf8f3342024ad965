from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from .config import settings
from .base import Base

engine = create_async_engine(settings.POSTGRES_DSN, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

def load_models():
    # importing registers the tables on Base.metadata
    from app.modules.media import models as _media  # noqa: F401
    from app.modules.content import models as _content  # noqa: F401

async def init_models(bind=None):
    ## In dev-only "create_all" mode create tables directly; otherwise, migrations own the schema.
    if settings.DB_MANAGE.lower() != "create_all":
        return
    load_models()
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
