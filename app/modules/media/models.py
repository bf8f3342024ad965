from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, BigInteger, UniqueConstraint, Index
from app.core.base import Base, TimestampedMixin

class MediaAsset(Base, TimestampedMixin):
    __tablename__ = "media_asset"
    __table_args__ = (
        # authoritative duplicate signal; the service's pre-check alone is racy
        UniqueConstraint("content_hash", "category", name="uq_media_asset_hash_category"),
        Index("ix_media_asset_owner", "owner_kind", "owner_id"),
    )

    # The "key" is the storage object key relative to the backend ("<category>/<name>").
    key: Mapped[str] = mapped_column(String(512))
    public_url: Mapped[str] = mapped_column(String(1024))
    backend: Mapped[str] = mapped_column(String(16))
    content_hash: Mapped[str] = mapped_column(String(64))
    category: Mapped[str] = mapped_column(String(16))
    mime_type: Mapped[str] = mapped_column(String(128))
    size_bytes: Mapped[int] = mapped_column(BigInteger)
    thumbnail_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    owner_kind: Mapped[str | None] = mapped_column(String(64), nullable=True)
    owner_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    source: Mapped[str] = mapped_column(String(16), default="upload")  # upload | seed
