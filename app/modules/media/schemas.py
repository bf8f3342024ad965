import uuid
from dataclasses import dataclass, field
from pydantic import BaseModel
from app.core.config import settings
from app.modules.media.categories import IMAGE_TYPES, VIDEO_TYPES, PUBLICATION_TYPES, EDUCATIONAL_TYPES

MB = 1024 * 1024

@dataclass(frozen=True)
class IngestOptions:
    allowed_types: frozenset[str] = IMAGE_TYPES | PUBLICATION_TYPES
    max_size: int = field(default_factory=lambda: settings.MAX_UPLOAD_BYTES)
    generate_thumbnail: bool = False
    thumbnail_width: int = field(default_factory=lambda: settings.THUMBNAIL_WIDTH)
    owner_kind: str | None = None
    owner_id: str | None = None

    def for_owner(self, owner_kind: str | None, owner_id: str | None, *, generate_thumbnail: bool | None = None) -> "IngestOptions":
        return IngestOptions(
            allowed_types=self.allowed_types,
            max_size=self.max_size,
            generate_thumbnail=self.generate_thumbnail if generate_thumbnail is None else generate_thumbnail,
            thumbnail_width=self.thumbnail_width,
            owner_kind=owner_kind,
            owner_id=owner_id,
        )

# per-form presets used by the admin upload routes
UPLOAD_CONTEXTS: dict[str, IngestOptions] = {
    "members": IngestOptions(allowed_types=IMAGE_TYPES, max_size=10 * MB),
    "gallery": IngestOptions(allowed_types=IMAGE_TYPES, max_size=10 * MB, generate_thumbnail=True),
    "publications": IngestOptions(allowed_types=PUBLICATION_TYPES, max_size=20 * MB),
    "educational-material": IngestOptions(allowed_types=EDUCATIONAL_TYPES, max_size=50 * MB),
    "videos": IngestOptions(allowed_types=VIDEO_TYPES, max_size=100 * MB),
    "thumbnails": IngestOptions(allowed_types=IMAGE_TYPES, max_size=10 * MB),
}

@dataclass(frozen=True)
class Asset:
    id: uuid.UUID
    content_hash: str
    key: str
    public_url: str
    content_type: str
    category: str
    size_bytes: int
    thumbnail_key: str | None = None
    thumbnail_url: str | None = None
    owner_kind: str | None = None
    owner_id: str | None = None

    @classmethod
    def from_model(cls, obj) -> "Asset":
        return cls(
            id=obj.id, content_hash=obj.content_hash, key=obj.key, public_url=obj.public_url,
            content_type=obj.mime_type, category=obj.category, size_bytes=obj.size_bytes,
            thumbnail_key=obj.thumbnail_key, thumbnail_url=obj.thumbnail_url,
            owner_kind=obj.owner_kind, owner_id=obj.owner_id,
        )

class AssetOut(BaseModel):
    id: uuid.UUID
    content_hash: str
    key: str
    public_url: str
    content_type: str
    category: str
    size_bytes: int
    thumbnail_key: str | None = None
    thumbnail_url: str | None = None
    owner_kind: str | None = None
    owner_id: str | None = None

    class Config:
        from_attributes = True
