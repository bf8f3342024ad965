"""
Typed seed records, one pydantic model per seedable kind.

Seed JSON uses camelCase keys; models expose snake_case attributes that line up
with the content table columns, so `record.row()` can go straight into an insert.
"""
from datetime import datetime, date, time, timezone
from typing import Any, ClassVar, Literal
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel
from app.modules.seed.errors import ValidationFailed

def _now() -> datetime:
    return datetime.now(timezone.utc)

class SeedRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    KIND: ClassVar[str] = ""
    FILE_FIELDS: ClassVar[tuple[str, ...]] = ()

    id: str = Field(min_length=1)

    def file_references(self) -> dict[str, str]:
        """{attribute: relative path} for every file-reference field that is set."""
        refs = {}
        for name in self.FILE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, str) and value.strip():
                refs[name] = value
        return refs

    def row(self) -> dict[str, Any]:
        return self.model_dump(by_alias=False)

class MemberSeed(SeedRecord):
    KIND: ClassVar[str] = "members"
    FILE_FIELDS: ClassVar[tuple[str, ...]] = ("photo",)

    full_name: str
    position: str
    type_of_member: str
    photo: str | None = None

class GallerySeed(SeedRecord):
    KIND: ClassVar[str] = "gallery"
    FILE_FIELDS: ClassVar[tuple[str, ...]] = ("path",)

    path: str = Field(min_length=1)
    uploaded_at: datetime = Field(default_factory=_now)

class PublicationSeed(SeedRecord):
    KIND: ClassVar[str] = "publications"
    FILE_FIELDS: ClassVar[tuple[str, ...]] = ("file_path",)

    title: str
    description: str
    type: Literal["article", "book", "thesis", "technical_report", "monograph", "other"]
    authors: list[str] = Field(min_length=1)
    publication_date: datetime
    file_path: str | None = None
    link: str | None = None

    @field_validator("publication_date")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)

    @model_validator(mode="after")
    def _file_or_link(self):
        if not self.file_path and not self.link:
            raise ValueError("a publication needs at least one of filePath or link")
        return self

class VideoSeed(SeedRecord):
    KIND: ClassVar[str] = "videos"
    FILE_FIELDS: ClassVar[tuple[str, ...]] = ("video_path", "thumbnail_path")

    title: str
    description: str
    video_path: str = Field(min_length=1)
    thumbnail_path: str | None = None
    uploaded_at: datetime = Field(default_factory=_now)

class EducationalMaterialSeed(SeedRecord):
    KIND: ClassVar[str] = "educational-material"
    FILE_FIELDS: ClassVar[tuple[str, ...]] = ("file_path",)

    title: str
    description: str
    file_path: str = Field(min_length=1)
    uploaded_at: datetime = Field(default_factory=_now)

class EventSeed(SeedRecord):
    KIND: ClassVar[str] = "events"

    title: str
    description: str
    type_of_event: str
    start_date: date
    end_date: date | None = None
    start_time: time
    end_time: time
    location: str
    link: str | None = None
    uploaded_at: datetime = Field(default_factory=_now)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date_only(cls, v):
        # seeds sometimes carry full ISO timestamps for date columns
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v

# dependent kinds come after what they reference (publications cite members as authors)
SEED_ORDER: tuple[str, ...] = ("members", "gallery", "publications", "videos", "educational-material", "events")

SEED_MODELS: dict[str, type[SeedRecord]] = {
    m.KIND: m for m in (MemberSeed, GallerySeed, PublicationSeed, VideoSeed, EducationalMaterialSeed, EventSeed)
}

_FILE_OR_LINK_FIELD = "filePath"

def _offending_field(err: dict) -> str:
    loc = [str(p) for p in err.get("loc", ()) if not isinstance(p, int)]
    if loc:
        return loc[0]
    if err.get("type") == "value_error" and "filePath" in str(err.get("msg", "")):
        return _FILE_OR_LINK_FIELD
    return "<record>"

def validate_records(kind: str, raw_records: list[Any]) -> list[SeedRecord]:
    """All-or-nothing: the first invalid record aborts the whole kind with ValidationFailed."""
    model = SEED_MODELS[kind]
    out: list[SeedRecord] = []
    for raw in raw_records:
        record_id = raw.get("id") if isinstance(raw, dict) else None
        try:
            out.append(model.model_validate(raw))
        except ValidationError as e:
            first = e.errors()[0]
            raise ValidationFailed(kind, _offending_field(first), record_id, first.get("msg", str(e))) from e
    return out
