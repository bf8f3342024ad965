from datetime import datetime, date, time
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, JSON, TIMESTAMP, Date, Time, text
from app.core.base import Base

# Primary keys are the caller-supplied seed/form ids, not generated uuids.

class Member(Base):
    __tablename__ = "members"
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255))
    position: Mapped[str] = mapped_column(String(255))
    photo: Mapped[str | None] = mapped_column(Text, nullable=True)
    type_of_member: Mapped[str] = mapped_column(String(255))

class GalleryImage(Base):
    __tablename__ = "gallery"
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    path: Mapped[str] = mapped_column(Text, unique=True)
    uploaded_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

class Publication(Base):
    __tablename__ = "publications"
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    title: Mapped[str] = mapped_column(Text, unique=True)
    description: Mapped[str] = mapped_column(Text)
    type: Mapped[str] = mapped_column(String(32), default="other")
    authors: Mapped[list] = mapped_column(JSON)
    publication_date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    file_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    link: Mapped[str | None] = mapped_column(Text, nullable=True)

class Video(Base):
    __tablename__ = "videos"
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    title: Mapped[str] = mapped_column(Text, unique=True)
    description: Mapped[str] = mapped_column(Text)
    thumbnail_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_path: Mapped[str] = mapped_column(Text, unique=True)
    uploaded_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

class EducationalMaterial(Base):
    __tablename__ = "educational_material"
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    title: Mapped[str] = mapped_column(Text, unique=True)
    description: Mapped[str] = mapped_column(Text)
    file_path: Mapped[str] = mapped_column(Text, unique=True)
    uploaded_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

class Event(Base):
    __tablename__ = "events"
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    title: Mapped[str] = mapped_column(Text)
    description: Mapped[str] = mapped_column(Text)
    type_of_event: Mapped[str] = mapped_column(String(255))
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)
    location: Mapped[str] = mapped_column(Text)
    link: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

TABLES_BY_KIND = {
    "members": Member,
    "gallery": GalleryImage,
    "publications": Publication,
    "videos": Video,
    "educational-material": EducationalMaterial,
    "events": Event,
}
