import mimetypes
import re
from enum import Enum

class Category(str, Enum):
    IMAGES = "images"
    VIDEOS = "videos"
    DOCUMENTS = "documents"

IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"})
VIDEO_TYPES = frozenset({"video/mp4", "video/webm", "video/ogg", "video/quicktime"})
PDF_TYPES = frozenset({"application/pdf"})
WORD_TYPES = frozenset({
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})
POWERPOINT_TYPES = frozenset({
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
})
SPREADSHEET_TYPES = frozenset({
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
})
TEXT_TYPES = frozenset({"text/plain", "text/csv"})
ARCHIVE_TYPES = frozenset({
    "application/zip", "application/x-zip-compressed", "application/x-tar",
    "application/gzip", "application/x-7z-compressed",
})

PUBLICATION_TYPES = PDF_TYPES | WORD_TYPES
EDUCATIONAL_TYPES = PDF_TYPES | WORD_TYPES | POWERPOINT_TYPES
DOCUMENT_TYPES = PDF_TYPES | WORD_TYPES | POWERPOINT_TYPES | SPREADSHEET_TYPES | TEXT_TYPES

_EXTENSIONS: dict[str, Category] = {
    **{e: Category.IMAGES for e in ("png", "jpg", "jpeg", "webp", "gif")},
    **{e: Category.VIDEOS for e in ("mp4", "webm", "mov", "ogg", "ogv")},
    **{e: Category.DOCUMENTS for e in ("pdf", "doc", "docx", "ppt", "pptx", "xls", "xlsx", "txt", "csv")},
    **{e: Category.DOCUMENTS for e in ("zip", "tar", "gz", "7z")},
}

# explicit table for seed files; mimetypes is only a fallback
_CONTENT_TYPES: dict[str, str] = {
    "pdf": "application/pdf",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
    "webp": "image/webp",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
}

_MIME_MAJORS = {"image", "video", "audio", "application", "text", "font", "model", "multipart", "message"}
_MIME_RE = re.compile(r"^([a-z]+)/[a-z0-9.+\-]+$")

def _extension(value: str) -> str:
    name = value.rsplit("/", 1)[-1].lower()
    return name.rsplit(".", 1)[-1] if "." in name else name

def category_for(content_type_or_extension: str) -> Category:
    """Map a MIME type, an extension ("pdf", ".pdf") or a file name to its storage category.

    Unknown values fall back to documents.
    """
    value = (content_type_or_extension or "").split(";", 1)[0].strip().lower()
    m = _MIME_RE.match(value)
    if m and m.group(1) in _MIME_MAJORS:
        if m.group(1) == "image":
            return Category.IMAGES
        if m.group(1) == "video":
            return Category.VIDEOS
        return Category.DOCUMENTS
    return _EXTENSIONS.get(_extension(value), Category.DOCUMENTS)

def content_type_for(path: str) -> str:
    ext = _extension(path)
    if ext in _CONTENT_TYPES:
        return _CONTENT_TYPES[ext]
    guessed, _ = mimetypes.guess_type(path)
    return guessed or "application/octet-stream"
