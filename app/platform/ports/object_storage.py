import secrets
import time
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Protocol, runtime_checkable

@dataclass(frozen=True)
class StoredObject:
    key: str
    public_url: str
    size_bytes: int

def random_id(content_hash: str | None = None) -> str:
    # hash prefix keeps keys content-addressed; the suffix lets the same bytes be re-uploaded for a new record
    prefix = (content_hash or "")[:16]
    return f"{prefix}{secrets.token_hex(4)}"

def timestamped_name(file_name: str, content_hash: str | None = None) -> str:
    ext = PurePosixPath(file_name or "").suffix.lower()
    return f"{random_id(content_hash)}-{int(time.time() * 1000)}{ext}"

def thumbnail_key(key: str) -> str:
    head, _, name = key.rpartition("/")
    return f"{head}/thumb-{name}" if head else f"thumb-{name}"

@runtime_checkable
class ObjectStoragePort(Protocol):
    name: str

    def new_key(self, category: str, file_name: str, content_hash: str | None = None) -> str: ...

    def thumbnail_key(self, key: str) -> str: ...

    def seed_key(self, reference: str, category: str) -> str: ...

    def resolve_public_url(self, key: str) -> str: ...

    async def store(self, key: str, data: bytes, content_type: str, category: str) -> StoredObject: ...

    async def delete(self, key: str) -> None: ...

    async def exists(self, key: str) -> bool: ...
