"""
Content hashing for dedup.

Digests are SHA-256 hex strings computed chunk by chunk, so callers never have
to hold the whole payload in memory just to hash it.
"""
import asyncio
import hashlib
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator

CHUNK_SIZE = 1024 * 1024

class HashReadError(OSError):
    """The source could not be read to the end; no digest is produced."""

def iter_chunks(source: bytes | BinaryIO, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    if isinstance(source, (bytes, bytearray, memoryview)):
        view = memoryview(source)
        for start in range(0, len(view), chunk_size):
            yield bytes(view[start:start + chunk_size])
        return
    if hasattr(source, "seek"):
        source.seek(0)
    while chunk := source.read(chunk_size):
        yield chunk

def hash_chunks(chunks: Iterable[bytes]) -> str:
    h = hashlib.sha256()
    try:
        for chunk in chunks:
            h.update(chunk)
    except OSError as e:
        raise HashReadError(f"stream could not be fully read: {e}") from e
    return h.hexdigest()

def hash_stream(source: bytes | BinaryIO) -> str:
    return hash_chunks(iter_chunks(source))

def _hash_path(path: Path) -> str:
    try:
        with open(path, "rb") as f:
            return hash_chunks(iter_chunks(f))
    except HashReadError:
        raise
    except OSError as e:
        raise HashReadError(f"cannot read {path}: {e}") from e

async def hash_file(path: str | Path) -> str:
    return await asyncio.to_thread(_hash_path, Path(path))
