import asyncio
import logging
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable
from app.platform.ports.object_storage import ObjectStoragePort
from app.modules.media.categories import category_for, content_type_for
from app.modules.media.hashing import hash_file, hash_stream

log = logging.getLogger("seed.files")

COPIED = "copied"
SKIPPED = "skipped"
MISSING = "missing"
ERROR = "error"

@dataclass
class FileOutcome:
    reference: str
    status: str
    key: str
    category: str
    content_type: str
    public_url: str | None = None
    content_hash: str | None = None
    size_bytes: int | None = None
    error: str | None = None
    searched: tuple[str, ...] = field(default_factory=tuple)

    @property
    def available(self) -> bool:
        return self.status in (COPIED, SKIPPED)

def _name_variants(file_name: str) -> list[str]:
    # seed folders checked out on macOS often carry NFD names
    variants = [file_name]
    for form in ("NFC", "NFD"):
        v = unicodedata.normalize(form, file_name)
        if v not in variants:
            variants.append(v)
    return variants

def candidate_paths(root: Path, kind: str, environment: str, file_name: str, category: str) -> list[Path]:
    shared = root / "shared"
    common = root / environment / "common"
    dirs = [
        shared / kind,
        common,
        shared / kind / "images",
        shared / category,
        common / "pdf",
        common / "mp4",
        common / "webp",
        common / "images",
        common / category,
    ]
    out: list[Path] = []
    for d in dirs:
        for name in _name_variants(file_name):
            p = d / name
            if p not in out:
                out.append(p)
    return out

def resolve_source(root: Path, kind: str, environment: str, file_name: str, category: str) -> tuple[Path | None, tuple[str, ...]]:
    """First existing candidate, plus the list that was searched."""
    paths = candidate_paths(root, kind, environment, file_name, category)
    for p in paths:
        if p.is_file():
            return p, tuple(str(x) for x in paths)
    return None, tuple(str(x) for x in paths)

class FileMaterializer:
    """
    Copies (local disk) or uploads (object storage) every referenced seed file,
    skipping references whose destination key already exists. Files fan out
    concurrently, bounded by a semaphore; a failure affects only its own file.
    """

    def __init__(self, storage: ObjectStoragePort, root: Path | str, concurrency: int = 8):
        self.storage = storage
        self.root = Path(root)
        self.concurrency = max(1, int(concurrency))

    async def materialize(self, kind: str, environment: str, references: Iterable[str]) -> dict[str, FileOutcome]:
        sem = asyncio.Semaphore(self.concurrency)
        refs = list(dict.fromkeys(references))
        results = await asyncio.gather(*(self._one(kind, environment, ref, sem) for ref in refs))
        return {o.reference: o for o in results}

    async def _one(self, kind: str, environment: str, reference: str, sem: asyncio.Semaphore) -> FileOutcome:
        file_name = reference.strip().rstrip("/").rsplit("/", 1)[-1]
        category = category_for(file_name).value
        content_type = content_type_for(file_name)
        key = self.storage.seed_key(reference, category)
        outcome = FileOutcome(reference=reference, status=MISSING, key=key, category=category, content_type=content_type)

        async with sem:
            source, searched = await asyncio.to_thread(resolve_source, self.root, kind, environment, file_name, category)
            outcome.searched = searched
            try:
                if await self.storage.exists(key):
                    outcome.status = SKIPPED
                    outcome.public_url = self.storage.resolve_public_url(key)
                    if source is not None:
                        outcome.content_hash = await hash_file(source)
                        outcome.size_bytes = (await asyncio.to_thread(source.stat)).st_size
                    return outcome

                if source is None:
                    log.warning("File not found for %s: %s", kind, file_name)
                    return outcome

                data = await asyncio.to_thread(source.read_bytes)
                stored = await self.storage.store(key, data, content_type, category)
                outcome.content_hash = await asyncio.to_thread(hash_stream, data)
            except Exception as e:
                reason = "write timed out" if isinstance(e, asyncio.TimeoutError) else str(e) or e.__class__.__name__
                outcome.status = ERROR
                outcome.error = f"{file_name} -> {key} (backend={self.storage.name}, category={category}): {reason}"
                log.error("Seed file failed: %s", outcome.error)
                return outcome

        outcome.status = COPIED
        outcome.public_url = stored.public_url
        outcome.size_bytes = stored.size_bytes
        return outcome
