"""
Seed reconciliation: merge layered JSON sources for one content kind, validate
them, materialize the media files they reference, and insert the rows so that
re-running never duplicates rows or files.

Steps for one kind are strictly sequential. Only file materialization fans out.
"""
import asyncio
import logging
import uuid
from collections import defaultdict
from pathlib import Path
from typing import Iterable
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.core.config import settings
from app.platform.ports.object_storage import ObjectStoragePort
from app.modules.content.models import TABLES_BY_KIND
from app.modules.content.repository import BulkRepository
from app.modules.media.models import MediaAsset
from app.modules.seed.errors import ReconcileError, UnknownSeedKind, BulkInsertFailed, FileNotFound
from app.modules.seed.files import FileMaterializer, FileOutcome, COPIED, SKIPPED, MISSING, ERROR
from app.modules.seed.report import LoadReport, BatchReport
from app.modules.seed.schemas import SEED_MODELS, SEED_ORDER, SeedRecord, validate_records
from app.modules.seed.sources import merge_sources

log = logging.getLogger("seed.reconcile")

class SeedReconciler:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], storage: ObjectStoragePort,
                 root: Path | str | None = None, concurrency: int | None = None):
        self.session_factory = session_factory
        self.storage = storage
        self.root = Path(root or settings.SEED_DATA_ROOT)
        self.files = FileMaterializer(storage, self.root, concurrency or settings.SEED_MAX_CONCURRENCY)

    async def reconcile(self, kind: str, environment: str) -> LoadReport:
        if kind not in SEED_MODELS:
            raise UnknownSeedKind(kind)
        report = LoadReport(kind=kind, environment=environment)

        # 1. merge
        merged = await asyncio.to_thread(merge_sources, kind, environment, self.root)
        report.merged = len(merged.records)
        report.duplicates = merged.duplicates
        report.warnings.extend(merged.warnings)
        if not merged.records:
            log.info("No %s data to seed", kind)
            return report

        # 2. validate (all-or-nothing)
        records = validate_records(kind, merged.records)
        report.validated = len(records)

        # 3 + 4. resolve and materialize referenced files
        outcomes = await self.files.materialize(kind, environment, _references(records))
        self._tally(report, kind, outcomes.values())

        # 5. insert rows and asset registry entries in one transaction
        rows = [_rewrite(record, outcomes) for record in records]
        assets = self._asset_rows(kind, records, outcomes)
        report.inserted, report.assets_registered = await self._insert(kind, rows, assets)

        log.info(report.summary())
        return report

    async def reconcile_all(self, environment: str, kinds: Iterable[str] = SEED_ORDER) -> BatchReport:
        """Reconcile kinds in order; a fatal error for one kind does not stop the rest."""
        batch = BatchReport(environment=environment)
        for kind in kinds:
            try:
                batch.reports[kind] = await self.reconcile(kind, environment)
            except ReconcileError as e:
                log.error("Seeding %s failed: %s", kind, e.message)
                batch.failures[kind] = e.message
        return batch

    async def clear_all(self) -> None:
        """Delete every seeded content row (reverse seed order) and the asset registry."""
        async with self.session_factory() as session:
            repo = BulkRepository(session)
            await repo.clear(*(TABLES_BY_KIND[k] for k in reversed(SEED_ORDER)), MediaAsset)
            await session.commit()
        log.info("Cleared content tables and asset registry")

    def _tally(self, report: LoadReport, kind: str, outcomes: Iterable[FileOutcome]) -> None:
        for o in outcomes:
            if o.status == COPIED:
                report.files_copied += 1
            elif o.status == SKIPPED:
                report.files_skipped += 1
            elif o.status == ERROR:
                report.files_errored += 1
                report.file_errors.append(o.error or o.reference)
            elif o.status == MISSING:
                report.files_missing += 1
                report.warnings.append(str(FileNotFound(kind, o.reference, o.searched)))

    def _asset_rows(self, kind: str, records: list[SeedRecord], outcomes: dict[str, FileOutcome]) -> list[dict]:
        owners: dict[str, set[str]] = defaultdict(set)
        for record in records:
            for ref in record.file_references().values():
                owners[ref].add(record.id)

        rows: list[dict] = []
        seen: set[tuple[str, str]] = set()
        for ref, o in outcomes.items():
            if not o.available or not o.content_hash:
                continue
            if (o.content_hash, o.category) in seen:
                continue
            seen.add((o.content_hash, o.category))
            # a file shared by several records has no single owner, so deleting one record never frees it
            owner_ids = owners.get(ref, set())
            owner_id = next(iter(owner_ids)) if len(owner_ids) == 1 else None
            rows.append({
                "id": uuid.uuid4(),
                "key": o.key,
                "public_url": o.public_url,
                "backend": self.storage.name,
                "content_hash": o.content_hash,
                "category": o.category,
                "mime_type": o.content_type,
                "size_bytes": o.size_bytes or 0,
                "thumbnail_key": None,
                "thumbnail_url": None,
                "owner_kind": kind if owner_id else None,
                "owner_id": owner_id,
                "source": "seed",
            })
        return rows

    async def _insert(self, kind: str, rows: list[dict], assets: list[dict]) -> tuple[int, int]:
        model = TABLES_BY_KIND[kind]
        async with self.session_factory() as session:
            repo = BulkRepository(session)
            try:
                inserted = await repo.insert_ignoring_conflicts(model, rows)
                registered = await repo.insert_ignoring_conflicts(MediaAsset, assets)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise BulkInsertFailed(kind, str(e.orig) if getattr(e, "orig", None) else str(e)) from e
        return inserted, registered

def _references(records: list[SeedRecord]) -> list[str]:
    refs: list[str] = []
    for record in records:
        refs.extend(record.file_references().values())
    return list(dict.fromkeys(refs))

def _rewrite(record: SeedRecord, outcomes: dict[str, FileOutcome]) -> dict:
    """Row for insert, with file fields pointing at the backend's public URL; dangling references stay as written."""
    row = record.row()
    for attr, ref in record.file_references().items():
        o = outcomes.get(ref)
        if o is not None and o.available and o.public_url:
            row[attr] = o.public_url
    return row
