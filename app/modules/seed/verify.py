"""
Dry check of seed data: merge and validate every kind without touching storage
or the database, so broken JSON is caught before a real reconciliation run.
"""
import logging
from pathlib import Path
from typing import Iterable
from app.modules.seed.errors import ReconcileError, UnknownSeedKind
from app.modules.seed.report import LoadReport, BatchReport
from app.modules.seed.schemas import SEED_MODELS, SEED_ORDER, validate_records
from app.modules.seed.sources import merge_sources

log = logging.getLogger("seed.verify")

def verify_kind(kind: str, environment: str, root: Path | str) -> LoadReport:
    if kind not in SEED_MODELS:
        raise UnknownSeedKind(kind)
    report = LoadReport(kind=kind, environment=environment)
    merged = merge_sources(kind, environment, root, strict=True)
    report.merged = len(merged.records)
    report.duplicates = merged.duplicates
    report.warnings.extend(merged.warnings)
    if not merged.sources_read:
        report.warnings.append(f"No seed source found for {kind}")
    report.validated = len(validate_records(kind, merged.records))
    return report

def verify_all(environment: str, root: Path | str, kinds: Iterable[str] = SEED_ORDER) -> BatchReport:
    batch = BatchReport(environment=environment)
    for kind in kinds:
        try:
            batch.reports[kind] = verify_kind(kind, environment, root)
        except ReconcileError as e:
            log.error("Seed data for %s is invalid: %s", kind, e.message)
            batch.failures[kind] = e.message
    return batch
