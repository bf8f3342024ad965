"""
Tests for seed reconciliation.

Verifies that:
1. A fresh run inserts every record and materializes every referenced file
2. A second run inserts nothing and copies nothing
3. Invalid data aborts the kind before any row or file is written
4. A failing kind does not stop the others
"""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.modules.content.models import Event, GalleryImage, Member, Publication
from app.modules.content.repository import BulkRepository
from app.modules.media.models import MediaAsset
from app.modules.seed.errors import BulkInsertFailed, UnknownSeedKind, ValidationFailed
from app.modules.seed.loader import SeedReconciler
from tests.helpers import make_image, write_file, write_json, written_files


async def _count(session_factory, model) -> int:
    async with session_factory() as s:
        return (await s.execute(select(func.count()).select_from(model))).scalar_one()


async def _all(session_factory, model):
    async with session_factory() as s:
        return (await s.execute(select(model).order_by(model.id))).scalars().all()


@pytest.fixture
def gallery_seed(seed_root):
    write_json(seed_root / "shared" / "gallery" / "gallery.json", [
        {"id": "g1", "path": "/uploads/gallery/one.png"},
        {"id": "g2", "path": "/uploads/gallery/two.png"},
    ])
    write_file(seed_root / "shared" / "gallery" / "one.png", make_image(color=(10, 20, 30)))
    write_file(seed_root / "shared" / "gallery" / "two.png", make_image(color=(40, 50, 60)))
    return seed_root


MEMBERS = [
    {"id": "m1", "fullName": "Ana", "position": "Chair", "typeOfMember": "board", "photo": "members/ana.webp"},
    {"id": "m2", "fullName": "Luis", "position": "Member", "typeOfMember": "regular", "photo": "members/ghost.webp"},
]


# =============================================================================
# Gallery scenario
# =============================================================================


class TestGalleryScenario:
    @pytest.mark.asyncio
    async def test_first_run(self, gallery_seed, session_factory, local_storage, upload_root):
        reconciler = SeedReconciler(session_factory, local_storage, root=gallery_seed)

        report = await reconciler.reconcile("gallery", "development")

        assert report.inserted == 2
        assert report.files_copied == 2
        assert report.files_skipped == 0
        assert report.files_missing == 0
        assert report.assets_registered == 2
        assert (upload_root / "gallery" / "one.png").is_file()
        rows = await _all(session_factory, GalleryImage)
        assert [r.path for r in rows] == ["/uploads/gallery/one.png", "/uploads/gallery/two.png"]

    @pytest.mark.asyncio
    async def test_second_run_is_a_noop(self, gallery_seed, session_factory, local_storage, upload_root):
        reconciler = SeedReconciler(session_factory, local_storage, root=gallery_seed)
        await reconciler.reconcile("gallery", "development")

        report = await reconciler.reconcile("gallery", "development")

        assert report.inserted == 0
        assert report.files_copied == 0
        assert report.files_skipped == 2
        assert report.assets_registered == 0
        assert await _count(session_factory, GalleryImage) == 2
        assert await _count(session_factory, MediaAsset) == 2
        assert len(written_files(upload_root)) == 2

    @pytest.mark.asyncio
    async def test_object_storage_uses_sanitized_names(self, seed_root, session_factory, s3_storage, fake_s3):
        write_json(seed_root / "shared" / "gallery" / "gallery.json", [
            {"id": "g1", "path": "gallery/Fotografía Año.PNG"},
        ])
        write_file(seed_root / "shared" / "gallery" / "Fotografía Año.PNG", make_image())
        reconciler = SeedReconciler(session_factory, s3_storage, root=seed_root)

        report = await reconciler.reconcile("gallery", "development")

        assert report.files_copied == 1
        assert ("images", "fotografia_ano.png") in fake_s3.objects
        [row] = await _all(session_factory, GalleryImage)
        assert row.path == "https://cdn.example.test/storage/v1/object/public/images/fotografia_ano.png"
        [asset] = await _all(session_factory, MediaAsset)
        assert asset.backend == "s3"
        assert asset.source == "seed"
        assert asset.owner_kind == "gallery"
        assert asset.owner_id == "g1"

    @pytest.mark.asyncio
    async def test_object_storage_second_run_is_a_noop(self, gallery_seed, session_factory, s3_storage, fake_s3):
        reconciler = SeedReconciler(session_factory, s3_storage, root=gallery_seed)
        first = await reconciler.reconcile("gallery", "development")
        puts = list(fake_s3.puts)

        again = await reconciler.reconcile("gallery", "development")

        assert first.files_copied == 2
        assert again.inserted == 0
        assert again.files_copied == 0
        assert again.files_skipped == 2
        assert fake_s3.puts == puts
        assert await _count(session_factory, GalleryImage) == 2


# =============================================================================
# Other kinds
# =============================================================================


class TestKinds:
    @pytest.mark.asyncio
    async def test_dangling_reference_is_a_warning(self, seed_root, session_factory, local_storage):
        write_json(seed_root / "shared" / "members" / "members.json", MEMBERS)
        write_file(seed_root / "shared" / "members" / "ana.webp", make_image(fmt="WEBP"))
        reconciler = SeedReconciler(session_factory, local_storage, root=seed_root)

        report = await reconciler.reconcile("members", "development")

        assert report.inserted == 2
        assert report.files_copied == 1
        assert report.files_missing == 1
        assert any("File not found for members: members/ghost.webp" in w for w in report.warnings)
        rows = {m.id: m for m in await _all(session_factory, Member)}
        assert rows["m1"].photo == "/uploads/members/ana.webp"
        assert rows["m2"].photo == "members/ghost.webp"

    @pytest.mark.asyncio
    async def test_publications_from_environment_folder(self, seed_root, session_factory, local_storage, upload_root):
        write_json(seed_root / "development" / "common" / "publications.json", [
            {
                "id": "p1", "title": "Paper", "description": "d", "type": "article",
                "authors": ["m1", "m2"], "publicationDate": "2023-04-01T00:00:00",
                "filePath": "publications/paper.pdf",
            },
            {
                "id": "p2", "title": "Linked", "description": "d", "type": "other",
                "authors": ["m1"], "publicationDate": "2022-01-01T10:00:00Z", "link": "https://example.org/x",
            },
        ])
        write_file(seed_root / "development" / "common" / "pdf" / "paper.pdf", b"%PDF-1.4 paper")
        reconciler = SeedReconciler(session_factory, local_storage, root=seed_root)

        report = await reconciler.reconcile("publications", "development")

        assert report.inserted == 2
        assert (upload_root / "publications" / "paper.pdf").read_bytes() == b"%PDF-1.4 paper"
        rows = {p.id: p for p in await _all(session_factory, Publication)}
        assert rows["p1"].file_path == "/uploads/publications/paper.pdf"
        assert rows["p1"].authors == ["m1", "m2"]
        assert rows["p2"].file_path is None
        [asset] = await _all(session_factory, MediaAsset)
        assert asset.category == "documents"
        assert asset.mime_type == "application/pdf"

    @pytest.mark.asyncio
    async def test_events_have_no_files(self, seed_root, session_factory, local_storage):
        write_json(seed_root / "shared" / "events" / "events.json", [{
            "id": "e1", "title": "Meetup", "description": "d", "typeOfEvent": "talk",
            "startDate": "2024-05-01T00:00:00.000Z", "startTime": "18:00", "endTime": "20:00",
            "location": "Hall",
        }])
        reconciler = SeedReconciler(session_factory, local_storage, root=seed_root)

        report = await reconciler.reconcile("events", "development")

        assert report.inserted == 1
        assert report.files_copied == 0
        [event] = await _all(session_factory, Event)
        assert event.start_date == date(2024, 5, 1)

    @pytest.mark.asyncio
    async def test_shared_file_has_no_owner(self, seed_root, session_factory, local_storage):
        write_json(seed_root / "shared" / "members" / "members.json", [
            {**MEMBERS[0], "id": "m1", "photo": "members/group.webp"},
            {**MEMBERS[0], "id": "m2", "photo": "members/group.webp"},
        ])
        write_file(seed_root / "shared" / "members" / "group.webp", make_image(fmt="WEBP"))
        reconciler = SeedReconciler(session_factory, local_storage, root=seed_root)

        report = await reconciler.reconcile("members", "development")

        assert report.files_copied == 1
        [asset] = await _all(session_factory, MediaAsset)
        assert asset.owner_id is None

    @pytest.mark.asyncio
    async def test_duplicate_ids_across_sources(self, seed_root, session_factory, local_storage):
        write_json(seed_root / "shared" / "members" / "members.json", [{**MEMBERS[0], "photo": None}])
        write_json(seed_root / "development" / "common" / "members.json", [
            {**MEMBERS[0], "fullName": "Someone Else", "photo": None},
        ])
        reconciler = SeedReconciler(session_factory, local_storage, root=seed_root)

        report = await reconciler.reconcile("members", "development")

        assert report.merged == 1
        assert report.duplicates == 1
        assert report.inserted == 1
        [member] = await _all(session_factory, Member)
        assert member.full_name == "Ana"

    @pytest.mark.asyncio
    async def test_no_sources(self, seed_root, session_factory, local_storage):
        report = await SeedReconciler(session_factory, local_storage, root=seed_root).reconcile("videos", "development")
        assert report.merged == 0
        assert report.inserted == 0


# =============================================================================
# Failures
# =============================================================================


class TestFailures:
    @pytest.mark.asyncio
    async def test_validation_aborts_before_writes(self, gallery_seed, session_factory, local_storage, upload_root):
        write_json(gallery_seed / "development" / "common" / "gallery.json", [{"id": "g3"}])
        reconciler = SeedReconciler(session_factory, local_storage, root=gallery_seed)

        with pytest.raises(ValidationFailed) as exc:
            await reconciler.reconcile("gallery", "development")

        assert exc.value.field == "path"
        assert exc.value.record_id == "g3"
        assert await _count(session_factory, GalleryImage) == 0
        assert written_files(upload_root) == []

    @pytest.mark.asyncio
    async def test_unknown_kind(self, seed_root, session_factory, local_storage):
        with pytest.raises(UnknownSeedKind):
            await SeedReconciler(session_factory, local_storage, root=seed_root).reconcile("sponsors", "development")

    @pytest.mark.asyncio
    async def test_insert_failure_rolls_back(self, gallery_seed, session_factory, local_storage, monkeypatch):
        async def broken(self, model, rows):
            raise OperationalError("INSERT", {}, Exception("database is locked"))

        monkeypatch.setattr(BulkRepository, "insert_ignoring_conflicts", broken)
        reconciler = SeedReconciler(session_factory, local_storage, root=gallery_seed)

        with pytest.raises(BulkInsertFailed) as exc:
            await reconciler.reconcile("gallery", "development")

        assert "database is locked" in exc.value.reason
        assert await _count(session_factory, GalleryImage) == 0

    @pytest.mark.asyncio
    async def test_failing_kind_does_not_stop_others(self, gallery_seed, session_factory, local_storage):
        bad = gallery_seed / "shared" / "members" / "members.json"
        bad.parent.mkdir(parents=True)
        bad.write_text("{broken", encoding="utf-8")
        reconciler = SeedReconciler(session_factory, local_storage, root=gallery_seed)

        batch = await reconciler.reconcile_all("development", ["members", "gallery"])

        assert not batch.ok
        assert "members" in batch.failures
        assert batch.reports["gallery"].inserted == 2
        assert await _count(session_factory, GalleryImage) == 2


@pytest.mark.asyncio
async def test_clear_all(gallery_seed, session_factory, local_storage):
    reconciler = SeedReconciler(session_factory, local_storage, root=gallery_seed)
    await reconciler.reconcile("gallery", "development")

    await reconciler.clear_all()

    assert await _count(session_factory, GalleryImage) == 0
    assert await _count(session_factory, MediaAsset) == 0
