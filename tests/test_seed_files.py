"""
Tests for seed file resolution and materialization.
"""

from __future__ import annotations

import unicodedata

import pytest

from app.modules.seed.files import COPIED, ERROR, MISSING, SKIPPED, FileMaterializer, candidate_paths, resolve_source
from tests.helpers import write_file


class TestCandidatePaths:
    def test_search_order(self, seed_root):
        paths = candidate_paths(seed_root, "gallery", "development", "a.png", "images")
        dev = seed_root / "development" / "common"
        shared = seed_root / "shared"
        assert paths == [
            shared / "gallery" / "a.png",
            dev / "a.png",
            shared / "gallery" / "images" / "a.png",
            shared / "images" / "a.png",
            dev / "pdf" / "a.png",
            dev / "mp4" / "a.png",
            dev / "webp" / "a.png",
            dev / "images" / "a.png",
        ]

    def test_repeated_directories_are_searched_once(self, seed_root):
        paths = candidate_paths(seed_root, "videos", "development", "intro.mp4", "videos")
        assert len(paths) == len(set(paths))
        assert paths[0] == seed_root / "shared" / "videos" / "intro.mp4"

    def test_includes_unicode_variants(self, seed_root):
        name = "Año.png"
        paths = candidate_paths(seed_root, "gallery", "development", name, "images")
        names = {p.name for p in paths}
        assert unicodedata.normalize("NFC", name) in names
        assert unicodedata.normalize("NFD", name) in names


class TestResolveSource:
    def test_first_existing_candidate_wins(self, seed_root):
        write_file(seed_root / "development" / "common" / "images" / "a.png", b"later")
        first = write_file(seed_root / "shared" / "gallery" / "a.png", b"first")

        found, searched = resolve_source(seed_root, "gallery", "development", "a.png", "images")

        assert found == first
        assert searched[0] == str(first)

    def test_finds_decomposed_file_name(self, seed_root):
        nfd = unicodedata.normalize("NFD", "Año.png")
        write_file(seed_root / "shared" / "gallery" / nfd, b"png")

        found, _ = resolve_source(seed_root, "gallery", "development", unicodedata.normalize("NFC", "Año.png"), "images")

        assert found is not None
        assert found.read_bytes() == b"png"

    def test_not_found(self, seed_root):
        found, searched = resolve_source(seed_root, "gallery", "development", "ghost.png", "images")
        assert found is None
        assert len(searched) == 8


class TestFileMaterializer:
    @pytest.mark.asyncio
    async def test_copy_then_skip(self, seed_root, local_storage, upload_root):
        write_file(seed_root / "shared" / "gallery" / "a.png", b"A")
        files = FileMaterializer(local_storage, seed_root, concurrency=2)

        first = await files.materialize("gallery", "development", ["gallery/a.png"])
        again = await files.materialize("gallery", "development", ["gallery/a.png"])

        assert first["gallery/a.png"].status == COPIED
        assert first["gallery/a.png"].public_url == "/uploads/gallery/a.png"
        assert first["gallery/a.png"].content_hash
        assert again["gallery/a.png"].status == SKIPPED
        assert again["gallery/a.png"].content_hash == first["gallery/a.png"].content_hash
        assert (upload_root / "gallery" / "a.png").read_bytes() == b"A"

    @pytest.mark.asyncio
    async def test_missing_source(self, seed_root, local_storage):
        files = FileMaterializer(local_storage, seed_root)

        out = await files.materialize("members", "development", ["members/ghost.webp"])

        outcome = out["members/ghost.webp"]
        assert outcome.status == MISSING
        assert not outcome.available
        assert outcome.searched

    @pytest.mark.asyncio
    async def test_existing_destination_without_source_is_skipped(self, seed_root, local_storage):
        await local_storage.store("gallery/already.png", b"x", "image/png", "images")
        files = FileMaterializer(local_storage, seed_root)

        out = await files.materialize("gallery", "development", ["gallery/already.png"])

        assert out["gallery/already.png"].status == SKIPPED
        assert out["gallery/already.png"].content_hash is None

    @pytest.mark.asyncio
    async def test_duplicate_references_materialize_once(self, seed_root, s3_storage, fake_s3):
        write_file(seed_root / "shared" / "members" / "photo.webp", b"W")
        files = FileMaterializer(s3_storage, seed_root)

        out = await files.materialize("members", "development", ["photo.webp", "photo.webp"])

        assert list(out) == ["photo.webp"]
        assert fake_s3.puts == [("images", "photo.webp")]

    @pytest.mark.asyncio
    async def test_write_failure_is_per_file(self, seed_root, s3_storage, fake_s3, monkeypatch):
        write_file(seed_root / "shared" / "videos" / "ok.mp4", b"ok")
        write_file(seed_root / "shared" / "videos" / "bad.mp4", b"bad")
        original = fake_s3.put_object

        def flaky(**kwargs):
            if kwargs["Key"] == "bad.mp4":
                raise ConnectionError("connection reset")
            return original(**kwargs)

        monkeypatch.setattr(fake_s3, "put_object", flaky)
        files = FileMaterializer(s3_storage, seed_root)

        out = await files.materialize("videos", "development", ["ok.mp4", "bad.mp4"])

        assert out["ok.mp4"].status == COPIED
        assert out["bad.mp4"].status == ERROR
        assert "connection reset" in out["bad.mp4"].error
        assert "backend=s3" in out["bad.mp4"].error
        assert "category=videos" in out["bad.mp4"].error
