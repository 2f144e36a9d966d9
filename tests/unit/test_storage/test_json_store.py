"""
test_json_store.py - JSON 파일 레코드 저장소 테스트

DoD:
- upsert_by_name: 전체 교체, id 유지
- 손상된 파일 → STORE_CORRUPT
- 락 timeout → STORE_LOCK_TIMEOUT
"""

import asyncio
import json
from pathlib import Path

import pytest
from filelock import FileLock

from src.domain.errors import ErrorCodes, StoreError
from src.domain.schemas import (
    ContentBinding,
    PreviewPair,
    SiteMetadata,
    SiteRecord,
    TemplateRecord,
)
from src.storage.json_store import JsonCollection, JsonSiteStore, JsonTemplateStore


def make_record(name: str = "Portfolio", author: str = "Jane") -> TemplateRecord:
    return TemplateRecord(
        name=name,
        author=author,
        author_link="https://example.com",
        category="portfolio",
        time="2026-01-01T00:00:00+00:00",
        dir_path=f"/templates/{name.lower()}",
        previews=PreviewPair(Path("/p/mobile.png"), Path("/p/desktop.png")),
    )


def make_site(site_id: str = "a" * 32, user: str = "u1") -> SiteRecord:
    return SiteRecord(
        id=site_id,
        path=f"/sites/{site_id}",
        metadata=SiteMetadata(name="Portfolio", category="portfolio", time="t"),
        user=user,
    )


# =============================================================================
# JsonTemplateStore 테스트
# =============================================================================

class TestJsonTemplateStore:

    @pytest.mark.asyncio
    async def test_insert_assigns_id(self, template_store: JsonTemplateStore):
        stored = await template_store.upsert_by_name(make_record())

        assert stored.id is not None
        assert len(stored.id) == 32
        assert await template_store.get(stored.id) == stored

    @pytest.mark.asyncio
    async def test_upsert_preserves_id(self, template_store: JsonTemplateStore):
        first = await template_store.upsert_by_name(make_record(author="Jane"))
        second = await template_store.upsert_by_name(make_record(author="Joe"))

        assert second.id == first.id
        records = await template_store.list_all()
        assert len(records) == 1
        assert records[0].author == "Joe"

    @pytest.mark.asyncio
    async def test_upsert_is_full_replace(self, template_store: JsonTemplateStore):
        await template_store.upsert_by_name(make_record())
        replacement = make_record()
        replacement.previews = None

        await template_store.upsert_by_name(replacement)

        stored = await template_store.get_by_name("Portfolio")
        assert stored is not None
        assert stored.previews is None

    @pytest.mark.asyncio
    async def test_get_by_name(self, template_store: JsonTemplateStore):
        await template_store.upsert_by_name(make_record("A"))
        await template_store.upsert_by_name(make_record("B"))

        found = await template_store.get_by_name("B")

        assert found is not None
        assert found.name == "B"
        assert await template_store.get_by_name("C") is None

    @pytest.mark.asyncio
    async def test_missing(self, template_store: JsonTemplateStore):
        assert await template_store.get("0" * 32) is None
        assert await template_store.list_all() == []

    @pytest.mark.asyncio
    async def test_concurrent_upserts(self, template_store: JsonTemplateStore):
        """동시 upsert → 유실 없음."""
        await asyncio.gather(*[
            template_store.upsert_by_name(make_record(f"T{i}")) for i in range(10)
        ])

        records = await template_store.list_all()
        assert sorted(r.name for r in records) == sorted(f"T{i}" for i in range(10))

    @pytest.mark.asyncio
    async def test_file_format(self, template_store: JsonTemplateStore):
        stored = await template_store.upsert_by_name(make_record())

        data = json.loads(template_store.collection.path.read_text(encoding="utf-8"))

        assert data["records"][0]["id"] == stored.id
        assert data["records"][0]["previews"]["mobile"] == "/p/mobile.png"


# =============================================================================
# JsonSiteStore 테스트
# =============================================================================

class TestJsonSiteStore:

    @pytest.mark.asyncio
    async def test_insert_and_get(self, site_store: JsonSiteStore):
        site = make_site()

        await site_store.insert(site)

        assert await site_store.get(site.id) == site

    @pytest.mark.asyncio
    async def test_duplicate_insert(self, site_store: JsonSiteStore):
        await site_store.insert(make_site())

        with pytest.raises(StoreError) as exc_info:
            await site_store.insert(make_site())

        assert exc_info.value.code == ErrorCodes.DUPLICATE_RECORD

    @pytest.mark.asyncio
    async def test_list_by_user(self, site_store: JsonSiteStore):
        await site_store.insert(make_site("a" * 32, "u1"))
        await site_store.insert(make_site("b" * 32, "u2"))
        await site_store.insert(make_site("c" * 32, "u1"))

        sites = await site_store.list_by_user("u1")

        assert [s.id for s in sites] == ["a" * 32, "c" * 32]

    @pytest.mark.asyncio
    async def test_update_data(self, site_store: JsonSiteStore):
        await site_store.insert(make_site())
        bindings = [ContentBinding(selector="#title", value="Hi")]

        updated = await site_store.update_data("a" * 32, bindings)

        assert updated.data == bindings
        stored = await site_store.get("a" * 32)
        assert stored is not None
        assert stored.data == bindings

    @pytest.mark.asyncio
    async def test_update_missing(self, site_store: JsonSiteStore):
        with pytest.raises(StoreError) as exc_info:
            await site_store.update_data("f" * 32, [])

        assert exc_info.value.code == ErrorCodes.SITE_NOT_FOUND


# =============================================================================
# JsonCollection 테스트
# =============================================================================

class TestJsonCollection:

    def test_corrupt_file(self, tmp_path: Path):
        path = tmp_path / "records.json"
        path.write_text("{not json")

        with pytest.raises(StoreError) as exc_info:
            JsonCollection(path).read()

        assert exc_info.value.code == ErrorCodes.STORE_CORRUPT

    def test_missing_records_key(self, tmp_path: Path):
        path = tmp_path / "records.json"
        path.write_text('{"items": []}')

        with pytest.raises(StoreError) as exc_info:
            JsonCollection(path).read()

        assert exc_info.value.code == ErrorCodes.STORE_CORRUPT

    def test_failed_modify_leaves_file(self, tmp_path: Path):
        collection = JsonCollection(tmp_path / "records.json")
        collection.modify(lambda records: records.append({"id": "1"}))

        def _explode(records):
            records.clear()
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            collection.modify(_explode)

        assert collection.read() == [{"id": "1"}]

    def test_lock_timeout(self, tmp_path: Path, monkeypatch):
        collection = JsonCollection(tmp_path / "records.json")
        monkeypatch.setattr(JsonCollection, "LOCK_TIMEOUT", 0.1)

        holder = FileLock(str(collection.path) + ".lock", thread_local=False, is_singleton=False)
        holder.acquire()
        try:
            with pytest.raises(StoreError) as exc_info:
                collection.read()
        finally:
            holder.release()

        assert exc_info.value.code == ErrorCodes.STORE_LOCK_TIMEOUT
