"""
JSON 파일 기반 레코드 저장소.

규칙:
- 파일 1개 = 컬렉션 1개: {"records": [...]}
- 읽기-수정-쓰기 전체를 파일 락으로 보호 (프로세스 간 안전)
- 쓰기는 원자적 (temp → rename), 중간 상태 없음
- 락/파일 I/O는 스레드에서 실행 (이벤트 루프 블로킹 금지)
"""

import asyncio
import dataclasses
import json
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

from filelock import FileLock, Timeout

from src.core.atomic import atomic_write_json
from src.core.ids import generate_record_id
from src.domain.errors import ErrorCodes, StoreError
from src.domain.schemas import ContentBinding, SiteRecord, TemplateRecord
from src.storage.base import SiteStore, TemplateStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

TEMPLATES_FILENAME = "templates.json"
SITES_FILENAME = "sites.json"


class JsonCollection:
    """
    레코드 dict 목록을 담는 JSON 파일 1개.

    Usage:
        coll = JsonCollection(data_dir / "templates.json")
        records = coll.read()
        coll.modify(lambda records: ...)
    """

    # 락 timeout (초)
    LOCK_TIMEOUT = 10.0

    def __init__(self, path: Path):
        self.path = path
        self._lock_path = path.with_name(path.name + ".lock")

    def _lock(self) -> FileLock:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        return FileLock(self._lock_path, timeout=self.LOCK_TIMEOUT)

    def _load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise StoreError(
                ErrorCodes.STORE_CORRUPT,
                f"Store file is not valid JSON: {self.path}",
                path=str(self.path),
                error=str(e),
            ) from e

        records = data.get("records") if isinstance(data, dict) else None
        if not isinstance(records, list):
            raise StoreError(
                ErrorCodes.STORE_CORRUPT,
                f"Store file has no 'records' list: {self.path}",
                path=str(self.path),
            )
        return records

    def read(self) -> list[dict[str, Any]]:
        """
        락 보유 상태로 전체 레코드 읽기.

        Raises:
            StoreError: STORE_LOCK_TIMEOUT, STORE_CORRUPT
        """
        lock = self._lock()
        try:
            with lock:
                return self._load()
        except Timeout:
            raise StoreError(
                ErrorCodes.STORE_LOCK_TIMEOUT,
                f"Failed to acquire store lock: {self._lock_path}",
                timeout=self.LOCK_TIMEOUT,
            ) from None

    def modify(self, func: Callable[[list[dict[str, Any]]], T]) -> T:
        """
        락 보유 상태로 읽기-수정-쓰기.

        func가 records 목록을 제자리 수정하고 반환값을 돌려줌.
        func가 예외를 던지면 파일은 변경되지 않음.

        Raises:
            StoreError: STORE_LOCK_TIMEOUT, STORE_CORRUPT
        """
        lock = self._lock()
        try:
            with lock:
                records = self._load()
                result = func(records)
                atomic_write_json(self.path, {"records": records})
                return result
        except Timeout:
            raise StoreError(
                ErrorCodes.STORE_LOCK_TIMEOUT,
                f"Failed to acquire store lock: {self._lock_path}",
                timeout=self.LOCK_TIMEOUT,
            ) from None


# =============================================================================
# Template Store
# =============================================================================


class JsonTemplateStore(TemplateStore):
    """data_dir/templates.json 기반 TemplateStore."""

    def __init__(self, data_dir: Path):
        self.collection = JsonCollection(data_dir / TEMPLATES_FILENAME)

    async def get(self, template_id: str) -> TemplateRecord | None:
        records = await asyncio.to_thread(self.collection.read)
        for raw in records:
            if raw.get("id") == template_id:
                return TemplateRecord.from_dict(raw)
        return None

    async def get_by_name(self, name: str) -> TemplateRecord | None:
        records = await asyncio.to_thread(self.collection.read)
        for raw in records:
            if raw.get("name") == name:
                return TemplateRecord.from_dict(raw)
        return None

    async def upsert_by_name(self, record: TemplateRecord) -> TemplateRecord:
        def _upsert(records: list[dict[str, Any]]) -> TemplateRecord:
            for i, raw in enumerate(records):
                if raw.get("name") == record.name:
                    # 전체 교체, id는 유지
                    stored = dataclasses.replace(record, id=raw.get("id"))
                    records[i] = stored.to_dict()
                    return stored

            stored = dataclasses.replace(record, id=generate_record_id())
            records.append(stored.to_dict())
            return stored

        stored = await asyncio.to_thread(self.collection.modify, _upsert)
        logger.debug(f"Upserted template '{stored.name}' (id={stored.id})")
        return stored

    async def list_all(self) -> list[TemplateRecord]:
        records = await asyncio.to_thread(self.collection.read)
        return [TemplateRecord.from_dict(raw) for raw in records]


# =============================================================================
# Site Store
# =============================================================================


class JsonSiteStore(SiteStore):
    """data_dir/sites.json 기반 SiteStore."""

    def __init__(self, data_dir: Path):
        self.collection = JsonCollection(data_dir / SITES_FILENAME)

    async def insert(self, record: SiteRecord) -> None:
        def _insert(records: list[dict[str, Any]]) -> None:
            if any(raw.get("id") == record.id for raw in records):
                raise StoreError(
                    ErrorCodes.DUPLICATE_RECORD,
                    f"Site '{record.id}' already exists",
                    site_id=record.id,
                )
            records.append(record.to_dict())

        await asyncio.to_thread(self.collection.modify, _insert)

    async def get(self, site_id: str) -> SiteRecord | None:
        records = await asyncio.to_thread(self.collection.read)
        for raw in records:
            if raw.get("id") == site_id:
                return SiteRecord.from_dict(raw)
        return None

    async def list_by_user(self, user: str) -> list[SiteRecord]:
        records = await asyncio.to_thread(self.collection.read)
        return [SiteRecord.from_dict(raw) for raw in records if raw.get("user") == user]

    async def update_data(
        self,
        site_id: str,
        data: Sequence[ContentBinding],
    ) -> SiteRecord:
        def _update(records: list[dict[str, Any]]) -> SiteRecord:
            for i, raw in enumerate(records):
                if raw.get("id") == site_id:
                    site = SiteRecord.from_dict(raw)
                    site.data = list(data)
                    records[i] = site.to_dict()
                    return site
            raise StoreError(
                ErrorCodes.SITE_NOT_FOUND,
                f"Site '{site_id}' not found",
                site_id=site_id,
            )

        return await asyncio.to_thread(self.collection.modify, _update)
