"""
레코드 저장소 인터페이스.

코어는 저장소 쿼리 의미론(검색/정렬/필터)을 소유하지 않음.
아래 좁은 인터페이스만 사용하며, 구현은 교체 가능 (JSON 파일, DB 등).
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from src.domain.schemas import ContentBinding, SiteRecord, TemplateRecord


class TemplateStore(ABC):
    """템플릿 레코드 저장소. name = 자연키."""

    @abstractmethod
    async def get(self, template_id: str) -> TemplateRecord | None:
        """id로 조회 (없으면 None)."""

    @abstractmethod
    async def get_by_name(self, name: str) -> TemplateRecord | None:
        """name으로 조회 (없으면 None)."""

    @abstractmethod
    async def upsert_by_name(self, record: TemplateRecord) -> TemplateRecord:
        """
        name 기준 전체 교체 또는 삽입.

        기존 레코드가 있으면 id 유지, 없으면 새 id 발급.

        Returns:
            저장된 레코드 (id 채워짐)
        """

    @abstractmethod
    async def list_all(self) -> list[TemplateRecord]:
        """전체 목록 (저장 순서)."""


class SiteStore(ABC):
    """사이트 레코드 저장소."""

    @abstractmethod
    async def insert(self, record: SiteRecord) -> None:
        """
        새 사이트 레코드 삽입.

        Raises:
            StoreError: DUPLICATE_RECORD
        """

    @abstractmethod
    async def get(self, site_id: str) -> SiteRecord | None:
        """id로 조회 (없으면 None)."""

    @abstractmethod
    async def list_by_user(self, user: str) -> list[SiteRecord]:
        """소유자별 목록."""

    @abstractmethod
    async def update_data(
        self,
        site_id: str,
        data: Sequence[ContentBinding],
    ) -> SiteRecord:
        """
        콘텐츠 바인딩 교체.

        Raises:
            StoreError: SITE_NOT_FOUND
        """
