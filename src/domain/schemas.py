"""
Data schemas for the artifact lifecycle core.

규칙:
- 레코드 필드명 = 저장소 문서 키 (to_dict/from_dict 대칭)
- 경로는 Path로 보관, 직렬화 시 str
- TemplateRecord.name = upsert 자연키
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from src.domain.constants import (
    PREVIEW_DESKTOP_FILENAME,
    PREVIEW_MOBILE_FILENAME,
)


def utc_now_iso() -> str:
    """현재 UTC 시각 (ISO 8601)."""
    return datetime.now(UTC).isoformat()


# =============================================================================
# Preview Pair
# =============================================================================

@dataclass
class PreviewPair:
    """
    모바일/데스크톱 프리뷰 이미지 경로 쌍.

    한 단위로 생성됨: 둘 다 같은 HTML에서 나왔거나, 둘 다 신뢰 불가.
    """
    mobile: Path
    desktop: Path

    @classmethod
    def in_dir(cls, previews_dir: Path) -> "PreviewPair":
        """previews/ 디렉토리 안의 고정 파일명 (mobile.png, desktop.png)."""
        return cls(
            mobile=previews_dir / PREVIEW_MOBILE_FILENAME,
            desktop=previews_dir / PREVIEW_DESKTOP_FILENAME,
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "mobile": str(self.mobile),
            "desktop": str(self.desktop),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PreviewPair":
        return cls(
            mobile=Path(data["mobile"]),
            desktop=Path(data["desktop"]),
        )


# =============================================================================
# Template Record
# =============================================================================

@dataclass
class TemplateRecord:
    """
    템플릿 레코드 (metadata.json + 동기화 시 채워지는 필드).

    - id: 저장소가 발급, upsert 시에도 유지
    - dir_path: 디스크상의 원본 (진실 원천)
    - previews: 동기화 시 새로 렌더된 프리뷰
    """
    name: str
    author: str
    author_link: str
    category: str
    time: str = ""
    dir_path: str = ""
    previews: PreviewPair | None = None
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "author": self.author,
            "author_link": self.author_link,
            "category": self.category,
            "time": self.time,
            "dir_path": self.dir_path,
            "previews": self.previews.to_dict() if self.previews else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TemplateRecord":
        previews = data.get("previews")
        return cls(
            id=data.get("id"),
            name=data["name"],
            author=data.get("author", ""),
            author_link=data.get("author_link", ""),
            category=data.get("category", ""),
            time=data.get("time", ""),
            dir_path=data.get("dir_path", ""),
            previews=PreviewPair.from_dict(previews) if previews else None,
        )


# =============================================================================
# Site Record
# =============================================================================

@dataclass
class ContentBinding:
    """
    콘텐츠 바인딩 (selector, value, link).

    렌더 시 템플릿 마크업의 #selector 요소에 주입됨. 모두 선택값.
    """
    selector: str | None = None
    value: str | None = None
    link: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "selector": self.selector,
            "value": self.value,
            "link": self.link,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentBinding":
        return cls(
            selector=data.get("selector"),
            value=data.get("value"),
            link=data.get("link"),
        )


@dataclass
class SiteMetadata:
    """사이트 표시 정보."""
    name: str
    category: str | None = None
    time: str = ""

    @classmethod
    def new(cls, name: str, category: str | None = None) -> "SiteMetadata":
        return cls(name=name, category=category, time=utc_now_iso())

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "time": self.time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SiteMetadata":
        return cls(
            name=data["name"],
            category=data.get("category"),
            time=data.get("time", ""),
        )


@dataclass
class SiteRecord:
    """
    사이트 레코드.

    path는 id에서 결정론적으로 유도 (<sites_root>/<id>), 재사용 금지.
    """
    id: str
    path: str
    metadata: SiteMetadata
    user: str
    data: list[ContentBinding] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "path": self.path,
            "data": [b.to_dict() for b in self.data],
            "metadata": self.metadata.to_dict(),
            "user": self.user,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SiteRecord":
        return cls(
            id=data["id"],
            path=data["path"],
            data=[ContentBinding.from_dict(b) for b in data.get("data", [])],
            metadata=SiteMetadata.from_dict(data["metadata"]),
            user=data["user"],
        )


# =============================================================================
# Sync Run Log
# =============================================================================

@dataclass
class SyncSkip:
    """동기화에서 제외된 템플릿 디렉토리."""
    dir_path: str
    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "dir_path": self.dir_path,
            "code": self.code,
            "message": self.message,
        }


@dataclass
class SyncRunLog:
    """
    템플릿 동기화 tick 1회의 실행 로그.

    한 디렉토리의 실패는 skipped에만 기록되고 tick은 계속됨.
    """
    run_id: str
    templates_root: str
    started_at: str  # ISO 8601
    finished_at: str | None = None
    result: str = "pending"  # pending, success, partial, failed

    synced: list[str] = field(default_factory=list)  # 템플릿 name
    skipped: list[SyncSkip] = field(default_factory=list)

    # tick 전체 실패 (루트 디렉토리 읽기 실패 등)
    error_code: str | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "templates_root": self.templates_root,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result,
            "synced": list(self.synced),
            "skipped": [s.to_dict() for s in self.skipped],
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


@dataclass
class LivePreviewTokens:
    """라이브 프리뷰 다운로드 토큰 쌍."""
    mobile: str
    desktop: str

    def to_dict(self) -> dict[str, str]:
        return {"mobile": self.mobile, "desktop": self.desktop}
