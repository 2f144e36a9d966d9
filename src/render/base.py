"""
조립/렌더 추상 인터페이스.

외부 빌드/스크린샷 도구는 인자 순서와 출력 형식이 관례로만 고정된
블랙박스이므로, 코어는 이 좁은 인터페이스(assemble, render)에만 의존함.
도구 교체나 테스트 대역은 이 클래스를 구현하면 됨.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from src.domain.constants import (
    SITE_INDEX_FILENAME,
    SITE_SCRIPT_PATH,
    SITE_STYLES_PATH,
)
from src.domain.schemas import ContentBinding, PreviewPair


def site_source_paths(site_dir: Path) -> tuple[Path, Path, Path]:
    """
    사이트/템플릿 디렉토리의 (html, css, js) 경로.

    Args:
        site_dir: 사이트 또는 템플릿 루트

    Returns:
        (index.html, styles/styles.css, js/script.js)
    """
    return (
        site_dir / SITE_INDEX_FILENAME,
        site_dir / SITE_STYLES_PATH,
        site_dir / SITE_SCRIPT_PATH,
    )


class Assembler(ABC):
    """HTML/CSS/JS + 바인딩 → 단일 HTML 문서."""

    @abstractmethod
    async def assemble(
        self,
        html_path: Path,
        css_path: Path,
        js_path: Path,
        data_path: Path | None = None,
    ) -> str:
        """
        소스 파일 경로로 HTML 조립.

        Args:
            html_path: HTML 파일
            css_path: CSS 파일
            js_path: JS 파일
            data_path: 바인딩 JSON (None이면 기본 바인딩 파일)

        Returns:
            조립된 HTML 문자열

        Raises:
            AssemblyError: PROCESS_FAILED, PROCESS_TIMEOUT, ENCODING_FAILURE
        """

    @abstractmethod
    async def assemble_site(
        self,
        site_dir: Path,
        bindings: Sequence[ContentBinding] | None = None,
    ) -> str:
        """고정 레이아웃 디렉토리로 HTML 조립 (bindings None이면 기본 바인딩)."""


class Renderer(ABC):
    """HTML 문자열 → 모바일/데스크톱 프리뷰 이미지."""

    @abstractmethod
    async def render(self, html: str, target: PreviewPair | None = None) -> PreviewPair:
        """
        HTML 렌더.

        Args:
            html: 조립된 HTML 문서
            target: 출력 경로 (None이면 스크래치 작업공간 안)

        Returns:
            출력된 PreviewPair (파일 존재는 검증하지 않음)

        Raises:
            RenderError: PROCESS_FAILED, PROCESS_TIMEOUT, IO_FAILURE
        """
