"""
사이트 프리뷰 생성.

- render_site_preview: 사이트 디렉토리 자체의 previews/*.png 갱신
- LivePreviewService: 편집 중 원본 소스 → 임시 다운로드 토큰 2개
"""

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from src.core.registry import EphemeralArtifactRegistry
from src.domain.constants import SITE_PREVIEWS_DIR
from src.domain.errors import ErrorCodes, RenderError
from src.domain.schemas import ContentBinding, LivePreviewTokens, PreviewPair
from src.render.assembler import ContentAssembler
from src.render.base import Assembler, Renderer

logger = logging.getLogger(__name__)


async def render_site_preview(
    site_dir: Path,
    assembler: Assembler,
    renderer: Renderer,
    bindings: Sequence[ContentBinding] | None = None,
) -> PreviewPair:
    """
    사이트(또는 템플릿) 디렉토리의 프리뷰를 제자리에 렌더.

    Args:
        site_dir: 고정 레이아웃 디렉토리
        assembler: HTML 조립기
        renderer: 프리뷰 렌더러
        bindings: 콘텐츠 바인딩 (None이면 기본 바인딩)

    Returns:
        site_dir/previews/{mobile,desktop}.png

    Raises:
        AssemblyError, RenderError
    """
    previews_dir = site_dir / SITE_PREVIEWS_DIR
    try:
        await asyncio.to_thread(previews_dir.mkdir, exist_ok=True)
    except OSError as e:
        raise RenderError(
            ErrorCodes.IO_FAILURE,
            f"Cannot create {previews_dir}: {e}",
        ) from e

    html = await assembler.assemble_site(site_dir, bindings)
    return await renderer.render(html, PreviewPair.in_dir(previews_dir))


class LivePreviewService:
    """
    편집 중 라이브 프리뷰.

    출력 이미지는 렌더러 스크래치에 남고, 토큰 TTL과 스크래치 유예 시간이
    함께 만료됨.

    Usage:
        service = LivePreviewService(assembler, renderer, registry)
        tokens = await service.preview_source(html, css, js, bindings)
        registry.get(tokens.mobile)  # → mobile png 경로
    """

    def __init__(
        self,
        assembler: ContentAssembler,
        renderer: Renderer,
        registry: EphemeralArtifactRegistry,
    ):
        self.assembler = assembler
        self.renderer = renderer
        self.registry = registry

    async def preview_source(
        self,
        html: str,
        css: str,
        js: str,
        bindings: Sequence[ContentBinding] = (),
    ) -> LivePreviewTokens:
        """
        원본 소스 → 조립 → 렌더 → 토큰 발급.

        Raises:
            AssemblyError, RenderError
        """
        document = await self.assembler.assemble_source(html, css, js, bindings)
        pair = await self.renderer.render(document)

        tokens = LivePreviewTokens(
            mobile=self.registry.add(pair.mobile),
            desktop=self.registry.add(pair.desktop),
        )
        logger.debug(f"Issued live preview tokens for {pair.mobile.parent}")
        return tokens
