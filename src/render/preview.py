"""
프리뷰 렌더러: 외부 스크린샷 명령 기반.

외부 렌더 호출 규약:
- 위치 인자 3개: html, mobile_output.png, desktop_output.png
- 부수효과로 PNG 2개 생성

동작:
1. 새 스크래치 작업공간 생성
2. HTML을 preview.html로 기록
3. 출력 경로: target 지정 시 그대로, 아니면 스크래치 안
4. 렌더 명령 실행
5. 결과와 무관하게 스크래치 삭제 예약 (기본 120초)
6. PreviewPair 반환 (출력 파일 존재는 검증하지 않음 → verify_preview)
"""

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from src.core.cleanup import DeferredCleanupScheduler, create_scratch_dir
from src.domain.constants import (
    RENDER_SCRATCH_GRACE_SECONDS,
    SCRATCH_DESKTOP_FILENAME,
    SCRATCH_HTML_FILENAME,
    SCRATCH_MOBILE_FILENAME,
)
from src.domain.errors import ErrorCodes, RenderError
from src.domain.schemas import PreviewPair
from src.render.base import Renderer
from src.render.process import ProcessRunner

logger = logging.getLogger(__name__)


class PreviewRenderer(Renderer):
    """
    외부 스크린샷 명령으로 모바일/데스크톱 프리뷰 생성.

    Usage:
        renderer = PreviewRenderer(["bun", "run", "scripts/screenshot.js"], runner, cleanup)
        pair = await renderer.render(html)                      # 스크래치 출력
        pair = await renderer.render(html, PreviewPair.in_dir(d))  # 제자리 출력
    """

    def __init__(
        self,
        command: Sequence[str],
        runner: ProcessRunner,
        cleanup: DeferredCleanupScheduler,
        scratch_root: Path | None = None,
        scratch_grace: float = RENDER_SCRATCH_GRACE_SECONDS,
    ):
        """
        Args:
            command: 렌더 명령 (경로 3개가 뒤에 붙음)
            runner: 공용 프로세스 실행기
            cleanup: 스크래치 지연 삭제 스케줄러
            scratch_root: 스크래치 상위 디렉토리 (None이면 시스템 임시)
            scratch_grace: 스크래치 삭제 유예 (초). 스크래치 출력 이미지의
                다운로드 가능 시간이기도 함
        """
        if not command:
            raise ValueError("render command must not be empty")

        self.command = list(command)
        self.runner = runner
        self.cleanup = cleanup
        self.scratch_root = scratch_root
        self.scratch_grace = scratch_grace

    async def render(self, html: str, target: PreviewPair | None = None) -> PreviewPair:
        try:
            scratch = await asyncio.to_thread(create_scratch_dir, self.scratch_root)
        except OSError as e:
            raise RenderError(
                ErrorCodes.IO_FAILURE,
                f"Failed to create scratch workspace: {e}",
            ) from e

        try:
            html_path = scratch / SCRATCH_HTML_FILENAME
            try:
                await asyncio.to_thread(html_path.write_text, html, encoding="utf-8")
            except OSError as e:
                raise RenderError(
                    ErrorCodes.IO_FAILURE,
                    f"Failed to write preview HTML: {e}",
                    scratch=str(scratch),
                ) from e

            if target is None:
                pair = PreviewPair(
                    mobile=scratch / SCRATCH_MOBILE_FILENAME,
                    desktop=scratch / SCRATCH_DESKTOP_FILENAME,
                )
            else:
                pair = target

            await self.runner.run(
                [*self.command, str(html_path), str(pair.mobile), str(pair.desktop)],
                error_cls=RenderError,
            )
            return pair
        finally:
            self.cleanup.schedule_delete(scratch, self.scratch_grace)


def verify_preview(pair: PreviewPair) -> None:
    """
    렌더 출력 파일 존재 확인.

    render()는 출력을 검증하지 않으므로, 출력을 영구 경로로 쓰는 호출자가 사용.

    Args:
        pair: 확인할 PreviewPair

    Raises:
        RenderError: RENDER_OUTPUT_MISSING
    """
    missing = [str(p) for p in (pair.mobile, pair.desktop) if not p.is_file()]
    if missing:
        raise RenderError(
            ErrorCodes.RENDER_OUTPUT_MISSING,
            f"Renderer did not produce: {', '.join(missing)}",
            missing=missing,
        )
