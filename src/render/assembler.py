"""
HTML 조립기: 외부 빌드 명령 기반.

외부 빌드 호출 규약:
- 위치 인자 4개: html, css, js, data.json
- stdout = 조립된 HTML 문서
- 비정상 종료 = 실패 (stderr가 메시지)

상태 없음. 원본 소스로 조립할 때만 스크래치 작업공간을 만들고
유예 시간 후 삭제를 예약함.
"""

import asyncio
import json
import logging
from collections.abc import Sequence
from pathlib import Path

from src.core.cleanup import DeferredCleanupScheduler, create_scratch_dir
from src.domain.constants import (
    ASSEMBLY_SCRATCH_GRACE_SECONDS,
    SOURCE_CSS_FILENAME,
    SOURCE_DATA_FILENAME,
    SOURCE_HTML_FILENAME,
    SOURCE_JS_FILENAME,
)
from src.domain.errors import AssemblyError, ErrorCodes
from src.domain.schemas import ContentBinding
from src.render.base import Assembler, site_source_paths
from src.render.process import ProcessRunner

logger = logging.getLogger(__name__)


def dump_bindings(bindings: Sequence[ContentBinding]) -> str:
    """바인딩 목록 → 빌드 스크립트용 JSON 배열."""
    return json.dumps([b.to_dict() for b in bindings], ensure_ascii=False)


def _write_files(files: dict[Path, str]) -> None:
    for path, content in files.items():
        path.write_text(content, encoding="utf-8")


class ContentAssembler(Assembler):
    """
    외부 빌드 명령으로 HTML 조립.

    Usage:
        assembler = ContentAssembler(
            command=["bun", "run", "scripts/builder.js"],
            runner=runner,
            cleanup=cleanup,
            default_data_path=Path("scripts/default.json"),
        )
        html = await assembler.assemble(html_path, css_path, js_path)
    """

    def __init__(
        self,
        command: Sequence[str],
        runner: ProcessRunner,
        cleanup: DeferredCleanupScheduler,
        default_data_path: Path,
        scratch_root: Path | None = None,
        scratch_grace: float = ASSEMBLY_SCRATCH_GRACE_SECONDS,
    ):
        """
        Args:
            command: 빌드 명령 (경로 4개가 뒤에 붙음)
            runner: 공용 프로세스 실행기
            cleanup: 스크래치 지연 삭제 스케줄러
            default_data_path: data_path 생략 시 쓰는 고정 바인딩 파일
            scratch_root: 스크래치 상위 디렉토리 (None이면 시스템 임시)
            scratch_grace: 스크래치 삭제 유예 (초)
        """
        if not command:
            raise ValueError("build command must not be empty")

        self.command = list(command)
        self.runner = runner
        self.cleanup = cleanup
        self.default_data_path = default_data_path
        self.scratch_root = scratch_root
        self.scratch_grace = scratch_grace

    async def assemble(
        self,
        html_path: Path,
        css_path: Path,
        js_path: Path,
        data_path: Path | None = None,
    ) -> str:
        if data_path is None:
            data_path = self.default_data_path

        argv = [*self.command, str(html_path), str(css_path), str(js_path), str(data_path)]
        result = await self.runner.run(argv, error_cls=AssemblyError)

        try:
            return result.stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise AssemblyError(
                ErrorCodes.ENCODING_FAILURE,
                "Build output is not valid UTF-8",
                position=e.start,
            ) from e

    async def assemble_site(
        self,
        site_dir: Path,
        bindings: Sequence[ContentBinding] | None = None,
    ) -> str:
        html_path, css_path, js_path = site_source_paths(site_dir)

        if bindings is None:
            return await self.assemble(html_path, css_path, js_path)

        # 바인딩은 스크래치에 JSON으로 기록 후 전달
        scratch = await self._create_scratch()
        try:
            data_path = scratch / SOURCE_DATA_FILENAME
            await self._write(scratch, {data_path: dump_bindings(bindings)})
            return await self.assemble(html_path, css_path, js_path, data_path)
        finally:
            self.cleanup.schedule_delete(scratch, self.scratch_grace)

    async def assemble_source(
        self,
        html: str,
        css: str,
        js: str,
        bindings: Sequence[ContentBinding] = (),
    ) -> str:
        """
        원본 소스 문자열로 HTML 조립 (편집 중 라이브 프리뷰용).

        소스와 바인딩을 스크래치 작업공간에 기록한 뒤 조립하고,
        작업공간은 유예 시간 후 삭제됨.

        Args:
            html: HTML 소스
            css: CSS 소스
            js: JS 소스
            bindings: 콘텐츠 바인딩

        Returns:
            조립된 HTML 문자열

        Raises:
            AssemblyError: PROCESS_FAILED, PROCESS_TIMEOUT, ENCODING_FAILURE, IO_FAILURE
        """
        scratch = await self._create_scratch()
        try:
            html_path = scratch / SOURCE_HTML_FILENAME
            css_path = scratch / SOURCE_CSS_FILENAME
            js_path = scratch / SOURCE_JS_FILENAME
            data_path = scratch / SOURCE_DATA_FILENAME

            await self._write(scratch, {
                html_path: html,
                css_path: css,
                js_path: js,
                data_path: dump_bindings(bindings),
            })
            return await self.assemble(html_path, css_path, js_path, data_path)
        finally:
            self.cleanup.schedule_delete(scratch, self.scratch_grace)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    async def _create_scratch(self) -> Path:
        try:
            return await asyncio.to_thread(create_scratch_dir, self.scratch_root)
        except OSError as e:
            raise AssemblyError(
                ErrorCodes.IO_FAILURE,
                f"Failed to create scratch workspace: {e}",
            ) from e

    async def _write(self, scratch: Path, files: dict[Path, str]) -> None:
        try:
            await asyncio.to_thread(_write_files, files)
        except OSError as e:
            raise AssemblyError(
                ErrorCodes.IO_FAILURE,
                f"Failed to write assembly inputs: {e}",
                scratch=str(scratch),
            ) from e
