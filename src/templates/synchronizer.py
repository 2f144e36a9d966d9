"""
템플릿 동기화: 디스크의 템플릿 라이브러리 → 템플릿 레코드.

tick 1회:
1. templates_root 바로 아래 디렉토리 나열 (. 으로 시작하는 이름 제외)
2. metadata.json 있는 디렉토리만 후보
3. 메타데이터 파싱, dir_path 기록
4. 템플릿 락 보유 상태로 previews/mobile.png, previews/desktop.png 재렌더
5. name 기준 upsert (id 유지)

규칙:
- 디스크 = 진실 원천, 레코드는 파생물
- 디렉토리 1개 실패 → 로그 + run log skipped 기록, tick 계속
- 같은 tick에서 이미 본 name → DUPLICATE_TEMPLATE_NAME으로 제외
- 루트 디렉토리 없음/읽기 실패 → tick 전체 failed, 루프는 유지
- 디렉토리 삭제는 레코드를 지우지 않음
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from filelock import FileLock, Timeout

from src.core.logging import (
    complete_sync_run_log,
    create_sync_run_log,
    record_skip,
    save_sync_run_log,
)
from src.core.scheduler import PeriodicTask
from src.domain.constants import SITE_PREVIEWS_DIR, TEMPLATE_SYNC_INTERVAL_SECONDS
from src.domain.errors import ArtifactError, ErrorCodes
from src.domain.schemas import PreviewPair, SyncRunLog, TemplateRecord
from src.render.base import Assembler, Renderer
from src.render.preview import verify_preview
from src.storage.base import TemplateStore
from src.templates.metadata import has_metadata, load_template_metadata

logger = logging.getLogger(__name__)


class TemplateSynchronizer:
    """
    템플릿 루트 주기 스캔 + upsert.

    Usage:
        sync = TemplateSynchronizer(root, store, assembler, renderer)
        sync.start()          # 즉시 1회, 이후 interval마다
        await sync.stop()

        run_log = await sync.sync_once()  # 수동 1회
    """

    # 템플릿 락 timeout (초)
    LOCK_TIMEOUT = 120.0

    def __init__(
        self,
        templates_root: Path,
        store: TemplateStore,
        assembler: Assembler,
        renderer: Renderer,
        interval: float = TEMPLATE_SYNC_INTERVAL_SECONDS,
        logs_dir: Path | None = None,
        locks_dir: Path | None = None,
    ):
        """
        Args:
            templates_root: 템플릿 라이브러리 루트
            store: 템플릿 레코드 저장소
            assembler: HTML 조립기
            renderer: 프리뷰 렌더러
            interval: tick 주기 (초)
            logs_dir: run log 저장 위치 (None이면 저장 안 함)
            locks_dir: 템플릿 락 파일 위치 (기본 templates_root/.locks)
        """
        self.templates_root = templates_root
        self.store = store
        self.assembler = assembler
        self.renderer = renderer
        self.logs_dir = logs_dir
        self.locks_dir = locks_dir or templates_root / ".locks"
        self._periodic = PeriodicTask("template-sync", interval, self.sync_once)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def running(self) -> bool:
        return self._periodic.running

    def start(self) -> None:
        """주기 동기화 시작 (즉시 1회 실행)."""
        self._periodic.start()

    async def stop(self) -> None:
        """주기 동기화 정지 (진행 중 tick 완료 대기)."""
        await self._periodic.stop()

    # =========================================================================
    # Tick
    # =========================================================================

    async def sync_once(self) -> SyncRunLog:
        """
        템플릿 루트 1회 동기화.

        Returns:
            이번 tick의 SyncRunLog
        """
        run_log = create_sync_run_log(self.templates_root)

        try:
            candidates = await asyncio.to_thread(self._list_candidates)
        except OSError as e:
            logger.error(f"Cannot read templates root {self.templates_root}: {e}")
            complete_sync_run_log(run_log, ErrorCodes.IO_FAILURE, str(e))
            await self._save(run_log)
            return run_log

        seen: dict[str, Path] = {}
        for template_dir in candidates:
            try:
                record = await self._sync_template(template_dir, seen)
            except ArtifactError as e:
                logger.warning(f"Skipping template {template_dir}: {e}")
                record_skip(run_log, template_dir, e.code, e.message)
                continue
            run_log.synced.append(record.name)

        complete_sync_run_log(run_log)
        logger.info(
            f"Template sync {run_log.run_id}: {len(run_log.synced)} synced, "
            f"{len(run_log.skipped)} skipped ({run_log.result})"
        )
        await self._save(run_log)
        return run_log

    def _list_candidates(self) -> list[Path]:
        candidates = []
        for entry in sorted(self.templates_root.iterdir()):
            if entry.name.startswith(".") or not entry.is_dir():
                continue
            if not has_metadata(entry):
                logger.debug(f"No metadata in {entry}, not a template")
                continue
            candidates.append(entry)
        return candidates

    async def _sync_template(
        self,
        template_dir: Path,
        seen: dict[str, Path],
    ) -> TemplateRecord:
        record = await asyncio.to_thread(load_template_metadata, template_dir)

        if record.name in seen:
            raise ArtifactError(
                ErrorCodes.DUPLICATE_TEMPLATE_NAME,
                f"Template name '{record.name}' already declared by {seen[record.name]}",
                name=record.name,
            )
        seen[record.name] = template_dir

        previews_dir = template_dir / SITE_PREVIEWS_DIR
        pair = PreviewPair.in_dir(previews_dir.resolve())

        async with self._template_lock(template_dir.name):
            try:
                await asyncio.to_thread(previews_dir.mkdir, exist_ok=True)
            except OSError as e:
                raise ArtifactError(
                    ErrorCodes.IO_FAILURE,
                    f"Cannot create {previews_dir}: {e}",
                ) from e

            html = await self.assembler.assemble_site(template_dir)
            await self.renderer.render(html, pair)
            await asyncio.to_thread(verify_preview, pair)

        record.previews = pair
        stored = await self.store.upsert_by_name(record)
        logger.debug(f"Synced template '{stored.name}' from {template_dir}")
        return stored

    @asynccontextmanager
    async def _template_lock(self, lock_name: str) -> AsyncIterator[None]:
        """
        템플릿별 파일 락 (다른 프로세스의 동시 렌더 방지).

        Raises:
            ArtifactError: IO_FAILURE (락 timeout, 락 디렉토리/파일 생성 실패)
        """
        try:
            await asyncio.to_thread(self.locks_dir.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise ArtifactError(
                ErrorCodes.IO_FAILURE,
                f"Cannot create lock directory {self.locks_dir}: {e}",
            ) from e

        # acquire/release가 서로 다른 스레드에서 실행됨
        lock = FileLock(
            self.locks_dir / f"{lock_name}.lock",
            timeout=self.LOCK_TIMEOUT,
            thread_local=False,
        )

        try:
            await asyncio.to_thread(lock.acquire)
        except Timeout:
            raise ArtifactError(
                ErrorCodes.IO_FAILURE,
                f"Failed to acquire lock for template '{lock_name}'",
                timeout=self.LOCK_TIMEOUT,
            ) from None
        except OSError as e:
            raise ArtifactError(
                ErrorCodes.IO_FAILURE,
                f"Cannot open lock for template '{lock_name}': {e}",
            ) from e

        try:
            yield
        finally:
            await asyncio.to_thread(lock.release)

    async def _save(self, run_log: SyncRunLog) -> None:
        if self.logs_dir is None:
            return
        try:
            await asyncio.to_thread(save_sync_run_log, run_log, self.logs_dir)
        except OSError as e:
            logger.warning(f"Failed to save sync run log {run_log.run_id}: {e}")
