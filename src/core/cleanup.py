"""
스크래치 작업공간 생성 + 지연 삭제 스케줄러.

규칙:
- 스크래치 디렉토리: 요청 1건 전용, 매번 새로 생성 (재사용 없음)
- schedule_delete: fire-and-forget, delay 후 재귀 삭제
- 이미 없는 디렉토리 = 성공
- 삭제 실패는 warning 로그만 (전파하지 않음)
- 취소/중복 제거/순서 보장 없음
"""

import asyncio
import logging
import shutil
import tempfile
from pathlib import Path

from src.domain.constants import SCRATCH_DIR_PREFIX

logger = logging.getLogger(__name__)


def create_scratch_dir(scratch_root: Path | None = None) -> Path:
    """
    새 스크래치 디렉토리 생성.

    Args:
        scratch_root: 상위 디렉토리 (None이면 시스템 임시 디렉토리)

    Returns:
        생성된 디렉토리 경로
    """
    if scratch_root is not None:
        scratch_root.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix=SCRATCH_DIR_PREFIX, dir=scratch_root))


def remove_tree(path: Path) -> bool:
    """
    디렉토리 재귀 삭제 (best-effort).

    Args:
        path: 삭제할 디렉토리

    Returns:
        True if 삭제됨 또는 이미 없음, False if 실패 (로그 남김)
    """
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning(f"Failed to remove directory {path}: {e}")
        return False
    return True


class DeferredCleanupScheduler:
    """
    지연 삭제 스케줄러.

    호출마다 독립된 asyncio task 하나. 실행 중인 task의 강한 참조만 보관
    (GC로 사라지지 않도록).

    Usage:
        cleanup = DeferredCleanupScheduler()
        cleanup.schedule_delete(scratch_dir, 120)
    """

    def __init__(self) -> None:
        self._tasks: dict[asyncio.Task[None], Path] = {}

    def schedule_delete(self, path: Path, delay: float) -> asyncio.Task[None]:
        """
        delay초 후 path 재귀 삭제 예약.

        실행 중인 이벤트 루프 안에서 호출해야 함.

        Args:
            path: 삭제할 디렉토리
            delay: 대기 시간 (초)

        Returns:
            예약된 task (테스트에서 await 가능)
        """
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._delete_later(Path(path), delay))
        self._tasks[task] = Path(path)
        task.add_done_callback(self._forget)
        return task

    async def _delete_later(self, path: Path, delay: float) -> None:
        await asyncio.sleep(delay)
        removed = await asyncio.to_thread(remove_tree, path)
        if removed:
            logger.debug(f"Removed scratch directory {path}")

    def _forget(self, task: asyncio.Task[None]) -> None:
        self._tasks.pop(task, None)

    @property
    def pending(self) -> int:
        """아직 실행되지 않은 삭제 예약 수."""
        return len(self._tasks)

    def abandon_pending(self) -> list[Path]:
        """
        프로세스 종료 시 남은 예약 정리.

        예약된 디렉토리는 삭제되지 않은 채 남음 (유예 시간 전 삭제 금지).
        남은 경로는 scripts/purge_scratch.py로 회수.

        Returns:
            삭제되지 않고 남은 경로 목록
        """
        abandoned = list(self._tasks.values())
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

        if abandoned:
            logger.warning(
                f"{len(abandoned)} scheduled scratch deletions abandoned at shutdown: "
                f"{', '.join(str(p) for p in abandoned)}"
            )
        return abandoned
