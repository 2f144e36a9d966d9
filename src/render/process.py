"""
외부 프로세스 실행기: 빌드/렌더 명령 공용 게이트.

규칙:
- 동시 실행 상한: asyncio.Semaphore (호스트 렌더 용량에 맞춰 설정)
- 호출마다 timeout, 초과 시 kill 후 PROCESS_TIMEOUT
- 실행 실패/비정상 종료 → PROCESS_FAILED (stderr를 메시지로)
- 재시도 없음 (호출자가 결정)
"""

import asyncio
import logging
from collections.abc import Sequence
from contextlib import suppress
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from src.domain.constants import PROCESS_MAX_CONCURRENCY, PROCESS_TIMEOUT_SECONDS
from src.domain.errors import ArtifactError, ErrorCodes

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """완료된 프로세스 결과."""
    argv: list[str]
    returncode: int
    stdout: bytes
    stderr: bytes


class ProcessRunner:
    """
    외부 명령 실행기.

    ContentAssembler와 PreviewRenderer가 하나의 인스턴스를 공유하여
    전체 서브프로세스 수를 max_concurrency로 제한함.

    Usage:
        runner = ProcessRunner(max_concurrency=4, timeout=60)
        result = await runner.run(["bun", "run", "scripts/builder.js", ...])
    """

    def __init__(
        self,
        max_concurrency: int = PROCESS_MAX_CONCURRENCY,
        timeout: float | None = PROCESS_TIMEOUT_SECONDS,
        cwd: Path | None = None,
    ):
        """
        Args:
            max_concurrency: 동시 실행 프로세스 상한
            timeout: 프로세스 1개 실행 한도 (초, None이면 무제한)
            cwd: 작업 디렉토리 (상대 스크립트 경로 기준)
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.max_concurrency = max_concurrency
        self.timeout = timeout
        self.cwd = cwd
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._active = 0

    @property
    def active(self) -> int:
        """현재 실행 중인 프로세스 수."""
        return self._active

    async def run(
        self,
        argv: Sequence[str | PathLike[str]],
        error_cls: type[ArtifactError] = ArtifactError,
    ) -> ProcessResult:
        """
        명령 실행 후 stdout/stderr 수집.

        Args:
            argv: 실행할 명령 + 인자
            error_cls: 실패 시 발생시킬 에러 타입

        Returns:
            ProcessResult (returncode == 0)

        Raises:
            error_cls: PROCESS_FAILED, PROCESS_TIMEOUT
        """
        args = [str(a) for a in argv]
        if not args:
            raise ValueError("argv must not be empty")

        async with self._semaphore:
            self._active += 1
            try:
                returncode, stdout, stderr = await self._execute(args, error_cls)
            finally:
                self._active -= 1

        if returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            logger.error(f"Command {args[0]} exited with {returncode}: {message}")
            raise error_cls(
                ErrorCodes.PROCESS_FAILED,
                message or f"{args[0]} exited with code {returncode}",
                argv=args,
                returncode=returncode,
            )

        return ProcessResult(argv=args, returncode=returncode, stdout=stdout, stderr=stderr)

    async def _execute(
        self,
        args: list[str],
        error_cls: type[ArtifactError],
    ) -> tuple[int, bytes, bytes]:
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.cwd,
            )
        except OSError as e:
            logger.error(f"Failed to start {args[0]}: {e}")
            raise error_cls(
                ErrorCodes.PROCESS_FAILED,
                f"Failed to start {args[0]}: {e}",
                argv=args,
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            await self._kill(proc)
            logger.error(f"Command {args[0]} timed out after {self.timeout}s")
            raise error_cls(
                ErrorCodes.PROCESS_TIMEOUT,
                f"{args[0]} did not finish within {self.timeout}s",
                argv=args,
                timeout=self.timeout,
            ) from None
        except BaseException:
            # 호출자 취소 (종료 중 tick 취소 등): 자식 프로세스도 함께 종료
            await asyncio.shield(self._kill(proc))
            logger.warning(f"Command {args[0]} cancelled; process killed")
            raise

        assert proc.returncode is not None
        return proc.returncode, stdout, stderr

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        """프로세스가 아직 실행 중이면 kill 후 종료 대기."""
        if proc.returncode is None:
            with suppress(ProcessLookupError):
                proc.kill()
        await proc.wait()
