"""
주기 실행 백그라운드 task.

규칙:
- start() 직후 1회 실행, 이후 interval마다 실행
- tick에서 발생한 예외는 로그만 남기고 루프 유지 (루프는 에러로 종료되지 않음)
- stop(): 정지 신호 → 진행 중 tick 완료 대기 → timeout 초과 시 취소
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_STOP_TIMEOUT_SECONDS = 30.0


class PeriodicTask:
    """
    정지 신호를 소유하는 주기 task.

    Usage:
        task = PeriodicTask("template-sync", 3600, synchronizer.sync_once)
        task.start()
        ...
        await task.stop()
    """

    def __init__(
        self,
        name: str,
        interval: float,
        func: Callable[[], Awaitable[Any]],
    ):
        """
        Args:
            name: 로그/task 이름
            interval: 실행 주기 (초)
            func: 매 tick 호출할 비동기 함수
        """
        self.name = name
        self.interval = interval
        self.func = func
        self.ticks = 0
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """
        루프 시작 (실행 중인 이벤트 루프 필요).

        Raises:
            RuntimeError: 이미 실행 중
        """
        if self.running:
            raise RuntimeError(f"Periodic task '{self.name}' is already running")

        self._stop_event = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._stop_event), name=self.name
        )
        logger.info(f"Periodic task '{self.name}' started (interval={self.interval}s)")

    async def _run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await self.func()
            except Exception:
                logger.exception(f"Periodic task '{self.name}' tick failed")
            self.ticks += 1

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

    async def stop(self, timeout: float | None = DEFAULT_STOP_TIMEOUT_SECONDS) -> None:
        """
        정지 신호 후 task 종료 대기.

        Args:
            timeout: 진행 중 tick 대기 한도 (초과 시 취소)
        """
        if self._task is None:
            return

        assert self._stop_event is not None
        self._stop_event.set()
        try:
            await asyncio.wait_for(self._task, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Periodic task '{self.name}' did not stop within {timeout}s; cancelled"
            )
        finally:
            self._task = None
            self._stop_event = None

        logger.info(f"Periodic task '{self.name}' stopped after {self.ticks} ticks")
