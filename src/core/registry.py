"""
임시 아티팩트 레지스트리: token → 파일 경로 (TTL).

규칙:
- add: 새 토큰 발급, expiry = now + ttl. 항상 성공
- get: 단일 임계구역에서 확인. now < expiry 이면 경로 반환 (삭제하지 않음)
- 만료 항목은 읽힐 때 제거 (lazy eviction), 한 번 제거되면 되살아나지 않음
- 만료 전 조기 삭제/갱신 없음

상태: Active → Expired → Evicted (terminal)
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from src.core.ids import generate_token
from src.domain.constants import EPHEMERAL_TOKEN_TTL_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    path: Path
    expires_at: float


class EphemeralArtifactRegistry:
    """
    동시 접근 가능한 TTL 맵.

    이벤트 루프와 스레드 양쪽에서 호출되므로 threading.Lock 하나로
    맵 전체를 보호함 (임계구역에 I/O 없음).

    Usage:
        registry = EphemeralArtifactRegistry()
        token = registry.add(Path("/tmp/x.png"))
        registry.get(token)  # → Path("/tmp/x.png") (120초 동안)
    """

    def __init__(
        self,
        ttl_seconds: float = EPHEMERAL_TOKEN_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            ttl_seconds: 토큰 유효 시간 (초)
            clock: 단조 시계 (테스트에서 주입)
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def add(self, path: Path | str) -> str:
        """
        경로 등록 후 새 토큰 반환.

        Args:
            path: 토큰으로 내려줄 파일 경로

        Returns:
            token 문자열
        """
        entry_path = Path(path)
        with self._lock:
            token = generate_token()
            while token in self._entries:
                token = generate_token()
            self._entries[token] = _Entry(
                path=entry_path,
                expires_at=self._clock() + self.ttl_seconds,
            )
        return token

    def get(self, token: str) -> Path | None:
        """
        토큰으로 경로 조회.

        Args:
            token: add()가 반환한 토큰

        Returns:
            유효하면 경로, 없거나 만료면 None (만료 항목은 제거됨)
        """
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return None
            if self._clock() < entry.expires_at:
                return entry.path
            del self._entries[token]
            return None

    def sweep(self) -> int:
        """
        만료 항목 일괄 제거.

        add/get의 관찰 가능한 동작은 바뀌지 않음 (만료 토큰은 어차피 None).

        Returns:
            제거된 항목 수
        """
        with self._lock:
            now = self._clock()
            expired = [t for t, e in self._entries.items() if now >= e.expires_at]
            for token in expired:
                del self._entries[token]

        if expired:
            logger.debug(f"Swept {len(expired)} expired ephemeral tokens")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
