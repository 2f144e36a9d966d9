"""
Core layer: 공유 상태와 수명주기 관리.

이 모듈만 건드리면 운영사고 → 가장 보수적으로 관리

역할:
- 임시 토큰 레지스트리 (유일한 공유 가변 상태)
- 스크래치 작업공간 + 지연 삭제
- 주기 task, 원자적 쓰기, ID, 동기화 실행 로그
"""

from .atomic import atomic_write_json
from .cleanup import DeferredCleanupScheduler, create_scratch_dir, remove_tree
from .ids import generate_record_id, generate_run_id, generate_token
from .logging import complete_sync_run_log, create_sync_run_log, save_sync_run_log
from .registry import EphemeralArtifactRegistry
from .scheduler import PeriodicTask

__all__ = [
    # registry
    "EphemeralArtifactRegistry",
    # cleanup
    "DeferredCleanupScheduler",
    "create_scratch_dir",
    "remove_tree",
    # scheduler
    "PeriodicTask",
    # atomic
    "atomic_write_json",
    # ids
    "generate_record_id",
    "generate_run_id",
    "generate_token",
    # logging
    "create_sync_run_log",
    "complete_sync_run_log",
    "save_sync_run_log",
]
