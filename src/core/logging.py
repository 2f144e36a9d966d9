"""
Sync run logging: 템플릿 동기화 tick 실행 로그

규칙:
- tick 1회 = SyncRunLog 1개 (run_id 새로 발급)
- 디렉토리 단위 실패: skipped에 code/message와 함께 기록
- 저장: logs_dir/sync_{run_id}.json (원자적 쓰기)
"""

import json
from pathlib import Path
from typing import Any

from src.core.atomic import atomic_write_json
from src.core.ids import generate_run_id
from src.domain.constants import SYNC_LOG_GLOB
from src.domain.schemas import SyncRunLog, SyncSkip, utc_now_iso

# =============================================================================
# Run Log Management
# =============================================================================


def create_sync_run_log(templates_root: Path) -> SyncRunLog:
    """
    새 SyncRunLog 생성.

    Args:
        templates_root: 스캔 대상 템플릿 루트

    Returns:
        초기화된 SyncRunLog
    """
    return SyncRunLog(
        run_id=generate_run_id(),
        templates_root=str(templates_root),
        started_at=utc_now_iso(),
    )


def record_skip(run_log: SyncRunLog, dir_path: Path, code: str, message: str) -> None:
    """
    제외된 디렉토리 기록.

    Args:
        run_log: SyncRunLog 인스턴스
        dir_path: 템플릿 디렉토리
        code: 에러 코드 (ErrorCodes 값)
        message: 에러 메시지
    """
    run_log.skipped.append(
        SyncSkip(dir_path=str(dir_path), code=code, message=message)
    )


def complete_sync_run_log(
    run_log: SyncRunLog,
    error_code: str | None = None,
    error_message: str | None = None,
) -> None:
    """
    SyncRunLog 완료 처리.

    result:
    - failed: tick 전체 실패 (error_code 지정)
    - partial: 일부 디렉토리 제외됨
    - success: 그 외

    Args:
        run_log: SyncRunLog 인스턴스
        error_code: tick 전체 실패 코드
        error_message: tick 전체 실패 메시지
    """
    run_log.finished_at = utc_now_iso()

    if error_code:
        run_log.result = "failed"
        run_log.error_code = error_code
        run_log.error_message = error_message
    elif run_log.skipped:
        run_log.result = "partial"
    else:
        run_log.result = "success"


def save_sync_run_log(run_log: SyncRunLog, logs_dir: Path) -> Path:
    """
    SyncRunLog를 파일로 저장.

    Args:
        run_log: SyncRunLog 인스턴스
        logs_dir: 로그 디렉터리 경로

    Returns:
        저장된 파일 경로
    """
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"sync_{run_log.run_id}.json"
    atomic_write_json(log_path, run_log.to_dict())
    return log_path


def load_sync_run_log(log_path: Path) -> dict[str, Any]:
    """SyncRunLog 파일 로드."""
    data: dict[str, Any] = json.loads(log_path.read_text(encoding="utf-8"))
    return data


def list_sync_run_logs(logs_dir: Path) -> list[Path]:
    """
    로그 디렉터리의 모든 sync 로그 파일 목록.

    Args:
        logs_dir: 로그 디렉터리 경로

    Returns:
        로그 파일 경로 목록 (최신순)
    """
    if not logs_dir.exists():
        return []

    logs = list(logs_dir.glob(SYNC_LOG_GLOB))
    logs.sort(key=lambda p: p.stat().st_mtime, reverse=True)
    return logs
