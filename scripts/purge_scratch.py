#!/usr/bin/env python3
"""
purge_scratch.py - 남은 스크래치 작업공간 / staging 디렉토리 정리 스크립트

지연 삭제 예약은 프로세스 재시작을 넘어 유지되지 않으므로,
종료 시점에 남은 디렉토리를 이 스크립트로 회수함:
1. scratch_root 아래 sitekiln-scratch-* 디렉토리 (보관 시간 초과분)
2. sites_root/.staging/ 아래 중단된 사이트 생성 디렉토리 (보관 시간 초과분)

보관 시간(--max-age-minutes)은 스크래치 유예 시간(기본 120초)보다 길어야 함.

사용법:
    # 기본 실행 (dry-run)
    uv run python scripts/purge_scratch.py

    # 실제 삭제
    uv run python scripts/purge_scratch.py --execute

    # cron 예시 (매시 정각)
    0 * * * * cd /path/to/project && uv run python scripts/purge_scratch.py --execute >> /var/log/purge_scratch.log 2>&1
"""

import argparse
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

import yaml

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# src/domain/constants.py와 같은 값이어야 함
SCRATCH_DIR_PREFIX = "sitekiln-scratch-"
STAGING_DIR_NAME = ".staging"

# src/app/main.py ENV_OVERRIDES와 같은 이름
SITES_ROOT_ENV = "SITEKILN_SITES_ROOT"

DEFAULT_MAX_AGE_MINUTES = 30


@dataclass
class PurgeResult:
    """Purge 결과."""
    scanned_folders: int = 0
    purged_folders: int = 0
    purged_size_mb: float = 0.0
    errors: list[str] = field(default_factory=list)


def get_folder_size(folder: Path) -> int:
    """폴더 전체 크기 (bytes)."""
    total = 0
    for f in folder.rglob("*"):
        if f.is_file():
            try:
                total += f.stat().st_size
            except OSError:
                continue
    return total


def get_folder_mtime(folder: Path) -> datetime:
    """폴더 수정 시각 (폴더 자체 기준)."""
    return datetime.fromtimestamp(folder.stat().st_mtime)


def find_stale_folders(
    scratch_root: Path | None,
    sites_root: Path | None,
    cutoff: datetime,
) -> tuple[list[Path], int]:
    """
    정리 대상 폴더 찾기.

    Args:
        scratch_root: 스크래치 상위 디렉토리
        sites_root: 사이트 루트 (.staging 확인)
        cutoff: 이 시각 이전에 수정된 폴더만 대상

    Returns:
        (정리 대상 목록, 스캔한 폴더 수)
    """
    candidates: list[Path] = []

    if scratch_root is not None and scratch_root.is_dir():
        candidates.extend(
            p for p in scratch_root.iterdir()
            if p.is_dir() and p.name.startswith(SCRATCH_DIR_PREFIX)
        )
    elif scratch_root is not None:
        logger.warning(f"scratch 디렉터리 없음: {scratch_root}")

    if sites_root is not None:
        staging_root = sites_root / STAGING_DIR_NAME
        if staging_root.is_dir():
            candidates.extend(p for p in staging_root.iterdir() if p.is_dir())

    stale = [p for p in sorted(candidates) if get_folder_mtime(p) < cutoff]
    return stale, len(candidates)


def purge_folders(folders: list[Path], execute: bool) -> PurgeResult:
    """
    폴더 삭제.

    Args:
        folders: 삭제 대상
        execute: False면 dry-run (로그만)
    """
    result = PurgeResult(scanned_folders=len(folders))

    for folder in folders:
        folder_size = get_folder_size(folder)

        if not execute:
            logger.info(f"[DRY-RUN] 삭제 예정: {folder} ({folder_size / 1024:.1f} KB)")
            continue

        try:
            shutil.rmtree(folder)
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.error(f"삭제 실패 {folder}: {e}")
            result.errors.append(f"{folder}: {e}")
            continue

        logger.info(f"삭제됨: {folder} ({folder_size / 1024:.1f} KB)")
        result.purged_folders += 1
        result.purged_size_mb += folder_size / (1024 * 1024)

    return result


def resolve_path(value: str | None, base: Path) -> Path | None:
    """설정 경로 해석 (~ 확장, 상대 경로는 프로젝트 루트 기준)."""
    if not value:
        return None
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return path


def load_paths(config_path: Path, project_root: Path) -> tuple[Path | None, Path | None]:
    """
    default.yaml + 환경 변수에서 (scratch_root, sites_root) 로드.

    서버와 같은 규칙: SITEKILN_SITES_ROOT가 설정값보다 우선,
    상대 경로는 project_root 기준.
    """
    paths: dict = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        paths = config.get("paths") or {}

    sites_root = os.environ.get(SITES_ROOT_ENV) or paths.get("sites_root")
    return (
        resolve_path(paths.get("scratch_root"), project_root),
        resolve_path(sites_root, project_root),
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="스크래치 작업공간 / staging 디렉토리 정리 스크립트",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--execute",
        action="store_true",
        help="실제 삭제 실행 (기본: dry-run)",
    )
    parser.add_argument(
        "--max-age-minutes",
        type=int,
        default=DEFAULT_MAX_AGE_MINUTES,
        help=f"보관 시간 (분, 기본: {DEFAULT_MAX_AGE_MINUTES})",
    )
    parser.add_argument(
        "--scratch-root",
        type=str,
        help="스크래치 상위 디렉터리 (기본: 설정값 또는 시스템 임시 디렉터리)",
    )
    parser.add_argument(
        "--sites-root",
        type=str,
        help="사이트 루트 (기본: 설정값)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="default.yaml",
        help="설정 파일 경로 (기본: default.yaml)",
    )

    args = parser.parse_args(argv)

    # 경로 설정
    project_root = Path(__file__).parent.parent
    config_path = Path(args.config)
    if not config_path.is_absolute():
        config_path = project_root / config_path

    scratch_root, sites_root = load_paths(config_path, project_root)
    if args.scratch_root:
        scratch_root = Path(args.scratch_root)
    if args.sites_root:
        sites_root = Path(args.sites_root)
    if scratch_root is None:
        scratch_root = Path(tempfile.gettempdir())

    if args.max_age_minutes < 1:
        logger.error("--max-age-minutes는 1 이상이어야 함")
        return 1

    cutoff = datetime.now() - timedelta(minutes=args.max_age_minutes)
    logger.info(f"보관 시간: {args.max_age_minutes}분, scratch: {scratch_root}, sites: {sites_root}")

    if not args.execute:
        logger.info("=" * 50)
        logger.info("DRY-RUN 모드 (실제 삭제 없음)")
        logger.info("실제 실행: --execute 옵션 추가")
        logger.info("=" * 50)

    stale, scanned = find_stale_folders(scratch_root, sites_root, cutoff)
    result = purge_folders(stale, execute=args.execute)

    # 결과 출력
    logger.info("=" * 50)
    logger.info("Purge 결과:")
    logger.info(f"  스캔: {scanned} folders, 대상 {result.scanned_folders}")
    logger.info(f"  정리: {result.purged_folders} folders ({result.purged_size_mb:.2f} MB)")
    if result.errors:
        logger.warning(f"  에러: {len(result.errors)}개")
        for err in result.errors[:5]:  # 최대 5개만 출력
            logger.warning(f"    - {err}")

    return 0 if not result.errors else 1


if __name__ == "__main__":
    exit(main())
