"""
레코드/실행 로그 파일 저장.

저장소 컬렉션(templates.json, sites.json)과 sync 로그가 공유함.
독자는 항상 이전 내용 전체 또는 새 내용 전체만 봄 (같은 디렉토리 temp → os.replace).
"""

import json
import logging
import os
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    """
    JSON 문서를 통째로 교체.

    temp 파일은 대상과 같은 디렉토리에 생성 (rename이 같은 파일시스템 안에서 일어나도록).
    실패 시 temp 파일을 지우고 예외를 그대로 전파, 기존 파일은 그대로 남음.

    Args:
        path: 대상 파일
        data: 직렬화할 dict

    Raises:
        OSError: 디렉토리 생성/쓰기/rename 실패
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")

    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_name, path)
    except BaseException:
        with suppress(FileNotFoundError):
            os.unlink(temp_name)
        raise

    _sync_parent(path.parent)


def _sync_parent(directory: Path) -> None:
    # rename 자체의 내구성; 지원하지 않는 플랫폼(Windows 등)은 건너뜀
    if not hasattr(os, "O_DIRECTORY"):
        return
    try:
        dir_fd = os.open(directory, os.O_RDONLY | os.O_DIRECTORY)
    except OSError as e:
        logger.debug(f"Cannot open {directory} for fsync: {e}")
        return
    try:
        os.fsync(dir_fd)
    except OSError as e:
        logger.debug(f"Directory fsync failed for {directory}: {e}")
    finally:
        os.close(dir_fd)
