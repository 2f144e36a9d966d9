"""
ID 생성: record id, ephemeral token, run_id

규칙:
- record id: 한 번 발급되면 수정 금지 (사이트 디렉토리명으로 사용)
- token: 128-bit 난수, 추측 불가
- run_id: 동기화 tick마다 새로 발급
"""

import secrets
import uuid
from datetime import UTC, datetime

from src.domain.constants import RUN_ID_PREFIX

# 128 bits
TOKEN_BYTES = 16


def generate_record_id() -> str:
    """
    레코드(사이트/템플릿) ID 생성.

    고유성 보장: UUID v4
    포맷: 32자리 소문자 hex (파일명으로 안전)

    Returns:
        record id 문자열
    """
    return uuid.uuid4().hex


def generate_token() -> str:
    """
    임시 다운로드 토큰 생성.

    secrets 기반 128-bit 난수 → 32자리 hex.
    URL path에 그대로 사용 가능.

    Returns:
        token 문자열
    """
    return secrets.token_hex(TOKEN_BYTES)


def generate_run_id() -> str:
    """
    Run ID 생성.

    포맷: SYNC-{timestamp}-{uuid[:8]}

    Returns:
        run_id 문자열
    """
    now = datetime.now(UTC)
    timestamp = now.strftime("%Y%m%d%H%M%S")
    unique = uuid.uuid4().hex[:8]

    return f"{RUN_ID_PREFIX}{timestamp}-{unique}"


def is_valid_record_id(value: str) -> bool:
    """
    외부 입력 ID가 record id 형식인지 확인.

    경로 조합 전에 사용 (../ 등 방지).
    """
    if len(value) != 32:
        return False
    return all(c in "0123456789abcdef" for c in value)
