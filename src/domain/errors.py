"""
Error definitions for the artifact lifecycle core.

규칙:
- 조용한 실패 금지 → 코드가 있는 ArtifactError로 명시적 실패
- 예외: DeferredCleanupScheduler (best-effort, 로그만 남김)
- EphemeralArtifactRegistry는 실패하지 않음 (만료/부재 = None)
"""

from typing import Any


class ArtifactError(Exception):
    """
    코어 전반의 기본 에러.

    Usage:
        raise RenderError(ErrorCodes.PROCESS_FAILED, stderr_text, argv=argv)
    """

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class AssemblyError(ArtifactError):
    """HTML 조립(외부 빌드 프로세스) 실패."""


class RenderError(ArtifactError):
    """프리뷰 렌더(외부 스크린샷 프로세스) 실패."""


class MaterializeError(ArtifactError):
    """템플릿 → 사이트 디렉토리 생성 실패."""


class MetadataError(ArtifactError):
    """metadata.json 누락 필드/파싱 실패."""


class StoreError(ArtifactError):
    """레코드 저장소 접근 실패."""


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수. 경계(HTTP)에서 상태 코드로 매핑됨."""

    # === Not Found (→ 404) ===
    NOT_FOUND = "NOT_FOUND"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    SITE_NOT_FOUND = "SITE_NOT_FOUND"

    # === External Process (→ 500) ===
    PROCESS_FAILED = "PROCESS_FAILED"
    PROCESS_TIMEOUT = "PROCESS_TIMEOUT"
    ENCODING_FAILURE = "ENCODING_FAILURE"
    RENDER_OUTPUT_MISSING = "RENDER_OUTPUT_MISSING"

    # === Filesystem (→ 500) ===
    IO_FAILURE = "IO_FAILURE"

    # === Template Sync (사용자에게 노출되지 않음) ===
    MALFORMED_METADATA = "MALFORMED_METADATA"
    DUPLICATE_TEMPLATE_NAME = "DUPLICATE_TEMPLATE_NAME"

    # === Store ===
    STORE_LOCK_TIMEOUT = "STORE_LOCK_TIMEOUT"
    STORE_CORRUPT = "STORE_CORRUPT"
    DUPLICATE_RECORD = "DUPLICATE_RECORD"


NOT_FOUND_CODES = frozenset({
    ErrorCodes.NOT_FOUND,
    ErrorCodes.TEMPLATE_NOT_FOUND,
    ErrorCodes.SITE_NOT_FOUND,
})
