"""
Preview Routes: 임시 프리뷰 다운로드 + 라이브 프리뷰.

- GET /preview/<token> → 토큰이 가리키는 이미지 (만료/부재 시 404)
- POST /api/previews → 원본 소스로 렌더, 토큰 2개 반환
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import FileResponse

from src.app.components import Components
from src.domain.errors import ArtifactError, ErrorCodes
from src.domain.schemas import ContentBinding

logger = logging.getLogger(__name__)

# Routers
router = APIRouter()  # File downloads
api_router = APIRouter()  # API endpoints

EXPIRED_MESSAGE = "this preview url has likely expired. try generating a new one."


def get_components(request: Request) -> Components:
    """Request에서 컴포넌트 가져오기."""
    return request.app.state.components


def parse_bindings(data: str) -> list[ContentBinding]:
    """
    폼 필드 JSON → 바인딩 목록.

    Raises:
        HTTPException: 400 (JSON 배열이 아님)
    """
    try:
        raw = json.loads(data) if data else []
    except json.JSONDecodeError:
        raise HTTPException(
            status_code=400,
            detail={"code": "INVALID_DATA", "message": "data must be a JSON array"},
        ) from None

    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        raise HTTPException(
            status_code=400,
            detail={"code": "INVALID_DATA", "message": "data must be a JSON array of objects"},
        )
    return [ContentBinding.from_dict(item) for item in raw]


# =============================================================================
# File Routes
# =============================================================================

@router.get("/{token}")
async def get_preview(request: Request, token: str) -> FileResponse:
    """임시 토큰 → 프리뷰 이미지."""
    path = get_components(request).registry.get(token)
    if path is None or not path.is_file():
        raise HTTPException(
            status_code=404,
            detail={"code": ErrorCodes.NOT_FOUND, "message": EXPIRED_MESSAGE},
        )

    return FileResponse(path, media_type="image/png")


# =============================================================================
# API Routes
# =============================================================================

@api_router.post("")
async def create_live_preview(
    request: Request,
    html: str = Form(...),
    css: str = Form(""),
    js: str = Form(""),
    data: str = Form("[]"),
) -> dict[str, Any]:
    """
    라이브 프리뷰 생성.

    Returns:
        {"mobile": token, "desktop": token, "mobile_url": ..., "desktop_url": ...}
    """
    bindings = parse_bindings(data)
    service = get_components(request).live_preview

    try:
        tokens = await service.preview_source(html, css, js, bindings)
    except ArtifactError as e:
        logger.error(f"Live preview failed: {e}")
        raise HTTPException(
            status_code=500,
            detail={"code": e.code, "message": "Failed to render preview"},
        ) from e

    return {
        **tokens.to_dict(),
        "mobile_url": f"/preview/{tokens.mobile}",
        "desktop_url": f"/preview/{tokens.desktop}",
    }
